"""Database schema for Camp Core.

schema.sql is the source of truth for the member data model.
"""
