"""Camp Core: membership authentication and role-based authorization."""

__version__ = "0.1.0"
