"""Authentication and authorization for Camp Core.

This package provides:
- Schema validation for auth operations
- JWT token signing and verification (four token kinds)
- Password hashing and verification
- Request context resolution and the guard pipeline
- Account lifecycle operations (AccountService)

Endpoints:
- /auth/*         register, login, refresh, logout, passwords, profile
- /invitations/*  invite issue, bulk invite, validate, accept, pending, resend, revoke
- /members/*      role changes, deactivation, reactivation
"""

from . import schemas, token

__all__ = ["schemas", "token"]
