"""
Admin User Management Module

This module manages the admin accounts that operate the bus ticketing backend.
It includes:

- Paginated listing of admin accounts (newest first)
- Account creation with bcrypt password hashing
- Partial updates with e-mail uniqueness checks
- Account deletion (an admin cannot remove their own account)

Key Components:
- admin_service.py: AdminManagementService with the account operations
- router.py: FastAPI endpoints mounted under /users
- schemas.py: Pydantic request models for account data
"""

from .router import router
from .admin_service import AdminManagementService
from .schemas import AdminUserCreate, AdminUserUpdate

__all__ = [
    "router",
    "AdminManagementService",
    "AdminUserCreate",
    "AdminUserUpdate"
]
