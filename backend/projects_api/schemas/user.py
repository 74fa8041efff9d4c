"""
Projects API — User and Role Schemas
======================================

What:  Shapes for /api/user and /api/userrole.
"""

from typing import Optional, Union
from uuid import UUID

from pydantic import Field

from projects_api.schemas.common import CamelModel


# ══════════════════════════════════════════════════════════════════════════
# Users
# ══════════════════════════════════════════════════════════════════════════


class UserInsertRequest(CamelModel):
    user_name: Optional[str] = Field(default=None, description="Full name")
    email_id: Optional[str] = Field(default=None, description="Login email address")
    role_id: Optional[UUID] = None
    user_code: Optional[UUID] = None
    employee_type: Optional[str] = None


class UserUpdateRequest(UserInsertRequest):
    user_id: UUID = Field(description="User to update")


class User(CamelModel):
    user_id: UUID
    user_name: Optional[str] = None
    email_id: Optional[str] = None
    role_id: Optional[UUID] = None
    user_code: Optional[UUID] = None
    employee_type: Optional[str] = None
    role_name: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Roles
# ══════════════════════════════════════════════════════════════════════════


class RoleInsertRequest(CamelModel):
    role_name: Optional[str] = Field(default=None, description="Display name of the role")


class RoleUpdateRequest(RoleInsertRequest):
    role_id: UUID = Field(description="Role to update")


class Role(CamelModel):
    role_id: UUID
    role_name: Optional[str] = None
    # bit column on some deployments, 'Y'/'N' text on others
    is_active: Optional[Union[bool, str]] = None


class RoleCreated(CamelModel):
    role_id: UUID = Field(description="Identifier generated for the new role")
