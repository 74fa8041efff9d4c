"""
Projects API — Authorization Schemas
======================================

What:  Role-to-menu permission rows and requests for /api/authorization.
"""

from typing import Optional
from uuid import UUID

from pydantic import Field

from projects_api.schemas.common import CamelModel, Record


class AuthorizationRequest(CamelModel):
    """Body of POST /create and PUT /update. The (role, menu) pair identifies the row."""

    role_id: UUID = Field(description="Role the permission applies to")
    menu_id: UUID = Field(description="Menu the permission applies to")
    can_view: bool = False
    can_create: bool = False
    can_edit: bool = False
    can_delete: bool = False


class Authorization(Record):
    """
    A permission row. The columns the permission is written with are
    required; any further columns the procedure returns are passed through.
    """

    role_id: UUID
    menu_id: UUID
    can_view: bool
    can_create: bool
    can_edit: bool
    can_delete: bool


class AuthorizationInsertResult(CamelModel):
    """Row returned by usp_Authorization_Insert. Status 0 means the pair already exists."""

    status: int
    message: Optional[str] = None
