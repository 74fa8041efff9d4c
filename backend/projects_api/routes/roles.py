"""
Projects API — User Role Route Handlers
=========================================

What:  /api/userrole: insert (id generated server-side), list, lookup,
       update, delete.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.schemas.user import Role, RoleCreated, RoleInsertRequest, RoleUpdateRequest
from projects_api.services.procedures import ProcedureClient, get_procedures
from projects_api.services.user_service import role_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/userrole", tags=["UserRole"])

_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "/insert",
    response_model=Envelope[RoleCreated],
    status_code=status.HTTP_201_CREATED,
    responses=_SERVER_ERROR,
    summary="Create a role",
)
async def insert_role(
    body: RoleInsertRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[RoleCreated]:
    created = await role_service.insert(procedures, body)
    return Envelope(message="Role inserted successfully", data=created)


@router.get(
    "/getall",
    response_model=Envelope[List[Role]],
    responses=_SERVER_ERROR,
    summary="List roles",
)
async def get_all_roles(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[Role]]:
    return Envelope(data=await role_service.get_all(procedures))


@router.get(
    "/getbyid/{role_id}",
    response_model=Envelope[Role],
    responses={**_SERVER_ERROR, 404: {"description": "Role not found", "model": ErrorResponse}},
    summary="Get a role by id",
)
async def get_role_by_id(
    role_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[Role]:
    return Envelope(data=await role_service.get_by_id(procedures, role_id))


@router.post(
    "/update",
    response_model=Envelope[None],
    responses=_SERVER_ERROR,
    summary="Rename a role",
)
async def update_role(
    body: RoleUpdateRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await role_service.update(procedures, body)
    return Envelope(message="Role updated successfully")


@router.post(
    "/delete/{role_id}",
    response_model=Envelope[None],
    responses=_SERVER_ERROR,
    summary="Delete a role",
)
async def delete_role(
    role_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await role_service.delete(procedures, role_id)
    return Envelope(message="Role deleted successfully")
