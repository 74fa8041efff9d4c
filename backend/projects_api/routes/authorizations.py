"""
Projects API — Authorization Route Handlers
=============================================

What:  /api/authorization: role/menu permission records.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from projects_api.schemas.authorization import (
    Authorization,
    AuthorizationInsertResult,
    AuthorizationRequest,
)
from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.services.authorization_service import authorization_service
from projects_api.services.procedures import ProcedureClient, get_procedures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/authorization", tags=["Authorization"])


@router.post(
    "/create",
    response_model=Envelope[AuthorizationInsertResult],
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Validation failed", "model": ErrorResponse},
        409: {"description": "Role already has a record for this menu", "model": ErrorResponse},
        500: {"description": "Insert failed", "model": ErrorResponse},
    },
    summary="Grant a role permissions on a menu",
)
async def create_authorization(
    body: AuthorizationRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[AuthorizationInsertResult]:
    result = await authorization_service.create(procedures, body)
    return Envelope(message=result.message, data=result)


@router.get(
    "/all",
    response_model=Envelope[List[Authorization]],
    responses={500: {"description": "Fetch failed", "model": ErrorResponse}},
    summary="List all authorization records",
)
async def get_all_authorizations(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[Authorization]]:
    return Envelope(data=await authorization_service.get_all(procedures))


@router.get(
    "/role/{role_id}",
    response_model=Envelope[List[Authorization]],
    responses={
        404: {"description": "No authorizations for this role", "model": ErrorResponse},
        500: {"description": "Fetch failed", "model": ErrorResponse},
    },
    summary="Authorization records of one role",
)
async def get_authorizations_by_role(
    role_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[Authorization]]:
    return Envelope(data=await authorization_service.get_by_role(procedures, role_id))


@router.put(
    "/update",
    response_model=Envelope[None],
    responses={
        404: {"description": "No record for this role and menu", "model": ErrorResponse},
        500: {"description": "Update failed", "model": ErrorResponse},
    },
    summary="Change a role's permissions on a menu",
)
async def update_authorization(
    body: AuthorizationRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await authorization_service.update(procedures, body)
    return Envelope(message="Authorization updated")


@router.delete(
    "/delete/{authorization_id}",
    response_model=Envelope[None],
    responses={
        422: {"description": "Procedure did not report SUCCESS", "model": ErrorResponse},
        500: {"description": "Delete failed", "model": ErrorResponse},
    },
    summary="Delete an authorization record",
)
async def delete_authorization(
    authorization_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await authorization_service.delete(procedures, authorization_id)
    return Envelope(message="Authorization deleted successfully")


@router.get(
    "/{authorization_id}",
    response_model=Envelope[Authorization],
    responses={
        404: {"description": "Authorization not found", "model": ErrorResponse},
        500: {"description": "Fetch failed", "model": ErrorResponse},
    },
    summary="Get an authorization record by id",
)
async def get_authorization_by_id(
    authorization_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[Authorization]:
    return Envelope(data=await authorization_service.get_by_id(procedures, authorization_id))
