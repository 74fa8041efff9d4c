"""
Projects API — User Route Handlers
====================================

What:  /api/user: insert, list, lookup, update, delete.

Note:
    Update and delete are POST routes; existing clients call them that way.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.schemas.user import User, UserInsertRequest, UserUpdateRequest
from projects_api.services.procedures import ProcedureClient, get_procedures
from projects_api.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["User"])

_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.post(
    "/insert",
    response_model=Envelope[None],
    status_code=status.HTTP_201_CREATED,
    responses={**_SERVER_ERROR, 422: {"description": "Rejected by the database", "model": ErrorResponse}},
    summary="Create a user",
)
async def insert_user(
    body: UserInsertRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await user_service.insert(procedures, body)
    return Envelope(message="User inserted successfully")


@router.get(
    "/getall",
    response_model=Envelope[List[User]],
    responses=_SERVER_ERROR,
    summary="List users",
)
async def get_all_users(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[User]]:
    return Envelope(data=await user_service.get_all(procedures))


@router.get(
    "/getbyid/{user_id}",
    response_model=Envelope[User],
    responses={**_SERVER_ERROR, 404: {"description": "User not found", "model": ErrorResponse}},
    summary="Get a user by id",
)
async def get_user_by_id(
    user_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[User]:
    return Envelope(data=await user_service.get_by_id(procedures, user_id))


@router.post(
    "/update",
    response_model=Envelope[None],
    responses={**_SERVER_ERROR, 422: {"description": "Rejected by the database", "model": ErrorResponse}},
    summary="Update a user",
)
async def update_user(
    body: UserUpdateRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await user_service.update(procedures, body)
    return Envelope(message="User updated successfully")


@router.post(
    "/delete/{user_id}",
    response_model=Envelope[None],
    responses=_SERVER_ERROR,
    summary="Delete a user",
)
async def delete_user(
    user_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await user_service.delete(procedures, user_id)
    return Envelope(message="User deleted successfully")
