"""
Projects API — Pre-Sales Route Handlers
=========================================

What:  /api/presales: leads, their full history, advance payments.
How:   Thin handlers over presales_service; every response uses the envelope.

Route order:
    /getall is declared before /{project_no}.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.schemas.presales import (
    AdvancePaymentRequest,
    PreSalesDetail,
    PreSalesRequest,
    Project,
    ProjectCreated,
)
from projects_api.services.presales_service import presales_service
from projects_api.services.procedures import ProcedureClient, get_procedures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/presales", tags=["PreSales"])

_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}
_REJECTED = {422: {"description": "Rejected by the database", "model": ErrorResponse}}


@router.get(
    "/getall",
    response_model=Envelope[List[Project]],
    responses=_SERVER_ERROR,
    summary="List pre-sales projects",
)
async def get_all_presales(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[Project]]:
    return Envelope(data=await presales_service.get_all(procedures))


@router.post(
    "/create",
    response_model=Envelope[ProjectCreated],
    status_code=status.HTTP_201_CREATED,
    responses={**_SERVER_ERROR, **_REJECTED},
    summary="Create a pre-sales project",
)
async def create_presales(
    body: PreSalesRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[ProjectCreated]:
    created = await presales_service.create(procedures, body)
    return Envelope(message="Pre-sales project created successfully", data=created)


@router.put(
    "/update/{project_no}",
    response_model=Envelope[None],
    responses={**_SERVER_ERROR, **_REJECTED},
    summary="Update a pre-sales project",
)
async def update_presales(
    project_no: int,
    body: PreSalesRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await presales_service.update(procedures, project_no, body)
    return Envelope(message="Pre-sales project updated successfully")


@router.post(
    "/{project_no}/advance-payment",
    response_model=Envelope[None],
    status_code=status.HTTP_201_CREATED,
    responses={**_SERVER_ERROR, **_REJECTED},
    summary="Record an advance payment",
)
async def add_advance_payment(
    project_no: int,
    body: AdvancePaymentRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await presales_service.add_advance_payment(procedures, project_no, body)
    return Envelope(message="Advance payment added successfully")


@router.delete(
    "/delete/{project_no}",
    response_model=Envelope[None],
    responses={**_SERVER_ERROR, **_REJECTED},
    summary="Delete a pre-sales project",
)
async def delete_presales(
    project_no: int,
    user_id: UUID = Query(alias="userId", description="User performing the delete"),
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await presales_service.delete(procedures, project_no, user_id)
    return Envelope(message="Pre-sales project deleted successfully")


@router.get(
    "/{project_no}",
    response_model=Envelope[PreSalesDetail],
    responses={
        **_SERVER_ERROR,
        404: {"description": "Project not found", "model": ErrorResponse},
    },
    summary="Project with its full history",
    description=(
        "Returns the project plus scopeHistory, stageHistory, attachmentHistory, "
        "advancePayments and attachmentUrls. Collections are empty lists when "
        "there is nothing to show."
    ),
)
async def get_presales(
    project_no: int,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[PreSalesDetail]:
    return Envelope(data=await presales_service.get_detail(procedures, project_no))
