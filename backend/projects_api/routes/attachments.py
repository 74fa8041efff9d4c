"""
Projects API — Attachment Route Handlers
==========================================

What:  /api/attachment: the attachment screen's view of serial numbers and
       confirmed projects. Same operations as /api/development.
"""

from typing import List

from fastapi import APIRouter, Depends

from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.schemas.development import ConfirmedProject, SerialNumber
from projects_api.services.development_service import development_service
from projects_api.services.procedures import ProcedureClient, get_procedures

router = APIRouter(prefix="/api/attachment", tags=["Attachment"])


@router.get(
    "/getall-confirmed",
    response_model=Envelope[List[ConfirmedProject]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Confirmed projects with their serial numbers",
)
async def get_confirmed_projects(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[ConfirmedProject]]:
    return Envelope(data=await development_service.get_confirmed_projects(procedures))


@router.get(
    "/{project_no}/serial-numbers",
    response_model=Envelope[List[SerialNumber]],
    responses={
        400: {"description": "Invalid project number", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Serial numbers of a project",
)
async def get_serial_numbers(
    project_no: int,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[SerialNumber]]:
    return Envelope(data=await development_service.get_serial_numbers(procedures, project_no))
