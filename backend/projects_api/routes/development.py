"""
Projects API — Development Tracking Route Handlers
====================================================

What:  /api/development: confirmed projects, serial numbers, work status
       updates and the status master list.
Who:   Called by the development tracker screens.

Every route taking a project number answers 400 for numbers <= 0 without
touching the database.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.schemas.development import (
    ConfirmedProject,
    SerialNumber,
    StatusMaster,
    WorkStatus,
    WorkStatusNode,
    WorkStatusRequest,
)
from projects_api.services.development_service import development_service
from projects_api.services.procedures import ProcedureClient, get_procedures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/development", tags=["Development"])

_SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}
_BAD_PROJECT = {400: {"description": "Invalid project number", "model": ErrorResponse}}


@router.get(
    "/getall-confirmed",
    response_model=Envelope[List[ConfirmedProject]],
    responses=_SERVER_ERROR,
    summary="Confirmed projects with their serial numbers",
)
async def get_confirmed_projects(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[ConfirmedProject]]:
    return Envelope(data=await development_service.get_confirmed_projects(procedures))


@router.get(
    "/status-master",
    response_model=Envelope[List[StatusMaster]],
    responses=_SERVER_ERROR,
    summary="Available work statuses",
)
async def get_status_master(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[StatusMaster]]:
    return Envelope(data=await development_service.get_status_master(procedures))


@router.get(
    "/work-status/{project_no}",
    response_model=Envelope[List[WorkStatusNode]],
    responses={**_SERVER_ERROR, **_BAD_PROJECT},
    summary="Status history of a project, each entry with its attachments",
)
async def get_work_status(
    project_no: int,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[WorkStatusNode]]:
    return Envelope(data=await development_service.get_work_status(procedures, project_no))


@router.get(
    "/{project_no}/serial-numbers",
    response_model=Envelope[List[SerialNumber]],
    responses={**_SERVER_ERROR, **_BAD_PROJECT},
    summary="Serial numbers of a project",
)
async def get_serial_numbers(
    project_no: int,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[SerialNumber]]:
    return Envelope(data=await development_service.get_serial_numbers(procedures, project_no))


@router.post(
    "/{project_no}/status",
    response_model=Envelope[WorkStatus],
    status_code=status.HTTP_201_CREATED,
    responses={
        **_SERVER_ERROR,
        **_BAD_PROJECT,
        422: {"description": "Rejected by the database", "model": ErrorResponse},
    },
    summary="Record a work status change",
)
async def add_status_update(
    project_no: int,
    body: WorkStatusRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[WorkStatus]:
    inserted = await development_service.add_status_update(procedures, project_no, body)
    return Envelope(message="Status updated successfully", data=inserted)
