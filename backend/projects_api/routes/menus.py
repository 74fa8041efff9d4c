"""
Projects API — Menu Route Handlers
====================================

What:  /api/menu: menu tree, top-level menus, lookup, create, update, delete.
Who:   Called by the frontend navigation and the menu admin screen.

Route order:
    Fixed paths (/all, /only-main-menu) are declared before /{id} so they
    are never captured as an id.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from projects_api.schemas.common import Envelope, ErrorResponse
from projects_api.schemas.menu import Menu, MenuCreateResult, MenuNode, MenuRequest
from projects_api.services.menu_service import menu_service
from projects_api.services.procedures import ProcedureClient, get_procedures

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/menu", tags=["Menu"])


@router.get(
    "/all",
    response_model=Envelope[List[MenuNode]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="All menus as a tree",
    description=(
        "Top-level menus ordered by `order`, each with its `submenu` list (also ordered). "
        "Menus without children carry no `submenu` key."
    ),
)
async def get_all_menus(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[MenuNode]]:
    return Envelope(data=await menu_service.get_all(procedures))


@router.get(
    "/all-by-role/{role_id}",
    response_model=Envelope[List[MenuNode]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Menu tree visible to a role",
)
async def get_all_menus_by_role(
    role_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[MenuNode]]:
    return Envelope(data=await menu_service.get_all_by_role(procedures, role_id))


@router.get(
    "/only-main-menu",
    response_model=Envelope[List[Menu]],
    responses={500: {"description": "Server error", "model": ErrorResponse}},
    summary="Top-level menus only",
)
async def get_main_menus(
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[List[Menu]]:
    return Envelope(data=await menu_service.get_main_menus(procedures))


@router.post(
    "/create",
    response_model=Envelope[MenuCreateResult],
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"description": "Menu already exists", "model": ErrorResponse},
        422: {"description": "Rejected by the database", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Create a menu",
)
async def create_menu(
    body: MenuRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[MenuCreateResult]:
    result = await menu_service.create(procedures, body)
    return Envelope(message=result.message or "Menu created successfully", data=result)


@router.put(
    "/update/{menu_id}",
    response_model=Envelope[None],
    responses={
        422: {"description": "Procedure did not report SUCCESS", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Update a menu",
)
async def update_menu(
    menu_id: UUID,
    body: MenuRequest,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await menu_service.update(procedures, menu_id, body)
    return Envelope(message="Menu updated successfully")


@router.delete(
    "/delete/{menu_id}",
    response_model=Envelope[None],
    responses={
        422: {"description": "Procedure did not report SUCCESS", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Delete a menu",
)
async def delete_menu(
    menu_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[None]:
    await menu_service.delete(procedures, menu_id)
    return Envelope(message="Menu deleted successfully")


@router.get(
    "/{menu_id}",
    response_model=Envelope[Menu],
    responses={
        404: {"description": "Menu not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Get a menu by id",
)
async def get_menu_by_id(
    menu_id: UUID,
    procedures: ProcedureClient = Depends(get_procedures),
) -> Envelope[Menu]:
    return Envelope(data=await menu_service.get_by_id(procedures, menu_id))
