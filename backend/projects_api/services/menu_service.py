"""
Projects API — Menu Service
=============================

What:  Menu listing (as a two-level tree), lookup and maintenance.
How:   One stored procedure per operation; usp_GetAllMenus returns a flat,
       self-referencing list that build_menu_tree() nests by MainMenuId.
Who:   routes/menus.py.

Procedures:
    usp_GetAllMenus           → all menus (flat)
    usp_GetAllMenus_ByRoleId  → menus visible to a role (flat)
    usp_GetMenuById           → one menu
    usp_InsertMenu            → {StatusCode, Message}
    usp_UpdateMenu            → @OutputMessage
    usp_DeleteMenuById        → @OutputMessage
"""

import logging
from typing import List
from uuid import UUID

from projects_api.exceptions import BusinessRuleViolation, ConflictError, ProcedureContractViolation
from projects_api.schemas.common import parse_row, parse_rows
from projects_api.schemas.menu import Menu, MenuCreateResult, MenuNode, MenuRequest
from projects_api.services.procedures import ProcedureClient, require_success
from projects_api.services.result_tree import (
    EmptyPolicy,
    assemble_one,
    build_menu_tree,
    first_row,
    menu_roots,
    result_set,
)

logger = logging.getLogger(__name__)

GET_ALL_MENUS = "usp_GetAllMenus"
GET_MENUS_BY_ROLE = "usp_GetAllMenus_ByRoleId"
GET_MENU_BY_ID = "usp_GetMenuById"
INSERT_MENU = "usp_InsertMenu"
UPDATE_MENU = "usp_UpdateMenu"
DELETE_MENU = "usp_DeleteMenuById"


def _menu_params(model: MenuRequest) -> dict:
    return {
        "MenuName": model.menu_name,
        "MenuURL": model.menu_url,
        "MenuIcon": model.menu_icon,
        "Order": model.order,
        "MainMenuId": model.main_menu_id,
    }


class MenuService:
    """
    Business logic for menus.

    Empty submenus are omitted from the tree (EmptyPolicy.OMIT): a menu
    without children has no `submenu` key at all.
    """

    async def get_all(self, procedures: ProcedureClient) -> List[MenuNode]:
        """Every menu as a two-level tree, top-level menus ordered by Order."""
        result_sets = await procedures.call(GET_ALL_MENUS)
        tree = build_menu_tree(
            result_set(result_sets, 0, GET_ALL_MENUS),
            empty=EmptyPolicy.OMIT,
            procedure=GET_ALL_MENUS,
        )
        return parse_rows(MenuNode, tree, GET_ALL_MENUS)

    async def get_all_by_role(self, procedures: ProcedureClient, role_id: UUID) -> List[MenuNode]:
        """The menu tree restricted to what a role may see."""
        result_sets = await procedures.call(GET_MENUS_BY_ROLE, {"RoleId": role_id})
        tree = build_menu_tree(
            result_set(result_sets, 0, GET_MENUS_BY_ROLE),
            empty=EmptyPolicy.OMIT,
            procedure=GET_MENUS_BY_ROLE,
        )
        return parse_rows(MenuNode, tree, GET_MENUS_BY_ROLE)

    async def get_main_menus(self, procedures: ProcedureClient) -> List[Menu]:
        """Top-level menus only, ordered, without submenus."""
        result_sets = await procedures.call(GET_ALL_MENUS)
        roots = menu_roots(result_set(result_sets, 0, GET_ALL_MENUS), procedure=GET_ALL_MENUS)
        return parse_rows(Menu, roots, GET_ALL_MENUS)

    async def get_by_id(self, procedures: ProcedureClient, menu_id: UUID) -> Menu:
        """
        Raises:
            NotFoundError: no menu has this id (→ 404)
        """
        result_sets = await procedures.call(GET_MENU_BY_ID, {"MenuId": menu_id})
        row = assemble_one(
            result_sets,
            resource="menu",
            resource_id=str(menu_id),
            message="Menu not found",
            procedure=GET_MENU_BY_ID,
        )
        return parse_row(Menu, row, GET_MENU_BY_ID)

    async def create(self, procedures: ProcedureClient, model: MenuRequest) -> MenuCreateResult:
        """
        Insert a menu. The procedure reports duplicates through StatusCode.

        Raises:
            ConflictError: StatusCode 409 (→ 409)
            BusinessRuleViolation: any other StatusCode >= 400 (→ 422)
        """
        result_sets = await procedures.call(INSERT_MENU, _menu_params(model))
        row = first_row(result_sets, 0, INSERT_MENU)
        if row is None:
            raise ProcedureContractViolation(
                procedure=INSERT_MENU, detail="no status row returned"
            )
        result = parse_row(MenuCreateResult, row, INSERT_MENU)

        if result.status_code == 409:
            raise ConflictError(message=result.message or "Menu already exists")
        if result.status_code >= 400:
            raise BusinessRuleViolation(
                message=result.message or "Menu could not be created",
                context={"procedure": INSERT_MENU, "status_code": result.status_code},
            )
        logger.info("Menu '%s' created", model.menu_name)
        return result

    async def update(self, procedures: ProcedureClient, menu_id: UUID, model: MenuRequest) -> None:
        params = {"MenuId": menu_id, **_menu_params(model)}
        outputs = await procedures.call_outputs(UPDATE_MENU, params, ["OutputMessage"])
        require_success(outputs.get("output_message"), UPDATE_MENU)

    async def delete(self, procedures: ProcedureClient, menu_id: UUID) -> None:
        outputs = await procedures.call_outputs(DELETE_MENU, {"MenuId": menu_id}, ["OutputMessage"])
        require_success(outputs.get("output_message"), DELETE_MENU)


# ── Singleton Instance ────────────────────────────────────────────────────
menu_service = MenuService()
