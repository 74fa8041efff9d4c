"""
Projects API — Menu Schemas
=============================

What:  Request and row shapes for /api/menu.
Who:   menu_service builds MenuNode trees from usp_GetAllMenus rows.

Naming:
    The database column is MenuURL. It is exposed as `menuUrl`; requests may
    also send `menuURL`.
"""

from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, Field, model_serializer

from projects_api.schemas.common import CamelModel


class MenuRequest(CamelModel):
    """Body of POST /api/menu/create and PUT /api/menu/update/{id}."""

    menu_name: Optional[str] = Field(default=None, description="Display name")
    menu_url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("menuUrl", "menuURL", "menu_url"),
        description="Client route the menu entry opens",
    )
    menu_icon: Optional[str] = Field(default=None, description="Icon identifier")
    order: int = Field(default=0, description="Position among its siblings")
    main_menu_id: Optional[UUID] = Field(
        default=None, description="Parent menu; null for a top-level menu"
    )


class Menu(CamelModel):
    """One menu row as stored."""

    menu_id: UUID
    menu_name: Optional[str] = None
    menu_url: Optional[str] = None
    menu_icon: Optional[str] = None
    order: int = 0
    main_menu_id: Optional[UUID] = None


class MenuNode(Menu):
    """
    A top-level menu with its submenus.

    `submenu` is left out of the JSON entirely when the menu has none.
    """

    submenu: Optional[List[Menu]] = None

    @model_serializer(mode="wrap")
    def _omit_missing_submenu(self, handler):
        body = handler(self)
        if self.submenu is None:
            body.pop("submenu", None)
        return body


class MenuCreateResult(CamelModel):
    """Row returned by usp_InsertMenu."""

    status_code: int
    message: Optional[str] = None
