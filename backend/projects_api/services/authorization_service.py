"""
Projects API — Authorization Service
======================================

What:  Role/menu permission records (can view / create / edit / delete).
Who:   routes/authorizations.py.
"""

import logging
from typing import List
from uuid import UUID

from projects_api.exceptions import ConflictError, NotFoundError, ProcedureContractViolation
from projects_api.schemas.authorization import (
    Authorization,
    AuthorizationInsertResult,
    AuthorizationRequest,
)
from projects_api.schemas.common import parse_row, parse_rows
from projects_api.services.procedures import ProcedureClient, require_success
from projects_api.services.result_tree import assemble_one, first_row, result_set, scalar

logger = logging.getLogger(__name__)

INSERT_AUTHORIZATION = "usp_Authorization_Insert"
GET_AUTHORIZATION_BY_ID = "usp_Authorization_GetById"
# Deployed procedure name (double "d")
GET_AUTHORIZATIONS_BY_ROLE = "usp_Authorization_GetByRoleIdd"
GET_ALL_AUTHORIZATIONS = "usp_Authorization_GetAll"
UPDATE_AUTHORIZATION = "usp_Authorization_Update"
DELETE_AUTHORIZATION = "usp_Authorization_Delete"


def _permission_params(model: AuthorizationRequest) -> dict:
    return {
        "RoleId": model.role_id,
        "MenuId": model.menu_id,
        "CanView": model.can_view,
        "CanCreate": model.can_create,
        "CanEdit": model.can_edit,
        "CanDelete": model.can_delete,
    }


class AuthorizationService:

    async def create(
        self, procedures: ProcedureClient, model: AuthorizationRequest
    ) -> AuthorizationInsertResult:
        """
        Raises:
            ConflictError: the role already has a record for this menu (→ 409)
        """
        result_sets = await procedures.call(INSERT_AUTHORIZATION, _permission_params(model))
        row = first_row(result_sets, 0, INSERT_AUTHORIZATION)
        if row is None:
            raise ProcedureContractViolation(
                procedure=INSERT_AUTHORIZATION, detail="no status row returned"
            )
        result = parse_row(AuthorizationInsertResult, row, INSERT_AUTHORIZATION)
        if result.status == 0:
            raise ConflictError(message=result.message or "Authorization already exists")
        return result

    async def get_by_id(self, procedures: ProcedureClient, authorization_id: UUID) -> Authorization:
        result_sets = await procedures.call(
            GET_AUTHORIZATION_BY_ID, {"AuthorizationId": authorization_id}
        )
        row = assemble_one(
            result_sets,
            resource="authorization",
            resource_id=str(authorization_id),
            message="Authorization not found",
            procedure=GET_AUTHORIZATION_BY_ID,
        )
        return parse_row(Authorization, row, GET_AUTHORIZATION_BY_ID)

    async def get_by_role(self, procedures: ProcedureClient, role_id: UUID) -> List[Authorization]:
        """
        Raises:
            NotFoundError: the role has no authorization records (→ 404)
        """
        result_sets = await procedures.call(GET_AUTHORIZATIONS_BY_ROLE, {"RoleId": role_id})
        rows = result_set(result_sets, 0, GET_AUTHORIZATIONS_BY_ROLE)
        if not rows:
            raise NotFoundError(
                resource="authorization",
                message="No authorizations found for the given RoleId",
                context={"role_id": str(role_id)},
            )
        return parse_rows(Authorization, rows, GET_AUTHORIZATIONS_BY_ROLE)

    async def get_all(self, procedures: ProcedureClient) -> List[Authorization]:
        result_sets = await procedures.call(GET_ALL_AUTHORIZATIONS)
        return parse_rows(
            Authorization, result_set(result_sets, 0, GET_ALL_AUTHORIZATIONS), GET_ALL_AUTHORIZATIONS
        )

    async def update(self, procedures: ProcedureClient, model: AuthorizationRequest) -> None:
        """
        The procedure returns the number of rows it changed.

        Raises:
            NotFoundError: zero rows changed (→ 404)
        """
        result_sets = await procedures.call(UPDATE_AUTHORIZATION, _permission_params(model))
        changed = scalar(result_sets, 0, UPDATE_AUTHORIZATION)
        if not changed:
            raise NotFoundError(resource="authorization", message="Authorization not found")

    async def delete(self, procedures: ProcedureClient, authorization_id: UUID) -> None:
        outputs = await procedures.call_outputs(
            DELETE_AUTHORIZATION, {"AuthorizationId": authorization_id}, ["OutputMessage"]
        )
        require_success(outputs.get("output_message"), DELETE_AUTHORIZATION)


# ── Singleton Instance ────────────────────────────────────────────────────
authorization_service = AuthorizationService()
