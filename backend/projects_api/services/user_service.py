"""
Projects API — User and Role Services
=======================================

What:  CRUD for application users and user roles.
How:   Thin wrappers over sp_* procedures; only "get by id" inspects the
       result (an empty result set is a 404).
Who:   routes/users.py and routes/roles.py.
"""

import logging
import uuid
from typing import List
from uuid import UUID

from projects_api.schemas.common import parse_row, parse_rows
from projects_api.schemas.user import (
    Role,
    RoleCreated,
    RoleInsertRequest,
    RoleUpdateRequest,
    User,
    UserInsertRequest,
    UserUpdateRequest,
)
from projects_api.services.procedures import ProcedureClient
from projects_api.services.result_tree import assemble_one, result_set

logger = logging.getLogger(__name__)

INSERT_USER = "sp_InsertUser"
GET_USERS = "sp_GetUsers"
GET_USER_BY_ID = "sp_GetUserById"
UPDATE_USER = "sp_UpdateUser"
DELETE_USER = "sp_DeleteUser"

INSERT_ROLE = "sp_InsertUserRole"
GET_ROLES = "sp_GetAllUserRoles"
GET_ROLE_BY_ID = "sp_GetUserRoleById"
UPDATE_ROLE = "sp_UpdateUserRole"
DELETE_ROLE = "sp_DeleteUserRole"


def _user_params(model: UserInsertRequest) -> dict:
    return {
        "UserName": model.user_name,
        "EmailId": model.email_id,
        "RoleId": model.role_id,
        "UserCode": model.user_code,
        "EmployeeType": model.employee_type,
    }


class UserService:

    async def insert(self, procedures: ProcedureClient, model: UserInsertRequest) -> None:
        await procedures.execute(INSERT_USER, _user_params(model))
        logger.info("User %s inserted", model.email_id)

    async def get_all(self, procedures: ProcedureClient) -> List[User]:
        result_sets = await procedures.call(GET_USERS)
        return parse_rows(User, result_set(result_sets, 0, GET_USERS), GET_USERS)

    async def get_by_id(self, procedures: ProcedureClient, user_id: UUID) -> User:
        result_sets = await procedures.call(GET_USER_BY_ID, {"UserId": user_id})
        row = assemble_one(
            result_sets,
            resource="user",
            resource_id=str(user_id),
            message="User not found",
            procedure=GET_USER_BY_ID,
        )
        return parse_row(User, row, GET_USER_BY_ID)

    async def update(self, procedures: ProcedureClient, model: UserUpdateRequest) -> None:
        await procedures.execute(UPDATE_USER, {"UserId": model.user_id, **_user_params(model)})

    async def delete(self, procedures: ProcedureClient, user_id: UUID) -> None:
        await procedures.execute(DELETE_USER, {"UserId": user_id})


class RoleService:

    async def insert(self, procedures: ProcedureClient, model: RoleInsertRequest) -> RoleCreated:
        """The role id is generated here, not by the procedure."""
        role_id = uuid.uuid4()
        await procedures.execute(INSERT_ROLE, {"RoleId": role_id, "RoleName": model.role_name})
        logger.info("Role '%s' inserted as %s", model.role_name, role_id)
        return RoleCreated(role_id=role_id)

    async def get_all(self, procedures: ProcedureClient) -> List[Role]:
        result_sets = await procedures.call(GET_ROLES)
        return parse_rows(Role, result_set(result_sets, 0, GET_ROLES), GET_ROLES)

    async def get_by_id(self, procedures: ProcedureClient, role_id: UUID) -> Role:
        result_sets = await procedures.call(GET_ROLE_BY_ID, {"RoleId": role_id})
        row = assemble_one(
            result_sets,
            resource="role",
            resource_id=str(role_id),
            message="Role not found",
            procedure=GET_ROLE_BY_ID,
        )
        return parse_row(Role, row, GET_ROLE_BY_ID)

    async def update(self, procedures: ProcedureClient, model: RoleUpdateRequest) -> None:
        await procedures.execute(UPDATE_ROLE, {"RoleId": model.role_id, "RoleName": model.role_name})

    async def delete(self, procedures: ProcedureClient, role_id: UUID) -> None:
        await procedures.execute(DELETE_ROLE, {"RoleId": role_id})


# ── Singleton Instances ───────────────────────────────────────────────────
user_service = UserService()
role_service = RoleService()
