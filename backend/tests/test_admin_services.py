"""
Projects API — Authorization, User and Role Service Unit Tests
================================================================
"""

import uuid

import pytest

from projects_api.exceptions import BusinessRuleViolation, ConflictError, NotFoundError
from projects_api.schemas.authorization import AuthorizationRequest
from projects_api.schemas.user import RoleInsertRequest, UserInsertRequest
from projects_api.services.authorization_service import (
    GET_AUTHORIZATIONS_BY_ROLE,
    authorization_service,
)
from projects_api.services.user_service import INSERT_ROLE, INSERT_USER, role_service, user_service


def permission(**overrides):
    body = {"roleId": str(uuid.uuid4()), "menuId": str(uuid.uuid4()), "canView": True}
    body.update(overrides)
    return AuthorizationRequest.model_validate(body)


class TestAuthorizationService:

    @pytest.mark.asyncio
    async def test_create(self, procedures):
        procedures.call.return_value = [[{"status": 1, "message": "Authorization created"}]]

        result = await authorization_service.create(procedures, permission())

        assert result.message == "Authorization created"

    @pytest.mark.asyncio
    async def test_create_duplicate_is_conflict(self, procedures):
        procedures.call.return_value = [[{"status": 0, "message": "Already exists for this role"}]]

        with pytest.raises(ConflictError) as exc_info:
            await authorization_service.create(procedures, permission())
        assert exc_info.value.message == "Already exists for this role"

    @pytest.mark.asyncio
    async def test_by_role_uses_deployed_procedure_name(self, procedures):
        role_id = uuid.uuid4()
        procedures.call.return_value = [[{
            "role_id": role_id, "menu_id": uuid.uuid4(),
            "can_view": True, "can_create": False, "can_edit": False, "can_delete": False,
        }]]

        rows = await authorization_service.get_by_role(procedures, role_id)

        assert GET_AUTHORIZATIONS_BY_ROLE == "usp_Authorization_GetByRoleIdd"
        procedures.call.assert_awaited_once_with(GET_AUTHORIZATIONS_BY_ROLE, {"RoleId": role_id})
        assert rows[0].can_view is True

    @pytest.mark.asyncio
    async def test_by_role_empty_is_not_found(self, procedures):
        procedures.call.return_value = [[]]

        with pytest.raises(NotFoundError) as exc_info:
            await authorization_service.get_by_role(procedures, uuid.uuid4())
        assert exc_info.value.message == "No authorizations found for the given RoleId"

    @pytest.mark.asyncio
    async def test_update_without_changed_rows_is_not_found(self, procedures):
        procedures.call.return_value = [[{"": 0}]]

        with pytest.raises(NotFoundError):
            await authorization_service.update(procedures, permission())

    @pytest.mark.asyncio
    async def test_update(self, procedures):
        procedures.call.return_value = [[{"": 1}]]
        await authorization_service.update(procedures, permission(canEdit=True))

        _, params = procedures.call.call_args.args
        assert params["CanEdit"] is True

    @pytest.mark.asyncio
    async def test_delete_reports_procedure_message(self, procedures):
        procedures.call_outputs.return_value = {"output_message": "Authorization not found"}

        with pytest.raises(BusinessRuleViolation) as exc_info:
            await authorization_service.delete(procedures, uuid.uuid4())
        assert exc_info.value.message == "Authorization not found"


class TestUserAndRoleServices:

    @pytest.mark.asyncio
    async def test_insert_user(self, procedures):
        role_id = uuid.uuid4()
        body = UserInsertRequest(user_name="Asha", email_id="asha@zicorp.test", role_id=role_id)

        await user_service.insert(procedures, body)

        name, params = procedures.execute.call_args.args
        assert name == INSERT_USER
        assert params["EmailId"] == "asha@zicorp.test"
        assert params["RoleId"] == role_id

    @pytest.mark.asyncio
    async def test_user_not_found(self, procedures):
        procedures.call.return_value = [[]]

        with pytest.raises(NotFoundError):
            await user_service.get_by_id(procedures, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_role_id_generated_on_insert(self, procedures):
        created = await role_service.insert(procedures, RoleInsertRequest(role_name="Auditor"))

        name, params = procedures.execute.call_args.args
        assert name == INSERT_ROLE
        assert params == {"RoleId": created.role_id, "RoleName": "Auditor"}
        assert created.role_id.version == 4

    @pytest.mark.asyncio
    async def test_role_is_active_accepts_flag_or_text(self, procedures):
        role_id = uuid.uuid4()
        procedures.call.return_value = [[{"role_id": role_id, "role_name": "Admin", "is_active": "Active"}]]

        role = await role_service.get_by_id(procedures, role_id)

        assert role.is_active == "Active"
