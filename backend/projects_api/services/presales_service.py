"""
Projects API — Pre-Sales Service
==================================

What:  Pre-sales project leads: detail view, creation, update, listing,
       advance payments and deletion.
How:   The detail procedure returns six result sets for one project; they
       are attached to the project node with unkeyed links (every child row
       belongs to the single parent) and then split into PreSalesDetail.
Who:   routes/presales.py.

List parameters:
    AttachmentUrls is sent as a JSON array string; an empty or missing list
    is sent as NULL.
"""

import logging
from typing import Any, List, Optional
from uuid import UUID

from projects_api.schemas.common import parse_row, parse_rows
from projects_api.schemas.presales import (
    AdvancePayment,
    AdvancePaymentRequest,
    AttachmentHistory,
    PreSalesDetail,
    PreSalesRequest,
    Project,
    ProjectCreated,
    ScopeHistory,
    StageHistory,
)
from projects_api.services.procedures import ProcedureClient, encode_list
from projects_api.services.result_tree import Link, assemble_one, result_set, scalar

logger = logging.getLogger(__name__)

GET_PRESALES = "SP_PreSales_GetByProjectNo"
CREATE_PRESALES = "SP_PreSales_Create"
UPDATE_PRESALES = "SP_PreSales_Update"
GET_ALL_PRESALES = "SP_PreSales_GetAll"
ADD_ADVANCE_PAYMENT = "SP_PreSales_AddAdvancePayment"
DELETE_PRESALES = "SP_PreSales_Delete"

# Result-set layout of SP_PreSales_GetByProjectNo (set 0 is the project)
DETAIL_LINKS = (
    Link(name="scope_history", child_index=1),
    Link(name="stage_history", child_index=2),
    Link(name="attachment_history", child_index=3),
    Link(name="advance_payments", child_index=4),
    Link(name="attachment_urls", child_index=5),
)


def _first_value(row: dict) -> Optional[Any]:
    return next(iter(row.values()), None)


def _presales_params(model: PreSalesRequest) -> dict:
    return {
        "PartyName": model.party_name,
        "ProjectName": model.project_name,
        "ContactPerson": model.contact_person,
        "MobileNumber": model.mobile_number,
        "EmailId": model.email_id,
        "AgentName": model.agent_name,
        "ProjectValue": model.project_value,
        "ScopeOfDevelopment": model.scope_of_development,
        "CurrentStage": model.current_stage,
        "AttachmentUrls": encode_list(model.attachment_urls, empty_as_null=True),
        "UserId": model.user_id,
    }


class PreSalesService:

    async def get_detail(self, procedures: ProcedureClient, project_no: int) -> PreSalesDetail:
        """
        Project with its scope, stage and attachment histories, advance
        payments and current attachment URLs.

        Raises:
            NotFoundError: no project with this number (→ 404)
            ProcedureContractViolation: fewer than six result sets (→ 500)
        """
        result_sets = await procedures.call(GET_PRESALES, {"ProjectNo": project_no})
        node = assemble_one(
            result_sets,
            DETAIL_LINKS,
            resource="project",
            resource_id=str(project_no),
            message="Project not found",
            procedure=GET_PRESALES,
        )

        return PreSalesDetail(
            scope_history=parse_rows(ScopeHistory, node.pop("scope_history"), GET_PRESALES),
            stage_history=parse_rows(StageHistory, node.pop("stage_history"), GET_PRESALES),
            attachment_history=parse_rows(
                AttachmentHistory, node.pop("attachment_history"), GET_PRESALES
            ),
            advance_payments=parse_rows(AdvancePayment, node.pop("advance_payments"), GET_PRESALES),
            attachment_urls=[_first_value(row) for row in node.pop("attachment_urls")],
            project=parse_row(Project, node, GET_PRESALES),
        )

    async def create(self, procedures: ProcedureClient, model: PreSalesRequest) -> ProjectCreated:
        """Insert a lead; the procedure returns the new project number as a scalar."""
        result_sets = await procedures.call(CREATE_PRESALES, _presales_params(model))
        project_no = scalar(result_sets, 0, CREATE_PRESALES)
        logger.info("Pre-sales project %s created", project_no)
        return parse_row(ProjectCreated, {"project_no": project_no}, CREATE_PRESALES)

    async def update(
        self, procedures: ProcedureClient, project_no: int, model: PreSalesRequest
    ) -> None:
        await procedures.execute(
            UPDATE_PRESALES, {"ProjectNo": project_no, **_presales_params(model)}
        )

    async def get_all(self, procedures: ProcedureClient) -> List[Project]:
        result_sets = await procedures.call(GET_ALL_PRESALES)
        return parse_rows(Project, result_set(result_sets, 0, GET_ALL_PRESALES), GET_ALL_PRESALES)

    async def add_advance_payment(
        self, procedures: ProcedureClient, project_no: int, model: AdvancePaymentRequest
    ) -> None:
        await procedures.execute(
            ADD_ADVANCE_PAYMENT,
            {
                "ProjectNo": project_no,
                "Amount": model.amount,
                "PaymentDate": model.payment_date,
                "TallyEntryNumber": model.tally_entry_number,
                "UserId": model.user_id,
            },
        )

    async def delete(self, procedures: ProcedureClient, project_no: int, user_id: UUID) -> None:
        await procedures.execute(DELETE_PRESALES, {"ProjectNo": project_no, "UserId": user_id})
        logger.info("Pre-sales project %s deleted by %s", project_no, user_id)


# ── Singleton Instance ────────────────────────────────────────────────────
presales_service = PreSalesService()
