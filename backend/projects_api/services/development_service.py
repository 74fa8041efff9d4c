"""
Projects API — Development Tracking Service
=============================================

What:  Serial numbers, confirmed projects, work status updates and the
       status master list. Also backs /api/attachment.
How:   Multi-result-set procedures are assembled into trees:
           confirmed projects ─ serial_numbers  (linked by ProjectNo)
           work statuses      ─ attachments     (linked by StatusUpdateId)
       Both collections are always present, [] when nothing matches.
Who:   routes/development.py, routes/attachments.py.

Validation:
    Project numbers must be positive; anything else is rejected with 400
    before a procedure is called.
"""

import logging
from typing import List

from projects_api.exceptions import ProcedureContractViolation, ValidationError
from projects_api.schemas.common import parse_row, parse_rows
from projects_api.schemas.development import (
    ConfirmedProject,
    SerialNumber,
    StatusMaster,
    WorkStatus,
    WorkStatusNode,
    WorkStatusRequest,
)
from projects_api.services.procedures import ProcedureClient, encode_list
from projects_api.services.result_tree import EmptyPolicy, Link, assemble, first_row, result_set

logger = logging.getLogger(__name__)

GET_SERIAL_NUMBERS = "SP_PreSales_GetSerialNumbersByProjectNo"
GET_CONFIRMED = "SP_PreSales_GetAll_Confirmed"
INSERT_STATUS_UPDATE = "SP_Work_StatusUpdate_Insert"
GET_WORK_STATUS = "SP_WorkStatus_GetByProjectNo"
GET_STATUS_MASTER = "SP_Work_StatusMaster_GetAll"

SERIAL_NUMBER_LINK = Link(
    name="serial_numbers",
    child_index=1,
    child_column="project_no",
    parent_column="project_no",
    empty=EmptyPolicy.EMPTY_LIST,
)
ATTACHMENT_LINK = Link(
    name="attachments",
    child_index=1,
    child_column="status_update_id",
    parent_column="status_update_id",
    empty=EmptyPolicy.EMPTY_LIST,
)


def validate_project_no(project_no: int) -> None:
    """
    Raises:
        ValidationError: project_no is zero or negative (→ 400)
    """
    if project_no <= 0:
        raise ValidationError(message="Invalid project number", field="projectNo")


class DevelopmentService:

    async def get_serial_numbers(
        self, procedures: ProcedureClient, project_no: int
    ) -> List[SerialNumber]:
        validate_project_no(project_no)
        result_sets = await procedures.call(GET_SERIAL_NUMBERS, {"ProjectNo": project_no})
        return parse_rows(
            SerialNumber, result_set(result_sets, 0, GET_SERIAL_NUMBERS), GET_SERIAL_NUMBERS
        )

    async def get_confirmed_projects(self, procedures: ProcedureClient) -> List[ConfirmedProject]:
        """
        Result sets: 0 confirmed projects, 1 serial numbers of all of them.
        """
        result_sets = await procedures.call(GET_CONFIRMED)
        projects = assemble(result_sets, [SERIAL_NUMBER_LINK], procedure=GET_CONFIRMED)
        return parse_rows(ConfirmedProject, projects, GET_CONFIRMED)

    async def add_status_update(
        self, procedures: ProcedureClient, project_no: int, model: WorkStatusRequest
    ) -> WorkStatus:
        """
        Record a work status change and return the inserted row.

        AttachmentUrls: a missing list is sent as NULL, an empty list as "[]".
        """
        validate_project_no(project_no)
        result_sets = await procedures.call(
            INSERT_STATUS_UPDATE,
            {
                "ProjectNo": project_no,
                "Notes": model.notes,
                "Status": model.status,
                "AttachmentUrls": encode_list(model.attachment_urls, empty_as_null=False),
                "CreatedBy": model.created_by,
            },
        )
        row = first_row(result_sets, 0, INSERT_STATUS_UPDATE)
        if row is None:
            raise ProcedureContractViolation(
                procedure=INSERT_STATUS_UPDATE, detail="inserted row was not returned"
            )
        logger.info("Project %s moved to status %s", project_no, model.status)
        return parse_row(WorkStatus, row, INSERT_STATUS_UPDATE)

    async def get_work_status(
        self, procedures: ProcedureClient, project_no: int
    ) -> List[WorkStatusNode]:
        """
        Result sets: 0 status updates, 1 attachments of all of them.
        """
        validate_project_no(project_no)
        result_sets = await procedures.call(GET_WORK_STATUS, {"ProjectNo": project_no})
        statuses = assemble(result_sets, [ATTACHMENT_LINK], procedure=GET_WORK_STATUS)
        return parse_rows(WorkStatusNode, statuses, GET_WORK_STATUS)

    async def get_status_master(self, procedures: ProcedureClient) -> List[StatusMaster]:
        result_sets = await procedures.call(GET_STATUS_MASTER)
        return parse_rows(
            StatusMaster, result_set(result_sets, 0, GET_STATUS_MASTER), GET_STATUS_MASTER
        )


# ── Singleton Instance ────────────────────────────────────────────────────
development_service = DevelopmentService()
