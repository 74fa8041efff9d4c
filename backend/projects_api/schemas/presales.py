"""
Projects API — Pre-Sales Schemas
==================================

What:  Project rows, pre-sales requests, and the six-part pre-sales detail.
Who:   presales_service and development_service (confirmed projects reuse Project).

Design Decision:
    Result sets without a fixed column list (attachment history, advance
    payments) pass through as Record rows.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import Field

from projects_api.schemas.common import CamelModel, Money, Record


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PreSalesRequest(CamelModel):
    """Body of POST /api/presales/create and PUT /api/presales/update/{projectNo}."""

    party_name: str = Field(description="Customer organisation")
    project_name: str
    contact_person: str
    mobile_number: str
    email_id: str
    agent_name: str
    project_value: Money = Field(description="Quoted value of the project")
    scope_of_development: str
    current_stage: str
    attachment_urls: Optional[List[str]] = Field(
        default=None, description="Document URLs; an empty list is stored as none"
    )
    user_id: UUID = Field(description="User performing the change")


class AdvancePaymentRequest(CamelModel):
    amount: Money
    payment_date: datetime
    tally_entry_number: str = Field(description="Voucher number in the accounting system")
    user_id: UUID


# ══════════════════════════════════════════════════════════════════════════
# Row Models
# ══════════════════════════════════════════════════════════════════════════


class Project(CamelModel):
    """
    What:  One pre-sales project row.
    Who:   GET /api/presales/getall, the detail's `project`, confirmed projects.
    """

    project_no: int
    party_name: Optional[str] = None
    project_name: Optional[str] = None
    contact_person: Optional[str] = None
    mobile_number: Optional[str] = None
    email_id: Optional[str] = None
    agent_name: Optional[str] = None
    project_value: Optional[Money] = None
    scope_of_development: Optional[str] = None
    current_stage: Optional[str] = None
    created_by: Optional[Union[UUID, str]] = None
    created_date: Optional[datetime] = None
    modified_by: Optional[Union[UUID, str]] = None
    modified_date: Optional[datetime] = None
    latest_attachment_url: Optional[str] = None


class ScopeHistory(CamelModel):
    version_no: int
    scope: Optional[str] = None


class StageHistory(CamelModel):
    stage: Optional[str] = None


class AttachmentRecord(CamelModel):
    """An uploaded file linked to a work status update."""

    file_url: Optional[str] = None
    uploaded_date: Optional[datetime] = None
    uploaded_by_id: Optional[Union[UUID, str]] = None
    uploaded_by_name: Optional[str] = None


class AttachmentHistory(Record):
    """A row of the project's attachment history, every column kept."""


class AdvancePayment(Record):
    """An advance payment row; columns beyond the payment fields are passed through."""

    amount: Money
    payment_date: Optional[datetime] = None
    tally_entry_number: Optional[str] = None


class PreSalesDetail(CamelModel):
    """
    What:  Everything SP_PreSales_GetByProjectNo returns, one key per result set.

    Result sets (in order):
        0 project, 1 scope history, 2 stage history, 3 attachment history,
        4 advance payments, 5 attachment URLs (single column)
    """

    project: Project
    scope_history: List[ScopeHistory] = []
    stage_history: List[StageHistory] = []
    attachment_history: List[AttachmentHistory] = []
    advance_payments: List[AdvancePayment] = []
    attachment_urls: List[Optional[str]] = []


class ProjectCreated(CamelModel):
    project_no: int = Field(description="Number assigned to the new project")
