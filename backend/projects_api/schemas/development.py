"""
Projects API — Development Tracking Schemas
=============================================

What:  Serial numbers, confirmed projects, work status updates and the
       status master list.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from pydantic import Field

from projects_api.schemas.common import CamelModel, Record
from projects_api.schemas.presales import AttachmentRecord, Project


class SerialNumber(CamelModel):
    serial_number: Optional[str] = None
    version: Optional[Union[int, str]] = None
    recorded_by_id: Optional[Union[UUID, str]] = None
    recorded_by_name: Optional[str] = None
    recorded_date: Optional[datetime] = None


class ConfirmedProject(Project):
    """A confirmed project with its serial numbers (always a list, possibly empty)."""

    serial_numbers: List[SerialNumber] = []


class WorkStatusRequest(CamelModel):
    """Body of POST /api/development/{projectNo}/status."""

    notes: Optional[str] = None
    status: str = Field(description="Status code from the status master")
    attachment_urls: Optional[List[str]] = Field(
        default=None, description="Document URLs; an empty list is kept as []"
    )
    created_by: UUID


class WorkStatus(Record):
    """The row SP_Work_StatusUpdate_Insert returns for the new update, every column kept."""


class WorkStatusNode(CamelModel):
    """A status update in the project's history, with the files attached to it."""

    status_update_id: Union[int, UUID] = Field(description="Links the update to its attachments")
    project_id: Optional[int] = None
    notes: Optional[str] = None
    status_code: Optional[Union[int, str]] = None
    status_text: Optional[str] = None
    created_date: Optional[datetime] = None
    created_by_id: Optional[Union[UUID, str]] = None
    created_by_name: Optional[str] = None
    attachments: List[AttachmentRecord] = []


class StatusMaster(Record):
    """A row of the status master list, every column kept."""
