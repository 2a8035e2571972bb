from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from syncapi.schemas.config_api import FailureReason, Pagination


class AttemptRead(BaseModel):
    attempt_number: int
    status: str
    failure_reason: FailureReason | None
    created_at: datetime
    ended_at: datetime | None

    model_config = {"from_attributes": True}


class JobRead(BaseModel):
    id: int
    config_type: str
    config_id: str
    status: str
    created_at: datetime
    updated_at: datetime
    started_at: datetime | None
    attempts: list[AttemptRead]


class JobListRequestBody(BaseModel):
    config_types: list[str]
    config_id: str
    including_job_id: int | None = None
    statuses: list[str] | None = None
    updated_at_start: datetime | None = None
    updated_at_end: datetime | None = None
    pagination: Pagination | None = None


class JobReadList(BaseModel):
    jobs: list[JobRead]
    total_job_count: int


JobStatusFilter = Literal["all", "succeeded", "failed", "cancelled"]


class JobHistoryQuery(BaseModel):
    job_status: JobStatusFilter = "all"
    start_date: str = ""
    end_date: str = ""
    linked_job_id: int | None = None
    pages: int = Field(1, ge=1)


class JobHistoryPage(BaseModel):
    jobs: list[JobRead]
    total_job_count: int
    has_next_page: bool
    linked_job_not_found: bool
    filters_active: bool
