"""Job listing: filtering, ordering and pagination of connection jobs."""

import logging
import math
from datetime import UTC, datetime

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.models.job import Job, JobConfigType, JobStatus
from syncapi.schemas.config_api import FailureReason, Pagination
from syncapi.schemas.job import AttemptRead, JobListRequestBody, JobRead, JobReadList

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 200


def _as_utc_naive(value: datetime) -> datetime:
    # Timestamps are stored as naive UTC
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def job_to_schema(job: Job) -> JobRead:
    return JobRead(
        id=job.id,
        config_type=job.config_type.value,
        config_id=job.config_id,
        status=job.status.value,
        created_at=job.created_at,
        updated_at=job.updated_at,
        started_at=job.started_at,
        attempts=[
            AttemptRead(
                attempt_number=a.attempt_number,
                status=a.status.value,
                failure_reason=FailureReason(**a.failure_reason) if a.failure_reason else None,
                created_at=a.created_at,
                ended_at=a.ended_at,
            )
            for a in job.attempts
        ],
    )


def _filters(request: JobListRequestBody) -> list:
    """Raises ValueError for unknown config types or statuses."""
    config_types = [JobConfigType(t) for t in request.config_types]
    conditions = [Job.config_id == request.config_id, Job.config_type.in_(config_types)]
    if request.statuses:
        conditions.append(Job.status.in_([JobStatus(s) for s in request.statuses]))
    if request.updated_at_start is not None:
        conditions.append(Job.updated_at >= _as_utc_naive(request.updated_at_start))
    if request.updated_at_end is not None:
        conditions.append(Job.updated_at <= _as_utc_naive(request.updated_at_end))
    return conditions


async def _position_of(db: AsyncSession, conditions: list, job_id: int) -> int | None:
    """Zero-based index of a job within the filtered, ordered job list."""
    target = (
        await db.execute(select(Job).where(Job.id == job_id, *conditions))
    ).scalar_one_or_none()
    if target is None:
        return None

    ahead = select(func.count()).select_from(Job).where(
        *conditions,
        or_(
            Job.created_at > target.created_at,
            and_(Job.created_at == target.created_at, Job.id > target.id),
        ),
    )
    return (await db.execute(ahead)).scalar_one()


async def list_jobs(db: AsyncSession, request: JobListRequestBody) -> JobReadList:
    """List a connection's jobs, newest first, with the total matching count."""
    conditions = _filters(request)
    pagination = request.pagination or Pagination(page_size=DEFAULT_PAGE_SIZE)
    page_size = pagination.page_size
    row_offset = pagination.row_offset

    if request.including_job_id is not None:
        position = await _position_of(db, conditions, request.including_job_id)
        if position is None:
            logger.info(f"Job {request.including_job_id} not among the listed jobs of {request.config_id}")
        else:
            page_size = math.ceil((position + 1) / pagination.page_size) * pagination.page_size
            row_offset = 0

    count_stmt = select(func.count()).select_from(Job).where(*conditions)
    total = (await db.execute(count_stmt)).scalar_one()

    stmt = (
        select(Job)
        .where(*conditions)
        .order_by(Job.created_at.desc(), Job.id.desc())
        .offset(row_offset)
        .limit(page_size)
    )
    jobs = (await db.execute(stmt)).scalars().all()

    return JobReadList(jobs=[job_to_schema(j) for j in jobs], total_job_count=total)
