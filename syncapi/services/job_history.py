"""Connection job history: filter marshaling and page assembly."""

from dataclasses import dataclass
from datetime import UTC, datetime, time

from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.config import settings
from syncapi.models.job import JobConfigType
from syncapi.schemas.config_api import Pagination
from syncapi.schemas.job import JobHistoryPage, JobHistoryQuery, JobListRequestBody
from syncapi.services.job_service import list_jobs

HISTORY_CONFIG_TYPES = [JobConfigType.SYNC.value, JobConfigType.RESET_CONNECTION.value]
ALL_STATUSES = "all"
DATE_FORMAT = "%Y-%m-%d"


def _parse_date(value: str):
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def start_of_day(value: str) -> datetime | None:
    """First instant (UTC) of a YYYY-MM-DD date; None when empty or unparsable."""
    day = _parse_date(value)
    if day is None:
        return None
    return datetime.combine(day, time.min, tzinfo=UTC)


def end_of_day(value: str) -> datetime | None:
    """Last millisecond (UTC) of a YYYY-MM-DD date; None when empty or unparsable."""
    day = _parse_date(value)
    if day is None:
        return None
    return datetime.combine(day, time(23, 59, 59, 999000), tzinfo=UTC)


@dataclass(frozen=True)
class JobHistoryFilter:
    job_status: str = ALL_STATUSES
    start_date: str = ""
    end_date: str = ""

    @classmethod
    def from_query(cls, query: JobHistoryQuery) -> "JobHistoryFilter":
        return cls(job_status=query.job_status, start_date=query.start_date, end_date=query.end_date)

    @property
    def active(self) -> bool:
        return self != JobHistoryFilter()

    def to_list_request(
        self,
        connection_id: str,
        pages: int = 1,
        linked_job_id: int | None = None,
        page_size_increment: int | None = None,
    ) -> JobListRequestBody:
        increment = page_size_increment or settings.job_page_size_increment
        return JobListRequestBody(
            config_types=HISTORY_CONFIG_TYPES,
            config_id=connection_id,
            including_job_id=linked_job_id,
            statuses=None if self.job_status == ALL_STATUSES else [self.job_status],
            updated_at_start=start_of_day(self.start_date) if self.start_date else None,
            updated_at_end=end_of_day(self.end_date) if self.end_date else None,
            pagination=Pagination(page_size=pages * increment, row_offset=0),
        )


async def get_job_history(db: AsyncSession, connection_id: str, query: JobHistoryQuery) -> JobHistoryPage:
    history_filter = JobHistoryFilter.from_query(query)
    request = history_filter.to_list_request(connection_id, query.pages, query.linked_job_id)
    result = await list_jobs(db, request)

    return JobHistoryPage(
        jobs=result.jobs,
        total_job_count=result.total_job_count,
        has_next_page=result.total_job_count > len(result.jobs),
        linked_job_not_found=query.linked_job_id is not None and not result.jobs,
        filters_active=history_filter.active,
    )
