"""Connection job history."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.database import get_db
from syncapi.models.source import Connection
from syncapi.schemas.job import JobHistoryPage, JobHistoryQuery, JobStatusFilter
from syncapi.services.job_history import get_job_history

router = APIRouter()


@router.get("/{connection_id}/job_history", response_model=JobHistoryPage)
async def connection_job_history(
    connection_id: str,
    db: AsyncSession = Depends(get_db),
    job_status: JobStatusFilter = Query("all", alias="jobStatus"),
    start_date: str = Query("", alias="startDate"),
    end_date: str = Query("", alias="endDate"),
    linked_job_id: int | None = Query(None, alias="linkedJobId"),
    pages: int = Query(1, ge=1),
):
    connection = await db.get(Connection, connection_id)
    if not connection:
        raise HTTPException(status_code=404, detail="Connection not found")

    query = JobHistoryQuery(
        job_status=job_status,
        start_date=start_date,
        end_date=end_date,
        linked_job_id=linked_job_id,
        pages=pages,
    )
    return await get_job_history(db, connection_id, query)
