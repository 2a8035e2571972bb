"""Job API: list with filters, detail, cancel."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.database import get_db
from syncapi.models.job import TERMINAL_STATUSES, Job, JobStatus
from syncapi.schemas.job import JobListRequestBody, JobRead, JobReadList
from syncapi.services.job_service import job_to_schema, list_jobs

router = APIRouter()


@router.post("/list", response_model=JobReadList)
async def list_jobs_for_connection(request: JobListRequestBody, db: AsyncSession = Depends(get_db)):
    try:
        return await list_jobs(db, request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{job_id}", response_model=JobRead)
async def get_job(job_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Job).where(Job.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job_to_schema(job)


@router.post("/{job_id}/cancel", response_model=JobRead)
async def cancel_job(job_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Job).where(Job.id == job_id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")

    if job.status in TERMINAL_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot cancel a job with status '{job.status.value}'",
        )

    job.status = JobStatus.CANCELLED
    for attempt in job.attempts:
        if attempt.status not in TERMINAL_STATUSES:
            attempt.status = JobStatus.CANCELLED
    await db.commit()
    await db.refresh(job)
    return job_to_schema(job)
