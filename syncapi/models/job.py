import enum
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from syncapi.database import Base


class JobConfigType(str, enum.Enum):
    SYNC = "sync"
    RESET_CONNECTION = "reset_connection"
    CHECK_CONNECTION_SOURCE = "check_connection_source"
    DISCOVER_SCHEMA = "discover_schema"


class JobStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    INCOMPLETE = "incomplete"
    FAILED = "failed"
    SUCCEEDED = "succeeded"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = (JobStatus.FAILED, JobStatus.SUCCEEDED, JobStatus.CANCELLED)


class Job(Base):
    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    config_type: Mapped[JobConfigType] = mapped_column(SAEnum(JobConfigType))
    # Connection id for sync/reset jobs, source id for discover/check jobs
    config_id: Mapped[str] = mapped_column(String(36), index=True)
    status: Mapped[JobStatus] = mapped_column(
        SAEnum(JobStatus), default=JobStatus.PENDING
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    attempts: Mapped[list["JobAttempt"]] = relationship(
        back_populates="job",
        order_by="JobAttempt.attempt_number",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class JobAttempt(Base):
    __tablename__ = "job_attempts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id"))
    attempt_number: Mapped[int] = mapped_column(Integer)
    status: Mapped[JobStatus] = mapped_column(
        SAEnum(JobStatus), default=JobStatus.RUNNING
    )
    # {"external_message": ..., "internal_message": ...}
    failure_reason: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )
    ended_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    job: Mapped[Job] = relationship(back_populates="attempts")
