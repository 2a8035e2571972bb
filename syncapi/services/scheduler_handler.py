"""Scheduler handler: synchronous connector jobs (schema discovery)."""

import hashlib
import json
import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.core.errors import ConfigNotFoundError
from syncapi.models.job import Job, JobAttempt, JobConfigType, JobStatus
from syncapi.models.source import ActorCatalog, Source, SourceDefinition
from syncapi.schemas.config_api import (
    FailureReason,
    SourceDiscoverSchemaRead,
    SourceDiscoverSchemaRequestBody,
    SynchronousJobRead,
)
from syncapi.services.discovery import DiscoverResult, Discoverer

logger = logging.getLogger(__name__)


def configuration_hash(configuration: dict[str, Any]) -> str:
    canonical = json.dumps(configuration, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()


class SchedulerHandler:
    def __init__(self, db: AsyncSession, discoverer: Discoverer):
        self.db = db
        self.discoverer = discoverer

    async def _cached_catalog(self, source_id: str, config_hash: str) -> ActorCatalog | None:
        result = await self.db.execute(
            select(ActorCatalog)
            .where(ActorCatalog.source_id == source_id, ActorCatalog.config_hash == config_hash)
            .order_by(ActorCatalog.fetched_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def discover_schema_for_source_from_source_id(
        self, request: SourceDiscoverSchemaRequestBody
    ) -> SourceDiscoverSchemaRead:
        source = await self.db.get(Source, request.source_id)
        if source is None:
            raise ConfigNotFoundError("Source", request.source_id)
        definition = await self.db.get(SourceDefinition, source.source_definition_id)
        if definition is None:
            raise ConfigNotFoundError("SourceDefinition", source.source_definition_id)

        config_hash = configuration_hash(source.configuration)

        if not request.disable_cache:
            cached = await self._cached_catalog(source.id, config_hash)
            if cached is not None:
                logger.debug(f"Using cached catalog {cached.id} for source {source.id}")
                return SourceDiscoverSchemaRead(
                    catalog=cached.catalog,
                    catalog_id=cached.id,
                    job_info=SynchronousJobRead(
                        config_id=source.id,
                        created_at=cached.fetched_at,
                        ended_at=cached.fetched_at,
                        succeeded=True,
                    ),
                )

        now = datetime.now(UTC)
        job = Job(
            config_type=JobConfigType.DISCOVER_SCHEMA,
            config_id=source.id,
            status=JobStatus.RUNNING,
            created_at=now,
            started_at=now,
        )
        attempt = JobAttempt(attempt_number=0, status=JobStatus.RUNNING, created_at=now)
        job.attempts.append(attempt)
        self.db.add(job)
        await self.db.commit()

        logger.info(f"Running discover job {job.id} for source {source.id}")
        try:
            result = await self.discoverer.discover(definition, source.configuration)
        except Exception as e:
            logger.exception(f"Discover job {job.id} raised: {e}")
            result = DiscoverResult(succeeded=False, internal_message=str(e) or type(e).__name__)

        ended = datetime.now(UTC)
        status = JobStatus.SUCCEEDED if result.succeeded else JobStatus.FAILED
        job.status = status
        attempt.status = status
        attempt.ended_at = ended

        failure_reason = None
        catalog_id = None
        if result.succeeded:
            catalog = ActorCatalog(
                source_id=source.id,
                config_hash=config_hash,
                catalog=result.catalog,
                fetched_at=ended,
            )
            self.db.add(catalog)
            await self.db.flush()
            catalog_id = catalog.id
        else:
            failure_reason = FailureReason(
                external_message=result.external_message,
                internal_message=result.internal_message,
            )
            attempt.failure_reason = failure_reason.model_dump()
            logger.warning(f"Discover job {job.id} failed: {result.internal_message}")

        await self.db.commit()

        return SourceDiscoverSchemaRead(
            catalog=result.catalog if result.succeeded else None,
            catalog_id=catalog_id,
            job_info=SynchronousJobRead(
                id=job.id,
                config_id=source.id,
                created_at=now,
                ended_at=ended,
                succeeded=result.succeeded,
                failure_reason=failure_reason,
            ),
        )
