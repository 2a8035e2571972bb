"""Source configuration handler: persistence and validation of sources."""

import copy
import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.core.errors import ConfigNotFoundError, JsonValidationError, ValueConflictError
from syncapi.models.source import Connection, Source, SourceDefinition
from syncapi.models.workspace import Workspace
from syncapi.schemas.config_api import (
    ListResourcesForWorkspacesRequestBody,
    PartialSourceUpdate,
    SourceCreate,
    SourceIdRequestBody,
    SourceRead,
    SourceReadList,
    SourceUpdate,
)

logger = logging.getLogger(__name__)


def merge_configuration(original: dict[str, Any], patch: dict[str, Any]) -> dict[str, Any]:
    """
    Merge a partial configuration into an existing one.

    Nested objects are merged key by key; a None value removes the key.
    """
    merged = copy.deepcopy(original)
    for key, value in patch.items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_configuration(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_configuration(definition: SourceDefinition, configuration: dict[str, Any]) -> None:
    required = (definition.spec or {}).get("required", [])
    missing = [key for key in required if key not in configuration]
    if missing:
        raise JsonValidationError(
            f"Configuration for '{definition.name}' is missing required properties: "
            + ", ".join(missing)
        )


class SourceHandler:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_definition(self, definition_id: str) -> SourceDefinition:
        definition = await self.db.get(SourceDefinition, definition_id)
        if definition is None:
            raise ConfigNotFoundError("SourceDefinition", definition_id)
        return definition

    async def _get_source(self, source_id: str) -> Source:
        source = await self.db.get(Source, source_id)
        if source is None:
            raise ConfigNotFoundError("Source", source_id)
        return source

    async def _to_read(self, source: Source) -> SourceRead:
        definition = await self._get_definition(source.source_definition_id)
        return SourceRead(
            source_id=source.id,
            name=source.name,
            source_definition_id=source.source_definition_id,
            source_name=definition.name,
            workspace_id=source.workspace_id,
            connection_configuration=source.configuration,
            secret_id=source.secret_id,
            tombstone=source.tombstone,
            created_at=source.created_at,
        )

    async def create_source(self, request: SourceCreate) -> SourceRead:
        if await self.db.get(Workspace, request.workspace_id) is None:
            raise ConfigNotFoundError("Workspace", request.workspace_id)
        definition = await self._get_definition(request.source_definition_id)
        validate_configuration(definition, request.connection_configuration)

        source = Source(
            workspace_id=request.workspace_id,
            source_definition_id=definition.id,
            name=request.name,
            configuration=request.connection_configuration,
            secret_id=request.secret_id,
            tombstone=False,
            created_at=datetime.now(UTC),
        )
        self.db.add(source)
        await self.db.commit()
        await self.db.refresh(source)
        logger.info(f"Created source {source.id} ({definition.name})")
        return await self._to_read(source)

    async def get_source(self, request: SourceIdRequestBody) -> SourceRead:
        return await self._to_read(await self._get_source(request.source_id))

    async def update_source(self, request: SourceUpdate) -> SourceRead:
        source = await self._get_source(request.source_id)
        if source.tombstone:
            raise ValueConflictError(f"Source {source.id} has been deleted and cannot be updated")
        definition = await self._get_definition(source.source_definition_id)
        validate_configuration(definition, request.connection_configuration)

        source.name = request.name
        source.configuration = request.connection_configuration
        await self.db.commit()
        await self.db.refresh(source)
        return await self._to_read(source)

    async def partial_update_source(self, request: PartialSourceUpdate) -> SourceRead:
        source = await self._get_source(request.source_id)
        if source.tombstone:
            raise ValueConflictError(f"Source {source.id} has been deleted and cannot be updated")

        if request.connection_configuration is not None:
            merged = merge_configuration(source.configuration, request.connection_configuration)
            definition = await self._get_definition(source.source_definition_id)
            validate_configuration(definition, merged)
            source.configuration = merged
        if request.name is not None:
            source.name = request.name
        if request.secret_id is not None:
            source.secret_id = request.secret_id

        await self.db.commit()
        await self.db.refresh(source)
        return await self._to_read(source)

    async def delete_source(self, request: SourceIdRequestBody) -> None:
        source = await self._get_source(request.source_id)
        if source.tombstone:
            return

        source.tombstone = True
        await self.db.execute(
            update(Connection)
            .where(Connection.source_id == source.id)
            .values(status="deprecated")
        )
        await self.db.commit()
        logger.info(f"Deleted source {source.id}")

    async def list_sources_for_workspaces(
        self, request: ListResourcesForWorkspacesRequestBody
    ) -> SourceReadList:
        stmt = (
            select(Source)
            .where(Source.workspace_id.in_(request.workspace_ids))
            .order_by(Source.created_at, Source.id)
        )
        if not request.include_deleted:
            stmt = stmt.where(Source.tombstone.is_(False))
        stmt = stmt.offset(request.pagination.row_offset).limit(request.pagination.page_size)

        sources = (await self.db.execute(stmt)).scalars().all()
        return SourceReadList(sources=[await self._to_read(s) for s in sources])
