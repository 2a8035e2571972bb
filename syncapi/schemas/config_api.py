"""Request/response shapes of the internal configuration API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class Pagination(BaseModel):
    page_size: int = Field(20, ge=1)
    row_offset: int = Field(0, ge=0)


class SourceCreate(BaseModel):
    name: str
    source_definition_id: str
    workspace_id: str
    connection_configuration: dict[str, Any]
    secret_id: str | None = None


class SourceUpdate(BaseModel):
    source_id: str
    name: str
    connection_configuration: dict[str, Any]


class PartialSourceUpdate(BaseModel):
    source_id: str
    name: str | None = None
    connection_configuration: dict[str, Any] | None = None
    secret_id: str | None = None


class SourceIdRequestBody(BaseModel):
    source_id: str


class ListResourcesForWorkspacesRequestBody(BaseModel):
    workspace_ids: list[str]
    include_deleted: bool = False
    pagination: Pagination = Field(default_factory=Pagination)


class SourceRead(BaseModel):
    source_id: str
    name: str
    source_definition_id: str
    source_name: str
    workspace_id: str
    connection_configuration: dict[str, Any]
    secret_id: str | None = None
    tombstone: bool = False
    created_at: datetime


class SourceReadList(BaseModel):
    sources: list[SourceRead]


class SourceDiscoverSchemaRequestBody(BaseModel):
    source_id: str
    disable_cache: bool = False


class FailureReason(BaseModel):
    external_message: str | None = None
    internal_message: str | None = None


class SynchronousJobRead(BaseModel):
    id: int | None = None
    config_type: str = "discover_schema"
    config_id: str
    created_at: datetime
    ended_at: datetime
    succeeded: bool
    connector_configuration_updated: bool = False
    failure_reason: FailureReason | None = None


class SourceDiscoverSchemaRead(BaseModel):
    catalog: dict[str, Any] | None = None
    catalog_id: str | None = None
    job_info: SynchronousJobRead
