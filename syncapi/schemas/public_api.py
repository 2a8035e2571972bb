"""Public API request/response shapes (camelCase on the wire)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PublicModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceCreateRequest(PublicModel):
    name: str
    workspace_id: str
    configuration: dict[str, Any]
    secret_id: str | None = None
    definition_id: str | None = None


class SourcePutRequest(PublicModel):
    name: str
    configuration: dict[str, Any]


class SourcePatchRequest(PublicModel):
    name: str | None = None
    configuration: dict[str, Any] | None = None
    secret_id: str | None = None


class InitiateOauthRequest(PublicModel):
    source_type: str
    redirect_url: str
    workspace_id: str
    o_auth_input_configuration: dict[str, Any] | None = None


class SourceResponse(PublicModel):
    source_id: str
    name: str
    source_type: str
    workspace_id: str
    configuration: dict[str, Any]
    definition_id: str
    created_at: datetime


class SourcesResponse(PublicModel):
    data: list[SourceResponse]
    next: str | None = None
    previous: str | None = None
