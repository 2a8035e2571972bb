"""Internal configuration API -> public API response mappers."""

from urllib.parse import urlencode

from syncapi.schemas.config_api import SourceRead, SourceReadList
from syncapi.schemas.public_api import SourceResponse, SourcesResponse

SOURCES_PATH = "/v1/sources"


def source_type_from_name(name: str) -> str:
    return name.strip().lower().replace(" ", "-")


class SourceReadMapper:
    @staticmethod
    def from_read(source_read: SourceRead) -> SourceResponse:
        return SourceResponse(
            source_id=source_read.source_id,
            name=source_read.name,
            source_type=source_type_from_name(source_read.source_name),
            workspace_id=source_read.workspace_id,
            configuration=source_read.connection_configuration,
            definition_id=source_read.source_definition_id,
            created_at=source_read.created_at,
        )


def _page_url(
    api_host: str,
    workspace_ids: list[str],
    include_deleted: bool,
    limit: int,
    offset: int,
) -> str:
    params: list[tuple[str, str | int]] = [
        ("limit", limit),
        ("offset", offset),
        ("includeDeleted", str(include_deleted).lower()),
    ]
    params.extend(("workspaceIds", w) for w in workspace_ids)
    return f"{api_host.rstrip('/')}{SOURCES_PATH}?{urlencode(params)}"


class SourcesResponseMapper:
    @staticmethod
    def from_read_list(
        source_read_list: SourceReadList,
        workspace_ids: list[str],
        include_deleted: bool,
        limit: int,
        offset: int,
        api_host: str,
    ) -> SourcesResponse:
        data = [SourceReadMapper.from_read(s) for s in source_read_list.sources]

        next_url = None
        if len(data) == limit:
            next_url = _page_url(api_host, workspace_ids, include_deleted, limit, offset + limit)

        previous_url = None
        if offset > 0:
            previous_url = _page_url(
                api_host, workspace_ids, include_deleted, limit, max(offset - limit, 0)
            )

        return SourcesResponse(data=data, next=next_url, previous=previous_url)
