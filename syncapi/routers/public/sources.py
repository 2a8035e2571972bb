"""Public API: /v1/sources."""

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.core.problems import BadRequestProblem
from syncapi.database import get_db
from syncapi.models.source import SourceDefinition
from syncapi.schemas.config_api import SourceDiscoverSchemaRead
from syncapi.schemas.public_api import (
    InitiateOauthRequest,
    SourceCreateRequest,
    SourcePatchRequest,
    SourcePutRequest,
    SourceResponse,
    SourcesResponse,
)
from syncapi.services.discovery import get_discoverer
from syncapi.services.public.mappers import source_type_from_name
from syncapi.services.public.source_service import SourceService
from syncapi.services.scheduler_handler import SchedulerHandler
from syncapi.services.source_handler import SourceHandler
from syncapi.services.users import CurrentUserService, UserService

router = APIRouter()


def get_source_service(
    db: AsyncSession = Depends(get_db),
    x_user_id: str | None = Header(None),
) -> SourceService:
    return SourceService(
        user_service=UserService(db),
        source_handler=SourceHandler(db),
        scheduler_handler=SchedulerHandler(db, get_discoverer()),
        current_user_service=CurrentUserService(x_user_id),
    )


async def _resolve_definition_id(db: AsyncSession, request: SourceCreateRequest) -> str:
    """Definition id from the request, or from configuration["sourceType"]."""
    if request.definition_id:
        return request.definition_id

    source_type = request.configuration.get("sourceType")
    if not source_type:
        raise BadRequestProblem("Either definitionId or configuration.sourceType must be provided.")

    definitions = (await db.execute(select(SourceDefinition))).scalars().all()
    for definition in definitions:
        if source_type_from_name(definition.name) == source_type_from_name(str(source_type)):
            return definition.id
    raise BadRequestProblem(f"Unknown sourceType '{source_type}'.")


@router.post("/sources", response_model=SourceResponse, status_code=status.HTTP_201_CREATED)
async def create_source(
    request: SourceCreateRequest,
    db: AsyncSession = Depends(get_db),
    svc: SourceService = Depends(get_source_service),
):
    definition_id = await _resolve_definition_id(db, request)
    return await svc.create_source(request, definition_id)


@router.get("/sources", response_model=SourcesResponse)
async def list_sources(
    svc: SourceService = Depends(get_source_service),
    workspace_ids: list[str] | None = Query(None, alias="workspaceIds"),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return await svc.list_sources_for_workspaces(workspace_ids or [], include_deleted, limit, offset)


@router.post("/sources/initiateOAuth")
async def initiate_oauth(
    request: InitiateOauthRequest | None = None,
    svc: SourceService = Depends(get_source_service),
):
    return await svc.controller_initiate_oauth(request)


@router.get("/sources/{source_id}", response_model=SourceResponse)
async def get_source(source_id: str, svc: SourceService = Depends(get_source_service)):
    return await svc.get_source(source_id)


@router.put("/sources/{source_id}", response_model=SourceResponse)
async def update_source(
    source_id: str,
    request: SourcePutRequest,
    svc: SourceService = Depends(get_source_service),
):
    return await svc.update_source(source_id, request)


@router.patch("/sources/{source_id}", response_model=SourceResponse)
async def partial_update_source(
    source_id: str,
    request: SourcePatchRequest,
    svc: SourceService = Depends(get_source_service),
):
    return await svc.partial_update_source(source_id, request)


@router.delete("/sources/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_source(source_id: str, svc: SourceService = Depends(get_source_service)):
    await svc.delete_source(source_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/sources/{source_id}/schema", response_model=SourceDiscoverSchemaRead)
async def get_source_schema(
    source_id: str,
    disable_cache: bool = Query(False, alias="disableCache"),
    svc: SourceService = Depends(get_source_service),
):
    return await svc.get_source_schema(source_id, disable_cache)
