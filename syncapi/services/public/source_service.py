"""Public API source service: forwards requests to the configuration handlers."""

import logging

from fastapi import Response, status

from syncapi.config import settings
from syncapi.core.problems import HTTP_RESPONSE_BODY_DEBUG_MESSAGE, UnexpectedProblem, handle_config_error
from syncapi.schemas.config_api import (
    ListResourcesForWorkspacesRequestBody,
    Pagination,
    PartialSourceUpdate,
    SourceCreate,
    SourceDiscoverSchemaRead,
    SourceDiscoverSchemaRequestBody,
    SourceIdRequestBody,
    SourceUpdate,
)
from syncapi.schemas.public_api import (
    InitiateOauthRequest,
    SourceCreateRequest,
    SourcePatchRequest,
    SourcePutRequest,
    SourceResponse,
    SourcesResponse,
)
from syncapi.services.public.mappers import SourceReadMapper, SourcesResponseMapper
from syncapi.services.scheduler_handler import SchedulerHandler
from syncapi.services.source_handler import SourceHandler
from syncapi.services.users import CurrentUserService, UserService

logger = logging.getLogger(__name__)

CONNECTOR_FAILURE_MESSAGE = "Something went wrong in the connector."


class SourceService:
    def __init__(
        self,
        user_service: UserService,
        source_handler: SourceHandler,
        scheduler_handler: SchedulerHandler,
        current_user_service: CurrentUserService,
        public_api_host: str | None = None,
    ):
        self.user_service = user_service
        self.source_handler = source_handler
        self.scheduler_handler = scheduler_handler
        self.current_user_service = current_user_service
        self.public_api_host = public_api_host or settings.public_api_host

    async def create_source(
        self, source_create_request: SourceCreateRequest, source_definition_id: str
    ) -> SourceResponse:
        source_create = SourceCreate(
            name=source_create_request.name,
            source_definition_id=source_definition_id,
            workspace_id=source_create_request.workspace_id,
            connection_configuration=source_create_request.configuration,
            secret_id=source_create_request.secret_id,
        )
        try:
            result = await self.source_handler.create_source(source_create)
        except Exception as e:
            logger.error("Error for create_source", exc_info=True)
            handle_config_error(e, source_definition_id)
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + repr(result))
        return SourceReadMapper.from_read(result)

    async def update_source(self, source_id: str, source_put_request: SourcePutRequest) -> SourceResponse:
        """Update a source, replacing its configuration entirely."""
        source_update = SourceUpdate(
            source_id=source_id,
            name=source_put_request.name,
            connection_configuration=source_put_request.configuration,
        )
        try:
            result = await self.source_handler.update_source(source_update)
        except Exception as e:
            logger.error("Error for update_source", exc_info=True)
            handle_config_error(e, source_id)
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + repr(result))
        return SourceReadMapper.from_read(result)

    async def partial_update_source(
        self, source_id: str, source_patch_request: SourcePatchRequest
    ) -> SourceResponse:
        """Update a source with patch semantics, including within its configuration."""
        source_update = PartialSourceUpdate(
            source_id=source_id,
            name=source_patch_request.name,
            connection_configuration=source_patch_request.configuration,
            secret_id=source_patch_request.secret_id,
        )
        try:
            result = await self.source_handler.partial_update_source(source_update)
        except Exception as e:
            logger.error("Error for partial_update_source", exc_info=True)
            handle_config_error(e, source_id)
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + repr(result))
        return SourceReadMapper.from_read(result)

    async def delete_source(self, source_id: str) -> None:
        try:
            await self.source_handler.delete_source(SourceIdRequestBody(source_id=source_id))
        except Exception as e:
            logger.error("Error for delete_source", exc_info=True)
            handle_config_error(e, source_id)
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + f"deleted source {source_id}")

    async def get_source(self, source_id: str) -> SourceResponse:
        try:
            result = await self.source_handler.get_source(SourceIdRequestBody(source_id=source_id))
        except Exception as e:
            logger.error("Error for get_source", exc_info=True)
            handle_config_error(e, source_id)
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + repr(result))
        return SourceReadMapper.from_read(result)

    async def get_source_schema(self, source_id: str, disable_cache: bool) -> SourceDiscoverSchemaRead:
        """
        Discover the source's schema.

        A discover job that ran but did not succeed is reported as a 400
        carrying the connector's external message, or its internal
        message when no external one is available.
        """
        request = SourceDiscoverSchemaRequestBody(source_id=source_id, disable_cache=disable_cache)
        try:
            result = await self.scheduler_handler.discover_schema_for_source_from_source_id(request)
        except Exception as e:
            logger.error("Error for get_source_schema", exc_info=True)
            handle_config_error(e, source_id)
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + repr(result))

        job_info = result.job_info
        if not job_info.succeeded:
            error_message = CONNECTOR_FAILURE_MESSAGE
            reason = job_info.failure_reason
            if reason is not None and reason.external_message is not None:
                error_message += " logs:" + reason.external_message
            elif reason is not None and reason.internal_message is not None:
                error_message += " logs:" + reason.internal_message
            raise UnexpectedProblem(status.HTTP_400_BAD_REQUEST, error_message)
        return result

    async def list_sources_for_workspaces(
        self,
        workspace_ids: list[str],
        include_deleted: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> SourcesResponse:
        """List sources of the given workspaces, or of all the current user's workspaces."""
        workspace_ids_to_query = workspace_ids or await self.user_service.get_all_workspace_ids_for_user(
            self.current_user_service.current_user.user_id
        )
        request = ListResourcesForWorkspacesRequestBody(
            workspace_ids=workspace_ids_to_query,
            include_deleted=include_deleted,
            pagination=Pagination(page_size=limit, row_offset=offset),
        )
        try:
            result = await self.source_handler.list_sources_for_workspaces(request)
        except Exception as e:
            logger.error("Error for list_sources_for_workspaces", exc_info=True)
            handle_config_error(e, str(workspace_ids))
        logger.debug(HTTP_RESPONSE_BODY_DEBUG_MESSAGE + repr(result))
        return SourcesResponseMapper.from_read_list(
            result,
            workspace_ids,
            include_deleted,
            limit,
            offset,
            self.public_api_host,
        )

    async def controller_initiate_oauth(self, initiate_oauth_request: InitiateOauthRequest | None) -> Response:
        return Response(status_code=status.HTTP_501_NOT_IMPLEMENTED)
