"""Current user resolution and workspace membership lookups."""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from syncapi.config import settings
from syncapi.models.workspace import WorkspaceMember


@dataclass(frozen=True)
class CurrentUser:
    user_id: str


class CurrentUserService:
    def __init__(self, user_id: str | None = None):
        self._user_id = user_id or settings.default_user_id

    @property
    def current_user(self) -> CurrentUser:
        return CurrentUser(user_id=self._user_id)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all_workspace_ids_for_user(self, user_id: str) -> list[str]:
        result = await self.db.execute(
            select(WorkspaceMember.workspace_id)
            .where(WorkspaceMember.user_id == user_id)
            .order_by(WorkspaceMember.workspace_id)
        )
        return list(result.scalars().all())
