import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from syncapi.config import settings
from syncapi.database import Base, get_db
from syncapi.main import app
from syncapi.models import job, source, workspace  # noqa: F401
from syncapi.models.source import SourceDefinition
from syncapi.models.workspace import Workspace, WorkspaceMember


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite for tests."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)

    async def _get_test_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    yield factory
    app.dependency_overrides.clear()
    await engine.dispose()


@pytest_asyncio.fixture
async def client(session_factory):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c


@pytest_asyncio.fixture
async def seeded(session_factory):
    """Two workspaces (only the first one belongs to the default user) and a
    Postgres source definition requiring a "host" key."""
    async with session_factory() as db:
        ws = Workspace(name="Analytics")
        other_ws = Workspace(name="Marketing")
        definition = SourceDefinition(
            name="Postgres",
            docker_repository="syncapi/source-postgres",
            docker_image_tag="1.0.0",
            spec={"required": ["host"], "default_streams": ["orders", "customers"]},
        )
        db.add_all([ws, other_ws, definition])
        await db.flush()
        db.add(WorkspaceMember(user_id=settings.default_user_id, workspace_id=ws.id))
        await db.commit()

        return {
            "workspace_id": ws.id,
            "other_workspace_id": other_ws.id,
            "definition_id": definition.id,
        }
