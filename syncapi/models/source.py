import uuid
from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from syncapi.database import Base


class SourceDefinition(Base):
    """A connector type. `spec` is a JSON schema-like object; its
    "required" list names the configuration keys every source must set."""

    __tablename__ = "source_definitions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(200))
    docker_repository: Mapped[str] = mapped_column(String(200))
    docker_image_tag: Mapped[str] = mapped_column(String(50), default="latest")
    spec: Mapped[dict] = mapped_column(JSON, default=dict)


class Source(Base):
    __tablename__ = "sources"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    workspace_id: Mapped[str] = mapped_column(String(36), ForeignKey("workspaces.id"))
    source_definition_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("source_definitions.id")
    )
    name: Mapped[str] = mapped_column(String(200))
    configuration: Mapped[dict] = mapped_column(JSON, default=dict)
    secret_id: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Soft delete
    tombstone: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC)
    )


class ActorCatalog(Base):
    """Discovered catalog, cached per source configuration."""

    __tablename__ = "actor_catalogs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    source_id: Mapped[str] = mapped_column(String(36), ForeignKey("sources.id"))
    config_hash: Mapped[str] = mapped_column(String(64), index=True)
    catalog: Mapped[dict] = mapped_column(JSON)
    fetched_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )


class Connection(Base):
    __tablename__ = "connections"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    source_id: Mapped[str] = mapped_column(String(36), ForeignKey("sources.id"))
    name: Mapped[str] = mapped_column(String(200))
    # "active", "inactive" or "deprecated"
    status: Mapped[str] = mapped_column(String(20), default="active")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=lambda: datetime.now(UTC)
    )
