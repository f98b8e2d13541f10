"""Project and media models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from promanage.models.git import GitProvider


class MediaType(str, Enum):
    """Kind of media file found in a project folder."""
    IMAGE = "image"
    VIDEO = "video"
    MODEL = "model"


class ConnectionType(str, Enum):
    """Where a project's content comes from."""
    NAS = "nas"
    GIT = "git"


class StoreModel(BaseModel):
    """Base for records persisted with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MediaItem(StoreModel):
    """A single media file attached to a project."""

    uri: str = Field(..., description="Filesystem path")
    description: str = ""
    type: MediaType


class ProjectRecord(StoreModel):
    """A tracked project."""

    id: str
    user_id: str
    name: str = "Untitled"
    description: str = ""
    thumbnail: str | None = None
    media: list[MediaItem] = Field(default_factory=list)
    storage_location: str = Field(default="", description="Filesystem root of the project")
    connection_type: ConnectionType | None = None
    connection_path: str | None = None
    connection_provider: GitProvider | None = None
    organization: str | None = None
