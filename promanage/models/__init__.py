"""Data models for ProManage."""

from promanage.models.git import GitCredentials, GitProvider, VerifyResult
from promanage.models.project import ConnectionType, MediaItem, MediaType, ProjectRecord
from promanage.models.settings import GitConnection, UserSettings

__all__ = [
    # Git
    "GitCredentials",
    "GitProvider",
    "VerifyResult",
    # Projects
    "ConnectionType",
    "MediaItem",
    "MediaType",
    "ProjectRecord",
    # Settings
    "GitConnection",
    "UserSettings",
]
