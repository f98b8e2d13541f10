"""Project media inventory."""

from promanage.media.scanner import (
    EXTENSIONS,
    MEDIA_FOLDERS,
    media_type_for,
    refresh,
    scan_media,
)

__all__ = ["EXTENSIONS", "MEDIA_FOLDERS", "media_type_for", "refresh", "scan_media"]
