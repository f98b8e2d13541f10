"""Project media folder scanner.

A project's storage root holds three structured subfolders::

    <root>/desc.txt
    <root>/photos/   -> image
    <root>/videos/   -> video
    <root>/models/   -> model

A refresh rebuilds the project's media list from those folders and replaces
the stored one wholesale.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from promanage.descfile import DescriptionFile, load_project_description
from promanage.errors import NoStorageLocation
from promanage.models.project import MediaItem, MediaType, ProjectRecord

logger = logging.getLogger(__name__)

MEDIA_FOLDERS: tuple[tuple[str, MediaType], ...] = (
    ("photos", MediaType.IMAGE),
    ("videos", MediaType.VIDEO),
    ("models", MediaType.MODEL),
)

EXTENSIONS: dict[MediaType, frozenset[str]] = {
    MediaType.IMAGE: frozenset({".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".tif", ".tiff"}),
    MediaType.VIDEO: frozenset({".mp4", ".mov", ".avi", ".mkv", ".webm"}),
    MediaType.MODEL: frozenset({".obj", ".fbx", ".gltf", ".glb", ".stl", ".dae"}),
}


def media_type_for(filename: str) -> MediaType | None:
    """Classify a file by extension (case-insensitive)."""
    ext = os.path.splitext(filename)[1].lower()
    for media_type, extensions in EXTENSIONS.items():
        if ext in extensions:
            return media_type
    return None


def _list_files(folder: Path) -> list[str]:
    """Regular file names in a folder, sorted. Missing or unreadable folders are empty."""
    try:
        with os.scandir(folder) as it:
            entries = list(it)
    except OSError as e:
        if not isinstance(e, FileNotFoundError):
            logger.warning("Cannot list media folder %s: %s", folder, e)
        return []

    names: list[str] = []
    for entry in entries:
        try:
            if entry.is_file():
                names.append(entry.name)
        except OSError as e:
            logger.warning("Skipping %s: %s", entry.path, e)
    return sorted(names)


def scan_media(root: Path, descriptions: DescriptionFile | None = None) -> list[MediaItem]:
    """Build the media inventory of a project root.

    Files are listed non-recursively per subfolder and sorted by name, so
    scanning an unchanged tree always gives the same list.
    """
    descriptions = descriptions or DescriptionFile()
    items: list[MediaItem] = []

    for folder_name, nominal_type in MEDIA_FOLDERS:
        folder = root / folder_name
        for name in _list_files(folder):
            items.append(
                MediaItem(
                    uri=str(folder / name),
                    description=descriptions.describe(name) or name,
                    type=media_type_for(name) or nominal_type,
                )
            )

    return items


def rebuild_project(project: ProjectRecord) -> ProjectRecord:
    """Synchronous body of :func:`refresh`."""
    if not project.storage_location:
        raise NoStorageLocation(f"Project {project.id} has no storage location")

    root = Path(project.storage_location)
    descriptions = load_project_description(root)
    media = scan_media(root, descriptions)
    description = descriptions.main or project.description

    logger.debug("Refreshed project %s: %d media items", project.id, len(media))
    return project.model_copy(update={"description": description, "media": media})


async def refresh(project: ProjectRecord) -> ProjectRecord:
    """Rescan a project's storage root and return the updated record.

    The returned record carries the ``main`` description from ``desc.txt``
    (or the previous description) and a freshly built media list. The input
    record is not modified.

    Raises:
        NoStorageLocation: The project has no storage location.
    """
    return await asyncio.to_thread(rebuild_project, project)
