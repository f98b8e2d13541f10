"""JSON file store for projects and user settings.

The whole store is one JSON document read and written at once. Concurrent
writers within a process are serialized by :meth:`JsonStore.update`; between
processes the last write wins.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from pydantic import Field, ValidationError

from promanage.models.project import ProjectRecord, StoreModel
from promanage.models.settings import UserSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreData(StoreModel):
    """Top-level store document."""

    users: list[dict[str, Any]] = Field(default_factory=list)  # owned by the auth layer
    projects: list[ProjectRecord] = Field(default_factory=list)
    settings: dict[str, UserSettings] = Field(default_factory=dict)

    def find_project(self, user_id: str, project_id: str) -> int:
        """Index of a user's project, or -1."""
        for idx, project in enumerate(self.projects):
            if project.user_id == user_id and project.id == project_id:
                return idx
        return -1


class JsonStore:
    """Whole-file JSON persistence."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = asyncio.Lock()

    def _ensure(self) -> None:
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write_sync(StoreData())

    def _read_sync(self) -> StoreData:
        self._ensure()
        raw = self.path.read_text(encoding="utf-8")
        try:
            return StoreData.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Store %s is corrupt, starting empty: %s", self.path, e)
            data = StoreData()
            self._write_sync(data)
            return data

    def _write_sync(self, data: StoreData) -> None:
        payload = data.model_dump(mode="json", by_alias=True, exclude_none=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    async def read(self) -> StoreData:
        return await asyncio.to_thread(self._read_sync)

    async def write(self, data: StoreData) -> None:
        await asyncio.to_thread(self._write_sync, data)

    async def update(self, mutate: Callable[[StoreData], T]) -> T:
        """Read, apply ``mutate`` and write back under the store lock.

        Exceptions from ``mutate`` abort the update without writing.
        """
        async with self._lock:
            data = await self.read()
            result = mutate(data)
            await self.write(data)
            return result

    # --- Projects ---

    async def list_projects(self, user_id: str) -> list[ProjectRecord]:
        data = await self.read()
        return [p for p in data.projects if p.user_id == user_id]

    async def get_project(self, user_id: str, project_id: str) -> ProjectRecord | None:
        data = await self.read()
        idx = data.find_project(user_id, project_id)
        return data.projects[idx] if idx >= 0 else None

    async def upsert_project(self, project: ProjectRecord) -> ProjectRecord:
        def mutate(data: StoreData) -> ProjectRecord:
            idx = data.find_project(project.user_id, project.id)
            if idx >= 0:
                data.projects[idx] = project
            else:
                data.projects.append(project)
            return project

        return await self.update(mutate)

    async def delete_projects(self, user_id: str, ids: list[str]) -> int:
        """Delete a user's projects by id, returning how many were removed."""
        wanted = set(ids)

        def mutate(data: StoreData) -> int:
            before = len(data.projects)
            data.projects = [
                p for p in data.projects if p.user_id != user_id or p.id not in wanted
            ]
            return before - len(data.projects)

        return await self.update(mutate)

    # --- Settings ---

    async def get_settings(self, user_id: str) -> UserSettings | None:
        data = await self.read()
        return data.settings.get(user_id)

    async def set_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        def mutate(data: StoreData) -> UserSettings:
            data.settings[user_id] = settings
            return settings

        return await self.update(mutate)
