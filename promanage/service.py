"""Main ProManage class - orchestrates providers, media scans and the store."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any

import httpx

from promanage.config import AppConfig
from promanage.descfile import find_description_file, load_project_description, parse_desc_file
from promanage.errors import EncryptionError, NoStorageLocation, NotFound
from promanage.media.scanner import MEDIA_FOLDERS, refresh
from promanage.models.git import GitCredentials, GitProvider, VerifyResult
from promanage.models.project import ConnectionType, ProjectRecord
from promanage.models.settings import UserSettings
from promanage.providers.registry import fetch_readme_first_line, verify_git_connection
from promanage.security import CredentialCipher
from promanage.store import JsonStore, StoreData

logger = logging.getLogger(__name__)


class ProManage:
    """Application facade used by the HTTP API and the CLI.

    Args:
        config: Application configuration
        transport: Optional httpx transport for all provider requests (tests
            pass an ``httpx.MockTransport``)
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or AppConfig()
        self.store = JsonStore(self.config.store_path)
        self.cipher = CredentialCipher(self.config.secret)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.http_timeout, transport=self._transport)

    # --- Git providers ---

    async def verify(self, credentials: GitCredentials) -> VerifyResult:
        async with self._client() as client:
            return await verify_git_connection(
                credentials,
                client=client,
                user_agent=self.config.user_agent,
                gitlab_url=self.config.gitlab_url,
            )

    async def fetch_readme(self, credentials: GitCredentials, repo_url: str) -> str | None:
        async with self._client() as client:
            return await fetch_readme_first_line(
                credentials,
                repo_url,
                client=client,
                user_agent=self.config.user_agent,
                gitlab_url=self.config.gitlab_url,
            )

    async def connect_git(self, user_id: str, credentials: GitCredentials) -> VerifyResult:
        """Verify credentials and, on success, store them encrypted."""
        result = await self.verify(credentials)
        if not result.ok:
            return result

        settings = await self.store.get_settings(user_id) or UserSettings()
        conn = settings.connection(credentials.provider)
        if credentials.provider == GitProvider.GITLAB:
            conn.base_url = credentials.base_url or self.config.gitlab_url
        elif credentials.provider == GitProvider.GITEA:
            conn.base_url = credentials.base_url
        if credentials.has_token:
            conn.token_enc = self.cipher.encrypt(credentials.token_value)
        if credentials.has_basic:
            conn.username = credentials.username
            conn.password_enc = self.cipher.encrypt(credentials.password_value)
        conn.connected = True

        await self.store.set_settings(user_id, settings)
        logger.info("User %s connected %s", user_id, credentials.provider.value)
        return result

    def stored_credentials(
        self, settings: UserSettings | None, provider: GitProvider
    ) -> GitCredentials | None:
        """Decrypted credentials for a linked provider, or None."""
        if settings is None:
            return None
        conn = settings.git.get(provider)
        if conn is None or not conn.has_credentials:
            return None
        try:
            password = self.cipher.decrypt_optional(conn.password_enc)
            token = self.cipher.decrypt_optional(conn.token_enc)
        except EncryptionError as e:
            logger.warning("Stored %s credentials are unreadable: %s", provider.value, e)
            return None
        return GitCredentials(
            provider=provider,
            base_url=conn.base_url,
            username=conn.username,
            password=password,
            token=token,
        )

    async def reconnect_git(self, user_id: str) -> dict[str, bool]:
        """Re-verify every stored provider connection."""
        settings = await self.store.get_settings(user_id)
        pending: dict[GitProvider, GitCredentials] = {}
        for provider in GitProvider:
            creds = self.stored_credentials(settings, provider)
            if creds is None:
                continue
            if provider == GitProvider.GITEA and not creds.base_url:
                continue
            pending[provider] = creds

        results = await asyncio.gather(*(self.verify(c) for c in pending.values()))
        return {p.value: r.ok for p, r in zip(pending, results)}

    async def disconnect_git(self, user_id: str, provider: GitProvider = GitProvider.GITHUB) -> None:
        """Mark a provider disconnected; stored credentials are kept."""
        settings = await self.store.get_settings(user_id) or UserSettings()
        settings.connection(provider).connected = False
        await self.store.set_settings(user_id, settings)

    async def import_readme(
        self,
        user_id: str,
        repo_url: str,
        credentials: GitCredentials,
        project_id: str | None = None,
    ) -> str | None:
        """Fetch the README first line and use it as a project's description.

        Credentials without a token or password fall back to the stored ones
        for the same provider. Returns None when no description was found;
        the project is left unchanged in that case.
        """
        if not credentials.has_token and not credentials.has_basic:
            stored = self.stored_credentials(
                await self.store.get_settings(user_id), credentials.provider
            )
            if stored is not None:
                credentials = stored

        description = await self.fetch_readme(credentials, repo_url)
        if not description:
            logger.info("No README description for %s", repo_url)
            return None

        if project_id:
            def mutate(data: StoreData) -> None:
                idx = data.find_project(user_id, project_id)
                if idx < 0:
                    return
                data.projects[idx] = data.projects[idx].model_copy(
                    update={
                        "description": description,
                        "connection_type": ConnectionType.GIT,
                        "connection_path": repo_url,
                        "connection_provider": credentials.provider,
                    }
                )

            await self.store.update(mutate)
        return description

    async def import_nas(
        self,
        user_id: str,
        nas_path: str,
        username: str,
        password: str,
        project_id: str | None = None,
    ) -> tuple[str, ProjectRecord | None]:
        """Read a NAS folder's description file and link a project to it.

        Returns the description text and, when ``project_id`` names an
        existing project, that project after an immediate refresh.

        Raises:
            NotFound: ``project_id`` names no project of the user. Nothing is
                stored in that case.
        """
        project = None
        if project_id:
            project = await self.store.get_project(user_id, project_id)
            if project is None:
                raise NotFound(f"Project not found: {project_id}")

        settings = await self.store.get_settings(user_id) or UserSettings()
        settings.connection_username = username
        settings.connection_password_enc = self.cipher.encrypt(password)
        await self.store.set_settings(user_id, settings)

        description = await asyncio.to_thread(self._read_nas_description, Path(nas_path))
        if project is None:
            return description, None

        await self.store.upsert_project(
            project.model_copy(
                update={
                    "storage_location": nas_path,
                    "connection_type": ConnectionType.NAS,
                    "connection_path": nas_path,
                }
            )
        )
        return description, await self.refresh_project(user_id, project_id)

    @staticmethod
    def _read_nas_description(folder: Path) -> str:
        path = find_description_file(folder)
        if path is None:
            return ""
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read NAS description %s: %s", path, e)
            return ""
        parsed = parse_desc_file(text)
        return parsed.main or text.strip()

    # --- Projects ---

    async def refresh_project(self, user_id: str, project_id: str) -> ProjectRecord:
        """Rescan a project's media folders and store the result.

        Raises:
            NotFound: The user has no project with this id.
            NoStorageLocation: The project has no storage location.
        """
        project = await self.store.get_project(user_id, project_id)
        if project is None:
            raise NotFound(f"Project not found: {project_id}")
        if not project.storage_location:
            raise NoStorageLocation(f"Project {project_id} has no storage location")

        updated = await refresh(project)

        def mutate(data: StoreData) -> ProjectRecord:
            idx = data.find_project(user_id, project_id)
            if idx < 0:
                raise NotFound(f"Project not found: {project_id}")
            data.projects[idx] = data.projects[idx].model_copy(
                update={"description": updated.description, "media": updated.media}
            )
            return data.projects[idx]

        return await self.store.update(mutate)

    async def list_projects(self, user_id: str) -> list[ProjectRecord]:
        """List a user's projects, picking up edited ``desc.txt`` main descriptions."""
        projects = await self.store.list_projects(user_id)

        changed: dict[str, str] = {}
        for project in projects:
            if not project.storage_location:
                continue
            parsed = await asyncio.to_thread(
                load_project_description, Path(project.storage_location)
            )
            if parsed.main and parsed.main != project.description:
                changed[project.id] = parsed.main

        if not changed:
            return projects

        def mutate(data: StoreData) -> None:
            for idx, p in enumerate(data.projects):
                if p.user_id == user_id and p.id in changed:
                    data.projects[idx] = p.model_copy(update={"description": changed[p.id]})

        await self.store.update(mutate)
        return [
            p.model_copy(update={"description": changed[p.id]}) if p.id in changed else p
            for p in projects
        ]

    async def save_project(self, user_id: str, fields: dict[str, Any]) -> ProjectRecord:
        """Create or replace a project.

        A ``desc.txt`` main description overrides the given one, and the
        media subfolders are created under the storage location.
        """
        fields = {k: v for k, v in fields.items() if k not in ("user_id", "userId")}
        record = ProjectRecord.model_validate(
            {
                **fields,
                "id": str(fields.get("id") or int(time.time() * 1000)),
                "user_id": user_id,
            }
        )
        if record.storage_location:
            root = Path(record.storage_location)
            parsed = await asyncio.to_thread(load_project_description, root)
            if parsed.main:
                record.description = parsed.main
            await asyncio.to_thread(self._ensure_media_folders, root)
        return await self.store.upsert_project(record)

    @staticmethod
    def _ensure_media_folders(root: Path) -> None:
        for folder_name, _ in MEDIA_FOLDERS:
            try:
                (root / folder_name).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning("Cannot create %s: %s", root / folder_name, e)

    async def delete_projects(self, user_id: str, ids: list[str]) -> int:
        return await self.store.delete_projects(user_id, ids)

    # --- Settings ---

    async def get_settings(self, user_id: str) -> UserSettings | None:
        return await self.store.get_settings(user_id)

    async def update_settings(
        self,
        user_id: str,
        *,
        default_connection_type: ConnectionType | None = None,
        connection_username: str | None = None,
        connection_password: str | None = None,
        github_token: str | None = None,
    ) -> UserSettings:
        """Update general settings. Only given values change; secrets are encrypted."""
        settings = await self.store.get_settings(user_id) or UserSettings()
        if default_connection_type is not None:
            settings.default_connection_type = default_connection_type
        if connection_username is not None:
            settings.connection_username = connection_username
        if connection_password:
            settings.connection_password_enc = self.cipher.encrypt(connection_password)
        if github_token:
            settings.connection(GitProvider.GITHUB).token_enc = self.cipher.encrypt(github_token)
        return await self.store.set_settings(user_id, settings)
