"""FastAPI router for the ProManage backend.

Usage:
    from fastapi import FastAPI
    from promanage.api import create_router
    from promanage import ProManage

    app = FastAPI()
    app.include_router(create_router(ProManage()))

Authentication happens upstream: the caller's user id arrives in the
``X-User-Id`` header.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic.alias_generators import to_camel

from promanage.config import AppConfig
from promanage.errors import NoStorageLocation, NotFound
from promanage.models.git import GitCredentials, GitProvider
from promanage.models.project import ConnectionType, MediaItem
from promanage.service import ProManage


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Authenticated user id, 401 when absent."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id


UserId = Annotated[str, Depends(get_user_id)]


# Request models
class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProjectRequest(RequestModel):
    id: str | int | None = None
    name: str = "Untitled"
    description: str = ""
    thumbnail: str | None = None
    media: list[MediaItem] = Field(default_factory=list)
    storage_location: str = ""
    connection_type: ConnectionType | None = None
    connection_path: str | None = None
    connection_provider: GitProvider | None = None
    organization: str | None = None


class DeleteProjectsRequest(RequestModel):
    ids: list[str | int]


class RefreshRequest(RequestModel):
    id: str | int


class GitConnectRequest(RequestModel):
    provider: GitProvider = GitProvider.GITHUB
    base_url: str | None = None
    username: str | None = None
    password: SecretStr | None = None
    token: SecretStr | None = None

    def credentials(self) -> GitCredentials:
        return GitCredentials(
            provider=self.provider,
            base_url=self.base_url,
            username=self.username,
            password=self.password,
            token=self.token,
        )


class GitImportRequest(GitConnectRequest):
    repo_url: str = Field(..., min_length=1)
    project_id: str | None = None


class NasImportRequest(RequestModel):
    nas_path: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: SecretStr
    project_id: str | None = None


class SettingsRequest(RequestModel):
    default_connection_type: ConnectionType | None = None
    connection_username: str | None = None
    connection_password: SecretStr | None = None
    github_token: SecretStr | None = None


def _project_json(project: BaseModel) -> dict[str, Any]:
    return project.model_dump(mode="json", by_alias=True)


def create_router(
    app: ProManage,
    prefix: str = "/api",
    tags: list[str] | None = None,
) -> APIRouter:
    """Create FastAPI router for a ProManage instance.

    Args:
        app: Application facade
        prefix: URL prefix for routes (default: /api)
        tags: OpenAPI tags

    Returns:
        APIRouter to include in FastAPI app
    """
    if tags is None:
        tags = ["promanage"]

    router = APIRouter(prefix=prefix, tags=tags)

    # --- Projects ---

    @router.get("/projects")
    async def list_projects(user_id: UserId) -> dict[str, Any]:
        """List projects, refreshing descriptions from desc.txt."""
        projects = await app.list_projects(user_id)
        return {"projects": [_project_json(p) for p in projects]}

    @router.post("/projects")
    async def save_project(body: ProjectRequest, user_id: UserId) -> dict[str, Any]:
        """Create or update a project."""
        project = await app.save_project(user_id, body.model_dump(exclude_none=True))
        return {"project": _project_json(project)}

    @router.delete("/projects")
    async def delete_projects(body: DeleteProjectsRequest, user_id: UserId) -> dict[str, int]:
        """Delete projects by id."""
        removed = await app.delete_projects(user_id, [str(i) for i in body.ids])
        return {"removed": removed}

    @router.post("/projects/refresh")
    async def refresh_project(body: RefreshRequest, user_id: UserId) -> dict[str, Any]:
        """Rescan a project's media folders."""
        try:
            project = await app.refresh_project(user_id, str(body.id))
        except NotFound:
            raise HTTPException(status_code=404, detail="Not found")
        except NoStorageLocation:
            raise HTTPException(status_code=400, detail="No storageLocation")
        return {"project": _project_json(project)}

    # --- Git providers ---

    @router.post("/git/connect")
    async def connect_git(body: GitConnectRequest, user_id: UserId) -> dict[str, Any]:
        """Verify and store provider credentials."""
        result = await app.connect_git(user_id, body.credentials())
        if not result.ok:
            raise HTTPException(status_code=400, detail=f"Git auth failed: {result.status}")
        return {"connected": True, "provider": body.provider.value}

    @router.get("/git/connect")
    async def reconnect_git(user_id: UserId) -> dict[str, Any]:
        """Re-verify stored provider credentials."""
        return {"connected": await app.reconnect_git(user_id)}

    @router.delete("/git/connect")
    async def disconnect_git(
        user_id: UserId,
        provider: GitProvider = GitProvider.GITHUB,
    ) -> dict[str, Any]:
        """Mark a provider disconnected."""
        await app.disconnect_git(user_id, provider)
        return {"connected": False, "provider": provider.value}

    @router.post("/git/import")
    async def import_readme(body: GitImportRequest, user_id: UserId) -> dict[str, str]:
        """Use a repository README's first line as project description."""
        description = await app.import_readme(
            user_id, body.repo_url, body.credentials(), project_id=body.project_id
        )
        if not description:
            raise HTTPException(status_code=400, detail="Failed to fetch README")
        return {"description": description}

    # --- NAS ---

    @router.post("/nas/import")
    async def import_nas(body: NasImportRequest, user_id: UserId) -> dict[str, Any]:
        """Read a NAS folder's description and link a project to it."""
        try:
            description, project = await app.import_nas(
                user_id,
                body.nas_path,
                body.username,
                body.password.get_secret_value(),
                project_id=body.project_id,
            )
        except NotFound:
            raise HTTPException(status_code=404, detail="Not found")
        response: dict[str, Any] = {"success": True, "description": description}
        if project is not None:
            response["project"] = _project_json(project)
        return response

    # --- Settings ---

    @router.get("/settings")
    async def get_settings(user_id: UserId) -> dict[str, Any]:
        """Get settings without encrypted secrets."""
        settings = await app.get_settings(user_id)
        return {"settings": settings.public_view() if settings else None}

    @router.post("/settings")
    async def update_settings(body: SettingsRequest, user_id: UserId) -> dict[str, Any]:
        """Update connection settings."""
        settings = await app.update_settings(
            user_id,
            default_connection_type=body.default_connection_type,
            connection_username=body.connection_username,
            connection_password=(
                body.connection_password.get_secret_value() if body.connection_password else None
            ),
            github_token=body.github_token.get_secret_value() if body.github_token else None,
        )
        return {"settings": settings.public_view()}

    return router


def create_app(config: AppConfig | None = None, app: ProManage | None = None) -> FastAPI:
    """Build a FastAPI application serving the ProManage API."""
    promanage = app or ProManage(config)
    api = FastAPI(title="ProManage API")
    api.include_router(create_router(promanage, prefix=promanage.config.api_prefix))
    return api
