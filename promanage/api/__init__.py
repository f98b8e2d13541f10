"""FastAPI router for ProManage."""

from promanage.api.routes import create_app, create_router

__all__ = ["create_app", "create_router"]
