"""API routers."""

from todo_api.routers.auth import router as auth_router
from todo_api.routers.health import router as health_router
from todo_api.routers.todos import router as todos_router

__all__ = ["auth_router", "todos_router", "health_router"]
