"""API routers."""

from zeyra.routers.account import router as account_router
from zeyra.routers.health import router as health_router
from zeyra.routers.sync import router as sync_router

__all__ = ["account_router", "health_router", "sync_router"]
