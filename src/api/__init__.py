"""HTTP API routers."""

from src.api.router import router, search_router

__all__ = ["router", "search_router"]
