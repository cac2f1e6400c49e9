"""API routes module."""
from resource_query.api.routes.users import router as users_router

__all__ = [
    "users_router",
]
