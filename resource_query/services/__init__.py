"""Resource services."""
from resource_query.services.user import UserService

__all__ = ["UserService"]
