"""ORM models."""
from resource_query.models.enums import LoginMethod, UserRole
from resource_query.models.user import User

__all__ = ["User", "UserRole", "LoginMethod"]
