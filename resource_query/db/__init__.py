"""Database package."""
from resource_query.db.database import Base, get_session_maker

__all__ = ["Base", "get_session_maker"]
