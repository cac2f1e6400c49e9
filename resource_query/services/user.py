"""User listing built on the generic search engine."""
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resource_query.config.settings import Settings, get_settings
from resource_query.models.enums import UserRole
from resource_query.models.user import User
from resource_query.schemas.pagination import ResultPage
from resource_query.schemas.search import QueryOptions
from resource_query.search import GenericSearchService, TableDescriptor

USERS_TABLE = TableDescriptor.from_table(User, soft_delete_column=get_settings().soft_delete_column)

# Never includes password or the OAuth provider ids
USER_PUBLIC_COLUMNS = (
    "id",
    "name",
    "email",
    "mobile_no",
    "onboarding",
    "profession",
    "company",
    "address",
    "city",
    "state",
    "country",
    "avatar_url",
    "timezone",
    "language",
    "login_method",
    "role",
    "is_active",
    "is_banned",
    "created_at",
    "updated_at",
)

ADMIN_ONLY_COLUMNS = ("deleted_at", "deleted_by")

DEFAULT_USER_SORT = "-created_at"


def get_visible_columns(role: str | None) -> tuple[str, ...]:
    """Columns a caller with ``role`` may filter, sort, search and read."""
    if role in (UserRole.ADMIN.value, UserRole.SUPERADMIN.value):
        return USER_PUBLIC_COLUMNS + ADMIN_ONLY_COLUMNS
    return USER_PUBLIC_COLUMNS


class UserService:
    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ):
        self._search = GenericSearchService(session_maker, settings)

    async def list_users(
        self,
        options: QueryOptions,
        role: str | None = None,
    ) -> ResultPage[dict[str, Any]]:
        """List users, newest first unless the caller asks for another order."""
        if not options.sort:
            options = options.model_copy(update={"sort": DEFAULT_USER_SORT})
        return await self._search.search(USERS_TABLE, get_visible_columns(role), options)
