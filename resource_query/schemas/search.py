"""Query options accepted by list endpoints."""
import re
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from resource_query.config.settings import Settings, get_settings
from resource_query.core.exceptions import GrammarError, SortError

SORT_RE = re.compile(r"^-?[a-zA-Z_][a-zA-Z0-9_]*$")


def _settings(info: ValidationInfo) -> Settings:
    if info.context and info.context.get("settings") is not None:
        return info.context["settings"]
    return get_settings()


def _to_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if number.is_integer() else None
    return None


class QueryOptions(BaseModel):
    """
    Paging, sorting, search, projection and filter options for one list call.

    ``page`` and ``limit`` never fail: anything that is not a usable
    integer in range falls back to the configured default.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int | None = Field(default=None, validate_default=True)
    limit: int | None = Field(default=None, validate_default=True)
    sort: str | None = None
    search: str | None = None
    fields: list[str] | None = None
    filter: dict[str, Any] | None = None
    include_deleted: bool = Field(default=False, alias="includeDeleted")

    @field_validator("page", mode="before")
    @classmethod
    def _page(cls, value, info: ValidationInfo) -> int:
        settings = _settings(info)
        page = _to_int(value)
        if page is None or page < 1:
            return settings.default_page
        return page

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, value, info: ValidationInfo) -> int:
        settings = _settings(info)
        limit = _to_int(value)
        if limit is None or not settings.min_limit <= limit <= settings.max_limit:
            return settings.default_limit
        return limit

    @field_validator("sort", mode="before")
    @classmethod
    def _sort(cls, value, info: ValidationInfo):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if not isinstance(value, str):
            raise ValueError("Sort must be a string")
        value = value.strip()
        if len(value) > _settings(info).max_sort_length or not SORT_RE.match(value):
            raise ValueError("Invalid sort format")
        return value

    @field_validator("search", mode="before")
    @classmethod
    def _search(cls, value, info: ValidationInfo):
        if value is None or value == "":
            return None
        if not isinstance(value, str):
            raise ValueError("Search must be a string")
        settings = _settings(info)
        value = value.strip()
        if not settings.min_search_length <= len(value) <= settings.max_search_length:
            raise ValueError(
                f"Search must be between {settings.min_search_length} "
                f"and {settings.max_search_length} characters"
            )
        return value

    @field_validator("fields", mode="before")
    @classmethod
    def _fields(cls, value, info: ValidationInfo):
        if value is None or value == "":
            return None
        if isinstance(value, str):
            if len(value) > _settings(info).max_fields_length:
                raise ValueError("Fields list is too long")
            names = [name.strip() for name in value.split(",") if name.strip()]
        elif isinstance(value, Iterable):
            names = [str(name).strip() for name in value if str(name).strip()]
        else:
            raise ValueError("Fields must be a list or a comma separated string")
        return names or None

    @property
    def exclude_soft_deleted(self) -> bool:
        return not self.include_deleted

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def parse_query_options(raw: dict[str, Any], settings: Settings | None = None) -> QueryOptions:
    """
    Validate raw list parameters, mapping failures onto the query error taxonomy.

    A bad ``sort`` alone raises SortError; anything else (possibly together
    with ``sort``) raises one aggregated GrammarError.
    """
    settings = settings or get_settings()
    try:
        return QueryOptions.model_validate(raw, context={"settings": settings})
    except ValidationError as exc:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "(root)",
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        fields = [error["field"] for error in errors]
        if fields == ["sort"]:
            raise SortError(
                errors[0]["message"],
                details={"field": "sort", "value": raw.get("sort")},
            ) from None
        raise GrammarError(
            f"Invalid query parameters: {', '.join(fields)}",
            details={"fields": fields, "errors": errors},
        ) from None
