"""Generic search over one table: filter, search, project, sort and paginate."""
import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from sqlalchemy import Select, and_, asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from resource_query.config.settings import Settings, get_settings
from resource_query.core.exceptions import ProjectionError, QueryError, SortError
from resource_query.core.logging import get_logger
from resource_query.schemas.pagination import Pagination, ResultPage
from resource_query.schemas.search import QueryOptions, parse_query_options
from resource_query.search.predicates import check_filter_fields, compile_filter, compile_search
from resource_query.search.tables import TableDescriptor
from resource_query.search.validators import validate_filter

logger = get_logger(__name__)


@dataclass(frozen=True)
class SearchStatements:
    """The page query and the count query, sharing one where clause."""
    page: Select
    count: Select
    where: ColumnElement[bool] | None
    selected: tuple[str, ...]


def resolve_projection(
    descriptor: TableDescriptor,
    columns: Sequence[str],
    fields: Sequence[str] | None,
) -> list[str]:
    """Requested fields intersected with the allow-list, or every allow-listed column."""
    allowed = set(columns)
    if fields:
        selected = [name for name in dict.fromkeys(fields) if name in allowed and descriptor.has(name)]
        if not selected:
            raise ProjectionError("No valid fields specified", details={"fields": list(fields)})
        return selected

    selected = [name for name in dict.fromkeys(columns) if descriptor.has(name)]
    if not selected:
        raise ProjectionError("No valid fields specified", details={"fields": list(columns)})
    return selected


def resolve_sort(
    descriptor: TableDescriptor,
    columns: Sequence[str],
    sort: str | None,
) -> ColumnElement | None:
    if not sort:
        return None
    descending = sort.startswith("-")
    name = sort[1:] if descending else sort
    if name not in columns or not descriptor.has(name):
        raise SortError(f"Invalid sort field: {name}", details={"field": name})
    column = descriptor.columns[name]
    return desc(column) if descending else asc(column)


def build_search_statements(
    descriptor: TableDescriptor,
    columns: Sequence[str],
    options: QueryOptions,
    settings: Settings | None = None,
    today: date | None = None,
) -> SearchStatements:
    """
    Compile the options into a page SELECT and a COUNT over the same predicate.

    Pure: nothing is executed. Every client-input error (bad filter, field
    outside the allow-list, bad projection or sort) is raised from here, so
    a rejected call never reaches the database.
    """
    allowed = frozenset(columns)
    conditions: list[ColumnElement[bool]] = []

    if options.exclude_soft_deleted and descriptor.soft_delete is not None:
        conditions.append(descriptor.soft_delete.is_(None))

    if options.filter:
        parsed = validate_filter(options.filter, settings)
        check_filter_fields(descriptor, allowed, options.filter)
        conditions.extend(compile_filter(descriptor, allowed, parsed, today=today))

    if options.search:
        search_predicate = compile_search(descriptor, columns, options.search)
        if search_predicate is not None:
            conditions.append(search_predicate)

    where = and_(*conditions) if conditions else None

    selected = resolve_projection(descriptor, columns, options.fields)
    order_by = resolve_sort(descriptor, columns, options.sort)

    page_query = select(*(descriptor.columns[name] for name in selected)).select_from(descriptor.table)
    count_query = select(func.count()).select_from(descriptor.table)
    if where is not None:
        page_query = page_query.where(where)
        count_query = count_query.where(where)
    if order_by is not None:
        page_query = page_query.order_by(order_by)
    page_query = page_query.limit(options.limit).offset(options.offset)

    return SearchStatements(
        page=page_query,
        count=count_query,
        where=where,
        selected=tuple(selected),
    )


class GenericSearchService:
    """
    Runs list queries for any table described by a TableDescriptor.

    The page and the total are fetched concurrently on two sessions from
    the same factory. They are not snapshot-consistent with each other:
    under concurrent writes the total may be marginally stale.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ):
        self._session_maker = session_maker
        self._settings = settings or get_settings()

    async def search(
        self,
        descriptor: TableDescriptor,
        columns: Sequence[str],
        options: QueryOptions | Mapping[str, Any],
        today: date | None = None,
    ) -> ResultPage[dict[str, Any]]:
        """
        Return one page of rows plus pagination metadata.

        Args:
            descriptor: Table to query
            columns: Allow-listed field names for this caller
            options: Parsed QueryOptions, or the raw parameter mapping
            today: Anchor for relative date filters (defaults to the local date)

        Raises:
            QueryError: Client-input problem; no query was issued
            sqlalchemy.exc.SQLAlchemyError: Store failure, propagated unchanged
        """
        try:
            if not isinstance(options, QueryOptions):
                options = parse_query_options(dict(options), self._settings)
            statements = build_search_statements(
                descriptor, columns, options, settings=self._settings, today=today
            )
        except QueryError as exc:
            logger.info(
                "search_rejected",
                table=descriptor.name,
                code=exc.code,
                error=exc.message,
                details=exc.details,
            )
            raise

        logger.debug(
            "search_compiled",
            table=descriptor.name,
            page=options.page,
            limit=options.limit,
            sort=options.sort,
            has_filter=bool(options.filter),
            has_search=bool(options.search),
            fields=list(statements.selected),
        )

        items, total = await self._execute(descriptor, statements)
        pagination = Pagination.build(options.page, options.limit, total)

        logger.debug(
            "search_completed",
            table=descriptor.name,
            total=total,
            returned=len(items),
            total_pages=pagination.total_pages,
        )
        return ResultPage[dict[str, Any]](items=items, pagination=pagination)

    async def _fetch_page(self, statement: Select) -> list[dict[str, Any]]:
        async with self._session_maker() as session:
            result = await session.execute(statement)
            return [dict(row) for row in result.mappings().all()]

    async def _fetch_total(self, statement: Select) -> int:
        async with self._session_maker() as session:
            result = await session.execute(statement)
            return int(result.scalar_one() or 0)

    async def _execute(
        self,
        descriptor: TableDescriptor,
        statements: SearchStatements,
    ) -> tuple[list[dict[str, Any]], int]:
        page_task = asyncio.create_task(self._fetch_page(statements.page))
        count_task = asyncio.create_task(self._fetch_total(statements.count))
        try:
            items, total = await asyncio.gather(page_task, count_task)
        except Exception:
            logger.error("search_query_failed", table=descriptor.name, exc_info=True)
            for task in (page_task, count_task):
                task.cancel()
            await asyncio.gather(page_task, count_task, return_exceptions=True)
            raise
        return items, total
