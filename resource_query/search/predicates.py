"""
Compile validated filter conditions into SQLAlchemy predicates.

A field only ever reaches a query after two checks: its name passed the
syntax check in ``validators`` and it is in the caller's allow-list for
this table. Values are always bound as parameters.
"""
import uuid
from collections.abc import Iterable, Set
from datetime import date, datetime, time
from operator import eq, ge, gt, le, lt, ne

from sqlalchemy import Enum, String, cast, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from resource_query.core.exceptions import AccessError, FilterValueError, GrammarError
from resource_query.search.operators import (
    COMPARISON_OPERATORS,
    FilterCondition,
    Operator,
    is_set_operator,
)
from resource_query.search.relative_dates import resolve_relative_date
from resource_query.search.tables import TableDescriptor
from resource_query.search.values import is_numeric, normalize_value, split_list

LIKE_ESCAPE = "\\"

_COMPARATORS = {
    Operator.EQ: eq,
    Operator.NE: ne,
    Operator.GT: gt,
    Operator.LT: lt,
    Operator.GTE: ge,
    Operator.LTE: le,
}


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so user text only ever matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(text: str) -> str:
    return f"%{escape_like(text)}%"


def as_text(column) -> ColumnElement:
    """Return the column itself for text columns, otherwise a cast to text."""
    if isinstance(column.type, String) and not isinstance(column.type, Enum):
        return column
    return cast(column, String)


def ilike_contains(column, text: str) -> ColumnElement[bool]:
    return as_text(column).ilike(contains_pattern(text), escape=LIKE_ESCAPE)


def _python_type(column):
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _text_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)


def _parse_datetime(field: str, text: str) -> datetime:
    try:
        if "T" not in text and " " not in text and len(text) == 10:
            return datetime.combine(date.fromisoformat(text), time.min)
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise FilterValueError(
            f'Invalid datetime value for field "{field}": {text}',
            details={"field": field, "value": text},
        ) from None


def _adapt_scalar(python_type, field: str, value):
    """Bring one coerced value in line with the column's Python type."""
    if value is None:
        return None
    if python_type is str:
        return _text_value(value)
    if python_type is uuid.UUID and not isinstance(value, uuid.UUID):
        try:
            return uuid.UUID(str(value))
        except ValueError:
            raise FilterValueError(
                f'Invalid UUID value for field "{field}": {value}',
                details={"field": field, "value": value},
            ) from None
    if python_type is datetime and isinstance(value, str):
        return _parse_datetime(field, value)
    if python_type is date and isinstance(value, str):
        return _parse_datetime(field, value).date()
    return value


def _operand(column, condition: FilterCondition):
    python_type = _python_type(column)
    value = condition.value
    if python_type is str and condition.raw is not None:
        # text columns compare against the text the client sent, so "007" stays "007"
        value = normalize_value(condition.raw, is_set_operator(condition.operator), coerce=False)
    if isinstance(value, list):
        return [_adapt_scalar(python_type, condition.field, item) for item in value]
    return _adapt_scalar(python_type, condition.field, value)


def _first(value):
    """Scalar operators take the first element of a list; empty lists are skipped."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _as_list(value) -> list:
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        return split_list(value)
    return [value]


def _temporal_bound(column, moment: datetime):
    if _python_type(column) is date:
        return moment.date()
    if getattr(column.type, "timezone", False):
        return moment.astimezone()
    return moment


def _compile_between(column, condition: FilterCondition) -> ColumnElement[bool]:
    bounds = condition.value if isinstance(condition.value, list) else [condition.value]
    if len(bounds) != 2:
        raise FilterValueError(
            f'Invalid range for isBetween on field "{condition.field}": expected 2 values, got {len(bounds)}',
            details={"field": condition.field, "operator": condition.wire_name, "value": condition.value},
        )
    if not all(is_numeric(bound) for bound in bounds):
        raise FilterValueError(
            f'Invalid numeric range for isBetween on field "{condition.field}": {condition.value}',
            details={"field": condition.field, "operator": condition.wire_name, "value": condition.value},
        )
    return column.between(bounds[0], bounds[1])


def _compile_relative_date(column, condition: FilterCondition, today: date | None) -> ColumnElement[bool]:
    text = _first(condition.value)
    date_range = resolve_relative_date(str(text), today=today)
    bounds = None
    if date_range is not None:
        try:
            bounds = (_temporal_bound(column, date_range.start), _temporal_bound(column, date_range.end))
        except OverflowError:
            pass
    if bounds is None:
        raise FilterValueError(
            f'Invalid relative date format for field "{condition.field}": "{text}". '
            'Use: "last 7 days" or "next 30 days"',
            details={"field": condition.field, "operator": condition.wire_name, "value": text},
        )
    return column.between(*bounds)


def check_filter_fields(
    descriptor: TableDescriptor,
    allowed: Set[str],
    fields: Iterable[str],
) -> None:
    """Every field a filter names must be allow-listed, even one with no operators."""
    for field in fields:
        if field not in allowed:
            raise AccessError(f"Invalid filter field: {field}", details={"field": field})
        descriptor.column(field)


def compile_condition(
    descriptor: TableDescriptor,
    allowed: Set[str],
    condition: FilterCondition,
    today: date | None = None,
) -> ColumnElement[bool] | None:
    """
    Compile one condition, or return None when it should be skipped.

    Raises AccessError when the field is not allow-listed or missing from
    the table, FilterValueError when the value cannot serve the operator.
    """
    field = condition.field
    if field not in allowed:
        raise AccessError(f"Invalid filter field: {field}", details={"field": field})
    column = descriptor.column(field)
    op = condition.operator

    if op is Operator.IS_EMPTY:
        return column.is_(None)
    if op is Operator.IS_NOT_EMPTY:
        return column.is_not(None)

    if condition.value is None:
        return None

    if op in COMPARISON_OPERATORS:
        value = _first(_operand(column, condition))
        if value is None:
            return None
        return _COMPARATORS[op](column, value)

    if op in (Operator.MATCHES, Operator.NOT_MATCHES):
        text = _first(normalize_value(condition.raw, False, coerce=False))
        if text is None:
            return None
        predicate = ilike_contains(column, _text_value(text))
        return not_(predicate) if op is Operator.NOT_MATCHES else predicate

    if op in (Operator.IN, Operator.NOT_IN):
        values = [v for v in _as_list(_operand(column, condition)) if v is not None]
        if not values:
            return None
        return column.not_in(values) if op is Operator.NOT_IN else column.in_(values)

    if op is Operator.IS_BETWEEN:
        return _compile_between(column, condition)

    if op is Operator.IS_RELATIVE_TO_TODAY:
        return _compile_relative_date(column, condition, today)

    raise GrammarError(
        f"Unsupported filter operator: {condition.wire_name}",
        details={"field": field, "operator": condition.wire_name},
    )


def compile_filter(
    descriptor: TableDescriptor,
    allowed: Set[str],
    conditions: Iterable[FilterCondition],
    today: date | None = None,
) -> list[ColumnElement[bool]]:
    predicates = []
    for condition in conditions:
        predicate = compile_condition(descriptor, allowed, condition, today=today)
        if predicate is not None:
            predicates.append(predicate)
    return predicates


def compile_search(
    descriptor: TableDescriptor,
    columns: Iterable[str],
    text: str,
) -> ColumnElement[bool] | None:
    """OR together a case-insensitive substring match over every searchable column."""
    matches = [ilike_contains(descriptor.columns[name], text) for name in columns if descriptor.has(name)]
    if not matches:
        return None
    return or_(*matches)
