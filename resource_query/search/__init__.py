"""
Generic resource query engine.

Turns untrusted list parameters (filter, search, sort, projection, paging)
into parameter-bound SQLAlchemy statements over one table.
"""
from resource_query.search.operators import WIRE_OPERATORS, FilterCondition, Operator
from resource_query.search.predicates import (
    check_filter_fields,
    compile_condition,
    compile_filter,
    compile_search,
    escape_like,
)
from resource_query.search.relative_dates import DateRange, resolve_relative_date
from resource_query.search.service import GenericSearchService, SearchStatements, build_search_statements
from resource_query.search.tables import TableDescriptor
from resource_query.search.validators import validate_filter
from resource_query.search.values import coerce_primitive, normalize_value

__all__ = [
    "Operator",
    "WIRE_OPERATORS",
    "FilterCondition",
    "coerce_primitive",
    "normalize_value",
    "validate_filter",
    "DateRange",
    "resolve_relative_date",
    "check_filter_fields",
    "compile_condition",
    "compile_filter",
    "compile_search",
    "escape_like",
    "TableDescriptor",
    "SearchStatements",
    "build_search_statements",
    "GenericSearchService",
]
