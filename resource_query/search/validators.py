"""Structural validation of filter expressions."""
import re
from collections.abc import Mapping, Sequence

from resource_query.config.settings import Settings, get_settings
from resource_query.core.exceptions import GrammarError
from resource_query.search.operators import WIRE_OPERATORS, FilterCondition, is_set_operator
from resource_query.search.values import normalize_value, split_list

FIELD_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def is_valid_field_name(name) -> bool:
    return isinstance(name, str) and bool(FIELD_NAME_RE.match(name))


def _scalar_problem(value, settings: Settings) -> str | None:
    if isinstance(value, str):
        if len(value) > settings.max_filter_string_length:
            return f"string longer than {settings.max_filter_string_length} characters"
        return None
    if isinstance(value, (bool, int, float)):
        return None
    return f"unsupported value type {type(value).__name__}"


def _raw_problem(raw, set_operator: bool, settings: Settings) -> str | None:
    """Length check on the text as sent, before digit strings become numbers."""
    if isinstance(raw, str):
        items = split_list(raw) if set_operator and "," in raw else [raw.strip()]
    elif isinstance(raw, Sequence):
        items = [item.strip() for item in raw if isinstance(item, str)]
    else:
        return None
    if any(len(item) > settings.max_filter_string_length for item in items):
        return f"string longer than {settings.max_filter_string_length} characters"
    return None


def _value_problem(value, settings: Settings) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        if len(value) > settings.max_filter_array_length:
            return f"more than {settings.max_filter_array_length} values"
        for item in value:
            problem = _scalar_problem(item, settings)
            if problem:
                return problem
        return None
    return _scalar_problem(value, settings)


def count_operations(raw: Mapping) -> int:
    return sum(len(ops) for ops in raw.values() if isinstance(ops, Mapping))


def validate_filter(raw, settings: Settings | None = None) -> list[FilterCondition]:
    """
    Validate the shape of a filter mapping and coerce its values.

    ``raw`` maps field name -> {operator name -> value}. Every problem
    found is collected and reported together in one GrammarError; nothing
    is returned unless the whole expression is valid. Whether a field may
    be used on a given table is checked later, by the predicate compiler.
    """
    settings = settings or get_settings()

    if raw is None:
        return []
    if not isinstance(raw, Mapping):
        raise GrammarError(
            "Filter must be a mapping of field names to operators",
            details={"errors": [{"message": "filter is not a mapping"}]},
        )

    errors: list[dict] = []
    conditions: list[FilterCondition] = []

    total = count_operations(raw)
    if total > settings.max_filter_operations:
        errors.append({
            "message": f"Too many filter operations (max {settings.max_filter_operations})",
            "count": total,
        })

    for field, ops in raw.items():
        if not is_valid_field_name(field) or len(field) > settings.max_filter_field_length:
            errors.append({"field": str(field), "message": "Invalid field name in filter"})
            continue
        if not isinstance(ops, Mapping):
            errors.append({"field": field, "message": "Expected a mapping of operators"})
            continue

        for wire_name, raw_value in ops.items():
            operator = WIRE_OPERATORS.get(wire_name)
            if operator is None:
                errors.append({
                    "field": field,
                    "operator": str(wire_name),
                    "message": "Unsupported filter operator",
                })
                continue

            set_operator = is_set_operator(operator)
            problem = _raw_problem(raw_value, set_operator, settings)
            if problem is None:
                value = normalize_value(raw_value, set_operator)
                problem = _value_problem(value, settings)
            if problem:
                errors.append({
                    "field": field,
                    "operator": wire_name,
                    "message": f"Invalid filter value: {problem}",
                })
                continue

            conditions.append(FilterCondition(field, operator, value, wire_name, raw=raw_value))

    if errors:
        fields = sorted({e["field"] for e in errors if "field" in e})
        if fields:
            message = f"Invalid filter for field(s): {', '.join(fields)}"
        else:
            message = "; ".join(e["message"] for e in errors)
        raise GrammarError(message, details={"fields": fields, "errors": errors})

    return conditions
