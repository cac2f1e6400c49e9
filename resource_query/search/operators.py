"""Filter operators and their wire names."""
from dataclasses import dataclass
from enum import Enum
from typing import Any

from resource_query.search.values import Value


class Operator(str, Enum):
    EQ = "eq"
    NE = "ne"
    GT = "gt"
    LT = "lt"
    GTE = "gte"
    LTE = "lte"
    MATCHES = "matches"
    NOT_MATCHES = "notMatches"
    IN = "in"
    NOT_IN = "notIn"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
    IS_BETWEEN = "isBetween"
    IS_RELATIVE_TO_TODAY = "isRelativeToToday"


# Operator names accepted in a request's filter mapping
WIRE_OPERATORS: dict[str, Operator] = {
    "eq": Operator.EQ,
    "ne": Operator.NE,
    "gt": Operator.GT,
    "lt": Operator.LT,
    "gte": Operator.GTE,
    "lte": Operator.LTE,
    "iLike": Operator.MATCHES,
    "notILike": Operator.NOT_MATCHES,
    "inArray": Operator.IN,
    "in": Operator.IN,
    "notInArray": Operator.NOT_IN,
    "isEmpty": Operator.IS_EMPTY,
    "isNotEmpty": Operator.IS_NOT_EMPTY,
    "isBetween": Operator.IS_BETWEEN,
    "isRelativeToToday": Operator.IS_RELATIVE_TO_TODAY,
}

SET_OPERATORS = frozenset({Operator.IN, Operator.NOT_IN, Operator.IS_BETWEEN})

COMPARISON_OPERATORS = frozenset(
    {Operator.EQ, Operator.NE, Operator.GT, Operator.LT, Operator.GTE, Operator.LTE}
)

NULL_OPERATORS = frozenset({Operator.IS_EMPTY, Operator.IS_NOT_EMPTY})


def is_set_operator(operator: Operator) -> bool:
    return operator in SET_OPERATORS


@dataclass(frozen=True)
class FilterCondition:
    """One validated (field, operator, value) triple."""
    field: str
    operator: Operator
    value: Value
    wire_name: str
    raw: Any = None
