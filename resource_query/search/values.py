"""
Coercion of wire-format filter values.

Query strings deliver everything as text, so "42" has to become 42 and
"true" has to become True before a predicate can be built. The result is
one of the builtin types below; the predicate compiler dispatches on them
with isinstance checks.
"""
import re
from collections.abc import Sequence

Scalar = str | int | float | bool | None
Value = Scalar | list[Scalar]

_INTEGER_RE = re.compile(r"^-?\d+$")
_DECIMAL_RE = re.compile(r"^-?\d+\.\d+$")


def coerce_primitive(value):
    """
    Coerce a primitive-like string to its typed form.

    - "true" / "false" (any case) -> bool
    - "123" -> 123
    - "12.34" -> 12.34
    - anything else -> the trimmed string

    Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value

    text = value.strip()
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INTEGER_RE.match(text):
        try:
            return int(text)
        except ValueError:
            # past the interpreter's digit limit; leave it as text
            return text
    if _DECIMAL_RE.match(text):
        return float(text)
    return text


def split_list(text: str) -> list[str]:
    """Split a comma-joined string, trimming segments and dropping empty ones."""
    return [part.strip() for part in text.split(",") if part.strip()]


def normalize_value(raw, set_operator: bool, coerce: bool = True):
    """
    Normalize a raw filter value for an operator.

    Sequences are coerced element-wise. A comma-containing string is split
    into a list only when the operator expects a set; otherwise the value is
    coerced as a single primitive. With ``coerce=False`` strings are only
    trimmed, which keeps text such as "007" intact for text columns.
    """
    convert = coerce_primitive if coerce else _trim

    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        return [convert(item) for item in raw]

    if set_operator and isinstance(raw, str) and "," in raw:
        return [convert(part) for part in split_list(raw)]

    return convert(raw)


def _trim(value):
    return value.strip() if isinstance(value, str) else value


def is_numeric(value) -> bool:
    # bool is an int subclass but never a valid number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)
