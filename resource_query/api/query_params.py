"""
Bracketed query-string parsing.

Turns flat pairs such as ``filter[role][inArray]=admin,user`` into the
nested mapping list endpoints accept::

    {"filter": {"role": {"inArray": "admin,user"}}}

A repeated key collects its values into a list, and an empty bracket
(``fields[]=a&fields[]=b``) always produces a list.
"""
import re
from collections.abc import Iterable
from typing import Any

from resource_query.core.exceptions import GrammarError

MAX_DEPTH = 3

_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")


def _split_key(key: str) -> list[str] | None:
    match = _KEY_RE.match(key)
    if not match:
        return None
    root, brackets = match.groups()
    return [root, *_SEGMENT_RE.findall(brackets)]


def _conflict(key: str) -> GrammarError:
    return GrammarError(
        f"Conflicting query parameter: {key}",
        details={"field": key},
    )


def _assign(target: dict[str, Any], path: list[str], value: str, key: str, as_list: bool) -> None:
    node = target
    for segment in path[:-1]:
        if segment == "":
            raise _conflict(key)
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise _conflict(key)
        node = child

    leaf = path[-1]
    existing = node.get(leaf)
    if isinstance(existing, dict):
        raise _conflict(key)
    if existing is None:
        node[leaf] = [value] if as_list else value
    elif isinstance(existing, list):
        existing.append(value)
    else:
        node[leaf] = [existing, value]


def parse_bracket_query(pairs: Iterable[tuple[str, str]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        # keys that are not bracket syntax are kept verbatim
        path = _split_key(key) or [key]
        if len(path) - 1 > MAX_DEPTH:
            raise GrammarError(
                f"Query parameter nested too deeply: {key}",
                details={"field": key, "max_depth": MAX_DEPTH},
            )
        as_list = len(path) > 1 and path[-1] == ""
        if as_list:
            path = path[:-1]
        _assign(result, path, value, key, as_list)
    return result
