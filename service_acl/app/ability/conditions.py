"""
Condition matcher for rule conditions.

Conditions are Mongo-style queries over the attributes of a subject
instance::

    {"ownerId": "u1"}
    {"status": {"$in": ["draft", "review"]}, "meta.archived": {"$ne": True}}
    {"$or": [{"public": True}, {"ownerId": "u1"}]}

Dotted paths walk mappings, attributes and list indexes. A field holding a
list matches a plain value when any element matches it.
"""

import operator
import re
from collections.abc import Mapping
from typing import Any, Callable, Dict, List

from .models import Conditions


class _Missing:
    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


def matches(conditions: Conditions, subject: Any) -> bool:
    """Evaluate rule conditions against a subject instance."""
    if callable(conditions) and not isinstance(conditions, Mapping):
        return bool(conditions(subject))
    return _match_query(conditions, subject)


def get_value(obj: Any, path: str) -> Any:
    """Resolve a dotted path, returning MISSING when any step is absent."""
    current = obj
    for part in path.split("."):
        current = _step(current, part)
        if current is MISSING:
            return MISSING
    return current


def _step(current: Any, part: str) -> Any:
    if current is None or current is MISSING:
        return MISSING
    if isinstance(current, Mapping):
        return current.get(part, MISSING)
    if isinstance(current, (list, tuple)):
        if part.isdigit():
            index = int(part)
            return current[index] if index < len(current) else MISSING
        values = [_step(item, part) for item in current]
        values = [value for value in values if value is not MISSING]
        return values if values else MISSING
    return getattr(current, part, MISSING)


def _match_query(query: Mapping, subject: Any) -> bool:
    for key, expected in query.items():
        if key == "$and":
            if not all(_match_query(sub, subject) for sub in expected):
                return False
        elif key == "$or":
            if not any(_match_query(sub, subject) for sub in expected):
                return False
        elif key == "$nor":
            if any(_match_query(sub, subject) for sub in expected):
                return False
        elif key.startswith("$"):
            raise ValueError(f"Unsupported query operator: {key}")
        elif not _match_field(get_value(subject, key), expected):
            return False
    return True


def _is_operator_dict(value: Any) -> bool:
    return isinstance(value, Mapping) and bool(value) and all(
        isinstance(key, str) and key.startswith("$") for key in value
    )


def _match_field(actual: Any, expected: Any) -> bool:
    if _is_operator_dict(expected):
        return _match_operators(actual, expected)
    return _eq(actual, expected)


def _match_operators(actual: Any, operators: Mapping) -> bool:
    for name, argument in operators.items():
        if name == "$options":
            continue
        if name == "$regex":
            if not _regex(actual, argument, operators.get("$options", "")):
                return False
            continue
        handler = _OPERATORS.get(name)
        if handler is None:
            raise ValueError(f"Unsupported condition operator: {name}")
        if not handler(actual, argument):
            return False
    return True


def _eq(actual: Any, expected: Any) -> bool:
    if actual is MISSING:
        return expected is None
    if isinstance(actual, (list, tuple)) and not isinstance(expected, (list, tuple)):
        return expected in actual
    return actual == expected


def _in(actual: Any, values: List[Any]) -> bool:
    return any(_eq(actual, value) for value in values)


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def compare(actual: Any, expected: Any) -> bool:
        if actual is MISSING or actual is None:
            return False
        candidates = actual if isinstance(actual, (list, tuple)) else [actual]
        for candidate in candidates:
            try:
                if op(candidate, expected):
                    return True
            except TypeError:
                continue
        return False
    return compare


def _exists(actual: Any, expected: Any) -> bool:
    return (actual is not MISSING) == bool(expected)


def _regex(actual: Any, pattern: Any, options: str = "") -> bool:
    if not isinstance(actual, str):
        return False
    flags = re.IGNORECASE if "i" in options else 0
    if isinstance(pattern, re.Pattern):
        return pattern.search(actual) is not None
    return re.search(pattern, actual, flags) is not None


def _all(actual: Any, values: List[Any]) -> bool:
    if not isinstance(actual, (list, tuple)):
        return False
    return all(value in actual for value in values)


def _size(actual: Any, size: int) -> bool:
    return isinstance(actual, (list, tuple)) and len(actual) == size


def _elem_match(actual: Any, query: Mapping) -> bool:
    if not isinstance(actual, (list, tuple)):
        return False
    if _is_operator_dict(query):
        return any(_match_operators(item, query) for item in actual)
    return any(_match_query(query, item) for item in actual)


def _not(actual: Any, expected: Any) -> bool:
    return not _match_field(actual, expected)


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$eq": _eq,
    "$ne": lambda actual, expected: not _eq(actual, expected),
    "$in": _in,
    "$nin": lambda actual, values: not _in(actual, values),
    "$gt": _compare(operator.gt),
    "$gte": _compare(operator.ge),
    "$lt": _compare(operator.lt),
    "$lte": _compare(operator.le),
    "$exists": _exists,
    "$all": _all,
    "$size": _size,
    "$elemMatch": _elem_match,
    "$not": _not,
}
