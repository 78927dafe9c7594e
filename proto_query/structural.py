"""
Structural comparison helpers used by the exact/exclude and match/not_ filters.
"""
from __future__ import annotations

from collections.abc import Mapping, Set
from typing import Any

_MISSING = object()


def _attributes(value: Any) -> dict | None:
    try:
        return vars(value)
    except TypeError:
        return None


def deep_equal(a: Any, b: Any) -> bool:
    """
    Recursive structural equality.

    Mappings are equal when they hold the same keys with deep equal values,
    lists and tuples when they are the same kind of sequence with pairwise
    deep equal items. Plain objects are compared by type and attribute
    dictionary. Everything else falls back to ``==``.
    """
    if a is b:
        return True
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if a.keys() != b.keys():
            return False
        return all(deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) or isinstance(b, (list, tuple)):
        if isinstance(a, list) != isinstance(b, list) or isinstance(a, tuple) != isinstance(b, tuple):
            return False
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))
    if isinstance(a, Set) or isinstance(b, Set):
        return a == b
    if isinstance(a, (str, bytes, int, float, complex, bool)) or a is None:
        return a == b
    attrs_a = _attributes(a)
    attrs_b = _attributes(b)
    if attrs_a is not None and attrs_b is not None:
        if type(a) is not type(b):
            return False
        return deep_equal(attrs_a, attrs_b)
    return a == b


def _read(element: Any, key: Any) -> Any:
    if isinstance(element, Mapping):
        return element.get(key, _MISSING)
    if isinstance(key, str):
        return getattr(element, key, _MISSING)
    return _MISSING


def match_values(element: Any, partial: Any) -> bool:
    """
    Partial structural match: only the keys present in ``partial`` are
    compared against ``element``. A key missing from the element fails the
    match; nested mappings are matched partially as well.
    """
    if isinstance(partial, Mapping):
        expected = partial
    else:
        expected = _attributes(partial)
        if expected is None:
            return deep_equal(element, partial)
    for key, value in expected.items():
        actual = _read(element, key)
        if actual is _MISSING:
            return False
        if isinstance(value, Mapping):
            if not match_values(actual, value):
                return False
        elif not deep_equal(actual, value):
            return False
    return True
