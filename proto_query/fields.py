"""
Field selector DSL.

``F.age`` is a callable selector returning ``record['age']`` (or the ``age``
attribute for plain objects); comparing it builds a Predicate that can be
combined with ``&``, ``|`` and ``~`` and passed to ``where``::

    from_collection(users).where((F.age >= 18) & F.country.in_(["ES", "AR"]))
"""
from __future__ import annotations

from typing import Any, Callable, Iterable, Tuple


class Predicate:
    """Boolean callable composable with ``&``, ``|`` and ``~``."""

    def __init__(self, fn: Callable[[Any], Any], description: str = '<predicate>'):
        self.fn = fn
        self.description = description

    def __call__(self, x) -> bool:
        return bool(self.fn(x))

    def __and__(self, other: Predicate | Callable[[Any], Any]) -> Predicate:
        other_fn = other.fn if isinstance(other, Predicate) else other
        return Predicate(lambda x: bool(self.fn(x)) and bool(other_fn(x)), f'({self} & {_describe(other)})')

    def __or__(self, other: Predicate | Callable[[Any], Any]) -> Predicate:
        other_fn = other.fn if isinstance(other, Predicate) else other
        return Predicate(lambda x: bool(self.fn(x)) or bool(other_fn(x)), f'({self} | {_describe(other)})')

    def __invert__(self) -> Predicate:
        return Predicate(lambda x: not self.fn(x), f'~{self}')

    def __repr__(self):
        return self.description

    __str__ = __repr__


def _describe(value: Any) -> str:
    if isinstance(value, (Predicate, Field)):
        return str(value)
    return getattr(value, '__name__', repr(value))


class Field:
    def __init__(self, path: Tuple[Any, ...] = ()):  # empty is root
        self._path = path

    def __getattr__(self, item: str) -> Field:
        if item.startswith('__'):
            raise AttributeError(item)
        return Field(self._path + (item,))

    def __getitem__(self, item: Any) -> Field:
        return Field(self._path + (item,))

    def __call__(self, record: Any) -> Any:
        return self.resolve(record)

    def __repr__(self):
        return 'F' + ''.join(f'.{p}' if isinstance(p, str) else f'[{p!r}]' for p in self._path)

    def resolve(self, record: Any) -> Any:
        cur = record
        for p in self._path:
            if cur is None:
                return None
            if isinstance(cur, dict):
                cur = cur.get(p)
            elif isinstance(p, str):
                cur = getattr(cur, p, None)
            else:
                try:
                    cur = cur[p]
                except (LookupError, TypeError):
                    return None
        return cur

    def _cmp(self, other: Any, op: Callable[[Any, Any], bool], token: str) -> Predicate:
        return Predicate(lambda x: op(self.resolve(x), other), f'{self} {token} {other!r}')

    def __eq__(self, other):
        return self._cmp(other, lambda a, b: a == b, '==')

    def __ne__(self, other):
        return self._cmp(other, lambda a, b: a != b, '!=')

    def __gt__(self, other):
        return self._cmp(other, lambda a, b: a is not None and b is not None and a > b, '>')

    def __ge__(self, other):
        return self._cmp(other, lambda a, b: a is not None and b is not None and a >= b, '>=')

    def __lt__(self, other):
        return self._cmp(other, lambda a, b: a is not None and b is not None and a < b, '<')

    def __le__(self, other):
        return self._cmp(other, lambda a, b: a is not None and b is not None and a <= b, '<=')

    __hash__ = None

    def in_(self, values: Iterable[Any]) -> Predicate:
        snapshot = list(values)
        return Predicate(lambda x: self.resolve(x) in snapshot, f'{self} in {snapshot!r}')

    def between(self, lo: Any, hi: Any, inclusive: bool = True) -> Predicate:
        """Same bounds as Queryable.between; a None field never matches."""
        def _pred(x):
            v = self.resolve(x)
            if v is None:
                return False
            if inclusive:
                return lo <= v <= hi
            return lo < v < hi
        bounds = '[]' if inclusive else '()'
        return Predicate(_pred, f'{self} between{bounds} {lo!r}, {hi!r}')

    def contains(self, sub: Any) -> Predicate:
        return Predicate(lambda x: sub in (self.resolve(x) or ()), f'{self} contains {sub!r}')

    def startswith(self, prefix: str) -> Predicate:
        return Predicate(lambda x: (self.resolve(x) or "").startswith(prefix), f'{self} startswith {prefix!r}')

    def endswith(self, suffix: str) -> Predicate:
        return Predicate(lambda x: (self.resolve(x) or "").endswith(suffix), f'{self} endswith {suffix!r}')

    def is_none(self) -> Predicate:
        return Predicate(lambda x: self.resolve(x) is None, f'{self} is None')

    def is_not_none(self) -> Predicate:
        return Predicate(lambda x: self.resolve(x) is not None, f'{self} is not None')


class _FProxy:
    def __getattr__(self, item: str) -> Field:
        if item.startswith('__'):
            raise AttributeError(item)
        return Field((item,))

    def __getitem__(self, item: Any) -> Field:
        return Field((item,))


F = _FProxy()
