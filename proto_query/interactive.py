from __future__ import annotations

from typing import Any, Generic, Iterator, Optional

from .common import T

_EMPTY = object()


class InteractiveQuery(Generic[T]):
    """
    Manual pull handle over one traversal of a Queryable.

    ``next()`` returns the following value, or None once the traversal is
    exhausted; check ``done`` to tell an emitted None from the end.
    """

    def __init__(self, iterator: Iterator[T]):
        self._iterator = iterator
        self._peeked: Any = _EMPTY
        self._done = False

    @property
    def done(self) -> bool:
        if self._done:
            return True
        self._fetch()
        return self._done

    def _fetch(self) -> None:
        if self._peeked is _EMPTY and not self._done:
            try:
                self._peeked = next(self._iterator)
            except StopIteration:
                self._done = True

    def peek(self) -> Optional[T]:
        self._fetch()
        return None if self._done else self._peeked

    def next(self) -> Optional[T]:
        self._fetch()
        if self._done:
            return None
        value, self._peeked = self._peeked, _EMPTY
        return value

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        self._fetch()
        if self._done:
            raise StopIteration
        value, self._peeked = self._peeked, _EMPTY
        return value
