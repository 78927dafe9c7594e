"""
Execution engine.

A traversal walks the source once. Every element goes through the bound
checks, then through the filters, and the survivors are projected and either
handed out right away (StreamingCursor) or collected, sorted and handed out
once the source is exhausted (BufferedCursor). The mode is decided when the
cursor is opened, from whether the plan carries any sort rule.

Counters live in the cursor, never in the Queryable, so every traversal of
the same query starts from scratch.
"""
from __future__ import annotations

import logging
import time
from typing import Any, Iterable, Iterator, Optional

from .common import Policy, DEFAULT_POLICY
from .evaluators import Bound, BoundEvaluator, FilterEvaluator
from .exceptions import ProtoExecutionLimitException
from .rules import RulePlan
from .sorting import apply_sorts

_logger = logging.getLogger(__name__)

_END = object()


class QueryCursor(Iterator[Any]):
    """
    Pull cursor over the output of one traversal.

    Exceptions raised by predicates, key functions or the projection leave
    ``__next__`` untouched; the cursor is finished afterwards.
    """
    mode: str = 'abstract'

    def __init__(self, source: Iterable[Any], plan: RulePlan, policy: Optional[Policy] = None):
        self.plan = plan
        self.policy = policy or DEFAULT_POLICY
        self._bounds = BoundEvaluator(plan)
        self._filters = FilterEvaluator(plan)
        self._source = iter(source)
        self._started = time.monotonic()
        self._finished = False
        self.examined = 0
        self.emitted = 0

    @property
    def accepted(self) -> int:
        return self._bounds.taken

    @property
    def finished(self) -> bool:
        return self._finished

    def __iter__(self) -> QueryCursor:
        return self

    def _check_timeout(self) -> None:
        timeout_ms = self.policy.timeout_ms
        if timeout_ms and (time.monotonic() - self._started) * 1000 > timeout_ms:
            self._finished = True
            raise ProtoExecutionLimitException(message=f'Query execution exceeded timeout of {timeout_ms} ms')

    def _next_accepted(self) -> Any:
        """
        Advance the source up to the next accepted element and return it,
        already projected. Returns _END when the source is exhausted or a bound
        rule stopped the traversal.
        """
        for element in self._source:
            self.examined += 1
            self._check_timeout()
            bound = self._bounds.check(element)
            if bound is Bound.STOP:
                return _END
            if bound is Bound.SKIP:
                continue
            if not self._filters.passes(element):
                continue
            self._bounds.accept()
            projection = self.plan.projection
            return projection(element) if projection is not None else element
        return _END

    def _emit(self, value: Any) -> Any:
        self.emitted += 1
        max_rows = self.policy.max_rows
        if max_rows and self.emitted > max_rows:
            self._finished = True
            raise ProtoExecutionLimitException(message=f'Query execution exceeded max_rows={max_rows}')
        return value

    def _finish(self) -> None:
        if not self._finished:
            self._finished = True
            _logger.debug(f"{self.mode} traversal finished: examined={self.examined} "
                          f"accepted={self.accepted} emitted={self.emitted}")

    def __next__(self) -> Any:
        raise NotImplementedError


class StreamingCursor(QueryCursor):
    """Hands out each accepted element as soon as it is found."""
    mode = 'streaming'

    def __next__(self) -> Any:
        if self._finished:
            raise StopIteration
        try:
            value = self._next_accepted()
        except BaseException:
            self._finished = True
            raise
        if value is _END:
            self._finish()
            raise StopIteration
        return self._emit(value)


class BufferedCursor(QueryCursor):
    """
    Collects every accepted element, sorts the buffer on the first pull and
    then hands out the sorted elements.
    """
    mode = 'buffered'

    def __init__(self, source: Iterable[Any], plan: RulePlan, policy: Optional[Policy] = None):
        super().__init__(source, plan, policy)
        self._sorted: Optional[Iterator[Any]] = None

    def _fill(self) -> Iterator[Any]:
        buffer = []
        while True:
            value = self._next_accepted()
            if value is _END:
                break
            buffer.append(value)
        _logger.debug(f"sorting {len(buffer)} buffered elements with "
                      f"{len(self.plan.comparator_rules)} comparator and {len(self.plan.key_rules)} key rules")
        return iter(apply_sorts(buffer, self.plan) if buffer else ())

    def __next__(self) -> Any:
        if self._finished:
            raise StopIteration
        if self._sorted is None:
            try:
                self._sorted = self._fill()
            except BaseException:
                # the partial buffer is dropped with the failed traversal
                self._finished = True
                raise
        for value in self._sorted:
            return self._emit(value)
        self._finish()
        raise StopIteration


def open_cursor(source: Iterable[Any], plan: RulePlan, policy: Optional[Policy] = None) -> QueryCursor:
    """
    Start a traversal of ``source`` under ``plan``.

    :param source: any iterable, possibly another Queryable
    :param plan: the rules to apply
    :param policy: execution limits, DEFAULT_POLICY when omitted
    :return: a fresh cursor with its own counters
    """
    cursor_cls = BufferedCursor if plan.has_sort else StreamingCursor
    _logger.debug(f"opening {cursor_cls.mode} cursor over {type(source).__name__}")
    return cursor_cls(source, plan, policy)
