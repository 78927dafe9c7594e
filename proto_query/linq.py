from __future__ import annotations

import copy
import dataclasses
import datetime
import itertools
import json
import logging
import random as _random
from collections.abc import Iterable as _IterableABC
from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Optional, Set as TSet

from .common import T, K, U, Number, Policy, Predicate, IndexedPredicate, Selector, Comparator, Reducer, \
    Action, DEFAULT_POLICY
from .cursor import QueryCursor, open_cursor
from .exceptions import ProtoNotSupportedException, ProtoValidationException
from .interactive import InteractiveQuery
from .rules import EMPTY_PLAN, RulePlan
from .structural import deep_equal, match_values

_logger = logging.getLogger(__name__)


def _to_callable(fn: Any, operation: str) -> Callable:
    if callable(fn):
        return fn
    raise ProtoValidationException(message=f'{operation}() expects a callable, got {type(fn).__name__}')


def _to_selector(expr_or_fn: Any, operation: str) -> Selector:
    if isinstance(expr_or_fn, dict):
        # map dict of selectors (callables or literals)
        items = [(k, v) for k, v in expr_or_fn.items()]

        def mapper(x):
            return {k: (v(x) if callable(v) else v) for k, v in items}
        return mapper
    return _to_callable(expr_or_fn, operation)


def _ignore_index(predicate: Predicate) -> IndexedPredicate:
    return lambda element, _index: predicate(element)


def _json_default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    if hasattr(value, '__dict__'):
        return vars(value)
    raise TypeError(f'Object of type {type(value).__name__} is not JSON serializable')


class _Chain:
    """Re-iterable concatenation of two iterables."""

    def __init__(self, first: Iterable[Any], second: Iterable[Any]):
        self.first = first
        self.second = second

    def __iter__(self) -> Iterator[Any]:
        return itertools.chain(self.first, self.second)


class _DerivedIterable:
    """Re-iterable output of create_with(): at most one value per accepted parent element."""

    def __init__(self, parent: Iterable[Any], accept: Predicate, builder: Callable[[Any, Callable[[Any], None]], Any]):
        self.parent = parent
        self.accept = accept
        self.builder = builder

    def __iter__(self) -> Iterator[Any]:
        nothing = object()
        for current in self.parent:
            if not self.accept(current):
                continue
            state = [nothing]

            def emit(value, _state=state):
                _state[0] = value

            self.builder(current, emit)
            if state[0] is not nothing:
                yield state[0]


class Queryable(Generic[T]):
    """
    Deferred query over an iterable.

    Registering a rule never touches the source: it returns a new Queryable
    holding a new, immutable rule plan. Elements are only read when the query
    is iterated or a terminal operator runs, and every traversal re-reads the
    source from the start.
    """

    def __init__(self, source: Iterable[T], plan: Optional[RulePlan] = None, policy: Optional[Policy] = None):
        if source is None or not isinstance(source, _IterableABC):
            raise ProtoValidationException(message=f'Queryable source must be iterable, got {type(source).__name__}')
        self._source = source
        self._plan = plan if plan is not None else EMPTY_PLAN
        self._policy = policy or DEFAULT_POLICY

    @property
    def source(self) -> Iterable[T]:
        return self._source

    @property
    def plan(self) -> RulePlan:
        return self._plan

    @property
    def policy(self) -> Policy:
        return self._policy

    def _with_plan(self, plan: RulePlan) -> 'Queryable[T]':
        return Queryable(self._source, plan, self._policy)

    def __iter__(self) -> QueryCursor:
        return open_cursor(self._source, self._plan, self._policy)

    def __repr__(self):
        # explain() evaluates where_if conditions; repr only counts them
        plan = self._plan
        mode = "buffered" if plan.has_sort else "streaming"
        return (f'Queryable(source={type(self._source).__name__}, filters={len(plan.filters)}, '
                f'conditional_filters={len(plan.conditional_filters)}, mode={mode})')

    def with_policy(self, policy: Policy) -> 'Queryable[T]':
        return Queryable(self._source, self._plan, policy)

    # Filters
    def where(self, predicate: Predicate) -> 'Queryable[T]':
        predicate = _to_callable(predicate, 'where')
        return self._with_plan(self._plan.with_filter(_ignore_index(predicate)))

    def where_with_index(self, predicate: IndexedPredicate) -> 'Queryable[T]':
        """
        Register a filter called as ``predicate(element, index)`` where index is
        the position of the filter in the combined filter list (unconditional
        filters first, then the enabled conditional ones).
        """
        predicate = _to_callable(predicate, 'where_with_index')
        return self._with_plan(self._plan.with_filter(predicate))

    def except_(self, predicate: Predicate) -> 'Queryable[T]':
        predicate = _to_callable(predicate, 'except_')
        return self._with_plan(self._plan.with_filter(lambda x, _i: not predicate(x)))

    def not_null(self, selector: Selector) -> 'Queryable[T]':
        selector = _to_callable(selector, 'not_null')
        return self._with_plan(self._plan.with_filter(lambda x, _i: selector(x) is not None))

    def is_null(self, selector: Selector) -> 'Queryable[T]':
        selector = _to_callable(selector, 'is_null')
        return self._with_plan(self._plan.with_filter(lambda x, _i: selector(x) is None))

    def to_be(self, selector: Selector, allowed: Iterable[Any]) -> 'Queryable[T]':
        """
        Keep elements whose selected value is in ``allowed``.

        ``allowed`` is read again for every element evaluated; pass a list when a
        stable snapshot is needed (a generator is exhausted by the first element).
        """
        selector = _to_callable(selector, 'to_be')
        return self._with_plan(self._plan.with_filter(lambda x, _i: selector(x) in list(allowed)))

    def to_be_out(self, selector: Selector, disallowed: Iterable[Any]) -> 'Queryable[T]':
        selector = _to_callable(selector, 'to_be_out')
        return self._with_plan(self._plan.with_filter(lambda x, _i: selector(x) not in list(disallowed)))

    def between(self, selector: Selector, start: Any, end: Any, inclusive: bool = True) -> 'Queryable[T]':
        selector = _to_callable(selector, 'between')

        def _pred(x, _i):
            data = selector(x)
            if inclusive:
                return data >= start and end >= data
            return data > start and end > data
        return self._with_plan(self._plan.with_filter(_pred))

    def exact(self, value: T) -> 'Queryable[T]':
        return self._with_plan(self._plan.with_filter(lambda x, _i: deep_equal(value, x)))

    def exclude(self, value: T) -> 'Queryable[T]':
        return self._with_plan(self._plan.with_filter(lambda x, _i: not deep_equal(value, x)))

    def match(self, partial: Any) -> 'Queryable[T]':
        return self._with_plan(self._plan.with_filter(lambda x, _i: match_values(x, partial)))

    def not_(self, partial: Any) -> 'Queryable[T]':
        return self._with_plan(self._plan.with_filter(lambda x, _i: not match_values(x, partial)))

    def where_if(self, condition: bool | Callable[[], Any], predicate: Predicate) -> 'Queryable[T]':
        """
        Register a filter that only applies while ``condition`` holds.

        A bool condition is fixed at registration. A zero argument callable is
        called again at the start of each traversal, so flipping the state it
        reads between two iterations enables or disables the filter.
        """
        predicate = _to_callable(predicate, 'where_if')
        return self._with_plan(self._plan.with_conditional_filter(condition, _ignore_index(predicate)))

    # Bounds
    def skip(self, n: int) -> 'Queryable[T]':
        return self._with_plan(self._plan.with_offset(n))

    def take(self, n: int) -> 'Queryable[T]':
        return self._with_plan(self._plan.with_limit(n))

    def skip_while(self, predicate: Predicate) -> 'Queryable[T]':
        predicate = _to_callable(predicate, 'skip_while')
        return self._with_plan(self._plan.with_skip_while(predicate))

    def take_while(self, predicate: Predicate) -> 'Queryable[T]':
        predicate = _to_callable(predicate, 'take_while')
        return self._with_plan(self._plan.with_take_while(predicate))

    # Ordering
    def order_by(self, key_selector: Selector) -> 'Queryable[T]':
        key_selector = _to_callable(key_selector, 'order_by')
        return self._with_plan(self._plan.with_key(key_selector, descending=False))

    def order_by_descending(self, key_selector: Selector) -> 'Queryable[T]':
        key_selector = _to_callable(key_selector, 'order_by_descending')
        return self._with_plan(self._plan.with_key(key_selector, descending=True))

    def order_by_comparator(self, comparator: Comparator) -> 'Queryable[T]':
        """Order with a three way comparator: negative, zero or positive like ``cmp(a, b)``."""
        comparator = _to_callable(comparator, 'order_by_comparator')
        return self._with_plan(self._plan.with_comparator(comparator))

    # Projection
    def select(self, selector: Callable[[T], U] | dict) -> 'Queryable[U]':
        """
        Project every emitted element.

        The projection is installed on a copy of this query, which becomes the
        source of the returned one: elements are transformed while the copy is
        traversed, and rules registered on the result apply to projected values.
        """
        selector = _to_selector(selector, 'select')
        parent = self._with_plan(self._plan.with_projection(selector))
        return Queryable(parent, policy=self._policy)

    # Forks
    def create(self, builder: Callable[[Iterable[T], Callable[[K], None]], Any]) -> 'Queryable[K]':
        """
        Build a new query from values emitted by ``builder(parent, emit)``.

        The builder runs right away and may pull as many elements from the
        parent as it likes; the emitted values are stored in a list that is the
        source of the returned query.
        """
        builder = _to_callable(builder, 'create')
        storage: List[K] = []
        builder(self, storage.append)
        _logger.debug(f"create() materialized {len(storage)} elements")
        return Queryable(storage, policy=self._policy)

    def create_with(self, accept: Predicate, builder: Callable[[T, Callable[[K], None]], Any]) -> 'Queryable[K]':
        """
        Lazily derive one optional value per element of this query.

        For each element passing ``accept``, ``builder(element, emit)`` runs; the
        last value given to ``emit`` during that call is yielded, nothing when
        ``emit`` was not called.
        """
        accept = _to_callable(accept, 'create_with')
        builder = _to_callable(builder, 'create_with')
        return Queryable(_DerivedIterable(self, accept, builder), policy=self._policy)

    def export(self) -> 'Queryable[T]':
        return copy.copy(self)

    def concat(self, other: Iterable[T]) -> 'Queryable[T]':
        return Queryable(_Chain(self, other), policy=self._policy)

    def append(self, other: Iterable[T]) -> 'Queryable[T]':
        return Queryable(_Chain(other, self), policy=self._policy)

    def reverse(self) -> 'Queryable[T]':
        """
        Run the query now and return a query over its reversed output.

        The returned query has no rules: filters, bounds, sorts and the
        projection have already been applied.
        """
        items = self.to_list()
        items.reverse()
        _logger.debug(f"reverse() materialized {len(items)} elements")
        return Queryable(items, policy=self._policy)

    # Unsupported surface
    def _not_supported(self, operation: str):
        raise ProtoNotSupportedException(message=f'{operation}() is not supported by the query engine')

    def distinct(self, key_selector: Optional[Selector] = None) -> 'Queryable[T]':
        self._not_supported('distinct')

    def join(self, other: Iterable[Any], on: Callable[[T, Any], bool], result: Callable[[T, Any], Any],
             behavior: str = 'inner') -> 'Queryable[Any]':
        self._not_supported('join')

    def group_by(self, key_selector: Selector) -> 'Queryable[Any]':
        self._not_supported('group_by')

    def of_type(self, cls: type) -> 'Queryable[Any]':
        self._not_supported('of_type')

    def assert_mode(self) -> Any:
        self._not_supported('assert_mode')

    # Terminal operators
    def count(self, predicate: Optional[Predicate] = None) -> int:
        c = 0
        for x in self:
            if predicate is None or predicate(x):
                c += 1
        return c

    def any(self, predicate: Optional[Predicate] = None) -> bool:
        for x in self:
            if predicate is None or predicate(x):
                return True
        return False

    def all(self, predicate: Optional[Predicate] = None) -> bool:
        """
        Without a predicate, tell whether the rules let every source element
        through: the unfiltered source length is compared with count(), so the
        source is read twice. With a predicate, tell whether every emitted
        element satisfies it.
        """
        if predicate is not None:
            for x in self:
                if not predicate(x):
                    return False
            return True
        source_length = sum(1 for _ in self._source)
        return source_length == self.count()

    def first(self, default: Optional[T] = None) -> Optional[T]:
        for x in self:
            return x
        return default

    def last(self, default: Optional[T] = None) -> Optional[T]:
        current = default
        for x in self:
            current = x
        return current

    def single(self, predicate: Predicate, default: Optional[T] = None) -> Optional[T]:
        predicate = _to_callable(predicate, 'single')
        for x in self:
            if predicate(x):
                return x
        return default

    def contains(self, value_or_predicate: Any) -> bool:
        if callable(value_or_predicate):
            return self.any(value_or_predicate)
        return any(deep_equal(value_or_predicate, x) for x in self)

    def aggregate(self, reducer: Reducer, initial: Any = None) -> Any:
        """Left fold of the emitted elements: ``state = reducer(element, state)``."""
        reducer = _to_callable(reducer, 'aggregate')
        state = initial
        for x in self:
            state = reducer(x, state)
        return state

    def poll(self, evaluator: Callable[[T], Any], for_max: bool = True) -> Optional[T]:
        """
        Element with the highest (or, with for_max=False, lowest) evaluation.
        The first element wins ties; None when nothing is emitted.
        """
        evaluator = _to_callable(evaluator, 'poll')
        result: Optional[T] = None
        record = None
        initial = True
        for current in self:
            evaluation = evaluator(current)
            if initial:
                result, record, initial = current, evaluation, False
                continue
            if for_max and evaluation > record:
                result, record = current, evaluation
            elif not for_max and evaluation < record:
                result, record = current, evaluation
        return result

    def random(self) -> Optional[T]:
        """
        Uniformly random emitted element, or None when nothing is emitted.
        Single pass reservoir sampling; deterministic when the policy has a
        random_seed.
        """
        seed = self._policy.random_seed
        rng = _random.Random(seed) if seed is not None else _random
        chosen: Optional[T] = None
        for seen, current in enumerate(self, start=1):
            if rng.randrange(seen) == 0:
                chosen = current
        return chosen

    def sum(self, selector: Optional[Selector] = None) -> Number:
        total: Number = 0
        for x in self:
            total += (selector(x) if selector else x) or 0
        return total

    def average(self, selector: Optional[Selector] = None) -> float:
        total = 0.0
        c = 0
        for x in self:
            total += float((selector(x) if selector else x) or 0)
            c += 1
        return total / c if c else 0.0

    def min(self, selector: Optional[Selector] = None) -> Any:
        m = None
        for x in self:
            v = selector(x) if selector else x
            if m is None or v < m:
                m = v
        return m

    def max(self, selector: Optional[Selector] = None) -> Any:
        m = None
        for x in self:
            v = selector(x) if selector else x
            if m is None or v > m:
                m = v
        return m

    # Materialization
    def to_list(self) -> List[T]:
        return list(self)

    def to_set(self) -> TSet[T]:
        return set(self)

    def to_dict(self, key_selector: Selector, value_selector: Optional[Selector] = None) -> Dict[Any, Any]:
        """Map every emitted element by key; a repeated key keeps the last value."""
        kf = _to_callable(key_selector, 'to_dict')
        vf = value_selector or (lambda x: x)
        out: Dict[Any, Any] = {}
        for x in self:
            out[kf(x)] = vf(x)
        return out

    def to_column(self, selector: Selector) -> List[Any]:
        selector = _to_callable(selector, 'to_column')
        return [selector(x) for x in self]

    def to_json(self, indent: Optional[int] = None) -> str:
        if indent is None:
            indent = self._policy.json_indent
        return json.dumps(self.to_list(), indent=indent, default=_json_default)

    def for_each(self, action: Action) -> None:
        action = _to_callable(action, 'for_each')
        for x in self:
            action(x)

    def to_interactive(self) -> InteractiveQuery[T]:
        return InteractiveQuery(iter(self))

    def to_numpy(self, selector: Optional[Selector] = None, dtype: Any = None):
        from .arrow_bridge import to_numpy
        values = self.to_column(selector) if selector is not None else self.to_list()
        return to_numpy(values, dtype=dtype)

    def to_arrow(self, columns: Optional[List[str]] = None):
        from .arrow_bridge import to_arrow
        return to_arrow(self, columns=columns)

    def to_parquet(self, path: str, columns: Optional[List[str]] = None, compression: str = 'zstd') -> None:
        from .arrow_bridge import to_parquet
        to_parquet(self, path, columns=columns, compression=compression)

    def explain(self, format: str = "text") -> str | dict:
        plan = self._plan
        enabled = sum(1 for c in plan.conditional_filters if c.is_enabled())
        info = {
            "source": type(self._source).__name__,
            "mode": "buffered" if plan.has_sort else "streaming",
            "filters": len(plan.filters),
            "conditional_filters": len(plan.conditional_filters),
            "enabled_conditional_filters": enabled,
            "skip_while": plan.skip_while is not None,
            "take_while": plan.take_while is not None,
            "offset": plan.offset,
            "limit": plan.limit,
            "comparator_rules": len(plan.comparator_rules),
            "key_rules": [("desc" if r.descending else "asc") for r in plan.key_rules],
            "projection": plan.projection is not None,
        }
        if format == 'json':
            return info
        if format != 'text':
            raise ProtoValidationException(message=f"explain() format must be 'text' or 'json', got {format!r}")
        segments = [f"source:{info['source']}"]
        if plan.take_while is not None:
            segments.append("take_while")
        if plan.limit:
            segments.append(f"take:{plan.limit}")
        if plan.skip_while is not None:
            segments.append("skip_while")
        if plan.offset:
            segments.append(f"skip:{plan.offset}")
        if plan.filters or plan.conditional_filters:
            segments.append(f"where:{len(plan.filters)}+{enabled}/{len(plan.conditional_filters)}")
        if plan.projection is not None:
            segments.append("select")
        if plan.has_sort:
            segments.append(f"sort:{len(plan.comparator_rules)}cmp+{','.join(info['key_rules']) or '0key'}")
        return " -> ".join(segments) + f" | {info['mode']}"


def from_collection(source: Iterable[T], policy: Optional[Policy] = None) -> Queryable[T]:
    """Entry point to build a LINQ-like queryable from any iterable."""
    return Queryable(source, policy=policy)
