"""
Rule store of a Queryable.

A RulePlan is an immutable value: registering a rule builds a new plan and
leaves the previous one untouched, so a plan can be shared by any number of
queries and forks without copying.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from .common import Comparator, IndexedPredicate, Predicate, Selector
from .exceptions import ProtoValidationException


@dataclass(frozen=True)
class FilterRule:
    """A filter predicate, always invoked as ``predicate(element, index)``."""
    predicate: IndexedPredicate

    def __call__(self, element: Any, index: int) -> Any:
        return self.predicate(element, index)


@dataclass(frozen=True)
class ConditionalFilterRule:
    """
    A filter that only takes part in a traversal while its condition holds.

    ``condition`` is either a bool, fixed when the rule was registered, or a
    zero argument callable that is read again at the start of every traversal.
    """
    condition: bool | Callable[[], Any]
    rule: FilterRule

    def is_enabled(self) -> bool:
        if callable(self.condition):
            return bool(self.condition())
        return bool(self.condition)


@dataclass(frozen=True)
class ComparatorRule:
    comparator: Comparator


@dataclass(frozen=True)
class KeyRule:
    key: Selector
    descending: bool = False


def _check_bound(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ProtoValidationException(message=f'{name} expects a non negative int, got {value!r}')
    return value


@dataclass(frozen=True)
class RulePlan:
    filters: tuple[FilterRule, ...] = ()
    conditional_filters: tuple[ConditionalFilterRule, ...] = ()
    comparator_rules: tuple[ComparatorRule, ...] = ()
    key_rules: tuple[KeyRule, ...] = ()
    projection: Optional[Selector] = None
    offset: int = 0
    limit: int = 0
    skip_while: Optional[Predicate] = None
    take_while: Optional[Predicate] = None

    @property
    def has_sort(self) -> bool:
        return bool(self.comparator_rules) or bool(self.key_rules)

    @property
    def is_empty(self) -> bool:
        return self == EMPTY_PLAN

    def combined_filters(self) -> list[FilterRule]:
        """
        Unconditional filters in registration order followed by the conditional
        ones enabled right now, also in registration order.
        """
        enabled = [c.rule for c in self.conditional_filters if c.is_enabled()]
        return [*self.filters, *enabled]

    def with_filter(self, predicate: IndexedPredicate) -> RulePlan:
        return replace(self, filters=self.filters + (FilterRule(predicate),))

    def with_conditional_filter(self, condition: bool | Callable[[], Any], predicate: IndexedPredicate) -> RulePlan:
        rule = ConditionalFilterRule(condition, FilterRule(predicate))
        return replace(self, conditional_filters=self.conditional_filters + (rule,))

    def with_comparator(self, comparator: Comparator) -> RulePlan:
        return replace(self, comparator_rules=self.comparator_rules + (ComparatorRule(comparator),))

    def with_key(self, key: Selector, descending: bool = False) -> RulePlan:
        return replace(self, key_rules=self.key_rules + (KeyRule(key, descending),))

    def with_projection(self, projection: Optional[Selector]) -> RulePlan:
        return replace(self, projection=projection)

    def with_offset(self, offset: int) -> RulePlan:
        return replace(self, offset=_check_bound('skip', offset))

    def with_limit(self, limit: int) -> RulePlan:
        return replace(self, limit=_check_bound('take', limit))

    def with_skip_while(self, predicate: Optional[Predicate]) -> RulePlan:
        return replace(self, skip_while=predicate)

    def with_take_while(self, predicate: Optional[Predicate]) -> RulePlan:
        return replace(self, take_while=predicate)


EMPTY_PLAN = RulePlan()
