from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Callable, Iterable

from .rules import RulePlan


def _nulls_last(key: Callable[[Any], Any], descending: bool) -> Callable[[Any], tuple]:
    # the flag is compared first, so None keys are never ordered against values
    def compose_key(x):
        v = key(x)
        return (v is not None, v) if descending else (v is None, v)
    return compose_key


def apply_sorts(items: Iterable[Any], plan: RulePlan) -> list:
    """
    Order a buffered collection with the sort rules of a plan.

    Comparator rules run first and key rules afterwards, each in registration
    order. Every rule is a full stable re-sort of the previous result, so the
    last applied rule is the primary ordering and the earlier ones only break
    its ties. Elements whose key is None go last in both directions.

    :param items: the buffered elements
    :param plan: plan holding the sort rules
    :return: a new sorted list
    """
    result = list(items)
    for rule in plan.comparator_rules:
        result.sort(key=cmp_to_key(rule.comparator))
    for rule in plan.key_rules:
        # reverse=True keeps equal keys in their previous relative order
        result.sort(key=_nulls_last(rule.key, rule.descending), reverse=rule.descending)
    return result
