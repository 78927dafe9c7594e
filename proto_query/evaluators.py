"""
Per element decisions taken by a traversal: whether an element passes the
filters and whether the bound rules skip it or stop the traversal.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from .rules import RulePlan


class Bound(Enum):
    PASS = 'pass'
    SKIP = 'skip'
    STOP = 'stop'


class FilterEvaluator:
    """
    Logical AND of the combined filter list.

    The list is resolved once, when the evaluator is built for a traversal,
    so conditional filters are enabled or disabled for the whole traversal.
    """

    def __init__(self, plan: RulePlan):
        self.filters = plan.combined_filters()

    def passes(self, element: Any) -> bool:
        for index, rule in enumerate(self.filters):
            if not rule(element, index):
                return False
        return True


class BoundEvaluator:
    """
    Owns the skip and take counters of one traversal.

    The order of the checks is part of the observable behaviour: take-while and
    limit end the traversal, then skip-while and offset suppress the element.
    Filters are evaluated afterwards by the caller, so bounds count examined
    elements, not accepted ones (except the limit, which counts acceptances).
    """

    def __init__(self, plan: RulePlan):
        self.plan = plan
        self.skipped = 0
        self.taken = 0

    def check(self, element: Any) -> Bound:
        plan = self.plan
        if plan.take_while is not None and not plan.take_while(element):
            return Bound.STOP
        if plan.limit != 0 and self.taken == plan.limit:
            return Bound.STOP
        if plan.skip_while is not None and plan.skip_while(element):
            return Bound.SKIP
        if plan.offset != 0 and self.skipped < plan.offset:
            self.skipped += 1
            return Bound.SKIP
        return Bound.PASS

    def accept(self) -> None:
        self.taken += 1
