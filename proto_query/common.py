"""
Basic definitions shared by every proto_query module: type aliases and the
execution Policy that configures a Queryable.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, Mapping, Optional, TypeVar

from .exceptions import ProtoValidationException

T = TypeVar('T')
K = TypeVar('K')
U = TypeVar('U')
V = TypeVar('V')
Number = float | int

Predicate = Callable[[Any], bool]
IndexedPredicate = Callable[[Any, int], bool]
Selector = Callable[[Any], Any]
Comparator = Callable[[Any, Any], int]
Reducer = Callable[[Any, Any], Any]
Action = Callable[[Any], Any]


@dataclass(frozen=True)
class Policy:
    """Execution policy for Queryable traversals.

    max_rows: maximum number of elements a single traversal may emit (0 = unlimited)
    timeout_ms: wall clock budget of a single traversal (0 = no timeout)
    random_seed: when set, random() picks deterministically
    json_indent: default indentation used by to_json()
    """
    max_rows: int = 0
    timeout_ms: int = 0
    random_seed: Optional[int] = None
    json_indent: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.max_rows, int) or self.max_rows < 0:
            raise ProtoValidationException(message=f'max_rows must be a non negative int, got {self.max_rows!r}')
        if not isinstance(self.timeout_ms, int) or self.timeout_ms < 0:
            raise ProtoValidationException(message=f'timeout_ms must be a non negative int, got {self.timeout_ms!r}')

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> Policy:
        """
        Build a Policy from a plain mapping, e.g. a section read from a
        configuration file. Unknown keys are rejected.

        :param data: mapping of policy field names to values
        :return: the new Policy
        """
        known = {f.name: f for f in fields(Policy)}
        values = {}
        for key, value in data.items():
            if key not in known:
                raise ProtoValidationException(message=f'Unknown policy setting: {key}')
            try:
                if key in ('max_rows', 'timeout_ms') and isinstance(value, str):
                    value = int(value)
                elif key in ('random_seed', 'json_indent') and isinstance(value, str):
                    value = int(value) if value.strip() else None
            except ValueError as e:
                raise ProtoValidationException(message=f'Policy setting {key} must be an integer, got {value!r}') from e
            values[key] = value
        return Policy(**values)


DEFAULT_POLICY = Policy()
