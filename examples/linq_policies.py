"""
LINQ-like API: execution policies.
Run: python examples/linq_policies.py
"""

import os
import sys
import time
# Ensure project root is on sys.path for direct execution
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from proto_query import from_collection, F, Policy, ProtoExecutionLimitException


def main():
    items = [{"score": 0.9}, {"score": 0.0}, {"score": None}, {"score": 0.95}]

    # Row cap: the query fails instead of silently truncating
    try:
        from_collection(items).with_policy(Policy(max_rows=2)).to_list()
    except ProtoExecutionLimitException as ex:
        print("Expected error (max_rows=2):", ex)

    # Wall clock budget for a single traversal
    def slow_source():
        for it in items:
            time.sleep(0.05)
            yield it
    try:
        from_collection(slow_source(), policy=Policy(timeout_ms=20)).count()
    except ProtoExecutionLimitException as ex:
        print("Expected error (timeout_ms=20):", ex)

    # Policies can come from plain configuration mappings
    policy = Policy.from_mapping({"random_seed": "7", "json_indent": "2"})
    q = from_collection(items, policy=policy).not_null(F.score).where(F.score >= 0.8)
    print("Seeded random pick:", q.random())
    print(q.to_json())


if __name__ == "__main__":
    main()
