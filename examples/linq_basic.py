"""
Deferred query basics: rule registration, bounds, layered ordering and forks.
Run: python examples/linq_basic.py
"""

import os
import sys
# Ensure project root is on sys.path for direct execution
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from proto_query import from_collection, F


ORDERS = [
    {"order": 101, "customer": "acme", "total": 250.0, "items": 3, "shipped": True},
    {"order": 102, "customer": "globex", "total": 80.5, "items": 1, "shipped": False},
    {"order": 103, "customer": "acme", "total": 40.0, "items": 2, "shipped": True},
    {"order": 104, "customer": "initech", "total": None, "items": 0, "shipped": False},
    {"order": 105, "customer": "globex", "total": 310.0, "items": 6, "shipped": True},
    {"order": 106, "customer": "acme", "total": 95.0, "items": 1, "shipped": False},
]


def main():
    # Nothing runs until the query is iterated; each rule returns a new query
    shipped = from_collection(ORDERS).match({"shipped": True})
    big = shipped.where(F.total > 100)
    print("shipped:", shipped.count(), "big shipped:", big.count())

    # Sort keys see what the query emits, so project first and order on the projection
    summary = (
        from_collection(ORDERS)
        .not_null(F.total)
        .select({"order": F.order, "customer": F.customer, "total": F.total})
        .order_by_descending(F.total)
        .order_by(F.customer)
        .take(4)
    )
    print(summary.explain())
    for row in summary:
        print(row)

    # Missing keys sort last in both directions
    print("by total:", from_collection(ORDERS).order_by(F.total).to_column(F.order))

    # skip_while suppresses every element it matches, then skip drops the next one
    tail = from_collection(ORDERS).skip_while(lambda o: o["shipped"]).skip(1).to_column(F.order)
    print("open orders after the first:", tail)

    # A condition re-read on every traversal
    only_open = {"on": False}
    q = from_collection(ORDERS).where_if(lambda: only_open["on"], lambda o: not o["shipped"])
    print("all:", q.count())
    only_open["on"] = True
    print("open only:", q.count())

    # Forks: one derived value per accepted element, and an eager rebuild
    labels = from_collection(ORDERS).create_with(
        lambda o: o["items"] > 0,
        lambda o, emit: emit(f'{o["customer"]}#{o["order"]}'),
    )
    print("labels:", labels.to_list())

    def one_per_item(parent, emit):
        for o in parent:
            if o["items"] > 4:
                for _ in range(o["items"]):
                    emit(o["order"])
    per_item = from_collection(ORDERS).create(one_per_item)
    print("expanded:", per_item.count())

    # Terminals
    print("largest:", from_collection(ORDERS).not_null(F.total).poll(F.total)["order"])
    print("revenue:", from_collection(ORDERS).sum(F.total))
    print("customers:", sorted(from_collection(ORDERS).select(F.customer).to_set()))


if __name__ == "__main__":
    main()
