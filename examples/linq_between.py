"""
Range filters: F.between, Queryable.between and their null handling.
Run: python examples/linq_between.py
"""

import os
import sys
from datetime import date
# Ensure project root is on sys.path for direct execution
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
from proto_query import from_collection, F


READINGS = [
    {"sensor": "s1", "temp": 18.5, "day": date(2024, 3, 1)},
    {"sensor": "s2", "temp": 21.0, "day": date(2024, 3, 2)},
    {"sensor": "s1", "temp": 25.0, "day": date(2024, 3, 3)},
    {"sensor": "s3", "temp": None, "day": date(2024, 3, 3)},
    {"sensor": "s2", "temp": 30.2, "day": date(2024, 3, 5)},
]


def main():
    q = from_collection(READINGS)

    # F.between treats a missing value as outside every range
    print("comfortable:", q.where(F.temp.between(20, 25)).to_column(F.sensor))
    print("strictly inside:", q.where(F.temp.between(21, 25, inclusive=False)).count())

    # Queryable.between calls the selector directly, so drop nulls first
    warm = q.not_null(F.temp).between(F.temp, 20, 31)
    print("warm, coolest first:", warm.select(F.temp).order_by(lambda t: t).to_list())

    # Dates order like any other value
    march_3 = date(2024, 3, 3)
    window = q.where(F.day.between(date(2024, 3, 2), march_3))
    print("2-3 March:", window.count(), "average:", window.not_null(F.temp).average(F.temp))

    # Range filters stack with the other rules
    print(q.where(F.temp.between(0, 100)).take_while(F.day < march_3).explain("json"))


if __name__ == "__main__":
    main()
