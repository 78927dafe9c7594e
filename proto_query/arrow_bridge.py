"""
Columnar export and import of query results through pyarrow.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterable, Optional, Sequence, TYPE_CHECKING

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq

if TYPE_CHECKING:
    from .linq import Queryable

SCALAR_COLUMN = 'value'


def _cell(value: Any) -> Any:
    # numpy arrays inside rows become plain lists so pyarrow can infer a list type
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    return value


def to_arrow(records: Iterable[Any], columns: Optional[Sequence[str]] = None) -> pa.Table:
    """
    Build a pyarrow.Table from an iterable of rows.

    Mapping rows are laid out column by column; a column missing from a row is
    null. Any other row goes to a single column named ``value``.

    :param records: rows to convert
    :param columns: restrict and order the output columns
    :return: the table
    """
    rows = list(records)
    if rows and not all(isinstance(r, Mapping) for r in rows):
        if any(isinstance(r, Mapping) for r in rows):
            raise ValueError("to_arrow() cannot mix mapping rows and scalar rows")
        return pa.table({SCALAR_COLUMN: pa.array([_cell(r) for r in rows])})
    if columns is None:
        names: list[str] = []
        for row in rows:
            for k in row.keys():
                if k not in names:
                    names.append(k)
    else:
        names = list(columns)
    cols = {name: pa.array([_cell(row.get(name)) for row in rows]) for name in names}
    return pa.table(cols)


def to_parquet(records: Iterable[Any], path: str, columns: Optional[Sequence[str]] = None,
               compression: str = 'zstd', dict_encoding: bool = True) -> None:
    table = to_arrow(records, columns=columns)
    pq.write_table(table, path, compression=compression, use_dictionary=dict_encoding)


def from_parquet(path: str, columns: Optional[Sequence[str]] = None) -> Queryable[dict]:
    """Entry point to query the rows of a parquet file."""
    from .linq import Queryable
    table = pq.read_table(path, columns=list(columns) if columns is not None else None)
    return Queryable(table.to_pylist())


def to_numpy(values: Iterable[Any], dtype: Any = None) -> np.ndarray:
    return np.asarray(list(values), dtype=dtype)
