"""Reading a linear system stored in the row-oriented HPC text format.

The format is a whitespace-separated stream of numbers:

* the total number of rows and the total number of stored entries;
* the number of entries in each row, one count per row;
* for every row, its entry count again followed by that many
  ``value column`` pairs;
* for every row, a ``x b xexact`` triple giving the initial guess,
  the right-hand side and the exact solution.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import numpy as np

from hpccg.matrix import LinearSystem, SparseMatrix


class _Tokens:
    """Sequential reader over the whitespace-separated fields of a text."""

    def __init__(self, text: str) -> None:
        self._fields: Iterator[str] = iter(text.split())
        self._position = 0

    def _next(self, what: str) -> str:
        try:
            field = next(self._fields)
        except StopIteration:
            raise ValueError(
                f"unexpected end of data while reading {what} "
                f"(after {self._position} fields)"
            ) from None
        self._position += 1
        return field

    def integer(self, what: str) -> int:
        field = self._next(what)
        try:
            return int(field)
        except ValueError:
            raise ValueError(
                f"field {self._position}: expected an integer for {what}, got {field!r}"
            ) from None

    def real(self, what: str) -> float:
        field = self._next(what)
        try:
            return float(field)
        except ValueError:
            raise ValueError(
                f"field {self._position}: expected a number for {what}, got {field!r}"
            ) from None


def parse_hpc_row(text: str) -> LinearSystem:
    """Parse a linear system from HPC row-format text."""
    tokens = _Tokens(text)
    total_nrow = tokens.integer("the number of rows")
    total_nnz = tokens.integer("the number of entries")
    if total_nrow < 0:
        raise ValueError(f"number of rows must not be negative, got {total_nrow}")

    # Serial layout: every row is local.
    start_row = 0

    nnz_in_row = [tokens.integer(f"the entry count of row {i}") for i in range(total_nrow)]
    for row, count in enumerate(nnz_in_row):
        if count < 0:
            raise ValueError(f"row {row}: entry count must not be negative, got {count}")

    row_values: list[np.ndarray] = []
    row_indices: list[np.ndarray] = []
    for row, expected in enumerate(nnz_in_row):
        count = tokens.integer(f"the entry count of row {row}")
        if count != expected:
            raise ValueError(
                f"row {row}: {count} entries listed but {expected} were announced"
            )
        values = np.empty(count, dtype=np.float64)
        indices = np.empty(count, dtype=np.int64)
        for j in range(count):
            values[j] = tokens.real(f"value {j} of row {row}")
            indices[j] = tokens.integer(f"column {j} of row {row}")
        row_values.append(values)
        row_indices.append(indices)

    x = np.empty(total_nrow, dtype=np.float64)
    b = np.empty(total_nrow, dtype=np.float64)
    xexact = np.empty(total_nrow, dtype=np.float64)
    for row in range(total_nrow):
        x[row] = tokens.real(f"x of row {row}")
        b[row] = tokens.real(f"b of row {row}")
        xexact[row] = tokens.real(f"xexact of row {row}")

    matrix = SparseMatrix(
        row_values=row_values,
        row_indices=row_indices,
        title=None,
        start_row=start_row,
        total_nrow=total_nrow,
        total_nnz=total_nnz,
        local_ncol=total_nrow,
        local_nnz=sum(nnz_in_row),
    )
    return LinearSystem(matrix=matrix, x=x, b=b, xexact=xexact)


def read_hpc_row(path: str | Path) -> LinearSystem:
    """Read a linear system from an HPC row-format file."""
    path = Path(path)
    print(f"Reading matrix info from {path}...")
    text = path.read_text()
    return parse_hpc_row(text)