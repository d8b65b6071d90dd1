"""Compressed-row sparse matrix used by the conjugate gradient solver."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import numpy as np

# Upper bounds that may need raising for pathological matrices,
# e.g. those with nearly dense rows or columns.
MAX_EXTERNAL = 100000
MAX_NUM_MESSAGES = 500
MAX_NUM_NEIGHBORS = MAX_NUM_MESSAGES

_MAX_DUMP_RANK = 3


@dataclass
class SparseMatrix:
    """A row-oriented sparse matrix: per row, its values and column indices."""

    row_values: list[np.ndarray]
    row_indices: list[np.ndarray]
    diagonal_positions: list[int | None] | None = None
    title: str | None = None
    start_row: int = 0
    total_nrow: int | None = None
    total_nnz: int | None = None
    local_ncol: int | None = None
    local_nnz: int | None = None

    def __post_init__(self) -> None:
        if len(self.row_values) != len(self.row_indices):
            raise ValueError(
                f"{len(self.row_values)} value rows but "
                f"{len(self.row_indices)} index rows"
            )
        self.row_values = [np.asarray(v, dtype=np.float64) for v in self.row_values]
        self.row_indices = [np.asarray(i, dtype=np.int64) for i in self.row_indices]
        for row, (vals, inds) in enumerate(zip(self.row_values, self.row_indices)):
            if vals.ndim != 1 or vals.shape != inds.shape:
                raise ValueError(
                    f"row {row}: {vals.shape} values do not match {inds.shape} indices"
                )
        nnz = sum(len(v) for v in self.row_values)
        nrow = len(self.row_values)
        if self.total_nrow is None:
            self.total_nrow = nrow
        if self.total_nnz is None:
            self.total_nnz = nnz
        if self.local_ncol is None:
            self.local_ncol = nrow
        if self.local_nnz is None:
            self.local_nnz = nnz
        if self.diagonal_positions is None:
            self.diagonal_positions = [
                _find_position(inds, self.start_row + row)
                for row, inds in enumerate(self.row_indices)
            ]
        elif len(self.diagonal_positions) != nrow:
            raise ValueError("one diagonal position is needed per row")

    @property
    def local_nrow(self) -> int:
        """Number of rows held locally."""
        return len(self.row_values)

    @property
    def stop_row(self) -> int:
        """Global index of the last local row."""
        return self.start_row + self.local_nrow - 1

    @property
    def nnz_in_row(self) -> list[int]:
        """Number of stored entries in each row."""
        return [len(v) for v in self.row_values]

    def rows(self) -> Iterator[tuple[np.ndarray, np.ndarray]]:
        """Yield (values, column indices) for each row in order."""
        yield from zip(self.row_values, self.row_indices)

    def values_f32(self, row: int) -> np.ndarray:
        """Return the values of one row in single precision."""
        return self.row_values[row].astype(np.float32)


def _find_position(indices: np.ndarray, column: int) -> int | None:
    hits = np.flatnonzero(indices == column)
    return int(hits[0]) if hits.size else None


@dataclass
class LinearSystem:
    """A matrix together with the initial guess, right-hand side and exact solution."""

    matrix: SparseMatrix
    x: np.ndarray
    b: np.ndarray
    xexact: np.ndarray

    def __post_init__(self) -> None:
        self.x = np.asarray(self.x, dtype=np.float64).copy()
        self.b = np.asarray(self.b, dtype=np.float64).copy()
        self.xexact = np.asarray(self.xexact, dtype=np.float64).copy()
        nrow = self.matrix.local_nrow
        for name in ("x", "b", "xexact"):
            if len(getattr(self, name)) != nrow:
                raise ValueError(f"{name} must have {nrow} entries")


def dump_matlab_matrix(
    matrix: SparseMatrix, rank: int = 0, directory: str | Path = "."
) -> Path | None:
    """Write the matrix as 1-based 'row col value' triplets to mat<rank>.dat.

    Only ranks 0 to 3 produce a file; any other rank writes nothing and
    returns None.
    """
    if not 0 <= rank <= _MAX_DUMP_RANK:
        return None
    start_row = matrix.local_nrow * rank
    path = Path(directory) / f"mat{rank}.dat"
    with path.open("w") as handle:
        for i, (vals, inds) in enumerate(matrix.rows()):
            for value, col in zip(vals, inds):
                handle.write(" %d %d %22.16e\n" % (start_row + i + 1, col + 1, value))
    return path