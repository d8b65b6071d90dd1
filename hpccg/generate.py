"""Generation of the 27-point (or 7-point) stencil test problem."""

from __future__ import annotations

from itertools import product

import numpy as np

from hpccg.matrix import LinearSystem, SparseMatrix

_DIAGONAL_VALUE = 27.0
_OFF_DIAGONAL_VALUE = -1.0
_APPROX_NNZ_PER_ROW = 27
_OFFSETS = (-1, 0, 1)


def generate_matrix(
    nx: int, ny: int, nz: int, use_7pt_stencil: bool = False
) -> LinearSystem:
    """Build the stencil matrix on an nx by ny by nz grid.

    Each row couples a grid point to its neighbours: 27.0 on the diagonal
    and -1.0 for every neighbour inside the domain. The right-hand side is
    chosen so that the exact solution is all ones; the initial guess is zero.
    With ``use_7pt_stencil`` only face neighbours are kept.
    """
    if nx < 1 or ny < 1 or nz < 1:
        raise ValueError(f"grid dimensions must be positive, got {nx}x{ny}x{nz}")

    local_nrow = nx * ny * nz
    total_nrow = local_nrow
    start_row = 0
    plane = nx * ny

    row_values: list[np.ndarray] = []
    row_indices: list[np.ndarray] = []
    diagonal_positions: list[int | None] = []
    b = np.empty(local_nrow, dtype=np.float64)

    for iz, iy, ix in product(range(nz), range(ny), range(nx)):
        local_row = iz * plane + iy * nx + ix
        current_row = start_row + local_row
        values: list[float] = []
        indices: list[int] = []
        diagonal: int | None = None
        for sz, sy, sx in product(_OFFSETS, repeat=3):
            column = current_row + sz * plane + sy * nx + sx
            # x and y overflow is checked explicitly; the column range
            # check is enough for the stacking z direction.
            if not (0 <= ix + sx < nx and 0 <= iy + sy < ny and 0 <= column < total_nrow):
                continue
            if use_7pt_stencil and sz * sz + sy * sy + sx * sx > 1:
                continue
            if column == current_row:
                diagonal = len(values)
                values.append(_DIAGONAL_VALUE)
            else:
                values.append(_OFF_DIAGONAL_VALUE)
            indices.append(column)
        row_values.append(np.array(values, dtype=np.float64))
        row_indices.append(np.array(indices, dtype=np.int64))
        diagonal_positions.append(diagonal)
        b[local_row] = _DIAGONAL_VALUE - (len(values) - 1)

    matrix = SparseMatrix(
        row_values=row_values,
        row_indices=row_indices,
        diagonal_positions=diagonal_positions,
        title=None,
        start_row=start_row,
        total_nrow=total_nrow,
        total_nnz=_APPROX_NNZ_PER_ROW * total_nrow,
        local_ncol=local_nrow,
        local_nnz=_APPROX_NNZ_PER_ROW * local_nrow,
    )
    return LinearSystem(
        matrix=matrix,
        x=np.zeros(local_nrow, dtype=np.float64),
        b=b,
        xexact=np.ones(local_nrow, dtype=np.float64),
    )