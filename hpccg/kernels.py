"""Vector and sparse matrix kernels used by the conjugate gradient solver."""

from __future__ import annotations

import numpy as np

from hpccg.matrix import SparseMatrix


def waxpby(alpha: float, x, beta: float, y, out: np.ndarray | None = None) -> np.ndarray:
    """Compute out = alpha * x + beta * y over the length of x.

    ``out`` may be longer than ``x``; only its leading entries are written.
    It may also be the same array as ``x`` or ``y``.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    n = len(x)
    if len(y) < n:
        raise ValueError(f"y has {len(y)} entries, need at least {n}")
    if out is None:
        out = np.empty(n, dtype=np.float64)
    elif len(out) < n:
        raise ValueError(f"out has {len(out)} entries, need at least {n}")
    if alpha == 1.0:
        out[:n] = x + beta * y[:n]
    elif beta == 1.0:
        out[:n] = alpha * x + y[:n]
    else:
        out[:n] = alpha * x + beta * y[:n]
    return out


def ddot(x, y) -> float:
    """Return the dot product of x and y."""
    if y is x:
        xa = np.asarray(x, dtype=np.float64)
        return float(np.dot(xa, xa))
    xa = np.asarray(x, dtype=np.float64)
    ya = np.asarray(y, dtype=np.float64)
    if xa.shape != ya.shape:
        raise ValueError(f"shapes {xa.shape} and {ya.shape} differ")
    return float(np.dot(xa, ya))


def sparsemv(matrix: SparseMatrix, x, out: np.ndarray | None = None) -> np.ndarray:
    """Compute out = A @ x for the local rows of A."""
    x = np.asarray(x, dtype=np.float64)
    if out is None:
        out = np.empty(matrix.local_nrow, dtype=np.float64)
    elif len(out) < matrix.local_nrow:
        raise ValueError(f"out needs at least {matrix.local_nrow} entries")
    for i, (vals, inds) in enumerate(matrix.rows()):
        out[i] = float(np.dot(vals, x[inds]))
    return out


def compute_residual(v1, v2) -> float:
    """Return the largest absolute difference between v1 and v2 (0 if none)."""
    a = np.asarray(v1, dtype=np.float64)
    b = np.asarray(v2, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"shapes {a.shape} and {b.shape} differ")
    diff = np.abs(a - b)
    diff = diff[~np.isnan(diff)]
    if diff.size == 0:
        return 0.0
    return max(0.0, float(diff.max()))