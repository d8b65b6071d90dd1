"""Conjugate gradient solver for the sparse test problem."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

import numpy as np

from hpccg.kernels import compute_residual, ddot, sparsemv, waxpby
from hpccg.matrix import SparseMatrix

_MAX_PRINT_FREQ = 50


@dataclass
class CGResult:
    """Outcome of a conjugate gradient run."""

    x: np.ndarray
    niters: int
    normr: float
    r: np.ndarray
    p: np.ndarray
    Ap: np.ndarray
    residual: float | None = None


def _divide(numerator: float, denominator: float) -> float:
    # Follow IEEE semantics: 0/0 gives nan and x/0 gives inf, without raising.
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


def _print_frequency(max_iter: int) -> int:
    return min(max(int(max_iter / 10), 1), _MAX_PRINT_FREQ)


def _as_vector(name: str, values, nrow: int) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    if array.ndim != 1 or len(array) != nrow:
        raise ValueError(f"{name} must have {nrow} entries, got shape {array.shape}")
    return array


def hpccg(
    matrix: SparseMatrix,
    b,
    x,
    max_iter: int = 100,
    tolerance: float = 0.0,
    log: Callable[[str], None] | None = None,
) -> CGResult:
    """Solve A x = b by conjugate gradients starting from the guess ``x``.

    Iterates while the iteration count is below ``max_iter`` and the
    residual norm exceeds ``tolerance``. The input ``x`` is not modified;
    the solution is returned in the result. Progress lines are passed to
    ``log`` when it is given.
    """
    nrow = matrix.local_nrow
    ncol = max(matrix.local_ncol, nrow)
    b = _as_vector("b", b, nrow)
    x = _as_vector("x", x, nrow)

    r = np.zeros(nrow, dtype=np.float64)
    p = np.zeros(ncol, dtype=np.float64)
    Ap = np.zeros(nrow, dtype=np.float64)

    emit = log if log is not None else (lambda _message: None)
    print_freq = _print_frequency(max_iter)
    niters = 0

    # p is of length ncol; copy x into it for the sparse product.
    waxpby(1.0, x, 0.0, x, p)
    sparsemv(matrix, p, Ap)
    waxpby(1.0, b, -1.0, Ap, r)
    rtrans = ddot(r, r)
    normr = math.sqrt(rtrans)
    emit(f"Initial Residual = {normr:g}")

    k = 1
    while k < max_iter and normr > tolerance:
        if k == 1:
            waxpby(1.0, r, 0.0, r, p)
        else:
            oldrtrans = rtrans
            rtrans = ddot(r, r)
            beta = _divide(rtrans, oldrtrans)
            waxpby(1.0, r, beta, p[:nrow], p)

        normr = math.sqrt(rtrans) if rtrans >= 0 else float("nan")
        if k % print_freq == 0 or k + 1 == max_iter:
            emit(f"Iteration = {k}   Residual = {normr:g}")

        sparsemv(matrix, p, Ap)
        alpha = _divide(rtrans, ddot(p[:nrow], Ap))
        waxpby(1.0, x, alpha, p[:nrow], x)
        waxpby(1.0, r, -alpha, Ap, r)
        niters = k
        k += 1

    return CGResult(x=x, niters=niters, normr=normr, r=r, p=p, Ap=Ap)


def hpccg_residual(
    matrix: SparseMatrix,
    b,
    x,
    xexact,
    max_iter: int = 100,
    tolerance: float = 0.0,
    log: Callable[[str], None] | None = None,
) -> CGResult:
    """Run :func:`hpccg` and record the largest deviation from ``xexact``."""
    xexact = _as_vector("xexact", xexact, matrix.local_nrow)
    result = hpccg(matrix, b, x, max_iter, tolerance, log)
    result.residual = compute_residual(result.x, xexact)
    return result