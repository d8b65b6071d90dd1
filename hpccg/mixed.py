"""Conjugate gradients that switch from double to single precision part way."""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from hpccg.kernels import compute_residual, ddot, sparsemv, waxpby
from hpccg.matrix import SparseMatrix
from hpccg.solver import CGResult

_DEFAULT_HIGH_PREC_ITERS = 60


@dataclass
class _DoubleState:
    """Working vectors and scalars of a double-precision CG run."""

    x: np.ndarray
    r: np.ndarray
    p: np.ndarray
    Ap: np.ndarray
    rtrans: float = 0.0
    oldrtrans: float = 0.0
    normr: float = 0.0
    niters: int = 0


def _as_vector(name: str, values, nrow: int) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    if array.ndim != 1 or len(array) != nrow:
        raise ValueError(f"{name} must have {nrow} entries, got shape {array.shape}")
    return array


def _divide(numerator, denominator):
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return numerator / denominator


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0 else float("nan")


def _start(matrix: SparseMatrix, b: np.ndarray, x: np.ndarray) -> _DoubleState:
    nrow = matrix.local_nrow
    ncol = max(matrix.local_ncol, nrow)
    state = _DoubleState(
        x=x,
        r=np.zeros(nrow, dtype=np.float64),
        p=np.zeros(ncol, dtype=np.float64),
        Ap=np.zeros(nrow, dtype=np.float64),
    )
    waxpby(1.0, x, 0.0, x, state.p)
    sparsemv(matrix, state.p, state.Ap)
    waxpby(1.0, b, -1.0, state.Ap, state.r)
    state.rtrans = ddot(state.r, state.r)
    state.normr = _sqrt(state.rtrans)
    return state


def _double_step(matrix: SparseMatrix, state: _DoubleState, k: int) -> None:
    nrow = matrix.local_nrow
    if k == 1:
        waxpby(1.0, state.r, 0.0, state.r, state.p)
    else:
        state.oldrtrans = state.rtrans
        state.rtrans = ddot(state.r, state.r)
        beta = float(_divide(np.float64(state.rtrans), np.float64(state.oldrtrans)))
        waxpby(1.0, state.r, beta, state.p[:nrow], state.p)
    state.normr = _sqrt(state.rtrans)
    sparsemv(matrix, state.p, state.Ap)
    alpha = float(
        _divide(np.float64(state.rtrans), np.float64(ddot(state.p[:nrow], state.Ap)))
    )
    waxpby(1.0, state.x, alpha, state.p[:nrow], state.x)
    waxpby(1.0, state.r, -alpha, state.Ap, state.r)
    state.niters = k


def _single_precision_loop(
    matrix: SparseMatrix, state: _DoubleState, first_k: int, max_iter: int
) -> None:
    """Continue the iteration in float32 from ``first_k`` up to ``max_iter``."""
    nrow = matrix.local_nrow
    f32 = np.float32
    rf = state.r.astype(f32)
    pf = state.p.astype(f32)
    Apf = state.Ap.astype(f32)
    xf = state.x.astype(f32)
    oldrtransf = f32(state.oldrtrans)
    rtransf = f32(state.rtrans)
    row_values_f = [matrix.values_f32(i) for i in range(nrow)]

    for k in range(first_k, max_iter):
        oldrtransf = rtransf
        rtransf = f32(np.dot(rf, rf))
        beta = f32(_divide(rtransf, oldrtransf))
        pf[:nrow] = rf + beta * pf[:nrow]

        state.normr = float(np.sqrt(rtransf)) if rtransf >= 0 else float("nan")

        for i, (vals, inds) in enumerate(zip(row_values_f, matrix.row_indices)):
            Apf[i] = np.dot(vals, pf[inds])

        alpha = f32(np.dot(pf[:nrow], Apf))
        alpha = f32(_divide(rtransf, alpha))
        xf = xf + alpha * pf[:nrow]
        rf = rf - alpha * Apf
        state.niters = k

    state.oldrtrans = float(oldrtransf)
    state.rtrans = float(rtransf)
    state.p = pf.astype(np.float64)
    state.r = rf.astype(np.float64)
    state.Ap = Apf.astype(np.float64)
    state.x = xf.astype(np.float64)


def _result(state: _DoubleState, xexact: np.ndarray) -> CGResult:
    return CGResult(
        x=state.x,
        niters=state.niters,
        normr=state.normr,
        r=state.r,
        p=state.p,
        Ap=state.Ap,
        residual=compute_residual(state.x, xexact),
    )


def mixed_precision_hpccg(
    matrix: SparseMatrix,
    b,
    x,
    xexact,
    max_iter: int = 100,
    high_prec_iters: int = _DEFAULT_HIGH_PREC_ITERS,
) -> CGResult:
    """Run CG in double precision for the first iterations, then in float32.

    Iterations 1 to ``high_prec_iters - 1`` run in double precision; the
    state is then rounded to single precision and iterations continue up
    to ``max_iter - 1``. No tolerance test is made. The input ``x`` is not
    modified; the result carries the solution and its largest deviation
    from ``xexact``.
    """
    nrow = matrix.local_nrow
    b = _as_vector("b", b, nrow)
    x = _as_vector("x", x, nrow)
    xexact = _as_vector("xexact", xexact, nrow)

    state = _start(matrix, b, x)
    k = 1
    while k < high_prec_iters:
        _double_step(matrix, state, k)
        k += 1
    _single_precision_loop(matrix, state, k, max_iter)
    return _result(state, xexact)


def high_precision_hpccg(
    matrix: SparseMatrix, b, x, xexact, max_iter: int = 100
) -> CGResult:
    """Run CG in double precision for iterations 1 to ``max_iter - 1``.

    No tolerance test is made. The input ``x`` is not modified.
    """
    nrow = matrix.local_nrow
    b = _as_vector("b", b, nrow)
    x = _as_vector("x", x, nrow)
    xexact = _as_vector("xexact", xexact, nrow)

    state = _start(matrix, b, x)
    for k in range(1, max_iter):
        _double_step(matrix, state, k)
    return _result(state, xexact)