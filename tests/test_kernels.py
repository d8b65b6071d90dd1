import numpy as np
import pytest

from hpccg.kernels import compute_residual, ddot, sparsemv, waxpby
from hpccg.matrix import SparseMatrix


def test_waxpby_copy_branch():
    x = np.array([1.0, 2.0, 3.0])
    out = waxpby(1.0, x, 0.0, x)
    assert out.tolist() == x.tolist()


def test_waxpby_alpha_one_branch():
    x = np.array([1.0, 2.0])
    y = np.array([4.0, 8.0])
    out = waxpby(1.0, x, -1.0, y)
    assert out.tolist() == (x - y).tolist()


def test_waxpby_beta_one_branch():
    x = np.array([1.0, 2.0])
    y = np.array([4.0, 8.0])
    out = waxpby(2.0, x, 1.0, y)
    assert out.tolist() == (x + x + y).tolist()


def test_waxpby_general_branch_matches_linear_combination():
    rng = np.random.default_rng(0)
    x = rng.standard_normal(5)
    y = rng.standard_normal(5)
    out = waxpby(0.5, x, 0.25, y)
    assert np.allclose(out, 0.5 * x + 0.25 * y)


def test_waxpby_in_place_on_y():
    r = np.array([1.0, 1.0])
    p = np.array([2.0, 4.0])
    waxpby(1.0, r, 0.5, p, p)
    assert p.tolist() == [2.0, 3.0]


def test_waxpby_writes_only_leading_entries():
    x = np.array([1.0, 2.0])
    out = np.full(4, -7.0)
    waxpby(1.0, x, 0.0, x, out)
    assert out.tolist() == [1.0, 2.0, -7.0, -7.0]


def test_waxpby_short_y_rejected():
    with pytest.raises(ValueError):
        waxpby(1.0, [1.0, 2.0], 1.0, [1.0])


def test_ddot_self_is_sum_of_squares():
    x = np.array([1.0, 2.0, 3.0])
    assert ddot(x, x) == 14.0


def test_ddot_symmetric_and_nonnegative():
    rng = np.random.default_rng(1)
    x = rng.standard_normal(7)
    y = rng.standard_normal(7)
    assert ddot(x, y) == pytest.approx(ddot(y, x))
    assert ddot(x, x) >= 0.0


def test_ddot_shape_mismatch():
    with pytest.raises(ValueError):
        ddot([1.0, 2.0], [1.0])


def test_sparsemv_identity_returns_input():
    m = SparseMatrix([[1.0], [1.0], [1.0]], [[0], [1], [2]])
    x = np.array([3.0, -2.0, 5.0])
    assert sparsemv(m, x).tolist() == x.tolist()


def test_sparsemv_matches_dense_product():
    values = [[27.0, -1.0], [-1.0, 27.0, -1.0], [-1.0, 27.0]]
    indices = [[0, 1], [0, 1, 2], [1, 2]]
    m = SparseMatrix(values, indices)
    dense = np.zeros((3, 3))
    for i, (vals, inds) in enumerate(zip(values, indices)):
        dense[i, inds] = vals
    x = np.array([1.0, 2.0, 3.0])
    assert np.allclose(sparsemv(m, x), dense @ x)


def test_sparsemv_overwrites_output():
    m = SparseMatrix([[2.0]], [[0]])
    out = np.array([100.0])
    sparsemv(m, [1.0], out)
    assert out.tolist() == [2.0]


def test_compute_residual_zero_for_equal():
    v = np.array([1.0, 2.0, 3.0])
    assert compute_residual(v, v.copy()) == 0.0


def test_compute_residual_is_max_abs_difference():
    v1 = np.array([1.0, 1.0, 1.0])
    v2 = np.array([1.0, 1.5, 0.25])
    assert compute_residual(v1, v2) == 0.75


def test_compute_residual_ignores_nan():
    v1 = np.array([np.nan, 1.0])
    v2 = np.array([0.0, 0.5])
    assert compute_residual(v1, v2) == 0.5


def test_compute_residual_shape_mismatch():
    with pytest.raises(ValueError):
        compute_residual([1.0], [1.0, 2.0])