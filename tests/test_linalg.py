import numpy as np
import pytest

from marquardt.errors import SingularMatrixError
from marquardt.linalg import damped_matrix, invert_spd, normal_equations, solve_spd


def _spd(rng, n):
    a = rng.normal(size=(n, n))
    return a @ a.T + n * np.eye(n)


def test_normal_equations_match_explicit_products():
    rng = np.random.default_rng(0)
    jac = rng.normal(size=(20, 3))
    r = rng.normal(size=20)

    jtj, jtr = normal_equations(jac, r)

    np.testing.assert_allclose(jtj, jac.T @ jac)
    np.testing.assert_allclose(jtr, jac.T @ r)
    np.testing.assert_allclose(jtj, jtj.T)


def test_solve_spd_matches_numpy():
    rng = np.random.default_rng(1)
    a = _spd(rng, 4)
    b = rng.normal(size=4)

    np.testing.assert_allclose(solve_spd(a, b), np.linalg.solve(a, b), rtol=1e-10)


def test_solve_spd_falls_back_to_lu_for_indefinite_matrix():
    a = np.array([[1.0, 2.0], [2.0, 1.0]])  # symmetric, not positive definite
    b = np.array([1.0, 0.0])

    np.testing.assert_allclose(solve_spd(a, b), np.linalg.solve(a, b), rtol=1e-12)


def test_solve_spd_singular_raises():
    a = np.array([[1.0, 1.0], [1.0, 1.0]])
    with pytest.raises(SingularMatrixError):
        solve_spd(a, np.array([1.0, 2.0]))


def test_damped_matrix_scales_diagonal():
    jtj = np.array([[4.0, 1.0], [1.0, 9.0]])
    out = damped_matrix(jtj, 0.5)

    np.testing.assert_allclose(out, [[6.0, 1.0], [1.0, 13.5]])


def test_damped_matrix_floors_zero_diagonal():
    jtj = np.array([[4.0, 0.0], [0.0, 0.0]])
    out = damped_matrix(jtj, 1.0)

    assert out[1, 1] > 0.0
    x = solve_spd(out, np.array([2.0, 0.0]))
    assert x[1] == 0.0


def test_invert_spd_is_symmetric_inverse():
    rng = np.random.default_rng(2)
    a = _spd(rng, 3)
    inv = invert_spd(a)

    np.testing.assert_allclose(inv @ a, np.eye(3), atol=1e-10)
    np.testing.assert_allclose(inv, inv.T)
