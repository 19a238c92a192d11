from __future__ import annotations

import numpy as np
import pytest
import scipy.sparse as sp

from dimreduction.algos import full_svd, power_svd, rsvd, sign_hyperplanes, svd_flip
from dimreduction.matrix_generators import MatrixGenerator


@pytest.mark.parametrize("solver", [full_svd, rsvd, power_svd])
def test_solvers_recover_singular_values(solver):
    A = MatrixGenerator.lowrank_with_noise(40, 25, 4, 0.0, seed=0)
    _, S_ref, _ = np.linalg.svd(A, full_matrices=False)

    U, S, Vt = solver(A, 4)

    assert U.shape == (40, 4)
    assert S.shape == (4,)
    assert Vt.shape == (4, 25)
    assert np.allclose(S, S_ref[:4], rtol=1e-6)
    assert np.allclose((U * S) @ Vt, A, atol=1e-6)


@pytest.mark.parametrize("solver", [full_svd, rsvd, power_svd])
def test_solvers_accept_sparse_input(solver):
    A = sp.csr_matrix(MatrixGenerator.lowrank_with_noise(30, 20, 2, 0.0, seed=1))
    _, S, _ = solver(A, 2)
    _, S_ref, _ = np.linalg.svd(A.toarray())
    assert np.allclose(S, S_ref[:2], rtol=1e-6)


@pytest.mark.parametrize("solver", [full_svd, rsvd, power_svd])
def test_invalid_rank(solver):
    A = np.ones((5, 3))
    with pytest.raises(ValueError):
        solver(A, 0)
    with pytest.raises(ValueError):
        solver(A, 4)


def test_power_svd_fails_on_exhausted_residual():
    A = MatrixGenerator.lowrank_with_noise(10, 8, 1, 0.0, seed=2)
    with pytest.raises(RuntimeError):
        power_svd(A, 2)


def test_svd_flip_is_deterministic_and_preserves_product():
    rng = np.random.default_rng(3)
    A = rng.standard_normal((8, 5))
    U, S, Vt = np.linalg.svd(A, full_matrices=False)

    U1, Vt1 = svd_flip(U, Vt)
    U2, Vt2 = svd_flip(-U, -Vt)

    assert np.allclose(U1, U2)
    assert np.allclose(Vt1, Vt2)
    assert np.allclose((U1 * S) @ Vt1, A)
    pivots = np.argmax(np.abs(U1), axis=0)
    assert np.all(U1[pivots, np.arange(5)] > 0)


def test_sign_hyperplanes_reproducible():
    a = sign_hyperplanes(8, 20, 0.5, np.random.default_rng(4))
    b = sign_hyperplanes(8, 20, 0.5, np.random.default_rng(4))

    assert a.dtype == np.int8
    assert a.shape == (8, 20)
    assert np.array_equal(a, b)


def test_sign_hyperplanes_rejects_bad_density():
    with pytest.raises(ValueError):
        sign_hyperplanes(8, 20, 0.0, np.random.default_rng(0))
