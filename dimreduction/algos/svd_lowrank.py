"""SVD-based rank-k factorizations.

Implements a LAPACK-backed thin SVD and a power-iteration SVD with implicit
deflation, plus the sign convention shared by every solver.
"""

import numpy as np
import scipy.sparse as sp
from scipy.linalg import LinAlgError, svd


def _validate_rank(A, rank):
    m, n = A.shape
    if rank < 1:
        raise ValueError(f"Rank must be at least 1, got {rank}")
    if rank > min(m, n):
        raise ValueError(f"Rank must be at most min(m, n) = {min(m, n)}, got {rank}")


def full_svd(A, rank):
    """
    Rank-k factorization from a full thin SVD.

    This is the standard truncated SVD approach for optimal low-rank approximation
    (Eckart-Young-Mirsky theorem). Sparse input is densified first.

    Args:
        A: (m x n) numpy array or scipy sparse matrix - input matrix
        rank: int - number of singular triplets to keep

    Returns:
        U: (m x rank) numpy array - left singular vectors
        S: (rank,) numpy array - singular values
        Vt: (rank x n) numpy array - right singular vectors (transposed)

    Raises:
        ValueError: If rank is invalid (< 1 or > min(m, n))
        LinAlgError: If neither LAPACK driver converges
    """
    _validate_rank(A, rank)
    if sp.issparse(A):
        A = A.toarray()

    try:
        U, S, Vt = svd(A, full_matrices=False, lapack_driver="gesdd")
    except LinAlgError:
        # gesvd is slower but converges on inputs where the divide-and-conquer driver fails
        U, S, Vt = svd(A, full_matrices=False, lapack_driver="gesvd")

    return U[:, :rank], S[:rank], Vt[:rank, :]


def power_svd(A, rank, max_iters=10000, tol=1e-10, seed=None):
    """
    Rank-k factorization by power iteration with deflation.

    Finds one singular triplet at a time by power iteration on A^T A. Found
    triplets are removed from the operator implicitly, so sparse input stays
    sparse.

    Args:
        A: (m x n) numpy array or scipy sparse matrix - input matrix
        rank: int - number of singular triplets to compute
        max_iters: int - maximum iterations per triplet (default: 10000)
        tol: float - convergence tolerance (default: 1e-10)
        seed: int, numpy Generator or None - start vector source

    Returns:
        U: (m x rank) numpy array - left singular vectors
        S: (rank,) numpy array - singular values
        Vt: (rank x n) numpy array - right singular vectors (transposed)

    Raises:
        ValueError: If rank is invalid
        RuntimeError: If power iteration fails to converge or the residual
            vanishes before `rank` triplets are found
    """
    _validate_rank(A, rank)
    m, n = A.shape
    rng = np.random.default_rng(seed)

    U = np.zeros((m, rank))
    S = np.zeros(rank)
    Vt = np.zeros((rank, n))

    for k in range(rank):
        u, sigma, v = _power_iteration(A, U[:, :k], S[:k], Vt[:k, :], rng, max_iters, tol)
        U[:, k] = u
        S[k] = sigma
        Vt[k, :] = v

    return U, S, Vt


def _power_iteration(A, U, S, Vt, rng, max_iters, tol):
    """
    Find the dominant singular triplet of A - U diag(S) Vt.

    Raises:
        RuntimeError: If iteration fails to converge
    """
    n = A.shape[1]

    v = rng.standard_normal(n)
    v = v / np.linalg.norm(v)

    for iteration in range(max_iters):
        v_old = v

        # A^T (A v) rather than (A^T A) v
        Av = _residual_matvec(A, U, S, Vt, v)
        v = _residual_rmatvec(A, U, S, Vt, Av)

        v_norm = np.linalg.norm(v)
        if v_norm < tol:
            raise RuntimeError(f"Power iteration failed: v_norm = {v_norm} < {tol}")
        v = v / v_norm

        if np.linalg.norm(v - v_old) < tol:
            break
    else:
        raise RuntimeError(
            f"Power iteration did not converge after {max_iters} iterations"
        )

    Av = _residual_matvec(A, U, S, Vt, v)
    sigma = np.linalg.norm(Av)
    if sigma < tol:
        raise RuntimeError(f"Residual is numerically zero: sigma = {sigma} < {tol}")

    return Av / sigma, sigma, v


def _residual_matvec(A, U, S, Vt, v):
    return np.asarray(A @ v).ravel() - U @ (S * (Vt @ v))


def _residual_rmatvec(A, U, S, Vt, w):
    return np.asarray(A.T @ w).ravel() - Vt.T @ (S * (U.T @ w))


def svd_flip(U, Vt):
    """
    Make singular vector signs deterministic.

    Each left singular vector is flipped so that its largest-magnitude entry is
    positive; the matching right singular vector is flipped with it, so
    U diag(S) Vt is unchanged.

    Args:
        U: (m x k) numpy array - left singular vectors
        Vt: (k x n) numpy array - right singular vectors (transposed)

    Returns:
        U, Vt with consistent signs
    """
    pivots = np.argmax(np.abs(U), axis=0)
    signs = np.sign(U[pivots, np.arange(U.shape[1])])
    signs[signs == 0] = 1.0
    return U * signs, Vt * signs[:, np.newaxis]
