"""Randomized SVD with a Gaussian range finder.

Samples the range of A with a Gaussian test matrix, refines it with subspace
iterations, and takes an exact SVD of the small projected matrix.
"""

import numpy as np
import scipy.sparse as sp
from scipy.linalg import qr, svd


def rsvd(A, rank, n_oversamples=10, n_subspace_iters=4, seed=None):
    """Randomized SVD.

    Args:
        A: (m x n) numpy array or scipy sparse matrix
        rank: desired rank
        n_oversamples: extra sample columns beyond `rank` (default: 10)
        n_subspace_iters: number of power (subspace) iterations (default: 4)
        seed: int, numpy Generator or None

    Returns:
        U, S, Vt: Rank-k SVD factors
    """
    m, n = A.shape
    if rank < 1:
        raise ValueError(f"Rank must be at least 1, got {rank}")
    if rank > min(m, n):
        raise ValueError(f"Rank must be at most min(m, n) = {min(m, n)}, got {rank}")

    rng = np.random.default_rng(seed)
    n_samples = min(rank + n_oversamples, min(m, n))

    # Stage A: orthonormal basis Q for the range of A
    Omega = rng.standard_normal((n, n_samples))
    Q, _ = qr(_dense(A @ Omega), mode="economic")
    for _ in range(n_subspace_iters):
        # Re-orthonormalize between multiplications to keep small singular directions
        Z, _ = qr(_dense(A.T @ Q), mode="economic")
        Q, _ = qr(_dense(A @ Z), mode="economic")

    # Stage B: SVD of the small matrix B = Q^T A
    B = _dense(A.T @ Q).T
    Ub, S, Vt = svd(B, full_matrices=False)
    U = Q @ Ub

    return U[:, :rank], S[:rank], Vt[:rank, :]


def _dense(M):
    return M.toarray() if sp.issparse(M) else np.asarray(M)
