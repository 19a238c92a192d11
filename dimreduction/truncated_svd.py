"""Truncated SVD for latent semantic projection.

Fits the top-k left singular vectors of a features x samples matrix and
projects new samples onto them.
"""

import logging
from typing import Optional

import numpy as np
import scipy.sparse as sp

from .algos import full_svd, power_svd, rsvd, svd_flip
from .errors import ComputationError, DecodeError, DimensionError
from .persistence import read_record, write_record
from .transformer import (
    Transformer,
    as_input,
    as_matrix,
    check_features,
    check_fitted,
    frozen,
    left_multiply,
)

logger = logging.getLogger(__name__)

ALGORITHMS = ("full", "randomized", "power")

_RECORD_KIND = b"TSVD"
_RECORD_SCALARS = "<q"


class TruncatedSVD(Transformer):
    """
    Rank-k truncated SVD transform.

    After fitting, `components` is the (k x n_features) matrix U_k^T whose rows
    are the leading left singular vectors of the fitted matrix. `transform(X)`
    returns `components @ X`; on the fitted matrix this equals
    diag(S_k) V_k^T, the samples' coordinates in latent space.

    Args:
        k: target rank
        algorithm: "full" (LAPACK thin SVD), "randomized" or "power"
        n_oversamples: extra sample columns for the randomized solver
        n_iter: subspace iterations for the randomized solver
        seed: int, numpy Generator or None, for the iterative solvers
    """

    def __init__(
        self,
        k: int,
        algorithm: str = "full",
        n_oversamples: int = 10,
        n_iter: int = 4,
        seed=None,
    ):
        if k < 1:
            raise ValueError(f"Rank must be at least 1, got {k}")
        if algorithm not in ALGORITHMS:
            raise ValueError(
                f"Unknown algorithm {algorithm!r}, expected one of {ALGORITHMS}"
            )
        self.k = k
        self.algorithm = algorithm
        self.n_oversamples = n_oversamples
        self.n_iter = n_iter
        self.seed = seed
        self._components: Optional[np.ndarray] = None
        self.singular_values: Optional[np.ndarray] = None

    @property
    def components(self) -> Optional[np.ndarray]:
        """Read-only (k x n_features) projection basis, or None before fitting."""
        return self._components

    @components.setter
    def components(self, value):
        self._components = None if value is None else frozen(value, dtype=np.float64)

    def fit(self, X) -> "TruncatedSVD":
        """
        Fit the projection basis to a features x samples matrix.

        Raises:
            DimensionError: If k exceeds min(m, n) or X is not 2-D
            ComputationError: If X has non-finite entries, the solver fails,
                or X has rank below k
        """
        X = as_matrix(X)
        m, n = X.shape
        values = X.data if sp.issparse(X) else X
        if not np.all(np.isfinite(values)):
            raise ComputationError("Input contains NaN or infinite values")
        if self.k > min(m, n):
            raise DimensionError(
                f"Rank k={self.k} exceeds min(m, n) = {min(m, n)} of a {m}x{n} input"
            )

        try:
            U, S, Vt = self._factorize(X)
        except (np.linalg.LinAlgError, RuntimeError) as e:
            raise ComputationError(f"SVD of {m}x{n} input failed: {e}") from e

        tol = (S[0] if S.size else 0.0) * max(m, n) * np.finfo(np.float64).eps
        if S.size < self.k or not S[self.k - 1] > tol:
            raise ComputationError(
                f"Input has numerical rank below k={self.k} "
                f"(singular values {np.array2string(S, precision=3)})"
            )

        U, Vt = svd_flip(U[:, : self.k], Vt[: self.k, :])
        self.components = U.T
        self.singular_values = frozen(S[: self.k])

        logger.debug(
            "Fitted %s truncated SVD with k=%d on %dx%d input, leading singular value %.4g",
            self.algorithm, self.k, m, n, S[0],
        )
        return self

    def _factorize(self, X):
        if self.algorithm == "full":
            return full_svd(X, self.k)
        if self.algorithm == "randomized":
            return rsvd(
                X,
                self.k,
                n_oversamples=self.n_oversamples,
                n_subspace_iters=self.n_iter,
                seed=self.seed,
            )
        return power_svd(X, self.k, seed=self.seed)

    def transform(self, X) -> np.ndarray:
        """
        Project samples into the fitted latent space.

        Args:
            X: (n_features x n) matrix, dense or sparse, or (n_features,) vector

        Returns:
            (k x n) array, or (k,) array for vector input

        Raises:
            UnfittedError: If the transformer has not been fitted
            DimensionError: If X does not have n_features rows
        """
        check_fitted(self._components, "TruncatedSVD")
        X, is_vector = as_input(X)
        check_features(self._components, X, "TruncatedSVD")

        result = left_multiply(self._components, X)
        return result[:, 0] if is_vector else result

    def save(self, writer):
        """Write k and the components to a binary stream."""
        check_fitted(self._components, "TruncatedSVD")
        write_record(writer, _RECORD_KIND, _RECORD_SCALARS, (self.k,), self._components)

    def load(self, reader) -> "TruncatedSVD":
        """
        Replace k and the components with a record read from a binary stream.

        Any 2-D float64 components are restored as stored, whatever their row
        count; `components.shape[0] == k` is only guaranteed after `fit`.

        Raises:
            DecodeError: If the record is malformed; the instance must then be discarded
        """
        (k,), components = read_record(reader, _RECORD_KIND, _RECORD_SCALARS)
        if k < 1:
            raise DecodeError(f"Stored rank must be at least 1, got {k}")
        if components.dtype != np.float64:
            raise DecodeError(f"Expected float64 components, found {components.dtype}")

        self.k = k
        self.components = components
        self.singular_values = None
        logger.debug("Loaded truncated SVD with k=%d, components %s", k, components.shape)
        return self
