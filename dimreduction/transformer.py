"""Shared fit / transform contract and input handling for the transforms.

Inputs are features x samples: rows are features (terms), columns are
samples (documents). A 1-D array is a single sample.
"""

import numpy as np
import scipy.sparse as sp

from .errors import DimensionError, UnfittedError


class Transformer:
    """Base class for transforms that are fitted once and applied many times."""

    def fit(self, X):
        raise NotImplementedError

    def transform(self, X):
        raise NotImplementedError

    def fit_transform(self, X):
        """Fit to X, then transform X with the freshly fitted state."""
        return self.fit(X).transform(X)

    def save(self, writer):
        raise NotImplementedError

    def load(self, reader):
        raise NotImplementedError


def as_input(X):
    """
    Coerce X to a 2-D dense array or a CSR matrix.

    Args:
        X: 1-D vector, 2-D array-like, or scipy sparse matrix

    Returns:
        matrix: 2-D numpy array or CSR sparse matrix
        is_vector: True if X was 1-D and has been reshaped to one column

    Raises:
        DimensionError: If X has neither one nor two dimensions
    """
    if sp.issparse(X):
        if X.ndim == 1:
            return X.toarray().astype(np.float64).reshape(-1, 1), True
        return X.tocsr(), False

    X = np.asarray(X, dtype=np.float64)
    if X.ndim == 1:
        return X.reshape(-1, 1), True
    if X.ndim != 2:
        raise DimensionError(
            f"Expected a vector or a matrix, got an array with {X.ndim} dimensions"
        )
    return X, False


def as_matrix(X):
    """Like `as_input` but rejects vectors, which cannot be fitted on."""
    matrix, is_vector = as_input(X)
    if is_vector:
        raise DimensionError("Fitting requires a 2-D features x samples matrix")
    return matrix


def left_multiply(basis: np.ndarray, X) -> np.ndarray:
    """Compute basis @ X for dense or sparse X, always returning an ndarray."""
    if sp.issparse(X):
        # sparse @ dense yields a dense array; keep the sparse operand on the left
        return np.asarray((X.T @ basis.T).T)
    return basis @ X


def check_fitted(basis, owner: str):
    if basis is None:
        raise UnfittedError(f"{owner} must be fitted before calling transform")


def check_features(basis: np.ndarray, X, owner: str):
    """Raise DimensionError unless X has as many rows as basis has columns."""
    if X.shape[0] != basis.shape[1]:
        raise DimensionError(
            f"{owner} was fitted on {basis.shape[1]} features, "
            f"got input with {X.shape[0]}"
        )


def frozen(a, dtype=None) -> np.ndarray:
    """Return an owned, C-contiguous, read-only copy of `a`."""
    a = np.array(a, dtype=dtype, order="C", copy=True)
    a.setflags(write=False)
    return a
