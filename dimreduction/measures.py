"""Similarity measures used to check and query reduced representations."""

import numpy as np
from scipy.spatial import distance

from .binary import BinaryMatrix, BinaryVector
from .errors import DimensionError


def _dense_vector(a) -> np.ndarray:
    a = np.asarray(a, dtype=np.float64).ravel()
    if not np.any(a):
        raise ValueError("Similarity is undefined for a zero vector")
    return a


def cosine_similarity(a, b) -> float:
    """Cosine of the angle between two dense vectors."""
    return 1.0 - distance.cosine(_dense_vector(a), _dense_vector(b))


def angular_similarity(a, b) -> float:
    """
    Angular similarity 1 - theta / pi of two dense vectors.

    This is the quantity that the Hamming similarity of sign random
    projections estimates.
    """
    cos = np.clip(cosine_similarity(a, b), -1.0, 1.0)
    return float(1.0 - np.arccos(cos) / np.pi)


def hamming_similarity(a: BinaryVector, b: BinaryVector) -> float:
    """Fraction of bit positions at which a and b agree."""
    if len(a) == 0:
        raise DimensionError("Hamming similarity is undefined for empty bit vectors")
    return 1.0 - a.hamming_distance(b) / len(a)


def angular_similarities(query, X) -> np.ndarray:
    """
    Angular similarity between `query` and every column of X.

    Args:
        query: (m,) dense vector
        X: (m x n) dense matrix

    Returns:
        (n,) array of angular similarities
    """
    query = _dense_vector(query)
    X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2 or X.shape[0] != query.size:
        raise DimensionError(
            f"Query of length {query.size} does not match matrix of shape {X.shape}"
        )
    cos = 1.0 - distance.cdist(query[np.newaxis, :], X.T, metric="cosine")[0]
    return 1.0 - np.arccos(np.clip(cos, -1.0, 1.0)) / np.pi


def hamming_similarities(query: BinaryVector, B: BinaryMatrix) -> np.ndarray:
    """
    Hamming similarity between `query` and every column of B.

    Returns:
        (n,) array of Hamming similarities
    """
    if len(query) != B.shape[0]:
        raise DimensionError(
            f"Query of length {len(query)} does not match bit matrix of shape {B.shape}"
        )
    q = query.to_dense().astype(bool)
    cols = B.to_dense().T.astype(bool)
    return 1.0 - distance.cdist(q[np.newaxis, :], cols, metric="hamming")[0]
