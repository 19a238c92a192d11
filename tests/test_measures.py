from __future__ import annotations

import numpy as np
import pytest

from dimreduction import BinaryMatrix, BinaryVector, DimensionError
from dimreduction.measures import (
    angular_similarities,
    angular_similarity,
    cosine_similarity,
    hamming_similarities,
    hamming_similarity,
)


def test_angular_similarity_known_angles():
    assert angular_similarity([1, 0], [1, 0]) == pytest.approx(1.0)
    assert angular_similarity([1, 0], [0, 1]) == pytest.approx(0.5)
    assert angular_similarity([1, 0], [-1, 0]) == pytest.approx(0.0)
    assert cosine_similarity([1, 1], [1, 0]) == pytest.approx(np.sqrt(0.5))


def test_self_similarity_is_one():
    rng = np.random.default_rng(0)
    v = rng.random(100)
    assert abs(angular_similarity(v, v) - 1.0) < 1e-7


def test_zero_vector_is_rejected():
    with pytest.raises(ValueError):
        angular_similarity([0, 0], [1, 0])


def test_hamming_similarity():
    a = BinaryVector.from_bools([1, 1, 0, 0])
    b = BinaryVector.from_bools([1, 0, 0, 1])
    assert hamming_similarity(a, b) == pytest.approx(0.5)
    assert hamming_similarity(a, a) == 1.0


def test_column_wise_similarities_match_scalar_versions():
    rng = np.random.default_rng(1)
    X = rng.standard_normal((6, 9))
    B = BinaryMatrix.from_bools(X > 0)

    ang = angular_similarities(X[:, 0], X)
    ham = hamming_similarities(B.col(0), B)

    for j in range(9):
        assert ang[j] == pytest.approx(angular_similarity(X[:, 0], X[:, j]))
        assert ham[j] == pytest.approx(hamming_similarity(B.col(0), B.col(j)))


def test_column_wise_shape_mismatch():
    with pytest.raises(DimensionError):
        angular_similarities(np.ones(3), np.ones((4, 2)))
    with pytest.raises(DimensionError):
        hamming_similarities(BinaryVector.from_bools([1, 0]), BinaryMatrix.from_bools(np.eye(3)))
