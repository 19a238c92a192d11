from __future__ import annotations

import io

import numpy as np
import pytest
import scipy.sparse as sp

from dimreduction import (
    BinaryMatrix,
    BinaryVector,
    DecodeError,
    DimensionError,
    SignRandomProjection,
    UnfittedError,
)
from dimreduction.benchmark_common import similarity_error
from dimreduction.matrix_generators import MatrixGenerator
from dimreduction.measures import angular_similarities, angular_similarity, hamming_similarity
from dimreduction.persistence import write_record


@pytest.fixture(scope="module")
def corpus():
    return MatrixGenerator.random_matrix(100, 1000, seed=0)


@pytest.mark.parametrize("bits", [256, 1024])
def test_hamming_similarity_tracks_angular_similarity(corpus, bits):
    query = corpus[:, 0]

    transformer = SignRandomProjection(bits, seed=1)
    hashed = transformer.fit_transform(corpus)
    hashed_query = transformer.transform(query)

    assert isinstance(hashed, BinaryMatrix)
    assert isinstance(hashed_query, BinaryVector)
    assert hashed.shape == (bits, 1000)

    ang = angular_similarity(query, corpus[:, 0])
    lsh = hamming_similarity(hashed_query, hashed.col(0))
    assert abs(ang - lsh) < 1e-7

    ang_all = angular_similarities(query, corpus)
    lsh_all = np.array([hamming_similarity(hashed_query, hashed.col(j)) for j in range(1000)])
    assert np.mean(np.abs(lsh_all - ang_all) / ang_all) < 0.03


def test_error_decreases_with_more_bits(corpus):
    few = SignRandomProjection(256, seed=2).fit_transform(corpus)
    many = SignRandomProjection(1024, seed=2).fit_transform(corpus)

    assert similarity_error(corpus, many) < similarity_error(corpus, few)


def test_projection_shape_and_entries():
    A = np.ones((30, 5))
    transformer = SignRandomProjection(16, seed=3).fit(A)

    assert transformer.projection.shape == (16, 30)
    assert set(np.unique(transformer.projection)) <= {-1, 1}
    assert not transformer.projection.flags.writeable


def test_density_controls_zero_fraction():
    A = np.ones((200, 2))
    projection = SignRandomProjection(500, density=0.25, seed=4).fit(A).projection

    nonzero = np.count_nonzero(projection) / projection.size
    assert abs(nonzero - 0.25) < 0.01
    positive = np.count_nonzero(projection == 1) / np.count_nonzero(projection)
    assert abs(positive - 0.5) < 0.02


def test_same_seed_gives_same_hashes():
    A = MatrixGenerator.random_matrix(20, 10, seed=5)

    first = SignRandomProjection(64, seed=9).fit_transform(A)
    second = SignRandomProjection(64, seed=9).fit_transform(A)

    assert first == second


def test_transform_reuses_basis_until_refit():
    A = MatrixGenerator.random_matrix(20, 10, seed=6)
    transformer = SignRandomProjection(64, seed=10).fit(A)

    basis = transformer.projection
    assert transformer.transform(A) == transformer.transform(A)
    assert transformer.projection is basis

    transformer.fit(A)
    assert not np.array_equal(transformer.projection, basis)


def test_non_positive_products_map_to_zero_bits():
    A = MatrixGenerator.random_matrix(10, 4, seed=7)
    transformer = SignRandomProjection(32, seed=11).fit(A)

    zero = transformer.transform(np.zeros(10))
    assert zero.count() == 0

    negated = transformer.transform(-A[:, 0]).to_dense()
    original = transformer.transform(A[:, 0]).to_dense()
    assert np.all(negated + original <= 1)


def test_bits_follow_sign_of_projection():
    A = MatrixGenerator.random_matrix(12, 6, seed=8)
    transformer = SignRandomProjection(40, seed=12)
    hashed = transformer.fit_transform(A)

    expected = (transformer.projection @ A > 0).astype(np.uint8)
    assert np.array_equal(hashed.to_dense(), expected)


def test_sparse_input_matches_dense():
    A = MatrixGenerator.term_document_matrix(50, 20, density=0.2, seed=9)
    transformer = SignRandomProjection(128, seed=13).fit(A)

    assert transformer.transform(A) == transformer.transform(A.toarray())
    assert transformer.transform(sp.csc_matrix(A)) == transformer.transform(A.toarray())


def test_transform_before_fit_raises_unfitted_error():
    with pytest.raises(UnfittedError):
        SignRandomProjection(8).transform(np.ones((4, 2)))


def test_wrong_feature_count_raises_dimension_error():
    transformer = SignRandomProjection(8, seed=0).fit(np.ones((4, 2)))
    with pytest.raises(DimensionError):
        transformer.transform(np.ones((5, 2)))
    with pytest.raises(DimensionError):
        transformer.transform(np.ones(3))


def test_invalid_configuration():
    with pytest.raises(ValueError):
        SignRandomProjection(0)
    with pytest.raises(ValueError):
        SignRandomProjection(8, density=0.0)
    with pytest.raises(ValueError):
        SignRandomProjection(8, density=1.5)

    transformer = SignRandomProjection(8)
    transformer.bits = 0
    with pytest.raises(DimensionError):
        transformer.fit(np.ones((4, 2)))


def test_save_load_round_trip():
    A = MatrixGenerator.random_matrix(25, 8, seed=14)
    transformer = SignRandomProjection(48, density=0.5, seed=15).fit(A)

    buf = io.BytesIO()
    transformer.save(buf)
    buf.seek(0)
    loaded = SignRandomProjection(1).load(buf)

    assert loaded.bits == 48
    assert loaded.density == 0.5
    assert np.array_equal(loaded.projection, transformer.projection)
    assert loaded.transform(A) == transformer.transform(A)


def test_load_svd_record_raises_decode_error():
    from dimreduction import TruncatedSVD

    buf = io.BytesIO()
    TruncatedSVD(1).fit(np.eye(3)).save(buf)
    buf.seek(0)

    with pytest.raises(DecodeError):
        SignRandomProjection(8).load(buf)


def test_load_rejects_hyperplane_entries_outside_sign_set():
    buf = io.BytesIO()
    write_record(buf, b"SRPJ", "<qd", (2, 1.0), np.array([[1, 2], [0, -1]], dtype=np.int8))
    buf.seek(0)

    with pytest.raises(DecodeError):
        SignRandomProjection(8).load(buf)
