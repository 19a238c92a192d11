"""Sign random projection (SimHash-style locality-sensitive hashing).

Each output bit records which side of a fixed random hyperplane a sample
falls on, so the Hamming similarity of two fingerprints estimates the
angular similarity 1 - theta / pi of the original vectors.
"""

import logging
from typing import Optional, Union

import numpy as np

from .algos import sign_hyperplanes
from .binary import BinaryMatrix, BinaryVector
from .errors import DecodeError, DimensionError
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

_RECORD_KIND = b"SRPJ"
_RECORD_SCALARS = "<qd"


class SignRandomProjection(Transformer):
    """
    Hash samples to `bits`-long fingerprints with random sign hyperplanes.

    Hyperplane entries are +1, -1 or 0; `density` is the probability that an
    entry is non-zero. A bit is 1 when the sample's dot product with its
    hyperplane is strictly positive and 0 otherwise.

    Args:
        bits: number of hyperplanes / output bits
        density: probability of a non-zero hyperplane entry, in (0, 1]
        seed: int, numpy Generator or None; the generator is created once here
            and advanced by every fit
    """

    def __init__(self, bits: int, density: float = 1.0, seed=None):
        if bits < 1:
            raise ValueError(f"Bits must be at least 1, got {bits}")
        if not 0.0 < density <= 1.0:
            raise ValueError(f"Density must be in (0, 1], got {density}")
        self.bits = bits
        self.density = density
        self.rng = np.random.default_rng(seed)
        self._projection: Optional[np.ndarray] = None

    @property
    def projection(self) -> Optional[np.ndarray]:
        """Read-only (bits x n_features) hyperplane matrix, or None before fitting."""
        return self._projection

    def fit(self, X) -> "SignRandomProjection":
        """
        Draw a fresh hyperplane for every bit, sized to the rows of X.

        Raises:
            DimensionError: If X is not 2-D or `bits` has been set below 1
        """
        if self.bits < 1:
            raise DimensionError(f"Bits must be at least 1, got {self.bits}")
        X = as_matrix(X)
        basis = sign_hyperplanes(self.bits, X.shape[0], self.density, self.rng)
        self._projection = frozen(basis)

        logger.debug(
            "Drew %d sign hyperplanes over %d features (density %.3f)",
            self.bits, X.shape[0], self.density,
        )
        return self

    def transform(self, X) -> Union[BinaryMatrix, BinaryVector]:
        """
        Hash samples with the fitted hyperplanes.

        Args:
            X: (n_features x n) matrix, dense or sparse, or (n_features,) vector

        Returns:
            (bits x n) BinaryMatrix, or a BinaryVector of length `bits` for
            vector input

        Raises:
            UnfittedError: If the transformer has not been fitted
            DimensionError: If X does not have n_features rows
        """
        check_fitted(self._projection, "SignRandomProjection")
        X, is_vector = as_input(X)
        check_features(self._projection, X, "SignRandomProjection")

        signs = left_multiply(self._projection, X) > 0
        if is_vector:
            return BinaryVector.from_bools(signs[:, 0])
        return BinaryMatrix.from_bools(signs)

    def save(self, writer):
        """Write bits, density and the hyperplanes to a binary stream."""
        check_fitted(self._projection, "SignRandomProjection")
        write_record(
            writer, _RECORD_KIND, _RECORD_SCALARS, (self.bits, self.density), self._projection
        )

    def load(self, reader) -> "SignRandomProjection":
        """
        Replace the configuration and hyperplanes with a record from a binary stream.

        Raises:
            DecodeError: If the record is malformed; the instance must then be discarded
        """
        (bits, density), projection = read_record(reader, _RECORD_KIND, _RECORD_SCALARS)
        if projection.shape[0] != bits:
            raise DecodeError(
                f"Stored hyperplanes have {projection.shape[0]} rows, expected {bits}"
            )
        if projection.dtype != np.int8:
            raise DecodeError(f"Expected int8 hyperplanes, found {projection.dtype}")
        if not np.isin(projection, (-1, 0, 1)).all():
            raise DecodeError("Stored hyperplane entries must be -1, 0 or +1")
        if not 0.0 < density <= 1.0:
            raise DecodeError(f"Stored density {density} is outside (0, 1]")

        self.bits = bits
        self.density = density
        self._projection = frozen(projection)
        logger.debug("Loaded %d sign hyperplanes over %d features", bits, projection.shape[1])
        return self
