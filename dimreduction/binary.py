"""Bit-packed vectors and matrices produced by sign random projection.

Bits are packed big-endian into uint8 with numpy.packbits. Padding bits are
always zero, so XOR + popcount over the packed bytes gives exact Hamming
distances.
"""

from typing import Tuple

import numpy as np

from .errors import DimensionError


def _popcount(packed: np.ndarray) -> int:
    return int(np.unpackbits(packed).sum())


class BinaryVector:
    """A fixed-length bit string."""

    __slots__ = ("packed", "length")

    def __init__(self, packed: np.ndarray, length: int):
        packed = np.asarray(packed, dtype=np.uint8)
        if packed.ndim != 1 or packed.size != (length + 7) // 8:
            raise DimensionError(
                f"{packed.size} packed bytes cannot hold exactly {length} bits"
            )
        self.packed = packed
        self.length = length

    @classmethod
    def from_bools(cls, values) -> "BinaryVector":
        """Pack a 1-D array of truthy/falsy values."""
        values = np.asarray(values, dtype=bool)
        if values.ndim != 1:
            raise DimensionError(f"Expected a 1-D array, got shape {values.shape}")
        return cls(np.packbits(values), values.size)

    def to_dense(self) -> np.ndarray:
        """Unpack to a 0/1 uint8 array of length `len(self)`."""
        return np.unpackbits(self.packed, count=self.length)

    def count(self) -> int:
        """Number of set bits."""
        return _popcount(self.packed)

    def hamming_distance(self, other: "BinaryVector") -> int:
        """Number of positions at which the two bit strings differ."""
        if self.length != other.length:
            raise DimensionError(
                f"Cannot compare bit vectors of length {self.length} and {other.length}"
            )
        return _popcount(np.bitwise_xor(self.packed, other.packed))

    def __len__(self):
        return self.length

    def __eq__(self, other):
        if not isinstance(other, BinaryVector):
            return NotImplemented
        return self.length == other.length and np.array_equal(self.packed, other.packed)

    __hash__ = None

    def __repr__(self):
        return f"BinaryVector(length={self.length}, set={self.count()})"


class BinaryMatrix:
    """A (rows x cols) bit matrix packed along the rows, one bit string per column."""

    __slots__ = ("packed", "shape")

    def __init__(self, packed: np.ndarray, shape: Tuple[int, int]):
        packed = np.asarray(packed, dtype=np.uint8)
        rows, cols = shape
        if packed.shape != ((rows + 7) // 8, cols):
            raise DimensionError(
                f"Packed array of shape {packed.shape} cannot hold a {rows}x{cols} bit matrix"
            )
        self.packed = packed
        self.shape = (rows, cols)

    @classmethod
    def from_bools(cls, values) -> "BinaryMatrix":
        """Pack a 2-D array of truthy/falsy values."""
        values = np.asarray(values, dtype=bool)
        if values.ndim != 2:
            raise DimensionError(f"Expected a 2-D array, got shape {values.shape}")
        return cls(np.packbits(values, axis=0), values.shape)

    def col(self, j: int) -> BinaryVector:
        """Bit string of column j."""
        return BinaryVector(self.packed[:, j].copy(), self.shape[0])

    def to_dense(self) -> np.ndarray:
        """Unpack to a (rows x cols) 0/1 uint8 array."""
        return np.unpackbits(self.packed, axis=0, count=self.shape[0])

    def __eq__(self, other):
        if not isinstance(other, BinaryMatrix):
            return NotImplemented
        return self.shape == other.shape and np.array_equal(self.packed, other.packed)

    __hash__ = None

    def __repr__(self):
        return f"BinaryMatrix(shape={self.shape})"
