"""Random hyperplane bases for sign random projection."""

import numpy as np


def sign_hyperplanes(bits: int, dim: int, density: float, rng: np.random.Generator) -> np.ndarray:
    """
    Draw a (bits x dim) matrix with entries in {-1, 0, +1}.

    Each entry is drawn independently from one uniform float u:
    +1 if u < density / 2, -1 if density / 2 <= u < density, and 0 otherwise.
    With density 1.0 every entry is a fair +/-1.

    Args:
        bits: number of hyperplanes (rows)
        dim: input dimension (columns)
        density: probability that an entry is non-zero, in (0, 1]
        rng: numpy random Generator supplying the uniform floats

    Returns:
        (bits x dim) int8 array
    """
    if bits < 1 or dim < 0:
        raise ValueError(f"Invalid hyperplane shape ({bits}, {dim})")
    if not 0.0 < density <= 1.0:
        raise ValueError(f"Density must be in (0, 1], got {density}")

    u = rng.random((bits, dim))
    basis = np.zeros((bits, dim), dtype=np.int8)
    basis[u < density / 2.0] = 1
    basis[(u >= density / 2.0) & (u < density)] = -1
    return basis
