"""Factorization and basis-generation routines.

This package contains the raw numerical routines behind the transformers:
SVD solvers returning (U, S, Vt) factors and the random hyperplane generator
used by sign random projection.
"""

from .rsvd import rsvd
from .svd_lowrank import full_svd, power_svd, svd_flip
from .random_projection import sign_hyperplanes

__all__ = [
    "rsvd",
    "full_svd",
    "power_svd",
    "svd_flip",
    "sign_hyperplanes",
]
