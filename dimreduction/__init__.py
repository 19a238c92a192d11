# Dimensionality reduction transforms package

from .binary import BinaryMatrix, BinaryVector
from .errors import (
    ComputationError,
    DecodeError,
    DimensionError,
    DimReductionError,
    UnfittedError,
)
from .sign_random_projection import SignRandomProjection
from .transformer import Transformer
from .truncated_svd import TruncatedSVD

__all__ = [
    'BinaryMatrix',
    'BinaryVector',
    'ComputationError',
    'DecodeError',
    'DimensionError',
    'DimReductionError',
    'UnfittedError',
    'SignRandomProjection',
    'Transformer',
    'TruncatedSVD',
]
