"""Error types raised by the dimensionality-reduction transforms."""


class DimReductionError(Exception):
    """Base class for all errors raised by this package."""


class DimensionError(DimReductionError, ValueError):
    """Input shape is incompatible with the fitted state or the configured rank."""


class UnfittedError(DimReductionError, RuntimeError):
    """A transform was requested before the transformer was fitted."""


class ComputationError(DimReductionError, RuntimeError):
    """The decomposition failed to converge or the input is degenerate."""


class DecodeError(DimReductionError, ValueError):
    """A persisted record is malformed, truncated or of the wrong kind."""
