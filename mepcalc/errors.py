"""
Error types raised by the calculation engine.

Every error is a ValueError so callers that only care about "bad input"
can catch the builtin. The API maps CalculationError to HTTP 400.
"""

from typing import Optional, Tuple


class CalculationError(ValueError):
    """Base class for all engine errors."""


class InvalidInputError(CalculationError):
    """A field is non-finite, non-positive or otherwise out of range."""


class SynthesisError(CalculationError):
    """No physically valid matching network exists for the request."""


class InsufficientQError(SynthesisError):
    """Requested Q is below the minimum the impedance ratio allows."""

    def __init__(self, q: float, q_min: float):
        self.q = q
        self.q_min = q_min
        super().__init__(
            f"Q must be at least {q_min:.3f} for this impedance ratio (got {q:.3f})"
        )


class DegenerateNetworkError(SynthesisError):
    """A derived element would need zero or infinite reactance."""


class InvalidComponentError(SynthesisError):
    """A derived L or C value is non-finite or has the wrong sign."""


class TableLookupError(CalculationError):
    """
    Cable table miss.

    `dimension` names the part of the configuration that failed to
    resolve (method, layout, conductors, size, ...) and `path` is the key
    tuple that was attempted, if any.
    """

    def __init__(self, message: str, dimension: str, path: Optional[Tuple] = None):
        self.dimension = dimension
        self.path = tuple(path) if path is not None else None
        if self.path:
            message = f"{message} (lookup path: {' > '.join(str(p) for p in self.path)})"
        super().__init__(message)
