"""
Copyright (c) 2025. All rights reserved.
"""

"""
Error types raised by the activation operator.

All of them signal a violation of the caller contract and are raised
synchronously by the call that detects the problem.
"""


class ActivationError(Exception):
    """Base class for activation operator errors."""


class InvalidConfiguration(ActivationError, ValueError):
    """Unknown activation kind, non-finite slope, unknown backend or unconfigured op."""


class PrecondMissingForward(ActivationError, RuntimeError):
    """backward() was called without a cached forward pass."""


class LengthMismatch(ActivationError, ValueError):
    """Buffer element counts disagree between configure, forward and backward."""

    def __init__(self, expected: int, actual: int, what: str = "buffer"):
        super().__init__(f"{what} has {actual} elements, expected {expected}")
        self.expected = expected
        self.actual = actual
