"""
Errors
Every failure the engine reports derives from ShamirError.

Each error also derives from the built-in exception the package has always
raised for that situation, so callers catching ValueError or RuntimeError
keep working.
"""


class ShamirError(Exception):
    """Base class for all primeshare errors."""


class InvalidParameters(ShamirError, ValueError):
    """Threshold, share count, secret, modulus or another input is out of range."""


class InsufficientShares(ShamirError, ValueError):
    """Fewer distinct shares than the threshold were supplied."""


class DegenerateInput(ShamirError, ValueError):
    """Shares collide on an x-coordinate, leaving a Lagrange denominator of zero."""


class PrimalityGenerationExhausted(ShamirError, RuntimeError):
    """No prime was found within the allowed number of candidates."""


class ReconstructionMismatch(ShamirError, RuntimeError):
    """A dealer self-check reconstructed something other than the secret."""
