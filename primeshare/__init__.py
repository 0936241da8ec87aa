"""
primeshare — Shamir's Secret Sharing over large prime fields
Split a prime secret into N shares where any K reconstruct it exactly.

Four operations, used in order:
1. generate_large_prime: random probable primes of an exact bit length
2. shamir_split_shares: evaluate a random degree K-1 polynomial at N points
3. shamir_reconstruct: Lagrange interpolation at x = 0
4. verify_share_primality: report which share values are prime

All randomness comes from an explicit SeededStream (ChaCha20 keystream),
so the same seed reproduces the same primes and shares.

Usage:
    from primeshare import SeededStream, generate_large_prime, shamir_split_shares
    rng = SeededStream(b"audit-seed")
    secret = generate_large_prime(512, rng)
    modulus = generate_large_prime(1024, rng)
    shares = shamir_split_shares(secret, 6, 8, modulus, rng=rng)
"""

import logging

from primeshare.config import SchemeConfig
from primeshare.dealer import Dealer, DealResult
from primeshare.errors import (
    ShamirError,
    InvalidParameters,
    InsufficientShares,
    DegenerateInput,
    PrimalityGenerationExhausted,
    ReconstructionMismatch,
)
from primeshare.primes import DEFAULT_ROUNDS, generate_large_prime, is_probable_prime
from primeshare.rng import SeededStream
from primeshare.shamir import (
    Share,
    interpolate_at_zero,
    mod_inverse,
    shamir_reconstruct,
    shamir_split_shares,
    verify_share_primality,
    verify_shares,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "SeededStream",
    "generate_large_prime",
    "is_probable_prime",
    "DEFAULT_ROUNDS",
    "Share",
    "shamir_split_shares",
    "shamir_reconstruct",
    "interpolate_at_zero",
    "mod_inverse",
    "verify_share_primality",
    "verify_shares",
    "SchemeConfig",
    "Dealer",
    "DealResult",
    "ShamirError",
    "InvalidParameters",
    "InsufficientShares",
    "DegenerateInput",
    "PrimalityGenerationExhausted",
    "ReconstructionMismatch",
]
