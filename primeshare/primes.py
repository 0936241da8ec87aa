"""
Prime Generator
Random probable primes of an exact bit length, and the Miller-Rabin test
used to certify them.

Candidates are drawn from a SeededStream, so a seeded stream reproduces the
same prime. Each Miller-Rabin round lets a composite through with
probability at most 1/4; DEFAULT_ROUNDS keeps that below 2^-100.
"""

import logging
import math

from primeshare.errors import InvalidParameters, PrimalityGenerationExhausted
from primeshare.rng import SeededStream, ensure_stream

logger = logging.getLogger(__name__)

DEFAULT_ROUNDS = 50  # 4^-50 = 2^-100


def _small_primes(limit: int) -> tuple[int, ...]:
    """Primes below limit, by the sieve of Eratosthenes."""
    sieve = bytearray([1]) * limit
    sieve[0:2] = b"\x00\x00"
    for i in range(2, math.isqrt(limit) + 1):
        if sieve[i]:
            sieve[i * i::i] = bytearray(len(range(i * i, limit, i)))
    return tuple(i for i, flag in enumerate(sieve) if flag)


# Trial division rejects most composite candidates before any modpow
SMALL_PRIMES = _small_primes(1000)


def _check_rounds(rounds: int):
    if rounds < 1:
        raise InvalidParameters("Primality test needs at least one round")


def is_probable_prime(n: int, rounds: int = DEFAULT_ROUNDS, rng: SeededStream = None) -> bool:
    """
    Miller-Rabin probabilistic primality test.

    Args:
        n: The integer to test.
        rounds: Number of random witnesses. A composite survives all of
                them with probability at most 4^-rounds.
        rng: Stream the witnesses are drawn from. A fresh entropy-seeded
             stream is used when omitted.

    Returns:
        False if n is certainly composite (or below 2), True if n is prime
        with the configured confidence.
    """
    _check_rounds(rounds)
    if n < 2:
        return False
    for p in SMALL_PRIMES:
        if n == p:
            return True
        if n % p == 0:
            return False

    # Write n - 1 as 2^s * d with d odd
    n_minus_one = n - 1
    d = n_minus_one
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    rng = ensure_stream(rng)
    for _ in range(rounds):
        a = rng.randrange(2, n - 1)  # witness in [2, n-2]
        x = pow(a, d, n)
        if x == 1 or x == n_minus_one:
            continue
        for _ in range(s - 1):
            x = pow(x, 2, n)
            if x == n_minus_one:
                break
        else:
            return False

    return True


def generate_large_prime(
    bits: int,
    rng: SeededStream = None,
    rounds: int = DEFAULT_ROUNDS,
    max_attempts: int = None,
) -> int:
    """
    Generate a random probable prime with exactly `bits` significant bits.

    Each candidate is `bits` random bits with the top bit forced (fixing the
    bit length) and the low bit forced (odd). Candidates are tested until
    one passes; prime density near 2^bits makes this take O(bits) tries in
    expectation.

    Args:
        bits: Bit length of the result (at least 2; 512+ for real use).
        rng: Stream to draw candidates and witnesses from. Pass a seeded
             stream for a reproducible prime.
        rounds: Miller-Rabin rounds per candidate.
        max_attempts: Optional cap on the number of candidates. None means
                      search until a prime is found.

    Returns:
        The probable prime.

    Raises:
        InvalidParameters: If bits, rounds or max_attempts is out of range.
        PrimalityGenerationExhausted: If max_attempts candidates all failed.
            The stream is left advanced past every draw those attempts made.
    """
    if bits < 2:
        raise InvalidParameters(f"Prime must have at least 2 bits, got {bits}")
    _check_rounds(rounds)
    if max_attempts is not None and max_attempts < 1:
        raise InvalidParameters("max_attempts must be positive")

    rng = ensure_stream(rng)
    top_bit = 1 << (bits - 1)
    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        candidate = rng.randbits(bits) | top_bit | 1
        if is_probable_prime(candidate, rounds, rng):
            logger.debug("Found %d-bit prime after %d candidates", bits, attempts)
            return candidate

    raise PrimalityGenerationExhausted(
        f"No {bits}-bit prime found in {max_attempts} candidates; "
        f"retry with a fresh seed"
    )
