"""
Shamir's Secret Sharing
Split a prime secret into N shares over a prime field where any K can
reconstruct it.

The field is Z/M for a caller-chosen prime modulus M with at least twice the
secret's bit length. The polynomial's constant term is the secret and its
other K-1 coefficients are drawn uniformly from [0, M). Coefficients live
only for the duration of the split call.

Reconstruction is Lagrange interpolation at x = 0 with Fermat inverses,
which works for any distinct x-coordinates, not only 1..N.
"""

import logging
from dataclasses import dataclass

from primeshare.errors import (
    DegenerateInput,
    InsufficientShares,
    InvalidParameters,
    ShamirError,
)
from primeshare.primes import DEFAULT_ROUNDS, is_probable_prime
from primeshare.rng import SeededStream, ensure_stream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Share:
    """A single share of a split secret."""
    x: int              # The x-coordinate (positive, never 0)
    y: int              # The share value, P(x) mod M
    threshold: int = 0  # K, how many shares reconstruct (0 if unknown)
    total: int = 0      # N, size of the share set (0 if unknown)

    def __iter__(self):
        # Unpacks as the (x, y) point
        yield self.x
        yield self.y

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    def to_hex(self) -> str:
        """Serialize to a portable hex string."""
        return f"{self.x}:{self.y:x}:{self.threshold}:{self.total}"

    @classmethod
    def from_hex(cls, hex_str: str) -> "Share":
        """Deserialize from hex string."""
        parts = hex_str.strip().split(":")
        if len(parts) != 4:
            raise InvalidParameters(f"Malformed share text: {hex_str!r}")
        try:
            return cls(
                x=int(parts[0]),
                y=int(parts[1], 16),
                threshold=int(parts[2]),
                total=int(parts[3]),
            )
        except ValueError as e:
            raise InvalidParameters(f"Malformed share text: {hex_str!r}") from e


def mod_inverse(a: int, p: int) -> int:
    """Modular multiplicative inverse using Fermat's little theorem (p prime)."""
    a %= p
    if a == 0:
        raise DegenerateInput("Zero has no modular inverse")
    return pow(a, p - 2, p)


def _eval_polynomial(coefficients: list[int], x: int, prime: int) -> int:
    """Evaluate a polynomial at x in the prime field."""
    result = 0
    for i, coeff in enumerate(coefficients):
        result = (result + coeff * pow(x, i, prime)) % prime
    return result


def _check_x_coordinates(x_coordinates, share_count: int, modulus: int) -> list[int]:
    xs = list(x_coordinates)
    if len(xs) != share_count:
        raise InvalidParameters(
            f"Expected {share_count} x-coordinates, got {len(xs)}"
        )
    for x in xs:
        if not 0 < x < modulus:
            raise InvalidParameters(f"x-coordinate {x} outside [1, modulus)")
    if len(set(xs)) != len(xs):
        raise InvalidParameters("x-coordinates must be pairwise distinct")
    return xs


def shamir_split_shares(
    secret: int,
    threshold: int,
    share_count: int,
    modulus: int,
    rng: SeededStream = None,
    x_coordinates=None,
    rounds: int = DEFAULT_ROUNDS,
) -> list[Share]:
    """
    Split a secret into shares using Shamir's Secret Sharing.

    Args:
        secret: The secret, an integer in [0, modulus).
        threshold: Minimum shares needed to reconstruct (K).
        share_count: Total shares to generate (N).
        modulus: Prime field modulus with at least twice the secret's bits.
        rng: Stream the coefficients are drawn from. Pass a seeded stream
             for a reproducible share set.
        x_coordinates: Optional N distinct x values in [1, modulus).
                       Defaults to 1..N.
        rounds: Miller-Rabin rounds used to check the modulus.

    Returns:
        List of N Share objects. Any K can reconstruct the secret.

    Raises:
        InvalidParameters: If any parameter is invalid. Nothing is drawn
            from rng in that case.
    """
    if threshold < 2:
        raise InvalidParameters("Threshold must be at least 2")
    if threshold > share_count:
        raise InvalidParameters("Threshold cannot exceed number of shares")
    if secret < 0:
        raise InvalidParameters("Secret must be non-negative")
    if secret >= modulus:
        raise InvalidParameters("Secret too large for the prime field")
    if modulus.bit_length() < 2 * secret.bit_length():
        raise InvalidParameters(
            f"Modulus has {modulus.bit_length()} bits, needs at least "
            f"{2 * secret.bit_length()} for a {secret.bit_length()}-bit secret"
        )
    if share_count >= modulus:
        raise InvalidParameters("Too many shares for the prime field")
    if x_coordinates is None:
        xs = list(range(1, share_count + 1))
    else:
        xs = _check_x_coordinates(x_coordinates, share_count, modulus)
    # Witnesses come from a private stream so the caller's stream is untouched
    if not is_probable_prime(modulus, rounds):
        raise InvalidParameters("Modulus must be prime")

    rng = ensure_stream(rng)

    # Generate random polynomial: f(x) = secret + a1*x + a2*x^2 + ... + a(k-1)*x^(k-1)
    # The secret is the constant term (f(0) = secret)
    coefficients = [secret]
    for _ in range(threshold - 1):
        coefficients.append(rng.randbelow(modulus))

    shares = []
    for x in xs:
        value = _eval_polynomial(coefficients, x, modulus)
        shares.append(Share(x=x, y=value, threshold=threshold, total=share_count))

    logger.debug(
        "Split secret into %d shares (threshold %d) over a %d-bit field",
        share_count, threshold, modulus.bit_length(),
    )
    return shares


def _as_point(share) -> tuple[int, int]:
    x, y = share
    return x, y


def _distinct_points(shares, modulus: int) -> list[tuple[int, int]]:
    """
    Validate shares and drop exact duplicates, keeping first-seen order.

    Raises DegenerateInput when two shares sit on the same x (mod modulus)
    with different values.
    """
    points = []
    seen = {}
    for share in shares:
        x, y = _as_point(share)
        if x <= 0:
            raise InvalidParameters(f"x-coordinate must be positive, got {x}")
        key = x % modulus
        # x = 0 in the field is where the secret itself sits
        if key == 0:
            raise InvalidParameters(f"x-coordinate {x} is a multiple of the modulus")
        if not 0 <= y < modulus:
            raise InvalidParameters(f"Share value at x = {x} outside [0, modulus)")
        if key in seen:
            if seen[key] != (x, y):
                raise DegenerateInput(
                    f"Shares at x = {seen[key][0]} and x = {x} collide "
                    f"modulo the field with different values"
                )
            continue
        seen[key] = (x, y)
        points.append((x, y))
    return points


def _resolve_threshold(shares, threshold: int | None) -> int:
    """
    Work out K from the explicit argument and the thresholds the shares carry.

    Both sources must agree. With neither available the share count alone
    cannot tell a complete subset from an incomplete one, so that is an error.
    """
    carried = {share.threshold for share in shares if isinstance(share, Share) and share.threshold}
    if len(carried) > 1:
        raise InvalidParameters(
            f"Shares disagree on their threshold: {sorted(carried)}"
        )
    if threshold is not None:
        if threshold < 2:
            raise InvalidParameters("Threshold must be at least 2")
        if carried and carried != {threshold}:
            raise InvalidParameters(
                f"Threshold {threshold} does not match the shares' threshold {carried.pop()}"
            )
        return threshold
    if not carried:
        raise InvalidParameters("threshold required for plain (x, y) pairs")
    return carried.pop()


def interpolate_at_zero(points, modulus: int) -> int:
    """
    Lagrange interpolation of the given points at x = 0 in Z/modulus.

    secret = sum_i y_i * prod_{j != i} (0 - x_j) / (x_i - x_j)  (mod modulus)

    Every difference is reduced into [0, modulus) before it is multiplied.
    No threshold check is made here: fewer points than the polynomial's
    degree + 1 yield an unrelated field element.

    Raises:
        DegenerateInput: If two x-coordinates coincide modulo the field.
    """
    points = [_as_point(p) for p in points]
    secret_int = 0
    for i, (xi, yi) in enumerate(points):
        numerator = 1
        denominator = 1
        for j, (xj, _) in enumerate(points):
            if i == j:
                continue
            numerator = (numerator * ((0 - xj) % modulus)) % modulus
            denominator = (denominator * ((xi - xj) % modulus)) % modulus

        if denominator == 0:
            raise DegenerateInput(f"Duplicate x-coordinate {xi} in interpolation points")
        lagrange = (yi * numerator * mod_inverse(denominator, modulus)) % modulus
        secret_int = (secret_int + lagrange) % modulus

    return secret_int


def shamir_reconstruct(shares, modulus: int, threshold: int = None) -> int:
    """
    Reconstruct a secret from K or more shares using Lagrange interpolation.

    Args:
        shares: Share objects or (x, y) pairs.
        modulus: The prime modulus the shares were produced with.
        threshold: K. Taken from the Share objects when omitted, and must
                   match them when given. Required for plain pairs.

    Returns:
        The reconstructed secret, in [0, modulus).

    Raises:
        InvalidParameters: Bad modulus, out-of-range share, or shares that
            disagree on their threshold, or no threshold is known.
        DegenerateInput: Two shares with the same x but different values.
        InsufficientShares: Fewer distinct shares than the threshold.
    """
    if modulus < 2:
        raise InvalidParameters("Modulus must be at least 2")
    shares = list(shares)
    points = _distinct_points(shares, modulus)
    k = _resolve_threshold(shares, threshold)

    if len(points) < k:
        raise InsufficientShares(f"Need at least {k} shares, got {len(points)}")

    # Any K points determine the polynomial
    points = points[:k]

    secret = interpolate_at_zero(points, modulus)
    logger.debug("Reconstructed secret from %d shares", len(points))
    return secret


def verify_share_primality(
    shares,
    rounds: int = DEFAULT_ROUNDS,
    rng: SeededStream = None,
) -> dict[int, bool]:
    """
    Report which share values are probable primes.

    Purely diagnostic: shares are valid field elements whether or not they
    are prime.

    Returns:
        Mapping from each share's x-coordinate to True if its value passes
        the same Miller-Rabin test the prime generator uses.
    """
    rng = ensure_stream(rng)
    report = {}
    for share in shares:
        x, y = _as_point(share)
        report[x] = is_probable_prime(y, rounds, rng)
    logger.debug(
        "%d of %d share values are probable primes",
        sum(report.values()), len(report),
    )
    return report


def verify_shares(shares, secret: int, modulus: int, threshold: int = None) -> bool:
    """Verify that a set of shares correctly reconstructs the secret."""
    try:
        return shamir_reconstruct(shares, modulus, threshold) == secret
    except ShamirError as e:
        logger.debug("Share verification failed: %s", e)
        return False
