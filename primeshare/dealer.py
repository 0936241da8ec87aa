"""
Dealer
Runs the whole sharing flow in one process:

  1. Generate a prime secret of secret_bits
  2. Generate a prime modulus of modulus_bits (>= 2 * secret_bits)
  3. Split the secret into share_count shares with the configured threshold
  4. Check every share value for primality (diagnostic only)
  5. Reconstruct from the first threshold shares and compare with the secret

Every random draw comes from the dealer's single stream, so a seeded
config reproduces the same secret, modulus and shares.
"""

import logging
from dataclasses import dataclass, field

from primeshare.config import SchemeConfig
from primeshare.errors import InvalidParameters, ReconstructionMismatch
from primeshare.primes import generate_large_prime, is_probable_prime
from primeshare.rng import SeededStream
from primeshare.shamir import (
    Share,
    shamir_reconstruct,
    shamir_split_shares,
    verify_share_primality,
)

logger = logging.getLogger(__name__)


@dataclass
class DealResult:
    """Everything one dealer run produced."""
    secret: int
    modulus: int
    threshold: int
    shares: list[Share]
    primality: dict[int, bool] = field(default_factory=dict)
    reconstructed: int = None

    @property
    def matches(self) -> bool:
        return self.reconstructed == self.secret

    def report(self) -> dict:
        """Summary for display. Includes share values but not the secret."""
        return {
            "secret_bits": self.secret.bit_length(),
            "modulus_bits": self.modulus.bit_length(),
            "threshold": self.threshold,
            "total_shares": len(self.shares),
            "prime_shares": sum(self.primality.values()),
            "reconstruction_matches": self.matches,
            "shares": [
                {"x": share.x, "y": str(share.y), "is_prime": self.primality.get(share.x)}
                for share in self.shares
            ],
        }


class Dealer:
    """
    Generates a prime secret and splits it, checking its own work.

    Args:
        config: Scheme parameters. Defaults to SchemeConfig().
        rng: Stream to draw from. Defaults to one seeded from config.seed.
    """

    def __init__(self, config: SchemeConfig = None, rng: SeededStream = None):
        self.config = config or SchemeConfig()
        self.rng = rng if rng is not None else SeededStream(self.config.seed)

    def deal(self, secret: int = None, modulus: int = None) -> DealResult:
        """
        Run the full flow.

        Args:
            secret: Use this secret instead of generating one.
            modulus: Use this modulus instead of generating one.

        Returns:
            DealResult with the shares, primality report and reconstruction.

        Raises:
            InvalidParameters: If a supplied secret is not prime, or a supplied
                modulus is unusable.
            ReconstructionMismatch: If the shares do not reconstruct the secret.
        """
        cfg = self.config
        if secret is None:
            secret = generate_large_prime(cfg.secret_bits, self.rng, cfg.rounds)
        elif not is_probable_prime(secret, cfg.rounds):
            # Checked with a private witness stream; the dealer's stream is untouched
            raise InvalidParameters("Supplied secret must be prime")
        if modulus is None:
            modulus = generate_large_prime(cfg.modulus_bits, self.rng, cfg.rounds)

        shares = shamir_split_shares(
            secret, cfg.threshold, cfg.share_count, modulus,
            rng=self.rng, rounds=cfg.rounds,
        )
        primality = verify_share_primality(shares, cfg.rounds, self.rng)
        reconstructed = shamir_reconstruct(shares[:cfg.threshold], modulus)

        result = DealResult(
            secret=secret,
            modulus=modulus,
            threshold=cfg.threshold,
            shares=shares,
            primality=primality,
            reconstructed=reconstructed,
        )
        if not result.matches:
            raise ReconstructionMismatch(
                "Reconstructed secret does not match the original secret"
            )

        logger.info(
            "Dealt %d-of-%d shares of a %d-bit secret over a %d-bit modulus",
            cfg.threshold, cfg.share_count, secret.bit_length(), modulus.bit_length(),
        )
        return result
