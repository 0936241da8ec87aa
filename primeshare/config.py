"""
Scheme Configuration
The full configuration surface of a sharing run:
(secret_bits, modulus_bits, threshold, share_count, seed, rounds).
"""

import os
from dataclasses import dataclass

from primeshare.errors import InvalidParameters
from primeshare.primes import DEFAULT_ROUNDS

# Defaults match the reference run: 512-bit secret, 1024-bit field, 6-of-8
DEFAULT_SECRET_BITS = 512
DEFAULT_THRESHOLD = 6
DEFAULT_SHARE_COUNT = 8

ENV_PREFIX = "PRIMESHARE_"


@dataclass
class SchemeConfig:
    """Parameters for one dealer run."""
    secret_bits: int = DEFAULT_SECRET_BITS
    modulus_bits: int = None    # Defaults to 2 * secret_bits
    threshold: int = DEFAULT_THRESHOLD
    share_count: int = DEFAULT_SHARE_COUNT
    seed: bytes | str | int = None  # None means a fresh seed from os.urandom
    rounds: int = DEFAULT_ROUNDS

    def __post_init__(self):
        if self.modulus_bits is None:
            self.modulus_bits = 2 * self.secret_bits
        if self.secret_bits < 2:
            raise InvalidParameters("secret_bits must be at least 2")
        if self.modulus_bits < 2 * self.secret_bits:
            raise InvalidParameters(
                f"modulus_bits ({self.modulus_bits}) must be at least twice "
                f"secret_bits ({self.secret_bits})"
            )
        if self.threshold < 2:
            raise InvalidParameters("Threshold must be at least 2")
        if self.share_count < self.threshold:
            raise InvalidParameters("Threshold cannot exceed number of shares")
        if self.rounds < 1:
            raise InvalidParameters("rounds must be at least 1")

    @classmethod
    def from_env(cls, environ: dict = None, prefix: str = ENV_PREFIX) -> "SchemeConfig":
        """
        Build a config from environment variables.

        Reads {prefix}SECRET_BITS, MODULUS_BITS, THRESHOLD, SHARE_COUNT,
        SEED and ROUNDS. Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        kwargs = {}
        for field_name in ("secret_bits", "modulus_bits", "threshold", "share_count", "rounds"):
            raw = environ.get(prefix + field_name.upper())
            if raw is None or raw.strip() == "":
                continue
            try:
                kwargs[field_name] = int(raw)
            except ValueError as e:
                raise InvalidParameters(
                    f"{prefix}{field_name.upper()} must be an integer, got {raw!r}"
                ) from e
        seed = environ.get(prefix + "SEED")
        if seed:
            kwargs["seed"] = seed
        return cls(**kwargs)

    def to_dict(self) -> dict:
        return {
            "secret_bits": self.secret_bits,
            "modulus_bits": self.modulus_bits,
            "threshold": self.threshold,
            "share_count": self.share_count,
            "seeded": self.seed is not None,
            "rounds": self.rounds,
        }
