"""
Primeshare — Basic Usage Example

Generates a 512-bit prime secret and a 1024-bit prime modulus, splits the
secret into 8 shares with a threshold of 6, reports which shares happen to
be prime, and reconstructs the secret from 6 of them.
"""

import logging
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from primeshare import Dealer, SchemeConfig, shamir_reconstruct


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # PRIMESHARE_SEED, PRIMESHARE_THRESHOLD, ... override the defaults
    config = SchemeConfig.from_env()

    print("=" * 50)
    print("  Primeshare — Shamir over a prime field")
    print("=" * 50)

    result = Dealer(config).deal()

    print(f"\nOriginal Secret (Prime): {result.secret}")
    print(f"Modulus ({result.modulus.bit_length()} bits): {result.modulus}")
    print("Shares:")
    for share in result.shares:
        print(f"  x: {share.x}, y: {share.y}")

    # Shares are expected to be composite; primality is informational only
    for x, is_prime in result.primality.items():
        print(f"Share at x = {x} is {'prime' if is_prime else 'NOT prime'}.")

    print(f"\nReconstructed Secret: {result.reconstructed}")
    print("Reconstruction successful. The secret matches exactly.")

    # Any other threshold-sized subset works too
    subset = result.shares[-config.threshold:]
    assert shamir_reconstruct(subset, result.modulus) == result.secret
    print(f"Also reconstructed from x = {[s.x for s in subset]}")


if __name__ == "__main__":
    main()
