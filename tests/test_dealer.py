"""
Primeshare — Integration Tests
Tests the full generate/split/verify/reconstruct flow and its configuration.
"""

import sys
from pathlib import Path

# Add parent to path for local development
sys.path.insert(0, str(Path(__file__).parent.parent))

import primeshare.dealer
from primeshare import Dealer, SchemeConfig, SeededStream
from primeshare import InvalidParameters, ReconstructionMismatch
from primeshare.primes import DEFAULT_ROUNDS, generate_large_prime, is_probable_prime

SMALL = dict(secret_bits=64, threshold=3, share_count=5)


def test_config_defaults():
    print("Testing config defaults...", end=" ")
    cfg = SchemeConfig()
    assert cfg.secret_bits == 512
    assert cfg.modulus_bits == 1024
    assert cfg.threshold == 6
    assert cfg.share_count == 8
    assert cfg.seed is None
    assert cfg.rounds == DEFAULT_ROUNDS

    assert SchemeConfig(secret_bits=100).modulus_bits == 200
    assert SchemeConfig(secret_bits=100, modulus_bits=300).modulus_bits == 300
    print("PASS")


def test_config_validation():
    print("Testing config validation...", end=" ")
    for kwargs in (
        dict(secret_bits=1),
        dict(secret_bits=512, modulus_bits=1000),
        dict(threshold=1),
        dict(threshold=5, share_count=3),
        dict(rounds=0),
    ):
        try:
            SchemeConfig(**kwargs)
            raise AssertionError(f"{kwargs} should have raised InvalidParameters")
        except InvalidParameters:
            pass
    print("PASS")


def test_config_from_env():
    print("Testing config from environment...", end=" ")
    env = {
        "PRIMESHARE_SECRET_BITS": "128",
        "PRIMESHARE_THRESHOLD": "4",
        "PRIMESHARE_SHARE_COUNT": "9",
        "PRIMESHARE_SEED": "audit-run-7",
        "PRIMESHARE_ROUNDS": "",
        "UNRELATED": "ignored",
    }
    cfg = SchemeConfig.from_env(env)
    assert cfg.secret_bits == 128
    assert cfg.modulus_bits == 256
    assert cfg.threshold == 4
    assert cfg.share_count == 9
    assert cfg.seed == "audit-run-7"
    assert cfg.rounds == DEFAULT_ROUNDS

    assert SchemeConfig.from_env({}) == SchemeConfig()

    try:
        SchemeConfig.from_env({"PRIMESHARE_THRESHOLD": "six"})
        raise AssertionError("non-integer threshold should have raised")
    except InvalidParameters:
        pass
    print("PASS")


def test_config_to_dict_hides_seed():
    print("Testing config report...", end=" ")
    report = SchemeConfig(seed=b"do-not-print", **SMALL).to_dict()
    assert report["seeded"] is True
    assert b"do-not-print" not in report.values()
    assert report["modulus_bits"] == 128
    print("PASS")


def test_deal_full_flow():
    """Generate, split, check primality, reconstruct."""
    print("Testing dealer (full flow)...", end=" ")
    dealer = Dealer(SchemeConfig(seed=b"dealer", **SMALL))
    result = dealer.deal()

    assert result.secret.bit_length() == 64
    assert result.modulus.bit_length() == 128
    assert is_probable_prime(result.secret)
    assert is_probable_prime(result.modulus)
    assert len(result.shares) == 5
    assert set(result.primality) == {1, 2, 3, 4, 5}
    assert result.reconstructed == result.secret
    assert result.matches
    print("PASS")


def test_deal_report():
    print("Testing dealer report...", end=" ")
    result = Dealer(SchemeConfig(seed=b"report", **SMALL)).deal()
    report = result.report()

    assert report["secret_bits"] == 64
    assert report["modulus_bits"] == 128
    assert report["threshold"] == 3
    assert report["total_shares"] == 5
    assert report["reconstruction_matches"] is True
    assert report["prime_shares"] == sum(result.primality.values())
    assert [s["x"] for s in report["shares"]] == [1, 2, 3, 4, 5]
    assert all(isinstance(s["y"], str) for s in report["shares"])
    assert "secret" not in report
    print("PASS")


def test_deal_is_deterministic():
    """Same seeded config, same secret, modulus and shares."""
    print("Testing dealer determinism...", end=" ")
    a = Dealer(SchemeConfig(seed="same", **SMALL)).deal()
    b = Dealer(SchemeConfig(seed="same", **SMALL)).deal()
    c = Dealer(SchemeConfig(seed="different", **SMALL)).deal()

    assert (a.secret, a.modulus, a.shares) == (b.secret, b.modulus, b.shares)
    assert a.secret != c.secret
    print("PASS")


def test_deal_supplied_secret_and_modulus():
    print("Testing dealer with supplied values...", end=" ")
    rng = SeededStream(b"supplied")
    secret = generate_large_prime(64, rng)
    modulus = generate_large_prime(160, rng)

    result = Dealer(SchemeConfig(**SMALL), rng=rng).deal(secret=secret, modulus=modulus)
    assert result.secret == secret
    assert result.modulus == modulus
    assert result.matches

    # A modulus too short for the secret is rejected by the splitter
    try:
        Dealer(SchemeConfig(**SMALL), rng=rng).deal(secret=secret, modulus=2**89 - 1)
        raise AssertionError("short modulus should have raised InvalidParameters")
    except InvalidParameters:
        pass

    # A composite secret is refused before anything is drawn
    before = rng.bytes_consumed
    try:
        Dealer(SchemeConfig(**SMALL), rng=rng).deal(secret=secret * 3, modulus=modulus)
        raise AssertionError("composite secret should have raised InvalidParameters")
    except InvalidParameters:
        pass
    assert rng.bytes_consumed == before
    print("PASS")


def test_deal_detects_mismatch():
    """A broken reconstruction is reported, not returned."""
    print("Testing dealer self-check...", end=" ")
    original = primeshare.dealer.shamir_reconstruct
    primeshare.dealer.shamir_reconstruct = lambda shares, modulus: 0
    try:
        Dealer(SchemeConfig(seed=b"mismatch", **SMALL)).deal()
        raise AssertionError("should have raised ReconstructionMismatch")
    except ReconstructionMismatch:
        pass
    finally:
        primeshare.dealer.shamir_reconstruct = original
    print("PASS")


def test_deal_reference_config():
    """The default 512/1024-bit, 6-of-8 run."""
    print("Testing dealer (reference config)...", end=" ")
    result = Dealer(SchemeConfig(seed=b"reference")).deal()
    assert result.secret.bit_length() == 512
    assert result.modulus.bit_length() == 1024
    assert len(result.shares) == 8
    assert result.matches
    print("PASS")


def main():
    print("=" * 50)
    print("  Primeshare Integration Tests")
    print("=" * 50)
    print()

    tests = [
        test_config_defaults,
        test_config_validation,
        test_config_from_env,
        test_config_to_dict_hides_seed,
        test_deal_full_flow,
        test_deal_report,
        test_deal_is_deterministic,
        test_deal_supplied_secret_and_modulus,
        test_deal_detects_mismatch,
        test_deal_reference_config,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print()
    print(f"Results: {passed} passed, {failed} failed")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
