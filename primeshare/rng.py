"""
Seeded Stream
A deterministic CSPRNG built on the ChaCha20 keystream.

The seed is stretched into a 256-bit key with HKDF-SHA256 and the keystream
under that key is the random stream. The same seed always yields the same
bytes, which makes prime generation and splitting reproducible for audits.
Production callers must supply fresh, secret seeds, or none at all.

The stream is the only mutable state in the engine. Pass it explicitly to
the calls that consume it; draws are serialized by a lock.
"""

import os
import threading

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from primeshare.errors import InvalidParameters

KEY_SIZE = 32    # ChaCha20 key, 256 bits
NONCE_SIZE = 16  # 4-byte block counter + 12-byte nonce, as cryptography expects
SEED_SIZE = 32   # Entropy drawn when no seed is given

# Domain separation for the HKDF steps
_STREAM_CONTEXT = b"primeshare-stream-v1"
_SPAWN_CONTEXT = b"primeshare-stream-spawn-v1"

_ZERO_BLOCK = bytes(64)


def _seed_to_bytes(seed) -> bytes:
    """Normalize a seed into key material."""
    if seed is None:
        return os.urandom(SEED_SIZE)
    if isinstance(seed, bool):
        raise InvalidParameters("Seed must be bytes, str or a non-negative int")
    if isinstance(seed, (bytes, bytearray, memoryview)):
        return bytes(seed)
    if isinstance(seed, str):
        return seed.encode("utf-8")
    if isinstance(seed, int):
        if seed < 0:
            raise InvalidParameters("Integer seed must be non-negative")
        return seed.to_bytes(max(1, (seed.bit_length() + 7) // 8), "big")
    raise InvalidParameters(
        f"Seed must be bytes, str or a non-negative int, got {type(seed).__name__}"
    )


def _derive_key(material: bytes, info: bytes) -> bytes:
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE,
        salt=None,
        info=info,
    )
    return hkdf.derive(material)


class SeededStream:
    """
    A reproducible stream of cryptographically strong random bytes.

    Args:
        seed: bytes, str, a non-negative int, or None for a fresh seed
              from os.urandom. The seed itself is not retained.
    """

    def __init__(self, seed=None):
        self._init_key(_derive_key(_seed_to_bytes(seed), _STREAM_CONTEXT))

    def _init_key(self, key: bytes):
        cipher = Cipher(algorithms.ChaCha20(key, bytes(NONCE_SIZE)), mode=None)
        self._keystream = cipher.encryptor()
        self._lock = threading.Lock()
        self._consumed = 0

    @classmethod
    def _from_key(cls, key: bytes) -> "SeededStream":
        stream = cls.__new__(cls)
        stream._init_key(key)
        return stream

    def _read_unlocked(self, n: int) -> bytes:
        # Encrypting zeros returns the raw keystream
        chunks = []
        remaining = n
        while remaining > 0:
            take = min(remaining, len(_ZERO_BLOCK))
            chunks.append(self._keystream.update(_ZERO_BLOCK[:take]))
            remaining -= take
        self._consumed += n
        return b"".join(chunks)

    def _randbits_unlocked(self, k: int) -> int:
        num_bytes = (k + 7) // 8
        value = int.from_bytes(self._read_unlocked(num_bytes), "big")
        return value >> (num_bytes * 8 - k)

    def read(self, n: int) -> bytes:
        """Return the next n bytes of the stream."""
        if n < 0:
            raise InvalidParameters("Cannot read a negative number of bytes")
        with self._lock:
            return self._read_unlocked(n)

    def randbits(self, k: int) -> int:
        """Return a uniform integer with at most k bits."""
        if k < 0:
            raise InvalidParameters("Number of bits must be non-negative")
        if k == 0:
            return 0
        with self._lock:
            return self._randbits_unlocked(k)

    def randbelow(self, n: int) -> int:
        """
        Return a uniform integer in [0, n).

        Uses rejection sampling on n.bit_length() bits, so the result is
        unbiased. Each attempt succeeds with probability above one half.
        """
        if n <= 0:
            raise InvalidParameters("Upper bound must be positive")
        k = n.bit_length()
        with self._lock:
            r = self._randbits_unlocked(k)
            while r >= n:
                r = self._randbits_unlocked(k)
        return r

    def randrange(self, lo: int, hi: int) -> int:
        """Return a uniform integer in [lo, hi)."""
        if hi <= lo:
            raise InvalidParameters(f"Empty range [{lo}, {hi})")
        return lo + self.randbelow(hi - lo)

    def spawn(self, label: str | bytes = b"") -> "SeededStream":
        """
        Derive an independent child stream.

        The child key comes from fresh parent output plus the label, so
        children of the same parent never overlap and the parent advances
        by one key's worth of bytes. Use one child per parallel unit.
        """
        if isinstance(label, str):
            label = label.encode("utf-8")
        material = self.read(KEY_SIZE)
        return SeededStream._from_key(_derive_key(material, _SPAWN_CONTEXT + b":" + label))

    @property
    def bytes_consumed(self) -> int:
        """Number of keystream bytes drawn so far."""
        return self._consumed


def ensure_stream(rng: SeededStream | None) -> SeededStream:
    """Return rng, or a fresh entropy-seeded stream when rng is None."""
    if rng is None:
        return SeededStream()
    return rng
