"""Byte helpers used by the sync trie."""

from .blake3 import blake3
from .errors import HubError

# Sync trie hashes are 160 bits: the first 20 bytes of the BLAKE3 output.
BLAKE3_HASH_LEN = 20
TS_HASH_LENGTH = 24


def blake3_20(data):
    """Return the first 20 bytes of the BLAKE3 hash of ``data``."""
    return blake3(data, BLAKE3_HASH_LEN)


def bytes_compare(a, b):
    """Compare two byte strings lexicographically, returning -1, 0 or 1."""
    a, b = bytes(a), bytes(b)
    return (a > b) - (a < b)


def increment_bytes(value):
    """Add one to ``value`` read as a big-endian number, growing it on overflow."""
    value = bytes(value)
    number = int.from_bytes(value, "big") + 1
    length = len(value) if number < 256 ** len(value) else len(value) + 1
    return number.to_bytes(length, "big")


def decrement_bytes(value):
    """Subtract one from ``value`` read as a big-endian number.

    An all-zero input underflows to all 0xff bytes, one byte shorter.
    """
    value = bytes(value)
    number = int.from_bytes(value, "big")
    if number == 0:
        return b"\xff" * max(len(value) - 1, 0)
    return (number - 1).to_bytes(len(value), "big")


def _hex_list(value):
    return "[" + ", ".join(f"{byte:x}" for byte in value) + "]"


def to_ts_hash(value):
    """Check that ``value`` is a 24-byte timestamp hash and return it as bytes."""
    if value is None:
        raise HubError(
            "bad_request.internal_error", "message_ts_hash is not 24 bytes: None"
        )
    value = bytes(value)
    if len(value) != TS_HASH_LENGTH:
        raise HubError(
            "bad_request.internal_error",
            f"message_ts_hash is not 24 bytes: {_hex_list(value)}",
        )
    return value