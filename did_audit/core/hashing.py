"""
DID-Audit Hashing Primitive

SHA-256 helpers shared by the tree builder, the proof verifiers and the
trace builder.

Two pairwise combination conventions exist side by side:

    - Positional: SHA256(left || right). Used when building a tree from raw
      event order and when checking proofs produced by that tree.
    - Canonical (sorted-pair): the two inputs are ordered by value before
      concatenation, so combine(a, b) == combine(b, a). Used when checking
      proofs anchored by the external witness/batch service, which builds
      its trees with sorted pairs.

Picking the wrong convention silently yields a different root, so every call
site passes the mode explicitly.

Hash values travel as hex strings and may carry a "0x" prefix on input.
"""

import hashlib


HEX_PREFIX = "0x"

# Root reported for a tree with no leaves
ZERO_HASH = "0" * 64


def sha256(data: bytes) -> bytes:
    """Compute SHA-256 hash of data."""
    return hashlib.sha256(data).digest()


def sha256_hex(data: bytes) -> str:
    """Compute SHA-256 hash and return as hex string."""
    return hashlib.sha256(data).hexdigest()


def strip_hex_prefix(value: str) -> str:
    """Remove a leading '0x' / '0X' from a hex string, if present."""
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def with_hex_prefix(value: str) -> str:
    """Return the hex string with exactly one '0x' prefix."""
    return HEX_PREFIX + strip_hex_prefix(value)


def normalize_hash(value: str) -> str:
    """
    Normalize a hash for comparison with external values.

    Strips any prefix, lowercases, and re-applies the '0x' prefix. An empty
    value stays empty so that a missing hash never equals a real one.
    """
    bare = strip_hex_prefix(value or "").lower()
    if not bare:
        return ""
    return HEX_PREFIX + bare


def hex_to_bytes(value: str) -> bytes:
    """
    Decode a hex hash, accepting an optional '0x' prefix.

    Raises:
        ValueError: If the value is not valid hex
    """
    return bytes.fromhex(strip_hex_prefix(value))


def combine(left: str, right: str, canonical: bool = False) -> str:
    """
    Combine two child hashes into their parent hash.

    Args:
        left: Left child hash (hex, optional '0x' prefix)
        right: Right child hash (hex, optional '0x' prefix)
        canonical: Sort the pair before concatenating (order-independent)

    Returns:
        str: Parent hash as bare lowercase hex
    """
    left_bytes = hex_to_bytes(left)
    right_bytes = hex_to_bytes(right)
    if canonical and right_bytes < left_bytes:
        # Byte order is the same as lexicographic order of lowercase hex
        left_bytes, right_bytes = right_bytes, left_bytes
    return sha256_hex(left_bytes + right_bytes)
