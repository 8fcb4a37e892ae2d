"""
Tests for DID-Audit Hashing Module

Tests cover:
- Pairwise combination in positional and canonical mode
- Hex prefix handling
"""

import hashlib

import pytest

from did_audit.core.hashing import (
    ZERO_HASH,
    combine,
    normalize_hash,
    strip_hex_prefix,
    with_hex_prefix,
)


A = hashlib.sha256(b"a").hexdigest()
B = hashlib.sha256(b"b").hexdigest()
C = hashlib.sha256(b"c").hexdigest()


class TestCombine:
    """Test pairwise hash combination."""

    def test_positional_is_sha256_of_concatenation(self):
        """Positional mode hashes left bytes then right bytes."""
        expected = hashlib.sha256(bytes.fromhex(A) + bytes.fromhex(B)).hexdigest()
        assert combine(A, B) == expected

    def test_canonical_is_commutative(self):
        """Canonical mode gives the same parent for either order."""
        for left, right in [(A, B), (B, C), (A, C), (A, A)]:
            assert combine(left, right, canonical=True) == combine(right, left, canonical=True)

    def test_positional_is_not_commutative(self):
        """Positional mode depends on order whenever the inputs differ."""
        for left, right in [(A, B), (B, C), (A, C)]:
            assert combine(left, right, canonical=False) != combine(right, left, canonical=False)

    def test_canonical_orders_smaller_hash_first(self):
        """Canonical mode equals positional mode with the smaller hash on the left."""
        low, high = sorted([A, B])
        assert combine(high, low, canonical=True) == combine(low, high)

    def test_prefix_is_ignored(self):
        """0x-prefixed inputs combine like bare ones."""
        assert combine("0x" + A, "0x" + B) == combine(A, B)
        assert combine("0x" + A, B, canonical=True) == combine(A, B, canonical=True)

    def test_output_is_bare_lowercase_hex(self):
        """Combination output carries no prefix."""
        result = combine(A.upper(), B)
        assert result == result.lower()
        assert not result.startswith("0x")
        assert len(result) == 64

    def test_non_hex_input_raises(self):
        """Non-hex input is a caller error."""
        with pytest.raises(ValueError):
            combine("not-hex", B)


class TestHexHelpers:
    """Test prefix normalization helpers."""

    def test_zero_hash(self):
        assert ZERO_HASH == "0" * 64

    def test_strip_hex_prefix(self):
        assert strip_hex_prefix("0xabc") == "abc"
        assert strip_hex_prefix("0Xabc") == "abc"
        assert strip_hex_prefix("abc") == "abc"

    def test_with_hex_prefix_is_idempotent(self):
        assert with_hex_prefix("abc") == "0xabc"
        assert with_hex_prefix("0xabc") == "0xabc"

    def test_normalize_hash(self):
        """Normalization lowercases and prefixes, keeping empty values empty."""
        assert normalize_hash("ABC") == "0xabc"
        assert normalize_hash("0xABC") == "0xabc"
        assert normalize_hash("") == ""
        assert normalize_hash(None) == ""
