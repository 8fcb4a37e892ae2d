"""
Tests for DID-Audit Helper Functions
"""

from did_audit.core.merkle import get_proof
from did_audit.utils.helpers import (
    calculate_batch_size,
    format_operation_type,
    get_sibling_position,
    truncate_hash,
)

from conftest import make_records


class TestHelpers:
    """Test display helpers."""

    def test_format_operation_type(self):
        assert format_operation_type("key_rotation") == "Key Rotation"
        assert format_operation_type("did_creation") == "Did Creation"
        assert format_operation_type("create") == "Create"

    def test_truncate_hash(self):
        digest = "0x" + "a" * 60 + "bcde"
        assert truncate_hash(digest) == "0xaaaaaa...aaaabcde"
        assert truncate_hash(digest, show_full=True) == digest
        assert truncate_hash("short") == "short"
        assert truncate_hash("") == ""

    def test_sibling_position_matches_power_of_two_proofs(self):
        """For a full tree the index bits give each sibling's side."""
        records = make_records(8)
        for index, record in enumerate(records):
            proof = get_proof(records, record)
            sides = [get_sibling_position(index, level) for level in range(len(proof.siblings))]
            assert sides == [p.value for p in proof.positions]

    def test_calculate_batch_size(self):
        assert calculate_batch_size(0) == 1
        assert calculate_batch_size(3) == 8
