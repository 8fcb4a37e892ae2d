"""
Tests for DID-Audit Trace Module

Tests cover:
- Step completeness and chaining
- Agreement with verify_anchoring_proof
- Malformed proof handling
"""

import pytest

from did_audit.core.events import hash_event
from did_audit.core.hashing import combine, strip_hex_prefix, with_hex_prefix
from did_audit.core.trace import trace_verification
from did_audit.core.verifier import verify_anchoring_proof

from conftest import make_records, witness_batch


class TestTraceVerification:
    """Test verification traces."""

    @pytest.mark.parametrize("count", [2, 3, 5, 8, 17])
    def test_one_step_per_sibling(self, count):
        leaves = [hash_event(r) for r in make_records(count)]
        _, proofs = witness_batch(leaves)
        for proof in proofs:
            result = trace_verification(proof)
            assert len(result.steps) == len(proof["merkleProof"])
            assert result.steps[-1].output == result.computed_root
            assert result.is_valid

    def test_steps_are_one_based_and_chained(self):
        leaves = [hash_event(r) for r in make_records(8)]
        _, proofs = witness_batch(leaves)
        result = trace_verification(proofs[5])

        assert [step.level for step in result.steps] == [1, 2, 3]
        for previous, step in zip(result.steps, result.steps[1:]):
            assert previous.output in (step.left_input, step.right_input)

    def test_each_output_is_combination_of_inputs(self):
        leaves = [hash_event(r) for r in make_records(5)]
        _, proofs = witness_batch(leaves)
        for step in trace_verification(proofs[4]).steps:
            assert step.output == with_hex_prefix(combine(step.left_input, step.right_input))
            assert strip_hex_prefix(step.left_input) <= strip_hex_prefix(step.right_input)

    def test_descriptions(self):
        leaves = [hash_event(r) for r in make_records(4)]
        _, proofs = witness_batch(leaves)
        steps = trace_verification(proofs[0]).steps
        assert steps[0].description.startswith("Level 1:")
        assert steps[-1].description.endswith("Merkle root")

    def test_matches_anchoring_verification(self):
        leaves = [hash_event(r) for r in make_records(6)]
        _, proofs = witness_batch(leaves)
        for proof in proofs:
            structure = verify_anchoring_proof(proof)
            result = trace_verification(proof)
            assert result.computed_root == structure.computed_root
            assert result.is_valid == structure.is_valid

    def test_invalid_root_reported_not_raised(self):
        leaves = [hash_event(r) for r in make_records(4)]
        _, proofs = witness_batch(leaves)
        proof = dict(proofs[1], merkleRoot="0x" + "11" * 32)
        result = trace_verification(proof)
        assert not result.is_valid
        assert result.expected_root == "0x" + "11" * 32
        assert result.steps[-1].output == result.computed_root

    def test_no_siblings(self):
        """Without siblings the computed root is the leaf itself."""
        leaf = "0x" + hash_event(make_records(1)[0])
        result = trace_verification({"leafHash": leaf, "merkleRoot": leaf})
        assert result.steps == []
        assert result.computed_root == leaf
        assert result.is_valid

    def test_malformed_proof(self):
        result = trace_verification({"merkleProof": None})
        assert result.steps == []
        assert result.computed_root == ""
        assert result.expected_root == ""
        assert not result.is_valid

    def test_to_dict(self):
        leaves = [hash_event(r) for r in make_records(2)]
        _, proofs = witness_batch(leaves)
        data = trace_verification(proofs[0]).to_dict()
        assert set(data) == {"steps", "computed_root", "expected_root", "is_valid"}
        assert set(data["steps"][0]) == {"level", "left_input", "right_input", "output", "description"}
