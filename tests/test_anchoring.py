"""
Tests for DID-Audit Anchoring Module

Tests cover:
- Field name normalization of witness service proofs
- Malformed proof handling
- Witness file loading and lookup
"""

import json

from did_audit.core.anchoring import (
    AnchoringProof,
    as_anchoring_proof,
    find_proof,
    load_witness_file,
    parse_witness_data,
)


class TestFromDict:
    """Test normalization of external proof dictionaries."""

    def test_witness_service_names(self):
        proof = AnchoringProof.from_dict({
            "batchId": 3,
            "merkleRoot": "0xroot",
            "leafHash": "0xleaf",
            "merkleProof": ["0xs1", "0xs2"],
            "leafIndex": 5,
            "txHash": "0xtx",
            "blockNumber": 99,
            "versionId": "2",
        })
        assert proof.leaf_hash == "0xleaf"
        assert proof.siblings == ["0xs1", "0xs2"]
        assert proof.merkle_root == "0xroot"
        assert proof.leaf_index == 5
        assert proof.batch_id == 3
        assert proof.tx_hash == "0xtx"
        assert proof.block_number == 99
        assert proof.version_id == "2"
        assert proof.is_anchored

    def test_alternate_names(self):
        """siblings / hash / root are accepted in place of the witness names."""
        proof = AnchoringProof.from_dict({"hash": "ab", "siblings": ["cd"], "root": "ef"})
        assert proof.leaf_hash == "ab"
        assert proof.siblings == ["cd"]
        assert proof.merkle_root == "ef"

    def test_position_data_items(self):
        """Sibling items of the form {position, data} are reduced to the hash."""
        proof = AnchoringProof.from_dict({
            "leafHash": "ab",
            "merkleProof": [{"position": "left", "data": "0xcd"}],
            "merkleRoot": "ef",
        })
        assert proof.siblings == ["0xcd"]

    def test_missing_fields_default_to_empty(self):
        proof = AnchoringProof.from_dict({})
        assert proof.leaf_hash == ""
        assert proof.siblings == []
        assert proof.merkle_root == ""
        assert proof.leaf_index == 0
        assert not proof.is_anchored

    def test_null_sibling_list(self):
        proof = AnchoringProof.from_dict({"leafHash": "ab", "merkleProof": None})
        assert proof.siblings == []

    def test_to_dict_uses_witness_names(self):
        proof = AnchoringProof(leaf_hash="ab", siblings=["cd"], merkle_root="ef", batch_id=1)
        data = proof.to_dict()
        assert data == {
            "leafHash": "ab",
            "leafIndex": 0,
            "merkleProof": ["cd"],
            "merkleRoot": "ef",
            "batchId": 1,
        }
        assert AnchoringProof.from_json(proof.to_json()) == proof

    def test_as_anchoring_proof(self):
        proof = AnchoringProof(leaf_hash="ab")
        assert as_anchoring_proof(proof) is proof
        assert as_anchoring_proof({"hash": "ab"}).leaf_hash == "ab"
        assert as_anchoring_proof(None).leaf_hash == ""


class TestWitnessFiles:
    """Test witness file parsing and lookup."""

    def test_load_list(self, tmp_path):
        path = tmp_path / "did-witness.json"
        path.write_text(json.dumps([
            {"leafHash": "0xaa", "merkleProof": [], "merkleRoot": "0xaa", "versionId": "1"},
            {"leafHash": "0xbb", "merkleProof": [], "merkleRoot": "0xbb", "versionId": "2"},
        ]))
        proofs = load_witness_file(path)
        assert [p.version_id for p in proofs] == ["1", "2"]

    def test_parse_wrapped_and_single(self):
        assert len(parse_witness_data({"proofs": [{"hash": "aa"}, {"hash": "bb"}]})) == 2
        assert parse_witness_data({"hash": "aa"})[0].leaf_hash == "aa"

    def test_find_by_leaf_hash_ignores_prefix_and_case(self):
        proofs = parse_witness_data([{"leafHash": "0xAB"}, {"leafHash": "0xcd"}])
        assert find_proof(proofs, leaf_hash="ab") is proofs[0]
        assert find_proof(proofs, leaf_hash="0xCD") is proofs[1]

    def test_find_by_version(self):
        proofs = parse_witness_data([{"leafHash": "ab", "versionId": "1"},
                                     {"leafHash": "cd", "versionId": "2"}])
        assert find_proof(proofs, version_id="2") is proofs[1]

    def test_find_by_leaf_index(self):
        proofs = parse_witness_data([{"leafHash": "ab", "leafIndex": 0},
                                     {"leafHash": "cd", "leafIndex": 1}])
        assert find_proof(proofs, leaf_index=1) is proofs[1]
        assert find_proof(proofs, leaf_index=5) is None

    def test_find_missing(self):
        proofs = parse_witness_data([{"leafHash": "ab"}])
        assert find_proof(proofs, leaf_hash="ef") is None
        assert find_proof(proofs) is None
