"""
Tests for DID-Audit Signer Module

Tests cover:
- Ed25519 signing and verification
- Record signatures
"""

import dataclasses

from did_audit.core.events import EventRecord
from did_audit.core.signer import (
    Ed25519Signer,
    generate_key_pair_b64,
    sign_record,
    verify_record_signature,
)


def _record():
    return EventRecord(
        did="did:web:example.com",
        operation_type="ownership_change",
        payload={"new_owner": "did:web:buyer"},
        timestamp="2024-05-01T00:00:00Z",
    )


class TestEd25519Signer:
    """Test the underlying signer."""

    def test_sign_and_verify(self):
        signer = Ed25519Signer()
        result = signer.sign(b"payload")
        verification = Ed25519Signer.verify_with_public_key_b64(
            b"payload", result.signature_b64, signer.public_key_b64
        )
        assert verification.is_valid
        assert len(result.signature) == 64

    def test_wrong_data_fails(self):
        signer = Ed25519Signer()
        result = signer.sign(b"payload")
        verification = Ed25519Signer.verify_with_public_key_b64(
            b"other", result.signature_b64, signer.public_key_b64
        )
        assert not verification.is_valid
        assert verification.error_message

    def test_bad_encoding_fails(self):
        verification = Ed25519Signer.verify_with_public_key_b64(b"x", "!!!", "!!!")
        assert not verification.is_valid

    def test_key_round_trip(self):
        private_b64, public_b64 = generate_key_pair_b64()
        signer = Ed25519Signer.from_private_key_b64(private_b64)
        assert signer.public_key_b64 == public_b64

    def test_deterministic_signatures(self):
        signer = Ed25519Signer()
        assert signer.sign_string("a").signature == signer.sign_string("a").signature


class TestRecordSignatures:
    """Test signing of event records."""

    def test_sign_record(self):
        signer = Ed25519Signer()
        signed = sign_record(_record(), signer)
        assert signed.signature.startswith("ed25519:")
        assert verify_record_signature(signed, signer.public_key_b64).is_valid

    def test_signing_does_not_mutate(self):
        record = _record()
        sign_record(record, Ed25519Signer())
        assert record.signature == ""

    def test_modified_payload_fails(self):
        signer = Ed25519Signer()
        signed = sign_record(_record(), signer)
        tampered = dataclasses.replace(signed, payload={"new_owner": "did:web:thief"})
        assert not verify_record_signature(tampered, signer.public_key_b64).is_valid

    def test_other_key_fails(self):
        signed = sign_record(_record(), Ed25519Signer())
        assert not verify_record_signature(signed, Ed25519Signer().public_key_b64).is_valid

    def test_unsupported_format(self):
        record = dataclasses.replace(_record(), signature="s1")
        result = verify_record_signature(record, Ed25519Signer().public_key_b64)
        assert not result.is_valid
        assert "Unsupported" in result.error_message
