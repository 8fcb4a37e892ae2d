"""
DID-Audit Record Audit

Checks a single DID event record against the anchoring proof the witness
service issued for it:

1. Leaf check - the record's content hash equals the proof's leaf hash
2. Anchor check - the traced proof reproduces the anchored root
3. Signature check - the record's Ed25519 signature (if a public key is given)

The outcome is reported, never acted upon. Recording an integrity alert for a
failed audit belongs to the caller; AuditResult.to_alert() supplies the
payload for it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from did_audit.core.anchoring import ProofInput, as_anchoring_proof
from did_audit.core.events import EventRecord, hash_event
from did_audit.core.hashing import normalize_hash
from did_audit.core.signer import verify_record_signature
from did_audit.core.trace import VerificationResult, trace_verification


logger = logging.getLogger(__name__)


@dataclass
class AuditResult:
    """
    Result of auditing one record.

    Attributes:
        did: Subject identifier of the audited record
        record_hash: Content hash of the record ('0x' prefixed)
        leaf_valid: Record hash equals the proof's leaf hash
        verification: Traced anchored proof verification
        signature_valid: Signature check result, None when not performed
        is_valid: All performed checks passed
        error_message: Description of any failed checks
    """
    did: str
    record_hash: str
    leaf_valid: bool
    verification: VerificationResult
    signature_valid: Optional[bool] = None
    is_valid: bool = False
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "did": self.did,
            "record_hash": self.record_hash,
            "leaf_valid": self.leaf_valid,
            "verification": self.verification.to_dict(),
            "signature_valid": self.signature_valid,
            "is_valid": self.is_valid,
            "error_message": self.error_message
        }

    def to_alert(self) -> Optional[dict]:
        """Integrity alert payload for a failed audit, None if it passed."""
        if self.is_valid:
            return None
        return {
            "did": self.did,
            "check_type": "merkle_proof",
            "status": "invalid",
            "details": self.error_message,
            "computed_root": self.verification.computed_root,
            "expected_root": self.verification.expected_root,
            "detected_at": datetime.now(timezone.utc).isoformat(),
        }


def audit_record(
    record: EventRecord,
    proof: ProofInput,
    public_key: Optional[str] = None
) -> AuditResult:
    """
    Audit a record against its anchoring proof.

    Args:
        record: The DID event record
        proof: AnchoringProof or raw witness service dictionary
        public_key: Optional base64 public key for the signature check

    Returns:
        AuditResult: Outcome of every performed check
    """
    anchoring_proof = as_anchoring_proof(proof)
    record_hash = normalize_hash(hash_event(record))
    leaf_valid = record_hash == normalize_hash(anchoring_proof.leaf_hash)

    verification = trace_verification(anchoring_proof)

    signature_valid = None
    signature_error = None
    if public_key:
        signature_result = verify_record_signature(record, public_key)
        signature_valid = signature_result.is_valid
        signature_error = signature_result.error_message

    is_valid = leaf_valid and verification.is_valid
    if signature_valid is not None:
        is_valid = is_valid and signature_valid

    error_message = None
    if not is_valid:
        issues: List[str] = []
        if not leaf_valid:
            issues.append("Record hash does not match proof leaf")
        if not verification.is_valid:
            issues.append("Merkle root mismatch")
        if signature_valid is False:
            issues.append(f"Invalid signature ({signature_error})")
        error_message = "; ".join(issues)
        logger.warning("Audit failed for %s: %s", record.did, error_message)

    return AuditResult(
        did=record.did,
        record_hash=record_hash,
        leaf_valid=leaf_valid,
        verification=verification,
        signature_valid=signature_valid,
        is_valid=is_valid,
        error_message=error_message
    )
