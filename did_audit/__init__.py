"""
DID-Audit: Merkle proof engine for DID operation records

Cryptographic audit of DID operations against blockchain-anchored batches.

This library provides:
- Deterministic content hashing of DID event records
- Merkle tree construction with navigable nodes
- Inclusion proof generation and verification
- Verification of witness/batch service anchoring proofs
- Step-by-step verification traces for audit display

Example:
    >>> from did_audit import EventRecord, build_tree, get_proof, verify_proof
    >>>
    >>> records = [
    ...     EventRecord(did="did:web:example.com", operation_type="did_creation",
    ...                 signature="s1", timestamp="2024-01-01T00:00:00Z"),
    ...     EventRecord(did="did:web:example.com", operation_type="key_rotation",
    ...                 signature="s2", timestamp="2024-01-02T00:00:00Z"),
    ... ]
    >>> result = build_tree(records)
    >>> proof = get_proof(records, records[1])
    >>> verify_proof(proof.leaf, proof.siblings, proof.positions, result.root)
    True

License:
    Apache License 2.0
"""

__version__ = "0.1.0"
__author__ = "DID-Audit Contributors"
__license__ = "Apache-2.0"

from did_audit.core.events import EventRecord, OperationType, hash_event
from did_audit.core.hashing import combine, ZERO_HASH
from did_audit.core.merkle import (
    MerkleTreeResult,
    InclusionProof,
    Position,
    build_tree,
    get_proof,
    verify_proof,
)
from did_audit.core.anchoring import AnchoringProof
from did_audit.core.verifier import ProofPathStructure, verify_anchoring_proof
from did_audit.core.trace import VerificationResult, VerificationStep, trace_verification
from did_audit.core.audit import AuditResult, audit_record

__all__ = [
    # Version info
    "__version__",
    "__author__",
    "__license__",
    # Records and hashing
    "EventRecord",
    "OperationType",
    "hash_event",
    "combine",
    "ZERO_HASH",
    # Tree and proofs
    "MerkleTreeResult",
    "InclusionProof",
    "Position",
    "build_tree",
    "get_proof",
    "verify_proof",
    # Anchored verification
    "AnchoringProof",
    "ProofPathStructure",
    "verify_anchoring_proof",
    "VerificationResult",
    "VerificationStep",
    "trace_verification",
    "AuditResult",
    "audit_record",
]
