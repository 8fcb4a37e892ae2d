"""
DID-Audit Core Module

This module contains the Merkle proof engine for auditing DID operation
records.

Submodules:
    - hashing: SHA-256 primitives and pairwise combination
    - events: DID event record definitions
    - merkle: Tree construction, inclusion proofs, positional verification
    - anchoring: Witness/batch service proof normalization
    - verifier: Anchored proof and hash chain verification
    - trace: Step-by-step verification traces
    - audit: Record audit against an anchoring proof
    - signer: Ed25519 record signatures
"""

from did_audit.core.hashing import (
    ZERO_HASH,
    combine,
    normalize_hash,
    strip_hex_prefix,
    with_hex_prefix
)

from did_audit.core.events import (
    EventRecord,
    OperationType,
    hash_event,
    sort_records,
    create_record_from_dict
)

from did_audit.core.merkle import (
    MerkleNode,
    MerkleTreeResult,
    NodeKind,
    Position,
    InclusionProof,
    build_tree,
    get_proof,
    get_proof_by_index,
    verify_proof
)

from did_audit.core.anchoring import (
    AnchoringProof,
    load_witness_file,
    find_proof
)

from did_audit.core.verifier import (
    ProofLevel,
    ProofPathStructure,
    ChainVerifier,
    ChainVerificationResult,
    verify_anchoring_proof
)

from did_audit.core.trace import (
    VerificationStep,
    VerificationResult,
    trace_verification
)

from did_audit.core.audit import AuditResult, audit_record

from did_audit.core.signer import (
    Ed25519Signer,
    sign_record,
    verify_record_signature,
    generate_key_pair_b64
)

__all__ = [
    # Hashing
    "ZERO_HASH",
    "combine",
    "normalize_hash",
    "strip_hex_prefix",
    "with_hex_prefix",
    # Events
    "EventRecord",
    "OperationType",
    "hash_event",
    "sort_records",
    "create_record_from_dict",
    # Merkle
    "MerkleNode",
    "MerkleTreeResult",
    "NodeKind",
    "Position",
    "InclusionProof",
    "build_tree",
    "get_proof",
    "get_proof_by_index",
    "verify_proof",
    # Anchoring
    "AnchoringProof",
    "load_witness_file",
    "find_proof",
    # Verifier
    "ProofLevel",
    "ProofPathStructure",
    "ChainVerifier",
    "ChainVerificationResult",
    "verify_anchoring_proof",
    # Trace
    "VerificationStep",
    "VerificationResult",
    "trace_verification",
    # Audit
    "AuditResult",
    "audit_record",
    # Signer
    "Ed25519Signer",
    "sign_record",
    "verify_record_signature",
    "generate_key_pair_b64",
]
