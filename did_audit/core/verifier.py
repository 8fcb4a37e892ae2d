"""
DID-Audit Verification Module

This module verifies evidence handed to the package by external services:

1. Anchoring Proof Verification - recomputes the root of a witness/batch
   service proof and compares it with the root anchored on-chain
2. Hash Chain Verification - checks the backlink chain of a DID log

Anchored batches are built by the witness service with sorted pairs, and its
proofs do not reliably say on which side each sibling sits. The side is
therefore re-derived from the hash values: at every level the smaller hash
(by byte value) goes on the left and the pair is combined in canonical mode.
This must match the witness service's pairing rule exactly; there is no
version marker in the proof to detect a change of convention.

Usage:
    >>> from did_audit.core.verifier import verify_anchoring_proof
    >>>
    >>> structure = verify_anchoring_proof({
    ...     "leafHash": "0xab...",
    ...     "merkleProof": ["0xcd...", "0xef..."],
    ...     "merkleRoot": "0x12...",
    ... })
    >>> print(f"Anchored: {structure.is_valid}")
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from did_audit.core.anchoring import AnchoringProof, ProofInput, as_anchoring_proof
from did_audit.core.hashing import (
    combine,
    hex_to_bytes,
    normalize_hash,
    sha256_hex,
    with_hex_prefix,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofLevel:
    """
    One combination in an anchored proof walk.

    Attributes:
        level: 0-based level above the leaf
        current_hash: Running hash entering this level
        sibling_hash: Sibling supplied by the proof
        is_left_child: True if current_hash was placed on the left
        parent_hash: Result of the combination
    """
    level: int
    current_hash: str
    sibling_hash: str
    is_left_child: bool
    parent_hash: str

    @property
    def left_input(self) -> str:
        return self.current_hash if self.is_left_child else self.sibling_hash

    @property
    def right_input(self) -> str:
        return self.sibling_hash if self.is_left_child else self.current_hash

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "current_hash": self.current_hash,
            "sibling_hash": self.sibling_hash,
            "is_left_child": self.is_left_child,
            "parent_hash": self.parent_hash,
        }


@dataclass
class ProofPathStructure:
    """
    Result of verifying an anchoring proof.

    Attributes:
        levels: Per-level combinations from leaf to root
        leaf_hash: Proven leaf ('0x' prefixed)
        merkle_root: Root stated by the proof ('0x' prefixed, "" if missing)
        computed_root: Root recomputed from the proof ("" if no leaf)
        is_valid: True if computed_root equals merkle_root
        total_levels: Number of levels walked
    """
    levels: List[ProofLevel]
    leaf_hash: str
    merkle_root: str
    computed_root: str
    is_valid: bool
    total_levels: int

    def to_dict(self) -> dict:
        return {
            "levels": [level.to_dict() for level in self.levels],
            "leaf_hash": self.leaf_hash,
            "merkle_root": self.merkle_root,
            "computed_root": self.computed_root,
            "is_valid": self.is_valid,
            "total_levels": self.total_levels,
        }


def walk_anchoring_proof(proof: AnchoringProof) -> List[ProofLevel]:
    """
    Recombine the leaf with each sibling in canonical (sorted-pair) mode.

    Args:
        proof: Normalized anchoring proof

    Returns:
        list: One ProofLevel per sibling (empty if the leaf hash is missing)
    """
    if not proof.leaf_hash:
        return []

    levels = []
    current_hash = with_hex_prefix(proof.leaf_hash.lower())
    for level, sibling in enumerate(proof.siblings):
        sibling_hash = with_hex_prefix(sibling.lower())
        is_left_child = hex_to_bytes(current_hash) <= hex_to_bytes(sibling_hash)
        # Witness batches are built with sorted pairs: canonical mode
        parent_hash = with_hex_prefix(combine(current_hash, sibling_hash, canonical=True))
        levels.append(ProofLevel(
            level=level,
            current_hash=current_hash,
            sibling_hash=sibling_hash,
            is_left_child=is_left_child,
            parent_hash=parent_hash,
        ))
        current_hash = parent_hash
    return levels


def computed_root_of(proof: AnchoringProof, levels: List[ProofLevel]) -> str:
    """Root reached by a walk; the leaf itself when there are no siblings."""
    if levels:
        return levels[-1].parent_hash
    return normalize_hash(proof.leaf_hash)


def verify_anchoring_proof(proof: ProofInput) -> ProofPathStructure:
    """
    Verify a witness/batch service proof against its stated root.

    Args:
        proof: AnchoringProof or the raw dictionary from the service

    Returns:
        ProofPathStructure: Level-by-level walk and validity
    """
    anchoring_proof = as_anchoring_proof(proof)
    levels = walk_anchoring_proof(anchoring_proof)
    computed_root = computed_root_of(anchoring_proof, levels)
    merkle_root = normalize_hash(anchoring_proof.merkle_root)

    is_valid = bool(computed_root) and bool(merkle_root) and computed_root == merkle_root
    if not is_valid:
        logger.warning(
            "Anchoring proof mismatch: computed %s, expected %s",
            computed_root or "<none>", merkle_root or "<none>"
        )

    return ProofPathStructure(
        levels=levels,
        leaf_hash=normalize_hash(anchoring_proof.leaf_hash),
        merkle_root=merkle_root,
        computed_root=computed_root,
        is_valid=is_valid,
        total_levels=len(levels),
    )


@dataclass
class BrokenLink:
    """A log entry whose backlink does not match its predecessor."""
    index: int
    version_id: Any
    expected: str
    actual: str

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "version_id": self.version_id,
            "expected": self.expected,
            "actual": self.actual,
        }


@dataclass
class ChainVerificationResult:
    """
    Result of a DID log hash chain verification.

    Attributes:
        is_valid: True if every backlink matches
        entries_verified: Number of entries checked
        first_invalid_index: Index of the first broken entry (if any)
        broken_links: Every mismatching backlink
        error_message: Description of any issues found
    """
    is_valid: bool
    entries_verified: int = 0
    first_invalid_index: Optional[int] = None
    broken_links: List[BrokenLink] = field(default_factory=list)
    error_message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "entries_verified": self.entries_verified,
            "first_invalid_index": self.first_invalid_index,
            "broken_links": [link.to_dict() for link in self.broken_links],
            "error_message": self.error_message
        }


def compute_entry_hash(entry: Dict[str, Any]) -> str:
    """Hash a log entry's compact JSON form ('0x' prefixed)."""
    serialized = json.dumps(entry, separators=(',', ':'), ensure_ascii=False)
    return with_hex_prefix(sha256_hex(serialized.encode('utf-8')))


class ChainVerifier:
    """
    Verifies the backlink chain of a DID log.

    Each entry after the genesis entry may carry a "backlink" to the previous
    entry: its "logEntryHash" when present, otherwise the hash of the previous
    entry's JSON. Entries without a backlink are not checked.
    """

    def verify(self, entries: List[Dict[str, Any]]) -> ChainVerificationResult:
        """
        Verify the backlink chain.

        Args:
            entries: Log entries in order

        Returns:
            ChainVerificationResult: Detailed verification result
        """
        if not entries:
            return ChainVerificationResult(is_valid=True, entries_verified=0)

        broken_links = []
        for i in range(1, len(entries)):
            previous = entries[i - 1]
            current = entries[i]

            expected = previous.get("logEntryHash") or compute_entry_hash(previous)
            actual = current.get("backlink")
            if actual and expected.lower() != actual.lower():
                broken_links.append(BrokenLink(
                    index=i,
                    version_id=current.get("versionId"),
                    expected=expected,
                    actual=actual,
                ))

        is_valid = len(broken_links) == 0
        error_message = None
        if not is_valid:
            error_message = f"{len(broken_links)} broken backlinks"
            logger.warning("DID log chain broken at entry %d", broken_links[0].index)

        return ChainVerificationResult(
            is_valid=is_valid,
            entries_verified=len(entries),
            first_invalid_index=broken_links[0].index if broken_links else None,
            broken_links=broken_links,
            error_message=error_message
        )
