"""
DID-Audit Merkle Tree Implementation

This module builds binary Merkle trees over DID event records and derives
inclusion proofs from them.

Construction rules:
    - Records are ordered by ascending timestamp (stable) before hashing, so
      repeated builds of the same logical set always give the same tree.
    - Leaf: content hash of one EventRecord (see events.hash_event)
    - Internal node: SHA256(left || right), positional order
    - Odd level: the last hash is paired with itself
    - Zero records: the root is ZERO_HASH
    - One record: the root is that record's leaf hash

Every call rebuilds the tree from scratch; nothing is cached between calls.

Usage:
    >>> from did_audit.core.merkle import build_tree, get_proof, verify_proof
    >>>
    >>> result = build_tree(records)
    >>> proof = get_proof(records, records[0])
    >>> verify_proof(proof.leaf, proof.siblings, proof.positions, result.root)
    True
"""

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Union

from did_audit.core.events import EventRecord, hash_event, sort_records
from did_audit.core.hashing import ZERO_HASH, combine, strip_hex_prefix
from did_audit.utils.helpers import format_operation_type


logger = logging.getLogger(__name__)


class NodeKind(Enum):
    """Role of a node in the tree."""

    LEAF = "leaf"
    INTERNAL = "internal"
    ROOT = "root"


class Position(Enum):
    """Side on which a proof sibling is combined with the running hash."""

    LEFT = "left"    # parent = combine(sibling, current)
    RIGHT = "right"  # parent = combine(current, sibling)


@dataclass
class MerkleNode:
    """
    One node of a constructed tree.

    Attributes:
        id: Stable identifier (leaf-<i>, internal-<level>-<i> or root)
        hash: Node hash (bare hex)
        label: Human readable label
        kind: Leaf, internal or root
        depth: Distance from the root (root is 0)
        index: Position within its level
        left: Left child (internal nodes only)
        right: Right child, None when the left child was paired with itself
        record: Originating record (leaves only)
    """
    id: str
    hash: str
    label: str
    kind: NodeKind
    depth: int
    index: int
    left: Optional['MerkleNode'] = None
    right: Optional['MerkleNode'] = None
    record: Optional[EventRecord] = None

    @property
    def is_leaf(self) -> bool:
        return self.kind == NodeKind.LEAF

    @property
    def is_padded(self) -> bool:
        """True when this node's hash pairs its left child with itself."""
        return self.left is not None and self.right is None

    def children(self) -> List['MerkleNode']:
        return [child for child in (self.left, self.right) if child is not None]

    def recompute_hash(self) -> str:
        """Recombine the children's hashes (leaves return their own hash)."""
        if self.left is None:
            return self.hash
        right = self.right if self.right is not None else self.left
        return combine(self.left.hash, right.hash)

    def to_dict(self) -> dict:
        """Convert the subtree rooted here to a nested dictionary."""
        data = {
            "id": self.id,
            "hash": self.hash,
            "label": self.label,
            "type": self.kind.value,
            "depth": self.depth,
            "index": self.index,
        }
        if self.left is not None:
            data["left"] = self.left.to_dict()
        if self.right is not None:
            data["right"] = self.right.to_dict()
        if self.record is not None:
            data["record"] = self.record.to_dict()
        return data


@dataclass
class MerkleTreeResult:
    """
    Output of build_tree.

    Attributes:
        root: Root hash (bare hex, ZERO_HASH for an empty tree)
        tree: Root node of the navigable tree
        leaves: Leaf nodes in timestamp order
        leaf_count: Number of leaves
        depth: Number of combination levels above the leaves
        levels: Hash layers, leaves first and root last
    """
    root: str
    tree: MerkleNode
    leaves: List[MerkleNode]
    leaf_count: int
    depth: int
    levels: List[List[str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "root": self.root,
            "leaf_count": self.leaf_count,
            "depth": self.depth,
            "leaves": [leaf.hash for leaf in self.leaves],
            "tree": self.tree.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class InclusionProof:
    """
    Proof that a leaf belongs to a tree with a given root.

    Attributes:
        leaf: Hash of the proven leaf
        siblings: Sibling hashes from leaf to root
        positions: Side of each sibling relative to the running hash
        path: Running hashes from the leaf up to and including the root
        root: Root of the tree the proof was taken from ("" if not found)
        valid: Whether replaying the proof reproduces root
    """
    leaf: str
    siblings: List[str] = field(default_factory=list)
    positions: List[Position] = field(default_factory=list)
    path: List[str] = field(default_factory=list)
    root: str = ""
    valid: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "leaf": self.leaf,
            "siblings": list(self.siblings),
            "positions": [position.value for position in self.positions],
            "path": list(self.path),
            "root": self.root,
            "valid": self.valid
        }

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict) -> 'InclusionProof':
        """Create from dictionary."""
        return cls(
            leaf=data.get("leaf", ""),
            siblings=list(data.get("siblings") or []),
            positions=[Position(p) for p in data.get("positions") or []],
            path=list(data.get("path") or []),
            root=data.get("root") or "",
            valid=bool(data.get("valid", False))
        )

    @classmethod
    def from_json(cls, json_str: str) -> 'InclusionProof':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))


def build_levels(leaf_hashes: List[str]) -> List[List[str]]:
    """
    Compute every hash layer above the given leaves.

    Pairs are combined positionally and an odd trailing hash is paired with
    itself.

    Returns:
        list: Layers from the leaves (index 0) to the root (last)
    """
    levels = [list(leaf_hashes)]
    current_level = levels[0]
    while len(current_level) > 1:
        next_level = []
        for i in range(0, len(current_level), 2):
            left = current_level[i]
            right = current_level[i + 1] if i + 1 < len(current_level) else left
            next_level.append(combine(left, right))
        levels.append(next_level)
        current_level = next_level
    return levels


def _build_nodes(levels: List[List[str]], leaves: List[MerkleNode]) -> MerkleNode:
    """Assemble node objects bottom-up and return the top node."""
    top = len(levels) - 1
    previous = leaves
    for level_index in range(1, len(levels)):
        layer = levels[level_index]
        current = []
        for i, node_hash in enumerate(layer):
            is_root = level_index == top
            left_index = i * 2
            right_index = left_index + 1
            current.append(MerkleNode(
                id="root" if is_root else f"internal-{level_index}-{i}",
                hash=node_hash,
                label="Merkle Root" if is_root else f"Node {level_index}-{i}",
                kind=NodeKind.ROOT if is_root else NodeKind.INTERNAL,
                depth=top - level_index,
                index=i,
                left=previous[left_index],
                # Padding is not materialized as a second child
                right=previous[right_index] if right_index < len(previous) else None,
            ))
        previous = current
    return previous[0]


def build_tree(records: Sequence[EventRecord]) -> MerkleTreeResult:
    """
    Build a Merkle tree from DID event records.

    Args:
        records: Records in any order; they are sorted by timestamp

    Returns:
        MerkleTreeResult: Root hash, node tree, and leaves
    """
    if not records:
        logger.debug("Building empty Merkle tree")
        return MerkleTreeResult(
            root=ZERO_HASH,
            tree=MerkleNode(
                id="root",
                hash=ZERO_HASH,
                label="Empty Tree",
                kind=NodeKind.ROOT,
                depth=0,
                index=0,
            ),
            leaves=[],
            leaf_count=0,
            depth=0,
            levels=[[]],
        )

    sorted_records = sort_records(list(records))
    leaf_hashes = [hash_event(record) for record in sorted_records]
    levels = build_levels(leaf_hashes)
    depth = len(levels) - 1

    leaves = [
        MerkleNode(
            id=f"leaf-{i}",
            hash=leaf_hashes[i],
            label=format_operation_type(record.operation_type),
            kind=NodeKind.LEAF,
            depth=depth,
            index=i,
            record=record,
        )
        for i, record in enumerate(sorted_records)
    ]

    tree = _build_nodes(levels, leaves)
    root = levels[-1][0]

    logger.debug("Built Merkle tree: %d leaves, depth %d, root %s", len(leaves), depth, root)

    return MerkleTreeResult(
        root=root,
        tree=tree,
        leaves=leaves,
        leaf_count=len(leaves),
        depth=depth,
        levels=levels,
    )


def _proof_from_levels(levels: List[List[str]], index: int) -> InclusionProof:
    """Walk from the leaf at index to the root, collecting siblings."""
    leaf = levels[0][index]
    siblings = []
    positions = []
    path = [leaf]

    current_index = index
    for level_index in range(len(levels) - 1):
        layer = levels[level_index]
        if current_index % 2 == 1:
            siblings.append(layer[current_index - 1])
            positions.append(Position.LEFT)
        elif current_index + 1 < len(layer):
            siblings.append(layer[current_index + 1])
            positions.append(Position.RIGHT)
        else:
            # Odd count: the node was paired with itself
            siblings.append(layer[current_index])
            positions.append(Position.RIGHT)

        current_index = current_index // 2
        path.append(levels[level_index + 1][current_index])

    root = levels[-1][0]
    return InclusionProof(
        leaf=leaf,
        siblings=siblings,
        positions=positions,
        path=path,
        root=root,
        valid=verify_proof(leaf, siblings, positions, root),
    )


def get_proof(records: Sequence[EventRecord], target: EventRecord) -> InclusionProof:
    """
    Generate an inclusion proof for a record.

    The target is located by content hash after sorting the records exactly
    as build_tree does. A target that is not in the list yields an empty,
    invalid proof rather than an error.

    Args:
        records: All records of the batch
        target: The record to prove

    Returns:
        InclusionProof: Proof for the target
    """
    target_hash = hash_event(target)
    leaf_hashes = [hash_event(record) for record in sort_records(list(records))]

    if target_hash not in leaf_hashes:
        logger.info("Record %s not found among %d records", target_hash, len(leaf_hashes))
        return InclusionProof(leaf=target_hash)

    return _proof_from_levels(build_levels(leaf_hashes), leaf_hashes.index(target_hash))


def get_proof_by_index(records: Sequence[EventRecord], index: int) -> InclusionProof:
    """
    Generate an inclusion proof for the record at a sorted position.

    Args:
        records: All records of the batch
        index: Position of the record after timestamp sorting

    Raises:
        IndexError: If index is out of range
    """
    if index < 0 or index >= len(records):
        raise IndexError(f"Leaf index {index} out of range [0, {len(records) - 1}]")
    leaf_hashes = [hash_event(record) for record in sort_records(list(records))]
    return _proof_from_levels(build_levels(leaf_hashes), index)


def verify_proof(
    leaf: str,
    siblings: Sequence[str],
    positions: Sequence[Union[Position, str]],
    expected_root: str
) -> bool:
    """
    Verify an inclusion proof produced by get_proof.

    Uses positional combination, matching build_tree. A missing position is
    treated as RIGHT.

    Args:
        leaf: Leaf hash to verify
        siblings: Sibling hashes from leaf to root
        positions: Side of each sibling ("left"/"right" or Position)
        expected_root: Root to compare against (exact, case-sensitive)

    Returns:
        bool: True if the recomputed root equals expected_root
    """
    current_hash = strip_hex_prefix(leaf)
    for i, sibling in enumerate(siblings):
        position = Position(positions[i]) if i < len(positions) else Position.RIGHT
        if position == Position.LEFT:
            current_hash = combine(sibling, current_hash)
        else:
            current_hash = combine(current_hash, sibling)

    return current_hash == strip_hex_prefix(expected_root or "")
