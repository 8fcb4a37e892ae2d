"""
DID-Audit Anchoring Proofs

Proof objects produced by the external witness/batch service, which groups
events into a batch, builds a sorted-pair Merkle tree over their leaf hashes
and anchors the root in a blockchain transaction.

The producing services are not under this package's control and have used
several field names over time (merkleProof / siblings / proof, leafHash /
hash, merkleRoot / root). AnchoringProof.from_dict is the single place where
those variants are mapped onto one internal shape; nothing else in the
package reads the raw dictionaries.

A witness file (did-witness.json) is a JSON list of such proofs, one per DID
log version.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

from did_audit.core.hashing import normalize_hash


logger = logging.getLogger(__name__)


_SIBLING_KEYS = ("merkleProof", "merkle_proof", "siblings", "proof")
_LEAF_KEYS = ("leafHash", "leaf_hash", "hash", "leaf")
_ROOT_KEYS = ("merkleRoot", "merkle_root", "root")


def _first_present(data: dict, keys) -> Optional[object]:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _sibling_hash(item) -> str:
    # Some producers emit {"position": ..., "data": "0x..."} items
    if isinstance(item, dict):
        return str(item.get("data") or item.get("hash") or "")
    return str(item)


@dataclass
class AnchoringProof:
    """
    Inclusion proof for one leaf of an anchored batch.

    Attributes:
        leaf_hash: Hash of the proven leaf
        leaf_index: Position of the leaf in the batch
        siblings: Sibling hashes from leaf to root
        merkle_root: Root anchored on-chain
        batch_id: Batch identifier on the anchoring contract
        tx_hash: Anchoring transaction hash
        block_number: Block containing the anchoring transaction
        version_id: DID log version the leaf belongs to
        timestamp: ISO 8601 anchoring time
        chain_id: Chain identifier for multi-chain deployments
    """
    leaf_hash: str = ""
    leaf_index: int = 0
    siblings: List[str] = field(default_factory=list)
    merkle_root: str = ""
    batch_id: Optional[int] = None
    tx_hash: Optional[str] = None
    block_number: Optional[int] = None
    version_id: Optional[str] = None
    timestamp: Optional[str] = None
    chain_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'AnchoringProof':
        """
        Normalize an externally produced proof dictionary.

        Missing siblings become an empty list and a missing leaf hash or root
        becomes "", so a malformed proof verifies as invalid instead of
        raising.
        """
        raw_siblings = _first_present(data, _SIBLING_KEYS) or []
        leaf_index = data.get("leafIndex", data.get("leaf_index", 0))
        return cls(
            leaf_hash=str(_first_present(data, _LEAF_KEYS) or ""),
            leaf_index=int(leaf_index or 0),
            siblings=[_sibling_hash(item) for item in raw_siblings],
            merkle_root=str(_first_present(data, _ROOT_KEYS) or ""),
            batch_id=data.get("batchId", data.get("batch_id")),
            tx_hash=data.get("txHash", data.get("tx_hash")),
            block_number=data.get("blockNumber", data.get("block_number")),
            version_id=data.get("versionId", data.get("version_id")),
            timestamp=data.get("timestamp"),
            chain_id=data.get("chainId", data.get("chain_id")),
        )

    @classmethod
    def from_json(cls, json_str: str) -> 'AnchoringProof':
        return cls.from_dict(json.loads(json_str))

    def to_dict(self) -> dict:
        """Serialize using the witness service field names."""
        data = {
            "leafHash": self.leaf_hash,
            "leafIndex": self.leaf_index,
            "merkleProof": list(self.siblings),
            "merkleRoot": self.merkle_root,
        }
        optional = {
            "batchId": self.batch_id,
            "txHash": self.tx_hash,
            "blockNumber": self.block_number,
            "versionId": self.version_id,
            "timestamp": self.timestamp,
            "chainId": self.chain_id,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @property
    def is_anchored(self) -> bool:
        """Whether the proof references an on-chain transaction."""
        return bool(self.tx_hash)


ProofInput = Union[AnchoringProof, dict]


def as_anchoring_proof(proof: ProofInput) -> AnchoringProof:
    """Accept either a normalized proof or a raw external dictionary."""
    if isinstance(proof, AnchoringProof):
        return proof
    return AnchoringProof.from_dict(proof or {})


def parse_witness_data(data) -> List[AnchoringProof]:
    """
    Read witness file content.

    Args:
        data: A list of proof dicts, or a dict holding them under "proofs"
              (a single proof dict is also accepted)

    Returns:
        list: Normalized proofs
    """
    if isinstance(data, dict):
        data = data["proofs"] if "proofs" in data else [data]
    return [AnchoringProof.from_dict(item) for item in data]


def load_witness_file(filepath: Union[str, Path]) -> List[AnchoringProof]:
    """
    Load anchoring proofs from a witness JSON file.

    Args:
        filepath: Path to the witness file

    Returns:
        list: Normalized proofs in file order
    """
    with open(filepath, 'r') as f:
        data = json.load(f)

    proofs = parse_witness_data(data)
    logger.debug("Loaded %d anchoring proofs from %s", len(proofs), filepath)
    return proofs


def find_proof(
    proofs: List[AnchoringProof],
    leaf_hash: Optional[str] = None,
    version_id: Optional[str] = None,
    leaf_index: Optional[int] = None
) -> Optional[AnchoringProof]:
    """
    Find the proof for a leaf hash, a DID log version or a batch position.

    Selecting by version or position does not look at the record itself, so
    a record altered after anchoring still finds the proof it was issued.

    Leaf hashes are compared in normalized form, so prefix and case do not
    matter.
    """
    wanted = normalize_hash(leaf_hash) if leaf_hash else None
    for proof in proofs:
        if wanted and normalize_hash(proof.leaf_hash) == wanted:
            return proof
        if version_id is not None and proof.version_id == version_id:
            return proof
        if leaf_index is not None and proof.leaf_index == leaf_index:
            return proof
    return None
