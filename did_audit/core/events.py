"""
DID-Audit Event Records

This module defines the attested DID operation records that the Merkle engine
hashes into trees.

An EventRecord is produced by an external attestation store. Its content hash
covers exactly five fields:

    did, operation type, payload, signature, timestamp

The store's own record identifier is NOT part of the hash, so the same logical
event hashes identically whichever store persisted it.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field, asdict
import json

from did_audit.core.hashing import sha256_hex


class OperationType(Enum):
    """Well-known DID operation kinds. Records may carry other values."""

    DID_CREATION = "did_creation"
    DID_UPDATE = "did_update"
    KEY_ROTATION = "key_rotation"
    OWNERSHIP_CHANGE = "ownership_change"
    DID_DEACTIVATION = "did_deactivation"


def parse_timestamp(timestamp: str) -> datetime:
    """
    Parse an ISO 8601 timestamp into an aware datetime.

    A trailing 'Z' is accepted and naive values are taken to be UTC.

    Raises:
        ValueError: If the timestamp is not ISO 8601
    """
    if timestamp.endswith('Z'):
        timestamp = timestamp[:-1] + '+00:00'
    parsed = datetime.fromisoformat(timestamp)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _canonical(value: Any) -> Any:
    """Rebuild nested mappings with sorted keys."""
    if isinstance(value, dict):
        return {key: _canonical(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [_canonical(item) for item in value]
    return value


@dataclass(frozen=True)
class EventRecord:
    """
    An attested operation on a DID.

    Attributes:
        did: Subject identifier the operation applies to
        operation_type: Operation kind (see OperationType)
        payload: Structured operation data
        signature: Signature over the operation content
        timestamp: ISO 8601 timestamp of the operation
        record_id: Storage identifier, excluded from the content hash
        approval_status: Workflow status, excluded from the content hash
        witness_did: Witness that attested the record, excluded from the hash
        witness_status: Anchoring status, excluded from the content hash
    """

    did: str
    operation_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    signature: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    record_id: str = ""
    approval_status: Optional[str] = None
    witness_did: Optional[str] = None
    witness_status: Optional[str] = None

    # Compared by value but unhashable, since payload is a dict
    __hash__ = None

    def content(self) -> Dict[str, Any]:
        """The hashed subset of the record, in serialization order."""
        return {
            "did": self.did,
            "type": self.operation_type,
            "data": _canonical(self.payload),
            "signature": self.signature,
            "timestamp": self.timestamp,
        }

    def canonical_json(self) -> str:
        """Compact JSON of the hashed content with a fixed key order."""
        return json.dumps(self.content(), separators=(',', ':'), ensure_ascii=False)

    def compute_hash(self) -> str:
        """Content hash of this record (bare lowercase hex)."""
        return hash_event(self)

    def signing_payload(self) -> str:
        """Content covered by the record signature (everything but the signature)."""
        content = self.content()
        del content["signature"]
        return json.dumps(content, separators=(',', ':'), ensure_ascii=False)

    @property
    def parsed_timestamp(self) -> datetime:
        return parse_timestamp(self.timestamp)

    def to_dict(self) -> dict:
        """Convert record to dictionary for serialization."""
        return asdict(self)

    def to_json(self) -> str:
        """Convert record to JSON string."""
        return json.dumps(self.to_dict(), indent=2)


def hash_event(record: EventRecord) -> str:
    """
    Compute the content hash of an event record.

    Args:
        record: The record to hash

    Returns:
        str: SHA-256 of the canonical JSON content, bare lowercase hex
    """
    return sha256_hex(record.canonical_json().encode('utf-8'))


def sort_records(records: List[EventRecord]) -> List[EventRecord]:
    """
    Order records by ascending timestamp.

    The sort is stable, so records sharing a timestamp keep their input order.
    """
    return sorted(records, key=lambda record: record.parsed_timestamp)


# Field name variants emitted by the attestation stores
_FIELD_ALIASES = {
    "did": ("did", "subject"),
    "operation_type": ("operation_type", "attestation_type", "type", "kind"),
    "payload": ("payload", "attestation_data", "data"),
    "signature": ("signature", "sig"),
    "timestamp": ("timestamp", "ts"),
    "record_id": ("record_id", "id"),
}


def create_record_from_dict(data: dict) -> EventRecord:
    """
    Create an EventRecord from a dictionary.

    Both the snake_case field names of this package and the attestation store
    names (attestation_type, attestation_data, id) are accepted.

    Args:
        data: Dictionary containing record data

    Returns:
        EventRecord: The record

    Raises:
        ValueError: If the did or the operation type is missing
    """
    values = {}
    for name, aliases in _FIELD_ALIASES.items():
        for alias in aliases:
            if data.get(alias) is not None:
                values[name] = data[alias]
                break

    if not values.get("did"):
        raise ValueError("did is required")
    if not values.get("operation_type"):
        raise ValueError("operation_type is required")

    if isinstance(values["operation_type"], OperationType):
        values["operation_type"] = values["operation_type"].value
    if "record_id" in values:
        values["record_id"] = str(values["record_id"])

    for name in ("approval_status", "witness_did", "witness_status"):
        if data.get(name) is not None:
            values[name] = data[name]

    return EventRecord(**values)
