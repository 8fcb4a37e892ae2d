"""
Shared fixtures for the DID-Audit test suite.
"""

from datetime import datetime, timedelta, timezone

import pytest

from did_audit.core.events import EventRecord
from did_audit.core.hashing import combine, with_hex_prefix


def make_records(count, did="did:webvh:example.com:p1"):
    """Synthetic records one hour apart, in timestamp order."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        EventRecord(
            did=did,
            operation_type="did_update" if i else "did_creation",
            payload={"version": i + 1},
            signature=f"sig-{i}",
            timestamp=(start + timedelta(hours=i)).isoformat(),
            record_id=str(i),
        )
        for i in range(count)
    ]


def witness_batch(leaf_hashes):
    """
    Build anchoring proofs the way the witness service does.

    Sorted-pair tree; a trailing odd node is carried up unchanged.
    """
    levels = [[with_hex_prefix(h) for h in leaf_hashes]]
    while len(levels[-1]) > 1:
        layer = levels[-1]
        next_layer = []
        for i in range(0, len(layer), 2):
            if i + 1 < len(layer):
                next_layer.append(with_hex_prefix(combine(layer[i], layer[i + 1], canonical=True)))
            else:
                next_layer.append(layer[i])
        levels.append(next_layer)
    root = levels[-1][0]

    proofs = []
    for index, leaf in enumerate(levels[0]):
        siblings = []
        position = index
        for layer in levels[:-1]:
            sibling = position ^ 1
            if sibling < len(layer):
                siblings.append(layer[sibling])
            position //= 2
        proofs.append({
            "batchId": 7,
            "merkleRoot": root,
            "leafHash": leaf,
            "merkleProof": siblings,
            "leafIndex": index,
            "txHash": "0x" + "ab" * 32,
            "blockNumber": 42,
            "versionId": str(index + 1),
        })
    return root, proofs


@pytest.fixture
def records():
    return make_records(5)


@pytest.fixture
def two_records():
    return [
        EventRecord(did="d1", operation_type="create", payload={}, signature="s1",
                    timestamp="2024-01-01T00:00:00Z"),
        EventRecord(did="d1", operation_type="update", payload={}, signature="s2",
                    timestamp="2024-01-02T00:00:00Z"),
    ]
