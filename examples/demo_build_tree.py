#!/usr/bin/env python3
"""
DID-Audit Demo: Build a Merkle Tree of DID Events

This script creates a small history of signed DID operations, builds the
audit Merkle tree over it and prints an inclusion proof for every record.

Usage:
    python examples/demo_build_tree.py --records 5 --output data/records.json
"""

import argparse
import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from did_audit.core.events import EventRecord, OperationType
from did_audit.core.merkle import build_tree, get_proof, verify_proof
from did_audit.core.signer import Ed25519Signer, sign_record
from did_audit.utils.helpers import format_operation_type, truncate_hash


OPERATIONS = [
    OperationType.DID_CREATION,
    OperationType.DID_UPDATE,
    OperationType.KEY_ROTATION,
    OperationType.OWNERSHIP_CHANGE,
]


def make_history(did: str, count: int, signer: Ed25519Signer):
    """Create a signed operation history for a single DID."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    records = []
    for i in range(count):
        operation = OPERATIONS[0] if i == 0 else OPERATIONS[1 + (i - 1) % 3]
        record = EventRecord(
            did=did,
            operation_type=operation.value,
            payload={"sequence": i + 1},
            timestamp=(start + timedelta(days=i)).isoformat(),
            record_id=str(i),
        )
        records.append(sign_record(record, signer))
    return records


def print_header(text: str):
    """Print a formatted header."""
    print()
    print("═" * 60)
    print(f"  {text}")
    print("═" * 60)


def print_section(text: str):
    """Print a formatted section header."""
    print()
    print(f"─── {text} " + "─" * (55 - len(text)))


def main():
    parser = argparse.ArgumentParser(description="Build a Merkle tree of DID events")
    parser.add_argument('-n', '--records', type=int, default=5, help='Number of records')
    parser.add_argument('--did', default='did:web:example.com', help='Subject DID')
    parser.add_argument('-o', '--output', help='Write records to this JSON file')
    args = parser.parse_args()

    print_header("DID-Audit Merkle Tree Demo")

    signer = Ed25519Signer()
    records = make_history(args.did, args.records, signer)

    print_section("Records")
    for record in records:
        print(f"  {record.timestamp}  {format_operation_type(record.operation_type):<18} "
              f"{truncate_hash(record.compute_hash())}")

    print_section("Tree")
    result = build_tree(records)
    print(f"  Leaves: {result.leaf_count}")
    print(f"  Depth:  {result.depth}")
    print(f"  Root:   {result.root}")

    print_section("Inclusion Proofs")
    for record in records:
        proof = get_proof(records, record)
        ok = verify_proof(proof.leaf, proof.siblings, proof.positions, result.root)
        path = " ".join(p.value[0].upper() for p in proof.positions)
        print(f"  {'✅' if ok else '❌'} record {record.record_id}: {len(proof.siblings)} siblings [{path}]")

    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as f:
            json.dump({
                "public_key": signer.public_key_b64,
                "merkle_root": result.root,
                "records": [r.to_dict() for r in records],
            }, f, indent=2)
        print(f"\n  Saved {len(records)} records to {args.output}")


if __name__ == "__main__":
    main()
