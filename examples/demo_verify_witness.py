#!/usr/bin/env python3
"""
DID-Audit Demo: Audit DID Records Against a Witness File

This script rebuilds the Merkle tree for a set of DID event records, checks
every inclusion proof, and audits each record against the anchoring proofs
issued by the witness/batch service.

Usage:
    python examples/demo_verify_witness.py -r data/records.json -w data/did-witness.json

    # Verbose mode (prints every verification step)
    python examples/demo_verify_witness.py -r data/records.json -w data/did-witness.json -v
"""

import argparse
import json
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from did_audit.core.events import create_record_from_dict, hash_event, sort_records
from did_audit.core.merkle import build_tree, get_proof, verify_proof
from did_audit.core.anchoring import find_proof, load_witness_file
from did_audit.core.audit import audit_record
from did_audit.utils.helpers import truncate_hash


def load_records(filepath: str):
    """Load records from a JSON file."""
    with open(filepath, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('records', [])
    return [create_record_from_dict(item) for item in data]


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
    parser = argparse.ArgumentParser(description="Audit DID records against a witness file")
    parser.add_argument('-r', '--records', required=True, help='Records JSON file')
    parser.add_argument('-w', '--witness', required=True, help='Witness JSON file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Print verification steps')
    args = parser.parse_args()

    print_header("DID-Audit Witness Verification")

    records = load_records(args.records)
    proofs = load_witness_file(args.witness)

    print_section("Step 1: Local Merkle Tree")
    result = build_tree(records)
    print(f"  Records: {result.leaf_count}")
    print(f"  Depth:   {result.depth}")
    print(f"  Root:    {truncate_hash(result.root)}")

    local_failures = 0
    for record in records:
        proof = get_proof(records, record)
        if not verify_proof(proof.leaf, proof.siblings, proof.positions, result.root):
            local_failures += 1
    if local_failures:
        print(f"  ❌ {local_failures} inclusion proofs failed")
    else:
        print(f"  ✅ All {len(records)} inclusion proofs verified")

    print_section("Step 2: Anchored Proofs")
    failed = 0
    for index, record in enumerate(sort_records(records)):
        proof = find_proof(proofs, leaf_hash=hash_event(record))
        if proof is None:
            # An altered record no longer matches its leaf; audit it against
            # the proof issued for its position in the batch.
            proof = find_proof(proofs, leaf_index=index)
        if proof is None:
            print(f"  ⚠️  {truncate_hash(hash_event(record))}: not anchored yet")
            continue

        audit = audit_record(record, proof)
        mark = "✅" if audit.is_valid else "❌"
        print(f"  {mark} {truncate_hash(audit.record_hash)}  batch {proof.batch_id}  "
              f"{audit.verification.total_levels} levels")

        if args.verbose:
            for step in audit.verification.steps:
                print(f"       {step.description}")

        if not audit.is_valid:
            failed += 1
            print(f"     Alert: {json.dumps(audit.to_alert())}")

    print_section("Result")
    if failed or local_failures:
        print("  ❌ AUDIT FAILED")
        sys.exit(1)
    print("  ✅ AUDIT PASSED")


if __name__ == "__main__":
    main()
