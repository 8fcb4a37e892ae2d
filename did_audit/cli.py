#!/usr/bin/env python3
"""
DID-Audit Command Line Interface

Provides command-line tools for building Merkle trees over DID event records
and auditing them against anchored proofs.

Usage:
    did-audit generate --records 8 --output records.json
    did-audit build records.json
    did-audit prove records.json --index 3 --output proof.json
    did-audit verify proof.json
    did-audit trace did-witness.json --version-id 2
    did-audit audit record.json did-witness.json
    did-audit info
"""

import click
import json
import logging
import random
import sys
from pathlib import Path
from datetime import datetime, timedelta, timezone

from did_audit import __version__, __author__
from did_audit.core.events import EventRecord, OperationType, create_record_from_dict, hash_event
from did_audit.core.merkle import InclusionProof, build_tree, get_proof, get_proof_by_index, verify_proof
from did_audit.core.anchoring import find_proof, parse_witness_data
from did_audit.core.trace import trace_verification
from did_audit.core.audit import audit_record
from did_audit.core.signer import Ed25519Signer, sign_record
from did_audit.utils.helpers import truncate_hash


def _read_json(path):
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}")


def _load_records(path):
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get('records', [])
    try:
        return [create_record_from_dict(item) for item in data]
    except ValueError as e:
        raise click.ClickException(f"Invalid record in {path}: {e}")


def _select_proof(path, leaf_hash=None, version_id=None, leaf_index=None):
    proofs = parse_witness_data(_read_json(path))
    if not proofs:
        raise click.ClickException(f"No anchoring proofs in {path}")
    if leaf_hash is None and version_id is None and leaf_index is None:
        return proofs[0]
    proof = find_proof(proofs, leaf_hash=leaf_hash, version_id=version_id, leaf_index=leaf_index)
    if proof is None:
        raise click.ClickException("No matching anchoring proof found")
    return proof


def _status(is_valid):
    if is_valid:
        return click.style("✅ VERIFICATION PASSED", fg='green', bold=True)
    return click.style("❌ VERIFICATION FAILED", fg='red', bold=True)


@click.group()
@click.version_option(version=__version__)
@click.option('--log-level', default='WARNING', envvar='DID_AUDIT_LOG_LEVEL',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level')
def main(log_level):
    """DID-Audit: Merkle proofs for DID operation records"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


@main.command()
@click.option('--records', '-n', default=8, help='Number of records to generate')
@click.option('--did', default='did:webvh:example.com:product-001', help='Subject DID')
@click.option('--output', '-o', default='records.json', help='Output file path')
@click.option('--seed', type=int, default=None, help='Random seed')
def generate(records, did, output, seed):
    """Generate signed demo DID event records."""
    rng = random.Random(seed)
    signer = Ed25519Signer()
    operation_types = [op.value for op in OperationType if op != OperationType.DID_CREATION]
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    generated = []
    for i in range(records):
        operation_type = OperationType.DID_CREATION.value if i == 0 else rng.choice(operation_types)
        record = EventRecord(
            did=did,
            operation_type=operation_type,
            payload={"version": i + 1, "nonce": rng.getrandbits(32)},
            timestamp=(start + timedelta(hours=i)).isoformat().replace('+00:00', 'Z'),
            record_id=str(i + 1)
        )
        generated.append(sign_record(record, signer))

    result = build_tree(generated)
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump({
            "public_key": signer.public_key_b64,
            "merkle_root": result.root,
            "records": [record.to_dict() for record in generated]
        }, f, indent=2)

    click.echo(json.dumps({
        "records": len(generated),
        "merkle_root": result.root,
        "output": str(output_path)
    }))


@main.command()
@click.argument('records_file', type=click.Path(exists=True))
@click.option('--json-output', '-j', is_flag=True, help='Output the full tree as JSON')
def build(records_file, json_output):
    """Build the Merkle tree for a records file."""
    records = _load_records(records_file)
    result = build_tree(records)

    if json_output:
        click.echo(result.to_json())
        return

    click.echo(f"Merkle root: {result.root}")
    click.echo(f"Leaves: {result.leaf_count}")
    click.echo(f"Depth: {result.depth}")
    for leaf in result.leaves:
        click.echo(f"  [{leaf.index}] {truncate_hash(leaf.hash)}  {leaf.label}  {leaf.record.timestamp}")


@main.command()
@click.argument('records_file', type=click.Path(exists=True))
@click.option('--index', '-i', type=int, default=None, help='Leaf index (timestamp order)')
@click.option('--record-id', default=None, help='Storage id of the target record')
@click.option('--output', '-o', default=None, help='Write the proof to this file')
def prove(records_file, index, record_id, output):
    """Generate an inclusion proof for one record."""
    records = _load_records(records_file)

    if record_id is not None:
        matches = [record for record in records if record.record_id == record_id]
        if not matches:
            raise click.ClickException(f"No record with id {record_id}")
        proof = get_proof(records, matches[0])
    elif index is not None:
        try:
            proof = get_proof_by_index(records, index)
        except IndexError as e:
            raise click.ClickException(str(e))
    else:
        raise click.UsageError("Pass --index or --record-id")

    if output:
        with open(output, 'w') as f:
            f.write(proof.to_json())
        click.echo(f"Proof saved to: {output}")
    else:
        click.echo(proof.to_json())

    sys.exit(0 if proof.valid else 1)


@main.command()
@click.argument('proof_file', type=click.Path(exists=True))
@click.option('--root', '-r', default=None, help='Expected root (defaults to the proof root)')
@click.option('--json-output', '-j', is_flag=True, help='Output as JSON')
def verify(proof_file, root, json_output):
    """Verify an inclusion proof produced by 'prove'."""
    proof = InclusionProof.from_dict(_read_json(proof_file))
    expected_root = root or proof.root
    try:
        is_valid = verify_proof(proof.leaf, proof.siblings, proof.positions, expected_root)
    except ValueError as e:
        raise click.ClickException(f"Malformed proof: {e}")

    if json_output:
        click.echo(json.dumps({"is_valid": is_valid, "expected_root": expected_root}, indent=2))
    else:
        click.echo(_status(is_valid))

    sys.exit(0 if is_valid else 1)


@main.command()
@click.argument('proof_file', type=click.Path(exists=True))
@click.option('--leaf-hash', default=None, help='Select the proof for this leaf hash')
@click.option('--version-id', default=None, help='Select the proof for this DID log version')
@click.option('--full-hashes', is_flag=True, help='Do not truncate hashes')
@click.option('--json-output', '-j', is_flag=True, help='Output as JSON')
def trace(proof_file, leaf_hash, version_id, full_hashes, json_output):
    """Trace the verification of an anchoring proof or witness file."""
    proof = _select_proof(proof_file, leaf_hash=leaf_hash, version_id=version_id)
    try:
        result = trace_verification(proof)
    except ValueError as e:
        raise click.ClickException(f"Malformed proof: {e}")

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        click.echo(f"Leaf: {truncate_hash(proof.leaf_hash, full_hashes)}")
        for step in result.steps:
            click.echo(f"Level {step.level}:")
            click.echo(f"  left:   {truncate_hash(step.left_input, full_hashes)}")
            click.echo(f"  right:  {truncate_hash(step.right_input, full_hashes)}")
            click.echo(f"  output: {truncate_hash(step.output, full_hashes)}")
        click.echo(f"Computed root: {truncate_hash(result.computed_root, full_hashes)}")
        click.echo(f"Expected root: {truncate_hash(result.expected_root, full_hashes)}")
        click.echo(_status(result.is_valid))

    sys.exit(0 if result.is_valid else 1)


@main.command()
@click.argument('record_file', type=click.Path(exists=True))
@click.argument('proof_file', type=click.Path(exists=True))
@click.option('--public-key', envvar='DID_AUDIT_PUBLIC_KEY', default=None,
              help='Base64 Ed25519 public key for the signature check')
@click.option('--version-id', default=None, help='Select the proof issued for this DID log version')
@click.option('--leaf-index', type=int, default=None, help='Select the proof at this batch position')
@click.option('--json-output', '-j', is_flag=True, help='Output as JSON')
def audit(record_file, proof_file, public_key, version_id, leaf_index, json_output):
    """Audit one record against its anchoring proof.

    The proof is matched on the record's hash unless a version or leaf
    position is given. Select it explicitly to audit a record that may have
    been altered since it was anchored.
    """
    data = _read_json(record_file)
    try:
        record = create_record_from_dict(data)
    except ValueError as e:
        raise click.ClickException(f"Invalid record: {e}")

    if version_id is None and leaf_index is None:
        proof = _select_proof(proof_file, leaf_hash=hash_event(record))
    else:
        proof = _select_proof(proof_file, version_id=version_id, leaf_index=leaf_index)
    try:
        result = audit_record(record, proof, public_key=public_key)
    except ValueError as e:
        raise click.ClickException(f"Malformed proof: {e}")

    if json_output:
        payload = result.to_dict()
        payload["alert"] = result.to_alert()
        click.echo(json.dumps(payload, indent=2))
    else:
        click.echo(_status(result.is_valid))
        click.echo(f"DID: {result.did}")
        click.echo(f"  Leaf: {'PASS' if result.leaf_valid else 'FAIL'}")
        click.echo(f"  Anchor: {'PASS' if result.verification.is_valid else 'FAIL'}")
        if result.signature_valid is not None:
            click.echo(f"  Signature: {'PASS' if result.signature_valid else 'FAIL'}")
        if result.error_message:
            click.echo(f"Error: {result.error_message}")

    sys.exit(0 if result.is_valid else 1)


@main.command()
def info():
    """Show DID-Audit version and information."""
    click.echo(f"""
DID-Audit: Merkle proofs for DID operation records
==================================================

Version: {__version__}
Author: {__author__}

Key Features:
  • Deterministic SHA-256 hashing of DID event records
  • Merkle tree construction and inclusion proofs
  • Verification of blockchain-anchored batch proofs
  • Step-by-step verification traces
  • Ed25519 record signatures
    """)


if __name__ == "__main__":
    main()
