"""
DID-Audit Verification Trace

Builds the ordered, human-inspectable record of an anchored proof
verification: one step per combination, with both inputs and the output.

The full trace is computed in one pass and returned as a list. Callers that
animate the verification replay the list at their own pace; no progress
state is kept here.

The result of trace_verification is what the surrounding system reports as
"audit passed" or "audit failed".
"""

import logging
from dataclasses import dataclass, field
from typing import List

from did_audit.core.anchoring import ProofInput, as_anchoring_proof
from did_audit.core.hashing import normalize_hash
from did_audit.core.verifier import computed_root_of, walk_anchoring_proof
from did_audit.utils.helpers import truncate_hash


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerificationStep:
    """
    One combination of the verification.

    Attributes:
        level: 1-based level number
        left_input: Hash placed on the left
        right_input: Hash placed on the right
        output: Hash of the concatenated inputs
        description: Human readable summary of the step
    """
    level: int
    left_input: str
    right_input: str
    output: str
    description: str

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "left_input": self.left_input,
            "right_input": self.right_input,
            "output": self.output,
            "description": self.description,
        }


@dataclass
class VerificationResult:
    """
    Outcome of a traced verification.

    Attributes:
        steps: Combinations in order, leaf first
        computed_root: Root reached by the last step (the leaf if no steps)
        expected_root: Root stated by the proof
        is_valid: True if computed_root equals expected_root
    """
    steps: List[VerificationStep] = field(default_factory=list)
    computed_root: str = ""
    expected_root: str = ""
    is_valid: bool = False

    @property
    def total_levels(self) -> int:
        return len(self.steps)

    def to_dict(self) -> dict:
        return {
            "steps": [step.to_dict() for step in self.steps],
            "computed_root": self.computed_root,
            "expected_root": self.expected_root,
            "is_valid": self.is_valid,
        }


def trace_verification(proof: ProofInput) -> VerificationResult:
    """
    Trace the verification of a witness/batch service proof.

    Args:
        proof: AnchoringProof or the raw dictionary from the service

    Returns:
        VerificationResult: Steps, computed and expected roots, validity
    """
    anchoring_proof = as_anchoring_proof(proof)
    levels = walk_anchoring_proof(anchoring_proof)
    total = len(levels)

    steps = []
    for level in levels:
        number = level.level + 1
        if number == total:
            target = "Merkle root"
        else:
            target = f"intermediate hash {number}"
        steps.append(VerificationStep(
            level=number,
            left_input=level.left_input,
            right_input=level.right_input,
            output=level.parent_hash,
            description=(
                f"Level {number}: SHA256({truncate_hash(level.left_input)} || "
                f"{truncate_hash(level.right_input)}) -> {target}"
            ),
        ))

    computed_root = computed_root_of(anchoring_proof, levels)
    expected_root = normalize_hash(anchoring_proof.merkle_root)
    is_valid = bool(computed_root) and bool(expected_root) and computed_root == expected_root

    logger.debug("Traced %d steps, valid=%s", total, is_valid)

    return VerificationResult(
        steps=steps,
        computed_root=computed_root,
        expected_root=expected_root,
        is_valid=is_valid,
    )
