"""Hashing helpers for execution proofs and privacy-preserving identifiers.

The proof is a cosmetic integrity marker: a sha256 over the concatenated
sha256 digests of each serialized step. It is not a Merkle tree and carries no
signature.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

HASH_ALGORITHM = "sha256"

# Serialization order of a step; changing it changes every proof.
STEP_FIELDS: tuple[str, ...] = ("id", "timestamp", "status", "data", "error")


@dataclass(frozen=True, slots=True)
class ExecutionProof:
    proof: str
    step_count: int
    algorithm: str
    timestamp: str

    def to_json(self) -> dict[str, object]:
        return {
            "proof": self.proof,
            "step_count": self.step_count,
            "algorithm": self.algorithm,
            "timestamp": self.timestamp,
        }


def _sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def serialize_step(step: Mapping[str, object]) -> str:
    ordered = {key: step.get(key) for key in STEP_FIELDS}
    return json.dumps(ordered, separators=(",", ":"), ensure_ascii=False, default=str)


def hash_step(step: Mapping[str, object]) -> str:
    return _sha256_hex(serialize_step(step))


def compute_proof_digest(steps: Iterable[Mapping[str, object]]) -> tuple[str, int]:
    """Return (digest, step_count) for an ordered sequence of serialized steps."""

    step_hashes = [hash_step(step) for step in steps]
    return _sha256_hex("".join(step_hashes)), len(step_hashes)


def generate_execution_proof(steps: Iterable[Mapping[str, object]]) -> ExecutionProof:
    digest, count = compute_proof_digest(steps)
    return ExecutionProof(
        proof=digest,
        step_count=count,
        algorithm=HASH_ALGORITHM,
        timestamp=datetime.now(tz=UTC).isoformat(),
    )


def hash_student_id(student_id: object) -> str:
    """Privacy-preserving identifier used in ledger entries."""

    return _sha256_hex(str(student_id))
