"""Unit tests for execution proofs."""

from __future__ import annotations

import hashlib

from university_agent.workflow.proof import (
    compute_proof_digest,
    generate_execution_proof,
    hash_step,
    hash_student_id,
    serialize_step,
)


def _sha(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


STEP = {
    "error": None,
    "data": {"sent": 2},
    "status": "COMPLETED",
    "timestamp": "2025-01-01T00:00:00+00:00",
    "id": "SEND_NOTIFICATIONS",
}


def test_serialize_step_uses_fixed_key_order() -> None:
    assert serialize_step(STEP) == (
        '{"id":"SEND_NOTIFICATIONS","timestamp":"2025-01-01T00:00:00+00:00",'
        '"status":"COMPLETED","data":{"sent":2},"error":null}'
    )


def test_proof_is_hash_of_concatenated_step_hashes() -> None:
    other = {**STEP, "id": "LOG_DATABASE"}
    digest, count = compute_proof_digest([STEP, other])

    assert count == 2
    assert digest == _sha(hash_step(STEP) + hash_step(other))


def test_proof_depends_on_step_order() -> None:
    other = {**STEP, "id": "LOG_DATABASE"}
    forward, _ = compute_proof_digest([STEP, other])
    backward, _ = compute_proof_digest([other, STEP])

    assert forward != backward


def test_empty_proof() -> None:
    proof = generate_execution_proof([])

    assert proof.step_count == 0
    assert proof.proof == _sha("")
    assert proof.to_json()["algorithm"] == "sha256"


def test_hash_student_id_normalizes_to_string() -> None:
    assert hash_student_id(42) == hash_student_id("42") == _sha("42")
