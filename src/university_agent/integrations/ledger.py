"""Audit ledger stub.

Stands in for an on-chain `WorkflowLog` contract: every action is recorded
against a sha256 hash of the student id and receives a random transaction
hash. Entries are kept in memory so they can be queried back per student.
"""

from __future__ import annotations

import logging
import random
import secrets
import threading
import time
from collections.abc import Iterable
from typing import Protocol

from university_agent.integrations.models import LedgerReceipt
from university_agent.workflow.proof import hash_student_id

logger = logging.getLogger(__name__)

MOCK_GAS_USED = "21000"


class Ledger(Protocol):
    def log_action(
        self, student_id: object, action: str, execution_id: str | None = None
    ) -> LedgerReceipt: ...


def ledger_student_hash(student_id: object) -> str:
    """bytes32-style hex encoding of the hashed student id."""
    return "0x" + hash_student_id(student_id)[:64]


class MockLedger:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[LedgerReceipt] = []
        self._rng = random.Random()

    def log_action(
        self, student_id: object, action: str, execution_id: str | None = None
    ) -> LedgerReceipt:
        receipt = LedgerReceipt(
            success=True,
            tx_hash="0x" + secrets.token_hex(32),
            block_number=self._rng.randrange(1_000_000),
            gas_used=MOCK_GAS_USED,
            student_hash=ledger_student_hash(student_id),
            execution_id=execution_id or f"EXEC_{int(time.time() * 1000)}",
            action=action,
            mock=True,
        )
        with self._lock:
            self._entries.append(receipt)
        logger.info(
            "Ledger entry recorded",
            extra={"action": action, "tx_hash": receipt.tx_hash, "execution_id": receipt.execution_id},
        )
        return receipt

    def log_batch_actions(
        self, actions: Iterable[tuple[object, str, str | None]]
    ) -> list[LedgerReceipt]:
        return [self.log_action(student_id, action, execution_id) for student_id, action, execution_id in actions]

    def get_student_logs(self, student_id: object) -> list[LedgerReceipt]:
        student_hash = ledger_student_hash(student_id)
        with self._lock:
            return [e for e in self._entries if e.student_hash == student_hash]
