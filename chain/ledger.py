"""
In-process Ledger

A deterministic stand-in for a block-producing ledger. It provides the
three things the commit-reveal contract relies on:

- block height as the only clock
- serialized, atomic transactions: a call that raises ContractRevert
  leaves contract storage exactly as it was and emits no events
- a public event log and transaction receipts

Blocks only advance through mine()/advance_to(); several transactions may
land in the same block.
"""

from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol, TypeVar

from core.schemas import ContractRevert


logger = logging.getLogger(__name__)

T = TypeVar("T")

UINT64_MAX = 2**64 - 1


@dataclass(frozen=True)
class LedgerEvent:
    name: str
    block: int
    tx_index: int
    args: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TxReceipt:
    tx_index: int
    block: int
    sender: str
    method: str
    status: str  # "success" | "reverted"
    revert_reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


class HasStorage(Protocol):
    storage: Any


class Ledger:
    """
    Usage:
        ledger = Ledger(start_block=100)
        contract = SwarmChallengeContract(ledger)
        cid = contract.create_challenge("0xcreator", prompt_hash)
        ledger.mine(10)
    """

    def __init__(self, start_block: int = 0) -> None:
        if not 0 <= start_block <= UINT64_MAX:
            raise ValueError("start_block must fit in uint64")
        self._block = start_block
        self._lock = threading.RLock()
        self._events: list[LedgerEvent] = []
        self._pending: list[LedgerEvent] = []
        self._receipts: list[TxReceipt] = []

    @property
    def block_number(self) -> int:
        return self._block

    @property
    def events(self) -> list[LedgerEvent]:
        return list(self._events)

    @property
    def receipts(self) -> list[TxReceipt]:
        return list(self._receipts)

    def mine(self, blocks: int = 1) -> int:
        """Advance the chain by `blocks` and return the new height."""
        if blocks < 0:
            raise ValueError("cannot mine a negative number of blocks")
        with self._lock:
            if self._block + blocks > UINT64_MAX:
                raise ValueError("block height overflows uint64")
            self._block += blocks
            return self._block

    def advance_to(self, block: int) -> int:
        """Mine until the height is at least `block`."""
        with self._lock:
            if block > self._block:
                self.mine(block - self._block)
            return self._block

    def emit(self, name: str, **args: Any) -> None:
        """Queue an event; it is published only if the transaction succeeds."""
        self._pending.append(
            LedgerEvent(name=name, block=self._block, tx_index=len(self._receipts), args=args)
        )

    def execute(
        self,
        contract: HasStorage,
        sender: str,
        method: str,
        fn: Callable[[], T],
    ) -> T:
        """
        Run one transaction against `contract` atomically.

        Raises:
            ContractRevert: re-raised after storage and events are rolled back
        """
        with self._lock:
            snapshot = copy.deepcopy(contract.storage)
            self._pending = []
            tx_index = len(self._receipts)
            try:
                result = fn()
            except ContractRevert as revert:
                contract.storage = snapshot
                self._pending = []
                self._receipts.append(TxReceipt(
                    tx_index=tx_index,
                    block=self._block,
                    sender=sender,
                    method=method,
                    status="reverted",
                    revert_reason=revert.reason,
                ))
                logger.info(f"{method} from {sender} reverted at block {self._block}: {revert.reason}")
                raise
            except Exception:
                contract.storage = snapshot
                self._pending = []
                raise

            self._events.extend(self._pending)
            self._pending = []
            self._receipts.append(TxReceipt(
                tx_index=tx_index,
                block=self._block,
                sender=sender,
                method=method,
                status="success",
            ))
            return result
