import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import money
from errors import MoneyOverflowError
from money import Money

logger = logging.getLogger(__name__)


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def carries_amount(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class DisputeState(Enum):
    NOT_DISPUTED = "not_disputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class ProcessingResult(Enum):
    SUCCESS = "success"
    REJECTED = "rejected"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Money] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """
    A recorded deposit or withdrawal, kept for later dispute lookups.
    Only `state` changes after creation.
    """

    transaction_id: int
    client_id: int
    kind: TransactionType
    amount: Money
    state: DisputeState = DisputeState.NOT_DISPUTED

    @property
    def disputed(self) -> bool:
        return self.state is DisputeState.DISPUTED

    @property
    def charged_back(self) -> bool:
        return self.state is DisputeState.CHARGED_BACK


@dataclass
class ClientAccount:
    client_id: int
    available: Money = money.ZERO
    held: Money = money.ZERO
    locked: bool = False

    @property
    def total(self) -> Money:
        try:
            return self.available.checked_add(self.held)
        except MoneyOverflowError:
            logger.warning(f"Client {self.client_id}: total overflows, reporting available {self.available} only")
            return self.available

    # Each mutator computes every new balance before assigning any of them.

    def credit(self, amount: Money) -> None:
        self.available = self.available.checked_add(amount)

    def debit(self, amount: Money) -> None:
        self.available = self.available.checked_sub(amount)

    def hold(self, amount: Money) -> None:
        available = self.available.checked_sub(amount)
        held = self.held.checked_add(amount)
        self.available, self.held = available, held

    def release_hold(self, amount: Money) -> None:
        held = self.held.checked_sub(amount)
        available = self.available.checked_add(amount)
        self.available, self.held = available, held

    def remove_held(self, amount: Money) -> None:
        self.held = self.held.checked_sub(amount)

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.processed = 0
        self.rejected = 0
        self.malformed = 0

    def record_success(self):
        with self._lock:
            self.processed += 1

    def record_rejection(self):
        with self._lock:
            self.rejected += 1

    def record_malformed(self):
        with self._lock:
            self.malformed += 1
