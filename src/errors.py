from typing import Iterator, List, Optional


class PaymentsError(Exception):
    """Base class for every error raised by the payments ledger."""


# Money arithmetic and parsing


class MoneyError(PaymentsError):
    pass


class MoneyParseError(MoneyError):
    pass


class MoneyRangeError(MoneyError):
    pass


class MoneyOverflowError(MoneyError):
    pass


class MoneyUnderflowError(MoneyError):
    pass


# Ledger engine: one event rejected, processing continues


class EngineError(PaymentsError):
    """A single event was rejected. State is unchanged apart from tx_id reservation."""

    reason = "rejected"

    def __init__(self, client_id: int, transaction_id: int, detail: Optional[str] = None):
        self.client_id = client_id
        self.transaction_id = transaction_id
        self.detail = detail
        message = f"client {client_id}, tx {transaction_id}: {self.reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class DuplicateTransactionError(EngineError):
    reason = "transaction id already used"


class AccountLockedError(EngineError):
    reason = "account is locked"


class InsufficientFundsError(EngineError):
    reason = "insufficient available funds"


class BalanceOverflowError(EngineError):
    reason = "balance would exceed the maximum amount"


class UnknownTransactionError(EngineError):
    reason = "unknown transaction"


class ClientMismatchError(EngineError):
    reason = "transaction belongs to another client"


class InvalidTransitionError(EngineError):
    reason = "invalid dispute state transition"


class AlreadyDisputedError(InvalidTransitionError):
    reason = "transaction is already disputed"


class NotDisputedError(InvalidTransitionError):
    reason = "transaction is not disputed"


class TransactionChargedBackError(InvalidTransitionError):
    reason = "transaction was charged back"


# Input collaborator


class InputError(PaymentsError):
    pass


class InputUnreadableError(InputError):
    """The input source cannot be opened or read. Aborts the run."""


class InputFormatError(InputError):
    """The input source is readable but its header is unusable. Aborts the run."""


class RecordParseError(InputError):
    """One input record is malformed. The record is skipped."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")


def iter_error_chain(error: BaseException) -> Iterator[BaseException]:
    """Yield error followed by each explicit cause, outermost first."""
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def error_chain(error: BaseException) -> List[str]:
    """Render error and its causes as one message per link."""
    return [str(link) or type(link).__name__ for link in iter_error_chain(error)]
