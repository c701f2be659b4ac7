import logging

from errors import (
    AccountLockedError,
    AlreadyDisputedError,
    BalanceOverflowError,
    ClientMismatchError,
    EngineError,
    InsufficientFundsError,
    MoneyOverflowError,
    MoneyUnderflowError,
    NotDisputedError,
    TransactionChargedBackError,
    UnknownTransactionError,
    error_chain,
)
from models import (
    DisputeState,
    ProcessingResult,
    Transaction,
    TransactionRecord,
    TransactionType,
)
from money import Money
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies ledger events to state.

    Every operation takes the client's lock for its full duration and either
    applies completely or raises an EngineError leaving balances untouched.
    Deposits and withdrawals consume their transaction id even when rejected.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: Applied to the account
            REJECTED: Refused by a ledger rule, logged with its cause chain
        """
        try:
            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    self.deposit(transaction.client_id, transaction.transaction_id, self._require_amount(transaction))
                case TransactionType.WITHDRAWAL:
                    self.withdrawal(transaction.client_id, transaction.transaction_id, self._require_amount(transaction))
                case TransactionType.DISPUTE:
                    self.dispute(transaction.client_id, transaction.transaction_id)
                case TransactionType.RESOLVE:
                    self.resolve(transaction.client_id, transaction.transaction_id)
                case TransactionType.CHARGEBACK:
                    self.chargeback(transaction.client_id, transaction.transaction_id)
        except EngineError as e:
            logger.warning(f"Rejected {transaction}: {'; caused by: '.join(error_chain(e))}")
            return ProcessingResult.REJECTED
        return ProcessingResult.SUCCESS

    def deposit(self, client_id: int, transaction_id: int, amount: Money) -> None:
        with self._state.get_client_lock(client_id):
            account = self._state.get_or_create_account(client_id)
            self._record(client_id, transaction_id, TransactionType.DEPOSIT, amount)

            if account.locked:
                raise AccountLockedError(client_id, transaction_id)

            try:
                account.credit(amount)
            except MoneyOverflowError as e:
                raise BalanceOverflowError(client_id, transaction_id, f"deposit of {amount}") from e

    def withdrawal(self, client_id: int, transaction_id: int, amount: Money) -> None:
        with self._state.get_client_lock(client_id):
            account = self._state.get_or_create_account(client_id)
            self._record(client_id, transaction_id, TransactionType.WITHDRAWAL, amount)

            if account.locked:
                raise AccountLockedError(client_id, transaction_id)

            try:
                account.debit(amount)
            except MoneyUnderflowError as e:
                raise InsufficientFundsError(
                    client_id, transaction_id, f"withdrawal of {amount}, available {account.available}"
                ) from e

    def dispute(self, client_id: int, transaction_id: int) -> None:
        with self._state.get_client_lock(client_id):
            account = self._state.get_or_create_account(client_id)
            record = self._find_owned(client_id, transaction_id)

            if record.charged_back:
                raise TransactionChargedBackError(client_id, transaction_id)
            if record.disputed:
                raise AlreadyDisputedError(client_id, transaction_id)

            # Withdrawals are held the same way as deposits.
            try:
                account.hold(record.amount)
            except MoneyUnderflowError as e:
                raise InsufficientFundsError(
                    client_id, transaction_id, f"cannot hold {record.amount}, available {account.available}"
                ) from e
            except MoneyOverflowError as e:
                raise BalanceOverflowError(client_id, transaction_id, f"hold of {record.amount}") from e

            record.state = DisputeState.DISPUTED

    def resolve(self, client_id: int, transaction_id: int) -> None:
        with self._state.get_client_lock(client_id):
            account = self._state.get_or_create_account(client_id)
            record = self._find_disputed(client_id, transaction_id)

            try:
                account.release_hold(record.amount)
            except MoneyOverflowError as e:
                raise BalanceOverflowError(client_id, transaction_id, f"release of {record.amount}") from e

            record.state = DisputeState.NOT_DISPUTED

    def chargeback(self, client_id: int, transaction_id: int) -> None:
        with self._state.get_client_lock(client_id):
            account = self._state.get_or_create_account(client_id)
            record = self._find_disputed(client_id, transaction_id)

            account.remove_held(record.amount)
            account.lock()
            record.state = DisputeState.CHARGED_BACK

    def _record(self, client_id: int, transaction_id: int, kind: TransactionType, amount: Money) -> None:
        self._state.record_transaction(
            TransactionRecord(transaction_id=transaction_id, client_id=client_id, kind=kind, amount=amount)
        )

    def _find_owned(self, client_id: int, transaction_id: int) -> TransactionRecord:
        record = self._state.get_transaction(transaction_id)
        if record is None:
            raise UnknownTransactionError(client_id, transaction_id)
        if record.client_id != client_id:
            raise ClientMismatchError(client_id, transaction_id, f"owned by client {record.client_id}")
        return record

    def _find_disputed(self, client_id: int, transaction_id: int) -> TransactionRecord:
        record = self._find_owned(client_id, transaction_id)
        if record.charged_back:
            raise TransactionChargedBackError(client_id, transaction_id)
        if not record.disputed:
            raise NotDisputedError(client_id, transaction_id)
        return record

    @staticmethod
    def _require_amount(transaction: Transaction) -> Money:
        if transaction.amount is None:
            raise ValueError(f"{transaction} has no amount")
        return transaction.amount
