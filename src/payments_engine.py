import logging
from typing import Dict, Iterable, Optional

from errors import RecordParseError
from models import ClientAccount, ProcessingResult, ProcessingStats, Transaction
from state_manager import StateManager
from transaction_processor import TransactionProcessor
from transaction_reader import read_transactions

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays transaction events against the ledger in arrival order.
    The processor is safe to share with other callers; this class feeds it synchronously.
    """

    def __init__(self, state: Optional[StateManager] = None):
        self._state = state if state is not None else StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def processor(self) -> TransactionProcessor:
        return self._processor

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Starting processing of {filepath}")

        transactions = read_transactions(filepath, on_error=self._on_malformed_record)
        self.process_transactions(transactions)

        logger.info(
            f"Processing complete. Processed: {self._stats.processed}, "
            f"Rejected: {self._stats.rejected}, "
            f"Malformed: {self._stats.malformed}"
        )
        return self.snapshot()

    def process_transactions(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            result = self._processor.process_transaction(transaction)

            if result == ProcessingResult.SUCCESS:
                self._stats.record_success()
            elif result == ProcessingResult.REJECTED:
                self._stats.record_rejection()

    def snapshot(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def _on_malformed_record(self, error: RecordParseError) -> None:
        self._stats.record_malformed()
