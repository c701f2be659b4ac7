import dataclasses
import threading
from typing import Dict, Optional

from errors import DuplicateTransactionError
from models import ClientAccount, TransactionRecord


class StateManager:
    """
    Thread-safe state management with per-client locking.
    Stores client accounts and transaction history for dispute lookups.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, TransactionRecord] = {}

        # Global lock protects creation of new entries in the three dicts.
        # Transaction ids are unique across all clients, so the duplicate check
        # cannot rely on a per-client lock.
        self._global_lock = threading.Lock()
        self._client_locks: Dict[int, threading.Lock] = {}

    def get_client_lock(self, client_id: int) -> threading.Lock:
        """
        Get or create a lock for a specific client.
        Held for the whole of any operation on that client's account.
        """
        with self._global_lock:
            if client_id not in self._client_locks:
                self._client_locks[client_id] = threading.Lock()
            return self._client_locks[client_id]

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        with self._global_lock:
            if client_id not in self._accounts:
                self._accounts[client_id] = ClientAccount(client_id=client_id)
            return self._accounts[client_id]

    def record_transaction(self, record: TransactionRecord) -> None:
        """Store a deposit or withdrawal. Each transaction id may be recorded once."""
        with self._global_lock:
            if record.transaction_id in self._transactions:
                raise DuplicateTransactionError(record.client_id, record.transaction_id)
            self._transactions[record.transaction_id] = record

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve stored transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return point-in-time copies of all accounts, in creation order."""
        with self._global_lock:
            client_ids = list(self._accounts)

        snapshot = {}
        for client_id in client_ids:
            with self.get_client_lock(client_id):
                snapshot[client_id] = dataclasses.replace(self._accounts[client_id])
        return snapshot
