from __future__ import annotations

import threading

from otpgate.contexts.identity.application.ports import TotpCredentialRecord, TotpCredentialStore
from otpgate.shared_kernel.primitives import AccountId


class InMemoryTotpCredentialStore(TotpCredentialStore):
    """
    InMemoryTotpCredentialStore — deterministic process-local TOTP credential storage.

    Related:
      - src/otpgate/contexts/identity/application/ports/totp_credential_store.py
      - src/otpgate/contexts/identity/application/use_cases/totp_account_workflow.py
      - tests/unit/contexts/identity/application/test_totp_account_workflow.py
    """

    def __init__(self) -> None:
        """
        Initialize empty in-memory credential storage.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Store instance is process-local and isolated per test run.
        Raises:
            None.
        Side Effects:
            None.
        """
        self._rows: dict[str, TotpCredentialRecord] = {}
        self._lock = threading.Lock()

    def find_by_account_id(self, *, account_id: AccountId) -> TotpCredentialRecord | None:
        with self._lock:
            return self._rows.get(str(account_id))

    def save(self, *, record: TotpCredentialRecord) -> None:
        """
        Store or replace credential record for its account.

        Args:
            record: Record snapshot to persist.
        Returns:
            None.
        Assumptions:
            Dictionary key uses canonical string representation of `AccountId`.
        Raises:
            None.
        Side Effects:
            Mutates in-memory dictionary row for the account.
        """
        with self._lock:
            self._rows[str(record.account_id)] = record

    def __len__(self) -> int:
        with self._lock:
            return len(self._rows)
