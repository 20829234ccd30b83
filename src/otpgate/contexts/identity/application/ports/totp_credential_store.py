from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from otpgate.shared_kernel.primitives import AccountId


@dataclass(frozen=True, slots=True)
class TotpCredentialRecord:
    """
    TotpCredentialRecord — persisted credential tuple exchanged with the account store.

    The secret travels only in Base32 form and is excluded from `repr`.

    Related:
      - src/otpgate/contexts/identity/application/use_cases/totp_account_workflow.py
      - src/otpgate/contexts/identity/adapters/outbound/persistence/in_memory/
        totp_credential_store.py
    """

    account_id: AccountId
    secret_base32: str | None = field(default=None, repr=False)
    enabled: bool = False
    created_at: datetime | None = None
    last_verified_at: datetime | None = None


class TotpCredentialStore(Protocol):
    """
    TotpCredentialStore — account-store collaborator owning TOTP credential persistence.

    Related:
      - src/otpgate/contexts/identity/application/use_cases/totp_account_workflow.py
      - src/otpgate/contexts/identity/adapters/outbound/persistence/in_memory/
        totp_credential_store.py
    """

    def find_by_account_id(self, *, account_id: AccountId) -> TotpCredentialRecord | None:
        """
        Read stored credential tuple for one account.

        Args:
            account_id: Account identifier.
        Returns:
            TotpCredentialRecord | None: Stored record or `None` when nothing is stored.
        Assumptions:
            One record per account.
        Raises:
            None.
        Side Effects:
            Reads one storage record.
        """
        ...

    def save(self, *, record: TotpCredentialRecord) -> None:
        """
        Persist the credential tuple, replacing any previous one for the account.

        Args:
            record: Record to write.
        Returns:
            None.
        Assumptions:
            Store serializes concurrent writes per account.
        Raises:
            None.
        Side Effects:
            Writes one storage record.
        """
        ...
