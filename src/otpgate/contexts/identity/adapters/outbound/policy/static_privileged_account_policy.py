from __future__ import annotations

from typing import Iterable

from otpgate.contexts.identity.application.ports import PrivilegedAccountPolicy
from otpgate.shared_kernel.primitives import AccountId


class StaticPrivilegedAccountPolicy(PrivilegedAccountPolicy):
    """
    StaticPrivilegedAccountPolicy — fixed set of accounts that must keep TOTP enabled.

    Related:
      - src/otpgate/contexts/identity/application/ports/privileged_account_policy.py
      - src/otpgate/platform/config/totp_runtime_config.py
      - apps/cli/wiring/totp.py
    """

    def __init__(self, *, account_ids: Iterable[str | AccountId] = ()) -> None:
        """
        Initialize policy with privileged account identifiers.

        Args:
            account_ids: Account ids as strings or `AccountId` values.
        Returns:
            None.
        Assumptions:
            Identifiers compare after surrounding whitespace is stripped.
        Raises:
            ValueError: If an identifier is blank.
        Side Effects:
            None.
        """
        self._account_ids = frozenset(
            account_id.value if isinstance(account_id, AccountId) else AccountId(account_id).value
            for account_id in account_ids
        )

    @property
    def account_ids(self) -> frozenset[str]:
        return self._account_ids

    def is_privileged_account(self, *, account_id: AccountId) -> bool:
        return account_id.value in self._account_ids
