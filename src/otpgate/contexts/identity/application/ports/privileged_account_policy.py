from __future__ import annotations

from typing import Protocol

from otpgate.shared_kernel.primitives import AccountId


class PrivilegedAccountPolicy(Protocol):
    """
    PrivilegedAccountPolicy — policy hook telling which accounts must keep TOTP enabled.

    Related:
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
      - src/otpgate/contexts/identity/adapters/outbound/policy/
        static_privileged_account_policy.py
    """

    def is_privileged_account(self, *, account_id: AccountId) -> bool:
        """
        Tell whether the account is policy-mandated to keep TOTP active.

        Args:
            account_id: Account identifier.
        Returns:
            bool: `True` for privileged (e.g. administrator) accounts.
        Assumptions:
            Answer is stable for the duration of one engine call.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
