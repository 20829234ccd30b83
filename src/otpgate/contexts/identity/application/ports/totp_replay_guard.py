from __future__ import annotations

from typing import Protocol

from otpgate.shared_kernel.primitives import AccountId


class TotpReplayGuard(Protocol):
    """
    TotpReplayGuard — short-lived store of consumed `(account, counter)` pairs.

    Related:
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
      - src/otpgate/contexts/identity/adapters/outbound/security/two_factor/
        in_memory_totp_replay_guard.py
    """

    def consume(self, *, account_id: AccountId, counter: int) -> bool:
        """
        Mark a matched counter as used for the account.

        Args:
            account_id: Account identifier.
            counter: Time-step counter that matched the submitted code.
        Returns:
            bool: `True` on first use, `False` if the pair was already consumed.
        Assumptions:
            Entries expire after the tolerance window has passed.
        Raises:
            None.
        Side Effects:
            Records the pair.
        """
        ...
