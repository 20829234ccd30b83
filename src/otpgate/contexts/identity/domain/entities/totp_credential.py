from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from otpgate.contexts.identity.domain.value_objects import TotpSecret
from otpgate.shared_kernel.primitives import AccountId, ensure_utc_datetime

MIN_ENABLED_SECRET_BITS = 128


class TotpEnrollmentState(str, Enum):
    """
    TotpEnrollmentState — lifecycle position of one account's TOTP credential.
    """

    NOT_CONFIGURED = "not_configured"
    PENDING_VERIFICATION = "pending_verification"
    ENABLED = "enabled"


@dataclass(frozen=True, slots=True)
class TotpCredential:
    """
    TotpCredential — immutable TOTP credential snapshot owned by the account store.

    Related:
      - src/otpgate/contexts/identity/application/ports/totp_credential_store.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
      - src/otpgate/contexts/identity/application/use_cases/totp_account_workflow.py
    """

    account_id: AccountId
    secret: TotpSecret | None = None
    enabled: bool = False
    created_at: datetime | None = None
    last_verified_at: datetime | None = None

    def __post_init__(self) -> None:
        """
        Validate enabled-state invariants and UTC timestamps.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Timestamps, when present, are timezone-aware UTC datetimes.
        Raises:
            ValueError: If an enabled credential lacks a strong secret or its timestamps,
                or a timestamp is naive/non-UTC.
        Side Effects:
            None.
        """
        if not isinstance(self.account_id, AccountId):
            raise ValueError("TotpCredential.account_id must be AccountId")
        if self.created_at is not None:
            ensure_utc_datetime(value=self.created_at, field_name="created_at")
        if self.last_verified_at is not None:
            ensure_utc_datetime(value=self.last_verified_at, field_name="last_verified_at")
        if not self.enabled:
            return
        if self.secret is None:
            raise ValueError("TotpCredential.secret must be set when enabled is true")
        if self.secret.bit_length < MIN_ENABLED_SECRET_BITS:
            raise ValueError(
                f"TotpCredential.secret must have >= {MIN_ENABLED_SECRET_BITS} bits when enabled"
            )
        if self.created_at is None or self.last_verified_at is None:
            raise ValueError("TotpCredential timestamps must be set when enabled is true")
        if self.last_verified_at < self.created_at:
            raise ValueError("TotpCredential.last_verified_at cannot be before created_at")

    @classmethod
    def not_configured(cls, *, account_id: AccountId) -> TotpCredential:
        return cls(account_id=account_id)

    @property
    def configured(self) -> bool:
        return self.secret is not None

    @property
    def state(self) -> TotpEnrollmentState:
        if self.enabled:
            return TotpEnrollmentState.ENABLED
        if self.secret is not None:
            return TotpEnrollmentState.PENDING_VERIFICATION
        return TotpEnrollmentState.NOT_CONFIGURED

    def with_verification(self, *, verified_at: datetime) -> TotpCredential:
        return replace(self, last_verified_at=verified_at)
