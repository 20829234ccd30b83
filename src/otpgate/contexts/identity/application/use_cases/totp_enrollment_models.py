from __future__ import annotations

from dataclasses import dataclass, field

from otpgate.shared_kernel.primitives import AccountId

_OTPAUTH_TOTP_PREFIX = "otpauth://totp/"


@dataclass(frozen=True, slots=True)
class SetupMaterial:
    """
    SetupMaterial — transient setup payload shown once to the user (secret + provisioning URI).

    Never persisted by the engine; `secret` and `provisioning_uri` are excluded from `repr`.

    Related:
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
      - src/otpgate/contexts/identity/application/use_cases/totp_account_workflow.py
      - apps/cli/commands/new_secret.py
    """

    account_id: AccountId
    secret: str = field(repr=False)
    provisioning_uri: str = field(repr=False)
    enabled: bool = False
    policy_required: bool = False

    def __post_init__(self) -> None:
        """
        Validate that material carries a secret and a standard otpauth URI.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            UI generates QR code from `provisioning_uri` or requests PNG rendering.
        Raises:
            ValueError: If secret is blank or URI does not use the `otpauth://totp/` scheme.
        Side Effects:
            None.
        """
        if not self.secret.strip():
            raise ValueError("SetupMaterial.secret must be non-empty")
        if not self.provisioning_uri.startswith(_OTPAUTH_TOTP_PREFIX):
            raise ValueError(f"SetupMaterial.provisioning_uri must start with '{_OTPAUTH_TOTP_PREFIX}'")


@dataclass(frozen=True, slots=True)
class TotpStatus:
    """
    TotpStatus — read-only snapshot of one account's two-factor state.
    """

    account_id: AccountId
    enabled: bool
    configured: bool
    policy_required: bool
    seconds_remaining_in_step: int
