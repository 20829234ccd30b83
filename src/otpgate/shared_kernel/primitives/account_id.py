from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AccountId:
    """
    AccountId — opaque account identifier owned by the surrounding account store.

    Related:
      - src/otpgate/contexts/identity/domain/entities/totp_credential.py
      - src/otpgate/contexts/identity/application/ports/totp_credential_store.py
      - src/otpgate/contexts/identity/application/ports/privileged_account_policy.py
    """

    value: str

    def __post_init__(self) -> None:
        """
        Validate and normalize the wrapped identifier.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            The engine never interprets identifier contents, only compares them.
        Raises:
            ValueError: If value is not a string or is blank.
        Side Effects:
            Strips surrounding whitespace from the stored value.
        """
        if not isinstance(self.value, str):
            raise ValueError(f"AccountId requires str value, got {type(self.value).__name__}")
        normalized = self.value.strip()
        if not normalized:
            raise ValueError("AccountId requires non-empty value")
        object.__setattr__(self, "value", normalized)

    @classmethod
    def from_string(cls, raw_value: str) -> AccountId:
        return cls(raw_value)

    def __str__(self) -> str:
        return self.value
