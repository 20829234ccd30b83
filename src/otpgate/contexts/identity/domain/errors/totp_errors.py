from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Mapping, TypeVar

from otpgate.platform.errors import OtpgateError

T = TypeVar("T")


class TotpErrorKind(str, Enum):
    """
    TotpErrorKind — stable failure taxonomy of the TOTP engine.

    Callers branch on the kind to choose between a retry prompt
    (`CODE_MISMATCH`, `INVALID_CODE_FORMAT`), a setup prompt (`NOT_CONFIGURED`)
    and a permission error (`POLICY_VIOLATION`).
    """

    EMPTY_SECRET = "empty_secret"
    INVALID_SECRET_FORMAT = "invalid_secret_format"
    EMPTY_CODE = "empty_code"
    INVALID_CODE_FORMAT = "invalid_code_format"
    CODE_MISMATCH = "code_mismatch"
    INVALID_DIMENSIONS = "invalid_dimensions"
    EMPTY_LABEL = "empty_label"
    POLICY_VIOLATION = "policy_violation"
    NOT_CONFIGURED = "not_configured"
    CODE_REPLAYED = "code_replayed"


_MESSAGES: Mapping[TotpErrorKind, str] = {
    TotpErrorKind.EMPTY_SECRET: "TOTP secret is missing.",
    TotpErrorKind.INVALID_SECRET_FORMAT: "TOTP secret is not a valid Base32 secret.",
    TotpErrorKind.EMPTY_CODE: "Verification code is missing.",
    TotpErrorKind.INVALID_CODE_FORMAT: "Verification code must be numeric with the expected length.",
    TotpErrorKind.CODE_MISMATCH: "Verification code does not match.",
    TotpErrorKind.INVALID_DIMENSIONS: "QR code width and height must be positive.",
    TotpErrorKind.EMPTY_LABEL: "Account label and issuer must be non-empty.",
    TotpErrorKind.POLICY_VIOLATION: "Account policy requires two-factor authentication to stay enabled.",
    TotpErrorKind.NOT_CONFIGURED: "Two-factor authentication is not configured for this account.",
    TotpErrorKind.CODE_REPLAYED: "Verification code was already used.",
}


class TotpError(OtpgateError):
    """
    TotpError — typed engine failure carrying one `TotpErrorKind`.

    Related:
      - src/otpgate/platform/errors/otpgate_error.py
      - src/otpgate/contexts/identity/application/services/totp_validator.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    @classmethod
    def of(cls, kind: TotpErrorKind, *, details: Mapping[str, Any] | None = None) -> TotpError:
        """
        Build error with the canonical message for the given kind.

        Args:
            kind: Failure kind.
            details: Optional non-secret diagnostic fields.
        Returns:
            TotpError: Error whose `code` is the kind value.
        Assumptions:
            Details never contain secrets or submitted codes.
        Raises:
            None.
        Side Effects:
            None.
        """
        return cls(code=kind.value, message=_MESSAGES[kind], details=details)

    @property
    def kind(self) -> TotpErrorKind:
        return TotpErrorKind(self.code)


@dataclass(frozen=True, slots=True)
class TotpResult(Generic[T]):
    """
    TotpResult — success value or typed `TotpError`, returned by every public engine operation.

    Related:
      - src/otpgate/contexts/identity/domain/services/secret_codec.py
      - src/otpgate/contexts/identity/application/services/totp_validator.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    value: T | None = None
    error: TotpError | None = None

    def __post_init__(self) -> None:
        if self.error is not None and self.value is not None:
            raise ValueError("TotpResult cannot carry both value and error")

    @classmethod
    def success(cls, value: T) -> TotpResult[T]:
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: TotpErrorKind,
        *,
        details: Mapping[str, Any] | None = None,
    ) -> TotpResult[T]:
        return cls(error=TotpError.of(kind, details=details))

    @classmethod
    def from_error(cls, error: TotpError) -> TotpResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def error_kind(self) -> TotpErrorKind | None:
        if self.error is None:
            return None
        return self.error.kind

    def unwrap(self) -> T:
        """
        Return the success value or raise the carried error.

        Args:
            None.
        Returns:
            T: Success value.
        Assumptions:
            Used by callers that prefer exception flow at their boundary.
        Raises:
            TotpError: If the result is a failure.
        Side Effects:
            None.
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
