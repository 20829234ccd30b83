from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

_REDACTED_BYTES = "<bytes redacted>"


@dataclass(frozen=True, slots=True)
class OtpgateError(Exception):
    """
    OtpgateError — base exception of the otpgate engine.

    `code` is the token callers and the CLI branch on (`code_mismatch`,
    `policy_violation`, ...); `message` is a fixed human sentence per code;
    `details` carries small non-secret diagnostics such as `tolerance_steps` or
    `min_bits`. Raw bytes never reach `details`: they are replaced by a marker so
    secret material cannot leak through an error payload.

    Related:
      - src/otpgate/contexts/identity/domain/errors/totp_errors.py
      - apps/cli/commands/totp_verify.py
    """

    code: str
    message: str
    details: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        """
        Strip code and message and copy `details` into a JSON-ready dict.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Subclasses build instances from a fixed code/message table.
        Raises:
            ValueError: If `code` or `message` is blank.
            TypeError: If `details` is given but is not a mapping.
        Side Effects:
            Replaces frozen fields through `object.__setattr__`.
        """
        code = self.code.strip()
        message = self.message.strip()
        if not code:
            raise ValueError("OtpgateError.code must be non-empty")
        if not message:
            raise ValueError("OtpgateError.message must be non-empty")
        object.__setattr__(self, "code", code)
        object.__setattr__(self, "message", message)

        if self.details is not None:
            if not isinstance(self.details, Mapping):
                raise TypeError("OtpgateError.details must be a mapping when provided")
            object.__setattr__(self, "details", _plain_details(self.details))

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def to_payload(self) -> dict[str, Any]:
        """
        Render the error as `{"error": {"code", "message", "details"}}` for JSON output.

        Args:
            None.
        Returns:
            dict[str, Any]: Payload with an empty `details` dict when none were given.
        Assumptions:
            `details` was already made JSON-ready in `__post_init__`.
        Raises:
            None.
        Side Effects:
            None.
        """
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": dict(self.details or {}),
            }
        }


def _plain_details(details: Mapping[Any, Any]) -> dict[str, Any]:
    return {str(key): _plain_value(details[key]) for key in sorted(details, key=str)}


def _plain_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _REDACTED_BYTES
    if isinstance(value, Mapping):
        return _plain_details(value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        return [_plain_value(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)
