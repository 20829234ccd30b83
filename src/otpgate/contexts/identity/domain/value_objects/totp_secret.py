from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class TotpSecret:
    """
    TotpSecret — raw shared-secret entropy behind one TOTP credential.

    The raw bytes are excluded from `repr`/`str` so a secret cannot leak through
    logs, tracebacks or error payloads. Base32 text is produced only by
    `SecretCodec`.

    Related:
      - src/otpgate/contexts/identity/domain/services/secret_codec.py
      - src/otpgate/contexts/identity/domain/services/totp_algorithm.py
      - src/otpgate/contexts/identity/domain/entities/totp_credential.py
    """

    raw: bytes = field(repr=False)

    def __post_init__(self) -> None:
        """
        Validate secret bytes type and non-emptiness.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Minimum strength policies are enforced by codec and credential, not here.
        Raises:
            ValueError: If raw value is not bytes-like or is empty.
        Side Effects:
            Copies bytes-like input into immutable `bytes`.
        """
        if not isinstance(self.raw, (bytes, bytearray, memoryview)):
            raise ValueError(f"TotpSecret requires bytes, got {type(self.raw).__name__}")
        raw = bytes(self.raw)
        if not raw:
            raise ValueError("TotpSecret requires non-empty bytes")
        object.__setattr__(self, "raw", raw)

    @property
    def bit_length(self) -> int:
        return len(self.raw) * 8

    def __repr__(self) -> str:
        return f"TotpSecret(<redacted {self.bit_length} bits>)"

    def __str__(self) -> str:
        return self.__repr__()
