from __future__ import annotations

import base64
import binascii
import os
import re

from otpgate.contexts.identity.domain.entities import MIN_ENABLED_SECRET_BITS
from otpgate.contexts.identity.domain.errors import TotpErrorKind, TotpResult
from otpgate.contexts.identity.domain.value_objects import TotpSecret

DEFAULT_SECRET_BYTES = 20
MIN_GENERATED_SECRET_BYTES = 20
MIN_PARSED_SECRET_BITS = 80

_BASE32_ALPHABET = re.compile(r"[A-Z2-7]+")
# Unpadded Base32 lengths mod 8 that cannot occur for whole bytes.
_INVALID_UNPADDED_REMAINDERS = frozenset({1, 3, 6})


class SecretCodec:
    """
    SecretCodec — CSPRNG secret generation and RFC 4648 Base32 text form (no padding).

    Related:
      - src/otpgate/contexts/identity/domain/value_objects/totp_secret.py
      - src/otpgate/contexts/identity/application/services/totp_validator.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    def __init__(self, *, secret_bytes: int = DEFAULT_SECRET_BYTES) -> None:
        """
        Initialize codec with generated secret size.

        Args:
            secret_bytes: Number of random bytes per generated secret.
        Returns:
            None.
        Assumptions:
            160 bits is the minimum generated entropy.
        Raises:
            ValueError: If `secret_bytes` is below the minimum.
        Side Effects:
            None.
        """
        if secret_bytes < MIN_GENERATED_SECRET_BYTES:
            raise ValueError(
                f"SecretCodec secret_bytes must be >= {MIN_GENERATED_SECRET_BYTES}, "
                f"got {secret_bytes}"
            )
        self._secret_bytes = secret_bytes

    def generate(self) -> TotpSecret:
        """
        Draw a fresh secret from the OS CSPRNG.

        Args:
            None.
        Returns:
            TotpSecret: New secret of configured size.
        Assumptions:
            `os.urandom` is safe for concurrent use without external locking.
        Raises:
            None.
        Side Effects:
            Consumes OS random source.
        """
        return TotpSecret(os.urandom(self._secret_bytes))

    def to_base32(self, secret: TotpSecret) -> str:
        return base64.b32encode(secret.raw).decode("ascii").rstrip("=")

    def parse_base32(self, text: str | None) -> TotpResult[TotpSecret]:
        """
        Parse Base32 secret text into raw secret bytes.

        Args:
            text: Base32 secret, unpadded; case-insensitive, surrounding whitespace ignored.
        Returns:
            TotpResult[TotpSecret]: Parsed secret, or `EMPTY_SECRET` / `INVALID_SECRET_FORMAT`.
        Assumptions:
            Error details never echo the input text.
        Raises:
            None.
        Side Effects:
            None.
        """
        if text is None or not text.strip():
            return TotpResult.failure(TotpErrorKind.EMPTY_SECRET)
        normalized = text.strip().upper()
        if _BASE32_ALPHABET.fullmatch(normalized) is None:
            return TotpResult.failure(
                TotpErrorKind.INVALID_SECRET_FORMAT,
                details={"reason": "alphabet"},
            )
        if len(normalized) % 8 in _INVALID_UNPADDED_REMAINDERS:
            return TotpResult.failure(
                TotpErrorKind.INVALID_SECRET_FORMAT,
                details={"reason": "length"},
            )
        padding = "=" * ((8 - (len(normalized) % 8)) % 8)
        try:
            raw = base64.b32decode(f"{normalized}{padding}")
        except (binascii.Error, ValueError):
            return TotpResult.failure(
                TotpErrorKind.INVALID_SECRET_FORMAT,
                details={"reason": "decode"},
            )
        if len(raw) * 8 < MIN_PARSED_SECRET_BITS:
            return TotpResult.failure(
                TotpErrorKind.INVALID_SECRET_FORMAT,
                details={"reason": "too_short", "min_bits": MIN_PARSED_SECRET_BITS},
            )
        return TotpResult.success(TotpSecret(raw))

    def is_valid_base32(self, text: str | None) -> bool:
        return self.parse_base32(text).ok

    @staticmethod
    def meets_enablement_strength(secret: TotpSecret) -> bool:
        return secret.bit_length >= MIN_ENABLED_SECRET_BITS
