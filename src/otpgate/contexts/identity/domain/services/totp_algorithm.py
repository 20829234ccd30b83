from __future__ import annotations

import base64
import hashlib
from enum import Enum

import pyotp

from otpgate.contexts.identity.domain.errors import TotpError, TotpErrorKind
from otpgate.contexts.identity.domain.value_objects import TotpSecret

DEFAULT_DIGITS = 6
SUPPORTED_DIGITS = (6, 7, 8)


class HashAlgorithm(str, Enum):
    """
    HashAlgorithm — HMAC digest used for code derivation (`otpauth` `algorithm=` token).
    """

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digestmod(self) -> str:
        return self.value.lower()


class TotpAlgorithm:
    """
    TotpAlgorithm — RFC 4226 HOTP code over a time-step counter (RFC 6238), derived with `pyotp.HOTP`.

    Stateless; one instance can be shared freely between threads.

    Related:
      - src/otpgate/contexts/identity/application/services/totp_validator.py
      - src/otpgate/contexts/identity/application/services/time_window_clock.py
      - tests/unit/contexts/identity/domain/test_totp_algorithm.py
    """

    def compute_code(
        self,
        secret: TotpSecret | bytes,
        counter: int,
        *,
        digits: int = DEFAULT_DIGITS,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA1,
    ) -> str:
        """
        Compute zero-padded numeric code for one counter value.

        Args:
            secret: Raw secret or `TotpSecret`.
            counter: Non-negative time-step (or HOTP) counter.
            digits: Code length, 6 by default.
            hash_algorithm: HMAC digest, SHA-1 by default for authenticator compatibility.
        Returns:
            str: Code of exactly `digits` ASCII digits.
        Assumptions:
            Counter fits into unsigned 64 bits.
        Raises:
            TotpError: `EMPTY_SECRET` if secret bytes are empty.
            ValueError: If counter is negative/too large or digits are unsupported.
        Side Effects:
            None.
        """
        key = secret.raw if isinstance(secret, TotpSecret) else bytes(secret)
        if not key:
            raise TotpError.of(TotpErrorKind.EMPTY_SECRET)
        if counter < 0 or counter >= 2**64:
            raise ValueError(f"TotpAlgorithm counter must be in [0, 2**64), got {counter}")
        if digits not in SUPPORTED_DIGITS:
            raise ValueError(f"TotpAlgorithm digits must be one of {SUPPORTED_DIGITS}, got {digits}")

        hotp = pyotp.HOTP(
            base64.b32encode(key).decode("ascii"),
            digits=digits,
            digest=getattr(hashlib, hash_algorithm.digestmod),
        )
        return hotp.at(counter)
