from __future__ import annotations

import hmac
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

from otpgate.contexts.identity.application.services.time_window_clock import TimeWindowClock
from otpgate.contexts.identity.domain.errors import TotpErrorKind, TotpResult
from otpgate.contexts.identity.domain.services import (
    DEFAULT_DIGITS,
    SUPPORTED_DIGITS,
    HashAlgorithm,
    SecretCodec,
    TotpAlgorithm,
)
from otpgate.contexts.identity.domain.value_objects import TotpSecret
from otpgate.shared_kernel.primitives import AccountId

log = logging.getLogger(__name__)

DEFAULT_TOLERANCE_STEPS = 1


@dataclass(frozen=True, slots=True)
class TotpMatch:
    """
    TotpMatch — successful validation outcome.

    `counter` is the time step whose code matched; `offset` is its distance from the
    current step (0 for exact match, -1 for the previous step, ...).
    """

    counter: int
    offset: int


class TotpValidator:
    """
    TotpValidator — validates a submitted code against a secret within a tolerance window.

    Pure: it neither consumes nor invalidates codes; single-use enforcement belongs to
    the caller (see `TotpReplayGuard`).

    Related:
      - src/otpgate/contexts/identity/domain/services/totp_algorithm.py
      - src/otpgate/contexts/identity/application/services/time_window_clock.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    def __init__(
        self,
        *,
        time_window_clock: TimeWindowClock,
        secret_codec: SecretCodec,
        algorithm: TotpAlgorithm | None = None,
        digits: int = DEFAULT_DIGITS,
        hash_algorithm: HashAlgorithm = HashAlgorithm.SHA1,
    ) -> None:
        """
        Initialize validator dependencies and code profile.

        Args:
            time_window_clock: Counter source.
            secret_codec: Base32 parser for string secrets.
            algorithm: Code derivation; a default instance is created when omitted.
            digits: Expected code length.
            hash_algorithm: HMAC digest.
        Returns:
            None.
        Assumptions:
            Profile matches what was provisioned into the authenticator app.
        Raises:
            ValueError: If required dependency is missing or digits are not 6, 7 or 8.
        Side Effects:
            None.
        """
        if time_window_clock is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpValidator requires time_window_clock")
        if secret_codec is None:  # type: ignore[truthy-bool]
            raise ValueError("TotpValidator requires secret_codec")
        if digits not in SUPPORTED_DIGITS:
            raise ValueError(f"TotpValidator digits must be one of {SUPPORTED_DIGITS}, got {digits}")

        self._time_window_clock = time_window_clock
        self._secret_codec = secret_codec
        self._algorithm = algorithm if algorithm is not None else TotpAlgorithm()
        self._digits = digits
        self._hash_algorithm = hash_algorithm
        self._code_pattern = re.compile(rf"[0-9]{{{digits}}}")

    @property
    def time_window_clock(self) -> TimeWindowClock:
        return self._time_window_clock

    @property
    def digits(self) -> int:
        return self._digits

    def validate(
        self,
        *,
        secret: TotpSecret | str | None,
        submitted_code: str | None,
        tolerance_steps: int = DEFAULT_TOLERANCE_STEPS,
        at_time: datetime | None = None,
        account_id: AccountId | None = None,
    ) -> TotpResult[TotpMatch]:
        """
        Validate submitted code, checking the exact step first, then widening outwards.

        Args:
            secret: `TotpSecret` or Base32 text.
            submitted_code: Code typed by the user; surrounding whitespace is ignored.
            tolerance_steps: Accepted steps before/after the current one.
            at_time: Optional explicit UTC validation time; injected clock otherwise.
            account_id: Optional account id, used only for log context.
        Returns:
            TotpResult[TotpMatch]: Match, or `EMPTY_CODE`, `INVALID_CODE_FORMAT`,
                `EMPTY_SECRET`, `INVALID_SECRET_FORMAT`, `CODE_MISMATCH` in that check order.
        Assumptions:
            Code comparison is constant-time per candidate.
        Raises:
            ValueError: If `tolerance_steps` is negative or `at_time` is not UTC.
        Side Effects:
            Reads the injected clock when `at_time` is omitted.
        """
        if tolerance_steps < 0:
            raise ValueError(f"TotpValidator tolerance_steps must be >= 0, got {tolerance_steps}")

        if submitted_code is None or not submitted_code.strip():
            return self._reject(TotpErrorKind.EMPTY_CODE, account_id=account_id)
        normalized_code = submitted_code.strip()
        if self._code_pattern.fullmatch(normalized_code) is None:
            return self._reject(TotpErrorKind.INVALID_CODE_FORMAT, account_id=account_id)

        resolved = self._resolve_secret(secret=secret)
        if resolved.error is not None:
            log.info(
                "totp validation rejected: code=%s account=%s",
                resolved.error.code,
                account_id,
            )
            return TotpResult.from_error(resolved.error)
        key = resolved.unwrap()

        current = self._time_window_clock.counter_for(
            self._time_window_clock.unix_time(at_time)
        )
        for offset in _window_offsets(tolerance_steps=tolerance_steps):
            candidate = current + offset
            if candidate < 0:
                continue
            expected = self._algorithm.compute_code(
                key,
                candidate,
                digits=self._digits,
                hash_algorithm=self._hash_algorithm,
            )
            if hmac.compare_digest(expected, normalized_code):
                log.debug("totp validation matched: offset=%d account=%s", offset, account_id)
                return TotpResult.success(TotpMatch(counter=candidate, offset=offset))

        return self._reject(
            TotpErrorKind.CODE_MISMATCH,
            account_id=account_id,
            details={"tolerance_steps": tolerance_steps},
        )

    def code_at(self, *, secret: TotpSecret, at_time: datetime | None = None) -> str:
        """Return the code for the step containing `at_time` (or now)."""
        counter = self._time_window_clock.counter_for(self._time_window_clock.unix_time(at_time))
        return self._algorithm.compute_code(
            secret,
            counter,
            digits=self._digits,
            hash_algorithm=self._hash_algorithm,
        )

    def matches_counter(self, *, secret: TotpSecret, code: str, counter: int) -> bool:
        expected = self._algorithm.compute_code(
            secret,
            counter,
            digits=self._digits,
            hash_algorithm=self._hash_algorithm,
        )
        return hmac.compare_digest(expected, code.strip())

    def _resolve_secret(self, *, secret: TotpSecret | str | None) -> TotpResult[TotpSecret]:
        if isinstance(secret, TotpSecret):
            return TotpResult.success(secret)
        return self._secret_codec.parse_base32(secret)

    @staticmethod
    def _reject(
        kind: TotpErrorKind,
        *,
        account_id: AccountId | None,
        details: dict[str, int] | None = None,
    ) -> TotpResult[TotpMatch]:
        log.info("totp validation rejected: code=%s account=%s", kind.value, account_id)
        return TotpResult.failure(kind, details=details)


def _window_offsets(*, tolerance_steps: int) -> Iterator[int]:
    """
    Yield step offsets in check order `0, -1, +1, -2, +2, ...`.

    Args:
        tolerance_steps: Maximum absolute offset.
    Returns:
        Iterator[int]: Offsets.
    Assumptions:
        Exact match is checked first.
    Raises:
        None.
    Side Effects:
        None.
    """
    yield 0
    for distance in range(1, tolerance_steps + 1):
        yield -distance
        yield distance
