from __future__ import annotations

from datetime import datetime

from otpgate.contexts.identity.application.ports import TotpClock
from otpgate.shared_kernel.primitives import ensure_utc_datetime

DEFAULT_STEP_SECONDS = 30


class TimeWindowClock:
    """
    TimeWindowClock — converts wall-clock time into TOTP time-step counters and back.

    Deterministic given the injected `TotpClock`.

    Related:
      - src/otpgate/contexts/identity/application/ports/clock.py
      - src/otpgate/contexts/identity/application/services/totp_validator.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    def __init__(self, *, clock: TotpClock, step_seconds: int = DEFAULT_STEP_SECONDS) -> None:
        """
        Initialize time-step policy.

        Args:
            clock: UTC time source.
            step_seconds: Length of one time step.
        Returns:
            None.
        Assumptions:
            Authenticator apps use 30 second steps unless provisioned otherwise.
        Raises:
            ValueError: If clock is missing or step is not positive.
        Side Effects:
            None.
        """
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("TimeWindowClock requires clock")
        if step_seconds <= 0:
            raise ValueError(f"TimeWindowClock step_seconds must be > 0, got {step_seconds}")
        self._clock = clock
        self._step_seconds = step_seconds

    @property
    def step_seconds(self) -> int:
        return self._step_seconds

    def unix_time(self, at_time: datetime | None = None) -> int:
        """
        Return whole Unix seconds for given UTC datetime or for now.

        Args:
            at_time: Optional explicit UTC datetime.
        Returns:
            int: Unix time in seconds, fractional part dropped.
        Assumptions:
            Clock values are UTC.
        Raises:
            ValueError: If datetime is naive or non-UTC.
        Side Effects:
            Reads the injected clock when `at_time` is omitted.
        """
        moment = at_time if at_time is not None else self._clock.now()
        ensure_utc_datetime(value=moment, field_name="at_time")
        return int(moment.timestamp())

    def counter_for(self, unix_seconds: int) -> int:
        if unix_seconds < 0:
            raise ValueError(f"TimeWindowClock unix_seconds must be >= 0, got {unix_seconds}")
        return unix_seconds // self._step_seconds

    def current_counter(self) -> int:
        return self.counter_for(self.unix_time())

    def step_start(self, counter: int) -> int:
        """Return the Unix second at which the given counter's step begins."""
        if counter < 0:
            raise ValueError(f"TimeWindowClock counter must be >= 0, got {counter}")
        return counter * self._step_seconds

    def remaining_seconds_in_step(self, unix_seconds: int) -> int:
        if unix_seconds < 0:
            raise ValueError(f"TimeWindowClock unix_seconds must be >= 0, got {unix_seconds}")
        return self._step_seconds - (unix_seconds % self._step_seconds)

    def remaining_seconds_now(self) -> int:
        return self.remaining_seconds_in_step(self.unix_time())
