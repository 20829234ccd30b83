from __future__ import annotations

import threading
from datetime import datetime, timedelta

from otpgate.contexts.identity.application.ports import TotpClock, TotpReplayGuard
from otpgate.shared_kernel.primitives import AccountId, ensure_utc_datetime


class InMemoryTotpReplayGuard(TotpReplayGuard):
    """
    InMemoryTotpReplayGuard — process-local single-use registry of matched time steps.

    Entries expire after `ttl_seconds`, which must cover the tolerance window span.

    Related:
      - src/otpgate/contexts/identity/application/ports/totp_replay_guard.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    def __init__(self, *, clock: TotpClock, ttl_seconds: int) -> None:
        """
        Initialize empty registry.

        Args:
            clock: UTC time source used for expiry.
            ttl_seconds: How long a consumed counter stays blocked.
        Returns:
            None.
        Assumptions:
            One guard instance serves one process.
        Raises:
            ValueError: If clock is missing or TTL is not positive.
        Side Effects:
            None.
        """
        if clock is None:  # type: ignore[truthy-bool]
            raise ValueError("InMemoryTotpReplayGuard requires clock")
        if ttl_seconds <= 0:
            raise ValueError(f"InMemoryTotpReplayGuard ttl_seconds must be > 0, got {ttl_seconds}")
        self._clock = clock
        self._ttl = timedelta(seconds=ttl_seconds)
        self._used: dict[tuple[str, int], datetime] = {}
        self._lock = threading.Lock()

    @classmethod
    def for_window(
        cls,
        *,
        clock: TotpClock,
        step_seconds: int,
        tolerance_steps: int,
    ) -> InMemoryTotpReplayGuard:
        return cls(clock=clock, ttl_seconds=(2 * tolerance_steps + 1) * step_seconds)

    def consume(self, *, account_id: AccountId, counter: int) -> bool:
        """
        Mark `(account, counter)` as used.

        Args:
            account_id: Account identifier.
            counter: Matched time-step counter.
        Returns:
            bool: `True` on first use, `False` if already consumed and not yet expired.
        Assumptions:
            Clock is monotonic enough for expiry purposes.
        Raises:
            ValueError: If clock returns non-UTC datetime.
        Side Effects:
            Mutates registry and evicts expired entries.
        """
        now = ensure_utc_datetime(value=self._clock.now(), field_name="clock.now")
        key = (str(account_id), counter)
        with self._lock:
            expired = [entry for entry, expires_at in self._used.items() if expires_at <= now]
            for entry in expired:
                del self._used[entry]
            if key in self._used:
                return False
            self._used[key] = now + self._ttl
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._used)
