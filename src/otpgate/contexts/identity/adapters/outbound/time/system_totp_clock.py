from __future__ import annotations

from datetime import datetime, timezone

from otpgate.contexts.identity.application.ports import TotpClock


class SystemTotpClock(TotpClock):
    """
    SystemTotpClock — `TotpClock` backed by the system UTC wall clock.

    Related:
      - src/otpgate/contexts/identity/application/ports/clock.py
      - src/otpgate/contexts/identity/application/services/time_window_clock.py
      - apps/cli/wiring/totp.py
    """

    def now(self) -> datetime:
        """
        Return current timezone-aware UTC datetime.

        Args:
            None.
        Returns:
            datetime: Current UTC datetime.
        Assumptions:
            System clock is NTP-synchronized; drift is absorbed by the tolerance window.
        Raises:
            None.
        Side Effects:
            Reads system wall clock.
        """
        return datetime.now(timezone.utc)
