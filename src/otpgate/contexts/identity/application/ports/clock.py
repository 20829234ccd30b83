from __future__ import annotations

from datetime import datetime
from typing import Protocol


class TotpClock(Protocol):
    """
    TotpClock — port of the current UTC time used for time-step counters and timestamps.

    Related:
      - src/otpgate/contexts/identity/application/services/time_window_clock.py
      - src/otpgate/contexts/identity/adapters/outbound/time/system_totp_clock.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    def now(self) -> datetime:
        """
        Return current UTC timestamp.

        Args:
            None.
        Returns:
            datetime: Timezone-aware UTC datetime.
        Assumptions:
            Tests inject fixed clocks for deterministic counters.
        Raises:
            None.
        Side Effects:
            None.
        """
        ...
