from .system_totp_clock import SystemTotpClock

__all__ = ["SystemTotpClock"]
