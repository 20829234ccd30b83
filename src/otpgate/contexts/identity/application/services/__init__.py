from .provisioning_uri_builder import DEFAULT_QR_HEIGHT, DEFAULT_QR_WIDTH, ProvisioningUriBuilder
from .time_window_clock import DEFAULT_STEP_SECONDS, TimeWindowClock
from .totp_validator import DEFAULT_TOLERANCE_STEPS, TotpMatch, TotpValidator

__all__ = [
    "DEFAULT_QR_HEIGHT",
    "DEFAULT_QR_WIDTH",
    "DEFAULT_STEP_SECONDS",
    "DEFAULT_TOLERANCE_STEPS",
    "ProvisioningUriBuilder",
    "TimeWindowClock",
    "TotpMatch",
    "TotpValidator",
]
