from .totp_credential import MIN_ENABLED_SECRET_BITS, TotpCredential, TotpEnrollmentState

__all__ = [
    "MIN_ENABLED_SECRET_BITS",
    "TotpCredential",
    "TotpEnrollmentState",
]
