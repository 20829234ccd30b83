from .totp_errors import TotpError, TotpErrorKind, TotpResult

__all__ = [
    "TotpError",
    "TotpErrorKind",
    "TotpResult",
]
