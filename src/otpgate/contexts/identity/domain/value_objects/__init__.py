from .totp_secret import TotpSecret

__all__ = [
    "TotpSecret",
]
