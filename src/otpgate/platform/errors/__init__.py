from .otpgate_error import OtpgateError

__all__ = [
    "OtpgateError",
]
