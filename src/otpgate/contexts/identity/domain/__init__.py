from .entities import MIN_ENABLED_SECRET_BITS, TotpCredential, TotpEnrollmentState
from .errors import TotpError, TotpErrorKind, TotpResult
from .services import HashAlgorithm, SecretCodec, TotpAlgorithm
from .value_objects import TotpSecret

__all__ = [
    "HashAlgorithm",
    "MIN_ENABLED_SECRET_BITS",
    "SecretCodec",
    "TotpAlgorithm",
    "TotpCredential",
    "TotpEnrollmentState",
    "TotpError",
    "TotpErrorKind",
    "TotpResult",
    "TotpSecret",
]
