from .secret_codec import (
    DEFAULT_SECRET_BYTES,
    MIN_GENERATED_SECRET_BYTES,
    MIN_PARSED_SECRET_BITS,
    SecretCodec,
)
from .totp_algorithm import DEFAULT_DIGITS, SUPPORTED_DIGITS, HashAlgorithm, TotpAlgorithm

__all__ = [
    "DEFAULT_DIGITS",
    "DEFAULT_SECRET_BYTES",
    "HashAlgorithm",
    "MIN_GENERATED_SECRET_BYTES",
    "MIN_PARSED_SECRET_BITS",
    "SUPPORTED_DIGITS",
    "SecretCodec",
    "TotpAlgorithm",
]
