from __future__ import annotations

import pytest

from otpgate.contexts.identity.domain.errors import TotpErrorKind
from otpgate.contexts.identity.domain.services import SecretCodec
from otpgate.contexts.identity.domain.value_objects import TotpSecret


def test_generate_produces_160_bit_secret_that_round_trips_through_base32() -> None:
    """
    Verify generated secrets have 160 bits and survive Base32 encode/parse.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Default secret size is 20 bytes.
    Raises:
        AssertionError: If size or round-trip property is violated.
    Side Effects:
        Consumes OS random source.
    """
    codec = SecretCodec()

    secret = codec.generate()
    text = codec.to_base32(secret)

    assert secret.bit_length == 160
    assert len(text) == 32
    assert "=" not in text
    assert text == text.upper()
    assert codec.parse_base32(text).unwrap() == secret


def test_generate_returns_distinct_secrets() -> None:
    codec = SecretCodec()

    assert codec.generate() != codec.generate()


def test_parse_base32_accepts_lowercase_and_surrounding_whitespace() -> None:
    codec = SecretCodec()

    parsed = codec.parse_base32("  jbswy3dpehpk3pxp \n")

    assert parsed.ok
    assert parsed.unwrap().raw == b"Hello!\xde\xad\xbe\xef"


@pytest.mark.parametrize("text", [None, "", "   "])
def test_parse_base32_reports_empty_secret(text: str | None) -> None:
    assert SecretCodec().parse_base32(text).error_kind is TotpErrorKind.EMPTY_SECRET


@pytest.mark.parametrize(
    ("text", "reason"),
    [
        ("JBSWY3DPEHPK3PX1", "alphabet"),
        ("JBSWY3DP-HPK3PXP", "alphabet"),
        ("JBSWY3DPEHPK3PXP=", "alphabet"),
        ("JBSWY3DPEHPK3PXPA", "length"),
        ("JBSWY3DP", "too_short"),
    ],
)
def test_parse_base32_reports_invalid_format_with_reason(text: str, reason: str) -> None:
    """
    Verify malformed Base32 text is rejected with a non-secret reason.

    Args:
        text: Malformed secret text.
        reason: Expected `details.reason`.
    Returns:
        None.
    Assumptions:
        Padding characters are not accepted in stored secrets.
    Raises:
        AssertionError: If kind or reason differ.
    Side Effects:
        None.
    """
    result = SecretCodec().parse_base32(text)

    assert result.error_kind is TotpErrorKind.INVALID_SECRET_FORMAT
    assert result.error is not None
    assert result.error.details["reason"] == reason
    assert text not in str(result.error.to_payload())


def test_is_valid_base32_mirrors_parse_result() -> None:
    codec = SecretCodec()

    assert codec.is_valid_base32("JBSWY3DPEHPK3PXP") is True
    assert codec.is_valid_base32("not base32!") is False


def test_meets_enablement_strength_requires_128_bits() -> None:
    assert SecretCodec.meets_enablement_strength(TotpSecret(b"x" * 16)) is True
    assert SecretCodec.meets_enablement_strength(TotpSecret(b"x" * 10)) is False


def test_constructor_rejects_secret_size_below_160_bits() -> None:
    with pytest.raises(ValueError):
        SecretCodec(secret_bytes=16)
