from __future__ import annotations

import base64
from urllib.parse import parse_qs, urlparse

import pytest

from otpgate.contexts.identity.application.services import ProvisioningUriBuilder
from otpgate.contexts.identity.domain.errors import TotpErrorKind


class _RecordingQrRenderer:
    def __init__(self) -> None:
        self.calls: list[tuple[str, int, int]] = []

    def render_png(self, *, data: str, width: int, height: int) -> bytes:
        self.calls.append((data, width, height))
        return b"\x89PNG\r\n\x1a\nfake"


def test_build_uri_emits_otpauth_uri_in_stable_parameter_order() -> None:
    """
    Verify the provisioning URI layout consumed by authenticator apps.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Query parameters are emitted as secret, issuer, algorithm, digits, period.
    Raises:
        AssertionError: If URI layout differs.
    Side Effects:
        None.
    """
    builder = ProvisioningUriBuilder(qr_renderer=_RecordingQrRenderer())

    uri = builder.build_uri(
        account_label="alice",
        issuer="MyService",
        secret_base32="JBSWY3DPEHPK3PXP",
        digits=6,
        step_seconds=30,
    ).unwrap()

    assert uri == (
        "otpauth://totp/MyService:alice"
        "?secret=JBSWY3DPEHPK3PXP&issuer=MyService&algorithm=SHA1&digits=6&period=30"
    )
    assert "secret=JBSWY3DPEHPK3PXP" in uri
    assert "issuer=MyService" in uri
    assert "digits=6" in uri
    assert "period=30" in uri


def test_build_uri_percent_encodes_issuer_and_label() -> None:
    builder = ProvisioningUriBuilder(qr_renderer=_RecordingQrRenderer())

    uri = builder.build_uri(
        account_label="alice@example.com",
        issuer="My Service",
        secret_base32="JBSWY3DPEHPK3PXP",
    ).unwrap()
    parsed = urlparse(uri)

    assert parsed.scheme == "otpauth"
    assert parsed.netloc == "totp"
    assert parsed.path == "/My%20Service:alice%40example.com"
    assert parse_qs(parsed.query)["issuer"] == ["My Service"]


@pytest.mark.parametrize(
    ("label", "issuer", "secret", "kind"),
    [
        ("", "MyService", "JBSWY3DPEHPK3PXP", TotpErrorKind.EMPTY_LABEL),
        ("alice", "  ", "JBSWY3DPEHPK3PXP", TotpErrorKind.EMPTY_LABEL),
        ("alice", "MyService", "", TotpErrorKind.EMPTY_SECRET),
        ("alice", "MyService", None, TotpErrorKind.EMPTY_SECRET),
    ],
)
def test_build_uri_rejects_blank_inputs(
    label: str,
    issuer: str,
    secret: str | None,
    kind: TotpErrorKind,
) -> None:
    builder = ProvisioningUriBuilder(qr_renderer=_RecordingQrRenderer())

    result = builder.build_uri(account_label=label, issuer=issuer, secret_base32=secret)

    assert result.error_kind is kind


def test_render_qr_rejects_non_positive_dimensions_without_calling_renderer() -> None:
    renderer = _RecordingQrRenderer()
    builder = ProvisioningUriBuilder(qr_renderer=renderer)

    zero_width = builder.render_qr(uri="otpauth://totp/x", width=0, height=100)
    negative_height = builder.render_qr(uri="otpauth://totp/x", width=100, height=-1)

    assert zero_width.error_kind is TotpErrorKind.INVALID_DIMENSIONS
    assert negative_height.error_kind is TotpErrorKind.INVALID_DIMENSIONS
    assert renderer.calls == []


def test_render_qr_rejects_blank_uri() -> None:
    builder = ProvisioningUriBuilder(qr_renderer=_RecordingQrRenderer())

    assert builder.render_qr(uri="  ").error_kind is TotpErrorKind.EMPTY_LABEL


def test_render_qr_passes_uri_and_default_size_to_renderer() -> None:
    renderer = _RecordingQrRenderer()
    builder = ProvisioningUriBuilder(qr_renderer=renderer)

    png = builder.render_qr(uri="otpauth://totp/x").unwrap()

    assert png.startswith(b"\x89PNG")
    assert renderer.calls == [("otpauth://totp/x", 200, 200)]


def test_render_qr_data_uri_embeds_base64_png() -> None:
    builder = ProvisioningUriBuilder(qr_renderer=_RecordingQrRenderer())

    data_uri = builder.render_qr_data_uri(uri="otpauth://totp/x", width=64, height=64).unwrap()

    prefix = "data:image/png;base64,"
    assert data_uri.startswith(prefix)
    assert base64.b64decode(data_uri[len(prefix) :]) == b"\x89PNG\r\n\x1a\nfake"
