from __future__ import annotations

import base64
from urllib.parse import quote

from otpgate.contexts.identity.application.ports import QrCodeRenderer
from otpgate.contexts.identity.domain.errors import TotpErrorKind, TotpResult
from otpgate.contexts.identity.domain.services import DEFAULT_DIGITS, HashAlgorithm

DEFAULT_QR_WIDTH = 200
DEFAULT_QR_HEIGHT = 200
_OTPAUTH_TOTP_PREFIX = "otpauth://totp/"


class ProvisioningUriBuilder:
    """
    ProvisioningUriBuilder — builds `otpauth://totp` URIs and renders them as PNG QR codes.

    Related:
      - src/otpgate/contexts/identity/application/ports/qr_code_renderer.py
      - src/otpgate/contexts/identity/adapters/outbound/security/two_factor/
        qrcode_png_renderer.py
      - src/otpgate/contexts/identity/application/use_cases/totp_enrollment_manager.py
    """

    def __init__(self, *, qr_renderer: QrCodeRenderer) -> None:
        """
        Initialize builder with QR rendering port.

        Args:
            qr_renderer: PNG QR renderer.
        Returns:
            None.
        Assumptions:
            Renderer is stateless and safe to share.
        Raises:
            ValueError: If renderer is missing.
        Side Effects:
            None.
        """
        if qr_renderer is None:  # type: ignore[truthy-bool]
            raise ValueError("ProvisioningUriBuilder requires qr_renderer")
        self._qr_renderer = qr_renderer

    def build_uri(
        self,
        *,
        account_label: str | None,
        issuer: str | None,
        secret_base32: str | None,
        digits: int = DEFAULT_DIGITS,
        step_seconds: int = 30,
    ) -> TotpResult[str]:
        """
        Build provisioning URI consumed by authenticator apps.

        Args:
            account_label: Account name shown in the authenticator.
            issuer: Service name shown in the authenticator.
            secret_base32: Unpadded Base32 secret.
            digits: Code length.
            step_seconds: Time-step length.
        Returns:
            TotpResult[str]: URI with query order `secret, issuer, algorithm, digits, period`,
                or `EMPTY_LABEL` / `EMPTY_SECRET`.
        Assumptions:
            Returned URI contains the secret and must not be logged.
        Raises:
            ValueError: If digits or step are not positive.
        Side Effects:
            None.
        """
        if digits <= 0:
            raise ValueError(f"ProvisioningUriBuilder digits must be > 0, got {digits}")
        if step_seconds <= 0:
            raise ValueError(f"ProvisioningUriBuilder step_seconds must be > 0, got {step_seconds}")
        normalized_label = (account_label or "").strip()
        normalized_issuer = (issuer or "").strip()
        normalized_secret = (secret_base32 or "").strip().upper()
        if not normalized_label:
            return TotpResult.failure(TotpErrorKind.EMPTY_LABEL, details={"field": "account_label"})
        if not normalized_issuer:
            return TotpResult.failure(TotpErrorKind.EMPTY_LABEL, details={"field": "issuer"})
        if not normalized_secret:
            return TotpResult.failure(TotpErrorKind.EMPTY_SECRET)

        encoded_issuer = quote(normalized_issuer, safe="")
        encoded_label = quote(normalized_label, safe="")
        query = "&".join(
            (
                f"secret={quote(normalized_secret, safe='')}",
                f"issuer={encoded_issuer}",
                f"algorithm={HashAlgorithm.SHA1.value}",
                f"digits={digits}",
                f"period={step_seconds}",
            )
        )
        return TotpResult.success(f"{_OTPAUTH_TOTP_PREFIX}{encoded_issuer}:{encoded_label}?{query}")

    def render_qr(
        self,
        *,
        uri: str | None,
        width: int = DEFAULT_QR_WIDTH,
        height: int = DEFAULT_QR_HEIGHT,
    ) -> TotpResult[bytes]:
        """
        Render provisioning URI into a scannable PNG.

        Args:
            uri: Provisioning URI.
            width: Image width in pixels.
            height: Image height in pixels.
        Returns:
            TotpResult[bytes]: PNG bytes, or `EMPTY_LABEL` / `INVALID_DIMENSIONS`.
        Assumptions:
            Renderer output has exactly the requested size.
        Raises:
            None.
        Side Effects:
            None.
        """
        normalized_uri = (uri or "").strip()
        if not normalized_uri:
            return TotpResult.failure(TotpErrorKind.EMPTY_LABEL, details={"field": "uri"})
        if width <= 0 or height <= 0:
            return TotpResult.failure(
                TotpErrorKind.INVALID_DIMENSIONS,
                details={"width": width, "height": height},
            )
        png = self._qr_renderer.render_png(data=normalized_uri, width=width, height=height)
        return TotpResult.success(png)

    def render_qr_data_uri(
        self,
        *,
        uri: str | None,
        width: int = DEFAULT_QR_WIDTH,
        height: int = DEFAULT_QR_HEIGHT,
    ) -> TotpResult[str]:
        rendered = self.render_qr(uri=uri, width=width, height=height)
        if rendered.error is not None:
            return TotpResult.from_error(rendered.error)
        encoded = base64.b64encode(rendered.unwrap()).decode("ascii")
        return TotpResult.success(f"data:image/png;base64,{encoded}")
