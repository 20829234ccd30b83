from __future__ import annotations

from typing import Protocol


class QrCodeRenderer(Protocol):
    """
    QrCodeRenderer — port rendering text payload into a PNG QR code image.

    Related:
      - src/otpgate/contexts/identity/application/services/provisioning_uri_builder.py
      - src/otpgate/contexts/identity/adapters/outbound/security/two_factor/
        qrcode_png_renderer.py
    """

    def render_png(self, *, data: str, width: int, height: int) -> bytes:
        """
        Render QR code PNG of exact pixel size.

        Args:
            data: Text to encode (provisioning URI).
            width: Positive image width in pixels.
            height: Positive image height in pixels.
        Returns:
            bytes: PNG byte stream.
        Assumptions:
            Caller already validated non-empty data and positive dimensions.
        Raises:
            ValueError: If the payload cannot be encoded.
        Side Effects:
            None.
        """
        ...
