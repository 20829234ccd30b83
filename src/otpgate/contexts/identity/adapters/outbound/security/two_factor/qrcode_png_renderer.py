from __future__ import annotations

from io import BytesIO

import qrcode
from PIL import Image
from qrcode.exceptions import DataOverflowError
from qrcode.image.pil import PilImage

from otpgate.contexts.identity.application.ports import QrCodeRenderer

_QR_BORDER_MODULES = 4
_QR_BOX_SIZE = 10


class QrcodePngRenderer(QrCodeRenderer):
    """
    QrcodePngRenderer — `qrcode` + Pillow implementation of `QrCodeRenderer`.

    Related:
      - src/otpgate/contexts/identity/application/ports/qr_code_renderer.py
      - src/otpgate/contexts/identity/application/services/provisioning_uri_builder.py
      - apps/cli/commands/new_secret.py
    """

    def __init__(
        self,
        *,
        error_correction: int = qrcode.constants.ERROR_CORRECT_M,
        border: int = _QR_BORDER_MODULES,
    ) -> None:
        """
        Initialize QR encoding parameters.

        Args:
            error_correction: `qrcode.constants.ERROR_CORRECT_*` level.
            border: Quiet zone width in modules.
        Returns:
            None.
        Assumptions:
            Authenticator scanners need the standard 4-module quiet zone.
        Raises:
            ValueError: If border is negative.
        Side Effects:
            None.
        """
        if border < 0:
            raise ValueError(f"QrcodePngRenderer border must be >= 0, got {border}")
        self._error_correction = error_correction
        self._border = border

    def render_png(self, *, data: str, width: int, height: int) -> bytes:
        """
        Encode payload into a QR symbol and return it as PNG of exact size.

        Args:
            data: Text to encode.
            width: Image width in pixels.
            height: Image height in pixels.
        Returns:
            bytes: PNG byte stream.
        Assumptions:
            Nearest-neighbour scaling keeps module edges sharp.
        Raises:
            ValueError: If dimensions are not positive or payload exceeds QR capacity.
        Side Effects:
            None.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"QrcodePngRenderer requires positive size, got {width}x{height}")

        qr = qrcode.QRCode(
            version=None,
            error_correction=self._error_correction,
            box_size=_QR_BOX_SIZE,
            border=self._border,
            image_factory=PilImage,
        )
        qr.add_data(data)
        try:
            qr.make(fit=True)
        except DataOverflowError as error:
            raise ValueError("QrcodePngRenderer payload exceeds QR capacity") from error

        image = qr.make_image(fill_color="black", back_color="white").get_image()
        if image.size != (width, height):
            image = image.resize((width, height), Image.Resampling.NEAREST)

        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
