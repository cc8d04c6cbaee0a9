import hmac
import io
import logging
import qrcode

from attendance_api.core.config import settings
from attendance_api.core.exceptions import InternalError

logger = logging.getLogger(__name__)

class QRGateService:
    """Renders the attendance gate QR code and checks scanned payloads against it."""

    def __init__(self, payload: str | None = None):
        self.payload = payload if payload is not None else settings.ATTENDANCE_QR_CODE

    def generate_qr_image(self) -> bytes:
        """Render the gate payload as a PNG"""
        try:
            qr = qrcode.QRCode(
                version=1,
                error_correction=qrcode.constants.ERROR_CORRECT_L,
                box_size=10,
                border=4,
            )
            qr.add_data(self.payload)
            qr.make(fit=True)

            img = qr.make_image(fill_color="black", back_color="white")

            buffer = io.BytesIO()
            img.save(buffer, format="PNG")
            return buffer.getvalue()

        except Exception as e:
            logger.error(f"Error generating QR code: {e}")
            raise InternalError("Failed to generate QR code")

    def verify(self, scanned: str | None) -> bool:
        if not scanned:
            return False
        valid = hmac.compare_digest(scanned.strip().encode("utf-8"), self.payload.encode("utf-8"))
        if not valid:
            logger.warning("Scanned QR code does not match the attendance gate code")
        return valid
