import io

import qrcode
from qrcode.constants import ERROR_CORRECT_M

from src.service.admission.app.interface.i_qr_code_generator import IQrCodeGenerator


class QrCodeGenerator(IQrCodeGenerator):
    """PNG QR codes encoding the bare ticket token."""

    def __init__(self, *, box_size: int = 8, border: int = 1) -> None:
        self.box_size = box_size
        self.border = border

    def png(self, data: str) -> bytes:
        qr = qrcode.QRCode(
            error_correction=ERROR_CORRECT_M,
            box_size=self.box_size,
            border=self.border,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color='black', back_color='white')
        buffer = io.BytesIO()
        img.save(buffer)
        return buffer.getvalue()
