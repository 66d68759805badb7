"""QR code rendering for attendee badges."""
import io

import qrcode

class QRService:
    """Service for QR code operations."""
    
    @staticmethod
    def render_png(qr_token: str, box_size: int = 10, border: int = 4) -> bytes:
        """Render ``qr_token`` as a PNG image."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=box_size,
            border=border,
        )
        qr.add_data(qr_token)
        qr.make(fit=True)
        
        img = qr.make_image(fill_color="black", back_color="white")
        
        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        return buffered.getvalue()
    
    @staticmethod
    def download_name(university_reg_no: str) -> str:
        return f"QR_{university_reg_no}.png"
