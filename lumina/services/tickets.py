"""Ticket identifiers and their QR codes.

Ticket IDs double as the unguessable token printed in the QR code checked at
the door, so the random part comes from `secrets`.
"""

import io
import re
import secrets
import string

import cv2
import numpy as np
import qrcode

from lumina.models import MAX_COMPANIONS
from lumina.utils.logging import get_logger

logger = get_logger(__name__)

TICKET_PREFIX = "LUM"
RANDOM_LENGTH = 8
_ALPHABET = string.ascii_uppercase + string.digits


def _name_tag(first_name: str) -> str:
    tag = re.sub(r"[^\w]", "", first_name, flags=re.UNICODE)[:4].upper()
    return tag or "GUEST"


def generate_ticket_ids(first_name: str, companions: int) -> list[str]:
    """Generate one ticket ID per attendee.

    Format: LUM-{first 4 letters of the name}-{8 random chars}-{index}.
    The index makes IDs unique within the batch even on a random collision.

    Args:
        first_name: Registrant's first name
        companions: Companions beyond the registrant (0-3)

    Returns:
        1 + companions distinct ticket IDs
    """
    if not 0 <= companions <= MAX_COMPANIONS:
        raise ValueError(f"companions must be between 0 and {MAX_COMPANIONS}")

    tag = _name_tag(first_name)
    return [
        f"{TICKET_PREFIX}-{tag}-{''.join(secrets.choice(_ALPHABET) for _ in range(RANDOM_LENGTH))}-{i}"
        for i in range(1 + companions)
    ]


def render_qr(ticket_id: str) -> bytes:
    """Render a ticket ID as a PNG QR code."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(ticket_id)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def decode_qr_image(image_bytes: bytes) -> str | None:
    """Read the ticket ID out of a photo of a QR code.

    Args:
        image_bytes: Encoded image (PNG, JPEG, ...)

    Returns:
        The decoded text, or None if the image holds no readable QR code
    """
    if not image_bytes:
        return None
    nparr = np.frombuffer(image_bytes, np.uint8)
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        logger.warning("Uploaded scan image could not be decoded")
        return None

    detector = cv2.QRCodeDetector()
    value, _points, _ = detector.detectAndDecode(image)
    return value.strip() or None
