"""QR code images carrying a record's contact details as a vCard."""

import io
import logging

import qrcode
from qrcode.constants import ERROR_CORRECT_Q

from .models import Record

logger = logging.getLogger(__name__)

# Pixels per QR module
BOX_SIZE = 10

# Custom fields exported as vCard URL lines rather than notes
URL_FIELDS = frozenset({"linkedin", "website", "url"})


def build_vcard(record: Record) -> str:
    """Build a vCard 3.0 payload for a record.

    Only populated fields are emitted. URL-like custom fields become URL
    lines; every other custom field becomes a NOTE.
    """
    lines = ["BEGIN:VCARD", "VERSION:3.0"]

    if record.name:
        lines.append(f"FN:{record.name}")
        lines.append(f"N:{record.name};;;;")
    if record.company:
        lines.append(f"ORG:{record.company}")
    if record.position:
        lines.append(f"TITLE:{record.position}")
    if record.email:
        lines.append(f"EMAIL;TYPE=WORK:{record.email}")
    if record.mobile:
        lines.append(f"TEL;TYPE=CELL:{record.mobile}")
    if record.phone:
        lines.append(f"TEL;TYPE=WORK:{record.phone}")
    if record.fax:
        lines.append(f"TEL;TYPE=FAX:{record.fax}")

    for field_name, value in record.custom_fields.items():
        if field_name in URL_FIELDS:
            lines.append(f"URL:{value}")
        else:
            lines.append(f"NOTE:{field_name}: {value}")

    lines.append("END:VCARD")
    return "\r\n".join(lines) + "\r\n"


def generate_qr_code(record: Record) -> bytes:
    """Render the record's vCard as a PNG QR code.

    Args:
        record: Record to encode.

    Returns:
        PNG image bytes.
    """
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_Q, box_size=BOX_SIZE, border=4)
    qr.add_data(build_vcard(record))
    qr.make(fit=True)

    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")

    logger.debug(f"Generated QR code for {record.name} (version {qr.version})")
    return buffer.getvalue()
