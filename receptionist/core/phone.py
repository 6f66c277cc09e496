"""Phone number helpers for caller lookup."""

import logging
import re

logger = logging.getLogger(__name__)


def normalize_phone_e164(phone: str | None) -> str | None:
    """Normalize a caller number to E.164 (+1XXXXXXXXXX for US numbers).

    Handles the formats callers and agents produce:
        (602) 570-5474  → +16025705474
        602-570-5474    → +16025705474
        1 602 570 5474  → +16025705474
        +44 20 7946 0958 → +442079460958

    Returns:
        Phone in E.164 format, the stripped input when it cannot be
        normalized, or None for empty input
    """
    if not phone or not phone.strip():
        return None

    digits = re.sub(r'\D', '', phone)

    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith('1'):
        return f"+{digits}"
    if phone.strip().startswith('+') and len(digits) >= 10:
        return f"+{digits}"

    logger.warning(f"Could not normalize phone number: {phone}")
    return phone.strip()
