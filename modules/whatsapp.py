"""WhatsApp click-to-chat links for customer notifications."""

import re
from urllib.parse import quote

from core.exceptions import ValidationError


DEFAULT_BASE_URL = "https://wa.me"

# Characters JavaScript encodeURIComponent leaves unescaped
URL_SAFE_CHARS = "!*'()"

_NON_DIGITS = re.compile(r"\D")


def phone_digits(phone: str) -> str:
    """Strip everything but digits from a phone number."""
    return _NON_DIGITS.sub("", phone or "")


def build_whatsapp_url(phone: str, message: str, base_url: str = DEFAULT_BASE_URL) -> str:
    """
    Build a deep link that opens a chat with the message pre-filled.

    The link is handed to the technician; nothing is sent from here.

    Args:
        phone: Customer phone in any format ("123-456-7890")
        message: Message text
        base_url: Click-to-chat base (default https://wa.me)

    Returns:
        e.g. "https://wa.me/1234567890?text=Hi%20John"

    Raises:
        ValidationError: If the phone has no digits
    """
    digits = phone_digits(phone)
    if not digits:
        raise ValidationError.for_field("customerPhone", f"Phone '{phone}' has no digits")
    return f"{base_url.rstrip('/')}/{digits}?text={quote(message, safe=URL_SAFE_CHARS)}"
