from __future__ import annotations

import re
from typing import Optional

_NON_PHONE_CHARS = re.compile(r"[^\d+]")


def normalize_phone(raw: Optional[str]) -> Optional[str]:
    """Normalize a phone number to ``+<digits>``.

    >>> normalize_phone("00 99-123-456")
    '+99123456'
    >>> normalize_phone("99123456")
    '+99123456'

    Returns None when nothing dialable is left.
    """

    if raw is None:
        return None
    phone = _NON_PHONE_CHARS.sub("", str(raw))
    if not any(ch.isdigit() for ch in phone):
        return None
    if phone.startswith("00"):
        phone = "+" + phone[2:]
    if not phone.startswith("+"):
        phone = "+" + phone
    return phone
