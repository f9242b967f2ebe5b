from __future__ import annotations

import json
from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} must not be empty")
    return str(value).strip()


def parse_descriptor(raw: Any, field_name: str = "descriptor") -> Any:
    """Decode a descriptor sent as a JSON string (or already decoded list).

    Only presence and JSON syntax are checked here; shape problems are left to
    the matcher so they end up recorded as a rejected event.
    """

    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(f"{field_name} missing (no face detected)")
    if isinstance(raw, (list, tuple)):
        return list(raw)
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is not valid JSON")
    if value is None:
        raise ValidationError(f"{field_name} missing (no face detected)")
    return value
