from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Tuple

from ..core.enums import MessageKey, SubscriptionOutcome


@dataclass(frozen=True)
class Subscription:
    chat_id: str
    phone: Optional[str]
    is_active: bool


@dataclass(frozen=True)
class AllowedPhone:
    phone_id: int
    phone: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.phone_id,
            "phone": self.phone,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class SubscriptionSignal:
    """What a chat sent us: a plain text and/or a shared contact phone."""

    text: str = ""
    contact_phone: Optional[str] = None

    @classmethod
    def from_update(cls, update: Any) -> Optional[Tuple[str, "SubscriptionSignal"]]:
        """Parse a Telegram update into ``(chat_id, signal)``.

        Returns None for updates without a message or chat.
        """

        if not isinstance(update, dict):
            return None
        message = update.get("message")
        if not isinstance(message, dict):
            return None
        chat = message.get("chat") or {}
        chat_id = chat.get("id") if isinstance(chat, dict) else None
        if chat_id is None or chat_id == "":
            return None

        contact = message.get("contact")
        phone = contact.get("phone_number") if isinstance(contact, dict) else None
        text = message.get("text") or ""
        return str(chat_id), cls(text=str(text).strip(), contact_phone=str(phone) if phone else None)


@dataclass(frozen=True)
class SignalResult:
    outcome: SubscriptionOutcome
    message_key: Optional[MessageKey] = None
