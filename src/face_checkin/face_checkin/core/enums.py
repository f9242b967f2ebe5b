from __future__ import annotations

from enum import Enum


class EventKind(str, Enum):
    """Kind of an attendance event within a worker's day."""

    ENTRY = "ENTRY"
    EXIT = "EXIT"


class EventOutcome(str, Enum):
    """Outcome stored with every attendance event."""

    OK = "OK"
    REJECTED = "REJECTED"
    LIMIT_REACHED = "LIMIT_REACHED"


class SubscriptionOutcome(str, Enum):
    """Result of one opt-in signal. AWAITING_CONTACT is never persisted."""

    SUBSCRIBED = "SUBSCRIBED"
    DENIED = "DENIED"
    AWAITING_CONTACT = "AWAITING_CONTACT"


class MessageKey(str, Enum):
    """Reply the webhook caller should send back to the chat."""

    REQUEST_CONTACT = "REQUEST_CONTACT"
    PHONE_UNREADABLE = "PHONE_UNREADABLE"
    NOT_ALLOWED = "NOT_ALLOWED"
    SUBSCRIBED = "SUBSCRIBED"


class DeliveryStatus(str, Enum):
    SENT = "SENT"
    SENT_TEXT_FALLBACK = "SENT_TEXT_FALLBACK"
    FAILED = "FAILED"
