from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.phone import normalize_phone
from ..core.constants import START_COMMAND
from ..core.enums import MessageKey, SubscriptionOutcome
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import AllowedPhone, SignalResult, SubscriptionSignal
from .repository import AllowListRepository, SubscriptionRepository

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """Allow-list plus opt-in lifecycle of notification subscribers.

    Opt-in protocol per chat: ``/start`` -> AWAITING_CONTACT (prompt for the
    phone), shared contact -> SUBSCRIBED when the phone is allow-listed,
    DENIED otherwise. Both terminal outcomes are upserted; the prompt is not.
    """

    def __init__(self, allow_list: AllowListRepository, subscriptions: SubscriptionRepository):
        self._allow_list = allow_list
        self._subscriptions = subscriptions

    def is_allowed(self, phone: Optional[str]) -> bool:
        normalized = normalize_phone(phone)
        if normalized is None:
            return False
        return self._allow_list.exists(normalized)

    def upsert_subscription(self, chat_id: str, phone: Optional[str], active: bool) -> None:
        self._subscriptions.upsert(str(chat_id), phone=phone, is_active=bool(active))

    def active_subscribers(self) -> Sequence[str]:
        return self._subscriptions.active_chat_ids()

    def register_allowed_phone(self, phone: Optional[str]) -> AllowedPhone:
        normalized = normalize_phone(phone)
        if normalized is None:
            raise ValidationError("phone must not be empty")
        if self._allow_list.exists(normalized):
            raise ConflictError("phone is already allowed")
        phone_id = self._allow_list.add(normalized)
        logger.info("Allowed phone %s added (id=%s)", normalized, phone_id)
        return AllowedPhone(phone_id=phone_id, phone=normalized)

    def list_allowed_phones(self) -> Sequence[AllowedPhone]:
        return self._allow_list.list_all()

    def remove_allowed_phone(self, phone_id: int) -> None:
        if not self._allow_list.delete_by_id(phone_id):
            raise NotFoundError("allowed phone not found")

    def handle_signal(self, chat_id: str, signal: SubscriptionSignal) -> SignalResult:
        if signal.contact_phone is not None:
            return self._handle_contact(str(chat_id), signal.contact_phone)
        if signal.text == START_COMMAND:
            return SignalResult(SubscriptionOutcome.AWAITING_CONTACT, MessageKey.REQUEST_CONTACT)
        return SignalResult(SubscriptionOutcome.AWAITING_CONTACT)

    def _handle_contact(self, chat_id: str, raw_phone: str) -> SignalResult:
        phone = normalize_phone(raw_phone)
        if phone is None:
            return SignalResult(SubscriptionOutcome.AWAITING_CONTACT, MessageKey.PHONE_UNREADABLE)

        if not self._allow_list.exists(phone):
            self.upsert_subscription(chat_id, phone, False)
            logger.info("Subscription denied for chat %s (%s not allowed)", chat_id, phone)
            return SignalResult(SubscriptionOutcome.DENIED, MessageKey.NOT_ALLOWED)

        self.upsert_subscription(chat_id, phone, True)
        logger.info("Chat %s subscribed with %s", chat_id, phone)
        return SignalResult(SubscriptionOutcome.SUBSCRIBED, MessageKey.SUBSCRIBED)
