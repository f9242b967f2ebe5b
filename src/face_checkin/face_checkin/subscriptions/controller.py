from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.auth import admin_required
from ..common.http import json_error, request_data
from ..core.enums import MessageKey
from ..core.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from ..container import Container
from .model import SubscriptionSignal

logger = logging.getLogger(__name__)

REPLIES = {
    MessageKey.REQUEST_CONTACT: (
        "Confirm your phone number to receive attendance notifications.\n\n"
        "Tap 'Share phone number' below.",
        {
            "keyboard": [[{"text": "Share phone number", "request_contact": True}]],
            "resize_keyboard": True,
            "one_time_keyboard": True,
        },
    ),
    MessageKey.PHONE_UNREADABLE: ("Could not read the phone number. Please send it again.", None),
    MessageKey.NOT_ALLOWED: ("This number is not on the allowed list. Please contact the administrator.", None),
    MessageKey.SUBSCRIBED: (
        "Confirmed. You will now receive attendance notifications.",
        {"remove_keyboard": True},
    ),
}


def register(app: Flask, container: Container) -> None:
    registry = container.subscription_registry

    @app.route("/telegram/webhook", methods=["POST"], endpoint="telegram_webhook")
    def telegram_webhook():
        # Telegram retries non-2xx answers, so every path acknowledges.
        if container.transport is None:
            return jsonify({"ok": True})

        parsed = SubscriptionSignal.from_update(request.get_json(silent=True))
        if parsed is None:
            return jsonify({"ok": True})
        chat_id, signal = parsed

        try:
            result = registry.handle_signal(chat_id, signal)
            if result.message_key is not None:
                text, markup = REPLIES[result.message_key]
                sent = container.transport.send_text(chat_id, text, reply_markup=markup)
                if not sent.ok:
                    logger.warning("Webhook reply to %s failed: %s", chat_id, sent.error)
        except Exception:
            logger.exception("Webhook handling failed for chat %s", chat_id)
        return jsonify({"ok": True})

    @app.route("/api/admin/telegram/allowed", methods=["GET"], endpoint="allowed_phones")
    @admin_required
    def allowed_phones():
        try:
            return jsonify([p.to_dict() for p in registry.list_allowed_phones()])
        except PersistenceError as e:
            return json_error(str(e), 500)

    @app.route("/api/admin/telegram/allowed", methods=["POST"], endpoint="add_allowed_phone")
    @admin_required
    def add_allowed_phone():
        try:
            allowed = registry.register_allowed_phone(request_data().get("phone"))
        except ValidationError as e:
            return json_error(str(e), 400)
        except ConflictError as e:
            return json_error(str(e), 409)
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True, "id": allowed.phone_id, "phone": allowed.phone})

    @app.route("/api/admin/telegram/allowed/<int:phone_id>", methods=["DELETE"], endpoint="delete_allowed_phone")
    @admin_required
    def delete_allowed_phone(phone_id: int):
        try:
            registry.remove_allowed_phone(phone_id)
        except NotFoundError as e:
            return json_error(str(e), 404)
        except PersistenceError as e:
            return json_error(str(e), 500)
        return jsonify({"ok": True})
