from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import requests

from ..core.constants import DEFAULT_NOTIFY_TIMEOUT_SECONDS
from ..core.exceptions import NotificationDeliveryError
from .model import DeliveryResult

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"


class Transport(Protocol):
    def send_text(self, chat_id: str, text: str, *, reply_markup: Optional[dict] = None) -> DeliveryResult:
        raise NotImplementedError

    def send_image_with_caption(self, chat_id: str, image_ref: str, caption: str) -> DeliveryResult:
        raise NotImplementedError


class TelegramTransport(Transport):
    """Telegram Bot API client.

    Every call is bounded by ``timeout`` seconds. Failures come back as a
    failed DeliveryResult; nothing is raised to the caller.
    """

    def __init__(
        self,
        token: str,
        *,
        timeout: float = DEFAULT_NOTIFY_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        api_url: str = TELEGRAM_API_URL,
    ):
        self._base_url = f"{api_url.rstrip('/')}/bot{token}"
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    def send_text(self, chat_id: str, text: str, *, reply_markup: Optional[dict] = None) -> DeliveryResult:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        try:
            self._post("sendMessage", json=payload)
        except NotificationDeliveryError as e:
            return DeliveryResult.failure(str(e))
        return DeliveryResult.success()

    def send_image_with_caption(self, chat_id: str, image_ref: str, caption: str) -> DeliveryResult:
        try:
            with open(image_ref, "rb") as photo:
                self._post(
                    "sendPhoto",
                    data={"chat_id": str(chat_id), "caption": caption},
                    files={"photo": photo},
                )
        except OSError as e:
            return DeliveryResult.failure(f"cannot read image {image_ref}: {e}")
        except NotificationDeliveryError as e:
            return DeliveryResult.failure(str(e))
        return DeliveryResult.success()

    def close(self) -> None:
        self._session.close()

    def _post(self, method: str, **kwargs) -> dict:
        try:
            response = self._session.post(f"{self._base_url}/{method}", timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise NotificationDeliveryError(f"{method} request failed: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.status_code != 200 or not body.get("ok", False):
            description = body.get("description") or response.text[:200]
            raise NotificationDeliveryError(f"{method} HTTP {response.status_code}: {description}")
        return body
