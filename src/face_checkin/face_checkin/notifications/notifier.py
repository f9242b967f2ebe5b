from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Optional, Protocol, Sequence

from ..core.constants import DEFAULT_NOTIFY_MAX_PENDING, DEFAULT_NOTIFY_MAX_WORKERS, IMAGE_FALLBACK_MARKER
from ..core.enums import DeliveryStatus
from ..core.exceptions import PersistenceError
from .model import FanoutResult, SubscriberDelivery
from .transport import Transport

logger = logging.getLogger(__name__)


class SubscriberSource(Protocol):
    def active_subscribers(self) -> Sequence[str]:
        raise NotImplementedError


class Notifier:
    """Fan a message out to every active subscriber.

    Deliveries run concurrently on a bounded pool and are isolated from each
    other: one subscriber failing never stops the rest, and ``notify`` never
    raises for partial failure.
    """

    def __init__(
        self,
        subscribers: SubscriberSource,
        transport: Transport,
        *,
        max_workers: int = DEFAULT_NOTIFY_MAX_WORKERS,
        max_pending: int = DEFAULT_NOTIFY_MAX_PENDING,
    ):
        self._subscribers = subscribers
        self._transport = transport
        self._max_workers = max(1, int(max_workers))
        self._dispatcher = ThreadPoolExecutor(max_workers=1, thread_name_prefix="notify-dispatch")
        # Caps notifications queued behind the dispatcher; extra ones are dropped.
        self._backlog = threading.BoundedSemaphore(max(1, int(max_pending)))

    def notify(self, text: str, image_ref: Optional[str] = None) -> FanoutResult:
        try:
            chat_ids = list(dict.fromkeys(self._subscribers.active_subscribers()))
        except PersistenceError as e:
            logger.error("Cannot load active subscribers: %s", e)
            return FanoutResult()

        if not chat_ids:
            logger.warning("No active subscribers; notification skipped")
            return FanoutResult()

        deliveries: list[SubscriberDelivery] = []
        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(chat_ids)),
            thread_name_prefix="notify",
        ) as executor:
            future_to_chat = {
                executor.submit(self._deliver, chat_id, text, image_ref): chat_id for chat_id in chat_ids
            }
            for future in as_completed(future_to_chat):
                chat_id = future_to_chat[future]
                try:
                    delivery = future.result()
                except Exception as e:
                    logger.error("Delivery to %s raised: %s", chat_id, e, exc_info=True)
                    delivery = SubscriberDelivery(chat_id=chat_id, status=DeliveryStatus.FAILED, error=str(e))
                if not delivery.ok:
                    logger.warning("Notification to %s failed: %s", chat_id, delivery.error)
                deliveries.append(delivery)

        result = FanoutResult(deliveries=tuple(deliveries))
        logger.info("Fan-out finished: %d sent, %d failed", result.success_count, result.failure_count)
        return result

    def notify_async(self, text: str, image_ref: Optional[str] = None) -> Optional[Future]:
        """Schedule ``notify`` in the background; the caller does not wait.

        Returns None when the notification was not scheduled (backlog full or
        notifier shut down).
        """

        if not self._backlog.acquire(blocking=False):
            logger.warning("Notification backlog full; message dropped")
            return None
        try:
            future = self._dispatcher.submit(self._notify_pending, text, image_ref)
        except RuntimeError as e:
            self._backlog.release()
            logger.error("Notification not scheduled: %s", e)
            return None
        future.add_done_callback(self._log_unexpected)
        return future

    def _notify_pending(self, text: str, image_ref: Optional[str]) -> FanoutResult:
        try:
            return self.notify(text, image_ref)
        finally:
            self._backlog.release()

    def shutdown(self, wait: bool = True) -> None:
        self._dispatcher.shutdown(wait=wait)

    def _deliver(self, chat_id: str, text: str, image_ref: Optional[str]) -> SubscriberDelivery:
        if not image_ref:
            sent = self._transport.send_text(chat_id, text)
            if sent.ok:
                return SubscriberDelivery(chat_id=chat_id, status=DeliveryStatus.SENT)
            return SubscriberDelivery(chat_id=chat_id, status=DeliveryStatus.FAILED, error=sent.error)

        with_image = self._transport.send_image_with_caption(chat_id, image_ref, text)
        if with_image.ok:
            return SubscriberDelivery(chat_id=chat_id, status=DeliveryStatus.SENT)

        logger.warning("Image delivery to %s failed (%s); sending text only", chat_id, with_image.error)
        fallback = self._transport.send_text(chat_id, text + IMAGE_FALLBACK_MARKER)
        if fallback.ok:
            return SubscriberDelivery(chat_id=chat_id, status=DeliveryStatus.SENT_TEXT_FALLBACK)
        return SubscriberDelivery(
            chat_id=chat_id,
            status=DeliveryStatus.FAILED,
            error=f"image: {with_image.error}; text: {fallback.error}",
        )

    @staticmethod
    def _log_unexpected(future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error("Background notification crashed: %s", error, exc_info=error)
