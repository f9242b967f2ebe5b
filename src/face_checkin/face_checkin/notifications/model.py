from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..core.enums import DeliveryStatus


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of a single transport call."""

    ok: bool
    error: Optional[str] = None

    @classmethod
    def success(cls) -> "DeliveryResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: str) -> "DeliveryResult":
        return cls(ok=False, error=error)


@dataclass(frozen=True)
class SubscriberDelivery:
    chat_id: str
    status: DeliveryStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != DeliveryStatus.FAILED


@dataclass(frozen=True)
class FanoutResult:
    """Per-subscriber report of one fan-out."""

    deliveries: Tuple[SubscriberDelivery, ...] = field(default_factory=tuple)

    @property
    def success_count(self) -> int:
        return sum(1 for d in self.deliveries if d.ok)

    @property
    def failure_count(self) -> int:
        return sum(1 for d in self.deliveries if not d.ok)

    @property
    def failed(self) -> Tuple[SubscriberDelivery, ...]:
        return tuple(d for d in self.deliveries if not d.ok)
