from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AllowedPhone


class AllowListRepository(Protocol):
    def exists(self, phone: str) -> bool:
        raise NotImplementedError

    def add(self, phone: str) -> int:
        raise NotImplementedError

    def list_all(self, limit: int = 500) -> Sequence[AllowedPhone]:
        raise NotImplementedError

    def delete_by_id(self, phone_id: int) -> bool:
        raise NotImplementedError


class SubscriptionRepository(Protocol):
    def upsert(self, chat_id: str, *, phone: Optional[str], is_active: bool) -> None:
        """Insert or overwrite the single row for ``chat_id``."""

        raise NotImplementedError

    def active_chat_ids(self) -> Sequence[str]:
        raise NotImplementedError
