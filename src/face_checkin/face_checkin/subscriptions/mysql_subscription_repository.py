from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AllowedPhone
from .repository import AllowListRepository, SubscriptionRepository


class MySQLAllowListRepository(AllowListRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists(self, phone: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT phone_id FROM telegram_allowed_phones WHERE phone=%s LIMIT 1", (phone,))
            return fetchone(cur) is not None

    def add(self, phone: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("INSERT INTO telegram_allowed_phones(phone) VALUES(%s)", (phone,))
            return int(cur.lastrowid)

    def list_all(self, limit: int = 500) -> Sequence[AllowedPhone]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT phone_id, phone, created_at
                FROM telegram_allowed_phones
                ORDER BY phone_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                AllowedPhone(phone_id=int(r["phone_id"]), phone=r["phone"], created_at=r.get("created_at"))
                for r in fetchall(cur)
            ]

    def delete_by_id(self, phone_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM telegram_allowed_phones WHERE phone_id=%s", (int(phone_id),))
            return cur.rowcount > 0


class MySQLSubscriptionRepository(SubscriptionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, chat_id: str, *, phone: Optional[str], is_active: bool) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO telegram_subscriptions(chat_id, phone, is_active)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE phone=VALUES(phone), is_active=VALUES(is_active)
                """,
                (str(chat_id), phone, 1 if is_active else 0),
            )

    def active_chat_ids(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT chat_id FROM telegram_subscriptions WHERE is_active=1 ORDER BY chat_id")
            return [str(r["chat_id"]) for r in fetchall(cur)]
