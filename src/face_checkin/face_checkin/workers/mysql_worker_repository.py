from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, decode_json_column, fetchall, fetchone
from .model import Worker
from .repository import WorkerRepository

_WORKER_COLUMNS = "worker_id, name, surname, role, is_active, ref_descriptor, ref_image_url, created_at"


def _to_worker(row: dict) -> Worker:
    return Worker(
        worker_id=int(row["worker_id"]),
        name=row["name"],
        surname=row["surname"],
        role=row["role"],
        is_active=bool(row.get("is_active", True)),
        reference_descriptor=decode_json_column(row.get("ref_descriptor")),
        reference_image_url=row.get("ref_image_url"),
        created_at=row.get("created_at"),
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_by_identity(self, name: str, surname: str, role: str) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_WORKER_COLUMNS}
                FROM workers
                WHERE LOWER(name)=LOWER(%s) AND LOWER(surname)=LOWER(%s) AND LOWER(role)=LOWER(%s)
                LIMIT 1
                """,
                (name.strip(), surname.strip(), role.strip()),
            )
            row = fetchone(cur)
            return _to_worker(row) if row else None

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_WORKER_COLUMNS} FROM workers WHERE worker_id=%s", (int(worker_id),))
            row = fetchone(cur)
            return _to_worker(row) if row else None

    def create_worker(self, *, name: str, surname: str, role: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO workers(name, surname, role, is_active) VALUES(%s,%s,%s,1)",
                (name, surname, role),
            )
            return int(cur.lastrowid)

    def set_reference(self, worker_id: int, *, descriptor: Any, image_url: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE workers
                SET ref_descriptor=%s, ref_image_url=COALESCE(%s, ref_image_url)
                WHERE worker_id=%s
                """,
                (json.dumps(descriptor), image_url, int(worker_id)),
            )
            return cur.rowcount > 0

    def set_active(self, worker_id: int, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE workers SET is_active=%s WHERE worker_id=%s",
                (1 if is_active else 0, int(worker_id)),
            )
            return cur.rowcount > 0

    def delete_with_events(self, worker_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_events WHERE worker_id=%s", (int(worker_id),))
            cur.execute("DELETE FROM workers WHERE worker_id=%s", (int(worker_id),))
            return cur.rowcount > 0

    def list_admin_view(self, limit: int = 200) -> Sequence[dict]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT worker_id, name, surname, role, is_active, created_at,
                       ref_image_url, ref_descriptor IS NOT NULL AS has_reference
                FROM workers
                ORDER BY worker_id DESC
                LIMIT %s
                """,
                (int(limit),),
            )
            return [
                {
                    "worker_id": int(r["worker_id"]),
                    "name": r["name"],
                    "surname": r["surname"],
                    "role": r["role"],
                    "is_active": bool(r["is_active"]),
                    "created_at": r["created_at"].isoformat() if r.get("created_at") else None,
                    "ref_image_url": r.get("ref_image_url"),
                    "has_reference": bool(r.get("has_reference")),
                }
                for r in fetchall(cur)
            ]
