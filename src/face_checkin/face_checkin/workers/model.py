from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Worker:
    """Domain entity: a worker who checks in by face.

    Identity is (name, surname, role), compared case-insensitively.
    ``reference_descriptor`` stays None until a reference is enrolled.
    """

    worker_id: int
    name: str
    surname: str
    role: str
    is_active: bool = True
    reference_descriptor: Optional[Any] = None
    reference_image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}"
