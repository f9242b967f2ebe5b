from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.validators import parse_descriptor, require_non_empty
from ..core.enums import EventKind, EventOutcome
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class AttendanceEvent:
    """Domain entity: one recorded check-in attempt (immutable)."""

    event_id: int
    worker_id: Optional[int]
    site: str
    kind: EventKind
    outcome: EventOutcome
    reason: Optional[str]
    image_ref: str
    name: str
    surname: str
    role: str
    created_at: datetime


@dataclass(frozen=True)
class AttendanceSubmission:
    """Validated input of one attendance attempt.

    ``descriptor`` is passed through as decoded; its shape is judged by the
    ledger so that a malformed vector is still recorded as a rejected event.
    """

    name: str
    surname: str
    role: str
    site: str
    descriptor: Any
    image_ref: str

    @classmethod
    def from_fields(
        cls,
        *,
        name: Optional[str],
        surname: Optional[str],
        role: Optional[str],
        site: Optional[str],
        descriptor: Any,
        image_ref: Optional[str],
    ) -> "AttendanceSubmission":
        name = require_non_empty(name, "name")
        surname = require_non_empty(surname, "surname")
        role = require_non_empty(role, "role")
        site = require_non_empty(site, "site")
        decoded = parse_descriptor(descriptor)
        if not image_ref:
            raise ValidationError("capture image missing")
        return cls(
            name=name,
            surname=surname,
            role=role,
            site=site,
            descriptor=decoded,
            image_ref=str(image_ref),
        )


@dataclass(frozen=True)
class LedgerDecision:
    kind: EventKind
    outcome: EventOutcome
    reason: Optional[str] = None
    distance: Optional[float] = None

    @property
    def accepted(self) -> bool:
        return self.outcome == EventOutcome.OK


@dataclass(frozen=True)
class SubmissionResult:
    event_id: int
    outcome: EventOutcome
    kind: EventKind
    reason: Optional[str]
    image_ref: str

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "outcome": self.outcome.value,
            "kind": self.kind.value,
            "reason": self.reason,
        }
