# seriesview/core/metadata.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .exceptions import CoreError
from .instants import parse_instant

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RecordMeta:
    """
    Provenance attached to a Series or a Measurement by the data store.

    Display-only; the engine never orders or filters by these fields:
    - created_by: user id of the creator (None if deleted / system-created)
    - created_by_username: creator name for display
    - created_at: when the record was stored
    - attrs: arbitrary additional fields
    """
    created_by: int | None = None
    created_by_username: str | None = None
    created_at: datetime | None = None
    attrs: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        elif not isinstance(self.attrs, dict):
            raise CoreError("RecordMeta.attrs must be a dict.")
        if self.created_at is not None and not isinstance(self.created_at, datetime):
            raise CoreError("RecordMeta.created_at must be a datetime or None.")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecordMeta":
        raw = data.get("createdAt")
        created_at = None
        if raw:
            try:
                created_at = parse_instant(raw)
            except CoreError:
                logger.warning("Ignoring unparseable createdAt %r", raw)
        return cls(
            created_by=data.get("createdBy"),
            created_by_username=data.get("createdByUsername"),
            created_at=created_at,
        )
