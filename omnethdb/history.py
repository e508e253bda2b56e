"""Audit-log filtering and lineage history over stored memory records."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from .errors import MemoryNotFoundError
from .models import ZERO_TIME, AuditEntry, Memory
from .validate import validate_memory_id


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def filter_audit_entries(
    entries: Iterable[AuditEntry],
    space_id: str = "",
    since: datetime | None = None,
) -> list[AuditEntry]:
    """Return the entries of ``space_id`` at or after ``since``, oldest first.

    An empty ``space_id`` keeps every space; ``since`` of ``None`` or the zero
    time keeps every timestamp.
    """
    lower = None
    if since is not None and _utc(since) != ZERO_TIME:
        lower = _utc(since)
    selected = [
        entry
        for entry in entries
        if (not space_id or entry.space_id == space_id)
        and (lower is None or _utc(entry.timestamp) >= lower)
    ]
    return sorted(selected, key=lambda entry: _utc(entry.timestamp))


def lineage_history(memories: Iterable[Memory], root_id: str) -> list[Memory]:
    """Return every version of the lineage rooted at ``root_id``, oldest version first."""
    validate_memory_id(root_id)
    lineage = [mem for mem in memories if mem.lineage_root() == root_id]
    if not lineage:
        raise MemoryNotFoundError()
    return sorted(lineage, key=lambda mem: (mem.version, _utc(mem.created_at), mem.id))