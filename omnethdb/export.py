"""Export snapshots of a space and the differences between two of them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum

from .models import ZERO_TIME, AuditEntry, Memory, MemoryKind, RelationType, _format_time


class ExportFormat(StrEnum):
    SNAPSHOT_JSON = "snapshot-json"
    SUMMARY_MD = "summary-md"
    GRAPH_MERMAID = "graph-mermaid"


@dataclass
class ExportRequest:
    space_id: str = ""


@dataclass
class ExportDiffRequest:
    """A time window to diff; ``until`` of ``None`` means now."""

    space_id: str = ""
    since: datetime | None = None
    until: datetime | None = None


@dataclass
class ExportEdge:
    from_id: str
    to_id: str
    relation: RelationType | str


@dataclass
class ExportLineage:
    root_id: str = ""
    memories: list[Memory] = field(default_factory=list)
    has_latest: bool = False


@dataclass
class ExportSnapshot:
    space_id: str = ""
    generated_at: datetime = ZERO_TIME
    live_memories: list[Memory] = field(default_factory=list)
    lineages: list[ExportLineage] = field(default_factory=list)
    relations: list[ExportEdge] = field(default_factory=list)
    audit_entries: list[AuditEntry] = field(default_factory=list)


@dataclass
class ExportLineageDiff:
    root_id: str
    before_latest_id: str | None
    after_latest_id: str | None
    before_versions: int
    after_versions: int


@dataclass
class ExportDiff:
    space_id: str = ""
    since: datetime = ZERO_TIME
    until: datetime = ZERO_TIME
    before: ExportSnapshot = field(default_factory=ExportSnapshot)
    after: ExportSnapshot = field(default_factory=ExportSnapshot)
    added_live_memories: list[Memory] = field(default_factory=list)
    removed_live_memories: list[Memory] = field(default_factory=list)
    new_orphaned_derives: list[Memory] = field(default_factory=list)
    added_audit_entries: list[AuditEntry] = field(default_factory=list)
    changed_lineages: list[ExportLineageDiff] = field(default_factory=list)


def audit_entry_key(entry: AuditEntry) -> str:
    """Return a key that identifies an audit entry across snapshots."""
    timestamp = entry.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    stamp = _format_time(timestamp.astimezone(timezone.utc))
    return "|".join(
        [stamp, entry.operation, entry.actor.id, ",".join(entry.memory_ids), entry.reason]
    )


def _compare_live_memories(
    before: list[Memory], after: list[Memory]
) -> tuple[list[Memory], list[Memory]]:
    before_ids = {mem.id for mem in before}
    after_ids = {mem.id for mem in after}
    added = [mem for mem in after if mem.id not in before_ids]
    removed = [mem for mem in before if mem.id not in after_ids]
    return added, removed


def _compare_new_orphaned_derives(before: list[Memory], after: list[Memory]) -> list[Memory]:
    previous = {mem.id: mem for mem in before}
    out = []
    for mem in after:
        if mem.kind != MemoryKind.DERIVED or not mem.has_orphaned_sources:
            continue
        earlier = previous.get(mem.id)
        if earlier is None or not earlier.has_orphaned_sources:
            out.append(mem)
    return out


def _compare_added_audit_entries(
    before: list[AuditEntry], after: list[AuditEntry]
) -> list[AuditEntry]:
    seen = {audit_entry_key(entry) for entry in before}
    return [entry for entry in after if audit_entry_key(entry) not in seen]


def _latest_memory_id(lineage: ExportLineage) -> str | None:
    return next((mem.id for mem in lineage.memories if mem.is_latest), None)


def _compare_lineages(
    before: list[ExportLineage], after: list[ExportLineage]
) -> list[ExportLineageDiff]:
    before_map = {lineage.root_id: lineage for lineage in before}
    after_map = {lineage.root_id: lineage for lineage in after}
    out = []
    for root_id in sorted(before_map.keys() | after_map.keys()):
        before_lineage = before_map.get(root_id, ExportLineage(root_id=root_id))
        after_lineage = after_map.get(root_id, ExportLineage(root_id=root_id))
        before_latest = _latest_memory_id(before_lineage)
        after_latest = _latest_memory_id(after_lineage)
        if before_latest == after_latest and len(before_lineage.memories) == len(
            after_lineage.memories
        ):
            continue
        out.append(
            ExportLineageDiff(
                root_id=root_id,
                before_latest_id=before_latest,
                after_latest_id=after_latest,
                before_versions=len(before_lineage.memories),
                after_versions=len(after_lineage.memories),
            )
        )
    return out


def compare_export_snapshots(before: ExportSnapshot, after: ExportSnapshot) -> ExportDiff:
    """Describe what changed between two snapshots of the same space."""
    added, removed = _compare_live_memories(before.live_memories, after.live_memories)
    return ExportDiff(
        space_id=before.space_id or after.space_id,
        since=before.generated_at,
        until=after.generated_at,
        before=before,
        after=after,
        added_live_memories=added,
        removed_live_memories=removed,
        new_orphaned_derives=_compare_new_orphaned_derives(
            before.live_memories, after.live_memories
        ),
        added_audit_entries=_compare_added_audit_entries(before.audit_entries, after.audit_entries),
        changed_lineages=_compare_lineages(before.lineages, after.lineages),
    )