"""Point-in-time snapshots of a space and their Markdown and Mermaid renderings."""

from __future__ import annotations

import dataclasses
import json
from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timezone

from .export import ExportEdge, ExportLineage, ExportSnapshot
from .history import filter_audit_entries
from .models import ZERO_TIME, AuditEntry, Memory, MemoryKind, RelationType, _format_time
from .validate import validate_space_id


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _resolve_as_of(as_of: datetime | None) -> datetime:
    if as_of is None or _utc(as_of) == ZERO_TIME:
        return datetime.now(timezone.utc)
    return _utc(as_of)


def _rfc3339_seconds(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return _format_time(value.replace(microsecond=0)) or ""


def _go_bool(value: bool) -> str:
    return "true" if value else "false"


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def sort_space_memories(memories: Iterable[Memory]) -> list[Memory]:
    """Order memories by creation time, then by id."""
    return sorted(memories, key=lambda mem: (_utc(mem.created_at), mem.id))


def project_memories_as_of(
    memories: Iterable[Memory], audit: Iterable[AuditEntry], as_of: datetime
) -> list[Memory]:
    """Rebuild the state memories had at ``as_of`` from their records and the audit log.

    Returns copies; the given memories are left untouched.
    """
    as_of = _utc(as_of)
    forget_at: dict[str, datetime] = {}
    for entry in audit:
        stamp = _utc(entry.timestamp)
        if entry.operation != "forget" or stamp > as_of:
            continue
        for memory_id in entry.memory_ids:
            previous = forget_at.get(memory_id)
            if previous is None or stamp < previous:
                forget_at[memory_id] = stamp

    projected: list[Memory] = []
    highest: dict[str, tuple[int, datetime, str]] = {}
    for mem in memories:
        created = _utc(mem.created_at)
        if created > as_of:
            continue
        root_id = mem.lineage_root()
        current = highest.get(root_id)
        if (
            current is None
            or mem.version > current[0]
            or (mem.version == current[0] and created > current[1])
        ):
            highest[root_id] = (mem.version, created, mem.id)
        projected.append(dataclasses.replace(mem))

    for mem in projected:
        mem.is_forgotten = mem.id in forget_at
        mem.has_orphaned_sources = any(source in forget_at for source in mem.source_ids)
        mem.is_latest = mem.id == highest[mem.lineage_root()][2] and not mem.is_forgotten

    return projected


def _is_live(mem: Memory, as_of: datetime) -> bool:
    if not mem.is_latest or mem.is_forgotten:
        return False
    if mem.forget_after is not None and _utc(mem.forget_after) <= as_of:
        return False
    return True


def collect_live_memories(memories: Iterable[Memory], as_of: datetime) -> list[Memory]:
    """Return the memories that are part of the live corpus at ``as_of``."""
    as_of = _utc(as_of)
    return [mem for mem in memories if _is_live(mem, as_of)]


def build_export_lineages(memories: Iterable[Memory]) -> list[ExportLineage]:
    """Group memories into lineages ordered by root id, each ordered by version."""
    by_root: dict[str, list[Memory]] = defaultdict(list)
    for mem in memories:
        by_root[mem.lineage_root()].append(mem)

    lineages = []
    for root_id in sorted(by_root):
        history = sorted(
            by_root[root_id], key=lambda mem: (mem.version, _utc(mem.created_at), mem.id)
        )
        lineages.append(
            ExportLineage(
                root_id=root_id,
                memories=history,
                has_latest=any(mem.is_latest for mem in history),
            )
        )
    return lineages


def collect_export_edges(memories: Iterable[Memory]) -> list[ExportEdge]:
    """Return every stored relation as an edge, ordered by source, relation and target."""
    edges = []
    for mem in memories:
        for relation, targets in (
            (RelationType.UPDATES, mem.relations.updates),
            (RelationType.EXTENDS, mem.relations.extends),
            (RelationType.DERIVES, mem.relations.derives),
        ):
            edges.extend(ExportEdge(from_id=mem.id, to_id=target, relation=relation) for target in targets)
    return sorted(edges, key=lambda edge: (edge.from_id, str(edge.relation), edge.to_id))


def filter_audit_entries_as_of(entries: Iterable[AuditEntry], as_of: datetime) -> list[AuditEntry]:
    """Keep the entries recorded at or before ``as_of``."""
    as_of = _utc(as_of)
    return [entry for entry in entries if _utc(entry.timestamp) <= as_of]


def build_snapshot(
    space_id: str,
    memories: Iterable[Memory],
    audit: Iterable[AuditEntry],
    as_of: datetime | None = None,
) -> ExportSnapshot:
    """Build the snapshot of ``space_id`` as it stood at ``as_of`` (now if unset)."""
    validate_space_id(space_id)
    moment = _resolve_as_of(as_of)
    space_memories = sort_space_memories(mem for mem in memories if mem.space_id == space_id)
    space_audit = filter_audit_entries(audit, space_id, None)
    projected = project_memories_as_of(space_memories, space_audit, moment)
    return ExportSnapshot(
        space_id=space_id,
        generated_at=moment,
        live_memories=collect_live_memories(projected, moment),
        lineages=build_export_lineages(projected),
        relations=collect_export_edges(projected),
        audit_entries=filter_audit_entries_as_of(space_audit, moment),
    )


def render_memory_kind(kind: MemoryKind | int) -> str:
    """Return the lower-case label of a memory kind."""
    labels = {
        MemoryKind.EPISODIC: "episodic",
        MemoryKind.STATIC: "static",
        MemoryKind.DERIVED: "derived",
    }
    return labels.get(kind, "unknown")


def mermaid_node_id(memory_id: str) -> str:
    """Return a Mermaid-safe node name for a memory id."""
    return "mem_" + memory_id.replace(":", "_").replace("-", "_")


def _mermaid_label(mem: Memory) -> str:
    content = mem.content.strip()
    raw = content.encode("utf-8")
    if len(raw) > 48:
        content = raw[:45].decode("utf-8", errors="ignore") + "..."
    return f"{mem.id} v{mem.version} {content}"


def render_summary_markdown(snapshot: ExportSnapshot) -> str:
    """Render a human-readable Markdown summary of a snapshot."""
    lines = [f"# Space: {snapshot.space_id}", "", "## Live Corpus"]
    if not snapshot.live_memories:
        lines += ["- none", ""]
    else:
        for mem in snapshot.live_memories:
            lines += [
                f"- [{render_memory_kind(mem.kind)}] {mem.content}",
                f"  id: {mem.id}",
                f"  version: {mem.version}",
                f"  latest: {_go_bool(mem.is_latest)}",
                f"  forgotten: {_go_bool(mem.is_forgotten)}",
                f"  orphaned: {_go_bool(mem.has_orphaned_sources)}",
                f"  actor: {mem.actor.id}",
                f"  confidence: {mem.confidence:.2f}",
            ]
        lines.append("")

    lines.append("## Lineages")
    if not snapshot.lineages:
        lines += ["- none", ""]
    else:
        for lineage in snapshot.lineages:
            lines.append(f"### Root {lineage.root_id}")
            for mem in lineage.memories:
                lines.append(
                    f"- v{mem.version} {mem.id} latest={_go_bool(mem.is_latest)} "
                    f"forgotten={_go_bool(mem.is_forgotten)} "
                    f"orphaned={_go_bool(mem.has_orphaned_sources)}"
                )
                lines.append(f"  {mem.content}")
        lines.append("")

    lines.append("## Relations")
    if not snapshot.relations:
        lines += ["- none", ""]
    else:
        lines += [f"- {edge.from_id} {edge.relation} {edge.to_id}" for edge in snapshot.relations]
        lines.append("")

    lines.append("## Audit Timeline")
    if not snapshot.audit_entries:
        lines.append("- none")
    else:
        for entry in snapshot.audit_entries:
            line = f"- {_rfc3339_seconds(entry.timestamp)} {entry.operation} {' -> '.join(entry.memory_ids)}"
            if entry.reason.strip():
                line += f" reason={_quote(entry.reason)}"
            lines.append(line)

    return "\n".join(lines) + "\n"


def render_graph_mermaid(snapshot: ExportSnapshot) -> str:
    """Render the snapshot's lineages and relations as a Mermaid flowchart."""
    nodes = {mem.id: mem for lineage in snapshot.lineages for mem in lineage.memories}
    lines = ["graph TD"]
    for memory_id in sorted(nodes):
        lines.append(f"  {mermaid_node_id(memory_id)}[{_quote(_mermaid_label(nodes[memory_id]))}]")
    for edge in snapshot.relations:
        lines.append(
            f"  {mermaid_node_id(edge.from_id)} -->|{edge.relation}| {mermaid_node_id(edge.to_id)}"
        )

    classes = (
        ("latest", lambda mem: mem.is_latest and not mem.is_forgotten),
        ("forgotten", lambda mem: mem.is_forgotten),
        ("orphaned", lambda mem: mem.has_orphaned_sources),
    )
    for name, selected in classes:
        ids = sorted(mermaid_node_id(mem.id) for mem in nodes.values() if selected(mem))
        if ids:
            lines.append(f"  class {','.join(ids)} {name};")

    lines += [
        "  classDef latest fill:#d9f99d,stroke:#3f6212;",
        "  classDef forgotten fill:#fecaca,stroke:#991b1b;",
        "  classDef orphaned fill:#fed7aa,stroke:#9a3412;",
    ]
    return "\n".join(lines) + "\n"