from datetime import datetime, timedelta, timezone

from omnethdb.export import (
    ExportLineage,
    ExportSnapshot,
    audit_entry_key,
    compare_export_snapshots,
)
from omnethdb.models import Actor, ActorKind, AuditEntry, Memory, MemoryKind

T0 = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
T1 = T0 + timedelta(minutes=5)


def _mem(mem_id, **kwargs):
    kwargs.setdefault("space_id", "repo:company/app")
    kwargs.setdefault("kind", MemoryKind.STATIC)
    kwargs.setdefault("is_latest", True)
    return Memory(id=mem_id, **kwargs)


def _entry(operation, ids, when, reason=""):
    return AuditEntry(
        timestamp=when,
        space_id="repo:company/app",
        operation=operation,
        actor=Actor(id="user:alice", kind=ActorKind.HUMAN),
        memory_ids=list(ids),
        reason=reason,
    )


def _snapshots():
    a = _mem("a")
    b = _mem("b")
    forgotten_a = _mem("a", is_latest=False, is_forgotten=True)
    c = _mem("c", kind=MemoryKind.DERIVED, has_orphaned_sources=True, source_ids=["a", "b"])
    remember = _entry("remember", ["a"], T0)
    forget = _entry("forget", ["a"], T1, reason="cleanup")
    before = ExportSnapshot(
        space_id="repo:company/app",
        generated_at=T0,
        live_memories=[a, b],
        lineages=[
            ExportLineage(root_id="a", memories=[a], has_latest=True),
            ExportLineage(root_id="b", memories=[b], has_latest=True),
        ],
        audit_entries=[remember],
    )
    after = ExportSnapshot(
        space_id="repo:company/app",
        generated_at=T1,
        live_memories=[b, c],
        lineages=[
            ExportLineage(root_id="a", memories=[forgotten_a], has_latest=False),
            ExportLineage(root_id="b", memories=[b], has_latest=True),
            ExportLineage(root_id="c", memories=[c], has_latest=True),
        ],
        audit_entries=[remember, forget],
    )
    return before, after, forget


def test_diff_reports_added_and_removed_live_memories():
    before, after, _ = _snapshots()
    diff = compare_export_snapshots(before, after)
    assert [m.id for m in diff.added_live_memories] == ["c"]
    assert [m.id for m in diff.removed_live_memories] == ["a"]


def test_diff_reports_new_orphaned_derives():
    before, after, _ = _snapshots()
    diff = compare_export_snapshots(before, after)
    assert [m.id for m in diff.new_orphaned_derives] == ["c"]


def test_already_orphaned_derive_is_not_new():
    before, after, _ = _snapshots()
    orphan = after.live_memories[1]
    before.live_memories.append(orphan)
    diff = compare_export_snapshots(before, after)
    assert diff.new_orphaned_derives == []


def test_orphaned_non_derived_memory_is_ignored():
    before = ExportSnapshot(space_id="s")
    after = ExportSnapshot(space_id="s", live_memories=[_mem("x", has_orphaned_sources=True)])
    diff = compare_export_snapshots(before, after)
    assert diff.new_orphaned_derives == []
    assert [m.id for m in diff.added_live_memories] == ["x"]


def test_diff_reports_added_audit_entries():
    before, after, forget = _snapshots()
    diff = compare_export_snapshots(before, after)
    assert diff.added_audit_entries == [forget]


def test_diff_reports_changed_lineages_only():
    before, after, _ = _snapshots()
    diff = compare_export_snapshots(before, after)
    assert [d.root_id for d in diff.changed_lineages] == ["a", "c"]
    lineage_a, lineage_c = diff.changed_lineages
    assert lineage_a.before_latest_id == "a"
    assert lineage_a.after_latest_id is None
    assert (lineage_a.before_versions, lineage_a.after_versions) == (1, 1)
    assert lineage_c.before_latest_id is None
    assert lineage_c.after_latest_id == "c"
    assert (lineage_c.before_versions, lineage_c.after_versions) == (0, 1)


def test_changed_lineages_are_sorted_by_root():
    before = ExportSnapshot(space_id="s")
    after = ExportSnapshot(
        space_id="s",
        lineages=[
            ExportLineage(root_id="z", memories=[_mem("z")]),
            ExportLineage(root_id="m", memories=[_mem("m")]),
        ],
    )
    diff = compare_export_snapshots(before, after)
    assert [d.root_id for d in diff.changed_lineages] == ["m", "z"]


def test_diff_carries_window_and_snapshots():
    before, after, _ = _snapshots()
    diff = compare_export_snapshots(before, after)
    assert diff.since == T0
    assert diff.until == T1
    assert diff.before is before
    assert diff.after is after
    assert diff.space_id == "repo:company/app"


def test_diff_space_id_falls_back_to_after():
    diff = compare_export_snapshots(ExportSnapshot(), ExportSnapshot(space_id="repo:x"))
    assert diff.space_id == "repo:x"


def test_identical_snapshots_have_empty_diff():
    before, _, _ = _snapshots()
    diff = compare_export_snapshots(before, before)
    assert diff.added_live_memories == []
    assert diff.removed_live_memories == []
    assert diff.added_audit_entries == []
    assert diff.changed_lineages == []


def test_audit_entry_key_format():
    entry = _entry("forget", ["a", "b"], T0, reason="cleanup")
    assert audit_entry_key(entry) == "2024-01-02T03:04:05Z|forget|user:alice|a,b|cleanup"


def test_audit_entry_key_normalises_timezone():
    shifted = T0.astimezone(timezone(timedelta(hours=2)))
    assert audit_entry_key(_entry("remember", ["a"], shifted)) == audit_entry_key(
        _entry("remember", ["a"], T0)
    )


def test_audit_entry_key_keeps_fractional_seconds():
    entry = _entry("remember", ["a"], T0.replace(microsecond=500000))
    assert audit_entry_key(entry).startswith("2024-01-02T03:04:05.5Z|")


def test_same_audit_entry_in_other_timezone_is_not_added():
    entry = _entry("remember", ["a"], T0)
    shifted = _entry("remember", ["a"], T0.astimezone(timezone(timedelta(hours=-5))))
    diff = compare_export_snapshots(
        ExportSnapshot(space_id="s", audit_entries=[entry]),
        ExportSnapshot(space_id="s", audit_entries=[shifted]),
    )
    assert diff.added_audit_entries == []