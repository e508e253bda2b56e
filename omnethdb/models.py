"""Core data model: memories, actors, policies, requests and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum, StrEnum
from typing import Any, Protocol, runtime_checkable

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class MemoryKind(IntEnum):
    EPISODIC = 0
    STATIC = 1
    DERIVED = 2
    UNKNOWN = 255


class ActorKind(IntEnum):
    HUMAN = 0
    AGENT = 1
    SYSTEM = 2


class RelationType(StrEnum):
    UPDATES = "updates"
    EXTENDS = "extends"
    DERIVES = "derives"


def _format_time(value: datetime | None) -> str | None:
    """Render a timestamp as RFC 3339 with trimmed fractional seconds."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


@dataclass
class Actor:
    id: str = ""
    kind: ActorKind | int = ActorKind.HUMAN

    def _as_dict(self) -> dict[str, Any]:
        return {"ID": self.id, "Kind": int(self.kind)}


@dataclass
class MemoryRelations:
    updates: list[str] = field(default_factory=list)
    extends: list[str] = field(default_factory=list)
    derives: list[str] = field(default_factory=list)

    def _as_dict(self) -> dict[str, Any]:
        return {
            "Updates": list(self.updates),
            "Extends": list(self.extends),
            "Derives": list(self.derives),
        }


@dataclass
class Memory:
    id: str = ""
    space_id: str = ""
    content: str = ""
    embedding: list[float] = field(default_factory=list)
    kind: MemoryKind | int = MemoryKind.EPISODIC
    actor: Actor = field(default_factory=Actor)
    confidence: float = 0.0
    version: int = 0
    is_latest: bool = False
    parent_id: str | None = None
    root_id: str | None = None
    source_ids: list[str] = field(default_factory=list)
    rationale: str = ""
    is_forgotten: bool = False
    forget_after: datetime | None = None
    has_orphaned_sources: bool = False
    relations: MemoryRelations = field(default_factory=MemoryRelations)
    metadata: dict[str, Any] | None = None
    created_at: datetime = ZERO_TIME

    def lineage_root(self) -> str:
        """Return the root id of this memory's lineage."""
        return self.root_id if self.root_id is not None else self.id

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping keyed by record field names."""
        return {
            "ID": self.id,
            "SpaceID": self.space_id,
            "Content": self.content,
            "Embedding": list(self.embedding),
            "Kind": int(self.kind),
            "Actor": self.actor._as_dict(),
            "Confidence": self.confidence,
            "Version": self.version,
            "IsLatest": self.is_latest,
            "ParentID": self.parent_id,
            "RootID": self.root_id,
            "SourceIDs": list(self.source_ids),
            "Rationale": self.rationale,
            "IsForgotten": self.is_forgotten,
            "ForgetAfter": _format_time(self.forget_after),
            "HasOrphanedSources": self.has_orphaned_sources,
            "Relations": self.relations._as_dict(),
            "Metadata": dict(self.metadata) if self.metadata is not None else None,
            "CreatedAt": _format_time(self.created_at),
        }


@dataclass
class ScoredMemory(Memory):
    score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Return the memory mapping with its score added."""
        out = super().to_dict()
        out["Score"] = self.score
        return out


@dataclass
class WritersPolicy:
    allow_human: bool = False
    allow_system: bool = False
    allow_all_agents: bool = False
    allowed_agent_ids: list[str] = field(default_factory=list)
    min_trust_level: float = 0.0


@dataclass
class SpaceWritePolicy:
    human_trust: float = 0.0
    system_trust: float = 0.0
    default_agent_trust: float = 0.0
    trust_levels: dict[str, float] = field(default_factory=dict)
    episodic_writers: WritersPolicy = field(default_factory=WritersPolicy)
    static_writers: WritersPolicy = field(default_factory=WritersPolicy)
    derived_writers: WritersPolicy = field(default_factory=WritersPolicy)
    promote_policy: WritersPolicy = field(default_factory=WritersPolicy)
    max_static_memories: int = 0
    max_episodic_memories: int = 0
    profile_max_static: int = 0
    profile_max_episodic: int = 0


@dataclass
class SpaceConfig:
    embedding_model_id: str = ""
    dimension: int = 0
    default_weight: float = 0.0
    half_life_days: float = 0.0
    write_policy: SpaceWritePolicy = field(default_factory=SpaceWritePolicy)
    migrating: bool = False
    migration_target_model_id: str = ""
    migration_target_dimension: int = 0
    migration_started_at: datetime | None = None


@dataclass
class AuditEntry:
    timestamp: datetime = ZERO_TIME
    space_id: str = ""
    operation: str = ""
    actor: Actor = field(default_factory=Actor)
    memory_ids: list[str] = field(default_factory=list)
    reason: str = ""


@dataclass
class ForgetRecord:
    memory_id: str = ""
    space_id: str = ""
    actor: Actor = field(default_factory=Actor)
    reason: str = ""
    timestamp: datetime = ZERO_TIME


@dataclass
class MemoryInput:
    space_id: str = ""
    content: str = ""
    kind: MemoryKind | int = MemoryKind.EPISODIC
    actor: Actor = field(default_factory=Actor)
    confidence: float = 0.0
    forget_after: datetime | None = None
    metadata: dict[str, Any] | None = None
    source_ids: list[str] = field(default_factory=list)
    rationale: str = ""
    if_latest_id: str | None = None
    relations: MemoryRelations = field(default_factory=MemoryRelations)


@dataclass
class ReviveInput:
    content: str = ""
    kind: MemoryKind | int = MemoryKind.EPISODIC
    actor: Actor = field(default_factory=Actor)
    confidence: float = 0.0
    metadata: dict[str, Any] | None = None


@dataclass
class RecallRequest:
    space_ids: list[str] = field(default_factory=list)
    space_weights: dict[str, float] = field(default_factory=dict)
    query: str = ""
    top_k: int = 0
    kinds: list[MemoryKind | int] = field(default_factory=list)
    exclude_orphaned_derives: bool = False


@dataclass
class ListMemoriesRequest:
    space_ids: list[str] = field(default_factory=list)
    kinds: list[MemoryKind | int] = field(default_factory=list)
    exclude_orphaned_derives: bool = False


@dataclass
class ProfileRequest:
    space_ids: list[str] = field(default_factory=list)
    space_weights: dict[str, float] = field(default_factory=dict)
    query: str = ""
    static_top_k: int = 0
    episodic_top_k: int = 0
    exclude_orphaned_derives: bool = False


@dataclass
class MemoryProfile:
    static: list[ScoredMemory] = field(default_factory=list)
    episodic: list[ScoredMemory] = field(default_factory=list)


@dataclass
class FindCandidatesRequest:
    space_id: str = ""
    content: str = ""
    top_k: int = 0
    include_superseded: bool = False
    include_forgotten: bool = False


@dataclass
class QualityDiagnosticsRequest:
    space_id: str = ""
    top_k_per_memory: int = 0
    max_duplicate_groups: int = 0
    max_update_pairs: int = 0


@dataclass
class MemorySimilarityPair:
    left_id: str = ""
    right_id: str = ""
    left_content: str = ""
    right_content: str = ""
    score: float = 0.0


@dataclass
class DuplicateDiagnosticGroup:
    memory_ids: list[str] = field(default_factory=list)
    pairs: list[MemorySimilarityPair] = field(default_factory=list)


@dataclass
class QualityDiagnosticsResult:
    space_id: str = ""
    generated_at: datetime = ZERO_TIME
    live_static_count: int = 0
    duplicate_groups: list[DuplicateDiagnosticGroup] = field(default_factory=list)
    possible_updates: list[MemorySimilarityPair] = field(default_factory=list)


@dataclass
class QualityCleanupPlanRequest:
    space_id: str = ""
    max_duplicate_actions: int = 0


@dataclass
class DuplicateCleanupSuggestion:
    keep_id: str = ""
    forget_ids: list[str] = field(default_factory=list)
    rationale: str = ""
    duplicate_group: DuplicateDiagnosticGroup = field(default_factory=DuplicateDiagnosticGroup)


@dataclass
class QualityCleanupPlanResult:
    space_id: str = ""
    generated_at: datetime = ZERO_TIME
    duplicate_suggestions: list[DuplicateCleanupSuggestion] = field(default_factory=list)
    suggested_forget_batch_command: str = ""


@dataclass
class RememberLintRequest:
    input: MemoryInput = field(default_factory=MemoryInput)
    top_k: int = 0


class RememberLintWarningCode(StrEnum):
    POSSIBLE_DUPLICATE = "possible_duplicate"
    POSSIBLE_UPDATE_TARGET = "possible_update_target"
    MIXED_FACT_BLOB = "mixed_fact_blob"


class RememberLintSuggestionCode(StrEnum):
    SUGGEST_SKIP_DUPLICATE = "suggest_skip_duplicate"
    SUGGEST_UPDATE_EXISTING = "suggest_update_existing"
    SUGGEST_SPLIT_CANDIDATE = "suggest_split_candidate"


@dataclass
class RememberLintWarning:
    code: RememberLintWarningCode
    message: str = ""
    candidate_ids: list[str] = field(default_factory=list)


@dataclass
class RememberLintSuggestion:
    code: RememberLintSuggestionCode
    message: str = ""
    candidate_ids: list[str] = field(default_factory=list)
    proposed_contents: list[str] = field(default_factory=list)


@dataclass
class RememberLintResult:
    candidates: list[ScoredMemory] = field(default_factory=list)
    warnings: list[RememberLintWarning] = field(default_factory=list)
    suggestions: list[RememberLintSuggestion] = field(default_factory=list)


@runtime_checkable
class Embedder(Protocol):
    """Turns text into a fixed-size vector for one embedding model."""

    @property
    def dimensions(self) -> int: ...

    @property
    def model_id(self) -> str: ...

    def embed(self, text: str) -> list[float]: ...