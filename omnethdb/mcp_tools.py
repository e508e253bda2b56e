"""Argument parsing and result shaping shared by the memory tools."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .mcp_server import ToolContent, ToolResult
from .models import Actor, ActorKind, MemoryKind, RelationType

_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)

_INVALID_ACTOR_KIND = int(ActorKind.SYSTEM) + 99


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _actor_dict(actor: Actor) -> dict[str, Any]:
    return {"ID": actor.id, "Kind": _enum_value(actor.kind)}


def _to_jsonable(value: Any) -> Any:
    """Turn ``value`` into plain JSON-compatible data."""
    if value is None or isinstance(value, (bool, int, float, str)) and not isinstance(value, Enum):
        return value
    if isinstance(value, Enum):
        return _to_jsonable(value.value)
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return _to_jsonable(to_dict())
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat().replace("+00:00", "Z")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: _to_jsonable(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_to_jsonable(item) for item in value]
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def _escape(text: str) -> str:
    for raw, escaped in _HTML_ESCAPES:
        text = text.replace(raw, escaped)
    return text


@dataclass
class CompactScoredMemory:
    """A scored memory reduced to a short content preview."""

    id: str
    space_id: str
    kind: str
    content_preview: str
    score: float
    confidence: float
    actor: Actor
    version: int
    latest: bool
    forgotten: bool
    orphaned: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "space_id": self.space_id,
            "kind": self.kind,
            "content_preview": self.content_preview,
            "score": self.score,
            "confidence": self.confidence,
            "actor": _actor_dict(self.actor),
            "version": self.version,
            "latest": self.latest,
            "forgotten": self.forgotten,
            "orphaned": self.orphaned,
        }


@dataclass
class CompactProfile:
    """A layered profile whose layers hold compact memories."""

    static: list[CompactScoredMemory] = field(default_factory=list)
    episodic: list[CompactScoredMemory] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form; an empty layer is encoded as ``null``."""
        return {
            "static": [mem.to_dict() for mem in self.static] or None,
            "episodic": [mem.to_dict() for mem in self.episodic] or None,
        }


def structured_content_for(value: Any) -> dict[str, Any]:
    """Return ``value`` as a JSON object, wrapping non-objects in a record."""
    decoded = json.loads(json.dumps(_to_jsonable(value)))
    if isinstance(decoded, dict):
        return decoded
    return {"result": decoded, "type": type(value).__name__}


def json_result(value: Any) -> ToolResult:
    """Return a tool result carrying ``value`` as indented JSON text and structured data."""
    text = _escape(json.dumps(_to_jsonable(value), indent=2, ensure_ascii=False))
    return ToolResult(
        content=[ToolContent(type="text", text=text)],
        structured_content=structured_content_for(value),
    )


def preview_text(value: str, max_chars: int) -> str:
    """Collapse whitespace and shorten to ``max_chars`` characters, ending with an ellipsis."""
    text = " ".join(value.split())
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    if max_chars <= 1:
        return text[:max_chars]
    return text[: max_chars - 1] + "…"


def memory_kind_label(kind: MemoryKind | int) -> str:
    """Return the lower-case label of a memory kind."""
    labels = {
        MemoryKind.EPISODIC: "episodic",
        MemoryKind.STATIC: "static",
        MemoryKind.DERIVED: "derived",
    }
    return labels.get(kind, "unknown")


def parse_memory_kind(raw: str) -> MemoryKind:
    """Parse a memory kind name; anything unrecognised gives the unknown kind."""
    kinds = {
        "episodic": MemoryKind.EPISODIC,
        "static": MemoryKind.STATIC,
        "derived": MemoryKind.DERIVED,
    }
    return kinds.get((raw or "").strip().lower(), MemoryKind.UNKNOWN)


def parse_memory_kinds(raw: Iterable[str] | None) -> list[MemoryKind]:
    """Parse every kind name in ``raw``."""
    return [parse_memory_kind(item) for item in raw or ()]


def parse_actor_kind(raw: str) -> ActorKind | int:
    """Parse an actor kind name; anything unrecognised gives an invalid kind."""
    kinds = {
        "human": ActorKind.HUMAN,
        "agent": ActorKind.AGENT,
        "system": ActorKind.SYSTEM,
    }
    return kinds.get((raw or "").strip().lower(), _INVALID_ACTOR_KIND)


def parse_actor(actor_id: str, kind: str) -> Actor:
    """Build an actor from an id and a kind name."""
    return Actor(id=actor_id, kind=parse_actor_kind(kind))


def parse_relation_type(raw: str) -> RelationType | str:
    """Parse a relation name; unknown names are returned unchanged."""
    relations = {
        "updates": RelationType.UPDATES,
        "extends": RelationType.EXTENDS,
        "derives": RelationType.DERIVES,
    }
    return relations.get((raw or "").strip().lower(), raw)


def compact_memories(memories: Iterable[Any], preview_chars: int) -> list[CompactScoredMemory]:
    """Reduce scored memories to compact previews of at most ``preview_chars`` characters."""
    return [
        CompactScoredMemory(
            id=mem.id,
            space_id=mem.space_id,
            kind=memory_kind_label(mem.kind),
            content_preview=preview_text(mem.content, preview_chars),
            score=mem.score,
            confidence=mem.confidence,
            actor=mem.actor,
            version=mem.version,
            latest=mem.is_latest,
            forgotten=mem.is_forgotten,
            orphaned=mem.has_orphaned_sources,
        )
        for mem in memories
    ]