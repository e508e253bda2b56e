"""JSON schemas and definitions of the memory tools offered over the tool server."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .mcp_server import ToolDefinition


@dataclass
class SchemaProp:
    """One property of an object schema."""

    name: str
    schema: dict[str, Any] = field(default_factory=dict)
    required: bool = False


def object_schema(*args: SchemaProp) -> dict[str, Any]:
    """Build an object schema from properties; ``required`` lists them in order."""
    out: dict[str, Any] = {
        "type": "object",
        "properties": {prop.name: prop.schema for prop in args},
    }
    required = [prop.name for prop in args if prop.required]
    if required:
        out["required"] = required
    return out


def _scalar(type_: str, description: str) -> dict[str, Any]:
    return {"type": type_, "description": description}


def _array(item_type: str, description: str) -> dict[str, Any]:
    return {"type": "array", "description": description, "items": {"type": item_type}}


def required_prop(name: str, type_: str, description: str) -> SchemaProp:
    return SchemaProp(name=name, schema=_scalar(type_, description), required=True)


def optional_prop(name: str, type_: str, description: str) -> SchemaProp:
    return SchemaProp(name=name, schema=_scalar(type_, description))


def array_prop(name: str, item_type: str, description: str) -> SchemaProp:
    return SchemaProp(name=name, schema=_array(item_type, description))


def required_array_prop(name: str, item_type: str, description: str) -> SchemaProp:
    return SchemaProp(name=name, schema=_array(item_type, description), required=True)


def tool_definitions() -> list[ToolDefinition]:
    """Return the definitions of every memory tool, in registration order."""
    return [
        ToolDefinition(
            name="space_init",
            description="Bootstrap a space so an agent can start writing and recalling governed memories.",
            input_schema=object_schema(
                required_prop("space_id", "string", "Space ID like repo:company/app."),
            ),
        ),
        ToolDefinition(
            name="memory_lint_remember",
            description=(
                "Advisory lint for a candidate memory write. Returns possible duplicate, "
                "update-target, or blob warnings without writing anything."
            ),
            input_schema=object_schema(
                required_prop("space_id", "string", "Target space ID."),
                required_prop("content", "string", "Candidate memory content."),
                required_prop("kind", "string", "episodic, static, or derived."),
                optional_prop("actor_id", "string", "Writer actor ID."),
                optional_prop("actor_kind", "string", "human, agent, or system."),
                optional_prop("confidence", "number", "Confidence 0..1."),
                optional_prop("update_id", "string", "Optional memory ID this write intends to update."),
                array_prop("extends", "string", "Optional explicit extends targets."),
                array_prop("source_ids", "string", "Optional source ids for derived writes."),
                optional_prop("rationale", "string", "Optional rationale for derived writes."),
                optional_prop("top_k", "integer", "Top similar live memories to inspect."),
            ),
        ),
        ToolDefinition(
            name="memory_remember",
            description=(
                "Write a memory into OmnethDB with explicit kind, actor, and optional "
                "lineage/derivation relations."
            ),
            input_schema=object_schema(
                required_prop("space_id", "string", "Target space ID."),
                required_prop("content", "string", "Memory content."),
                required_prop("kind", "string", "episodic, static, or derived."),
                optional_prop("actor_id", "string", "Writer actor ID."),
                optional_prop("actor_kind", "string", "human, agent, or system."),
                optional_prop("confidence", "number", "Confidence 0..1."),
                optional_prop("update_id", "string", "Optional memory ID to supersede."),
                array_prop("extends", "string", "Optional explicit extends targets."),
                array_prop("source_ids", "string", "Required for derived memories."),
                optional_prop("rationale", "string", "Required for derived memories."),
                optional_prop("if_latest_id", "string", "Optional optimistic-lock latest ID."),
                optional_prop("forget_after", "string", "Optional RFC3339 TTL timestamp."),
            ),
        ),
        ToolDefinition(
            name="memory_forget",
            description=(
                "Forget a memory so it leaves the live corpus while staying inspectable "
                "in history and audit."
            ),
            input_schema=object_schema(
                required_prop("memory_id", "string", "Memory ID to forget."),
                required_prop("actor_id", "string", "Actor performing the forget."),
                required_prop("actor_kind", "string", "human, agent, or system."),
                required_prop("reason", "string", "Why this memory should leave the live corpus."),
            ),
        ),
        ToolDefinition(
            name="memory_recall",
            description=(
                "Recall live current knowledge from one or more spaces without "
                "traversing graph history."
            ),
            input_schema=object_schema(
                required_array_prop("space_ids", "string", "Requested spaces."),
                required_prop("query", "string", "Recall query."),
                optional_prop("top_k", "integer", "Maximum number of results."),
                array_prop("kinds", "string", "Optional memory kind filters."),
                optional_prop("exclude_orphaned", "boolean", "Exclude orphaned derived memories."),
            ),
        ),
        ToolDefinition(
            name="memory_profile",
            description=(
                "Build a layered profile for agent initialization with static and "
                "episodic slices kept separate."
            ),
            input_schema=object_schema(
                required_array_prop("space_ids", "string", "Requested spaces."),
                required_prop("query", "string", "Profile query."),
                optional_prop("static_top_k", "integer", "Static layer size."),
                optional_prop("episodic_top_k", "integer", "Episodic layer size."),
                optional_prop("exclude_orphaned", "boolean", "Exclude orphaned derived memories."),
            ),
        ),
        ToolDefinition(
            name="memory_profile_compact",
            description=(
                "Build a compact layered profile for agent initialization using short "
                "previews instead of full memory content."
            ),
            input_schema=object_schema(
                required_array_prop("space_ids", "string", "Requested spaces."),
                required_prop("query", "string", "Profile query."),
                optional_prop("static_top_k", "integer", "Static layer size."),
                optional_prop("episodic_top_k", "integer", "Episodic layer size."),
                optional_prop("preview_chars", "integer", "Maximum preview length for each memory."),
                optional_prop("exclude_orphaned", "boolean", "Exclude orphaned derived memories."),
            ),
        ),
        ToolDefinition(
            name="memory_lineage",
            description=(
                "Inspect the full lineage history for a root memory, including "
                "superseded and forgotten versions."
            ),
            input_schema=object_schema(
                required_prop("root_id", "string", "Root memory ID."),
            ),
        ),
        ToolDefinition(
            name="memory_related",
            description="Traverse explicit stored relations for inspection without changing retrieval semantics.",
            input_schema=object_schema(
                required_prop("memory_id", "string", "Memory ID to inspect."),
                required_prop("relation", "string", "updates, extends, or derives."),
                optional_prop("depth", "integer", "Traversal depth."),
            ),
        ),
        ToolDefinition(
            name="memory_export_summary",
            description=(
                "Render a human-readable Markdown summary of the current cold-path "
                "memory state for a space."
            ),
            input_schema=object_schema(
                required_prop("space_id", "string", "Target space ID."),
            ),
        ),
    ]