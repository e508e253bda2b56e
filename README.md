# omnethdb

Building blocks for governed, versioned memory for agents. A memory belongs to
a *space*, has a *kind* (episodic, static or derived), is written by an *actor*
(human, agent or system) and sits in a *lineage*: a newer version supersedes an
older one, a forgotten memory leaves the live corpus but stays in history and
in the audit log, and a derived memory records the sources it was inferred
from.

The package needs nothing beyond the Python 3.11+ standard library.

## Modules

| Module | What it holds |
| --- | --- |
| `omnethdb.models` | Dataclasses and enums: `Memory`, `ScoredMemory`, `Actor`, `MemoryKind`, `ActorKind`, `RelationType`, `MemoryRelations`, `SpaceConfig`, `SpaceWritePolicy`, `WritersPolicy`, `AuditEntry`, `ForgetRecord`, request and result types (`MemoryInput`, `RecallRequest`, `ProfileRequest`, `FindCandidatesRequest`, `RememberLintResult`, …) and the `Embedder` protocol. `Memory.lineage_root()` gives a memory's root id; `Memory.to_dict()` gives a JSON-ready mapping. |
| `omnethdb.errors` | `OmnethError` and one subclass per failure, e.g. `InvalidSpaceIDError`, `InvalidActorError`-style checks (`InvalidActorIDError`, `InvalidActorKindError`), `MemoryNotFoundError`, `PolicyViolationError`, `CorpusLimitError`. Validation errors are also `ValueError`s, not-found errors also `LookupError`s. |
| `omnethdb.validate` | `validate_space_id`, `validate_memory_id`, `validate_content`, `validate_memory_kind`, `validate_actor_kind`, `validate_actor`, `validate_confidence`, `validate_writers_policy`, `validate_space_write_policy`, `validate_space_config`. Each returns `None` or raises the matching error. |
| `omnethdb.policy` | `default_space_write_policy`, `normalize_space_write_policy` (fills unset fields from the defaults, returns a copy), `resolve_actor_trust`, `can_write_kind`, `can_promote`. |
| `omnethdb.config` | Workspace layout and TOML runtime config: `resolve_layout`, `prepare_workspace`, `load_config`, `Config` (`from_mapping`, `space_settings`, `space_init`), `SpaceInit`, `SpaceSettings`, `RuntimeWritersPolicy`, `RuntimeEmbedderConfig`, `Layout`. |
| `omnethdb.reconcile` | `reconcile_space_config` compares a persisted `SpaceConfig` with what a `Config` asks for and returns a `SpaceConfigReconcile` listing changes, warnings, errors and whether the result can be applied. |
| `omnethdb.history` | `filter_audit_entries` (by space and start time, oldest first) and `lineage_history` (every version of a lineage, ordered by version). |
| `omnethdb.snapshot` | Point-in-time export: `build_snapshot`, `project_memories_as_of`, `collect_live_memories`, `build_export_lineages`, `collect_export_edges`, `render_summary_markdown`, `render_graph_mermaid`. |
| `omnethdb.export` | Snapshot and diff types (`ExportSnapshot`, `ExportLineage`, `ExportEdge`, `ExportDiff`, …) and `compare_export_snapshots`. |
| `omnethdb.candidates` | `is_candidate_eligible` and `rank_candidates`, which orders already-scored memories by score, newest first on ties, then by id. |
| `omnethdb.mcp_server` | A JSON-RPC tool server that speaks `Content-Length` framed messages or newline-delimited JSON: `Server`, the `Tool` protocol, `ToolDefinition`, `ToolResult`, `ToolContent`, `read_message`, `write_message`. |
| `omnethdb.mcp_schema` | JSON-schema helpers (`object_schema`, `required_prop`, `optional_prop`, `array_prop`, `required_array_prop`) and `tool_definitions()`, the definitions of the ten memory tools. |
| `omnethdb.mcp_tools` | Helpers for tool results and arguments: `json_result`, `structured_content_for`, `preview_text`, `compact_memories`, `CompactProfile`, and the `parse_memory_kind`, `parse_actor`, `parse_relation_type` parsers. |

## Validation

```python
from omnethdb.errors import InvalidSpaceIDError
from omnethdb.validate import validate_space_id

validate_space_id("repo:company/app")   # letters, digits and _:/- only, 1 to 256 chars
try:
    validate_space_id("repo with space")
except InvalidSpaceIDError:
    ...
```

## Runtime configuration

A workspace directory holds `config.toml` and a `data/` directory.
`resolve_layout` gives the absolute paths; `prepare_workspace` also creates
`data/`. `load_config` returns an empty `Config` when the file is missing.

```python
from omnethdb.config import SpaceInit, load_config, resolve_layout
from omnethdb.policy import default_space_write_policy

layout = resolve_layout("./workspace")
config = load_config(layout.config_path)
init = config.space_init(
    "repo:company/app",
    SpaceInit(default_weight=1.0, half_life_days=30,
              write_policy=default_space_write_policy()),
)
```

`config.toml` looks like this; every key is optional:

```toml
[spaces."repo:company/app"]
default_weight = 0.25
half_life_days = 7
max_static_memories = 500
max_episodic_memories = 10000
profile_max_static = 50
profile_max_episodic = 10
human_trust = 1.0
system_trust = 1.0
default_agent_trust = 0.7

[spaces."repo:company/app".static_writers]
allow_human = true
allow_system = true
allow_all_agents = false
allowed_agent_ids = ["agent:claude"]
min_trust_level = 0.3

[spaces."repo:company/app".embedder]
model_id = "builtin/hash-embedder-v1"
dimensions = 256
```

The writers tables are `episodic_writers`, `static_writers`,
`derived_writers` and `promote_policy`. A value of the wrong type raises
`TypeError`.

`reconcile_space_config(config, space_id, persisted)` reports the difference
between a persisted config and these overrides. A change of embedding model or
dimension is reported but marked as not applyable, since it needs an explicit
embedding migration; so is a desired config that fails validation.

## Snapshots and exports

```python
from datetime import datetime, timezone
from omnethdb.snapshot import build_snapshot, render_summary_markdown, render_graph_mermaid
from omnethdb.export import compare_export_snapshots

before = build_snapshot("repo:company/app", memories, audit, as_of=datetime(2025, 1, 1, tzinfo=timezone.utc))
after = build_snapshot("repo:company/app", memories, audit)   # as of now
print(render_summary_markdown(after))
print(render_graph_mermaid(after))
diff = compare_export_snapshots(before, after)
```

`build_snapshot` takes `Memory` and `AuditEntry` records and rebuilds the
space as it stood at `as_of`: which memories were latest, forgotten (from
`forget` audit entries) or orphaned, the live corpus, each lineage's history,
the relation edges and the audit timeline up to that moment. The diff lists
memories added to and removed from the live corpus, newly orphaned derived
memories, new audit entries and lineages whose latest version or version count
changed.

## Tool server

A tool is any object with `definition()` returning a `ToolDefinition` and
`call(arguments)` returning a `ToolResult`:

```python
import sys
from omnethdb.mcp_server import Server, ToolDefinition
from omnethdb.mcp_tools import json_result

class Echo:
    def definition(self):
        return ToolDefinition(name="echo", description="Echo arguments",
                              input_schema={"type": "object"})

    def call(self, arguments):
        return json_result(arguments)

Server("omnethdb-mcp", "0.1.0", [Echo()]).serve(sys.stdin.buffer, sys.stdout.buffer)
```

The server answers `initialize` (echoing the requested `protocolVersion`,
default `2025-03-26`), `ping`, `logging/setLevel`, `tools/list` and
`tools/call`; returns empty results for the resources, prompts, roots and
completion methods; stays silent on notifications; and replies
`method not found` (-32601) to anything else. Undecodable input gets a framed
`parse error` (-32700). An unknown tool or an exception raised by a tool
becomes a result with `isError` set. Replies use the wire mode of the first
valid message. `serve` returns when the input ends.

## What the package does not do

There is no storage engine: nothing here persists memories, writes
`data/memory.db`, or performs remember, recall, forget, revive or profile
operations, and no embedder is included (`Embedder` is only a protocol).
`rank_candidates` orders scores it is given; it does not compute similarity.
`tool_definitions()` describes the memory tools, but the package ships no tool
objects that carry them out, and it installs no command-line program.