"""Workspace layout and per-space runtime configuration loaded from TOML."""

from __future__ import annotations

import copy
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import InvalidContentError
from .models import SpaceWritePolicy, WritersPolicy
from .policy import normalize_space_write_policy


@dataclass(frozen=True)
class Layout:
    """Fixed file locations inside a workspace directory."""

    root_dir: str
    config_path: str
    data_dir: str
    data_path: str


@dataclass
class SpaceInit:
    """Settings used when a space is first created."""

    default_weight: float = 0.0
    half_life_days: float = 0.0
    write_policy: SpaceWritePolicy = field(default_factory=SpaceWritePolicy)


@dataclass
class RuntimeEmbedderConfig:
    model_id: str = ""
    dimensions: int = 0


@dataclass
class RuntimeWritersPolicy:
    """Partial writers policy; ``None`` fields leave the base value alone."""

    allow_human: bool | None = None
    allow_system: bool | None = None
    allow_all_agents: bool | None = None
    allowed_agent_ids: list[str] | None = None
    min_trust_level: float | None = None


@dataclass
class SpaceSettings:
    """Runtime overrides for one space; ``None`` fields are not overridden."""

    default_weight: float | None = None
    half_life_days: float | None = None
    max_static_memories: int | None = None
    max_episodic_memories: int | None = None
    profile_max_static: int | None = None
    profile_max_episodic: int | None = None
    human_trust: float | None = None
    system_trust: float | None = None
    default_agent_trust: float | None = None
    episodic_writers: RuntimeWritersPolicy = field(default_factory=RuntimeWritersPolicy)
    static_writers: RuntimeWritersPolicy = field(default_factory=RuntimeWritersPolicy)
    derived_writers: RuntimeWritersPolicy = field(default_factory=RuntimeWritersPolicy)
    promote_policy: RuntimeWritersPolicy = field(default_factory=RuntimeWritersPolicy)
    embedder: RuntimeEmbedderConfig = field(default_factory=RuntimeEmbedderConfig)


_FLOAT_KEYS = ("default_weight", "half_life_days", "human_trust", "system_trust", "default_agent_trust")
_INT_KEYS = ("max_static_memories", "max_episodic_memories", "profile_max_static", "profile_max_episodic")
_WRITER_KEYS = ("episodic_writers", "static_writers", "derived_writers", "promote_policy")


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{key}: expected a number, got {type(value).__name__}")
    return float(value)


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{key}: expected an integer, got {type(value).__name__}")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{key}: expected a boolean, got {type(value).__name__}")
    return value


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{key}: expected a string, got {type(value).__name__}")
    return value


def _as_mapping(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{key}: expected a table, got {type(value).__name__}")
    return value


def _as_str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise TypeError(f"{key}: expected an array, got {type(value).__name__}")
    return [_as_str(item, key) for item in value]


def _parse_writers(data: Any, key: str) -> RuntimeWritersPolicy:
    table = _as_mapping(data, key)
    out = RuntimeWritersPolicy()
    for name in ("allow_human", "allow_system", "allow_all_agents"):
        if name in table:
            setattr(out, name, _as_bool(table[name], f"{key}.{name}"))
    if "allowed_agent_ids" in table:
        out.allowed_agent_ids = _as_str_list(table["allowed_agent_ids"], f"{key}.allowed_agent_ids")
    if "min_trust_level" in table:
        out.min_trust_level = _as_float(table["min_trust_level"], f"{key}.min_trust_level")
    return out


def _parse_embedder(data: Any, key: str) -> RuntimeEmbedderConfig:
    table = _as_mapping(data, key)
    out = RuntimeEmbedderConfig()
    if "model_id" in table:
        out.model_id = _as_str(table["model_id"], f"{key}.model_id")
    if "dimensions" in table:
        out.dimensions = _as_int(table["dimensions"], f"{key}.dimensions")
    return out


def _parse_space_settings(data: Any, space_id: str) -> SpaceSettings:
    table = _as_mapping(data, f"spaces.{space_id}")
    settings = SpaceSettings()
    for name in _FLOAT_KEYS:
        if name in table:
            setattr(settings, name, _as_float(table[name], name))
    for name in _INT_KEYS:
        if name in table:
            setattr(settings, name, _as_int(table[name], name))
    for name in _WRITER_KEYS:
        if name in table:
            setattr(settings, name, _parse_writers(table[name], name))
    if "embedder" in table:
        settings.embedder = _parse_embedder(table["embedder"], "embedder")
    return settings


def _apply_writers_policy(base: WritersPolicy, override: RuntimeWritersPolicy) -> WritersPolicy:
    out = copy.deepcopy(base)
    if override.allow_human is not None:
        out.allow_human = override.allow_human
    if override.allow_system is not None:
        out.allow_system = override.allow_system
    if override.allow_all_agents is not None:
        out.allow_all_agents = override.allow_all_agents
    if override.allowed_agent_ids is not None:
        out.allowed_agent_ids = list(override.allowed_agent_ids)
    if override.min_trust_level is not None:
        out.min_trust_level = override.min_trust_level
    return out


@dataclass
class Config:
    """Runtime configuration: per-space overrides keyed by space id."""

    spaces: dict[str, SpaceSettings] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Config:
        """Build a config from a decoded TOML document."""
        spaces_table = data.get("spaces")
        if spaces_table is None:
            return cls()
        spaces = _as_mapping(spaces_table, "spaces")
        return cls(
            spaces={
                str(space_id): _parse_space_settings(raw, str(space_id))
                for space_id, raw in spaces.items()
            }
        )

    def space_settings(self, space_id: str) -> SpaceSettings | None:
        """Return the overrides for ``space_id``, or ``None`` if there are none."""
        return self.spaces.get(space_id)

    def space_init(self, space_id: str, fallback: SpaceInit) -> SpaceInit:
        """Apply this space's overrides on top of ``fallback``."""
        init = copy.deepcopy(fallback)
        settings = self.spaces.get(space_id)
        if settings is None:
            return init

        if settings.default_weight is not None:
            init.default_weight = settings.default_weight
        if settings.half_life_days is not None:
            init.half_life_days = settings.half_life_days

        policy = normalize_space_write_policy(init.write_policy)
        for name in _INT_KEYS + ("human_trust", "system_trust", "default_agent_trust"):
            value = getattr(settings, name)
            if value is not None:
                setattr(policy, name, value)
        for name in _WRITER_KEYS:
            setattr(policy, name, _apply_writers_policy(getattr(policy, name), getattr(settings, name)))
        init.write_policy = policy
        return init


def resolve_layout(root: str | os.PathLike[str]) -> Layout:
    """Return the absolute file layout of the workspace at ``root``."""
    root_text = os.fspath(root)
    if not root_text.strip():
        raise InvalidContentError()
    abs_root = os.path.abspath(root_text)
    return Layout(
        root_dir=abs_root,
        config_path=os.path.join(abs_root, "config.toml"),
        data_dir=os.path.join(abs_root, "data"),
        data_path=os.path.join(abs_root, "data", "memory.db"),
    )


def prepare_workspace(root: str | os.PathLike[str]) -> Layout:
    """Resolve the workspace layout and make sure its data directory exists."""
    layout = resolve_layout(root)
    os.makedirs(layout.data_dir, mode=0o755, exist_ok=True)
    return layout


def load_config(path: str | os.PathLike[str] | None) -> Config:
    """Load the runtime config at ``path``; a missing file gives an empty config."""
    if path is None or not os.fspath(path).strip():
        return Config()
    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except FileNotFoundError:
        return Config()
    return Config.from_mapping(data)