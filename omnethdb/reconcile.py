"""Comparison of a persisted space config with the runtime config's wishes."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from .config import Config, SpaceInit
from .errors import OmnethError
from .models import SpaceConfig
from .validate import validate_space_config


@dataclass
class SpaceConfigChange:
    field: str
    persisted: Any
    desired: Any
    applyable: bool = True
    reason: str = ""


@dataclass
class SpaceConfigReconcile:
    space_id: str
    persisted: SpaceConfig
    desired: SpaceConfig
    has_runtime_settings: bool = False
    changes: list[SpaceConfigChange] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    applyable: bool = True

    def _add_change(self, name: str, persisted: Any, desired: Any) -> None:
        if type(persisted) is type(desired) and persisted == desired:
            return
        self.changes.append(SpaceConfigChange(field=name, persisted=persisted, desired=desired))

    def _block_change(self, name: str, reason: str) -> None:
        for change in self.changes:
            if change.field == name:
                change.applyable = False
                change.reason = reason


def reconcile_space_config(config: Config, space_id: str, persisted: SpaceConfig) -> SpaceConfigReconcile:
    """Report how ``config`` would change the persisted config of ``space_id``."""
    out = SpaceConfigReconcile(
        space_id=space_id,
        persisted=persisted,
        desired=copy.deepcopy(persisted),
    )

    settings = config.space_settings(space_id)
    out.has_runtime_settings = settings is not None
    if settings is None:
        out.warnings.append("no runtime config overrides found for this space")
        return out

    init = config.space_init(
        space_id,
        SpaceInit(
            default_weight=persisted.default_weight,
            half_life_days=persisted.half_life_days,
            write_policy=persisted.write_policy,
        ),
    )
    desired = out.desired
    desired.default_weight = init.default_weight
    desired.half_life_days = init.half_life_days
    desired.write_policy = init.write_policy

    model_id = settings.embedder.model_id
    dimensions = settings.embedder.dimensions
    if model_id.strip() or dimensions > 0:
        if not model_id.strip() or dimensions <= 0:
            out.errors.append("runtime embedder override must set both model_id and dimensions")
            out.applyable = False
        else:
            desired.embedding_model_id = model_id
            desired.dimension = dimensions

    out._add_change("embedding_model_id", persisted.embedding_model_id, desired.embedding_model_id)
    out._add_change("dimension", persisted.dimension, desired.dimension)
    out._add_change("default_weight", persisted.default_weight, desired.default_weight)
    out._add_change("half_life_days", persisted.half_life_days, desired.half_life_days)
    out._add_change("write_policy", persisted.write_policy, desired.write_policy)

    if (
        persisted.embedding_model_id != desired.embedding_model_id
        or persisted.dimension != desired.dimension
    ):
        out.applyable = False
        reason = "embedder config drift requires explicit embedding migration"
        out.errors.append(reason)
        out._block_change("embedding_model_id", reason)
        out._block_change("dimension", reason)

    try:
        validate_space_config(desired)
    except OmnethError as exc:
        out.applyable = False
        out.errors.append(f"desired config invalid: {exc}")

    return out