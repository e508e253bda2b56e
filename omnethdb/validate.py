"""Validation of identifiers, actors and space configuration."""

from __future__ import annotations

import re

from .errors import (
    InvalidActorIDError,
    InvalidActorKindError,
    InvalidConfidenceError,
    InvalidContentError,
    InvalidDefaultWeightError,
    InvalidDimensionError,
    InvalidHalfLifeError,
    InvalidMemoryIDError,
    InvalidMemoryKindError,
    InvalidSpaceConfigError,
    InvalidSpaceIDError,
    InvalidSpaceWritePolicyError,
    InvalidTrustLevelError,
    InvalidWritersPolicyError,
)
from .models import Actor, ActorKind, MemoryKind, SpaceConfig, SpaceWritePolicy, WritersPolicy

_SPACE_ID_PATTERN = re.compile(r"[a-zA-Z0-9_:/-]{1,256}")

_VALID_MEMORY_KINDS = (MemoryKind.EPISODIC, MemoryKind.STATIC, MemoryKind.DERIVED)
_VALID_ACTOR_KINDS = (ActorKind.HUMAN, ActorKind.AGENT, ActorKind.SYSTEM)


def validate_space_id(space_id: str) -> None:
    if not isinstance(space_id, str) or _SPACE_ID_PATTERN.fullmatch(space_id) is None:
        raise InvalidSpaceIDError()


def validate_memory_id(memory_id: str) -> None:
    if not memory_id.strip():
        raise InvalidMemoryIDError()


def validate_content(content: str) -> None:
    if not content.strip():
        raise InvalidContentError()


def validate_memory_kind(kind: MemoryKind | int) -> None:
    if kind not in _VALID_MEMORY_KINDS:
        raise InvalidMemoryKindError()


def validate_actor_kind(kind: ActorKind | int) -> None:
    if kind not in _VALID_ACTOR_KINDS:
        raise InvalidActorKindError()


def validate_actor(actor: Actor) -> None:
    if not actor.id.strip():
        raise InvalidActorIDError()
    validate_actor_kind(actor.kind)


def validate_confidence(confidence: float) -> None:
    if confidence < 0 or confidence > 1:
        raise InvalidConfidenceError()


def validate_writers_policy(policy: WritersPolicy) -> None:
    if policy.min_trust_level < 0 or policy.min_trust_level > 1:
        raise InvalidWritersPolicyError()


def _validate_trust_level(value: float) -> None:
    if value < 0 or value > 1:
        raise InvalidTrustLevelError()


def validate_space_write_policy(policy: SpaceWritePolicy) -> None:
    trusts = [policy.human_trust, policy.system_trust, policy.default_agent_trust]
    trusts.extend(policy.trust_levels.values())
    for trust in trusts:
        try:
            _validate_trust_level(trust)
        except InvalidTrustLevelError as exc:
            raise InvalidSpaceWritePolicyError() from exc

    for writers in (
        policy.episodic_writers,
        policy.static_writers,
        policy.derived_writers,
        policy.promote_policy,
    ):
        try:
            validate_writers_policy(writers)
        except InvalidWritersPolicyError as exc:
            raise InvalidSpaceWritePolicyError() from exc

    if policy.max_static_memories < 0 or policy.max_episodic_memories < 0:
        raise InvalidSpaceWritePolicyError()
    if policy.profile_max_static < 0 or policy.profile_max_episodic < 0:
        raise InvalidSpaceWritePolicyError()


def validate_space_config(config: SpaceConfig) -> None:
    if not config.embedding_model_id.strip():
        raise InvalidSpaceConfigError()
    if config.dimension <= 0:
        raise InvalidSpaceConfigError() from InvalidDimensionError()
    if config.default_weight <= 0:
        raise InvalidSpaceConfigError() from InvalidDefaultWeightError()
    if config.half_life_days <= 0:
        raise InvalidSpaceConfigError() from InvalidHalfLifeError()
    try:
        validate_space_write_policy(config.write_policy)
    except InvalidSpaceWritePolicyError as exc:
        raise InvalidSpaceConfigError() from exc
    if config.migrating:
        if not config.migration_target_model_id.strip():
            raise InvalidSpaceConfigError()
        if config.migration_target_dimension <= 0:
            raise InvalidSpaceConfigError() from InvalidDimensionError()