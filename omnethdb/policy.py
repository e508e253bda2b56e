"""Write policy defaults, normalisation, trust resolution and permission checks."""

from __future__ import annotations

import copy

from .models import Actor, ActorKind, MemoryKind, SpaceWritePolicy, WritersPolicy


def default_space_write_policy() -> SpaceWritePolicy:
    """Return the policy a space gets when nothing else is configured."""
    return SpaceWritePolicy(
        human_trust=1.0,
        system_trust=1.0,
        default_agent_trust=0.7,
        trust_levels={},
        episodic_writers=WritersPolicy(
            allow_human=True,
            allow_system=True,
            allow_all_agents=True,
        ),
        static_writers=WritersPolicy(allow_human=True, allow_system=True),
        derived_writers=WritersPolicy(allow_human=True, allow_all_agents=True),
        promote_policy=WritersPolicy(allow_human=True),
        max_static_memories=500,
        max_episodic_memories=10000,
        profile_max_static=50,
        profile_max_episodic=10,
    )


def _is_zero_writers_policy(policy: WritersPolicy) -> bool:
    return (
        not policy.allow_human
        and not policy.allow_system
        and not policy.allow_all_agents
        and not policy.allowed_agent_ids
        and policy.min_trust_level == 0
    )


def normalize_space_write_policy(policy: SpaceWritePolicy) -> SpaceWritePolicy:
    """Return a copy of ``policy`` with every unset field filled from the defaults."""
    defaults = default_space_write_policy()
    out = copy.deepcopy(policy)

    if out.human_trust == 0:
        out.human_trust = defaults.human_trust
    if out.system_trust == 0:
        out.system_trust = defaults.system_trust
    if out.default_agent_trust == 0:
        out.default_agent_trust = defaults.default_agent_trust
    if out.trust_levels is None:
        out.trust_levels = {}

    if _is_zero_writers_policy(out.episodic_writers):
        out.episodic_writers = defaults.episodic_writers
    if _is_zero_writers_policy(out.static_writers):
        out.static_writers = defaults.static_writers
    if _is_zero_writers_policy(out.derived_writers):
        out.derived_writers = defaults.derived_writers
    if _is_zero_writers_policy(out.promote_policy):
        out.promote_policy = defaults.promote_policy

    if out.max_static_memories == 0:
        out.max_static_memories = defaults.max_static_memories
    if out.max_episodic_memories == 0:
        out.max_episodic_memories = defaults.max_episodic_memories
    if out.profile_max_static == 0:
        out.profile_max_static = defaults.profile_max_static
    if out.profile_max_episodic == 0:
        out.profile_max_episodic = defaults.profile_max_episodic

    return out


def resolve_actor_trust(policy: SpaceWritePolicy, actor: Actor) -> float:
    """Return the trust level the policy assigns to ``actor``."""
    policy = normalize_space_write_policy(policy)

    if actor.id in policy.trust_levels:
        return policy.trust_levels[actor.id]

    if actor.kind == ActorKind.HUMAN:
        return policy.human_trust
    if actor.kind == ActorKind.SYSTEM:
        return policy.system_trust
    if actor.kind == ActorKind.AGENT:
        return policy.default_agent_trust
    return 0.0


def _is_actor_allowed(writers: WritersPolicy, policy: SpaceWritePolicy, actor: Actor) -> bool:
    if resolve_actor_trust(policy, actor) < writers.min_trust_level:
        return False

    if actor.kind == ActorKind.HUMAN:
        return actor.id in writers.allowed_agent_ids or writers.allow_human
    if actor.kind == ActorKind.SYSTEM:
        return actor.id in writers.allowed_agent_ids or writers.allow_system
    if actor.kind == ActorKind.AGENT:
        return writers.allow_all_agents or actor.id in writers.allowed_agent_ids
    return False


def can_write_kind(policy: SpaceWritePolicy, actor: Actor, kind: MemoryKind | int) -> bool:
    """Tell whether ``actor`` may write memories of ``kind`` under ``policy``."""
    if kind == MemoryKind.EPISODIC:
        return _is_actor_allowed(policy.episodic_writers, policy, actor)
    if kind == MemoryKind.STATIC:
        return _is_actor_allowed(policy.static_writers, policy, actor)
    if kind == MemoryKind.DERIVED:
        return _is_actor_allowed(policy.derived_writers, policy, actor)
    return False


def can_promote(policy: SpaceWritePolicy, actor: Actor) -> bool:
    """Tell whether ``actor`` may promote memories under ``policy``."""
    return _is_actor_allowed(policy.promote_policy, policy, actor)