from omnethdb.models import (
    Actor,
    ActorKind,
    MemoryKind,
    SpaceWritePolicy,
    WritersPolicy,
)
from omnethdb.policy import (
    can_promote,
    can_write_kind,
    default_space_write_policy,
    normalize_space_write_policy,
    resolve_actor_trust,
)

HUMAN = Actor(id="user:alice", kind=ActorKind.HUMAN)
AGENT = Actor(id="agent:scout-1", kind=ActorKind.AGENT)
SYSTEM = Actor(id="system:cron", kind=ActorKind.SYSTEM)


def test_default_policy_values():
    policy = default_space_write_policy()
    assert policy.human_trust == 1.0
    assert policy.default_agent_trust == 0.7
    assert policy.max_static_memories == 500
    assert policy.max_episodic_memories == 10000
    assert policy.profile_max_static == 50
    assert policy.profile_max_episodic == 10
    assert policy.promote_policy == WritersPolicy(allow_human=True)


def test_normalize_empty_policy_equals_defaults():
    assert normalize_space_write_policy(SpaceWritePolicy()) == default_space_write_policy()


def test_normalize_keeps_explicit_values_and_does_not_mutate_input():
    original = SpaceWritePolicy(
        human_trust=0.5,
        static_writers=WritersPolicy(allowed_agent_ids=["agent:claude"]),
        max_static_memories=3,
    )
    normalized = normalize_space_write_policy(original)
    assert normalized.human_trust == 0.5
    assert normalized.static_writers.allowed_agent_ids == ["agent:claude"]
    assert normalized.max_static_memories == 3
    assert normalized.episodic_writers == default_space_write_policy().episodic_writers
    assert original.system_trust == 0.0
    assert original.episodic_writers == WritersPolicy()


def test_resolve_actor_trust_by_kind_and_override():
    policy = SpaceWritePolicy(trust_levels={"agent:trusted": 0.9})
    assert resolve_actor_trust(policy, HUMAN) == 1.0
    assert resolve_actor_trust(policy, AGENT) == 0.7
    assert resolve_actor_trust(policy, Actor(id="agent:trusted", kind=ActorKind.AGENT)) == 0.9
    assert resolve_actor_trust(policy, Actor(id="x", kind=99)) == 0.0


def test_can_write_kind_with_default_policy():
    policy = default_space_write_policy()
    assert can_write_kind(policy, AGENT, MemoryKind.EPISODIC) is True
    assert can_write_kind(policy, AGENT, MemoryKind.STATIC) is False
    assert can_write_kind(policy, HUMAN, MemoryKind.STATIC) is True
    assert can_write_kind(policy, SYSTEM, MemoryKind.DERIVED) is False
    assert can_write_kind(policy, HUMAN, MemoryKind.UNKNOWN) is False


def test_allowed_agent_ids_grant_static_writes():
    policy = default_space_write_policy()
    policy.static_writers = WritersPolicy(allow_human=True, allowed_agent_ids=[AGENT.id])
    assert can_write_kind(policy, AGENT, MemoryKind.STATIC) is True
    other = Actor(id="agent:other", kind=ActorKind.AGENT)
    assert can_write_kind(policy, other, MemoryKind.STATIC) is False


def test_min_trust_level_blocks_low_trust_agents():
    policy = default_space_write_policy()
    policy.episodic_writers = WritersPolicy(allow_all_agents=True, min_trust_level=0.8)
    assert can_write_kind(policy, AGENT, MemoryKind.EPISODIC) is False
    policy.trust_levels = {AGENT.id: 0.9}
    assert can_write_kind(policy, AGENT, MemoryKind.EPISODIC) is True


def test_can_promote_defaults_to_humans_only():
    policy = default_space_write_policy()
    assert can_promote(policy, HUMAN) is True
    assert can_promote(policy, AGENT) is False
    assert can_promote(policy, SYSTEM) is False