from omnethdb.config import Config, RuntimeEmbedderConfig, RuntimeWritersPolicy, SpaceSettings
from omnethdb.models import SpaceConfig
from omnethdb.policy import default_space_write_policy
from omnethdb.reconcile import reconcile_space_config

SPACE = "repo:company/app"


def _persisted():
    return SpaceConfig(
        embedding_model_id="builtin/hash-embedder-v1",
        dimension=256,
        default_weight=1.0,
        half_life_days=30.0,
        write_policy=default_space_write_policy(),
    )


def test_reconcile_reports_applyable_writer_policy_change():
    cfg = Config(
        spaces={
            SPACE: SpaceSettings(
                max_static_memories=5,
                static_writers=RuntimeWritersPolicy(
                    allow_all_agents=False,
                    allowed_agent_ids=["claude-sonnet-4-6"],
                ),
            )
        }
    )
    diff = reconcile_space_config(cfg, SPACE, _persisted())
    assert diff.applyable is True
    assert diff.desired.write_policy.max_static_memories == 5
    assert diff.desired.write_policy.static_writers.allowed_agent_ids == ["claude-sonnet-4-6"]
    assert [change.field for change in diff.changes] == ["write_policy"]
    assert diff.persisted.write_policy.max_static_memories == 500


def test_reconcile_rejects_embedder_drift_for_apply():
    cfg = Config(
        spaces={
            SPACE: SpaceSettings(
                embedder=RuntimeEmbedderConfig(
                    model_id="openai/text-embedding-3-small",
                    dimensions=1536,
                )
            )
        }
    )
    diff = reconcile_space_config(cfg, SPACE, _persisted())
    assert diff.applyable is False
    assert "embedder config drift requires explicit embedding migration" in diff.errors
    blocked = {change.field: change for change in diff.changes if not change.applyable}
    assert set(blocked) == {"embedding_model_id", "dimension"}
    assert blocked["embedding_model_id"].desired == "openai/text-embedding-3-small"
    assert blocked["dimension"].desired == 1536


def test_reconcile_without_settings_warns_and_keeps_persisted():
    diff = reconcile_space_config(Config(), SPACE, _persisted())
    assert diff.has_runtime_settings is False
    assert diff.applyable is True
    assert diff.warnings == ["no runtime config overrides found for this space"]
    assert diff.desired == _persisted()
    assert diff.changes == []


def test_reconcile_partial_embedder_override_is_an_error():
    cfg = Config(spaces={SPACE: SpaceSettings(embedder=RuntimeEmbedderConfig(dimensions=8))})
    diff = reconcile_space_config(cfg, SPACE, _persisted())
    assert diff.applyable is False
    assert diff.errors == ["runtime embedder override must set both model_id and dimensions"]
    assert diff.desired.dimension == 256


def test_reconcile_matching_settings_report_no_changes():
    cfg = Config(spaces={SPACE: SpaceSettings(max_static_memories=500, default_weight=1.0)})
    diff = reconcile_space_config(cfg, SPACE, _persisted())
    assert diff.has_runtime_settings is True
    assert diff.changes == []
    assert diff.applyable is True
    assert diff.errors == []


def test_reconcile_invalid_desired_config_blocks_apply():
    cfg = Config(spaces={SPACE: SpaceSettings(default_weight=0.0)})
    diff = reconcile_space_config(cfg, SPACE, _persisted())
    assert diff.applyable is False
    assert any(error.startswith("desired config invalid: ") for error in diff.errors)
    weight_change = [change for change in diff.changes if change.field == "default_weight"]
    assert len(weight_change) == 1
    assert weight_change[0].applyable is True