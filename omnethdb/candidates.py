"""Selection and ranking of candidate memories by raw similarity."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from .errors import InvalidContentError
from .models import Memory, ScoredMemory


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_candidate_eligible(
    memory: Memory,
    now: datetime,
    include_superseded: bool = False,
    include_forgotten: bool = False,
) -> bool:
    """Tell whether ``memory`` may appear among candidates at ``now``.

    Superseded versions are left out unless ``include_superseded``; forgotten
    and expired memories are left out unless ``include_forgotten``.
    """
    if not include_superseded and not memory.is_latest:
        return False
    if not include_forgotten and memory.is_forgotten:
        return False
    if (
        memory.forget_after is not None
        and _utc(memory.forget_after) <= _utc(now)
        and not include_forgotten
    ):
        return False
    return True


def rank_candidates(candidates: Iterable[ScoredMemory], top_k: int = 0) -> list[ScoredMemory]:
    """Order candidates by score, newest first on ties, then by id; keep ``top_k``.

    A ``top_k`` of zero keeps every candidate; a negative one is rejected.
    """
    if top_k < 0:
        raise InvalidContentError()
    ranked = sorted(candidates, key=lambda mem: mem.id)
    ranked.sort(key=lambda mem: _utc(mem.created_at), reverse=True)
    ranked.sort(key=lambda mem: mem.score, reverse=True)
    if top_k > 0:
        ranked = ranked[:top_k]
    return ranked