"""Elo-style matchmaking rating and the MMR -> tier/division ladder."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace

from .types import TIERS, Tier, TierDivision


@dataclass(frozen=True)
class RatingConfig:
    k_factor: int = 32
    placement_matches: int = 5
    opponent_jitter: int = 100
    division_width: int = 100
    divisions_per_tier: int = 3


@dataclass(frozen=True)
class RankRecord:
    mmr: int = 0
    tier: Tier = "Bronze"
    division: int = 1
    placement_matches: int = 0
    games_played: int = 0
    wins: int = 0

    @property
    def tier_division(self) -> TierDivision:
        return TierDivision(tier=self.tier, division=self.division)


@dataclass(frozen=True)
class RankedUpdate:
    won: bool
    opponent_mmr: int
    mmr_delta: int
    previous: TierDivision
    current: TierDivision
    record: RankRecord


def expected_score(player_mmr: int, opponent_mmr: int) -> float:
    return 1.0 / (1.0 + math.pow(10, (opponent_mmr - player_mmr) / 400))


def rating_delta(player_mmr: int, opponent_mmr: int, won: bool, k_factor: int = 32) -> int:
    actual = 1.0 if won else 0.0
    raw = k_factor * (actual - expected_score(player_mmr, opponent_mmr))
    # Halves round up (toward +inf), not to even.
    return math.floor(raw + 0.5)


def new_mmr(current_mmr: int, delta: int) -> int:
    return max(0, current_mmr + delta)


def tier_from_mmr(mmr: int, config: RatingConfig | None = None) -> TierDivision:
    cfg = config or RatingConfig()
    step = max(0, mmr) // cfg.division_width
    tier_index = step // cfg.divisions_per_tier
    if tier_index >= len(TIERS) - 1:
        # Grand Champion has no divisions and no ceiling.
        return TierDivision(tier=TIERS[-1], division=1)
    return TierDivision(tier=TIERS[tier_index], division=step % cfg.divisions_per_tier + 1)


def next_placement_count(current: int, cap: int = 5) -> int:
    return min(cap, current + 1)


def synthesize_opponent_mmr(player_mmr: int, rng: random.Random, jitter: int = 100) -> int:
    """There is no real opponent pool: rate against a near-peer of the player."""
    return player_mmr + rng.randint(-jitter, jitter)


def apply_ranked_result(
    record: RankRecord,
    won: bool,
    rng: random.Random,
    config: RatingConfig | None = None,
) -> RankedUpdate:
    """Compute the post-match rank record for one ranked game.

    This draws the synthetic opponent rating, so it must run exactly once per
    finished match; keep the returned update rather than calling it again.
    """
    cfg = config or RatingConfig()
    opponent = synthesize_opponent_mmr(record.mmr, rng, cfg.opponent_jitter)
    delta = rating_delta(record.mmr, opponent, won, cfg.k_factor)
    mmr = new_mmr(record.mmr, delta)
    current = tier_from_mmr(mmr, cfg)
    updated = replace(
        record,
        mmr=mmr,
        tier=current.tier,
        division=current.division,
        placement_matches=next_placement_count(record.placement_matches, cfg.placement_matches),
        games_played=record.games_played + 1,
        wins=record.wins + (1 if won else 0),
    )
    return RankedUpdate(
        won=won,
        opponent_mmr=opponent,
        mmr_delta=delta,
        # Recomputed from MMR so stale stored tiers don't leak into the display.
        previous=tier_from_mmr(record.mmr, cfg),
        current=current,
        record=updated,
    )
