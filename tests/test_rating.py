from __future__ import annotations

import random

import pytest

from highcard.engine.rating import (
    RankRecord,
    RatingConfig,
    apply_ranked_result,
    expected_score,
    new_mmr,
    next_placement_count,
    rating_delta,
    synthesize_opponent_mmr,
    tier_from_mmr,
)
from highcard.engine.types import TierDivision


def test_even_match_moves_half_k() -> None:
    assert expected_score(1000, 1000) == pytest.approx(0.5)
    assert rating_delta(1000, 1000, True) == 16
    assert rating_delta(1000, 1000, False) == -16


def test_underdog_gains_more() -> None:
    underdog = rating_delta(800, 1200, True)
    favourite = rating_delta(1200, 800, True)
    assert underdog == 29
    assert favourite == 3
    assert rating_delta(1200, 800, False) == -29


def test_k_factor_scales_delta() -> None:
    assert rating_delta(1000, 1000, True, k_factor=64) == 32


def test_mmr_never_negative() -> None:
    assert new_mmr(10, -25) == 0
    assert new_mmr(10, 25) == 35


@pytest.mark.parametrize(
    ("mmr", "tier", "division"),
    [
        (0, "Bronze", 1),
        (99, "Bronze", 1),
        (100, "Bronze", 2),
        (299, "Bronze", 3),
        (300, "Silver", 1),
        (650, "Gold", 1),
        (899, "Gold", 3),
        (1500, "Champion", 1),
        (1799, "Champion", 3),
        (1800, "Grand Champion", 1),
        (5000, "Grand Champion", 1),
    ],
)
def test_tier_boundaries(mmr: int, tier: str, division: int) -> None:
    assert tier_from_mmr(mmr) == TierDivision(tier=tier, division=division)  # type: ignore[arg-type]


def test_tier_labels() -> None:
    assert tier_from_mmr(0).label == "Bronze"
    assert tier_from_mmr(750).label == "Gold 2"
    assert tier_from_mmr(1200).label == "Diamond"
    assert tier_from_mmr(2400).label == "Grand Champion"


def test_placement_counter_caps() -> None:
    seen = []
    count = 0
    for _ in range(8):
        count = next_placement_count(count)
        seen.append(count)
    assert seen == [1, 2, 3, 4, 5, 5, 5, 5]


def test_synthetic_opponent_stays_near_player() -> None:
    rng = random.Random(3)
    draws = [synthesize_opponent_mmr(1000, rng) for _ in range(500)]
    assert all(900 <= d <= 1100 for d in draws)
    assert len(set(draws)) > 50
    assert synthesize_opponent_mmr(1000, rng, jitter=0) == 1000


def test_first_ranked_win() -> None:
    update = apply_ranked_result(RankRecord(), True, random.Random(1))
    assert update.won
    assert 12 <= update.mmr_delta <= 20
    assert update.record.mmr == update.mmr_delta
    assert update.record.placement_matches == 1
    assert update.record.games_played == 1
    assert update.record.wins == 1
    assert update.previous == TierDivision("Bronze", 1)
    assert update.current == tier_from_mmr(update.record.mmr)


def test_loss_near_zero_floors() -> None:
    record = RankRecord(mmr=5, placement_matches=5, games_played=9, wins=4)
    update = apply_ranked_result(record, False, random.Random(7))
    assert update.mmr_delta < -5
    assert update.record.mmr == 0
    assert update.record.placement_matches == 5
    assert update.record.games_played == 10
    assert update.record.wins == 4


def test_promotion_updates_tier_and_division() -> None:
    record = RankRecord(mmr=295, tier="Bronze", division=3, placement_matches=5)
    config = RatingConfig(opponent_jitter=0)
    update = apply_ranked_result(record, True, random.Random(0), config)
    assert update.mmr_delta == 16
    assert update.record.mmr == 311
    assert update.previous.label == "Bronze 3"
    assert update.current.label == "Silver"
    assert (update.record.tier, update.record.division) == ("Silver", 1)


def test_previous_tier_ignores_stale_stored_tier() -> None:
    record = RankRecord(mmr=1000, tier="Bronze", division=1)
    update = apply_ranked_result(record, True, random.Random(0), RatingConfig(opponent_jitter=0))
    assert update.previous == TierDivision("Platinum", 2)
