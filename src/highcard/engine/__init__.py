"""Headless rules engine for HighCard: cards, rounds, matches and ratings.

IMPORTANT: This package performs no I/O; persistence lives in highcard.services.
"""

from .cards import DeckExhaustedError, build_deck, deal_hand, numeric_value
from .match import (
    MatchConfig,
    MatchError,
    MatchState,
    PlayerState,
    RoundResult,
    advance_round,
    is_complete,
    is_round_complete,
    new_match,
    resolve_round,
    submit_card,
)
from .rating import RankRecord, RatingConfig, rating_delta, tier_from_mmr
from .types import Card, GameMode, PowerUpCard, RegularCard, RoundWinner, TierDivision

__all__ = [
    "Card",
    "DeckExhaustedError",
    "GameMode",
    "MatchConfig",
    "MatchError",
    "MatchState",
    "PlayerState",
    "PowerUpCard",
    "RankRecord",
    "RatingConfig",
    "RegularCard",
    "RoundResult",
    "RoundWinner",
    "TierDivision",
    "advance_round",
    "build_deck",
    "deal_hand",
    "is_complete",
    "is_round_complete",
    "new_match",
    "numeric_value",
    "rating_delta",
    "resolve_round",
    "submit_card",
    "tier_from_mmr",
]
