from __future__ import annotations

import random
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from . import resolver
from .cards import DECK_SIZE, build_deck, deal_hand
from .types import Card, GameMode, MatchStatus, RegularCard, RoundWinner

Event = dict[str, object]

HUMAN_ID = "player"


class MatchError(RuntimeError):
    pass


@dataclass(frozen=True)
class MatchConfig:
    max_rounds: int = 10
    regular_per_hand: int = 8
    power_ups_per_hand: int = 2
    win_points: int = 2
    tie_points: int = 0
    loss_points: int = -1


@dataclass(frozen=True)
class PlayCardAction:
    player_id: str
    hand_index: int


@dataclass
class PlayerState:
    id: str
    name: str
    is_ai: bool
    hand: list[Card]
    team: int | None = None  # only set in 2v2
    score: int = 0
    rounds_won: int = 0

    def find_card(self, card_id: str) -> int | None:
        for i, c in enumerate(self.hand):
            if c.id == card_id:
                return i
        return None


@dataclass(frozen=True)
class RoundResult:
    round: int
    winner: RoundWinner | None
    scores: dict[str, int]


@dataclass
class MatchState:
    id: str
    mode: GameMode
    is_ranked: bool
    config: MatchConfig
    seed: int
    rng: random.Random
    players: list[PlayerState]
    created_at: str
    current_round: int = 1
    status: MatchStatus = "playing"
    played_cards: dict[str, Card] = field(default_factory=dict)
    round_results: list[RoundResult] = field(default_factory=list)
    action_log: list[PlayCardAction] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)

    @property
    def max_rounds(self) -> int:
        return self.config.max_rounds

    def player(self, player_id: str) -> PlayerState:
        for p in self.players:
            if p.id == player_id:
                return p
        raise MatchError(f"Unknown player: {player_id}")

    def player_ids(self) -> list[str]:
        return [p.id for p in self.players]

    def team_ids(self, team: int) -> list[str]:
        return [p.id for p in self.players if p.team == team]


ROSTER_SIZES: dict[str, int] = {"1v1": 2, "2v2": 4}


def check_config(cfg: MatchConfig, mode: GameMode) -> None:
    """Reject configs that cannot be played to the last round.

    Every player submits one card per round, so a hand must cover
    `max_rounds`, and the whole roster is dealt from one 52-card deck.
    """
    if mode not in ROSTER_SIZES:
        raise MatchError(f"Unknown game mode: {mode}")
    hand_size = cfg.regular_per_hand + cfg.power_ups_per_hand
    if cfg.max_rounds > hand_size:
        raise MatchError(f"max_rounds {cfg.max_rounds} exceeds the hand size of {hand_size} cards.")
    needed = ROSTER_SIZES[mode] * cfg.regular_per_hand
    if needed > DECK_SIZE:
        raise MatchError(f"A {mode} roster needs {needed} cards; the deck holds {DECK_SIZE}.")


def _roster(mode: GameMode, human_name: str, rng: random.Random) -> list[PlayerState]:
    # Imported here: ai depends on this module for submit_card.
    from .ai import ai_name

    if mode == "1v1":
        return [
            PlayerState(id=HUMAN_ID, name=human_name, is_ai=False, hand=[]),
            PlayerState(id="ai1", name=ai_name(600, rng), is_ai=True, hand=[]),
        ]
    if mode == "2v2":
        return [
            PlayerState(id=HUMAN_ID, name=human_name, is_ai=False, hand=[], team=1),
            PlayerState(id="ai_teammate", name=ai_name(500, rng), is_ai=True, hand=[], team=1),
            PlayerState(id="ai_opponent_1", name=ai_name(550, rng), is_ai=True, hand=[], team=2),
            PlayerState(id="ai_opponent_2", name=ai_name(600, rng), is_ai=True, hand=[], team=2),
        ]
    raise MatchError(f"Unknown game mode: {mode}")


def new_match(
    mode: GameMode,
    is_ranked: bool,
    human_name: str,
    seed: int | None = None,
    config: MatchConfig | None = None,
) -> MatchState:
    cfg = config or MatchConfig()
    check_config(cfg, mode)
    if seed is None:
        seed = int(time.time() * 1000) & 0xFFFFFFFF
    rng = random.Random(seed)

    players = _roster(mode, human_name, rng)

    # One shared deck; each deal continues from the previous remainder.
    # check_config has already made sure the roster fits in the deck.
    deck: list[RegularCard] = build_deck(rng)
    for p in players:
        p.hand, deck = deal_hand(deck, rng, cfg.regular_per_hand, cfg.power_ups_per_hand)

    state = MatchState(
        id=uuid.uuid4().hex,
        mode=mode,
        is_ranked=is_ranked,
        config=cfg,
        seed=seed,
        rng=rng,
        players=players,
        created_at=datetime.now(tz=timezone.utc).isoformat(),
    )
    state.event_log.append(
        {"type": "MATCH_CREATED", "mode": mode, "ranked": is_ranked, "players": state.player_ids()}
    )
    return state


def is_complete(state: MatchState) -> bool:
    return state.status == "finished" or state.current_round > state.max_rounds


def submit_card(state: MatchState, player_id: str, card: Card) -> None:
    """Record `card` as the player's play for the current round.

    Raises MatchError, leaving the state untouched, when the match is over,
    the player has already played this round, or the card is not in hand.
    """
    if is_complete(state):
        raise MatchError("Match already ended.")
    ps = state.player(player_id)
    if player_id in state.played_cards:
        raise MatchError(f"{player_id} already played in round {state.current_round}.")
    idx = ps.find_card(card.id)
    if idx is None:
        raise MatchError(f"Card {card.id} is not in {player_id}'s hand.")

    ps.hand.pop(idx)
    state.played_cards[player_id] = card
    state.action_log.append(PlayCardAction(player_id=player_id, hand_index=idx))
    state.event_log.append(
        {"type": "CARD_PLAYED", "round": state.current_round, "player": player_id, "card_id": card.id}
    )


def play_hand_index(state: MatchState, player_id: str, hand_index: int) -> Card:
    ps = state.player(player_id)
    if hand_index < 0 or hand_index >= len(ps.hand):
        raise MatchError("Invalid hand index.")
    card = ps.hand[hand_index]
    submit_card(state, player_id, card)
    return card


def is_round_complete(state: MatchState) -> bool:
    return resolver.is_round_complete(state.played_cards, state.player_ids())


def resolve_round(state: MatchState) -> RoundWinner | None:
    if state.mode == "1v1":
        return resolver.resolve_individual(state.played_cards, state.player_ids())
    return resolver.resolve_team(state.played_cards, state.team_ids(1), state.team_ids(2))


def _on_winning_side(p: PlayerState, winner: RoundWinner | None) -> bool:
    if winner is None:
        return False
    if winner.kind == "team":
        return p.team == winner.team
    return p.id == winner.player_id


def advance_round(state: MatchState) -> RoundResult:
    if is_complete(state):
        raise MatchError("Match already ended.")
    if not is_round_complete(state):
        raise MatchError(f"Round {state.current_round} is not complete.")

    cfg = state.config
    winner = resolve_round(state)
    scores: dict[str, int] = {}
    for p in state.players:
        if _on_winning_side(p, winner):
            delta = cfg.win_points
            p.rounds_won += 1
        elif winner is None:
            delta = cfg.tie_points
        else:
            delta = cfg.loss_points
        p.score += delta
        scores[p.id] = delta

    result = RoundResult(round=state.current_round, winner=winner, scores=scores)
    state.round_results.append(result)
    state.event_log.append(
        {
            "type": "ROUND_RESOLVED",
            "round": result.round,
            "winner": winner.token if winner is not None else None,
            "scores": dict(scores),
        }
    )
    state.played_cards = {}
    finished_round = state.current_round
    state.current_round += 1
    if finished_round >= state.max_rounds:
        state.status = "finished"
        state.event_log.append({"type": "GAME_ENDED", "scores": final_scores(state)})
    return result


def final_scores(state: MatchState) -> dict[str, int]:
    return {p.id: p.score for p in state.players}


def human_won(state: MatchState, human_id: str = HUMAN_ID) -> bool:
    """Whether the human side won the match on total score. Draws count as losses."""
    human = state.player(human_id)
    if state.mode == "1v1":
        others = [p.score for p in state.players if p.id != human_id]
        return all(human.score > s for s in others)
    own = sum(p.score for p in state.players if p.team == human.team)
    other = sum(p.score for p in state.players if p.team != human.team)
    return own > other


def replay(
    mode: GameMode,
    is_ranked: bool,
    human_name: str,
    seed: int,
    actions: Iterable[PlayCardAction],
    config: MatchConfig | None = None,
) -> MatchState:
    state = new_match(mode, is_ranked, human_name, seed=seed, config=config)
    for a in actions:
        play_hand_index(state, a.player_id, a.hand_index)
        if is_round_complete(state):
            advance_round(state)
        if is_complete(state):
            break
    return state
