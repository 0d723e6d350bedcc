from __future__ import annotations

from .match import MatchState, PlayCardAction, PlayerState, RoundResult, human_won
from .rating import RankedUpdate
from .types import Card, RegularCard, RoundWinner


def card_to_dict(c: Card, *, include_id: bool = True) -> dict[str, object]:
    if isinstance(c, RegularCard):
        out: dict[str, object] = {"type": "regular", "value": c.rank, "suit": c.suit}
    else:
        out = {"type": "powerup", "powerType": c.power_type, "powerValue": c.power_value}
    if include_id:
        out["id"] = c.id
    return out


def winner_token(w: RoundWinner | None) -> str | None:
    if w is None:
        return None
    return w.token


def action_to_dict(a: PlayCardAction) -> dict[str, object]:
    return {"type": "play", "player": a.player_id, "hand_index": a.hand_index}


def round_result_to_dict(r: RoundResult) -> dict[str, object]:
    return {"round": r.round, "winner": winner_token(r.winner), "scores": dict(r.scores)}


def _player_to_dict(p: PlayerState, *, include_ids: bool) -> dict[str, object]:
    return {
        "id": p.id,
        "username": p.name,
        "isAI": p.is_ai,
        "team": p.team,
        "score": p.score,
        "roundsWon": p.rounds_won,
        "hand": [card_to_dict(c, include_id=include_ids) for c in p.hand],
    }


def snapshot(state: MatchState, *, include_ids: bool = True) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state.

    Card ids are random per process; pass include_ids=False to compare two
    runs of the same seed.
    """
    return {
        "seed": state.seed,
        "mode": state.mode,
        "isRanked": state.is_ranked,
        "currentRound": state.current_round,
        "maxRounds": state.max_rounds,
        "gameStatus": state.status,
        "players": [_player_to_dict(p, include_ids=include_ids) for p in state.players],
        "playedCards": {
            pid: card_to_dict(c, include_id=include_ids) for pid, c in state.played_cards.items()
        },
        "roundResults": [round_result_to_dict(r) for r in state.round_results],
        "action_log": [action_to_dict(a) for a in state.action_log],
    }


def _match_winner(state: MatchState) -> str | None:
    if state.mode == "1v1":
        ranked = sorted(state.players, key=lambda p: p.score, reverse=True)
        if len(ranked) > 1 and ranked[0].score == ranked[1].score:
            return None
        return ranked[0].id
    team1 = sum(p.score for p in state.players if p.team == 1)
    team2 = sum(p.score for p in state.players if p.team == 2)
    if team1 == team2:
        return None
    return "team1" if team1 > team2 else "team2"


def match_result(state: MatchState, ranked: RankedUpdate | None = None) -> dict[str, object]:
    """Payload handed to the result screen once a match is over."""
    out: dict[str, object] = {
        "matchId": state.id,
        "mode": state.mode,
        "isRanked": state.is_ranked,
        "winner": _match_winner(state),
        "playerWon": human_won(state),
        "players": [
            {"id": p.id, "username": p.name, "team": p.team, "score": p.score, "roundsWon": p.rounds_won}
            for p in state.players
        ],
        "roundResults": [round_result_to_dict(r) for r in state.round_results],
    }
    if ranked is not None:
        out["rankChange"] = {
            "previous": ranked.previous.label,
            "new": ranked.current.label,
            "mmrChange": ranked.mmr_delta,
            "mmr": ranked.record.mmr,
        }
    return out
