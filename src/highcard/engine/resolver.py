from __future__ import annotations

from collections.abc import Mapping, Sequence

from .cards import numeric_value
from .types import Card, PowerUpCard, RoundWinner


def apply_power_up(base_value: int, card: Card) -> int:
    if not isinstance(card, PowerUpCard):
        return base_value
    if card.power_type == "BOOST":
        return base_value + card.power_value
    if card.power_type == "DOUBLE":
        return base_value * card.power_value
    # STEAL and SHIELD carry no effect of their own yet.
    return base_value


def effective_value(card: Card) -> int:
    """Value a card is compared by in an individual round.

    Power-ups are applied to a base of zero, so BOOST is worth 3 and the other
    kinds are worth nothing.
    """
    if isinstance(card, PowerUpCard):
        return apply_power_up(0, card)
    return numeric_value(card)


def is_round_complete(played: Mapping[str, Card], player_ids: Sequence[str]) -> bool:
    return all(pid in played for pid in player_ids) and len(played) == len(player_ids)


def resolve_individual(played: Mapping[str, Card], player_ids: Sequence[str]) -> RoundWinner | None:
    best_value = -1
    leaders: list[str] = []
    for pid in player_ids:
        card = played.get(pid)
        if card is None:
            continue
        value = effective_value(card)
        if value > best_value:
            best_value = value
            leaders = [pid]
        elif value == best_value:
            leaders.append(pid)
    if len(leaders) != 1:
        return None
    return RoundWinner.of_player(leaders[0])


def team_scores(
    played: Mapping[str, Card], team1_ids: Sequence[str], team2_ids: Sequence[str]
) -> tuple[int, int]:
    # No power-up modifier when summing for teams: power-ups add 0.
    team1 = sum(numeric_value(played[pid]) for pid in team1_ids if pid in played)
    team2 = sum(numeric_value(played[pid]) for pid in team2_ids if pid in played)
    return team1, team2


def resolve_team(
    played: Mapping[str, Card], team1_ids: Sequence[str], team2_ids: Sequence[str]
) -> RoundWinner | None:
    team1, team2 = team_scores(played, team1_ids, team2_ids)
    if team1 > team2:
        return RoundWinner.of_team(1)
    if team2 > team1:
        return RoundWinner.of_team(2)
    return None
