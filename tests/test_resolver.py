from __future__ import annotations

from highcard.engine.resolver import (
    apply_power_up,
    effective_value,
    is_round_complete,
    resolve_individual,
    resolve_team,
    team_scores,
)
from highcard.engine.types import PowerUpCard, RegularCard, RoundWinner


def test_higher_card_wins_individual_round() -> None:
    played = {"A": RegularCard("K", "♠"), "B": RegularCard("2", "♥")}
    assert resolve_individual(played, ["A", "B"]) == RoundWinner.of_player("A")
    assert resolve_individual(played, ["B", "A"]) == RoundWinner.of_player("A")


def test_equal_ranks_tie_regardless_of_suit() -> None:
    played = {"A": RegularCard("7", "♠"), "B": RegularCard("7", "♥")}
    assert resolve_individual(played, ["A", "B"]) is None


def test_resolution_is_deterministic() -> None:
    played = {"A": RegularCard("Q", "♦"), "B": RegularCard("J", "♣")}
    results = {resolve_individual(played, ["A", "B"]) for _ in range(5)}
    assert results == {RoundWinner.of_player("A")}


def test_power_up_effective_values() -> None:
    assert effective_value(PowerUpCard("BOOST")) == 3
    assert effective_value(PowerUpCard("DOUBLE")) == 0
    assert effective_value(PowerUpCard("STEAL")) == 0
    assert effective_value(PowerUpCard("SHIELD")) == 0


def test_apply_power_up() -> None:
    assert apply_power_up(5, PowerUpCard("BOOST")) == 8
    assert apply_power_up(5, PowerUpCard("DOUBLE")) == 10
    assert apply_power_up(5, PowerUpCard("SHIELD")) == 5
    assert apply_power_up(5, RegularCard("A", "♠")) == 5


def test_boost_beats_a_two_but_not_a_four() -> None:
    boost = PowerUpCard("BOOST")
    assert resolve_individual({"A": boost, "B": RegularCard("2", "♥")}, ["A", "B"]) == RoundWinner.of_player("A")
    assert resolve_individual({"A": boost, "B": RegularCard("4", "♥")}, ["A", "B"]) == RoundWinner.of_player("B")


def test_two_zero_power_ups_tie() -> None:
    played = {"A": PowerUpCard("DOUBLE"), "B": PowerUpCard("STEAL")}
    assert resolve_individual(played, ["A", "B"]) is None


def test_team_sum_decides_round() -> None:
    played = {
        "p1": RegularCard("A", "♠"),
        "p2": RegularCard("5", "♥"),
        "p3": RegularCard("9", "♦"),
        "p4": RegularCard("9", "♣"),
    }
    assert team_scores(played, ["p1", "p2"], ["p3", "p4"]) == (19, 18)
    winner = resolve_team(played, ["p1", "p2"], ["p3", "p4"])
    assert winner == RoundWinner.of_team(1)
    assert winner is not None and winner.token == "team1"


def test_team_power_ups_add_nothing() -> None:
    played = {
        "p1": PowerUpCard("BOOST"),
        "p2": RegularCard("K", "♥"),
        "p3": RegularCard("7", "♦"),
        "p4": RegularCard("6", "♣"),
    }
    assert team_scores(played, ["p1", "p2"], ["p3", "p4"]) == (13, 13)
    assert resolve_team(played, ["p1", "p2"], ["p3", "p4"]) is None


def test_round_completion() -> None:
    played = {"A": RegularCard("3", "♠")}
    assert not is_round_complete(played, ["A", "B"])
    played["B"] = RegularCard("4", "♠")
    assert is_round_complete(played, ["A", "B"])


def test_winner_tokens() -> None:
    assert RoundWinner.of_player("ai1").token == "ai1"
    assert RoundWinner.of_team(2).token == "team2"
