from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Literal

GameMode = Literal["1v1", "2v2"]
MatchStatus = Literal["playing", "finished"]
PowerType = Literal["BOOST", "DOUBLE", "STEAL", "SHIELD"]
Tier = Literal["Bronze", "Silver", "Gold", "Platinum", "Diamond", "Champion", "Grand Champion"]

# Weakest first. A rank's position + 2 is its numeric strength.
RANKS: tuple[str, ...] = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS: tuple[str, ...] = ("♠", "♥", "♦", "♣")
POWER_TYPES: tuple[PowerType, ...] = ("BOOST", "DOUBLE", "STEAL", "SHIELD")
POWER_VALUES: dict[PowerType, int] = {"BOOST": 3, "DOUBLE": 2, "STEAL": 1, "SHIELD": 1}

GAME_MODES: tuple[GameMode, ...] = ("1v1", "2v2")
TIERS: tuple[Tier, ...] = ("Bronze", "Silver", "Gold", "Platinum", "Diamond", "Champion", "Grand Champion")


def new_card_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class RegularCard:
    rank: str
    suit: str
    id: str = field(default_factory=new_card_id)

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"


@dataclass(frozen=True)
class PowerUpCard:
    power_type: PowerType
    id: str = field(default_factory=new_card_id)

    def __post_init__(self) -> None:
        if self.power_type not in POWER_VALUES:
            raise ValueError(f"Invalid power-up: {self.power_type}")

    @property
    def power_value(self) -> int:
        return POWER_VALUES[self.power_type]

    @property
    def label(self) -> str:
        return self.power_type


Card = RegularCard | PowerUpCard


@dataclass(frozen=True)
class RoundWinner:
    """Who took a round: a single player (1v1) or a whole team (2v2).

    A tied round has no winner and is represented by ``None`` wherever a
    ``RoundWinner`` is expected.
    """

    kind: Literal["player", "team"]
    player_id: str | None = None
    team: int | None = None

    @staticmethod
    def of_player(player_id: str) -> "RoundWinner":
        return RoundWinner(kind="player", player_id=player_id, team=None)

    @staticmethod
    def of_team(team: int) -> "RoundWinner":
        if team not in (1, 2):
            raise ValueError(f"Invalid team: {team}")
        return RoundWinner(kind="team", player_id=None, team=team)

    @property
    def token(self) -> str:
        if self.kind == "player" and self.player_id is not None:
            return self.player_id
        return f"team{self.team}"


@dataclass(frozen=True)
class TierDivision:
    tier: Tier
    division: int

    @property
    def label(self) -> str:
        # Division 1 is implied: "Gold", "Gold 2", "Gold 3".
        if self.division > 1:
            return f"{self.tier} {self.division}"
        return self.tier
