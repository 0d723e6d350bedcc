from __future__ import annotations

import random

from .cards import regular_cards
from .match import MatchState, is_complete, submit_card
from .types import Card

REGULAR_NAMES: tuple[str, ...] = (
    "CyberNinja", "QuantumBot", "DataMancer", "CodeBreaker", "SyntaxKing",
    "ByteBeast", "PixelPilot", "LogicLord", "CipherSage", "BinaryBard",
    "TechTitan", "DigitalDuke", "NetNomad", "CryptoChamp", "VirtualViper",
)
HIGH_RANKED_NAMES: tuple[str, ...] = (
    "AlgoMaster", "QuantumQueen", "CodeColossus", "DataDeity", "SyntaxSovereign",
    "ByteEmperor", "PixelPharaoh", "LogicLegend", "CipherCzar", "BinaryBoss",
    "TechTyrant", "DigitalDynasty", "NetNinja", "CryptoKing", "VirtualVanguard",
)

# Above this MMR (Gold and up) bots draw from the high-ranked name pool.
HIGH_RANKED_MMR = 600


def ai_name(mmr: int, rng: random.Random) -> str:
    names = HIGH_RANKED_NAMES if mmr > HIGH_RANKED_MMR else REGULAR_NAMES
    return rng.choice(names)


def choose_card(state: MatchState, player_id: str, rng: random.Random | None = None) -> Card | None:
    """Pick a uniformly random regular card from the AI's hand.

    Power-ups are only played once no regular card is left (a hand holds 8
    regular cards for a 10-round match). Returns None for an empty hand.
    """
    rng = rng or state.rng
    hand = state.player(player_id).hand
    options: list[Card] = list(regular_cards(hand)) or list(hand)
    if not options:
        return None
    return rng.choice(options)


def waiting_ai_players(state: MatchState) -> list[str]:
    return [
        p.id
        for p in state.players
        if p.is_ai and p.id not in state.played_cards and p.hand
    ]


def take_ai_turns(state: MatchState, rng: random.Random | None = None) -> list[str]:
    """Submit one card for every AI that has not played this round.

    Uses the match RNG by default so a seeded match stays reproducible.
    Returns the ids of the players that submitted.
    """
    if is_complete(state):
        return []
    played: list[str] = []
    for pid in waiting_ai_players(state):
        card = choose_card(state, pid, rng)
        if card is None:
            continue
        submit_card(state, pid, card)
        played.append(pid)
    return played
