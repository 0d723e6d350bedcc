from __future__ import annotations

import random
from collections.abc import Sequence

from .types import POWER_TYPES, RANKS, SUITS, Card, PowerUpCard, RegularCard

DECK_SIZE = len(RANKS) * len(SUITS)
REGULAR_PER_HAND = 8
POWER_UPS_PER_HAND = 2


class DeckExhaustedError(RuntimeError):
    pass


def numeric_value(card: Card) -> int:
    """Strength of a card on its own: 2..14 for regular cards, 0 for power-ups."""
    if isinstance(card, RegularCard):
        return RANKS.index(card.rank) + 2
    return 0


def _shuffle(rng: random.Random, items: list[RegularCard]) -> None:
    # Random.shuffle is the backward Fisher-Yates swap: for i from last to 1,
    # swap items[i] with items[j], j uniform in [0, i].
    rng.shuffle(items)


def build_deck(rng: random.Random) -> list[RegularCard]:
    deck = [RegularCard(rank=rank, suit=suit) for suit in SUITS for rank in RANKS]
    _shuffle(rng, deck)
    return deck


def random_power_up(rng: random.Random) -> PowerUpCard:
    return PowerUpCard(power_type=rng.choice(POWER_TYPES))


def deal_hand(
    deck: Sequence[RegularCard],
    rng: random.Random,
    regular_count: int = REGULAR_PER_HAND,
    power_up_count: int = POWER_UPS_PER_HAND,
) -> tuple[list[Card], list[RegularCard]]:
    """Draw a hand off the end of `deck` and return it with the remaining deck.

    The passed deck is left untouched; thread the returned remainder into the
    next call so that no two hands share a regular card.
    """
    if len(deck) < regular_count:
        raise DeckExhaustedError(
            f"Not enough cards left in deck: need {regular_count}, have {len(deck)}"
        )
    remaining = list(deck)
    hand: list[Card] = []
    for _ in range(regular_count):
        hand.append(remaining.pop())
    for _ in range(power_up_count):
        hand.append(random_power_up(rng))
    return hand, remaining


def regular_cards(cards: Sequence[Card]) -> list[RegularCard]:
    return [c for c in cards if isinstance(c, RegularCard)]
