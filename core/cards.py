from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

RANKS = "23456789TJQKA"
SUITS = "hdcs"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS, start=2)}
SUIT_NAMES = {"h": "hearts", "d": "diamonds", "c": "clubs", "s": "spades"}
SUIT_SYMBOLS = {"h": "♥", "d": "♦", "c": "♣", "s": "♠"}


class InsufficientCards(ValueError):
    """Raised when the deck is asked for more cards than it holds."""


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def suit_name(self) -> str:
        return SUIT_NAMES[self.suit]

    @property
    def display(self) -> str:
        rank = "10" if self.rank == "T" else self.rank
        return f"{rank}{SUIT_SYMBOLS[self.suit]}"

    def __str__(self) -> str:
        return self.label


def build_deck() -> List[Card]:
    return [Card(rank, suit) for suit in SUITS for rank in RANKS]


class Deck:
    """The single draw pile for one game. Cards leave it and never come back
    unless the whole deck is rebuilt with ``reset``."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._cards: List[Card] = build_deck()
        self.shuffle()

    @property
    def cards(self) -> Tuple[Card, ...]:
        return tuple(self._cards)

    @property
    def remaining(self) -> int:
        return len(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def shuffle(self) -> None:
        # random.shuffle is Fisher-Yates over the injected generator.
        self._rng.shuffle(self._cards)

    def deal(self, count: int) -> List[Card]:
        if count < 0:
            raise ValueError("Cannot deal a negative number of cards")
        if count > len(self._cards):
            raise InsufficientCards("Not enough cards left in deck")
        cards = self._cards[:count]
        del self._cards[:count]
        return cards

    def draw(self) -> Optional[Card]:
        if not self._cards:
            return None
        return self._cards.pop(0)

    def reset(self) -> None:
        self._cards = build_deck()
        self.shuffle()


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    text = label.strip()
    if len(text) == 3 and text.startswith("10"):
        text = "T" + text[2]
    if len(text) != 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(text[0].upper(), text[1].lower())


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
