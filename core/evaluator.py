from __future__ import annotations

import itertools
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card

WHEEL = frozenset({14, 2, 3, 4, 5})
ROYAL = (14, 13, 12, 11, 10)


class InvalidHandSize(ValueError):
    """Evaluator called with something other than five cards."""


class InvalidInputSize(ValueError):
    """Best-hand search called with something other than seven cards."""


class HandRank(IntEnum):
    HIGH_CARD = 1
    PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def label(self) -> str:
        return _HAND_NAMES[self]


_HAND_NAMES = {
    HandRank.HIGH_CARD: "High Card",
    HandRank.PAIR: "Pair",
    HandRank.TWO_PAIR: "Two Pair",
    HandRank.THREE_OF_A_KIND: "Three of a Kind",
    HandRank.STRAIGHT: "Straight",
    HandRank.FLUSH: "Flush",
    HandRank.FULL_HOUSE: "Full House",
    HandRank.FOUR_OF_A_KIND: "Four of a Kind",
    HandRank.STRAIGHT_FLUSH: "Straight Flush",
    HandRank.ROYAL_FLUSH: "Royal Flush",
}


@dataclass(frozen=True)
class HandEvaluation:
    rank: HandRank
    cards: Tuple[Card, ...]
    kickers: Tuple[int, ...]

    @property
    def name(self) -> str:
        return self.rank.label

    @property
    def strength(self) -> Tuple[int, Tuple[int, ...]]:
        return (int(self.rank), self.kickers)


def evaluate_hand(cards: Sequence[Card]) -> HandEvaluation:
    """Classify exactly five cards and build the tie-break key for their class."""
    if len(cards) != 5:
        raise InvalidHandSize(f"Hand must contain exactly 5 cards, got {len(cards)}")

    ordered = tuple(sorted(cards, key=lambda card: (card.value, card.suit), reverse=True))
    values = [card.value for card in ordered]
    is_flush = len({card.suit for card in ordered}) == 1
    straight_high = _straight_high(values)

    counts: Dict[int, int] = {}
    for value in values:
        counts[value] = counts.get(value, 0) + 1
    # Highest multiplicity first, then highest rank.
    ordered_counts = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    count_values = [count for _, count in ordered_counts]

    if is_flush and tuple(values) == ROYAL:
        return HandEvaluation(HandRank.ROYAL_FLUSH, ordered, ())
    if is_flush and straight_high:
        return HandEvaluation(HandRank.STRAIGHT_FLUSH, ordered, (straight_high,))
    if count_values[0] == 4:
        return HandEvaluation(HandRank.FOUR_OF_A_KIND, ordered, (ordered_counts[0][0], ordered_counts[1][0]))
    if count_values[0] == 3 and count_values[1] == 2:
        return HandEvaluation(HandRank.FULL_HOUSE, ordered, (ordered_counts[0][0], ordered_counts[1][0]))
    if is_flush:
        return HandEvaluation(HandRank.FLUSH, ordered, tuple(values))
    if straight_high:
        return HandEvaluation(HandRank.STRAIGHT, ordered, (straight_high,))
    if count_values[0] == 3:
        kickers = [value for value, _ in ordered_counts[1:]]
        return HandEvaluation(HandRank.THREE_OF_A_KIND, ordered, (ordered_counts[0][0], *kickers))
    if count_values[0] == 2 and count_values[1] == 2:
        pair_high, pair_low, kicker = (value for value, _ in ordered_counts)
        return HandEvaluation(HandRank.TWO_PAIR, ordered, (pair_high, pair_low, kicker))
    if count_values[0] == 2:
        kickers = [value for value, _ in ordered_counts[1:]]
        return HandEvaluation(HandRank.PAIR, ordered, (ordered_counts[0][0], *kickers))
    return HandEvaluation(HandRank.HIGH_CARD, ordered, tuple(values))


def _straight_high(values: List[int]) -> Optional[int]:
    # values arrive sorted high to low
    if len(set(values)) != 5:
        return None
    if set(values) == WHEEL:
        return 5
    if values[0] - values[4] == 4:
        return values[0]
    return None


def compare_hands(first: HandEvaluation, second: HandEvaluation) -> int:
    """Negative if ``first`` loses, zero on a tie, positive if it wins."""
    if first.rank != second.rank:
        return int(first.rank) - int(second.rank)
    length = max(len(first.kickers), len(second.kickers))
    for idx in range(length):
        left = first.kickers[idx] if idx < len(first.kickers) else 0
        right = second.kickers[idx] if idx < len(second.kickers) else 0
        if left != right:
            return left - right
    return 0


def get_best_hand(cards: Sequence[Card]) -> HandEvaluation:
    """Return the strongest five-card evaluation out of exactly seven cards."""
    if len(cards) != 7:
        raise InvalidInputSize(f"Best hand search needs exactly 7 cards, got {len(cards)}")
    best: Optional[HandEvaluation] = None
    for combo in itertools.combinations(cards, 5):
        evaluation = evaluate_hand(combo)
        if best is None or compare_hands(evaluation, best) > 0:
            best = evaluation
    assert best is not None
    return best


def describe_hand(evaluation: HandEvaluation) -> str:
    cards = " ".join(card.display for card in evaluation.cards)
    return f"{evaluation.name} ({cards})"
