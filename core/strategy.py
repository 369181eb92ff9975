from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .cards import Card
from .evaluator import HandEvaluation, get_best_hand
from .models import MAX_DISCARDS


@dataclass(frozen=True)
class ComputerAction:
    best_hand: HandEvaluation
    discards: Tuple[Card, ...]
    submission: Tuple[Card, ...]


def choose_action(hand: Sequence[Card]) -> ComputerAction:
    """House player: keep the best five, throw the rest, never bluff.

    Run once on the dealt hand to pick discards and again after the redraw to
    lock in the submission, since the draw can change which five are best.
    """
    best = get_best_hand(hand)
    keep = set(best.cards)
    discards = tuple(card for card in hand if card not in keep)[:MAX_DISCARDS]
    return ComputerAction(best_hand=best, discards=discards, submission=best.cards)
