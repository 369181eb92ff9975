"""Seven-card duel rules: cards, hand evaluation, the house player and the game engine."""

from .cards import Card, Deck, InsufficientCards, RANKS, SUITS, build_deck, parse_cards
from .evaluator import (
    HandEvaluation,
    HandRank,
    InvalidHandSize,
    InvalidInputSize,
    compare_hands,
    evaluate_hand,
    get_best_hand,
)
from .game import GameEngine
from .models import Action, GameConfig, GameState, Phase, RoundResult, Winner
from .strategy import ComputerAction, choose_action

__all__ = [
    "Card",
    "Deck",
    "InsufficientCards",
    "RANKS",
    "SUITS",
    "build_deck",
    "parse_cards",
    "HandEvaluation",
    "HandRank",
    "InvalidHandSize",
    "InvalidInputSize",
    "compare_hands",
    "evaluate_hand",
    "get_best_hand",
    "GameEngine",
    "Action",
    "GameConfig",
    "GameState",
    "Phase",
    "RoundResult",
    "Winner",
    "ComputerAction",
    "choose_action",
]
