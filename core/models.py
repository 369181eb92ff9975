from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union

from .cards import Card
from .evaluator import HandEvaluation

DECK_SIZE = 52
HAND_SIZE = 7
MAX_DISCARDS = 2
SUBMIT_SIZE = 5
DEFAULT_ROUNDS = 3


class Phase(str, Enum):
    DEALING = "DEALING"
    DISCARDING = "DISCARDING"
    SUBMITTING = "SUBMITTING"
    REVEALING = "REVEALING"
    GAME_END = "GAME_END"


class Action(str, Enum):
    START_ROUND = "start_round"
    SELECT_DISCARD = "select_discard"
    CONFIRM_DISCARD = "confirm_discard"
    PLAY_HAND = "play_hand"
    SELECT_SUBMIT = "select_submit"
    CONFIRM_SUBMIT = "confirm_submit"
    CONTINUE = "continue"
    RESET = "reset"


class Winner(str, Enum):
    PLAYER = "player"
    AI = "ai"
    TIE = "tie"


def worst_case_cards(total_rounds: int) -> int:
    """Most cards a game of ``total_rounds`` can pull from its single deck."""
    opening = 2 * HAND_SIZE
    redraws = total_rounds * 2 * MAX_DISCARDS
    top_ups = (total_rounds - 1) * 2 * SUBMIT_SIZE
    return opening + redraws + top_ups


@dataclass
class GameConfig:
    total_rounds: int = DEFAULT_ROUNDS
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.total_rounds < 1:
            raise ValueError("total_rounds must be at least 1")
        if worst_case_cards(self.total_rounds) > DECK_SIZE:
            raise ValueError(
                f"total_rounds={self.total_rounds} could exhaust the {DECK_SIZE}-card deck"
            )


@dataclass(frozen=True)
class RoundResult:
    round_number: int
    player_hand: HandEvaluation
    ai_hand: HandEvaluation
    winner: Winner


# Phase payloads. Exactly one is live at a time, so per-phase fields such as the
# submit selection only exist while their phase does.


@dataclass
class Dealing:
    phase: ClassVar[Phase] = Phase.DEALING


@dataclass
class Discarding:
    phase: ClassVar[Phase] = Phase.DISCARDING
    selected: List[Card] = field(default_factory=list)


@dataclass
class Submitting:
    phase: ClassVar[Phase] = Phase.SUBMITTING
    ai_submission: Tuple[Card, ...] = ()
    selected: List[Card] = field(default_factory=list)


@dataclass
class Revealing:
    result: RoundResult
    phase: ClassVar[Phase] = Phase.REVEALING


@dataclass
class GameOver:
    phase: ClassVar[Phase] = Phase.GAME_END


PhaseState = Union[Dealing, Discarding, Submitting, Revealing, GameOver]


@dataclass(frozen=True)
class GameState:
    """Read-only view of a game handed to presentation code after every call."""

    phase: Phase
    current_round: int
    total_rounds: int
    player_wins: int
    ai_wins: int
    ties: int
    player_hand: Tuple[Card, ...]
    ai_hand: Tuple[Card, ...]
    selected_discards: Tuple[Card, ...]
    selected_submit: Tuple[Card, ...]
    ai_submission: Optional[Tuple[Card, ...]]
    round_results: Tuple[RoundResult, ...]
    deck_remaining: int
    discarded: Tuple[Card, ...]
    played: Tuple[Card, ...]

    @property
    def is_game_over(self) -> bool:
        return self.phase == Phase.GAME_END

    @property
    def overall_winner(self) -> Optional[Winner]:
        if not self.is_game_over:
            return None
        if self.player_wins > self.ai_wins:
            return Winner.PLAYER
        if self.ai_wins > self.player_wins:
            return Winner.AI
        return Winner.TIE
