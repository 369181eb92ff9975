from __future__ import annotations

import logging
import random
from collections import Counter
from typing import Callable, Dict, List, Optional, Tuple

from .cards import Card, Deck, cards_to_labels
from .evaluator import compare_hands, describe_hand, evaluate_hand
from .models import (
    HAND_SIZE,
    MAX_DISCARDS,
    SUBMIT_SIZE,
    Action,
    Dealing,
    Discarding,
    GameConfig,
    GameOver,
    GameState,
    Phase,
    PhaseState,
    Revealing,
    RoundResult,
    Submitting,
    Winner,
)
from .strategy import choose_action

# GameEngine owns one human-vs-computer game: the deck, both hands, the discard
# and played piles, and the score. Presentation code only sees GameState.

LOGGER = logging.getLogger(__name__)

Handler = Callable[["GameEngine", Optional[Card]], bool]


class GameEngine:
    """Best-of-N seven-card duel driven by one reducer keyed on phase."""

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self.rng = rng or random.Random(self.config.seed)
        self._new_game()

    def _new_game(self) -> None:
        self.deck: Optional[Deck] = None
        self.player_hand: List[Card] = []
        self.ai_hand: List[Card] = []
        self.discarded: List[Card] = []
        self.played: List[Card] = []
        self.current_round = 1
        self.player_wins = 0
        self.ai_wins = 0
        self.ties = 0
        self.round_results: List[RoundResult] = []
        self.phase_state: PhaseState = Dealing()

    @property
    def phase(self) -> Phase:
        return self.phase_state.phase

    # Boundary operations ----------------------------------------------

    def start_new_round(self) -> GameState:
        return self.dispatch(Action.START_ROUND)

    def select_card_for_discard(self, card: Card) -> GameState:
        return self.dispatch(Action.SELECT_DISCARD, card)

    def confirm_discard(self) -> GameState:
        return self.dispatch(Action.CONFIRM_DISCARD)

    def play_hand_without_discard(self) -> GameState:
        return self.dispatch(Action.PLAY_HAND)

    def select_card_for_submit(self, card: Card) -> GameState:
        return self.dispatch(Action.SELECT_SUBMIT, card)

    def confirm_submit(self) -> GameState:
        return self.dispatch(Action.CONFIRM_SUBMIT)

    def continue_after_reveal(self) -> GameState:
        return self.dispatch(Action.CONTINUE)

    def reset_game(self) -> GameState:
        return self.dispatch(Action.RESET)

    def dispatch(self, action: Action, card: Optional[Card] = None) -> GameState:
        """Apply ``action`` if the current phase allows it.

        Anything else (wrong phase, card not in hand, a third discard, a
        submit with fewer than five cards) leaves the game untouched.
        """
        _, state = self.step(action, card)
        return state

    def step(self, action: Action, card: Optional[Card] = None) -> Tuple[bool, GameState]:
        """Like ``dispatch`` but also says whether the action was applied."""
        if action == Action.RESET:
            handler: Optional[Handler] = GameEngine._reset
        else:
            handler = _TRANSITIONS.get((self.phase, action))
        if handler is None:
            LOGGER.debug("Ignoring %s during %s", action.value, self.phase.value)
            return False, self.snapshot()
        applied = handler(self, card)
        if not applied:
            LOGGER.debug("Rejected %s during %s", action.value, self.phase.value)
        return applied, self.snapshot()

    # Transitions ------------------------------------------------------

    def _start_round(self, _card: Optional[Card]) -> bool:
        if self.deck is None:
            self.deck = Deck(self.rng)
        # Round one deals fresh hands; later rounds top up the two carried cards.
        self.player_hand.extend(self.deck.deal(HAND_SIZE - len(self.player_hand)))
        self.ai_hand.extend(self.deck.deal(HAND_SIZE - len(self.ai_hand)))
        self.phase_state = Discarding()
        LOGGER.debug("Round %s dealt, %s cards left in deck", self.current_round, self.deck.remaining)
        return True

    def _select_discard(self, card: Optional[Card]) -> bool:
        assert isinstance(self.phase_state, Discarding)
        return _toggle(self.phase_state.selected, card, self.player_hand, MAX_DISCARDS)

    def _confirm_discard(self, _card: Optional[Card]) -> bool:
        assert isinstance(self.phase_state, Discarding)
        if not self.phase_state.selected:
            return False
        self._finish_discards(list(self.phase_state.selected))
        return True

    def _play_hand(self, _card: Optional[Card]) -> bool:
        self._finish_discards([])
        return True

    def _finish_discards(self, player_discards: List[Card]) -> None:
        self._replace(self.player_hand, player_discards)
        ai_plan = choose_action(self.ai_hand)
        self._replace(self.ai_hand, list(ai_plan.discards))
        final_plan = choose_action(self.ai_hand)
        self.phase_state = Submitting(ai_submission=final_plan.submission)
        LOGGER.debug(
            "Player discarded %s, computer discarded %s",
            cards_to_labels(player_discards),
            cards_to_labels(ai_plan.discards),
        )

    def _replace(self, hand: List[Card], discards: List[Card]) -> None:
        assert self.deck is not None
        for card in discards:
            hand.remove(card)
            self.discarded.append(card)
        hand.extend(self.deck.deal(len(discards)))

    def _select_submit(self, card: Optional[Card]) -> bool:
        assert isinstance(self.phase_state, Submitting)
        return _toggle(self.phase_state.selected, card, self.player_hand, SUBMIT_SIZE)

    def _confirm_submit(self, _card: Optional[Card]) -> bool:
        state = self.phase_state
        assert isinstance(state, Submitting)
        if len(state.selected) != SUBMIT_SIZE:
            return False

        player_eval = evaluate_hand(state.selected)
        ai_eval = evaluate_hand(state.ai_submission)
        outcome = compare_hands(player_eval, ai_eval)
        if outcome > 0:
            winner = Winner.PLAYER
            self.player_wins += 1
        elif outcome < 0:
            winner = Winner.AI
            self.ai_wins += 1
        else:
            winner = Winner.TIE
            self.ties += 1

        result = RoundResult(
            round_number=self.current_round,
            player_hand=player_eval,
            ai_hand=ai_eval,
            winner=winner,
        )
        self.round_results.append(result)
        for card in state.selected:
            self.player_hand.remove(card)
            self.played.append(card)
        for card in state.ai_submission:
            self.ai_hand.remove(card)
            self.played.append(card)
        self.phase_state = Revealing(result=result)
        LOGGER.info(
            "Round %s: player %s vs computer %s -> %s",
            self.current_round,
            player_eval.name,
            ai_eval.name,
            winner.value,
        )
        return True

    def _continue(self, _card: Optional[Card]) -> bool:
        if self.current_round >= self.config.total_rounds:
            self.phase_state = GameOver()
            LOGGER.info(
                "Game over: player %s, computer %s, ties %s",
                self.player_wins,
                self.ai_wins,
                self.ties,
            )
        else:
            self.current_round += 1
            self.phase_state = Dealing()
        return True

    def _reset(self, _card: Optional[Card]) -> bool:
        self._new_game()
        return True

    # Snapshot helpers -------------------------------------------------

    def snapshot(self) -> GameState:
        state = self.phase_state
        selected_discards = tuple(state.selected) if isinstance(state, Discarding) else ()
        selected_submit = tuple(state.selected) if isinstance(state, Submitting) else ()
        ai_submission = state.ai_submission if isinstance(state, Submitting) else None
        return GameState(
            phase=self.phase,
            current_round=self.current_round,
            total_rounds=self.config.total_rounds,
            player_wins=self.player_wins,
            ai_wins=self.ai_wins,
            ties=self.ties,
            player_hand=tuple(self.player_hand),
            ai_hand=tuple(self.ai_hand),
            selected_discards=selected_discards,
            selected_submit=selected_submit,
            ai_submission=ai_submission,
            round_results=tuple(self.round_results),
            deck_remaining=self.deck.remaining if self.deck else 0,
            discarded=tuple(self.discarded),
            played=tuple(self.played),
        )

    def card_census(self) -> Counter:
        """Count every card the game currently holds anywhere."""
        census: Counter = Counter()
        for pile in (self.deck.cards if self.deck else (), self.player_hand, self.ai_hand, self.discarded, self.played):
            census.update(pile)
        return census

    def state_payload(self, reveal_ai: bool = False) -> Dict[str, object]:
        state = self.snapshot()
        show_ai = reveal_ai or state.phase == Phase.GAME_END
        payload: Dict[str, object] = {
            "phase": state.phase.value,
            "round": state.current_round,
            "total_rounds": state.total_rounds,
            "score": {"player": state.player_wins, "ai": state.ai_wins, "ties": state.ties},
            "hand": cards_to_labels(state.player_hand),
            "selected_discards": cards_to_labels(state.selected_discards),
            "selected_submit": cards_to_labels(state.selected_submit),
            "ai_hand_count": len(state.ai_hand),
            "deck_remaining": state.deck_remaining,
            "legal": [action.value for action in self.legal_actions()],
        }
        if show_ai:
            payload["ai_hand"] = cards_to_labels(state.ai_hand)
        if isinstance(self.phase_state, Revealing):
            payload["result"] = result_payload(self.phase_state.result)
        return payload

    def legal_actions(self) -> List[Action]:
        legal = [action for (phase, action) in _TRANSITIONS if phase == self.phase]
        legal.append(Action.RESET)
        return legal


def _toggle(selected: List[Card], card: Optional[Card], hand: List[Card], limit: int) -> bool:
    if card is None or card not in hand:
        return False
    if card in selected:
        selected.remove(card)
        return True
    if len(selected) >= limit:
        return False
    selected.append(card)
    return True


def result_payload(result: RoundResult) -> Dict[str, object]:
    def hand(evaluation) -> Dict[str, object]:
        return {
            "rank": evaluation.name,
            "cards": cards_to_labels(evaluation.cards),
            "kickers": list(evaluation.kickers),
            "text": describe_hand(evaluation),
        }

    return {
        "round": result.round_number,
        "winner": result.winner.value,
        "player": hand(result.player_hand),
        "ai": hand(result.ai_hand),
    }


_TRANSITIONS: Dict[Tuple[Phase, Action], Handler] = {
    (Phase.DEALING, Action.START_ROUND): GameEngine._start_round,
    (Phase.DISCARDING, Action.SELECT_DISCARD): GameEngine._select_discard,
    (Phase.DISCARDING, Action.CONFIRM_DISCARD): GameEngine._confirm_discard,
    (Phase.DISCARDING, Action.PLAY_HAND): GameEngine._play_hand,
    (Phase.SUBMITTING, Action.SELECT_SUBMIT): GameEngine._select_submit,
    (Phase.SUBMITTING, Action.CONFIRM_SUBMIT): GameEngine._confirm_submit,
    (Phase.REVEALING, Action.CONTINUE): GameEngine._continue,
}
