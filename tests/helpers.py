from __future__ import annotations

import random
from typing import Callable, Iterable, List, Optional, Sequence

from core.cards import Card, Deck, build_deck, parse_cards
from core.game import GameEngine
from core.models import GameConfig, GameState, Phase


class StackedDeck(Deck):
    """Deck whose top cards are fixed; the rest follow in canonical order."""

    def __init__(self, labels: Sequence[str]) -> None:
        super().__init__(random.Random(0))
        front = parse_cards(labels)
        self._cards = front + [card for card in build_deck() if card not in front]

    def shuffle(self) -> None:
        pass


def create_engine(*, rounds: int = 3, seed: Optional[int] = 42) -> GameEngine:
    """Instantiate an engine with a reproducible shuffle."""
    return GameEngine(GameConfig(total_rounds=rounds, seed=seed))


def stack_deck(monkeypatch, labels: Sequence[str]) -> None:
    monkeypatch.setattr("core.game.Deck", lambda rng: StackedDeck(labels))


def select_all(select: Callable[[Card], GameState], cards: Iterable[Card]) -> GameState:
    state = None
    for card in cards:
        state = select(card)
    assert state is not None
    return state


def play_round(engine: GameEngine, discards: int = 0, pick: Optional[Callable[[List[Card]], List[Card]]] = None) -> GameState:
    """Deal, discard the first ``discards`` cards, submit the first five (or ``pick``)."""
    state = engine.start_new_round()
    assert state.phase == Phase.DISCARDING
    if discards:
        select_all(engine.select_card_for_discard, state.player_hand[:discards])
        state = engine.confirm_discard()
    else:
        state = engine.play_hand_without_discard()
    assert state.phase == Phase.SUBMITTING
    hand = list(state.player_hand)
    chosen = pick(hand) if pick else hand[:5]
    select_all(engine.select_card_for_submit, chosen)
    state = engine.confirm_submit()
    assert state.phase == Phase.REVEALING
    return state


def assert_census(engine: GameEngine) -> None:
    census = engine.card_census()
    if engine.deck is None:
        assert sum(census.values()) == 0
        return
    assert set(census) == set(build_deck())
    assert all(count == 1 for count in census.values())
