import random

import pytest

from core.cards import Card, Deck, InsufficientCards, build_deck, parse_cards, parse_label


def test_build_deck_has_52_unique_cards():
    deck = build_deck()
    assert len(deck) == 52
    assert len(set(deck)) == 52


def test_card_validation_rejects_invalid_labels():
    with pytest.raises(ValueError, match="Invalid rank"):
        Card("1", "h")
    with pytest.raises(ValueError, match="Invalid suit"):
        Card("A", "x")
    with pytest.raises(ValueError, match="Invalid card label"):
        parse_label("Ahh")


def test_card_identity_is_rank_and_suit():
    assert Card("A", "s") == parse_label("As")
    assert Card("A", "s") != Card("A", "h")
    assert len({Card("K", "d"), Card("K", "d")}) == 1


def test_parse_label_accepts_ten_spellings():
    assert parse_label("10h") == Card("T", "h")
    assert parse_label("th") == Card("T", "h")
    card = parse_label("Td")
    assert card.value == 10
    assert card.suit_name == "diamonds"
    assert card.display == "10♦"


def test_deal_takes_from_front_and_shrinks_deck():
    deck = Deck(random.Random(3))
    top = deck.cards[:7]
    dealt = deck.deal(7)
    assert tuple(dealt) == top
    assert deck.remaining == 45
    assert not set(dealt) & set(deck.cards)


def test_deal_raises_when_deck_exhausted():
    deck = Deck(random.Random(1))
    deck.deal(50)
    with pytest.raises(InsufficientCards, match="Not enough cards"):
        deck.deal(3)
    assert deck.remaining == 2


def test_draw_returns_none_when_empty():
    deck = Deck(random.Random(1))
    seen = {deck.draw() for _ in range(52)}
    assert len(seen) == 52
    assert deck.draw() is None
    assert len(deck) == 0


def test_reset_restores_full_shuffled_deck():
    deck = Deck(random.Random(9))
    deck.deal(20)
    deck.reset()
    assert deck.remaining == 52
    assert set(deck.cards) == set(build_deck())


def test_seeded_decks_shuffle_identically():
    first = Deck(random.Random(1234))
    second = Deck(random.Random(1234))
    assert first.cards == second.cards
    assert first.cards != tuple(build_deck())


def test_parse_cards_keeps_order():
    cards = parse_cards(["As", "2h", "10c"])
    assert [card.label for card in cards] == ["As", "2h", "Tc"]


def test_deal_rejects_negative_count():
    deck = Deck(random.Random(1))
    with pytest.raises(ValueError, match="negative"):
        deck.deal(-1)
    assert deck.remaining == 52
