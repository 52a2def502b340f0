"""
Tests for card classification, dataset loading and deck behaviour.
"""

import json
import random

import pytest

from cashflow.card_data import DEFAULT_CARD_DATA
from cashflow.cards import (
    CardKind,
    DeckKey,
    DeckManager,
    OfferKind,
    SplitKind,
    build_card_tables,
    coerce_int,
    load_card_tables,
    make_card,
)
from cashflow.config import GameSettings
from cashflow.exceptions import CardDataError
from cashflow.money import EventLog, EventType, coerce_signed
from cashflow.player import PlayerState
from cashflow.scenarios import SCENARIOS


@pytest.fixture
def tables():
    return load_card_tables()


def card_by_id(tables, deck_key, card_id):
    return next(c for c in tables[deck_key] if c.id == card_id)


class TestClassification:
    def test_securities(self, tables):
        for card_id in ("sd-myt4u-10", "sd-gro4us-10", "sd-2bigpower", "sd-cd-4000"):
            assert card_by_id(tables, DeckKey.SMALL_DEALS, card_id).kind == CardKind.SECURITY

    def test_split_events(self, tables):
        split = card_by_id(tables, DeckKey.SMALL_DEALS, "sd-ok4u-split")
        reverse = card_by_id(tables, DeckKey.SMALL_DEALS, "sd-on2u-reverse")
        assert split.kind == CardKind.SPLIT_EVENT
        assert split.split_kind == SplitKind.SPLIT
        assert reverse.kind == CardKind.SPLIT_EVENT
        assert reverse.split_kind == SplitKind.REVERSE

    def test_plain_deals(self, tables):
        assert card_by_id(tables, DeckKey.SMALL_DEALS, "sd-house-3br").kind == CardKind.DEAL
        assert card_by_id(tables, DeckKey.BIG_DEALS, "bd-8plex").kind == CardKind.DEAL

    def test_stock_without_price_is_a_deal(self):
        card = make_card({"type": "Stock", "name": "Rumour", "symbol": "OK4U"}, DeckKey.SMALL_DEALS)
        assert card.kind == CardKind.DEAL

    @pytest.mark.parametrize(
        "card_id,kind",
        [
            ("of-business-boom", OfferKind.IMPROVE),
            ("of-limited-sold", OfferKind.FORCED_LIMITED),
            ("of-plex-buyer", OfferKind.SELL),
            ("of-house-buyer", OfferKind.SELL),
            ("of-inflation", OfferKind.NOOP),
        ],
    )
    def test_offer_kinds(self, tables, card_id, kind):
        card = card_by_id(tables, DeckKey.OFFERS, card_id)
        assert card.kind == CardKind.OFFER
        assert card.offer_kind == kind

    def test_doodads(self, tables):
        assert all(c.kind == CardKind.DOODAD for c in tables[DeckKey.DOODADS])
        assert card_by_id(tables, DeckKey.DOODADS, "dd-braces").requires_child

    def test_everyone_rule(self, tables):
        assert card_by_id(tables, DeckKey.OFFERS, "of-house-buyer").mentions_everyone
        assert not card_by_id(tables, DeckKey.OFFERS, "of-condo-buyer").mentions_everyone

    def test_cards_are_immutable(self, tables):
        card = card_by_id(tables, DeckKey.SMALL_DEALS, "sd-house-3br")
        with pytest.raises(TypeError):
            card.fields["cost"] = 1
        assert card.fields["deckKey"] == "smallDeals"


class TestCoercion:
    @pytest.mark.parametrize(
        "value,expected",
        [(12, 12), (12.7, 12), ("12.7", 12), (-5, 0), ("abc", 0), (None, 0), (True, 0), (float("nan"), 0)],
    )
    def test_coerce_int(self, value, expected):
        assert coerce_int(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (-200, -200),
            ("-200", -200),
            (12.5, 13),
            (-12.5, -12),
            ("abc", None),
            (None, None),
            (float("nan"), None),
            (float("inf"), None),
        ],
    )
    def test_coerce_signed(self, value, expected):
        assert coerce_signed(value) == expected

    def test_non_string_fields_are_stringified(self):
        card = make_card({"type": 7, "name": 42}, DeckKey.SMALL_DEALS, "odd")
        assert card.type == "7"
        assert card.name == "42"
        assert card.id == "odd"


class TestLoading:
    def test_builtin_dataset(self, tables):
        assert len(tables[DeckKey.SMALL_DEALS]) == len(DEFAULT_CARD_DATA["smallDeal"])
        assert len(tables[DeckKey.DOODADS]) == len(DEFAULT_CARD_DATA["doodad"])

    def test_list_tables(self):
        tables = build_card_tables({"doodad": [{"id": "d1", "type": "Doodad", "cost": 10}]})
        assert tables[DeckKey.DOODADS][0].id == "d1"
        assert tables[DeckKey.SMALL_DEALS] == []

    def test_unknown_tables_are_ignored(self):
        tables = build_card_tables({"mystery": {"x": {"type": "Doodad"}}})
        assert all(not cards for cards in tables.values())

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({"smallDeal": {"sd-1": {"type": "Land", "name": "Lot", "cost": 900}}}))
        tables = load_card_tables(path)
        assert tables[DeckKey.SMALL_DEALS][0].name == "Lot"

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text("{not json")
        with pytest.raises(CardDataError):
            load_card_tables(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text("[]")
        with pytest.raises(CardDataError):
            load_card_tables(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(CardDataError):
            load_card_tables(tmp_path / "missing.json")

    def test_record_must_be_object(self):
        with pytest.raises(CardDataError):
            build_card_tables({"offer": {"o1": "Plex"}})


class TestDecks:
    def _manager(self, raw, settings=None):
        log = EventLog()
        manager = DeckManager(build_card_tables(raw), settings or GameSettings(), random.Random(7), log)
        return manager, log

    def test_deck_conservation(self, basic_game):
        player = basic_game.players[0]
        deck = basic_game.decks.decks[DeckKey.SMALL_DEALS]
        total = len(deck.cards) + len(deck.discard_pile)

        for _ in range(total * 2 + 3):
            card = basic_game.decks.draw(DeckKey.SMALL_DEALS, player)
            assert card is not None
            assert len(deck.cards) + len(deck.discard_pile) + 1 == total
            basic_game.decks.discard(card)
            assert len(deck.cards) + len(deck.discard_pile) == total

    def test_reshuffle_is_logged(self):
        manager, log = self._manager({"smallDeal": {"a": {"type": "Land", "cost": 1}}})
        player = _player()
        card = manager.draw(DeckKey.SMALL_DEALS, player)
        manager.discard(card)
        assert manager.draw(DeckKey.SMALL_DEALS, player).id == "a"
        assert log.of_type(EventType.DECK_RESHUFFLE)

    def test_empty_deck_returns_none(self):
        manager, _ = self._manager({})
        assert manager.draw(DeckKey.OFFERS, _player()) is None

    def test_child_doodads_are_skipped(self):
        manager, log = self._manager(
            {
                "doodad": {
                    "braces": {"type": "Doodad", "cost": 2000, "child": True},
                    "college": {"type": "Doodad", "cost": 1200, "child": True},
                    "dinner": {"type": "Doodad", "cost": 80},
                }
            }
        )
        player = _player()
        card = manager.draw(DeckKey.DOODADS, player)
        assert card.id == "dinner"
        skipped = {e.details["card_id"] for e in log.of_type(EventType.CARD_SKIPPED)}
        assert skipped <= {"braces", "college"}

    def test_only_child_doodads_yield_nothing(self):
        manager, _ = self._manager({"doodad": {"braces": {"type": "Doodad", "cost": 2000, "child": True}}})
        player = _player()
        assert manager.draw(DeckKey.DOODADS, player) is None
        deck = manager.decks[DeckKey.DOODADS]
        assert len(deck.cards) + len(deck.discard_pile) == 1

    def test_child_doodad_with_child(self):
        manager, _ = self._manager({"doodad": {"braces": {"type": "Doodad", "cost": 2000, "child": True}}})
        player = _player()
        player.children = 1
        assert manager.draw(DeckKey.DOODADS, player).id == "braces"

    def test_preferred_stock_filter(self):
        raw = {
            "smallDeal": {
                "pref": {"type": "Preferred Stock", "symbol": "2BIGPOWER", "price": 1200, "dividend": 10},
                "land": {"type": "Land", "cost": 5000},
            }
        }
        manager, _ = self._manager(raw, GameSettings(enable_preferred_stock=False))
        deck = manager.decks[DeckKey.SMALL_DEALS]
        assert [c.id for c in deck.cards] == ["land"]
        assert [c.id for c in deck.set_aside] == ["pref"]

    def test_disabled_big_deals(self):
        manager, _ = self._manager({"bigDeal": {"plex": {"type": "4-Plex", "cost": 90000}}}, GameSettings(enable_big_deals=False))
        assert manager.draw(DeckKey.BIG_DEALS, _player()) is None

    def test_counts(self, basic_game):
        counts = basic_game.decks.counts()
        assert set(counts) == {"smallDeals", "bigDeals", "offers", "doodads"}
        assert counts["offers"]["cards_remaining"] == len(DEFAULT_CARD_DATA["offer"])
        assert counts["offers"]["discard_count"] == 0


def _player():
    return PlayerState(0, "Alice", SCENARIOS[0], 1000)
