"""
Tests for public snapshot serialization.
"""

import json

from cashflow.phases import TurnState
from cashflow.snapshot import build_snapshot, serialize_snapshot

STOCK = {"type": "Stock", "name": "OK4U Drug", "symbol": "OK4U", "price": 5}


def test_snapshot_top_level_keys(two_player_game):
    snap = serialize_snapshot(two_player_game)
    for key in (
        "turn_number",
        "phase",
        "turn_state",
        "current_player_id",
        "game_over",
        "winner_id",
        "players",
        "decks",
        "ventures",
        "loans",
    ):
        assert key in snap

    assert snap["turn_state"] == TurnState.AWAIT_ROLL.value
    assert snap["phase"] == "ratRace"
    assert snap["current_player_id"] == 0
    assert len(snap["players"]) == 2


def test_snapshot_is_json_serializable(two_player_game):
    two_player_game.create_loan(1, 0, 100)
    json.dumps(serialize_snapshot(two_player_game))


def test_player_view(basic_game):
    player = serialize_snapshot(basic_game)["players"][0]

    assert player["name"] == "Alice"
    assert player["scenario_id"] == "airline-pilot"
    assert player["track"] == "ratRace"
    assert player["payday"] == 2630
    assert player["net_worth"] == basic_game.players[0].net_worth()
    assert all("liability_id" in l for l in player["liabilities"])


def test_decks_expose_counts_only(basic_game):
    decks = serialize_snapshot(basic_game)["decks"]

    assert set(decks) == {"smallDeals", "bigDeals", "offers", "doodads"}
    for counts in decks.values():
        assert set(counts) == {"cards_remaining", "discard_count"}
        assert counts["discard_count"] == 0


def test_market_session_is_visible_while_open(basic_game, put_on_market):
    assert serialize_snapshot(basic_game)["market"] is None

    put_on_market(basic_game, STOCK, card_id="ok4u")
    snap = serialize_snapshot(basic_game)

    assert snap["market"]["card_id"] == "ok4u"
    assert snap["market"]["stage"] == "sell"
    assert snap["market"]["responders"] == [0]
    assert snap["selected_card_id"] == "ok4u"


def test_build_snapshot_returns_model(basic_game):
    snapshot = build_snapshot(basic_game)
    assert snapshot.players[0].player_id == 0
    assert snapshot.last_roll is None
