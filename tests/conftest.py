"""Shared test fixtures for Cashflow engine tests."""

import pytest

from cashflow.board import Board, SquareType
from cashflow.cards import DeckKey, build_card_tables, make_card
from cashflow.config import GameSettings
from cashflow.game import create_game
from cashflow.market import open_market
from cashflow.player import Player, recalc

PLAYER_NAMES = ["Alice", "Bob", "Charlie", "Diana"]


@pytest.fixture
def settings():
    """Default game settings with fixed seed for reproducibility."""
    return GameSettings(seed=42)


@pytest.fixture
def two_players():
    """Two test players."""
    return [Player(0, "Alice"), Player(1, "Bob")]


@pytest.fixture
def basic_game(settings):
    """Single-player game on the standard board with the built-in cards."""
    return create_game(settings, [Player(0, "Alice")])


@pytest.fixture
def two_player_game(settings, two_players):
    """Game with two players and fixed seed."""
    return create_game(settings, two_players)


@pytest.fixture
def opportunity_board():
    """Twelve-square rat race made only of opportunity squares."""
    return Board(rat_race=[SquareType.OPPORTUNITY] * 12)


@pytest.fixture
def small_deal_tables():
    """One plain small deal and nothing else."""
    return build_card_tables(
        {
            "smallDeal": {
                "sd-test-house": {"type": "House", "name": "Test House", "cost": 100, "cashFlow": 50},
            },
        }
    )


@pytest.fixture
def make_game(settings):
    """Factory for games with custom tables, boards and scripted dice."""

    def _make(num_players=1, card_tables=None, board=None, fixed_rolls=None, **overrides):
        game_settings = GameSettings(**{"seed": settings.seed, **overrides})
        players = [Player(i, PLAYER_NAMES[i]) for i in range(num_players)]
        return create_game(game_settings, players, card_tables=card_tables, board=board, fixed_rolls=fixed_rolls)

    return _make


@pytest.fixture
def set_payday():
    """Adjust a player's expenses so their payday equals the given amount."""

    def _set(player, amount):
        player.total_expenses = player.total_income - amount
        recalc(player)

    return _set


@pytest.fixture
def put_on_market():
    """Select a card for the current player and open its market session."""

    def _put(game, record, deck_key=DeckKey.SMALL_DEALS, card_id="market-card"):
        card = make_card(record, deck_key, card_id)
        game.selected_card = card
        open_market(game, card)
        return card

    return _put
