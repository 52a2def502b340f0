"""
Tests for turn advancement, skipped turns, time limits and liquidation.
"""

from cashflow.config import GameSettings
from cashflow.game import create_game
from cashflow.money import EventType
from cashflow.phases import TurnState
from cashflow.player import Asset, AssetCategory, Player, PlayerStatus, recalc


def finish_turn(game):
    game.turn_state = TurnState.AWAIT_END
    return game.end_turn()


def on_fast_track_with_obligation(game, obligation, cash):
    player = game.get_current_player()
    player.passive_income = player.total_expenses
    recalc(player)
    game.enter_fast_track()
    player.cash = cash
    player.pending_obligation = obligation
    return player


class TestTurnOrder:
    def test_basic_turn_flow(self, two_player_game):
        assert two_player_game.get_current_player().player_id == 0
        assert two_player_game.turn_number == 0

        assert finish_turn(two_player_game)
        assert two_player_game.get_current_player().player_id == 1
        assert two_player_game.turn_number == 0
        assert two_player_game.turn_state == TurnState.AWAIT_ROLL

        finish_turn(two_player_game)
        assert two_player_game.get_current_player().player_id == 0
        assert two_player_game.turn_number == 1

    def test_end_turn_needs_resolution(self, two_player_game):
        assert not two_player_game.end_turn()
        two_player_game.turn_state = TurnState.AWAIT_CARD
        assert not two_player_game.end_turn()
        assert two_player_game.get_current_player().player_id == 0

    def test_declining_an_opportunity(self, two_player_game):
        two_player_game.turn_state = TurnState.AWAIT_ACTION
        assert two_player_game.end_turn()
        assert two_player_game.get_current_player().player_id == 1

    def test_downsized_player_is_skipped(self, two_player_game):
        two_player_game.players[1].skip_turns = 2

        finish_turn(two_player_game)

        assert two_player_game.get_current_player().player_id == 0
        assert two_player_game.turn_number == 1
        assert two_player_game.players[1].skip_turns == 1
        assert two_player_game.event_log.of_type(EventType.TURN_SKIPPED)

    def test_bankrupt_player_is_skipped(self, settings):
        game = create_game(settings, [Player(0, "Alice"), Player(1, "Bob"), Player(2, "Charlie")])
        game.players[1].status = PlayerStatus.BANKRUPT
        finish_turn(game)
        assert game.get_current_player().player_id == 2

    def test_turn_start_is_logged(self, two_player_game):
        finish_turn(two_player_game)
        last = two_player_game.event_log.of_type(EventType.TURN_START)[-1]
        assert last.player_id == 1


class TestTimeLimit:
    def test_richest_player_wins(self):
        game = create_game(GameSettings(seed=3, time_limit_turns=1), [Player(0, "Alice"), Player(1, "Bob")])
        game.players[1].cash = 1_000_000

        finish_turn(game)
        assert not game.game_over
        finish_turn(game)

        assert game.game_over
        assert game.winner == 1
        assert game.event_log.of_type(EventType.GAME_END)[-1].details["reason"] == "time_limit"


class TestLiquidation:
    def test_obligation_paid_when_cash_covers(self, basic_game):
        player = on_fast_track_with_obligation(basic_game, 3000, 5000)

        assert finish_turn(basic_game)

        assert player.cash == 2000
        assert player.pending_obligation == 0
        assert basic_game.turn_state == TurnState.AWAIT_ROLL
        assert basic_game.event_log.of_type(EventType.OBLIGATION_PAID)

    def test_liquidation_raises_cash(self, basic_game):
        player = on_fast_track_with_obligation(basic_game, 3000, 1000)
        player.assets.append(Asset("biz", "Widget Co", AssetCategory.BUSINESS, cashflow=500, cost=6000))
        player.passive_income += 500
        recalc(player)

        finish_turn(basic_game)
        assert basic_game.turn_state == TurnState.AWAIT_LIQUIDATION
        assert basic_game.liquidation.required == 3000

        assert basic_game.sell_liquidation_asset("biz") == 3000
        assert player.cash == 4000
        assert player.assets == []
        assert basic_game.liquidation.raised == 3000

        assert basic_game.finalize_liquidation()
        assert player.cash == 1000
        assert player.pending_obligation == 0
        assert not player.is_bankrupt
        assert basic_game.turn_state == TurnState.AWAIT_ROLL

    def test_unknown_asset_sells_nothing(self, basic_game):
        on_fast_track_with_obligation(basic_game, 3000, 0)
        finish_turn(basic_game)
        assert basic_game.sell_liquidation_asset("missing") is None

    def test_bankruptcy_ends_single_player_game(self, basic_game):
        player = on_fast_track_with_obligation(basic_game, 3000, 1000)

        finish_turn(basic_game)
        assert not basic_game.finalize_liquidation()

        assert player.is_bankrupt
        assert player.assets == []
        assert basic_game.game_over
        assert basic_game.winner is None

    def test_bankrupt_player_leaves_rotation(self, two_player_game):
        player = on_fast_track_with_obligation(two_player_game, 3000, 0)

        finish_turn(two_player_game)
        two_player_game.finalize_liquidation()

        assert player.is_bankrupt
        assert not two_player_game.game_over
        assert two_player_game.get_current_player().player_id == 1
        finish_turn(two_player_game)
        assert two_player_game.get_current_player().player_id == 1
        assert two_player_game.event_log.of_type(EventType.BANKRUPTCY)

    def test_bankruptcy_clears_expenses(self, two_player_game):
        player = two_player_game.players[0]
        two_player_game.bank.ensure_funds(player, player.cash + 5000)
        player.children = 1
        player.child_expense = 532
        player.total_expenses += 532
        recalc(player)

        two_player_game.declare_bankruptcy(0)

        assert player.liabilities == []
        assert player.total_expenses == 0
        assert player.child_expense == 0
        assert player.payday == player.total_income
