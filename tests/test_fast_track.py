"""
Tests for the fast-track transition and win detection.
"""

from cashflow.money import EventType
from cashflow.phases import GamePhase, TurnState
from cashflow.player import Asset, AssetCategory, Track, recalc
from cashflow.rules import ActionType, get_legal_actions


def unlock(player):
    player.passive_income = player.total_expenses
    recalc(player)


def test_cannot_enter_while_locked(basic_game):
    assert not basic_game.enter_fast_track()
    assert basic_game.players[0].track == Track.RAT_RACE


def test_enter_fast_track(basic_game):
    player = basic_game.players[0]
    player.assets.append(Asset("plex", "Duplex", AssetCategory.REAL_ESTATE, cashflow=160, cost=55000))
    unlock(player)
    cash = player.cash
    payday = player.payday

    actions = {a.action_type for a in get_legal_actions(basic_game, 0)}
    assert ActionType.ENTER_FAST_TRACK in actions

    assert basic_game.enter_fast_track()

    assert player.track == Track.FAST_TRACK
    assert player.cash == cash + payday * 100
    assert player.assets == []
    assert player.liabilities == []
    assert player.passive_income == payday + 50000
    assert player.fast_track_target == player.passive_income + 50000
    assert player.total_expenses == 0
    assert player.total_income == player.passive_income
    assert player.position == basic_game.board.fast_track_start(0)
    assert basic_game.phase == GamePhase.FAST_TRACK
    assert basic_game.event_log.of_type(EventType.FAST_TRACK_ENTER)


def test_enter_only_once(basic_game):
    unlock(basic_game.players[0])
    assert basic_game.enter_fast_track()
    assert not basic_game.enter_fast_track()


def test_enter_not_mid_resolution(basic_game):
    unlock(basic_game.players[0])
    basic_game.turn_state = TurnState.AWAIT_CARD
    assert not basic_game.enter_fast_track()


def test_unlock_is_announced_at_end_of_turn(basic_game):
    unlock(basic_game.players[0])
    basic_game.turn_state = TurnState.AWAIT_END
    basic_game.end_turn()
    basic_game.turn_state = TurnState.AWAIT_END
    basic_game.end_turn()
    assert len(basic_game.event_log.of_type(EventType.FAST_TRACK_UNLOCKED)) == 1


def test_passing_dream_with_target_wins(make_game):
    game = make_game(fixed_rolls=[3])
    player = game.players[0]
    unlock(player)
    game.enter_fast_track()
    player.passive_income = player.fast_track_target
    recalc(player)
    player.position = 5
    game.turn_state = TurnState.AWAIT_ROLL

    # 5 -> 8 passes the dream square at 6
    game.roll_dice()

    assert game.game_over
    assert game.winner == 0
    assert game.phase == GamePhase.FINISHED
    assert game.event_log.of_type(EventType.GAME_END)[-1].details["reason"] == "fast_track_target"
    assert get_legal_actions(game, 0) == []


def test_dream_without_target_continues(make_game):
    game = make_game(fixed_rolls=[5])
    player = game.players[0]
    unlock(player)
    game.enter_fast_track()
    player.position = 1

    game.roll_dice()

    assert player.position == 6
    assert not game.game_over
    assert game.turn_state == TurnState.AWAIT_END


def test_fast_payday_pays_passive_income(make_game):
    game = make_game(fixed_rolls=[2])
    player = game.players[0]
    unlock(player)
    game.enter_fast_track()
    player.position = 38
    cash = player.cash

    game.roll_dice()

    assert player.position == 0
    assert player.cash == cash + player.payday
