"""
Tests for bank financing and loan repayment.
"""

import pytest

from cashflow.money import EventType
from cashflow.phases import TurnState
from cashflow.player import Track
from cashflow.rules import Action, ActionType, apply_action


def test_shortfall_rounds_up_to_thousand(basic_game):
    """A shortfall of 1250 becomes a 2000 loan with a 200 payment."""
    player = basic_game.players[0]
    player.cash = 0
    expenses = player.total_expenses

    result = basic_game.bank.ensure_funds(player, 1250, reason="test")

    assert result.ok
    assert result.loan.balance == 2000
    assert result.loan.payment == 200
    assert result.loan.is_bank_loan
    assert player.cash == 2000
    assert player.total_expenses == expenses + 200
    assert player.payday == player.total_income - player.total_expenses
    assert basic_game.event_log.of_type(EventType.BANK_LOAN)[-1].details["principal"] == 2000


def test_no_loan_when_cash_covers(basic_game):
    player = basic_game.players[0]
    player.cash = 5000
    result = basic_game.bank.ensure_funds(player, 5000)
    assert result.ok
    assert result.loan is None
    assert player.bank_loans() == []


def test_ensure_funds_does_not_debit(basic_game):
    player = basic_game.players[0]
    player.cash = 100
    basic_game.bank.ensure_funds(player, 700)
    assert player.cash == 1100


def test_partial_repayment(basic_game):
    """Repaying 1000 of a 2000 loan leaves 1000 with a 100 payment."""
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 1250).loan
    expenses = player.total_expenses

    assert basic_game.bank.repay_bank_loan(player, loan.id, 1000)

    assert loan.balance == 1000
    assert loan.payment == 100
    assert player.cash == 1000
    assert player.total_expenses == expenses - 100


def test_partial_repayment_floors_to_step(basic_game):
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 3000).loan
    player.cash = 5000

    assert basic_game.bank.repay_bank_loan(player, loan.id, 1999)
    assert loan.balance == 2000
    assert player.cash == 4000

    assert not basic_game.bank.repay_bank_loan(player, loan.id, 999)
    assert loan.balance == 2000


def test_full_repayment_removes_loan(basic_game):
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 1250).loan
    expenses_with_loan = player.total_expenses
    player.cash = 2500

    assert basic_game.bank.repay_bank_loan(player, loan.id, 5000)

    assert player.cash == 500
    assert player.get_liability(loan.id) is None
    assert player.total_expenses == expenses_with_loan - 200


def test_repayment_needs_cash(basic_game):
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 1250).loan
    player.cash = 500
    assert not basic_game.bank.repay_bank_loan(player, loan.id, 2000)
    assert loan.balance == 2000


def test_scenario_debt_is_not_repayable(basic_game):
    player = basic_game.players[0]
    player.cash = 1_000_000
    mortgage = player.liabilities[0]
    assert not basic_game.bank.repay_bank_loan(player, mortgage.id, mortgage.balance)


def test_fast_track_cannot_borrow(basic_game):
    player = basic_game.players[0]
    player.track = Track.FAST_TRACK
    player.cash = 500

    result = basic_game.bank.ensure_funds(player, 3000)

    assert not result.ok
    assert result.shortfall == 2500
    assert player.cash == 500
    assert basic_game.event_log.of_type(EventType.BANK_LOAN_DENIED)


def test_repay_only_at_end_of_turn(basic_game):
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 1250).loan

    assert basic_game.turn_state == TurnState.AWAIT_ROLL
    assert not basic_game.repay_bank_loan(loan.id, 2000)

    basic_game.turn_state = TurnState.AWAIT_END
    assert basic_game.repay_bank_loan(loan.id, 2000)
    assert player.bank_loans() == []


def test_repay_amount_given_as_text(basic_game):
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 1250).loan
    basic_game.turn_state = TurnState.AWAIT_END

    assert apply_action(basic_game, Action(ActionType.REPAY_BANK_LOAN, liability_id=loan.id, amount="1000"))

    assert loan.balance == 1000
    assert loan.payment == 100
    assert player.cash == 1000


@pytest.mark.parametrize("amount", ["abc", -500, float("nan"), None, {"amount": 1000}])
def test_malformed_repayment_is_ignored(basic_game, amount):
    player = basic_game.players[0]
    player.cash = 0
    loan = basic_game.bank.ensure_funds(player, 1250).loan
    expenses = player.total_expenses
    basic_game.turn_state = TurnState.AWAIT_END

    assert not apply_action(basic_game, Action(ActionType.REPAY_BANK_LOAN, liability_id=loan.id, amount=amount))

    assert loan.balance == 2000
    assert loan.payment == 200
    assert player.cash == 2000
    assert player.total_expenses == expenses
    assert player.bank_loans() == [loan]
