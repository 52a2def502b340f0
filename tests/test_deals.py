"""
Tests for card previews and deal completion.
"""

import pytest

from cashflow.cards import DeckKey, build_card_tables, make_card
from cashflow.deals import PrimaryAction, infer_asset_category, preview_card
from cashflow.money import EventType
from cashflow.phases import TurnState
from cashflow.player import AssetCategory, Track
from cashflow.rules import Action, ActionType, apply_action


def select(game, record, deck_key=DeckKey.SMALL_DEALS, card_id="card"):
    """Put a card in front of the current player as if just drawn."""
    card = make_card(record, deck_key, card_id)
    game.selected_card = card
    game.turn_state = TurnState.AWAIT_CARD
    return card


class TestPreview:
    def test_deal_preview(self, basic_game):
        card = make_card(
            {"type": "House", "cost": 50000, "downPayment": 5000, "cashFlow": 100}, DeckKey.SMALL_DEALS
        )
        preview = preview_card(card, basic_game.players[0])
        assert preview.cost == 5000
        assert preview.cashflow == 100
        assert preview.primary_action == PrimaryAction.BUY
        assert preview.can_pass

    def test_doodad_preview(self, basic_game):
        card = make_card({"type": "Doodad", "cost": 260}, DeckKey.DOODADS)
        preview = preview_card(card, basic_game.players[0])
        assert preview.cost == 260
        assert preview.primary_action == PrimaryAction.PAY
        assert not preview.can_pass

    def test_fractional_doodad(self, basic_game):
        player = basic_game.players[0]
        player.cash = 4005
        card = make_card({"type": "Doodad", "amount": 0.1}, DeckKey.DOODADS)
        assert preview_card(card, player).cost == 401

    def test_security_preview(self, basic_game):
        card = make_card({"type": "Stock", "symbol": "OK4U", "price": 10}, DeckKey.SMALL_DEALS)
        preview = preview_card(card, basic_game.players[0])
        assert preview.cost == 0
        assert preview.primary_action == PrimaryAction.RESOLVE
        assert not preview.can_pass

    def test_dividend_counts_as_cashflow(self, basic_game):
        card = make_card({"type": "Land", "cost": 1000, "dividend": 12.5}, DeckKey.SMALL_DEALS)
        assert preview_card(card, basic_game.players[0]).cashflow == 13

    @pytest.mark.parametrize(
        "label,category",
        [
            ("Mutual Fund", AssetCategory.STOCK),
            ("Certificate of Deposit", AssetCategory.STOCK),
            ("3-Plex", AssetCategory.REAL_ESTATE),
            ("Condo", AssetCategory.REAL_ESTATE),
            ("Franchise", AssetCategory.BUSINESS),
            ("Limited Partnership", AssetCategory.BUSINESS),
            ("Gold Coin", AssetCategory.COLLECTIBLE),
            ("Doodad", AssetCategory.OTHER),
            ("", AssetCategory.OTHER),
        ],
    )
    def test_asset_categories(self, label, category):
        assert infer_asset_category(label) == category


class TestCompleteDeal:
    def test_end_to_end_small_deal(self, make_game, opportunity_board, small_deal_tables, set_payday):
        """Payday 400, roll 3 onto an opportunity, buy a 100/50 deal with 400 cash."""
        game = make_game(card_tables=small_deal_tables, board=opportunity_board, fixed_rolls=[3])
        player = game.players[0]
        set_payday(player, 400)
        player.cash = 400

        game.roll_dice()
        assert player.position == 3
        assert game.turn_state == TurnState.AWAIT_ACTION

        assert apply_action(game, Action(ActionType.DRAW_SMALL_DEAL))
        assert game.turn_state == TurnState.AWAIT_CARD
        assert game.selected_card.id == "sd-test-house"

        assert apply_action(game, Action(ActionType.APPLY_CARD))
        assert player.cash == 300
        assert player.passive_income == 50
        assert player.payday == 450
        assert len(player.assets) == 1
        assert player.assets[0].cost == 100
        assert player.assets[0].cashflow == 50
        assert game.selected_card is None
        assert game.turn_state == TurnState.AWAIT_END

    def test_shortfall_takes_a_loan(self, basic_game):
        player = basic_game.players[0]
        player.cash = 400
        select(basic_game, {"type": "House", "cost": 50000, "downPayment": 5000, "mortgage": 45000, "cashFlow": 100})

        assert basic_game.apply_selected_card()

        assert player.cash == 400 + 5000 - 5000
        loan = player.bank_loans()[0]
        assert loan.balance == 5000
        assert loan.payment == 500
        asset = player.assets[0]
        assert asset.category == AssetCategory.REAL_ESTATE
        assert asset.cost == 50000
        assert asset.metadata["mortgage"] == 45000

    def test_custom_deltas(self, basic_game):
        player = basic_game.players[0]
        player.cash = 1000
        select(basic_game, {"type": "Land", "cost": 500, "cashFlow": 10})

        assert basic_game.apply_selected_card(cash_delta=-200, cashflow_delta=30)
        assert player.cash == 800
        assert player.passive_income == 30

    def test_numeric_string_deltas(self, basic_game):
        player = basic_game.players[0]
        player.cash = 1000
        select(basic_game, {"type": "Land", "cost": 500, "cashFlow": 10})

        assert apply_action(basic_game, Action(ActionType.APPLY_CARD, cash_delta="-200", cashflow_delta="30"))
        assert player.cash == 800
        assert player.passive_income == 30

    @pytest.mark.parametrize(
        "params",
        [
            {"cash_delta": "abc"},
            {"cash_delta": float("nan")},
            {"cash_delta": float("-inf")},
            {"cash_delta": [100]},
            {"cashflow_delta": "lots"},
        ],
    )
    def test_malformed_deltas_leave_ledger_untouched(self, basic_game, params):
        player = basic_game.players[0]
        player.cash = 1000
        expenses = player.total_expenses
        card = select(basic_game, {"type": "Land", "cost": 500, "cashFlow": 10})

        assert not apply_action(basic_game, Action(ActionType.APPLY_CARD, **params))

        assert player.cash == 1000
        assert player.passive_income == 0
        assert player.total_expenses == expenses
        assert player.assets == []
        assert basic_game.selected_card is card
        assert basic_game.turn_state == TurnState.AWAIT_CARD

    def test_doodad_is_paid(self, basic_game):
        player = basic_game.players[0]
        player.cash = 1000
        select(basic_game, {"type": "Doodad", "name": "Dinner Out", "cost": 80}, DeckKey.DOODADS)

        assert basic_game.apply_selected_card()
        assert player.cash == 920
        assert player.assets == []
        assert basic_game.turn_state == TurnState.AWAIT_END

    def test_doodad_with_loan(self, basic_game):
        player = basic_game.players[0]
        player.cash = 400
        expenses = player.total_expenses
        select(
            basic_game,
            {"type": "Doodad", "name": "Buy a Boat", "cost": 1000, "loan": 17000, "payment": 340},
            DeckKey.DOODADS,
        )

        assert basic_game.apply_selected_card()

        boat = next(l for l in player.liabilities if l.name == "Buy a Boat")
        assert boat.balance == 17000
        assert boat.payment == 340
        assert player.cash == 400
        assert player.total_expenses == expenses + 340 + 100
        assert basic_game.event_log.of_type(EventType.LIABILITY_ADDED)

    def test_collectibles_stack(self, basic_game):
        player = basic_game.players[0]
        player.cash = 10000
        record = {"type": "Gold Coin", "name": "Krugerrands", "cost": 3000, "quantity": 10}
        select(basic_game, record, card_id="coins-1")
        basic_game.apply_selected_card()
        select(basic_game, record, card_id="coins-2")
        basic_game.apply_selected_card()

        assert len(player.assets) == 1
        assert player.assets[0].quantity == 20
        assert player.assets[0].cost == 6000

    def test_blocked_on_fast_track(self, basic_game):
        player = basic_game.players[0]
        player.track = Track.FAST_TRACK
        player.cash = 100
        card = select(basic_game, {"type": "Business", "cost": 50000, "cashFlow": 5000})

        assert not basic_game.apply_selected_card()

        assert player.cash == 100
        assert player.assets == []
        assert basic_game.selected_card is card
        assert basic_game.turn_state == TurnState.AWAIT_CARD
        assert basic_game.event_log.of_type(EventType.DEAL_BLOCKED)[-1].details["shortfall"] == 49900

    def test_apply_outside_await_card_is_a_noop(self, basic_game):
        player = basic_game.players[0]
        cash = player.cash
        select(basic_game, {"type": "Land", "cost": 100})
        basic_game.turn_state = TurnState.AWAIT_ROLL

        assert not basic_game.apply_selected_card()
        assert player.cash == cash


class TestPassCard:
    def test_pass_deal(self, basic_game):
        card = select(basic_game, {"type": "Land", "cost": 100})
        assert basic_game.pass_selected_card()
        assert basic_game.turn_state == TurnState.AWAIT_END
        assert basic_game.decks.decks[DeckKey.SMALL_DEALS].discard_pile[-1] is card
        assert basic_game.event_log.of_type(EventType.CARD_PASS)

    def test_doodad_cannot_be_passed(self, basic_game):
        card = select(basic_game, {"type": "Doodad", "cost": 100}, DeckKey.DOODADS)
        assert not basic_game.pass_selected_card()
        assert basic_game.selected_card is card
        assert basic_game.turn_state == TurnState.AWAIT_CARD
        assert basic_game.event_log.of_type(EventType.CARD_PASS_DENIED)
        assert not basic_game.event_log.of_type(EventType.CARD_PASS)


def test_empty_deck_ends_the_action(make_game, opportunity_board):
    game = make_game(card_tables=build_card_tables({}), board=opportunity_board, fixed_rolls=[2])
    game.roll_dice()
    assert game.draw_opportunity(DeckKey.SMALL_DEALS) is None
    assert game.turn_state == TurnState.AWAIT_END
