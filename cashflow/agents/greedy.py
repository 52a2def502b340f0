"""Greedy agent that chases passive income."""

import random
from typing import Dict, List

from cashflow.cards import CardKind, OfferKind, coerce_number
from cashflow.game import GameState
from cashflow.market import MarketStage, matches_offer, matches_symbol, offer_value
from cashflow.player import available_quantity
from cashflow.rules import Action, ActionType

from cashflow.agents.base import Agent


class GreedyAgent(Agent):
    """
    Simple AI that buys anything with positive cashflow it can pay for in
    cash, sells into offers above cost, and heads for the fast track as soon
    as it is unlocked.
    """

    # Cash kept back when deciding whether to buy or repay
    RESERVE = 1000

    def __init__(self, player_id: int, name: str):
        super().__init__(player_id, name)
        self.rng = random.Random(player_id)  # Deterministic based on player_id

    def choose_action(self, game: GameState, legal_actions: List[Action]) -> Action:
        """
        Choose action with simple greedy strategy.

        Priority order:
        1. Enter the fast track / liquidate / roll
        2. Take deals with positive cashflow, sell into profitable offers
        3. Donate to charity when rich, repay bank loans with spare cash
        4. End turn
        """
        by_type: Dict[ActionType, List[Action]] = {}
        for action in legal_actions:
            by_type.setdefault(action.action_type, []).append(action)
        player = game.players[self.player_id]

        if ActionType.ENTER_FAST_TRACK in by_type:
            return by_type[ActionType.ENTER_FAST_TRACK][0]

        if ActionType.SELL_LIQUIDATION_ASSET in by_type and game.liquidation is not None:
            if player.cash < player.pending_obligation:
                return by_type[ActionType.SELL_LIQUIDATION_ASSET][0]
        if ActionType.FINALIZE_LIQUIDATION in by_type:
            return by_type[ActionType.FINALIZE_LIQUIDATION][0]

        if ActionType.ROLL_DICE in by_type:
            return by_type[ActionType.ROLL_DICE][0]

        if ActionType.MARKET_STEP in by_type:
            return self._market_step(game, by_type[ActionType.MARKET_STEP][0])

        if ActionType.APPLY_CARD in by_type:
            preview = game.preview_selected_card()
            if ActionType.PASS_CARD in by_type and preview is not None:
                if preview.cashflow <= 0 or preview.cost > player.cash - self.RESERVE:
                    return by_type[ActionType.PASS_CARD][0]
            return by_type[ActionType.APPLY_CARD][0]

        if ActionType.DRAW_BIG_DEAL in by_type and player.cash > 20000:
            return by_type[ActionType.DRAW_BIG_DEAL][0]
        if ActionType.DRAW_SMALL_DEAL in by_type:
            return by_type[ActionType.DRAW_SMALL_DEAL][0]
        if ActionType.DRAW_BIG_DEAL in by_type:
            return by_type[ActionType.DRAW_BIG_DEAL][0]

        if ActionType.DONATE_CHARITY in by_type and game.charity_prompt is not None:
            if player.cash >= game.charity_prompt.amount * 3:
                return by_type[ActionType.DONATE_CHARITY][0]
        if ActionType.SKIP_CHARITY in by_type:
            return by_type[ActionType.SKIP_CHARITY][0]

        for action in by_type.get(ActionType.REPAY_BANK_LOAN, []):
            if player.cash - action.params.get("amount", 0) >= self.RESERVE:
                return action

        if ActionType.END_TURN in by_type:
            return by_type[ActionType.END_TURN][0]

        return legal_actions[0] if legal_actions else None

    def _market_step(self, game: GameState, action: Action) -> Action:
        card = game.selected_card
        session = game.market_session
        player = game.players[self.player_id]
        if card is None or session is None:
            return action

        if session.stage == MarketStage.BUY:
            action.params["buy_quantity"] = self._buy_quantity(player.cash, card)
            return action

        sell: Dict[str, int] = {}
        if card.kind == CardKind.SECURITY:
            price = coerce_number(card.get("price")) or 0
            for asset in player.assets:
                quantity = available_quantity(asset)
                if matches_symbol(asset, card.symbol) and price * quantity > asset.cost:
                    sell[asset.id] = quantity
        elif card.offer_kind == OfferKind.SELL:
            for asset in player.assets:
                if not matches_offer(asset, card):
                    continue
                quantity = available_quantity(asset)
                if offer_value(card, asset, quantity) > asset.cost:
                    sell[asset.id] = quantity
        action.params["sell"] = sell
        return action

    def _buy_quantity(self, cash: int, card) -> int:
        price = coerce_number(card.get("price")) or 0
        if price <= 0:
            return 0
        dividend = coerce_number(card.get("dividend")) or 0
        budget = max(0, cash - self.RESERVE) // 2
        if dividend > 0 or price <= 5:
            return int(budget // price)
        return 0
