"""
High-level rules API for controlling game flow.
This module provides the public interface for game actions and legal move detection.
"""

from enum import Enum
from typing import Any, List, Optional

from cashflow.cards import DeckKey
from cashflow.exceptions import InvalidActionError
from cashflow.game import GameState
from cashflow.market import MarketStage
from cashflow.phases import TurnState


class ActionType(Enum):
    """Types of actions a player can take."""

    ROLL_DICE = "roll_dice"
    DRAW_SMALL_DEAL = "draw_small_deal"
    DRAW_BIG_DEAL = "draw_big_deal"
    APPLY_CARD = "apply_card"
    PASS_CARD = "pass_card"
    MARKET_STEP = "market_step"
    RESOLVE_MARKET = "resolve_market"
    SKIP_MARKET = "skip_market"
    DONATE_CHARITY = "donate_charity"
    SKIP_CHARITY = "skip_charity"
    REPAY_BANK_LOAN = "repay_bank_loan"
    ENTER_FAST_TRACK = "enter_fast_track"
    SELL_LIQUIDATION_ASSET = "sell_liquidation_asset"
    FINALIZE_LIQUIDATION = "finalize_liquidation"
    END_TURN = "end_turn"


class Action:
    """Represents a game action that can be taken."""

    def __init__(self, action_type: ActionType, **params: Any):
        self.action_type = action_type
        self.params = params

    def __repr__(self) -> str:
        return f"Action({self.action_type.value}, {self.params})"


def acting_player_id(game_state: GameState) -> Optional[int]:
    """The player whose input the game is waiting on."""
    if game_state.game_over:
        return None
    if game_state.turn_state == TurnState.AWAIT_LIQUIDATION and game_state.liquidation is not None:
        return game_state.liquidation.player_id
    session = game_state.market_session
    if game_state.turn_state == TurnState.AWAIT_MARKET and session is not None:
        responder = session.current_responder
        if responder is not None:
            return responder
    return game_state.get_current_player().player_id


def get_legal_actions(game_state: GameState, player_id: int) -> List[Action]:
    """
    Get all legal actions available to a player.

    This is the main interface for AI/controllers to determine valid moves.
    Market responders other than the current player may act while the
    market is in its sell stage.

    Args:
        game_state: Current game state
        player_id: Player to get actions for

    Returns:
        List of legal Action objects
    """
    if game_state.game_over:
        return []

    player = game_state.players[player_id]
    actions: List[Action] = []
    current = game_state.get_current_player()

    # Liquidation belongs to the indebted player only
    if game_state.turn_state == TurnState.AWAIT_LIQUIDATION:
        session = game_state.liquidation
        if session is None or session.player_id != player_id:
            return []
        for asset in player.assets:
            actions.append(Action(ActionType.SELL_LIQUIDATION_ASSET, asset_id=asset.id))
        actions.append(Action(ActionType.FINALIZE_LIQUIDATION))
        return actions

    # Market responders step before the current player check
    if game_state.turn_state == TurnState.AWAIT_MARKET and game_state.market_session is not None:
        session = game_state.market_session
        if session.current_responder == player_id:
            actions.append(Action(ActionType.MARKET_STEP))
        elif session.stage == MarketStage.BUY and player_id == current.player_id:
            actions.append(Action(ActionType.MARKET_STEP))
        if player_id == current.player_id:
            actions.append(Action(ActionType.RESOLVE_MARKET))
            actions.append(Action(ActionType.SKIP_MARKET))
        return actions

    if current.player_id != player_id:
        return []

    state = game_state.turn_state
    if state == TurnState.AWAIT_ROLL:
        actions.append(Action(ActionType.ROLL_DICE))
        if game_state.can_enter_fast_track(player):
            actions.append(Action(ActionType.ENTER_FAST_TRACK))

    elif state == TurnState.AWAIT_ACTION:
        if game_state.can_draw_deal(DeckKey.SMALL_DEALS):
            actions.append(Action(ActionType.DRAW_SMALL_DEAL))
        if game_state.can_draw_deal(DeckKey.BIG_DEALS):
            actions.append(Action(ActionType.DRAW_BIG_DEAL))
        actions.append(Action(ActionType.END_TURN))

    elif state == TurnState.AWAIT_CARD:
        preview = game_state.preview_selected_card()
        if preview is not None:
            actions.append(Action(ActionType.APPLY_CARD))
            if preview.can_pass:
                actions.append(Action(ActionType.PASS_CARD))

    elif state == TurnState.AWAIT_CHARITY:
        prompt = game_state.charity_prompt
        if prompt is not None and player.cash >= prompt.amount:
            actions.append(Action(ActionType.DONATE_CHARITY))
        actions.append(Action(ActionType.SKIP_CHARITY))

    elif state == TurnState.AWAIT_END:
        actions.append(Action(ActionType.END_TURN))
        actions.extend(_get_loan_actions(game_state, player_id))
        if game_state.can_enter_fast_track(player):
            actions.append(Action(ActionType.ENTER_FAST_TRACK))

    return actions


def _get_loan_actions(game_state: GameState, player_id: int) -> List[Action]:
    """Repayments the player can afford right now."""
    actions: List[Action] = []
    player = game_state.players[player_id]
    step = game_state.bank.LOAN_STEP
    for loan in player.bank_loans():
        if player.cash >= loan.balance:
            actions.append(Action(ActionType.REPAY_BANK_LOAN, liability_id=loan.id, amount=loan.balance))
        elif player.cash >= step:
            amount = (player.cash // step) * step
            actions.append(Action(ActionType.REPAY_BANK_LOAN, liability_id=loan.id, amount=amount))
    return actions


def apply_action(
    game_state: GameState,
    action: Action,
    player_id: Optional[int] = None,
    strict: bool = False,
) -> bool:
    """
    Apply an action to the game state.

    Args:
        game_state: Current game state
        action: Action to apply
        player_id: Acting player; defaults to whoever the game is waiting on
        strict: Raise InvalidActionError instead of returning False when the
            action is not legal for the player right now

    Returns:
        True if action was successful, False otherwise
    """
    if player_id is None:
        player_id = acting_player_id(game_state)
    if player_id is None or player_id not in game_state.players:
        if strict:
            raise InvalidActionError(f"No player can act on {action.action_type.value} now")
        return False

    legal_types = {a.action_type for a in get_legal_actions(game_state, player_id)}
    if action.action_type not in legal_types:
        if strict:
            raise InvalidActionError(
                f"{action.action_type.value} is not legal for player {player_id} in {game_state.turn_state.value}"
            )
        return False

    params = action.params
    action_type = action.action_type

    if action_type == ActionType.ROLL_DICE:
        return game_state.roll_dice() is not None

    elif action_type == ActionType.DRAW_SMALL_DEAL:
        game_state.draw_opportunity(DeckKey.SMALL_DEALS)
        return True

    elif action_type == ActionType.DRAW_BIG_DEAL:
        game_state.draw_opportunity(DeckKey.BIG_DEALS)
        return True

    elif action_type == ActionType.APPLY_CARD:
        return game_state.apply_selected_card(params.get("cash_delta"), params.get("cashflow_delta"))

    elif action_type == ActionType.PASS_CARD:
        return game_state.pass_selected_card()

    elif action_type == ActionType.MARKET_STEP:
        return game_state.confirm_market_step(params.get("sell"), params.get("buy_quantity"))

    elif action_type == ActionType.RESOLVE_MARKET:
        return game_state.resolve_market(params.get("sell"), params.get("buy_quantity"))

    elif action_type == ActionType.SKIP_MARKET:
        return game_state.skip_market_all()

    elif action_type == ActionType.DONATE_CHARITY:
        return game_state.donate_charity()

    elif action_type == ActionType.SKIP_CHARITY:
        return game_state.skip_charity()

    elif action_type == ActionType.REPAY_BANK_LOAN:
        return game_state.repay_bank_loan(params.get("liability_id", ""), params.get("amount", 0))

    elif action_type == ActionType.ENTER_FAST_TRACK:
        return game_state.enter_fast_track()

    elif action_type == ActionType.SELL_LIQUIDATION_ASSET:
        return game_state.sell_liquidation_asset(params.get("asset_id", "")) is not None

    elif action_type == ActionType.FINALIZE_LIQUIDATION:
        game_state.finalize_liquidation()
        return True

    elif action_type == ActionType.END_TURN:
        return game_state.end_turn()

    return False


# Preferred order for automated play; the first legal one is taken.
_STEP_PRIORITY = [
    ActionType.ENTER_FAST_TRACK,
    ActionType.ROLL_DICE,
    ActionType.DONATE_CHARITY,
    ActionType.DRAW_SMALL_DEAL,
    ActionType.APPLY_CARD,
    ActionType.MARKET_STEP,
    ActionType.SELL_LIQUIDATION_ASSET,
    ActionType.FINALIZE_LIQUIDATION,
    ActionType.END_TURN,
]


def step_turn(game_state: GameState, max_actions: int = 100) -> List[Action]:
    """
    Automatically step through the current player's turn.
    This is a convenience function for simple AI/automated play.

    Returns:
        List of actions that were taken
    """
    actions_taken: List[Action] = []
    starting_player = game_state.get_current_player().player_id
    starting_turn = game_state.turn_number

    for _ in range(max_actions):
        if game_state.game_over:
            break
        actor = acting_player_id(game_state)
        legal_actions = get_legal_actions(game_state, actor)
        if not legal_actions:
            break

        action = None
        for action_type in _STEP_PRIORITY:
            action = next((a for a in legal_actions if a.action_type == action_type), None)
            if action is not None:
                break
        if action is None:
            action = legal_actions[0]

        apply_action(game_state, action, actor)
        actions_taken.append(action)

        turn_passed = (
            game_state.get_current_player().player_id != starting_player
            or game_state.turn_number != starting_turn
        )
        if action.action_type in (ActionType.END_TURN, ActionType.FINALIZE_LIQUIDATION) and (
            turn_passed or game_state.turn_state == TurnState.AWAIT_ROLL
        ):
            break

    return actions_taken
