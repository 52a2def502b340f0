"""
Square effects for both tracks.
"""

import logging
from typing import TYPE_CHECKING

from cashflow.board import SquareType
from cashflow.cards import DeckKey
from cashflow.money import EventType, round_half_up
from cashflow.phases import CharityPrompt, TurnState
from cashflow.player import PlayerState, Track, recalc

if TYPE_CHECKING:
    from cashflow.game import GameState

logger = logging.getLogger(__name__)

MAX_CHILDREN = 3
CHILD_EXPENSE_RATE = 0.056
CHILD_EXPENSE_FLOOR = 100
DOWNSIZE_SKIP_TURNS = 3
CHARITY_TURNS = 3
FAST_PENALTY_FLOOR = 3000
FAST_OPPORTUNITY_FLOOR = 2000

# (rate, floor) per track
CHARITY_TERMS = {
    Track.RAT_RACE: (0.10, 100),
    Track.FAST_TRACK: (0.20, 5000),
}


def charity_amount(player: PlayerState) -> int:
    rate, floor = CHARITY_TERMS[player.track]
    return max(round_half_up(player.total_income * rate), floor)


def child_expense(player: PlayerState) -> int:
    return max(round_half_up(player.scenario.salary * CHILD_EXPENSE_RATE), CHILD_EXPENSE_FLOOR)


def fast_opportunity_boost(player: PlayerState) -> int:
    return max(FAST_OPPORTUNITY_FLOOR, round_half_up(player.payday * 0.5))


def resolve_landing(game: "GameState", player: PlayerState) -> None:
    """
    Apply the effect of the square the player landed on and move the turn
    into the state that square calls for.
    """
    square = game.board.get_square(player.track, player.position)
    game.event_log.log(
        EventType.LAND,
        player_id=player.player_id,
        details={"position": player.position, "square": square.square_type.value, "track": player.track.value},
    )
    handler = _HANDLERS.get(square.square_type, _land_quiet)
    handler(game, player)


def _land_quiet(game: "GameState", player: PlayerState) -> None:
    game.turn_state = TurnState.AWAIT_END


def _land_liability(game: "GameState", player: PlayerState) -> None:
    if game.draw_card(DeckKey.DOODADS) is None:
        game.turn_state = TurnState.AWAIT_END


def _land_offer(game: "GameState", player: PlayerState) -> None:
    if game.draw_card(DeckKey.OFFERS) is None:
        game.turn_state = TurnState.AWAIT_END


def _land_charity(game: "GameState", player: PlayerState) -> None:
    amount = charity_amount(player)
    game.charity_prompt = CharityPrompt(player_id=player.player_id, amount=amount)
    game.turn_state = TurnState.AWAIT_CHARITY
    game.event_log.log(EventType.CHARITY_PROMPT, player_id=player.player_id, details={"amount": amount})


def _land_child(game: "GameState", player: PlayerState) -> None:
    if player.children >= MAX_CHILDREN:
        game.event_log.log(EventType.CHILD_LIMIT, player_id=player.player_id, details={"children": player.children})
    else:
        expense = child_expense(player)
        player.children += 1
        player.child_expense = expense
        player.total_expenses += expense
        recalc(player)
        game.event_log.log(
            EventType.CHILD_BORN,
            player_id=player.player_id,
            details={"children": player.children, "expense": expense, "total_expenses": player.total_expenses},
        )
    game.turn_state = TurnState.AWAIT_END


def _charge(game: "GameState", player: PlayerState, cost: int, reason: str) -> bool:
    """Charge through financing; an unfunded cost becomes a pending obligation."""
    funding = game.bank.ensure_funds(player, cost, reason=reason)
    if not funding.ok:
        player.pending_obligation += cost
        game.event_log.log(
            EventType.OBLIGATION_UNPAID,
            player_id=player.player_id,
            details={"reason": reason, "amount": cost, "shortfall": funding.shortfall, "pending": player.pending_obligation},
        )
        return False
    player.cash -= cost
    return True


def _land_downsize(game: "GameState", player: PlayerState) -> None:
    cost = player.total_expenses
    paid = _charge(game, player, cost, "downsize")
    player.skip_turns = max(player.skip_turns, DOWNSIZE_SKIP_TURNS)
    game.event_log.log(
        EventType.DOWNSIZE,
        player_id=player.player_id,
        details={"amount": cost, "paid": paid, "skip_turns": player.skip_turns, "new_balance": player.cash},
    )
    game.turn_state = TurnState.AWAIT_END


def _land_fast_penalty(game: "GameState", player: PlayerState) -> None:
    cost = max(player.total_expenses, FAST_PENALTY_FLOOR)
    paid = _charge(game, player, cost, "fast_penalty")
    game.event_log.log(
        EventType.FAST_PENALTY,
        player_id=player.player_id,
        details={"amount": cost, "paid": paid, "new_balance": player.cash},
    )
    game.turn_state = TurnState.AWAIT_END


def _land_opportunity(game: "GameState", player: PlayerState) -> None:
    game.turn_state = TurnState.AWAIT_ACTION


def _land_fast_opportunity(game: "GameState", player: PlayerState) -> None:
    boost = fast_opportunity_boost(player)
    player.passive_income += boost
    recalc(player)
    game.event_log.log(
        EventType.FAST_OPPORTUNITY,
        player_id=player.player_id,
        details={"boost": boost, "passive_income": player.passive_income},
    )
    game.turn_state = TurnState.AWAIT_END


def _land_dream(game: "GameState", player: PlayerState) -> None:
    # The win check already ran for every dream square visited on the move.
    if not game.game_over:
        game.turn_state = TurnState.AWAIT_END


_HANDLERS = {
    SquareType.PAYCHECK: _land_quiet,
    SquareType.FAST_PAYDAY: _land_quiet,
    SquareType.LIABILITY: _land_liability,
    SquareType.OFFER: _land_offer,
    SquareType.CHARITY: _land_charity,
    SquareType.FAST_DONATION: _land_charity,
    SquareType.CHILD: _land_child,
    SquareType.DOWNSIZE: _land_downsize,
    SquareType.FAST_PENALTY: _land_fast_penalty,
    SquareType.OPPORTUNITY: _land_opportunity,
    SquareType.FAST_OPPORTUNITY: _land_fast_opportunity,
    SquareType.FAST_DREAM: _land_dream,
}
