"""
Main game engine and state management.
"""

import logging
import random
from typing import Dict, List, Optional, Sequence, Tuple

from cashflow.board import Board, SquareType
from cashflow.cards import Card, CardKind, CardTables, DeckKey, DeckManager, load_card_tables
from cashflow.config import GameSettings
from cashflow.deals import CardPreview, complete_deal, preview_card
from cashflow.dice import DiceEngine, Roll
from cashflow.exceptions import ConfigurationError
from cashflow.market import MarketSession, apply_split, confirm_market_step, open_market, resolve_market, skip_market_all
from cashflow.money import Bank, EventLog, EventType
from cashflow.phases import CharityPrompt, GamePhase, LiquidationSession, TurnState
from cashflow.player import Player, PlayerState, PlayerStatus, Track, recalc
from cashflow.scenarios import default_scenario, get_dream, get_scenario
from cashflow.squares import CHARITY_TURNS, resolve_landing
from cashflow.ventures import JointVenture, LoanBook, PlayerLoan, VentureManager, VentureStatus

logger = logging.getLogger(__name__)

MAX_PLAYERS = 8
FAST_TRACK_CASH_MULTIPLIER = 100
FAST_TRACK_PASSIVE_BONUS = 50000
FAST_TRACK_TARGET_BONUS = 50000


class GameState:
    """
    Represents the complete state of a Cashflow game.
    This is the main interface for the game engine.

    Action methods act for the current player and return False (or None)
    without changing anything when the turn is not in the state they need.
    """

    def __init__(
        self,
        settings: GameSettings,
        players: List[Player],
        card_tables: Optional[CardTables] = None,
        board: Optional[Board] = None,
        fixed_rolls: Optional[Sequence[int]] = None,
    ):
        self.settings = settings
        self.board = board or Board()
        self.event_log = EventLog()
        self.bank = Bank(self.event_log)

        self.rng = random.Random(settings.seed)

        self.players: Dict[int, PlayerState] = {}
        self.seat_order: List[int] = []
        for seat, player in enumerate(players):
            scenario = get_scenario(player.scenario_id) or default_scenario(seat)
            self.players[player.player_id] = PlayerState(
                player.player_id,
                player.name,
                scenario,
                scenario.starting_cash(settings.starting_savings_mode),
                get_dream(player.dream_id),
            )
            self.seat_order.append(player.player_id)

        self.decks = DeckManager(
            card_tables if card_tables is not None else load_card_tables(),
            settings,
            self.rng,
            self.event_log,
        )
        self.dice = DiceEngine(self.rng, settings.use_cashflow_dice, fixed_rolls)
        self.ventures = VentureManager(self.bank, self.event_log)
        self.loans = LoanBook(self.event_log)

        # Turn state
        self.current_player_index = 0
        self.turn_number = 0
        self.turn_state = TurnState.AWAIT_ROLL
        self.last_roll: Optional[Roll] = None

        # Pending sub-states; at most one card or prompt at a time
        self.selected_card: Optional[Card] = None
        self.market_session: Optional[MarketSession] = None
        self.charity_prompt: Optional[CharityPrompt] = None
        self.liquidation: Optional[LiquidationSession] = None

        self.game_over = False
        self.winner: Optional[int] = None
        self._announced_unlocks: set = set()

        self._sync_log_context()
        self.event_log.log(
            EventType.GAME_START,
            details={
                "players": [p.name for p in players],
                "scenarios": {p.player_id: p.scenario.id for p in self.players.values()},
                "starting_cash": {p.player_id: p.cash for p in self.players.values()},
                "seed": settings.seed,
            },
        )
        self.event_log.log(EventType.TURN_START, player_id=self.get_current_player().player_id, details={"turn": 0})

    @property
    def phase(self) -> GamePhase:
        if self.game_over:
            return GamePhase.FINISHED
        if self.get_current_player().on_fast_track:
            return GamePhase.FAST_TRACK
        return GamePhase.RAT_RACE

    def _sync_log_context(self) -> None:
        self.event_log.set_context(self.turn_number, self.phase.value)

    def get_current_player(self) -> PlayerState:
        """Get the current active player."""
        return self.players[self.seat_order[self.current_player_index % len(self.seat_order)]]

    def active_players(self) -> List[PlayerState]:
        """Non-bankrupt players in seat order."""
        return [self.players[pid] for pid in self.seat_order if not self.players[pid].is_bankrupt]

    def seat_of(self, player_id: int) -> int:
        return self.seat_order.index(player_id)

    def _ready(self, *states: TurnState) -> bool:
        return not self.game_over and self.turn_state in states

    # === DICE AND MOVEMENT ===

    def roll_dice(self) -> Optional[Roll]:
        """Roll, move, pay out passed paydays and resolve the landing square."""
        if not self._ready(TurnState.AWAIT_ROLL):
            return None
        player = self.get_current_player()

        dice = self.dice.roll(player)
        self.event_log.log(
            EventType.DICE_ROLL,
            player_id=player.player_id,
            details={"dice": dice, "total": sum(dice), "charity_turns": player.charity_turns},
        )

        roll = self.dice.move(player, self.board, dice)
        self.last_roll = roll
        self.event_log.log(
            EventType.MOVE,
            player_id=player.player_id,
            details={"from": roll.previous_position, "to": roll.position, "visited": roll.visited, "track": player.track.value},
        )

        if roll.payday_hits:
            self._pay_payday(player, roll)

        if player.on_fast_track:
            for position in roll.visited:
                square = self.board.get_square(player.track, position)
                if square.square_type == SquareType.FAST_DREAM and self.check_fast_track_win(player):
                    return roll

        resolve_landing(self, player)
        return roll

    def _pay_payday(self, player: PlayerState, roll: Roll) -> None:
        award = roll.award
        if award < 0:
            # Negative cashflow is an obligation like any other
            funding = self.bank.ensure_funds(player, -award, reason="payday")
            if not funding.ok:
                player.pending_obligation += -award
                self.event_log.log(
                    EventType.OBLIGATION_UNPAID,
                    player_id=player.player_id,
                    details={"reason": "payday", "amount": -award, "pending": player.pending_obligation},
                )
                return
        player.cash += award
        self.event_log.log(
            EventType.PAYDAY,
            player_id=player.player_id,
            details={"hits": roll.payday_hits, "amount": award, "new_balance": player.cash},
        )

    # === CARDS ===

    def draw_card(self, deck_key: DeckKey) -> Optional[Card]:
        """
        Draw a card for the current player and move into the state its kind
        calls for. Any previously selected card is discarded first.
        """
        if self.selected_card is not None:
            self.discard_selected_card()

        player = self.get_current_player()
        card = self.decks.draw(deck_key, player)
        if card is None:
            return None
        self.selected_card = card

        if card.kind == CardKind.SPLIT_EVENT:
            apply_split(self, card)
            self.discard_selected_card()
            self.turn_state = TurnState.AWAIT_END
        elif card.kind in (CardKind.OFFER, CardKind.SECURITY):
            open_market(self, card)
        else:
            self.turn_state = TurnState.AWAIT_CARD
        return card

    def can_draw_deal(self, deck_key: DeckKey) -> bool:
        if deck_key == DeckKey.SMALL_DEALS:
            return self.settings.enable_small_deals
        if deck_key == DeckKey.BIG_DEALS:
            return self.settings.enable_big_deals
        return False

    def draw_opportunity(self, deck_key: DeckKey) -> Optional[Card]:
        """Draw a small or big deal from an opportunity square."""
        if not self._ready(TurnState.AWAIT_ACTION) or not self.can_draw_deal(deck_key):
            return None
        card = self.draw_card(deck_key)
        if card is None:
            self.turn_state = TurnState.AWAIT_END
        return card

    def discard_selected_card(self) -> None:
        card = self.selected_card
        if card is None:
            return
        self.decks.discard(card)
        self.selected_card = None
        self.event_log.log(
            EventType.CARD_DISCARD,
            player_id=self.get_current_player().player_id,
            details={"card_id": card.id, "deck": card.deck_key.value if card.deck_key else None},
        )

    def preview_selected_card(self) -> Optional[CardPreview]:
        if self.selected_card is None:
            return None
        return preview_card(self.selected_card, self.get_current_player())

    def apply_selected_card(self, cash_delta: Optional[int] = None, cashflow_delta: Optional[int] = None) -> bool:
        if self.selected_card is None or self.game_over:
            return False
        return complete_deal(self, self.selected_card, cash_delta, cashflow_delta)

    def pass_selected_card(self) -> bool:
        """Decline the selected card. Doodads, offers and securities cannot be passed."""
        if not self._ready(TurnState.AWAIT_CARD) or self.selected_card is None:
            return False
        card = self.selected_card
        player = self.get_current_player()
        if not preview_card(card, player).can_pass:
            self.event_log.log(
                EventType.CARD_PASS_DENIED,
                player_id=player.player_id,
                details={"card_id": card.id, "kind": card.kind.value},
            )
            return False

        self.event_log.log(EventType.CARD_PASS, player_id=player.player_id, details={"card_id": card.id})
        self.discard_selected_card()
        self.turn_state = TurnState.AWAIT_END
        return True

    # === MARKET ===

    def confirm_market_step(self, sell: Optional[Dict[str, int]] = None, buy_quantity: Optional[int] = None) -> bool:
        return confirm_market_step(self, sell, buy_quantity)

    def resolve_market(self, sell: Optional[Dict[str, int]] = None, buy_quantity: Optional[int] = None) -> bool:
        return resolve_market(self, sell, buy_quantity)

    def skip_market_all(self) -> bool:
        return skip_market_all(self)

    # === CHARITY ===

    def donate_charity(self) -> bool:
        """Pay the prompted amount for three turns of an extra die."""
        if not self._ready(TurnState.AWAIT_CHARITY) or self.charity_prompt is None:
            return False
        prompt = self.charity_prompt
        player = self.players[prompt.player_id]
        self.charity_prompt = None
        self.turn_state = TurnState.AWAIT_END

        if player.cash < prompt.amount:
            self.event_log.log(
                EventType.CHARITY_INSUFFICIENT,
                player_id=player.player_id,
                details={"amount": prompt.amount, "cash": player.cash},
            )
            return False

        player.cash -= prompt.amount
        player.charity_turns = CHARITY_TURNS
        self.event_log.log(
            EventType.CHARITY_DONATED,
            player_id=player.player_id,
            details={"amount": prompt.amount, "charity_turns": player.charity_turns, "new_balance": player.cash},
        )
        return True

    def skip_charity(self) -> bool:
        if not self._ready(TurnState.AWAIT_CHARITY) or self.charity_prompt is None:
            return False
        prompt = self.charity_prompt
        self.charity_prompt = None
        self.turn_state = TurnState.AWAIT_END
        self.event_log.log(EventType.CHARITY_DECLINED, player_id=prompt.player_id, details={"amount": prompt.amount})
        return True

    # === FINANCING ===

    def repay_bank_loan(self, liability_id: str, amount: int) -> bool:
        """Pay down a bank loan; only between resolution and the end of the turn."""
        if not self._ready(TurnState.AWAIT_END):
            return False
        return self.bank.repay_bank_loan(self.get_current_player(), liability_id, amount)

    # === FAST TRACK ===

    def can_enter_fast_track(self, player: PlayerState) -> bool:
        return (
            not self.game_over
            and player.player_id == self.get_current_player().player_id
            and self.turn_state in (TurnState.AWAIT_ROLL, TurnState.AWAIT_END)
            and player.track == Track.RAT_RACE
            and player.fast_track_unlocked
        )

    def enter_fast_track(self) -> bool:
        """Move the current player off the rat race."""
        player = self.get_current_player()
        if not self.can_enter_fast_track(player):
            return False

        payday = player.payday
        player.cash += payday * FAST_TRACK_CASH_MULTIPLIER
        player.assets.clear()
        player.liabilities.clear()
        player.passive_income = payday + FAST_TRACK_PASSIVE_BONUS
        player.fast_track_target = player.passive_income + FAST_TRACK_TARGET_BONUS
        player.total_expenses = 0
        player.children = 0
        player.child_expense = 0
        player.track = Track.FAST_TRACK
        player.position = self.board.fast_track_start(self.seat_of(player.player_id))
        recalc(player)

        self._sync_log_context()
        self.event_log.log(
            EventType.FAST_TRACK_ENTER,
            player_id=player.player_id,
            details={
                "cash": player.cash,
                "passive_income": player.passive_income,
                "target": player.fast_track_target,
                "position": player.position,
            },
        )
        logger.info(f"Player {player.player_id} entered the fast track")
        return True

    def check_fast_track_win(self, player: PlayerState) -> bool:
        if (
            player.on_fast_track
            and player.fast_track_target is not None
            and player.passive_income >= player.fast_track_target
        ):
            self._finish(player.player_id, reason="fast_track_target")
            return True
        return False

    # === TURN FLOW ===

    def end_turn(self) -> bool:
        """
        Finish the current player's turn. An outstanding obligation is paid
        from cash when possible; otherwise the turn enters liquidation.
        """
        if not self._ready(TurnState.AWAIT_END, TurnState.AWAIT_ACTION):
            return False
        player = self.get_current_player()

        if player.pending_obligation > 0:
            if player.pending_obligation > player.cash:
                self._start_liquidation(player)
                return True
            self._settle_obligation(player)

        self._announce_unlocks()
        self._advance()
        return True

    def _settle_obligation(self, player: PlayerState) -> None:
        amount = player.pending_obligation
        player.cash -= amount
        player.pending_obligation = 0
        self.event_log.log(
            EventType.OBLIGATION_PAID,
            player_id=player.player_id,
            details={"amount": amount, "new_balance": player.cash},
        )

    def _announce_unlocks(self) -> None:
        for player in self.active_players():
            if player.fast_track_unlocked and player.player_id not in self._announced_unlocks:
                self._announced_unlocks.add(player.player_id)
                self.event_log.log(
                    EventType.FAST_TRACK_UNLOCKED,
                    player_id=player.player_id,
                    details={"passive_income": player.passive_income, "total_expenses": player.total_expenses},
                )

    def _advance(self) -> None:
        """Advance to the next player who gets to roll."""
        self.turn_state = TurnState.AWAIT_ROLL
        self.last_roll = None
        if not self.active_players():
            return

        seats = len(self.seat_order)
        # Skipped turns are at most three per player, so this always ends.
        for _ in range(seats * 5):
            next_index = (self.current_player_index + 1) % seats
            if next_index <= self.current_player_index:
                self.turn_number += 1
                self._sync_log_context()
                if self._time_limit_reached():
                    self._end_game_by_time_limit()
                    return
            self.current_player_index = next_index
            candidate = self.get_current_player()
            if candidate.is_bankrupt:
                continue
            if candidate.skip_turns > 0:
                candidate.skip_turns -= 1
                self.event_log.log(
                    EventType.TURN_SKIPPED,
                    player_id=candidate.player_id,
                    details={"remaining": candidate.skip_turns},
                )
                continue
            break

        self._sync_log_context()
        self.event_log.log(
            EventType.TURN_START,
            player_id=self.get_current_player().player_id,
            details={"turn": self.turn_number},
        )

    def _time_limit_reached(self) -> bool:
        limit = self.settings.time_limit_turns
        return bool(limit) and self.turn_number >= limit

    def _end_game_by_time_limit(self) -> None:
        """End game due to time limit and determine winner by net worth."""
        best: Optional[Tuple[int, int]] = None
        for player in self.active_players():
            worth = player.net_worth()
            if best is None or worth > best[1]:
                best = (player.player_id, worth)
        self._finish(best[0] if best else None, reason="time_limit")

    def _finish(self, winner_id: Optional[int], reason: str) -> None:
        self.game_over = True
        self.winner = winner_id
        self.turn_state = TurnState.AWAIT_END
        self._sync_log_context()
        self.event_log.log(
            EventType.GAME_END,
            player_id=winner_id,
            details={
                "reason": reason,
                "winner": self.players[winner_id].name if winner_id is not None else None,
                "net_worth": {p.player_id: p.net_worth() for p in self.players.values()},
            },
        )
        logger.info(f"Game finished ({reason}), winner: {winner_id}")

    # === LIQUIDATION ===

    def _start_liquidation(self, player: PlayerState) -> None:
        self.liquidation = LiquidationSession(player_id=player.player_id, required=player.pending_obligation)
        self.turn_state = TurnState.AWAIT_LIQUIDATION
        self.event_log.log(
            EventType.LIQUIDATION_START,
            player_id=player.player_id,
            details={"required": player.pending_obligation, "cash": player.cash, "assets": len(player.assets)},
        )

    def sell_liquidation_asset(self, asset_id: str) -> Optional[int]:
        """Sell an asset to the bank for half its cost basis. Returns the proceeds."""
        if not self._ready(TurnState.AWAIT_LIQUIDATION) or self.liquidation is None:
            return None
        player = self.players[self.liquidation.player_id]
        asset = player.get_asset(asset_id)
        if asset is None:
            return None

        proceeds = asset.cost // 2
        player.assets.remove(asset)
        player.passive_income -= asset.cashflow
        player.cash += proceeds
        recalc(player)
        self.liquidation.raised += proceeds
        self.event_log.log(
            EventType.LIQUIDATION_SALE,
            player_id=player.player_id,
            details={"asset_id": asset_id, "proceeds": proceeds, "new_balance": player.cash},
        )
        return proceeds

    def finalize_liquidation(self) -> bool:
        """
        Close the liquidation: pay the obligation if cash now covers it,
        otherwise declare the player bankrupt. Either way the turn passes.
        Returns True when the obligation was paid.
        """
        if not self._ready(TurnState.AWAIT_LIQUIDATION) or self.liquidation is None:
            return False
        session = self.liquidation
        player = self.players[session.player_id]
        self.liquidation = None

        paid = player.cash >= player.pending_obligation
        if paid:
            self._settle_obligation(player)
        self.event_log.log(
            EventType.LIQUIDATION_END,
            player_id=player.player_id,
            details={"required": session.required, "raised": session.raised, "paid": paid},
        )
        if not paid:
            self.declare_bankruptcy(player.player_id)
            if self.game_over:
                return False

        self._advance()
        return paid

    def declare_bankruptcy(self, player_id: int) -> None:
        """Remove a player from the game, clearing their balance sheet."""
        player = self.players[player_id]
        player.status = PlayerStatus.BANKRUPT
        player.assets.clear()
        player.liabilities.clear()
        player.passive_income = 0
        player.total_expenses = 0
        player.child_expense = 0
        player.pending_obligation = 0
        player.charity_turns = 0
        player.skip_turns = 0
        recalc(player)
        self.event_log.log(EventType.BANKRUPTCY, player_id=player_id, details={"cash": player.cash})

        if not self.active_players():
            self._finish(None, reason="all_bankrupt")

    # === VENTURES AND LOANS ===

    def create_venture(
        self,
        name: str,
        participants: Sequence[Tuple[int, int, float]],
        cash_needed: int = 0,
        cashflow_impact: int = 0,
        description: str = "",
    ) -> Optional[JointVenture]:
        if self.game_over:
            return None
        return self.ventures.create_venture(
            self.players, name, participants, cash_needed, cashflow_impact, description, self.turn_number
        )

    def update_venture(
        self,
        venture_id: str,
        status: Optional[VentureStatus] = None,
        cashflow_impact: Optional[int] = None,
    ) -> bool:
        if self.game_over:
            return False
        return self.ventures.update_venture(self.players, venture_id, status, cashflow_impact)

    def create_loan(self, lender_id: int, borrower_id: int, principal: int, rate: float = 0.0) -> Optional[PlayerLoan]:
        lender = self.players.get(lender_id)
        borrower = self.players.get(borrower_id)
        if self.game_over or lender is None or borrower is None:
            return None
        return self.loans.create_loan(lender, borrower, principal, rate, self.turn_number)

    def repay_loan(self, loan_id: str, amount: int) -> int:
        if self.game_over:
            return 0
        return self.loans.repay_loan(self.players, loan_id, amount)

    def default_loan(self, loan_id: str) -> bool:
        if self.game_over:
            return False
        return self.loans.default_loan(loan_id)


def create_game(
    settings: GameSettings,
    players: List[Player],
    card_tables: Optional[CardTables] = None,
    board: Optional[Board] = None,
    fixed_rolls: Optional[Sequence[int]] = None,
) -> GameState:
    """
    Create a new game with the specified settings and players.

    Args:
        settings: Game settings
        players: Seats at the table (1-8 players)
        card_tables: Card dataset; the built-in dataset when omitted
        board: Custom board layouts
        fixed_rolls: Scripted die faces, mainly for tests

    Returns:
        Initialized GameState

    Raises:
        ConfigurationError: if the table or settings cannot start a game
    """
    if len(players) < 1:
        raise ConfigurationError("Game requires at least 1 player")
    if len(players) > MAX_PLAYERS:
        raise ConfigurationError(f"Game supports at most {MAX_PLAYERS} players")
    if len({p.player_id for p in players}) != len(players):
        raise ConfigurationError("Player ids must be unique")
    if not settings.deals_enabled:
        raise ConfigurationError("At least one of small deals or big deals must be enabled")
    for player in players:
        if player.scenario_id is not None and get_scenario(player.scenario_id) is None:
            raise ConfigurationError(f"Unknown scenario '{player.scenario_id}' for player {player.name}")

    return GameState(settings, players, card_tables, board, fixed_rolls)
