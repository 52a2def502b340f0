"""
Money management and event logging.
"""

import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from cashflow.player import Liability, LiabilityCategory, PlayerState, Track, new_id, recalc

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Stable message keys of the audit trail."""

    GAME_START = "game_start"
    TURN_START = "turn_start"
    TURN_SKIPPED = "turn_skipped"
    DICE_ROLL = "dice_roll"
    MOVE = "move"
    PAYDAY = "payday"
    LAND = "land"

    CARD_DRAW = "card_draw"
    CARD_SKIPPED = "card_skipped"
    CARD_DISCARD = "card_discard"
    CARD_PASS = "card_pass"
    CARD_PASS_DENIED = "card_pass_denied"
    DECK_RESHUFFLE = "deck_reshuffle"
    DEAL_COMPLETED = "deal_completed"
    DEAL_BLOCKED = "deal_blocked"
    LIABILITY_ADDED = "liability_added"

    MARKET_START = "market_start"
    MARKET_SELL = "market_sell"
    MARKET_BUY = "market_buy"
    MARKET_BUY_BLOCKED = "market_buy_blocked"
    MARKET_IMPROVE = "market_improve"
    MARKET_FORCED_SALE = "market_forced_sale"
    MARKET_STEP = "market_step"
    MARKET_SKIPPED = "market_skipped"
    MARKET_RESOLVED = "market_resolved"
    STOCK_SPLIT = "stock_split"

    CHARITY_PROMPT = "charity_prompt"
    CHARITY_DONATED = "charity_donated"
    CHARITY_DECLINED = "charity_declined"
    CHARITY_INSUFFICIENT = "charity_insufficient"
    CHILD_BORN = "child_born"
    CHILD_LIMIT = "child_limit"
    DOWNSIZE = "downsize"
    FAST_PENALTY = "fast_penalty"
    FAST_OPPORTUNITY = "fast_opportunity"
    OBLIGATION_UNPAID = "obligation_unpaid"
    OBLIGATION_PAID = "obligation_paid"

    BANK_LOAN = "bank_loan"
    BANK_LOAN_DENIED = "bank_loan_denied"
    BANK_LOAN_REPAID = "bank_loan_repaid"

    FAST_TRACK_UNLOCKED = "fast_track_unlocked"
    FAST_TRACK_ENTER = "fast_track_enter"

    VENTURE_CREATED = "venture_created"
    VENTURE_UPDATED = "venture_updated"
    LOAN_CREATED = "loan_created"
    LOAN_REPAID = "loan_repaid"
    LOAN_DEFAULTED = "loan_defaulted"

    LIQUIDATION_START = "liquidation_start"
    LIQUIDATION_SALE = "liquidation_sale"
    LIQUIDATION_END = "liquidation_end"
    BANKRUPTCY = "bankruptcy"
    GAME_END = "game_end"


@dataclass(frozen=True)
class GameEvent:
    """A logged event in the game. Entries never change once appended."""

    event_id: str
    event_type: EventType
    player_id: Optional[int] = None
    turn: int = 0
    phase: str = ""
    details: Mapping[str, Any] = field(default_factory=dict)
    timestamp: str = ""

    def to_record(self) -> Dict[str, Any]:
        """Plain dict form for downstream consumers."""
        return {
            "id": self.event_id,
            "event_type": self.event_type.value,
            "player_id": self.player_id,
            "turn": self.turn,
            "phase": self.phase,
            "payload": dict(self.details),
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        player_str = f"P{self.player_id}" if self.player_id is not None else "System"
        return f"[T{self.turn} {player_str}] {self.event_type.value}: {dict(self.details)}"


class EventLog:
    """Manages the game event log in causal order."""

    def __init__(self):
        self.events: List[GameEvent] = []
        self.turn = 0
        self.phase = ""

    def set_context(self, turn: int, phase: str) -> None:
        """Turn and phase stamped on subsequent entries."""
        self.turn = turn
        self.phase = phase

    def log(
        self,
        event_type: EventType,
        player_id: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        **extra: Any,
    ) -> GameEvent:
        """Log a game event."""
        payload = dict(details or {})
        payload.update(extra)
        event = GameEvent(
            event_id=uuid.uuid4().hex,
            event_type=event_type,
            player_id=player_id,
            turn=self.turn,
            phase=self.phase,
            details=MappingProxyType(payload),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self.events.append(event)
        return event

    def get_events(self) -> List[GameEvent]:
        """Get all logged events."""
        return self.events.copy()

    def get_recent_events(self, count: int = 10) -> List[GameEvent]:
        """Get the most recent N events."""
        return self.events[-count:]

    def of_type(self, event_type: EventType) -> List[GameEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def to_records(self) -> List[Dict[str, Any]]:
        return [e.to_record() for e in self.events]

    def clear(self) -> None:
        """Clear the event log."""
        self.events.clear()


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def coerce_number(value: Any) -> Optional[float]:
    """Return value as a finite number, or None for anything else."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _parse(value: Any) -> Optional[float]:
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    return coerce_number(value)


def coerce_int(value: Any, default: int = 0) -> int:
    """Clamp arbitrary input to a non-negative integer."""
    number = _parse(value)
    if number is None:
        return default
    return max(0, int(math.floor(number)))


def coerce_signed(value: Any) -> Optional[int]:
    """Signed whole amount from user input; None when it is not a finite number."""
    number = _parse(value)
    if number is None:
        return None
    return round_half_up(number)


@dataclass
class FundingResult:
    """Outcome of an ensure_funds call."""

    ok: bool
    shortfall: int = 0
    loan: Optional[Liability] = None


class Bank:
    """
    Issues and collects bank loans.

    ensure_funds is the single path through which every cash shortfall is
    covered. It never debits the obligation itself; callers subtract the
    cost after a successful result.
    """

    LOAN_STEP = 1000
    LOAN_RATE = 0.10

    def __init__(self, event_log: EventLog):
        self.event_log = event_log

    def loan_payment(self, balance: int) -> int:
        return round_half_up(balance * self.LOAN_RATE)

    def ensure_funds(self, player: PlayerState, cost: int, reason: str = "") -> FundingResult:
        """
        Make sure the player holds at least `cost` cash.

        Rat-race players are lent the shortfall rounded up to the next
        multiple of 1000. Fast-track players cannot borrow and get a failed
        result carrying the shortfall.
        """
        if cost <= 0 or player.cash >= cost:
            return FundingResult(ok=True)

        shortfall = cost - player.cash
        if player.track == Track.FAST_TRACK:
            self.event_log.log(
                EventType.BANK_LOAN_DENIED,
                player_id=player.player_id,
                details={"cost": cost, "shortfall": shortfall, "reason": reason},
            )
            return FundingResult(ok=False, shortfall=shortfall)

        principal = int(math.ceil(shortfall / self.LOAN_STEP)) * self.LOAN_STEP
        loan = Liability(
            id=new_id("bank-loan"),
            name="Bank Loan",
            payment=self.loan_payment(principal),
            balance=principal,
            category=LiabilityCategory.LOAN,
            metadata={"bank": True},
        )
        player.cash += principal
        player.liabilities.append(loan)
        player.total_expenses += loan.payment
        recalc(player)

        logger.debug(f"Bank loan {principal} issued to player {player.player_id} ({reason})")
        self.event_log.log(
            EventType.BANK_LOAN,
            player_id=player.player_id,
            details={
                "liability_id": loan.id,
                "principal": principal,
                "payment": loan.payment,
                "shortfall": shortfall,
                "reason": reason,
                "new_balance": player.cash,
            },
        )
        return FundingResult(ok=True, loan=loan)

    def repay_bank_loan(self, player: PlayerState, liability_id: str, amount: int) -> bool:
        """
        Pay down an engine-issued loan.

        Partial repayments are floored to a multiple of 1000; an amount at or
        above the balance pays the loan off. Returns False when nothing was paid.
        """
        loan = player.get_liability(liability_id)
        if loan is None or not loan.is_bank_loan:
            return False

        amount = coerce_int(amount)
        if amount >= loan.balance:
            paid = loan.balance
        else:
            paid = (amount // self.LOAN_STEP) * self.LOAN_STEP
        if paid <= 0 or player.cash < paid:
            return False

        player.cash -= paid
        if paid >= loan.balance:
            player.liabilities.remove(loan)
            player.total_expenses -= loan.payment
            remaining = 0
        else:
            loan.balance -= paid
            new_payment = self.loan_payment(loan.balance)
            player.total_expenses += new_payment - loan.payment
            loan.payment = new_payment
            remaining = loan.balance
        recalc(player)

        self.event_log.log(
            EventType.BANK_LOAN_REPAID,
            player_id=player.player_id,
            details={
                "liability_id": liability_id,
                "amount": paid,
                "remaining": remaining,
                "new_balance": player.cash,
            },
        )
        return True
