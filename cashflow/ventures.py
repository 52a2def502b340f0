"""
Joint ventures and player-to-player loans.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from cashflow.money import Bank, EventLog, EventType, coerce_int, coerce_number, coerce_signed, round_half_up
from cashflow.player import PlayerState, new_id, recalc

logger = logging.getLogger(__name__)


class VentureStatus(Enum):
    FORMING = "forming"
    ACTIVE = "active"
    CLOSED = "closed"


_STATUS_ORDER = [VentureStatus.FORMING, VentureStatus.ACTIVE, VentureStatus.CLOSED]


@dataclass
class VentureParticipant:
    player_id: int
    contribution: int
    equity: float  # percent, 0..100


@dataclass
class JointVenture:
    """Pooled-capital vehicle whose cashflow is shared by equity while active."""

    id: str
    name: str
    description: str = ""
    cash_needed: int = 0
    cashflow_impact: int = 0
    status: VentureStatus = VentureStatus.FORMING
    participants: List[VentureParticipant] = field(default_factory=list)
    created_turn: int = 0

    def share_of(self, participant: VentureParticipant, impact: Optional[int] = None) -> int:
        """A participant's rounded cut of a cashflow impact."""
        total = self.cashflow_impact if impact is None else impact
        return round_half_up(total * participant.equity / 100)


class VentureManager:
    """Creates ventures and keeps participants' passive income in step with them."""

    def __init__(self, bank: Bank, event_log: EventLog):
        self.bank = bank
        self.event_log = event_log
        self.ventures: Dict[str, JointVenture] = {}

    def get_venture(self, venture_id: str) -> Optional[JointVenture]:
        return self.ventures.get(venture_id)

    def create_venture(
        self,
        players: Dict[int, PlayerState],
        name: str,
        participants: Sequence[Tuple[int, int, float]],
        cash_needed: int = 0,
        cashflow_impact: int = 0,
        description: str = "",
        turn: int = 0,
    ) -> Optional[JointVenture]:
        """
        Form a venture from (player_id, contribution, equity%) triples.

        Contributions go through bank financing. Returns None, touching
        nothing, when a participant is unknown or bankrupt, equity does not
        fit in 100%, or a contribution cannot be financed.
        """
        cleaned: List[VentureParticipant] = []
        for player_id, contribution, equity in participants:
            player = players.get(player_id)
            if player is None or player.is_bankrupt:
                return None
            if any(p.player_id == player_id for p in cleaned):
                return None
            equity = coerce_number(equity)
            if equity is None or equity < 0:
                return None
            cleaned.append(VentureParticipant(player_id, coerce_int(contribution), equity))

        if not cleaned or sum(p.equity for p in cleaned) > 100:
            return None
        impact = coerce_signed(cashflow_impact)
        if impact is None:
            return None

        # Fast-track players cannot borrow, so check them before moving any cash.
        for participant in cleaned:
            player = players[participant.player_id]
            if player.on_fast_track and player.cash < participant.contribution:
                return None

        for participant in cleaned:
            player = players[participant.player_id]
            self.bank.ensure_funds(player, participant.contribution, reason="joint_venture")
            player.cash -= participant.contribution

        venture = JointVenture(
            id=new_id("venture"),
            name=name,
            description=description,
            cash_needed=coerce_int(cash_needed),
            cashflow_impact=impact,
            participants=cleaned,
            created_turn=turn,
        )
        self.ventures[venture.id] = venture
        self.event_log.log(
            EventType.VENTURE_CREATED,
            details={
                "venture_id": venture.id,
                "name": name,
                "cash_needed": venture.cash_needed,
                "participants": [
                    {"player_id": p.player_id, "contribution": p.contribution, "equity": p.equity}
                    for p in cleaned
                ],
            },
        )
        return venture

    def update_venture(
        self,
        players: Dict[int, PlayerState],
        venture_id: str,
        status: Optional[VentureStatus] = None,
        cashflow_impact: Optional[int] = None,
    ) -> bool:
        """
        Move a venture forward (forming -> active -> closed) and/or change its
        cashflow impact, adjusting each participant's passive income by the
        difference between their old and new share.
        """
        venture = self.ventures.get(venture_id)
        if venture is None:
            return False
        if isinstance(status, str):
            try:
                status = VentureStatus(status)
            except ValueError:
                return False
        if status is not None and not isinstance(status, VentureStatus):
            return False
        new_impact = venture.cashflow_impact
        if cashflow_impact is not None:
            new_impact = coerce_signed(cashflow_impact)
            if new_impact is None:
                return False

        new_status = venture.status if status is None else status
        if _STATUS_ORDER.index(new_status) < _STATUS_ORDER.index(venture.status):
            return False
        if venture.status == VentureStatus.CLOSED and (status is not None or cashflow_impact is not None):
            return False

        was_active = venture.status == VentureStatus.ACTIVE
        now_active = new_status == VentureStatus.ACTIVE

        for participant in venture.participants:
            player = players.get(participant.player_id)
            if player is None or player.is_bankrupt:
                continue
            old_share = venture.share_of(participant) if was_active else 0
            new_share = venture.share_of(participant, new_impact) if now_active else 0
            if new_share != old_share:
                player.passive_income += new_share - old_share
                recalc(player)

        venture.status = new_status
        venture.cashflow_impact = new_impact
        self.event_log.log(
            EventType.VENTURE_UPDATED,
            details={"venture_id": venture.id, "status": venture.status.value, "cashflow_impact": venture.cashflow_impact},
        )
        return True


class LoanStatus(Enum):
    ACTIVE = "active"
    REPAID = "repaid"
    DEFAULTED = "defaulted"


@dataclass
class PlayerLoan:
    id: str
    lender_id: int
    borrower_id: int
    principal: int
    rate: float
    remaining: int
    issued_turn: int = 0
    status: LoanStatus = LoanStatus.ACTIVE


class LoanBook:
    """Peer-to-peer loans between players."""

    def __init__(self, event_log: EventLog):
        self.event_log = event_log
        self.loans: Dict[str, PlayerLoan] = {}

    def get_loan(self, loan_id: str) -> Optional[PlayerLoan]:
        return self.loans.get(loan_id)

    def loans_for(self, player_id: int) -> List[PlayerLoan]:
        return [l for l in self.loans.values() if player_id in (l.lender_id, l.borrower_id)]

    def create_loan(
        self,
        lender: PlayerState,
        borrower: PlayerState,
        principal: int,
        rate: float = 0.0,
        turn: int = 0,
    ) -> Optional[PlayerLoan]:
        """Transfer `principal` from lender to borrower; the lender must hold it."""
        principal = coerce_int(principal)
        if principal <= 0 or lender.player_id == borrower.player_id:
            return None
        if lender.is_bankrupt or borrower.is_bankrupt or lender.cash < principal:
            return None

        lender.cash -= principal
        borrower.cash += principal
        loan = PlayerLoan(
            id=new_id("loan"),
            lender_id=lender.player_id,
            borrower_id=borrower.player_id,
            principal=principal,
            rate=coerce_number(rate) or 0.0,
            remaining=principal,
            issued_turn=turn,
        )
        self.loans[loan.id] = loan
        self.event_log.log(
            EventType.LOAN_CREATED,
            player_id=lender.player_id,
            details={"loan_id": loan.id, "principal": principal, "lender": lender.player_id, "borrower": borrower.player_id},
        )
        return loan

    def repay_loan(self, players: Dict[int, PlayerState], loan_id: str, amount: int) -> int:
        """
        Borrower pays min(amount, remaining) to the lender.
        Returns the amount paid (0 when nothing moved).
        """
        loan = self.loans.get(loan_id)
        if loan is None or loan.status != LoanStatus.ACTIVE:
            return 0
        lender = players.get(loan.lender_id)
        borrower = players.get(loan.borrower_id)
        if lender is None or borrower is None:
            return 0

        payment = min(coerce_int(amount), loan.remaining)
        if payment <= 0 or borrower.cash < payment:
            return 0

        borrower.cash -= payment
        lender.cash += payment
        loan.remaining -= payment
        if loan.remaining <= 0:
            loan.remaining = 0
            loan.status = LoanStatus.REPAID
        self.event_log.log(
            EventType.LOAN_REPAID,
            player_id=borrower.player_id,
            details={"loan_id": loan_id, "amount": payment, "remaining": loan.remaining, "status": loan.status.value},
        )
        return payment

    def default_loan(self, loan_id: str) -> bool:
        loan = self.loans.get(loan_id)
        if loan is None or loan.status != LoanStatus.ACTIVE:
            return False
        loan.status = LoanStatus.DEFAULTED
        self.event_log.log(
            EventType.LOAN_DEFAULTED,
            player_id=loan.borrower_id,
            details={"loan_id": loan_id, "remaining": loan.remaining},
        )
        return True
