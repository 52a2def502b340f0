"""
Player state, holdings and the ledger recalculation rule.
"""

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from cashflow.config import Dream, Scenario


class Track(Enum):
    """Which board a player is moving on."""

    RAT_RACE = "ratRace"
    FAST_TRACK = "fastTrack"


class PlayerStatus(Enum):
    ACTIVE = "active"
    BANKRUPT = "bankrupt"


class AssetCategory(Enum):
    STOCK = "stock"
    REAL_ESTATE = "realEstate"
    BUSINESS = "business"
    COLLECTIBLE = "collectible"
    OTHER = "other"


class LiabilityCategory(Enum):
    MORTGAGE = "mortgage"
    LOAN = "loan"
    CREDIT = "credit"
    OTHER = "other"


def new_id(prefix: str) -> str:
    """Short unique id for engine-created records."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


@dataclass
class Asset:
    """An income-producing holding on a player's balance sheet."""

    id: str
    name: str
    category: AssetCategory
    cashflow: int = 0
    cost: int = 0
    quantity: Optional[int] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def symbol(self) -> Optional[str]:
        symbol = self.metadata.get("symbol")
        return symbol if isinstance(symbol, str) and symbol else None


@dataclass
class Liability:
    """A debt with a periodic payment counted in expenses."""

    id: str
    name: str
    payment: int
    balance: int
    category: LiabilityCategory = LiabilityCategory.OTHER
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_bank_loan(self) -> bool:
        return bool(self.metadata.get("bank"))


def available_quantity(asset: Asset) -> int:
    """Units that can be sold or traded; absent or non-positive counts as one."""
    quantity = asset.quantity
    if isinstance(quantity, (int, float)) and math.isfinite(quantity) and quantity > 0:
        return max(1, math.floor(quantity))
    return 1


class PlayerState:
    """Represents the complete financial and board state of a player."""

    def __init__(self, player_id: int, name: str, scenario: Scenario, starting_cash: int, dream: Optional[Dream] = None):
        self.player_id = player_id
        self.name = name
        self.scenario = scenario
        self.dream = dream
        self.track = Track.RAT_RACE
        self.position = 0
        self.cash = starting_cash
        self.passive_income = 0
        self.total_income = 0
        self.total_expenses = scenario.total_expenses
        self.payday = 0
        self.assets: List[Asset] = []
        self.liabilities: List[Liability] = _scenario_liabilities(scenario)
        self.children = 0
        self.child_expense = 0
        self.charity_turns = 0
        self.skip_turns = 0
        self.fast_track_unlocked = False
        self.fast_track_target: Optional[int] = None
        self.status = PlayerStatus.ACTIVE
        self.pending_obligation = 0
        recalc(self)

    @property
    def is_bankrupt(self) -> bool:
        return self.status == PlayerStatus.BANKRUPT

    @property
    def on_fast_track(self) -> bool:
        return self.track == Track.FAST_TRACK

    def get_asset(self, asset_id: str) -> Optional[Asset]:
        return next((a for a in self.assets if a.id == asset_id), None)

    def get_liability(self, liability_id: str) -> Optional[Liability]:
        return next((l for l in self.liabilities if l.id == liability_id), None)

    def bank_loans(self) -> List[Liability]:
        return [l for l in self.liabilities if l.is_bank_loan]

    def net_worth(self) -> int:
        """Cash plus asset equity minus outstanding debt."""
        equity = sum(a.cost - int(a.metadata.get("mortgage") or 0) for a in self.assets)
        return self.cash + equity - sum(l.balance for l in self.liabilities)

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', cash={self.cash}, "
            f"payday={self.payday}, track={self.track.value}, position={self.position})"
        )


def recalc(player: PlayerState) -> None:
    """
    Derive total income, payday and the fast-track unlock flag.

    Must run after every change to passive income, expenses or track.
    The unlock flag is monotonic: it is never cleared once set.
    """
    salary = 0 if player.track == Track.FAST_TRACK else player.scenario.salary
    player.total_income = salary + player.passive_income
    player.payday = player.total_income - player.total_expenses
    if (
        player.track == Track.RAT_RACE
        and player.total_expenses > 0
        and player.passive_income >= player.total_expenses
    ):
        player.fast_track_unlocked = True


def _scenario_liabilities(scenario: Scenario) -> List[Liability]:
    return [
        Liability(f"{scenario.id}-mortgage", "Mortgage", scenario.mortgage_payment, scenario.mortgage, LiabilityCategory.MORTGAGE),
        Liability(f"{scenario.id}-car", "Car Loan", scenario.car_payment, scenario.car_loan, LiabilityCategory.LOAN),
        Liability(f"{scenario.id}-credit", "Credit Cards", scenario.credit_card_payment, scenario.credit_debt, LiabilityCategory.CREDIT),
        Liability(f"{scenario.id}-retail", "Retail", scenario.retail_payment, scenario.retail_debt, LiabilityCategory.OTHER),
    ]


class Player:
    """
    Setup record for a seat at the table.
    This is primarily for the external API.
    """

    def __init__(self, player_id: int, name: str, scenario_id: Optional[str] = None, dream_id: Optional[str] = None):
        self.player_id = player_id
        self.name = name
        self.scenario_id = scenario_id
        self.dream_id = dream_id

    def __repr__(self) -> str:
        return f"Player(id={self.player_id}, name='{self.name}', scenario={self.scenario_id})"
