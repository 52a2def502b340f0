"""
Game configuration settings.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class StartingSavingsMode(Enum):
    """How much cash each player starts with."""

    NONE = "none"
    NORMAL = "normal"
    SALARY = "salary"
    DOUBLE_SALARY = "double-salary"


@dataclass
class GameSettings:
    """Configuration for a Cashflow game."""

    locale: str = "en"
    starting_savings_mode: StartingSavingsMode = StartingSavingsMode.NORMAL
    enable_preferred_stock: bool = True
    enable_big_deals: bool = True
    enable_small_deals: bool = True
    use_cashflow_dice: bool = True

    seed: Optional[int] = None
    time_limit_turns: Optional[int] = None

    def __post_init__(self) -> None:
        if isinstance(self.starting_savings_mode, str):
            self.starting_savings_mode = StartingSavingsMode(self.starting_savings_mode)

    @property
    def deals_enabled(self) -> bool:
        """At least one opportunity deck is in play."""
        return self.enable_small_deals or self.enable_big_deals


@dataclass(frozen=True)
class Scenario:
    """Fixed financial profile of a profession card."""

    id: str
    label: str
    salary: int
    savings: int
    taxes: int
    mortgage_payment: int
    car_payment: int
    credit_card_payment: int
    retail_payment: int
    other_expenses: int
    mortgage: int
    car_loan: int
    credit_debt: int
    retail_debt: int

    @property
    def total_expenses(self) -> int:
        """Monthly expenses before children and bank loans."""
        return (
            self.taxes
            + self.mortgage_payment
            + self.car_payment
            + self.credit_card_payment
            + self.retail_payment
            + self.other_expenses
        )

    def starting_cash(self, mode: StartingSavingsMode) -> int:
        """Opening cash for the given savings mode."""
        if mode == StartingSavingsMode.NONE:
            return 0
        if mode == StartingSavingsMode.SALARY:
            return self.savings + self.salary
        if mode == StartingSavingsMode.DOUBLE_SALARY:
            return self.savings + 2 * self.salary
        return self.savings


@dataclass(frozen=True)
class Dream:
    """A fast-track dream a player is working towards."""

    id: str
    title: str
    description: str
    cost: int
    perk: str = ""
