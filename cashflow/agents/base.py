"""Shared interface for Cashflow players driven by code."""

from abc import ABC, abstractmethod
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from cashflow.game import GameState
    from cashflow.rules import Action


class Agent(ABC):
    """
    A seat at the Cashflow table that picks one of its legal actions.

    The simulator asks whoever the game is waiting on, so an agent is also
    consulted out of turn while it is a market responder or is liquidating.

    Some actions carry inputs the agent fills into `action.params`:
        MARKET_STEP / RESOLVE_MARKET: `sell` ({asset_id: quantity}) and
            `buy_quantity` (shares bought in the buy stage).
        APPLY_CARD: optional `cash_delta` / `cashflow_delta` overrides of
            the card preview.
        REPAY_BANK_LOAN: `liability_id` and `amount`, already set by the rules.
    Quantities are clamped by the engine to what the player actually holds.
    """

    def __init__(self, player_id: int, name: str):
        self.player_id = player_id
        self.name = name

    @abstractmethod
    def choose_action(self, game: "GameState", legal_actions: List["Action"]) -> "Action":
        """Return one of `legal_actions`, with params filled in where needed."""
