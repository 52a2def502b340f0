"""
Turn states and the pending sub-states owned by the turn controller.
"""

from dataclasses import dataclass
from enum import Enum


class TurnState(Enum):
    AWAIT_ROLL = "awaitRoll"
    AWAIT_ACTION = "awaitAction"
    AWAIT_CARD = "awaitCard"
    AWAIT_MARKET = "awaitMarket"
    AWAIT_CHARITY = "awaitCharity"
    AWAIT_LIQUIDATION = "awaitLiquidation"
    AWAIT_END = "awaitEnd"


class GamePhase(Enum):
    RAT_RACE = "ratRace"
    FAST_TRACK = "fastTrack"
    FINISHED = "finished"


@dataclass
class CharityPrompt:
    """A pending donation offer for the current player."""

    player_id: int
    amount: int


@dataclass
class LiquidationSession:
    """
    Forced asset sales for a player whose obligation exceeds their cash.
    `raised` counts cash produced by sales during this session.
    """

    player_id: int
    required: int
    raised: int = 0
