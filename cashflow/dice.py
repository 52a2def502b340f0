"""
Dice rolling and movement.
"""

import logging
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from cashflow.board import Board, SquareType
from cashflow.player import PlayerState, Track

logger = logging.getLogger(__name__)

PAYDAY_TYPES = {
    Track.RAT_RACE: SquareType.PAYCHECK,
    Track.FAST_TRACK: SquareType.FAST_PAYDAY,
}


@dataclass
class Roll:
    """Result of one roll and the movement it produced."""

    dice: List[int]
    previous_position: int
    position: int
    visited: List[int]
    payday_hits: int = 0
    award: int = 0

    @property
    def total(self) -> int:
        return sum(self.dice)


def visited_squares(previous_position: int, steps: int, board_length: int) -> List[int]:
    """Every square stepped onto during a move, the landing square last."""
    if board_length <= 0 or steps <= 0:
        return []
    return [(previous_position + i) % board_length for i in range(1, steps + 1)]


class DiceEngine:
    """
    Rolls dice and moves players around the active track.

    `fixed_rolls` can be used to script the dice; once the queue runs out
    the engine falls back to the random generator.
    """

    def __init__(self, rng: random.Random, use_cashflow_dice: bool = True, fixed_rolls: Optional[Sequence[int]] = None):
        self.rng = rng
        self.use_cashflow_dice = use_cashflow_dice
        self.fixed_rolls: List[int] = list(fixed_rolls or [])

    def dice_count(self, player: PlayerState) -> int:
        count = 1 if self.use_cashflow_dice else 2
        if player.charity_turns > 0:
            count += 1
        return count

    def roll_die(self) -> int:
        if self.fixed_rolls:
            return self.fixed_rolls.pop(0)
        return self.rng.randint(1, 6)

    def roll(self, player: PlayerState) -> List[int]:
        """Roll for a player, consuming one charity turn when it added a die."""
        count = self.dice_count(player)
        if player.charity_turns > 0:
            player.charity_turns -= 1
        return [self.roll_die() for _ in range(count)]

    def move(self, player: PlayerState, board: Board, dice: List[int]) -> Roll:
        """
        Move a player by the dice total and count the payday squares
        passed or landed on. Cash is not touched here.
        """
        length = board.length(player.track)
        previous = player.position
        steps = sum(dice)
        visited = visited_squares(previous, steps, length)
        player.position = (previous + steps) % length

        payday_type = PAYDAY_TYPES[player.track]
        hits = sum(1 for pos in visited if board.get_square(player.track, pos).square_type == payday_type)
        logger.debug(f"Player {player.player_id} moved {previous} -> {player.position} ({hits} paydays)")
        return Roll(
            dice=dice,
            previous_position=previous,
            position=player.position,
            visited=visited,
            payday_hits=hits,
            award=player.payday * hits,
        )
