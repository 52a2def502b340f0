"""
Board squares for the rat race and the fast track.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from cashflow.player import Track


class SquareType(Enum):
    """Types of squares on either board."""

    OPPORTUNITY = "OPPORTUNITY"
    LIABILITY = "LIABILITY"
    CHARITY = "CHARITY"
    PAYCHECK = "PAYCHECK"
    OFFER = "OFFER"
    CHILD = "CHILD"
    DOWNSIZE = "DOWNSIZE"

    FAST_PAYDAY = "FAST_PAYDAY"
    FAST_OPPORTUNITY = "FAST_OPPORTUNITY"
    FAST_DONATION = "FAST_DONATION"
    FAST_PENALTY = "FAST_PENALTY"
    FAST_DREAM = "FAST_DREAM"


@dataclass(frozen=True)
class Square:
    """A single board square."""

    position: int
    square_type: SquareType
    label: str = ""

    def __repr__(self) -> str:
        return f"Square({self.position}, {self.square_type.value})"


RAT_RACE_LAYOUT: List[SquareType] = [
    SquareType.OPPORTUNITY,
    SquareType.LIABILITY,
    SquareType.OPPORTUNITY,
    SquareType.CHARITY,
    SquareType.OPPORTUNITY,
    SquareType.PAYCHECK,
    SquareType.OPPORTUNITY,
    SquareType.OFFER,
    SquareType.OPPORTUNITY,
    SquareType.LIABILITY,
    SquareType.OPPORTUNITY,
    SquareType.CHILD,
    SquareType.OPPORTUNITY,
    SquareType.PAYCHECK,
    SquareType.OPPORTUNITY,
    SquareType.OFFER,
    SquareType.OPPORTUNITY,
    SquareType.LIABILITY,
    SquareType.OPPORTUNITY,
    SquareType.DOWNSIZE,
    SquareType.OPPORTUNITY,
    SquareType.PAYCHECK,
    SquareType.OPPORTUNITY,
    SquareType.OFFER,
]

_FAST_PATTERN = [
    SquareType.FAST_PAYDAY,
    SquareType.FAST_OPPORTUNITY,
    SquareType.FAST_PENALTY,
    SquareType.FAST_OPPORTUNITY,
    SquareType.FAST_DONATION,
    SquareType.FAST_OPPORTUNITY,
    SquareType.FAST_DREAM,
    SquareType.FAST_OPPORTUNITY,
]

FAST_TRACK_LAYOUT: List[SquareType] = [_FAST_PATTERN[i % len(_FAST_PATTERN)] for i in range(40)]

FAST_TRACK_START_SLOTS = [1, 7, 14, 21, 27, 34, 1, 7]


class Board:
    """Both tracks of the Cashflow board."""

    def __init__(
        self,
        rat_race: Optional[Sequence[SquareType]] = None,
        fast_track: Optional[Sequence[SquareType]] = None,
    ):
        self.rat_race: List[Square] = _build(rat_race or RAT_RACE_LAYOUT)
        self.fast_track: List[Square] = _build(fast_track or FAST_TRACK_LAYOUT)

    def squares(self, track: Track) -> List[Square]:
        return self.fast_track if track == Track.FAST_TRACK else self.rat_race

    def length(self, track: Track) -> int:
        return len(self.squares(track))

    def get_square(self, track: Track, position: int) -> Square:
        """Get the square at the given position, wrapping around the track."""
        squares = self.squares(track)
        return squares[position % len(squares)]

    def fast_track_start(self, seat: int) -> int:
        """Fixed entry slot on the fast track for a seat index."""
        slot = FAST_TRACK_START_SLOTS[seat % len(FAST_TRACK_START_SLOTS)]
        return slot % len(self.fast_track)


def _build(layout: Sequence[SquareType]) -> List[Square]:
    squares = []
    for position, square_type in enumerate(layout):
        if isinstance(square_type, str):
            square_type = SquareType(square_type)
        squares.append(Square(position, square_type, square_type.value.replace("_", " ").title()))
    return squares
