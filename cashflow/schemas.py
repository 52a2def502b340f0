from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AssetDTO(BaseModel):
    asset_id: str
    name: str
    category: str
    cashflow: int
    cost: int
    quantity: Optional[int] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class LiabilityDTO(BaseModel):
    liability_id: str
    name: str
    payment: int
    balance: int
    category: str
    is_bank_loan: bool = False


class PlayerDTO(BaseModel):
    player_id: int
    name: str
    scenario_id: str
    dream_id: Optional[str] = None
    track: str
    position: int
    status: str
    cash: int
    passive_income: int
    total_income: int
    total_expenses: int
    payday: int
    children: int
    charity_turns: int
    skip_turns: int
    fast_track_unlocked: bool
    fast_track_target: Optional[int] = None
    pending_obligation: int = 0
    net_worth: int
    assets: List[AssetDTO] = Field(default_factory=list)
    liabilities: List[LiabilityDTO] = Field(default_factory=list)


class MarketSessionDTO(BaseModel):
    card_id: str
    kind: str
    stage: str
    responders: List[int]
    responder_index: int
    sell: Dict[int, Dict[str, int]] = Field(default_factory=dict)
    buy_quantity: int = 0


class CharityPromptDTO(BaseModel):
    player_id: int
    amount: int


class LiquidationDTO(BaseModel):
    player_id: int
    required: int
    raised: int


class DeckCountDTO(BaseModel):
    cards_remaining: int
    discard_count: int


class VentureParticipantDTO(BaseModel):
    player_id: int
    contribution: int
    equity: float


class VentureDTO(BaseModel):
    venture_id: str
    name: str
    status: str
    cash_needed: int
    cashflow_impact: int
    participants: List[VentureParticipantDTO] = Field(default_factory=list)


class LoanDTO(BaseModel):
    loan_id: str
    lender_id: int
    borrower_id: int
    principal: int
    rate: float
    remaining: int
    status: str


class GameSnapshot(BaseModel):
    turn_number: int
    phase: str
    turn_state: str
    current_player_id: int
    game_over: bool
    winner_id: Optional[int] = None
    players: List[PlayerDTO]
    selected_card_id: Optional[str] = None
    market: Optional[MarketSessionDTO] = None
    charity: Optional[CharityPromptDTO] = None
    liquidation: Optional[LiquidationDTO] = None
    decks: Dict[str, DeckCountDTO] = Field(default_factory=dict)
    ventures: List[VentureDTO] = Field(default_factory=list)
    loans: List[LoanDTO] = Field(default_factory=list)
    last_roll: Optional[List[int]] = None
