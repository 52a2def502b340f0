"""
Card previews and deal completion.
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from cashflow.cards import Card, CardKind, coerce_int
from cashflow.money import EventType, coerce_signed, round_half_up
from cashflow.phases import TurnState
from cashflow.player import Asset, AssetCategory, Liability, LiabilityCategory, PlayerState, new_id, recalc

if TYPE_CHECKING:
    from cashflow.game import GameState

logger = logging.getLogger(__name__)

COST_FIELDS = ("downPayment", "cost", "price", "deposit")
CASHFLOW_FIELDS = ("cashFlow", "cashflow", "dividend", "payout", "savings")
BASIS_FIELDS = ("cost", "price", "amount", "value", "totalCost")

# Checked in order; first match wins.
CATEGORY_PATTERNS = [
    (re.compile(r"stock|share|fund|certificate|cd"), AssetCategory.STOCK),
    (re.compile(r"estate|house|condo|plex|apartment|land"), AssetCategory.REAL_ESTATE),
    (re.compile(r"business|company|franchise|venture|partnership"), AssetCategory.BUSINESS),
    (re.compile(r"collectible|coin|art|gold|jewel"), AssetCategory.COLLECTIBLE),
]

# Card fields copied onto the asset's metadata bag.
METADATA_FIELDS = ("symbol", "units", "mortgage", "landType")


class PrimaryAction:
    PAY = "pay"
    RESOLVE = "resolve"
    BUY = "buy"


@dataclass(frozen=True)
class CardPreview:
    """What applying a card would do to a player, computed without mutation."""

    cost: int
    cashflow: int
    primary_action: str
    can_pass: bool


def infer_asset_category(type_label: str) -> AssetCategory:
    label = (type_label or "").lower()
    for pattern, category in CATEGORY_PATTERNS:
        if pattern.search(label):
            return category
    return AssetCategory.OTHER


def card_cost(card: Card, player: PlayerState) -> int:
    if card.kind in (CardKind.OFFER, CardKind.SECURITY, CardKind.SPLIT_EVENT):
        return 0
    if card.kind == CardKind.DOODAD:
        fraction = card.number("amount")
        if fraction is not None and 0 < fraction < 1:
            return round_half_up(player.cash * fraction)
    value = card.number(*COST_FIELDS)
    return coerce_int(abs(value)) if value is not None else 0


def card_cashflow(card: Card) -> int:
    value = card.number(*CASHFLOW_FIELDS)
    return round_half_up(value) if value is not None else 0


def preview_card(card: Card, player: PlayerState) -> CardPreview:
    if card.kind == CardKind.DOODAD:
        action = PrimaryAction.PAY
    elif card.kind in (CardKind.OFFER, CardKind.SECURITY, CardKind.SPLIT_EVENT):
        action = PrimaryAction.RESOLVE
    else:
        action = PrimaryAction.BUY
    return CardPreview(
        cost=card_cost(card, player),
        cashflow=card_cashflow(card),
        primary_action=action,
        can_pass=card.kind not in (CardKind.DOODAD, CardKind.OFFER, CardKind.SECURITY),
    )


def asset_cost_basis(card: Card, fallback: int) -> int:
    value = card.number(*BASIS_FIELDS)
    return coerce_int(abs(value)) if value is not None else abs(fallback)


def _is_collectible(card: Card, category: AssetCategory) -> bool:
    return category == AssetCategory.COLLECTIBLE or "coin" in card.type.lower()


def _asset_metadata(card: Card) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {"card_id": card.id}
    for name in METADATA_FIELDS:
        value = card.get(name)
        if value is not None:
            metadata[name] = value
    return metadata


def record_asset(player: PlayerState, card: Card, cost: int, cashflow: int) -> Asset:
    """Add or stack the asset a purchased card represents."""
    category = infer_asset_category(card.type)
    quantity: Optional[int] = coerce_int(card.get("quantity"), default=0) or None

    if _is_collectible(card, category):
        existing = next((a for a in player.assets if a.name == card.name), None)
        if existing is not None:
            existing.quantity = (existing.quantity or 1) + (quantity or 1)
            existing.cost += cost
            existing.cashflow += cashflow
            return existing

    asset = Asset(
        id=new_id("asset"),
        name=card.name,
        category=category,
        cashflow=cashflow,
        cost=cost,
        quantity=quantity,
        metadata=_asset_metadata(card),
    )
    player.assets.append(asset)
    return asset


def _record_doodad_liability(game: "GameState", player: PlayerState, card: Card) -> Optional[Liability]:
    loan = card.number("loan")
    payment = card.number("payment")
    if loan is None and payment is None:
        return None

    liability = Liability(
        id=new_id("liability"),
        name=card.name,
        payment=coerce_int(payment),
        balance=coerce_int(loan),
        category=LiabilityCategory.LOAN,
        metadata={"card_id": card.id},
    )
    player.liabilities.append(liability)
    player.total_expenses += liability.payment
    game.event_log.log(
        EventType.LIABILITY_ADDED,
        player_id=player.player_id,
        details={"liability_id": liability.id, "name": liability.name, "balance": liability.balance, "payment": liability.payment},
    )
    return liability


def complete_deal(
    game: "GameState",
    card: Card,
    cash_delta: Optional[int] = None,
    cashflow_delta: Optional[int] = None,
) -> bool:
    """
    Apply the selected card to the current player.

    Deltas default to the card preview (cash_delta = -cost). Returns False
    without touching the ledger when the engine is not waiting on this card,
    a submitted delta is not a number, or the cost cannot be financed.
    """
    if game.turn_state != TurnState.AWAIT_CARD or game.selected_card is None:
        return False
    if game.selected_card.id != card.id:
        return False

    player = game.get_current_player()
    preview = preview_card(card, player)
    cash_delta = -preview.cost if cash_delta is None else coerce_signed(cash_delta)
    cashflow_delta = preview.cashflow if cashflow_delta is None else coerce_signed(cashflow_delta)
    if cash_delta is None or cashflow_delta is None:
        return False

    if cash_delta < 0:
        result = game.bank.ensure_funds(player, -cash_delta, reason=f"card:{card.id}")
        if not result.ok:
            game.event_log.log(
                EventType.DEAL_BLOCKED,
                player_id=player.player_id,
                details={"card_id": card.id, "cost": -cash_delta, "shortfall": result.shortfall},
            )
            return False

    player.cash += cash_delta
    asset = None
    if card.kind == CardKind.DOODAD:
        _record_doodad_liability(game, player, card)
    else:
        player.passive_income += cashflow_delta
        asset = record_asset(player, card, asset_cost_basis(card, cash_delta), cashflow_delta)
    recalc(player)

    game.event_log.log(
        EventType.DEAL_COMPLETED,
        player_id=player.player_id,
        details={
            "card_id": card.id,
            "card": card.name,
            "cash_delta": cash_delta,
            "cashflow_delta": cashflow_delta if asset is not None else 0,
            "asset_id": asset.id if asset is not None else None,
            "new_balance": player.cash,
        },
    )
    logger.debug(f"Player {player.player_id} completed {card.id} ({cash_delta:+d} cash)")

    game.discard_selected_card()
    game.turn_state = TurnState.AWAIT_END
    return True
