"""
Market resolution for offer cards, tradeable securities and stock splits.

Offer and security cards open a MarketSession. Responders are stepped one at
a time in turn order starting from the current player; for securities every
responder's sells are settled before the current player's buy so the buyer
is not financed for cash the sells would have produced.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence

from cashflow.cards import Card, CardKind, OfferKind, SplitKind, coerce_int, coerce_number
from cashflow.deals import infer_asset_category
from cashflow.money import EventType, round_half_up
from cashflow.phases import TurnState
from cashflow.player import Asset, AssetCategory, PlayerState, available_quantity, new_id, recalc

if TYPE_CHECKING:
    from cashflow.game import GameState

logger = logging.getLogger(__name__)


class MarketStage(Enum):
    SELL = "sell"
    BUY = "buy"


@dataclass
class MarketSession:
    """Negotiation state for the card currently on the market."""

    card_id: str
    kind: CardKind
    stage: MarketStage
    responders: List[int]
    responder_index: int = 0
    sell: Dict[int, Dict[str, int]] = field(default_factory=dict)
    buy_quantity: int = 0

    @property
    def current_responder(self) -> Optional[int]:
        if self.stage != MarketStage.SELL or self.responder_index >= len(self.responders):
            return None
        return self.responders[self.responder_index]

    @property
    def responders_done(self) -> bool:
        return self.responder_index >= len(self.responders)


def build_turn_order(player_ids: Sequence[int], current_id: int) -> List[int]:
    """Seat order starting at the current player and wrapping around."""
    ids = list(player_ids)
    if current_id not in ids:
        return ids
    start = ids.index(current_id)
    return ids[start:] + ids[:start]


def _land_type(asset: Asset) -> str:
    return str(asset.metadata.get("landType") or asset.name).lower()


def matches_offer(asset: Asset, card: Card) -> bool:
    """Whether an offer card applies to an asset."""
    offer_type = card.type.lower()
    land_type = _land_type(asset)

    if offer_type == "plex":
        return "plex" in land_type or land_type == "duplex"
    if offer_type == "apartment":
        if not (land_type == "apartment" or "unit" in land_type):
            return False
        min_units = coerce_number(card.get("lowestUnit")) or 0
        units = coerce_number(asset.metadata.get("units")) or 0
        return units >= min_units
    if offer_type == "limited":
        return "limited" in land_type
    if offer_type == "business":
        return asset.category == AssetCategory.BUSINESS
    if offer_type in ("widget", "software", "mall", "car wash"):
        return offer_type in land_type
    if offer_type in ("krugerrands", "1500's spanish"):
        return offer_type.split(" ")[0] in land_type
    return land_type == offer_type


def matches_symbol(asset: Asset, symbol: Optional[str]) -> bool:
    return symbol is not None and asset.symbol is not None and asset.symbol.upper() == symbol.upper()


def eligible_responders(game: "GameState", card: Card) -> List[int]:
    """
    Everyone (in turn order) when the rule text mentions everyone or the
    card is not a sell-type card; otherwise only the current player.
    """
    current = game.get_current_player()
    order = build_turn_order([p.player_id for p in game.active_players()], current.player_id)
    sell_type = card.kind == CardKind.SECURITY or card.offer_kind == OfferKind.SELL
    if card.mentions_everyone or not sell_type:
        return order
    return [current.player_id]


def open_market(game: "GameState", card: Card) -> MarketSession:
    """Start a session for an offer or security card and enter awaitMarket."""
    responders = eligible_responders(game, card)
    session = MarketSession(
        card_id=card.id,
        kind=card.kind,
        stage=MarketStage.SELL,
        responders=responders,
    )
    game.market_session = session
    game.turn_state = TurnState.AWAIT_MARKET
    game.event_log.log(
        EventType.MARKET_START,
        player_id=game.get_current_player().player_id,
        details={
            "card_id": card.id,
            "kind": card.kind.value,
            "offer_kind": card.offer_kind.value if card.offer_kind else None,
            "responders": responders,
        },
    )
    return session


def clean_quantities(player: PlayerState, submitted: Optional[Mapping[str, object]]) -> Dict[str, int]:
    """Clamp a submitted {asset_id: quantity} map to what the player holds."""
    cleaned: Dict[str, int] = {}
    if not isinstance(submitted, Mapping):
        return cleaned
    for asset_id, raw in submitted.items():
        asset = player.get_asset(asset_id)
        if asset is None:
            continue
        quantity = min(coerce_int(raw), available_quantity(asset))
        if quantity > 0:
            cleaned[asset_id] = quantity
    return cleaned


def _market_ready(game: "GameState") -> bool:
    return (
        game.turn_state == TurnState.AWAIT_MARKET
        and game.market_session is not None
        and game.selected_card is not None
    )


def confirm_market_step(
    game: "GameState",
    sell: Optional[Mapping[str, object]] = None,
    buy_quantity: object = None,
) -> bool:
    """
    Record the current responder's input and advance.

    In the sell stage `sell` belongs to the current responder. Once every
    responder is processed, security cards move to the buy stage and offer
    cards resolve. In the buy stage `buy_quantity` is the current player's
    purchase and confirming resolves the card.
    """
    if not _market_ready(game):
        return False
    session = game.market_session
    card = game.selected_card

    if session.stage == MarketStage.SELL and not session.responders_done:
        responder = session.current_responder
        cleaned = clean_quantities(game.players[responder], sell)
        if cleaned:
            session.sell[responder] = cleaned
        session.responder_index += 1
        game.event_log.log(
            EventType.MARKET_STEP,
            player_id=responder,
            details={"card_id": card.id, "stage": session.stage.value, "sell": cleaned},
        )
        if not session.responders_done:
            return True
        if card.kind == CardKind.SECURITY:
            session.stage = MarketStage.BUY
            return True
        return resolve_market(game)

    if session.stage == MarketStage.SELL:
        if card.kind == CardKind.SECURITY:
            session.stage = MarketStage.BUY
            return True
        return resolve_market(game)

    session.buy_quantity = coerce_int(buy_quantity)
    return resolve_market(game)


def resolve_market(
    game: "GameState",
    sell: Optional[Mapping[str, object]] = None,
    buy_quantity: object = None,
) -> bool:
    """
    Settle the card on the market with the inputs gathered so far.

    `sell` and `buy_quantity`, when given, are the current player's own
    inputs and replace whatever the session holds for them.
    """
    if not _market_ready(game):
        return False
    session = game.market_session
    card = game.selected_card
    current = game.get_current_player()

    if sell is not None:
        cleaned = clean_quantities(current, sell)
        if cleaned:
            session.sell[current.player_id] = cleaned
        else:
            session.sell.pop(current.player_id, None)
    if buy_quantity is not None:
        session.buy_quantity = coerce_int(buy_quantity)

    if card.kind == CardKind.SECURITY:
        _resolve_security(game, card, session)
    elif card.kind == CardKind.OFFER:
        _resolve_offer(game, card, session)

    game.event_log.log(
        EventType.MARKET_RESOLVED,
        player_id=current.player_id,
        details={"card_id": card.id, "kind": card.kind.value},
    )
    _close(game)
    return True


def skip_market_all(game: "GameState") -> bool:
    """Discard the market card with no cash or asset movement."""
    if not _market_ready(game):
        return False
    game.event_log.log(
        EventType.MARKET_SKIPPED,
        player_id=game.get_current_player().player_id,
        details={"card_id": game.selected_card.id},
    )
    _close(game)
    return True


def _close(game: "GameState") -> None:
    game.market_session = None
    game.discard_selected_card()
    game.turn_state = TurnState.AWAIT_END


def _remove_units(player: PlayerState, asset: Asset, quantity: int) -> int:
    """
    Take `quantity` units out of a holding, removing cashflow and cost basis
    in proportion. Returns the cashflow removed.
    """
    held = available_quantity(asset)
    if quantity >= held:
        player.assets.remove(asset)
        removed = asset.cashflow
    else:
        fraction = quantity / held
        removed = round_half_up(asset.cashflow * fraction)
        asset.cashflow -= removed
        asset.cost -= round_half_up(asset.cost * fraction)
        mortgage = coerce_number(asset.metadata.get("mortgage"))
        if mortgage:
            asset.metadata["mortgage"] = mortgage - round_half_up(mortgage * fraction)
        asset.quantity = held - quantity
    player.passive_income -= removed
    return removed


# Offers


def _resolve_offer(game: "GameState", card: Card, session: MarketSession) -> None:
    if card.offer_kind == OfferKind.IMPROVE:
        _apply_improve(game, card, session.responders)
    elif card.offer_kind == OfferKind.FORCED_LIMITED:
        _apply_forced_sale(game, card, session.responders)
    elif card.offer_kind == OfferKind.SELL:
        for player_id in session.responders:
            for asset_id, quantity in session.sell.get(player_id, {}).items():
                _sell_to_offer(game, game.players[player_id], card, asset_id, quantity)


def _apply_improve(game: "GameState", card: Card, responders: List[int]) -> None:
    delta = round_half_up(card.number("cashFlow") or 0)
    for player_id in responders:
        player = game.players[player_id]
        matched = [a for a in player.assets if matches_offer(a, card)]
        if not matched:
            continue
        for asset in matched:
            asset.cashflow += delta
        player.passive_income += delta * len(matched)
        recalc(player)
        game.event_log.log(
            EventType.MARKET_IMPROVE,
            player_id=player_id,
            details={"card_id": card.id, "assets": [a.id for a in matched], "cashflow_delta": delta * len(matched)},
        )


def _apply_forced_sale(game: "GameState", card: Card, responders: List[int]) -> None:
    for player_id in responders:
        player = game.players[player_id]
        matched = [a for a in player.assets if matches_offer(a, card)]
        for asset in matched:
            proceeds = asset.cost * 2
            player.assets.remove(asset)
            player.cash += proceeds
            player.passive_income -= asset.cashflow
            game.event_log.log(
                EventType.MARKET_FORCED_SALE,
                player_id=player_id,
                details={"card_id": card.id, "asset_id": asset.id, "proceeds": proceeds, "new_balance": player.cash},
            )
        if matched:
            recalc(player)


def offer_value(card: Card, asset: Asset, quantity: int) -> int:
    """Gross value an offer card pays for `quantity` units of an asset."""
    per_unit = coerce_number(card.get("offerPerUnit"))
    if per_unit is not None:
        units = coerce_number(asset.metadata.get("units"))
        count = units * quantity if units is not None else quantity
        return round_half_up(per_unit * count)
    flat = coerce_number(card.get("offer")) or 0
    if asset.category == AssetCategory.COLLECTIBLE:
        return round_half_up(flat * quantity)
    return round_half_up(flat)


def _sell_to_offer(game: "GameState", player: PlayerState, card: Card, asset_id: str, quantity: int) -> None:
    asset = player.get_asset(asset_id)
    if asset is None or not matches_offer(asset, card):
        return
    held = available_quantity(asset)
    quantity = min(quantity, held)
    if quantity <= 0:
        return

    gross = offer_value(card, asset, quantity)
    mortgage = coerce_number(asset.metadata.get("mortgage")) or 0
    mortgage_share = round_half_up(mortgage * quantity / held)
    proceeds = max(0, gross - mortgage_share)

    _remove_units(player, asset, quantity)
    player.cash += proceeds
    recalc(player)
    game.event_log.log(
        EventType.MARKET_SELL,
        player_id=player.player_id,
        details={
            "card_id": card.id,
            "asset_id": asset_id,
            "quantity": quantity,
            "gross": gross,
            "mortgage": mortgage_share,
            "proceeds": proceeds,
            "new_balance": player.cash,
        },
    )


# Securities


def _resolve_security(game: "GameState", card: Card, session: MarketSession) -> None:
    price = coerce_number(card.get("price")) or 0
    symbol = card.symbol

    for player_id in session.responders:
        player = game.players[player_id]
        for asset_id, quantity in session.sell.get(player_id, {}).items():
            asset = player.get_asset(asset_id)
            if asset is None or not matches_symbol(asset, symbol):
                continue
            quantity = min(quantity, available_quantity(asset))
            proceeds = round_half_up(price * quantity)
            removed = _remove_units(player, asset, quantity)
            player.cash += proceeds
            recalc(player)
            game.event_log.log(
                EventType.MARKET_SELL,
                player_id=player_id,
                details={
                    "card_id": card.id,
                    "symbol": symbol,
                    "asset_id": asset_id,
                    "quantity": quantity,
                    "proceeds": proceeds,
                    "cashflow_removed": removed,
                    "new_balance": player.cash,
                },
            )

    if session.buy_quantity > 0:
        buy_security(game, game.get_current_player(), card, session.buy_quantity)


def buy_security(game: "GameState", player: PlayerState, card: Card, quantity: int) -> bool:
    """Buy shares at the card's price, financing any shortfall."""
    price = coerce_number(card.get("price")) or 0
    cost = round_half_up(price * quantity)
    funding = game.bank.ensure_funds(player, cost, reason=f"security:{card.id}")
    if not funding.ok:
        game.event_log.log(
            EventType.MARKET_BUY_BLOCKED,
            player_id=player.player_id,
            details={"card_id": card.id, "quantity": quantity, "cost": cost, "shortfall": funding.shortfall},
        )
        return False

    dividend = coerce_number(card.get("dividend")) or 0
    added_cashflow = round_half_up(dividend * quantity)
    player.cash -= cost

    holding = next((a for a in player.assets if matches_symbol(a, card.symbol)), None)
    if holding is not None:
        holding.quantity = available_quantity(holding) + quantity
        holding.cost += cost
        holding.cashflow += added_cashflow
        holding.metadata["dividendPerShare"] = dividend
    else:
        category = infer_asset_category(card.type)
        holding = Asset(
            id=new_id("asset"),
            name=card.name,
            category=category if category != AssetCategory.OTHER else AssetCategory.STOCK,
            cashflow=added_cashflow,
            cost=cost,
            quantity=quantity,
            metadata={"symbol": card.symbol, "dividendPerShare": dividend, "card_id": card.id},
        )
        player.assets.append(holding)
    player.passive_income += added_cashflow
    recalc(player)

    game.event_log.log(
        EventType.MARKET_BUY,
        player_id=player.player_id,
        details={
            "card_id": card.id,
            "symbol": card.symbol,
            "asset_id": holding.id,
            "quantity": quantity,
            "cost": cost,
            "new_balance": player.cash,
        },
    )
    return True


# Splits


def apply_split(game: "GameState", card: Card) -> None:
    """Split or reverse-split every player's holdings of the card's symbol."""
    symbol = card.symbol
    for player in game.active_players():
        changed = False
        for asset in [a for a in player.assets if matches_symbol(a, symbol)]:
            before = available_quantity(asset)
            if card.split_kind == SplitKind.SPLIT:
                after = before * 2
            else:
                after = math.floor(before / 2)

            if after <= 0:
                player.assets.remove(asset)
                player.passive_income -= asset.cashflow
                new_cashflow = 0
            else:
                new_cashflow = round_half_up(asset.cashflow * after / before)
                player.passive_income += new_cashflow - asset.cashflow
                asset.cashflow = new_cashflow
                asset.quantity = after
            changed = True
            game.event_log.log(
                EventType.STOCK_SPLIT,
                player_id=player.player_id,
                details={
                    "card_id": card.id,
                    "symbol": symbol,
                    "split": card.split_kind.value if card.split_kind else None,
                    "asset_id": asset.id,
                    "before": before,
                    "after": after,
                    "cashflow": new_cashflow,
                },
            )
        if changed:
            recalc(player)
    logger.debug(f"Applied {card.split_kind} for {symbol}")
