"""
Deal, offer and doodad cards and the decks they are drawn from.

Card records come from a loosely typed dataset. Each record is classified
once, when it is turned into a Card, purely from which fields are present;
downstream code matches on Card.kind instead of re-deriving it.
"""

import json
import logging
import random
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from cashflow.config import GameSettings
from cashflow.exceptions import CardDataError
from cashflow.money import EventLog, EventType, coerce_int, coerce_number
from cashflow.player import PlayerState

logger = logging.getLogger(__name__)


class DeckKey(Enum):
    SMALL_DEALS = "smallDeals"
    BIG_DEALS = "bigDeals"
    OFFERS = "offers"
    DOODADS = "doodads"


# Table names used by the card dataset.
TABLE_NAMES = {
    "smallDeal": DeckKey.SMALL_DEALS,
    "bigDeal": DeckKey.BIG_DEALS,
    "offer": DeckKey.OFFERS,
    "doodad": DeckKey.DOODADS,
}


class CardKind(Enum):
    """How a card is resolved once drawn."""

    DEAL = "deal"
    DOODAD = "doodad"
    OFFER = "offer"
    SECURITY = "security"
    SPLIT_EVENT = "split_event"


class OfferKind(Enum):
    IMPROVE = "improve"
    FORCED_LIMITED = "forced_limited"
    SELL = "sell"
    NOOP = "noop"


class SplitKind(Enum):
    SPLIT = "split"
    REVERSE = "reverse"


def first_number(fields: Mapping[str, Any], names: Sequence[str]) -> Optional[float]:
    """First field in `names` that holds a number."""
    for name in names:
        number = coerce_number(fields.get(name))
        if number is not None:
            return number
    return None


def rule_text(fields: Mapping[str, Any]) -> str:
    parts = [fields.get(name) for name in ("rule", "rule1", "rule2", "text", "description")]
    return " ".join(p for p in parts if isinstance(p, str) and p).lower()


def _type_label(fields: Mapping[str, Any]) -> str:
    value = fields.get("type")
    return value.lower() if isinstance(value, str) else ""


def _split_kind(fields: Mapping[str, Any]) -> Optional[SplitKind]:
    label = _type_label(fields)
    if "reverse split" in label:
        return SplitKind.REVERSE
    if "stock split" in label:
        return SplitKind.SPLIT
    return None


def _is_security(fields: Mapping[str, Any]) -> bool:
    symbol = fields.get("symbol")
    if not isinstance(symbol, str) or not symbol:
        return False
    if coerce_number(fields.get("price")) is None:
        return False
    label = _type_label(fields)
    return any(
        word in label
        for word in ("stock", "mutual fund", "preferred stock", "certificate of deposit")
    )


def _offer_kind(fields: Mapping[str, Any]) -> OfferKind:
    is_sell = coerce_number(fields.get("offer")) is not None or coerce_number(fields.get("offerPerUnit")) is not None
    is_improve = (
        coerce_number(fields.get("cashFlow")) is not None
        and "offer" not in fields
        and "offerPerUnit" not in fields
    )
    if is_improve:
        return OfferKind.IMPROVE
    if _type_label(fields) == "limited" and not is_sell:
        return OfferKind.FORCED_LIMITED
    if is_sell:
        return OfferKind.SELL
    return OfferKind.NOOP


def classify_card(fields: Mapping[str, Any], deck_key: Optional[DeckKey]):
    """Return (kind, offer_kind, split_kind) derived from field presence."""
    if deck_key == DeckKey.DOODADS or "doodad" in _type_label(fields):
        return CardKind.DOODAD, None, None
    if deck_key == DeckKey.OFFERS:
        return CardKind.OFFER, _offer_kind(fields), None
    split = _split_kind(fields)
    symbol = fields.get("symbol")
    if split is not None and isinstance(symbol, str) and symbol:
        return CardKind.SPLIT_EVENT, None, split
    if _is_security(fields):
        return CardKind.SECURITY, None, None
    return CardKind.DEAL, None, None


@dataclass(frozen=True)
class Card:
    """An immutable card with its classification attached."""

    id: str
    type: str
    name: str
    description: str
    deck_key: Optional[DeckKey]
    fields: Mapping[str, Any]
    kind: CardKind
    offer_kind: Optional[OfferKind] = None
    split_kind: Optional[SplitKind] = None

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def number(self, *names: str) -> Optional[float]:
        return first_number(self.fields, names)

    @property
    def symbol(self) -> Optional[str]:
        symbol = self.fields.get("symbol")
        return symbol if isinstance(symbol, str) and symbol else None

    @property
    def rule_text(self) -> str:
        return rule_text(self.fields)

    @property
    def mentions_everyone(self) -> bool:
        return "everyone" in self.rule_text

    @property
    def is_preferred_stock(self) -> bool:
        return "preferred stock" in self.type.lower()

    @property
    def requires_child(self) -> bool:
        return self.fields.get("child") is True

    def __repr__(self) -> str:
        return f"Card('{self.id}', {self.kind.value}, '{self.name}')"


class CardRecord(BaseModel):
    """Validated shape of one dataset record; unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: str = ""
    name: str = ""
    description: str = ""

    @field_validator("id", "type", "name", "description", mode="before")
    @classmethod
    def stringify(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


def make_card(record: Mapping[str, Any], deck_key: Optional[DeckKey], card_id: Optional[str] = None) -> Card:
    """Build a classified card from a raw record."""
    try:
        validated = CardRecord.model_validate(dict(record))
    except ValidationError as exc:
        raise CardDataError(f"Invalid card record {card_id!r}: {exc}") from exc

    fields = validated.model_dump()
    fields["id"] = validated.id or card_id or validated.name or "card"
    if deck_key is not None:
        fields["deckKey"] = deck_key.value
    kind, offer_kind, split_kind = classify_card(fields, deck_key)
    return Card(
        id=fields["id"],
        type=validated.type,
        name=validated.name,
        description=validated.description,
        deck_key=deck_key,
        fields=MappingProxyType(fields),
        kind=kind,
        offer_kind=offer_kind,
        split_kind=split_kind,
    )


CardTables = Dict[DeckKey, List[Card]]


def build_card_tables(raw: Mapping[str, Any]) -> CardTables:
    """
    Turn a raw dataset into classified cards per deck.

    `raw` maps table names (smallDeal, bigDeal, offer, doodad) to either an
    object keyed by card id or a list of records.
    """
    tables: CardTables = {key: [] for key in DeckKey}
    for table_name, entries in raw.items():
        deck_key = TABLE_NAMES.get(table_name)
        if deck_key is None:
            logger.warning(f"Ignoring unknown card table '{table_name}'")
            continue
        if isinstance(entries, Mapping):
            items: Iterable = entries.items()
        elif isinstance(entries, list):
            items = ((None, entry) for entry in entries)
        else:
            raise CardDataError(f"Card table '{table_name}' must be an object or a list")
        for card_id, entry in items:
            if not isinstance(entry, Mapping):
                raise CardDataError(f"Card {card_id!r} in '{table_name}' is not an object")
            tables[deck_key].append(make_card(entry, deck_key, card_id))
    return tables


def load_card_tables(path: Optional[Union[str, Path]] = None) -> CardTables:
    """Load card tables from a JSON file, or the built-in dataset when no path is given."""
    if path is None:
        from cashflow.card_data import DEFAULT_CARD_DATA

        return build_card_tables(DEFAULT_CARD_DATA)

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise CardDataError(f"Cannot read card data from {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise CardDataError(f"Card data in {path} must be a JSON object of tables")
    return build_card_tables(raw)


class Deck:
    """A draw queue plus discard pile for one deck."""

    def __init__(self, key: DeckKey, cards: List[Card], rng: random.Random):
        self.key = key
        self.rng = rng
        self.cards: List[Card] = cards.copy()
        self.discard_pile: List[Card] = []
        self.set_aside: List[Card] = []
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle the draw queue."""
        self.rng.shuffle(self.cards)

    def pop(self) -> Optional[Card]:
        return self.cards.pop(0) if self.cards else None

    def discard(self, card: Card) -> None:
        """Return a card to the discard pile."""
        self.discard_pile.append(card)

    def reshuffle(self, keep: Callable[[Card], bool]) -> int:
        """
        Move the discard pile back into the draw queue.

        Cards the current settings exclude are set aside instead of being
        destroyed. Returns the number of cards shuffled in.
        """
        kept = [c for c in self.discard_pile if keep(c)]
        self.set_aside.extend(c for c in self.discard_pile if not keep(c))
        self.discard_pile.clear()
        self.cards.extend(kept)
        self.shuffle()
        return len(kept)

    def __len__(self) -> int:
        return len(self.cards)


class DeckManager:
    """Owns all four decks and applies settings and eligibility filters."""

    def __init__(self, tables: CardTables, settings: GameSettings, rng: random.Random, event_log: EventLog):
        self.settings = settings
        self.event_log = event_log
        self.decks: Dict[DeckKey, Deck] = {}
        for key in DeckKey:
            cards = tables.get(key, [])
            deck = Deck(key, [c for c in cards if self.allowed(c, key)], rng)
            deck.set_aside.extend(c for c in cards if not self.allowed(c, key))
            self.decks[key] = deck

    def allowed(self, card: Card, key: DeckKey) -> bool:
        """Settings filter applied when a deck is built or reshuffled."""
        if key == DeckKey.SMALL_DEALS:
            if not self.settings.enable_small_deals:
                return False
            if not self.settings.enable_preferred_stock and card.is_preferred_stock:
                return False
        if key == DeckKey.BIG_DEALS and not self.settings.enable_big_deals:
            return False
        return True

    def eligible(self, card: Card, player: PlayerState) -> bool:
        """Per-player eligibility: child doodads need a child."""
        if card.kind == CardKind.DOODAD and card.requires_child:
            return player.children > 0
        return True

    def discard(self, card: Card) -> None:
        key = card.deck_key or DeckKey.SMALL_DEALS
        self.decks[key].discard(card)

    def draw(self, key: DeckKey, player: PlayerState) -> Optional[Card]:
        """
        Draw the first eligible card, reshuffling the discard pile when the
        queue runs dry. Ineligible cards are discarded. Attempts are bounded
        so a deck without any eligible card yields None.
        """
        deck = self.decks[key]
        attempts = len(deck.cards) + len(deck.discard_pile) + 2
        for _ in range(attempts):
            if not deck.cards:
                if not deck.discard_pile:
                    return None
                count = deck.reshuffle(lambda c: self.allowed(c, key))
                self.event_log.log(EventType.DECK_RESHUFFLE, details={"deck": key.value, "cards": count})
                if not deck.cards:
                    return None

            card = deck.pop()
            if not self.eligible(card, player):
                deck.discard(card)
                self.event_log.log(
                    EventType.CARD_SKIPPED,
                    player_id=player.player_id,
                    details={"deck": key.value, "card_id": card.id, "reason": "requires_child"},
                )
                continue

            self.event_log.log(
                EventType.CARD_DRAW,
                player_id=player.player_id,
                details={"deck": key.value, "card_id": card.id, "card": card.name, "kind": card.kind.value},
            )
            return card
        return None

    def counts(self) -> Dict[str, Dict[str, int]]:
        return {
            key.value: {"cards_remaining": len(deck.cards), "discard_count": len(deck.discard_pile)}
            for key, deck in self.decks.items()
        }
