from cashflow.config import Dream, GameSettings, Scenario, StartingSavingsMode
from cashflow.exceptions import CardDataError, CashflowError, ConfigurationError, InvalidActionError
from cashflow.game import GameState, create_game
from cashflow.money import EventType, GameEvent
from cashflow.phases import GamePhase, TurnState
from cashflow.player import Player, PlayerState
from cashflow.rules import Action, ActionType, apply_action, get_legal_actions, step_turn
from cashflow.snapshot import serialize_snapshot

__all__ = [
    "Action",
    "ActionType",
    "CardDataError",
    "CashflowError",
    "ConfigurationError",
    "Dream",
    "EventType",
    "GameEvent",
    "GamePhase",
    "GameSettings",
    "GameState",
    "InvalidActionError",
    "Player",
    "PlayerState",
    "Scenario",
    "StartingSavingsMode",
    "TurnState",
    "apply_action",
    "create_game",
    "get_legal_actions",
    "serialize_snapshot",
    "step_turn",
]
