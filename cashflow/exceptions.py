"""
Custom exception hierarchy for the Cashflow engine.

Provides typed errors that can be handled consistently across
the engine, the command API and the CLI.
"""


class CashflowError(Exception):
    """Base exception for all game-related errors."""


class ConfigurationError(CashflowError):
    """Game cannot start with the given players or settings."""


class InvalidActionError(CashflowError):
    """Action is not legal in the current state."""


class CardDataError(CashflowError):
    """External card dataset could not be loaded."""
