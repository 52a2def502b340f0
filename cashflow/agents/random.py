"""Random agent that makes random legal moves."""

import random
from typing import List, Optional

from cashflow.game import GameState
from cashflow.rules import Action, ActionType

from cashflow.agents.base import Agent


class RandomAgent(Agent):
    """
    Simple AI that makes random legal moves.

    Prioritizes ROLL_DICE and END_TURN actions to keep the game moving
    and avoid infinite loops.
    """

    def __init__(self, player_id: int, name: str, seed: Optional[int] = None):
        super().__init__(player_id, name)
        self.rng = random.Random(seed)

    def choose_action(self, game: GameState, legal_actions: List[Action]) -> Action:
        """
        Choose a random legal action with basic priorities.

        Market steps get a random sell map over the player's holdings and,
        in the buy stage, a small random buy quantity.
        """
        for a in legal_actions:
            if a.action_type == ActionType.ROLL_DICE and self.rng.random() < 0.8:
                return a

        for a in legal_actions:
            if a.action_type == ActionType.END_TURN and self.rng.random() < 0.7:
                return a

        # Skipping the market would starve other responders, so avoid it
        choices = [a for a in legal_actions if a.action_type != ActionType.SKIP_MARKET] or legal_actions
        action = self.rng.choice(choices)

        if action.action_type == ActionType.MARKET_STEP:
            player = game.players[self.player_id]
            if player.assets and self.rng.random() < 0.3:
                asset = self.rng.choice(player.assets)
                action.params["sell"] = {asset.id: self.rng.randint(1, max(1, asset.quantity or 1))}
            action.params["buy_quantity"] = self.rng.choice([0, 0, 10, 50, 100])

        return action
