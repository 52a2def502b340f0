#!/usr/bin/env python3
"""
Minimal CLI for simulating Cashflow games.

This script demonstrates the game engine by running simulated games with
simple AI players that make random or basic strategic decisions.
"""

import argparse
import json
import logging
from typing import Dict, Optional

from cashflow.agents import Agent, GreedyAgent, RandomAgent
from cashflow.cards import load_card_tables
from cashflow.config import GameSettings
from cashflow.game import GameState, create_game
from cashflow.phases import TurnState
from cashflow.player import Player
from cashflow.rules import acting_player_id, apply_action, get_legal_actions
from cashflow.settings import configure_logging, get_engine_settings

logger = logging.getLogger(__name__)

PLAYER_NAMES = ["Alice", "Bob", "Charlie", "Diana", "Eve", "Frank", "Grace", "Hank"]


def print_game_state(game: GameState) -> None:
    """Print current game state."""
    print("\n" + "=" * 60)
    print(f"TURN {game.turn_number}")
    print("=" * 60)

    for player_id in game.seat_order:
        player = game.players[player_id]
        if player.is_bankrupt:
            status = "BANKRUPT"
        elif player.skip_turns:
            status = f"DOWNSIZED ({player.skip_turns} turns)"
        else:
            square = game.board.get_square(player.track, player.position)
            status = f"{player.track.value} at {square.label}"

        print(
            f"Player {player_id} ({player.name}, {player.scenario.label}): ${player.cash} | "
            f"passive ${player.passive_income}/${player.total_expenses} | "
            f"payday ${player.payday} | {len(player.assets)} assets | {status}"
        )


def print_game_summary(game: GameState) -> None:
    """Print final game summary."""
    print("\n" + "=" * 60)
    print("GAME OVER")
    print("=" * 60)

    if game.winner is not None:
        winner = game.players[game.winner]
        print(f"\nWinner: {winner.name}")
        print(f"Final Cash: ${winner.cash}")
        print(f"Passive Income: ${winner.passive_income}")
        print(f"Assets Owned: {len(winner.assets)}")

    print("\nFinal Standings:")
    for player_id in game.seat_order:
        player = game.players[player_id]
        status = "BANKRUPT" if player.is_bankrupt else f"${player.net_worth()} ({player.track.value})"
        print(f"  {player.name}: {status}")

    print(f"\nTotal Turns: {game.turn_number}")
    print(f"Events Logged: {len(game.event_log.events)}")


def write_event_log(game: GameState, log_file: str) -> None:
    """Write the game's audit trail as JSONL."""
    with open(log_file, "w", encoding="utf-8") as f:
        for record in game.event_log.to_records():
            f.write(json.dumps(record) + "\n")


def _force_end_turn(game: GameState) -> bool:
    """Close whatever the turn is waiting on and pass it to the next player."""
    if game.turn_state == TurnState.AWAIT_MARKET:
        game.skip_market_all()
    elif game.turn_state == TurnState.AWAIT_CHARITY:
        game.skip_charity()
    elif game.turn_state == TurnState.AWAIT_CARD:
        if not game.pass_selected_card():
            game.apply_selected_card()
    elif game.turn_state == TurnState.AWAIT_LIQUIDATION:
        game.finalize_liquidation()
        return True
    elif game.turn_state == TurnState.AWAIT_ROLL:
        game.roll_dice()
        return _force_end_turn(game)
    return game.end_turn()


def _make_agents(agent_type: str, num_players: int, seed: Optional[int]) -> Dict[int, Agent]:
    if agent_type == "random":
        return {
            i: RandomAgent(i, PLAYER_NAMES[i], seed=None if seed is None else seed + i)
            for i in range(num_players)
        }
    return {i: GreedyAgent(i, PLAYER_NAMES[i]) for i in range(num_players)}


def simulate_game(
    num_players: int = 4,
    agent_type: str = "greedy",
    seed: Optional[int] = None,
    verbose: bool = True,
    max_turns: Optional[int] = None,
    log_file: Optional[str] = None,
) -> GameState:
    """
    Simulate a complete game of Cashflow.

    Args:
        num_players: Number of players (1-8)
        agent_type: Type of AI ('random' or 'greedy')
        seed: Random seed for reproducibility
        verbose: Whether to print detailed output
        max_turns: Maximum number of turns (time limit variant)
        log_file: Path to write the event log as JSONL (None = don't write)
    """
    engine_settings = get_engine_settings()
    if seed is None:
        seed = engine_settings.seed

    players = [Player(i, PLAYER_NAMES[i]) for i in range(num_players)]
    agents = _make_agents(agent_type, num_players, seed)

    settings = GameSettings(seed=seed, time_limit_turns=max_turns)
    game = create_game(settings, players, card_tables=load_card_tables(engine_settings.card_data_path))

    if verbose:
        print(f"Starting game with {num_players} players using {agent_type} agents")
        print(f"Seed: {seed}")

    # Safety limit for iterations, not turns; the turn limit is settings.time_limit_turns
    iteration_count = 0
    max_iterations = engine_settings.max_iterations
    max_actions_per_turn = 100
    turn_key = None
    actions_this_turn = 0
    last_printed_turn = -1

    while not game.game_over and iteration_count < max_iterations:
        iteration_count += 1

        key = (game.turn_number, game.current_player_index)
        if key != turn_key:
            turn_key = key
            actions_this_turn = 0
        actions_this_turn += 1

        if verbose and game.turn_number % 10 == 0 and game.turn_number != last_printed_turn:
            last_printed_turn = game.turn_number
            print_game_state(game)

        if actions_this_turn > max_actions_per_turn:
            # Force end turn if stuck
            if verbose:
                print(f"  WARNING: Player {game.get_current_player().player_id} hit action limit, forcing end turn")
            _force_end_turn(game)
            continue

        actor = acting_player_id(game)
        if actor is None:
            break
        legal_actions = get_legal_actions(game, actor)

        if not legal_actions:
            # No legal actions available - force end turn to prevent infinite loop
            if verbose:
                print(f"  WARNING: No legal actions for Player {actor}, forcing end turn")
            _force_end_turn(game)
            continue

        action = agents[actor].choose_action(game, legal_actions)
        if action is None:
            break

        success = apply_action(game, action, player_id=actor)
        if not success:
            logger.debug(f"Action {action} by player {actor} had no effect")

    # Check if we hit the safety limit
    if iteration_count >= max_iterations and not game.game_over:
        print(f"\n!!! SAFETY LIMIT HIT ({max_iterations} iterations) !!!")
        print(f"Game state: turn={game.turn_number}, game_over={game.game_over}")

    if log_file is not None:
        write_event_log(game, log_file)

    if verbose:
        print_game_summary(game)
        if log_file is not None:
            print(f"\nGame logged to: {log_file}")

    return game


def main():
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(description="Simulate a Cashflow game")
    parser.add_argument(
        "--players",
        type=int,
        default=4,
        choices=range(1, 9),
        help="Number of players (1-8)",
    )
    parser.add_argument(
        "--agent",
        type=str,
        default="greedy",
        choices=["random", "greedy"],
        help="AI agent type",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--quiet", action="store_true", help="Reduce output verbosity")
    parser.add_argument(
        "--max-turns",
        type=int,
        default=None,
        help="Maximum number of turns (time limit variant)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Path to write the event log as JSONL",
    )

    args = parser.parse_args()
    configure_logging()

    simulate_game(
        num_players=args.players,
        agent_type=args.agent,
        seed=args.seed,
        verbose=not args.quiet,
        max_turns=args.max_turns,
        log_file=args.log_file,
    )


if __name__ == "__main__":
    main()
