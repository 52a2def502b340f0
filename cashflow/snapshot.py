"""
Public snapshot serialization of GameState.

Produces a JSON-safe view of the current game for frame exports without
exposing hidden information (deck order, card contents still in a deck).
"""

from typing import Any, Dict, List

from cashflow.game import GameState
from cashflow.player import PlayerState
from cashflow.schemas import (
    AssetDTO,
    CharityPromptDTO,
    DeckCountDTO,
    GameSnapshot,
    LiabilityDTO,
    LiquidationDTO,
    LoanDTO,
    MarketSessionDTO,
    PlayerDTO,
    VentureDTO,
    VentureParticipantDTO,
)


def _player_dto(player: PlayerState) -> PlayerDTO:
    return PlayerDTO(
        player_id=player.player_id,
        name=player.name,
        scenario_id=player.scenario.id,
        dream_id=player.dream.id if player.dream else None,
        track=player.track.value,
        position=player.position,
        status=player.status.value,
        cash=player.cash,
        passive_income=player.passive_income,
        total_income=player.total_income,
        total_expenses=player.total_expenses,
        payday=player.payday,
        children=player.children,
        charity_turns=player.charity_turns,
        skip_turns=player.skip_turns,
        fast_track_unlocked=player.fast_track_unlocked,
        fast_track_target=player.fast_track_target,
        pending_obligation=player.pending_obligation,
        net_worth=player.net_worth(),
        assets=[
            AssetDTO(
                asset_id=a.id,
                name=a.name,
                category=a.category.value,
                cashflow=a.cashflow,
                cost=a.cost,
                quantity=a.quantity,
                metadata=dict(a.metadata),
            )
            for a in player.assets
        ],
        liabilities=[
            LiabilityDTO(
                liability_id=l.id,
                name=l.name,
                payment=l.payment,
                balance=l.balance,
                category=l.category.value,
                is_bank_loan=l.is_bank_loan,
            )
            for l in player.liabilities
        ],
    )


def build_snapshot(game: GameState) -> GameSnapshot:
    """Build the validated snapshot model for a game."""
    players: List[PlayerDTO] = [_player_dto(game.players[pid]) for pid in game.seat_order]

    market = None
    if game.market_session is not None:
        s = game.market_session
        market = MarketSessionDTO(
            card_id=s.card_id,
            kind=s.kind.value,
            stage=s.stage.value,
            responders=list(s.responders),
            responder_index=s.responder_index,
            sell={pid: dict(q) for pid, q in s.sell.items()},
            buy_quantity=s.buy_quantity,
        )

    charity = None
    if game.charity_prompt is not None:
        charity = CharityPromptDTO(player_id=game.charity_prompt.player_id, amount=game.charity_prompt.amount)

    liquidation = None
    if game.liquidation is not None:
        liquidation = LiquidationDTO(
            player_id=game.liquidation.player_id,
            required=game.liquidation.required,
            raised=game.liquidation.raised,
        )

    ventures = [
        VentureDTO(
            venture_id=v.id,
            name=v.name,
            status=v.status.value,
            cash_needed=v.cash_needed,
            cashflow_impact=v.cashflow_impact,
            participants=[
                VentureParticipantDTO(player_id=p.player_id, contribution=p.contribution, equity=p.equity)
                for p in v.participants
            ],
        )
        for v in game.ventures.ventures.values()
    ]
    loans = [
        LoanDTO(
            loan_id=l.id,
            lender_id=l.lender_id,
            borrower_id=l.borrower_id,
            principal=l.principal,
            rate=l.rate,
            remaining=l.remaining,
            status=l.status.value,
        )
        for l in game.loans.loans.values()
    ]

    return GameSnapshot(
        turn_number=game.turn_number,
        phase=game.phase.value,
        turn_state=game.turn_state.value,
        current_player_id=game.get_current_player().player_id,
        game_over=game.game_over,
        winner_id=game.winner,
        players=players,
        selected_card_id=game.selected_card.id if game.selected_card else None,
        market=market,
        charity=charity,
        liquidation=liquidation,
        decks={key: DeckCountDTO(**counts) for key, counts in game.decks.counts().items()},
        ventures=ventures,
        loans=loans,
        last_roll=list(game.last_roll.dice) if game.last_roll else None,
    )


def serialize_snapshot(game: GameState) -> Dict[str, Any]:
    """Serialize a GameState into a public, stable JSON dict."""
    return build_snapshot(game).model_dump(mode="json")
