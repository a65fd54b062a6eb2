"""Turn handlers: income and ending the turn."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.config import EngineConfig
from core.constants import Phase, SYSTEM_PLAYER
from core.context import PhaseContext
from core.params import NoParams

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)


def handle_income(state: GameState, params: NoParams, config: EngineConfig) -> PhaseContext:
    """Move tokens from the general stock to the personal supply.

    The bank tier sets how many (3/5/7/all). Merchants move first.
    """
    player = state.current_player()
    limit = player.income_value()
    budget = player.general_stock.total() if limit is None else limit

    merchants = min(budget, player.general_stock.m)
    tradesmen = min(budget - merchants, player.general_stock.t)
    for merch, amount in ((True, merchants), (False, tradesmen)):
        player.general_stock.take(merch, amount)
        player.personal_supply.add(merch, amount)

    state.add_log(
        f"{player.name} purchases {tradesmen} tradesmen and {merchants} merchants",
        state.context.player,
    )
    return state.context


def handle_done(state: GameState, params: NoParams, config: EngineConfig) -> PhaseContext:
    """End the active player's part of the turn.

    - A displaced player hands control back to the displacing player
    - A flagged turn ends the game
    - Unplaced bonus markers must be placed first
    - Otherwise the next seat starts a fresh turn
    """
    context = state.context
    player = state.current_player()

    if context.phase == Phase.DISPLACEMENT:
        state.add_log(f"{player.name} is done placing displaced tokens", context.player)
        return context.pop()

    if context.ends_game():
        state.is_over = True
        state.add_log("The game is over", SYSTEM_PLAYER)
        logger.info("Game %s over at the end of turn %d", state.id, state.turn)
        return context

    if context.phase != Phase.MARKERS and player.unplaced_markers:
        return context.push(Phase.MARKERS)

    return state.next_turn_context()
