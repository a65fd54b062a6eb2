"""Helpers shared by the action handlers.

Token sourcing, hand discarding and the end-of-game checks that several
handlers run after changing the score or the board.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.components import Token
from core.config import EngineConfig
from core.constants import EAST_WEST_BONUS, EAST_WEST_FROM, EAST_WEST_TO, SYSTEM_PLAYER
from core.errors import InvariantViolation
from core.player import PlayerState

from ..scoring import are_cities_linked, full_city_count

if TYPE_CHECKING:
    from core.context import PhaseContext
    from core.game_state import GameState

logger = logging.getLogger(__name__)


def take_priority_token(player: PlayerState, owner: int) -> Token:
    """Take the next token a player sets up without paying for it.

    Sources in order: general stock tradesman, general stock merchant,
    personal supply tradesman, personal supply merchant.

    Raises:
        InvariantViolation: If the player has no tokens left.
    """
    for pool in (player.general_stock, player.personal_supply):
        for merch in (False, True):
            if pool.count(merch) > 0:
                pool.take(merch)
                return Token(owner=owner, merch=merch)
    raise InvariantViolation(f"Player {player.name} has no tokens left")


def discard_hand(state: GameState, context: PhaseContext) -> None:
    """Return every token in a hand to its owner's general stock."""
    for token in context.hand:
        state.get_player(token.owner).general_stock.add(token.merch)
    context.hand.clear()


def check_east_west(state: GameState, player_idx: int) -> None:
    """Award the one-time bonus for linking the east and west cities."""
    player = state.get_player(player_idx)
    if player.link_east_west:
        return
    if not are_cities_linked(state, EAST_WEST_FROM, EAST_WEST_TO, player_idx):
        return
    awarded = EAST_WEST_BONUS[sum(1 for p in state.players if p.link_east_west)]
    player.add_points(awarded)
    player.link_east_west = True
    state.add_log(f"{player.name} scores {awarded} for completing the east-west route", player_idx)


def check_points_to_end(state: GameState, config: EngineConfig) -> None:
    """End the game at once when any player has reached the point limit."""
    if state.is_over:
        return
    if any(p.points >= config.points_to_end for p in state.players):
        state.is_over = True
        state.add_log(f"Game over due to a player reaching {config.points_to_end} points", SYSTEM_PLAYER)
        logger.info("Game %s over: point limit reached", state.id)


def check_full_cities(state: GameState, context: PhaseContext, config: EngineConfig) -> None:
    """Flag the turn to end the game once enough cities are full."""
    turn = context.root()
    if turn.end_game or full_city_count(state) < config.full_cities_to_end:
        return
    turn.end_game = True
    state.add_log(f"The game ends after this turn: {config.full_cities_to_end} cities are full", SYSTEM_PLAYER)
    logger.info("Game %s ends this turn: %d cities full", state.id, config.full_cities_to_end)
