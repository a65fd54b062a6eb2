"""Movement handlers: collecting tokens from the board and placing them.

A move starts in Actions (or through a "Move 3" marker) by collecting a
token into a Collection context's hand. The first placement replaces the
Collection context with a Movement context; emptying the hand returns to
the context the move started from.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.config import EngineConfig
from core.constants import ActionName, Phase
from core.context import ActionRecord, PhaseContext
from core.params import PostParams

if TYPE_CHECKING:
    from core.game_state import GameState


def handle_move_collect(state: GameState, params: PostParams, config: EngineConfig) -> PhaseContext:
    """Take a token off the board into the hand."""
    context = state.context
    player = state.current_player()
    route_index, post_index = params.post

    token = state.routes[route_index].remove(post_index)
    state.add_log(
        f"{player.name} moves a {token.kind} from {state.route_name(route_index)}",
        context.player,
    )

    if context.phase == Phase.ACTIONS:
        return context.push(
            Phase.COLLECTION,
            hand=[token],
            actions=[ActionRecord(ActionName.MOVE_COLLECT, params)],
        )

    context.hand.append(token)
    return context


def handle_move_place(state: GameState, params: PostParams, config: EngineConfig) -> PhaseContext:
    """Put the first token in hand on a vacant post."""
    context = state.context
    player = state.current_player()
    route_index, post_index = params.post

    token = context.take_from_hand()
    state.routes[route_index].place(post_index, token)
    state.add_log(
        f"{player.name} moves a {token.kind} to {state.route_name(route_index)}",
        context.player,
    )

    if not context.hand:
        return context.pop()

    if context.phase == Phase.COLLECTION:
        return context.pop().push(
            Phase.MOVEMENT,
            hand=context.hand,
            actions=[ActionRecord(ActionName.MOVE_PLACE, params)],
        )

    return context
