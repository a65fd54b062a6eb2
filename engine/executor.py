"""Action dispatch for the Hansa rules engine.

Maps each action kind to its handler and checks that the context the
handler returns is a legal transition from the active one. The caller is
responsible for validation beforehand and for installing the returned
context afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TYPE_CHECKING, Union

from core.config import DEFAULT_CONFIG, EngineConfig
from core.constants import ActionName
from core.context import PhaseContext
from core.errors import InvariantViolation
from core.params import ActionParams, parse_action_name, parse_params

from .handlers import (
    handle_displace,
    handle_displace_place,
    handle_done,
    handle_income,
    handle_marker_office,
    handle_marker_place,
    handle_marker_swap,
    handle_marker_use,
    handle_move_collect,
    handle_move_place,
    handle_place,
    handle_route,
    handle_route_barrel,
    handle_route_empty,
    handle_route_office,
    handle_route_upgrade,
)
from .phase_machine import classify_transition

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)

Handler = Callable[[Any, Any, EngineConfig], PhaseContext]

HANDLERS: dict[ActionName, Handler] = {
    ActionName.INCOME: handle_income,
    ActionName.DONE: handle_done,
    ActionName.PLACE: handle_place,
    ActionName.DISPLACE: handle_displace,
    ActionName.DISPLACE_PLACE: handle_displace_place,
    ActionName.MOVE_COLLECT: handle_move_collect,
    ActionName.MOVE_PLACE: handle_move_place,
    ActionName.ROUTE: handle_route,
    ActionName.ROUTE_EMPTY: handle_route_empty,
    ActionName.ROUTE_OFFICE: handle_route_office,
    ActionName.ROUTE_BARREL: handle_route_barrel,
    ActionName.ROUTE_UPGRADE: handle_route_upgrade,
    ActionName.MARKER_PLACE: handle_marker_place,
    ActionName.MARKER_USE: handle_marker_use,
    ActionName.MARKER_SWAP: handle_marker_swap,
    ActionName.MARKER_OFFICE: handle_marker_office,
}


def execute_action(
    state: GameState,
    name: Union[str, ActionName],
    params: Union[ActionParams, dict[str, Any], None] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> PhaseContext:
    """Run the handler for an action.

    Args:
        state: The game state; mutated in place.
        name: The action kind.
        params: The action payload, typed or as a dict.
        config: Engine options.

    Returns:
        The context that should become active.

    Raises:
        ActionParamsError: If the payload does not fit the action.
        InvariantViolation: If the handler meets an impossible state or
            returns an illegal transition.
    """
    action = parse_action_name(name)
    payload = parse_params(action, params)
    current = state.context

    next_context = HANDLERS[action](state, payload, config)

    transition = classify_transition(current, next_context)
    if not transition.success:
        raise InvariantViolation(f"Action {action.value!r} produced an illegal transition: {transition.reason}")

    logger.debug(
        "Game %s: %s %s -> %s (%s)",
        state.id, action.value, current.phase.value, next_context.phase.value, transition.kind.value,
    )
    return next_context
