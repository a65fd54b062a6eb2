"""Phase context rules for the Hansa rules engine.

The active PhaseContext and its parent chain form the turn state machine.
This module holds the rules that depend on where in that machine the game
is:
- Action budgets per phase
- Whether the turn may end
- Where bonus markers and extra offices may go
- Which context transitions a handler may produce

It never modifies game state; handlers and the engine do.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from core.board import RouteIndex
from core.constants import (
    DISPLACED_MERCHANT_PLACEMENTS,
    DISPLACED_TRADESMAN_PLACEMENTS,
    EXTRA_ACTIONS,
    MOVE_3_LIMIT,
    ActionName,
    BonusMarkerKind,
    Phase,
)
from core.context import PhaseContext
from core.params import MarkerParams, PlaceParams

if TYPE_CHECKING:
    from core.game_state import GameState


# Phases a context may push as a child of itself
PHASE_TRANSITIONS: dict[Phase, list[Phase]] = {
    Phase.ACTIONS: [
        Phase.DISPLACEMENT,
        Phase.COLLECTION,
        Phase.ROUTE,
        Phase.MARKERS,
        Phase.UPGRADE,
        Phase.SWAP,
        Phase.OFFICE,
    ],
    Phase.DISPLACEMENT: [],
    Phase.COLLECTION: [],
    Phase.MOVEMENT: [],
    Phase.ROUTE: [],
    Phase.MARKERS: [],
    Phase.UPGRADE: [],
    Phase.SWAP: [],
    Phase.OFFICE: [],
}

# Phases a context may be replaced by, keeping the same parent
PHASE_REPLACEMENTS: dict[Phase, list[Phase]] = {
    Phase.COLLECTION: [Phase.MOVEMENT],
}

# Phases the turn cannot end in: a choice or a move is still pending
UNFINISHED_PHASES = (
    Phase.ROUTE,
    Phase.SWAP,
    Phase.UPGRADE,
    Phase.OFFICE,
    Phase.COLLECTION,
    Phase.MOVEMENT,
)


class TransitionKind(Enum):
    """How the next context relates to the current one."""

    STAY = "stay"
    PUSH = "push"
    POP = "pop"
    REPLACE = "replace"
    NEW_TURN = "new_turn"


@dataclass
class PhaseTransitionResult:
    """Result of classifying a context transition.

    Attributes:
        success: Whether the transition is legal.
        kind: How the contexts relate, if legal.
        new_phase: The phase of the next context.
        reason: Description of why the transition is illegal (if it is).
    """

    success: bool
    kind: Optional[TransitionKind]
    new_phase: Optional[Phase]
    reason: Optional[str] = None


def classify_transition(current: PhaseContext, next_context: PhaseContext) -> PhaseTransitionResult:
    """Classify the transition from the active context to a handler's result.

    Args:
        current: The context the action was submitted in.
        next_context: The context the handler returned.

    Returns:
        PhaseTransitionResult describing the transition.
    """
    phase = next_context.phase

    if next_context is current:
        return PhaseTransitionResult(success=True, kind=TransitionKind.STAY, new_phase=phase)

    if next_context.parent is current:
        if phase in PHASE_TRANSITIONS[current.phase]:
            return PhaseTransitionResult(success=True, kind=TransitionKind.PUSH, new_phase=phase)
        return PhaseTransitionResult(
            success=False,
            kind=None,
            new_phase=phase,
            reason=f"Cannot push {phase.value} on top of {current.phase.value}. "
            f"Valid pushes: {[p.value for p in PHASE_TRANSITIONS[current.phase]]}",
        )

    if current.parent is not None and next_context is current.parent:
        return PhaseTransitionResult(success=True, kind=TransitionKind.POP, new_phase=phase)

    if current.parent is not None and next_context.parent is current.parent:
        if phase in PHASE_REPLACEMENTS.get(current.phase, []):
            return PhaseTransitionResult(success=True, kind=TransitionKind.REPLACE, new_phase=phase)
        return PhaseTransitionResult(
            success=False,
            kind=None,
            new_phase=phase,
            reason=f"Cannot replace {current.phase.value} with {phase.value}",
        )

    if next_context.parent is None and phase == Phase.ACTIONS:
        return PhaseTransitionResult(success=True, kind=TransitionKind.NEW_TURN, new_phase=phase)

    return PhaseTransitionResult(
        success=False,
        kind=None,
        new_phase=phase,
        reason=f"Unrelated transition from {current.phase.value} to {phase.value}",
    )


# -------------------------------------------------------------------------
# Context queries
# -------------------------------------------------------------------------


def is_move_3(context: PhaseContext) -> bool:
    """Check if a Collection context was opened by a "Move 3" marker."""
    if context.phase != Phase.COLLECTION or context.parent is None:
        return False
    opener = context.parent.last_action()
    return (
        opener is not None
        and opener.name == ActionName.MARKER_USE
        and isinstance(opener.params, MarkerParams)
        and opener.params.kind == BonusMarkerKind.MOVE_3
    )


def displacement_origin(context: PhaseContext) -> Optional[RouteIndex]:
    """Return the route a Displacement context's token was evicted from."""
    if context.phase != Phase.DISPLACEMENT or context.parent is None:
        return None
    opener = context.parent.last_action()
    if opener is None or opener.name != ActionName.DISPLACE or not isinstance(opener.params, PlaceParams):
        return None
    return opener.params.post[0]


def available_actions_count(state: GameState) -> int:
    """Return the action budget of the active context.

    - Actions: by actions tier, plus extra actions from markers used here
    - Displacement: 3 if a merchant was evicted, else 2
    - Collection: book + 1, or 3 when opened by a "Move 3" marker
    - Movement: tokens in hand plus placements made
    - Markers: markers left to place plus markers placed
    """
    context = state.context
    player = state.current_player()

    if context.phase == Phase.ACTIONS:
        extra = sum(EXTRA_ACTIONS.get(kind, 0) for kind in context.markers_used())
        return player.actions_per_turn() + extra
    if context.phase == Phase.DISPLACEMENT:
        return DISPLACED_MERCHANT_PLACEMENTS if context.displaced_merchant else DISPLACED_TRADESMAN_PLACEMENTS
    if context.phase == Phase.COLLECTION:
        return MOVE_3_LIMIT if is_move_3(context) else player.collection_limit()
    if context.phase == Phase.MOVEMENT:
        return len(context.hand) + len(context.actions)
    if context.phase == Phase.MARKERS:
        return len(player.unplaced_markers) + len(context.actions)
    return 0


def remaining_actions(state: GameState) -> int:
    """Return how many budgeted actions the active context has left."""
    return max(0, available_actions_count(state) - state.context.counted_actions())


# -------------------------------------------------------------------------
# Board queries
# -------------------------------------------------------------------------


def can_place_bonus_marker(state: GameState, route: RouteIndex) -> bool:
    """Check if a bonus marker may be placed on a route.

    The route must hold no tokens and no marker, and at least one of its
    endpoint cities must have a free office.
    """
    if not 0 <= route < len(state.routes):
        return False
    route_state = state.routes[route]
    if route_state.marker is not None or not route_state.is_empty():
        return False
    return any(not state.is_city_full(city) for city in state.board.routes[route].endpoints)


def placeable_marker_routes(state: GameState) -> list[RouteIndex]:
    return [i for i in range(len(state.routes)) if can_place_bonus_marker(state, i)]


def valid_extra_office_locations(state: GameState) -> list[str]:
    """Return cities where an extra office may be set up.

    Any city with at least one regular office occupied qualifies.
    """
    return [name for name in state.board.cities if state.cities[name].tokens]


def owns_regular_office(state: GameState, player: int) -> bool:
    return any(
        token.owner == player
        for city in state.cities.values()
        for token in city.tokens
    )


def can_end_turn(state: GameState) -> bool:
    """Check if the active player may submit "done".

    The hand must be empty and no choice or move may be pending. In
    the Markers phase every unplaced marker must be placed while a route
    can still take one.
    """
    context = state.context
    if context.hand:
        return False
    if context.phase in UNFINISHED_PHASES:
        return False
    if context.phase == Phase.MARKERS:
        player = state.current_player()
        return not player.unplaced_markers or not placeable_marker_routes(state)
    return True
