"""Game setup for the Hansa rules engine.

Builds the initial GameState for a set of seats:
1. Validate the seat assignments (3-5 distinct colors)
2. Randomize the seat order and create the players with starting tokens
3. Load the board variant for the seat count
4. Shuffle the bonus marker stack and deal markers onto tavern routes

The first seat then starts its Actions phase.
"""

from __future__ import annotations

import logging
import random
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from core.board import BoardDefinition
from core.constants import (
    MARKER_MULTISET,
    MAX_PLAYERS,
    MIN_PLAYERS,
    STARTING_TAVERN_MARKERS,
    BonusMarkerKind,
    Color,
)
from core.game_state import GameState
from core.player import PlayerState
from data.loader import load_board_for_players

logger = logging.getLogger(__name__)


@dataclass
class SetupValidationResult:
    """Result of validating seat assignments.

    Attributes:
        valid: Whether the seats can start a game.
        reason: Description of why they cannot (if they cannot).
    """

    valid: bool
    reason: Optional[str] = None


def validate_seats(seats: dict[Union[str, Color], str]) -> SetupValidationResult:
    """Check seat assignments before creating a game.

    Args:
        seats: Mapping from color to display name.
    """
    if not MIN_PLAYERS <= len(seats) <= MAX_PLAYERS:
        return SetupValidationResult(
            valid=False,
            reason=f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {len(seats)}",
        )
    taken: set[Color] = set()
    for color, name in seats.items():
        try:
            seat = Color(color)
        except ValueError:
            return SetupValidationResult(valid=False, reason=f"Unknown color {color!r}")
        if seat in taken:
            return SetupValidationResult(valid=False, reason=f"Color {seat.value} is taken twice")
        taken.add(seat)
        if not isinstance(name, str) or not name.strip():
            return SetupValidationResult(valid=False, reason=f"Seat {seat.value} has no name")
    return SetupValidationResult(valid=True)


def build_marker_stack(rng: random.Random) -> list[BonusMarkerKind]:
    """Return the shuffled bonus marker draw pile."""
    stack = [kind for kind, count in MARKER_MULTISET for _ in range(count)]
    rng.shuffle(stack)
    return stack


def deal_tavern_markers(state: GameState, rng: random.Random) -> None:
    """Deal markers from the stack onto randomly chosen tavern routes."""
    taverns = state.board.tavern_routes()
    count = min(STARTING_TAVERN_MARKERS, len(taverns), len(state.markers))
    for route in rng.sample(taverns, count):
        state.routes[route].marker = state.markers.pop()


def init_game(
    seats: dict[Union[str, Color], str],
    rng: Optional[random.Random] = None,
    board: Optional[BoardDefinition] = None,
) -> GameState:
    """Create a new game.

    Args:
        seats: Mapping from color to display name, 3-5 entries.
        rng: Random source for seat order and markers. Defaults to an
            unseeded Random.
        board: Board to play on. Defaults to the bundled variant for the
            seat count.

    Returns:
        The initial game state, with the first seat to act.

    Raises:
        ValueError: If the seat assignments are invalid.
        BoardLoadError: If the bundled board cannot be loaded.
    """
    validation = validate_seats(seats)
    if not validation.valid:
        raise ValueError(validation.reason)

    rng = rng if rng is not None else random.Random()

    players = [
        PlayerState(id=str(uuid.UUID(int=rng.getrandbits(128))), name=name, color=Color(color))
        for color, name in seats.items()
    ]
    rng.shuffle(players)

    if board is None:
        board = load_board_for_players(len(players))

    state = GameState.create_initial_state(
        board=board,
        players=players,
        game_id=str(uuid.UUID(int=rng.getrandbits(128))),
    )
    state.markers = build_marker_stack(rng)
    deal_tavern_markers(state, rng)

    state.add_log(f"It's {players[0].name}'s turn", 0)
    logger.info(
        "Game %s created on board %s with %d players", state.id, board.name, len(players)
    )
    return state
