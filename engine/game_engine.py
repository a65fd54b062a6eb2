"""Main game engine for the Hansa rules engine.

apply_action() is the single entry point that changes a game:
1. Reject actions from anyone but the active player
2. Reject actions the validator refuses
3. Run the handler and install the context it returns
4. Record the action in the context it was submitted in

GameEngine wraps a GameState with the conveniences a hosting application
needs: turn snapshots for undo, optimistic version checks and scores.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Optional, Union

from core.board import BoardDefinition
from core.config import DEFAULT_CONFIG, EngineConfig
from core.constants import ActionName, Color
from core.context import ActionRecord, PhaseContext
from core.errors import ActionParamsError
from core.game_state import GameState
from core.params import ActionParams, parse_action_name, parse_params

from .executor import execute_action
from .scoring import ScoreBreakdown, score_breakdown
from .setup import init_game
from .validator import validate_action

logger = logging.getLogger(__name__)


# Actions that commit the turn so far; undo cannot go back past them
IRREVERSIBLE_ACTIONS = frozenset({
    ActionName.DISPLACE,
    ActionName.ROUTE,
    ActionName.ROUTE_EMPTY,
    ActionName.ROUTE_OFFICE,
    ActionName.ROUTE_BARREL,
    ActionName.ROUTE_UPGRADE,
    ActionName.DONE,
})


@dataclass
class StepResult:
    """Result of applying an action.

    Attributes:
        success: Whether the action was applied.
        context: The active context afterwards (unchanged on rejection).
        reason: Why the action was rejected (if it was).
        game_over: Whether the game has ended.
    """

    success: bool
    context: PhaseContext
    reason: Optional[str] = None
    game_over: bool = False


def _reject(state: GameState, name: Any, reason: str) -> StepResult:
    logger.debug("Game %s: rejected %s: %s", state.id, name, reason)
    return StepResult(success=False, context=state.context, reason=reason, game_over=state.is_over)


def apply_action(
    state: GameState,
    name: Union[str, ActionName],
    params: Union[ActionParams, dict[str, Any], None] = None,
    player: Optional[int] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> StepResult:
    """Validate and apply an action to a game state.

    Args:
        state: The game state; mutated in place on success.
        name: The action kind.
        params: The action payload, typed or as a dict.
        player: Seat submitting the action. None skips the turn-order check
            for trusted callers.
        config: Engine options.

    Returns:
        StepResult with the outcome.
    """
    if player is not None and player != state.context.player:
        return _reject(state, name, "It's not your turn")

    try:
        action = parse_action_name(name)
        payload = parse_params(action, params)
    except ActionParamsError as e:
        return _reject(state, name, f"Invalid parameters: {e}")

    validation = validate_action(state, action, payload)
    if not validation.valid:
        return _reject(state, action.value, validation.reason)

    current = state.context
    next_context = execute_action(state, action, payload, config)

    current.actions.append(ActionRecord(action, payload))
    if next_context is current.parent and next_context.actions:
        # Popping: keep the finished sub-context's history on the action that opened it
        next_context.actions[-1].context_actions = current.actions

    state.context = next_context
    state.version += 1
    logger.debug("Game %s: applied %s (version %d)", state.id, action.value, state.version)

    return StepResult(success=True, context=next_context, game_over=state.is_over)


class GameEngine:
    """Engine for playing a game of Hansa.

    Usage:
        engine = GameEngine()
        engine.new_game({"red": "Ann", "blue": "Bo", "green": "Cy"})

        result = engine.apply("income", player=engine.state.context.player)
        if not result.success:
            print(result.reason)
    """

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG):
        """Initialize the engine.

        Args:
            config: Engine options.
        """
        self.config = config
        self._state: Optional[GameState] = None
        self._snapshot: Optional[GameState] = None

    @property
    def state(self) -> GameState:
        """Get the current game state.

        Raises:
            RuntimeError: If no game has been started or loaded.
        """
        if self._state is None:
            raise RuntimeError("Game not initialized. Call new_game() or load() first.")
        return self._state

    def is_game_over(self) -> bool:
        return self._state is not None and self._state.is_over

    # -------------------------------------------------------------------------
    # Game lifecycle
    # -------------------------------------------------------------------------

    def new_game(
        self,
        seats: dict[Union[str, Color], str],
        rng: Optional[random.Random] = None,
        board: Optional[BoardDefinition] = None,
    ) -> GameState:
        """Start a new game and take the first turn snapshot.

        Raises:
            ValueError: If the seat assignments are invalid.
        """
        return self.load(init_game(seats, rng=rng, board=board))

    def load(self, state: GameState) -> GameState:
        """Adopt an existing game state, for example one rebuilt with from_dict()."""
        self._state = state
        self._snapshot = state.clone()
        return state

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def validate(
        self,
        name: Union[str, ActionName],
        params: Union[ActionParams, dict[str, Any], None] = None,
    ) -> Optional[str]:
        """Return why an action would be rejected, or None if it is legal."""
        return validate_action(self.state, name, params).reason

    def apply(
        self,
        name: Union[str, ActionName],
        params: Union[ActionParams, dict[str, Any], None] = None,
        player: Optional[int] = None,
        expected_version: Optional[int] = None,
    ) -> StepResult:
        """Apply an action to the current game.

        Args:
            name: The action kind.
            params: The action payload.
            player: Seat submitting the action.
            expected_version: The state version the submitter saw. When
                version checks are enabled, a mismatch rejects the action.

        Returns:
            StepResult with the outcome.
        """
        state = self.state
        if (
            self.config.check_versions
            and expected_version is not None
            and expected_version != state.version
        ):
            return _reject(
                state, name,
                f"Stale state: expected version {expected_version}, current version {state.version}",
            )

        previous_player = state.context.player
        result = apply_action(state, name, params, player=player, config=self.config)

        if result.success and (
            state.context.player != previous_player
            or parse_action_name(name) in IRREVERSIBLE_ACTIONS
        ):
            self._snapshot = state.clone()
        return result

    def reset_turn(self) -> GameState:
        """Restore the state saved when the current turn (or control) began.

        Returns:
            The restored state.
        """
        if self._snapshot is None:
            raise RuntimeError("Game not initialized. Call new_game() or load() first.")
        self._state = self._snapshot.clone()
        logger.debug("Game %s: turn reset to version %d", self._state.id, self._state.version)
        return self._state

    # -------------------------------------------------------------------------
    # Scores
    # -------------------------------------------------------------------------

    def scores(self) -> dict[int, int]:
        """Return each seat's aggregate score."""
        return {i: score_breakdown(self.state, i).total for i in range(self.state.num_players())}

    def score_breakdowns(self) -> dict[int, ScoreBreakdown]:
        return {i: score_breakdown(self.state, i) for i in range(self.state.num_players())}
