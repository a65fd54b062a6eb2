"""Game engine for the Hansa rules engine.

This module provides the game logic including:
- Phase context rules (budgets, turn ending, transitions)
- Scoring and graph algorithms
- The validator and the action handlers
- Game setup and the GameEngine facade
"""

from .phase_machine import (
    PhaseTransitionResult,
    TransitionKind,
    PHASE_TRANSITIONS,
    classify_transition,
    available_actions_count,
    remaining_actions,
    can_end_turn,
    can_place_bonus_marker,
)

from .scoring import (
    ScoreBreakdown,
    city_owner,
    full_city_count,
    largest_network,
    are_cities_linked,
    valid_displaced_token_routes,
    marker_bonus,
    total_points,
)

from .validator import ValidationResult, validate_action

from .executor import HANDLERS, execute_action

from .setup import SetupValidationResult, init_game

from .game_engine import GameEngine, StepResult, apply_action

__all__ = [
    # Phase machine
    "PhaseTransitionResult",
    "TransitionKind",
    "PHASE_TRANSITIONS",
    "classify_transition",
    "available_actions_count",
    "remaining_actions",
    "can_end_turn",
    "can_place_bonus_marker",
    # Scoring
    "ScoreBreakdown",
    "city_owner",
    "full_city_count",
    "largest_network",
    "are_cities_linked",
    "valid_displaced_token_routes",
    "marker_bonus",
    "total_points",
    # Validation and execution
    "ValidationResult",
    "validate_action",
    "HANDLERS",
    "execute_action",
    # Setup
    "SetupValidationResult",
    "init_game",
    # Game engine
    "GameEngine",
    "StepResult",
    "apply_action",
]
