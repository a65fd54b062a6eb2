"""Core data models for the Hansa rules engine."""

from .constants import (
    Color,
    Phase,
    ActionName,
    Upgrade,
    BonusMarkerKind,
    MIN_PLAYERS,
    MAX_PLAYERS,
    STARTING_GENERAL_STOCK,
    STARTING_PERSONAL_SUPPLY,
    UPGRADE_CAPS,
    MARKER_MULTISET,
    COELLEN,
    EAST_WEST_FROM,
    EAST_WEST_TO,
    COELLEN_BARRELS,
    POINTS_TO_END,
    FULL_CITIES_TO_END,
    BOARD_VARIANTS,
)

from .config import EngineConfig, DEFAULT_CONFIG

from .errors import InvariantViolation, ActionParamsError

from .board import (
    CityName,
    RouteIndex,
    PostAddress,
    Office,
    City,
    Route,
    BoardDefinition,
)

from .components import Token, Stock, RouteState, CityState, LogEntry

from .player import PlayerState

from .params import (
    NoParams,
    PlaceParams,
    PostParams,
    RouteParams,
    CityParams,
    BarrelParams,
    UpgradeParams,
    MarkerParams,
    SwapParams,
    ActionParams,
    parse_action_name,
    parse_params,
)

from .context import ActionRecord, Reward, PhaseContext

from .game_state import GameState

__all__ = [
    # Constants
    "Color",
    "Phase",
    "ActionName",
    "Upgrade",
    "BonusMarkerKind",
    "MIN_PLAYERS",
    "MAX_PLAYERS",
    "STARTING_GENERAL_STOCK",
    "STARTING_PERSONAL_SUPPLY",
    "UPGRADE_CAPS",
    "MARKER_MULTISET",
    "COELLEN",
    "EAST_WEST_FROM",
    "EAST_WEST_TO",
    "COELLEN_BARRELS",
    "POINTS_TO_END",
    "FULL_CITIES_TO_END",
    "BOARD_VARIANTS",
    # Config and errors
    "EngineConfig",
    "DEFAULT_CONFIG",
    "InvariantViolation",
    "ActionParamsError",
    # Board
    "CityName",
    "RouteIndex",
    "PostAddress",
    "Office",
    "City",
    "Route",
    "BoardDefinition",
    # Components
    "Token",
    "Stock",
    "RouteState",
    "CityState",
    "LogEntry",
    # Player
    "PlayerState",
    # Params
    "NoParams",
    "PlaceParams",
    "PostParams",
    "RouteParams",
    "CityParams",
    "BarrelParams",
    "UpgradeParams",
    "MarkerParams",
    "SwapParams",
    "ActionParams",
    "parse_action_name",
    "parse_params",
    # Context
    "ActionRecord",
    "Reward",
    "PhaseContext",
    # Game State
    "GameState",
]
