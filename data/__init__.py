"""Board data loading for the Hansa rules engine."""

from .loader import (
    BOARDS_DIR,
    BoardLoader,
    BoardLoadError,
    load_board,
    load_board_variant,
    load_board_for_players,
    get_board_stats,
)

__all__ = [
    "BOARDS_DIR",
    "BoardLoader",
    "BoardLoadError",
    "load_board",
    "load_board_variant",
    "load_board_for_players",
    "get_board_stats",
]
