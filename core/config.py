"""Configuration for the Hansa rules engine.

Rule tables live in core.constants; this module holds the knobs an embedding
application may want to change per game instance.
"""

from dataclasses import dataclass

from .constants import POINTS_TO_END, FULL_CITIES_TO_END


@dataclass(frozen=True)
class EngineConfig:
    """Engine options.

    Attributes:
        points_to_end: Points that end the game immediately when reached
            during a reward resolution.
        full_cities_to_end: Number of full cities that ends the game at the
            end of the current turn.
        check_versions: Reject actions submitted against a stale state
            version when an expected version is supplied.
    """

    points_to_end: int = POINTS_TO_END
    full_cities_to_end: int = FULL_CITIES_TO_END
    check_versions: bool = True


DEFAULT_CONFIG = EngineConfig()
