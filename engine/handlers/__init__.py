"""Action handlers for the Hansa rules engine.

One function per action kind, grouped by family. Each handler:
- Takes the game state, the typed payload and the engine config
- Assumes the validator has approved the action
- Mutates the state and appends human-readable log entries
- Returns the next phase context (the same one, a pushed child, the
  parent, or a fresh turn context)
"""

from .turn import handle_done, handle_income
from .placement import (
    displacement_price,
    handle_displace,
    handle_displace_place,
    handle_place,
    pay_displacement_price,
)
from .movement import handle_move_collect, handle_move_place
from .routes import (
    handle_route,
    handle_route_barrel,
    handle_route_empty,
    handle_route_office,
    handle_route_upgrade,
    route_rewards,
)
from .markers import (
    handle_marker_office,
    handle_marker_place,
    handle_marker_swap,
    handle_marker_use,
)
from .common import take_priority_token

__all__ = [
    # Turn
    "handle_income",
    "handle_done",
    # Placement
    "handle_place",
    "handle_displace",
    "handle_displace_place",
    "displacement_price",
    "pay_displacement_price",
    # Movement
    "handle_move_collect",
    "handle_move_place",
    # Routes
    "handle_route",
    "handle_route_empty",
    "handle_route_office",
    "handle_route_barrel",
    "handle_route_upgrade",
    "route_rewards",
    # Markers
    "handle_marker_place",
    "handle_marker_use",
    "handle_marker_swap",
    "handle_marker_office",
    # Shared
    "take_priority_token",
]
