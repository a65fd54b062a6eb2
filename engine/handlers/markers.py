"""Bonus marker handlers: placing, using and resolving markers.

Marker effects:
- "3 Actions" / "4 Actions": extend the action budget of the current turn
- "Move 3": collect up to 3 tokens, opponents' included, and move them
- "Upgrade": a free upgrade of any track that is not maxed out
- "Swap": exchange one of your offices with its right-hand neighbor
- "Office": set up an extra office in front of a city's regular offices
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.config import EngineConfig
from core.constants import ActionName, BonusMarkerKind, Phase
from core.context import ActionRecord, PhaseContext, Reward
from core.params import CityParams, MarkerParams, RouteParams, SwapParams, UpgradeParams

from ..phase_machine import valid_extra_office_locations
from .common import check_east_west, check_points_to_end, take_priority_token

if TYPE_CHECKING:
    from core.game_state import GameState


def handle_marker_place(state: GameState, params: RouteParams, config: EngineConfig) -> PhaseContext:
    """Put the oldest unplaced marker on a route."""
    player = state.current_player()
    marker = player.unplaced_markers.pop(0)
    state.routes[params.route].marker = marker

    state.add_log(
        f"{player.name} places a \"{marker.value}\" marker at {state.route_name(params.route)}",
        state.context.player,
    )
    return state.context


def handle_marker_use(state: GameState, params: MarkerParams, config: EngineConfig) -> PhaseContext:
    """Spend a ready marker and open its sub-decision, if it has one."""
    context = state.context
    player = state.current_player()

    player.use_marker(params.kind)
    state.add_log(f"{player.name} uses their \"{params.kind.value}\" marker", context.player)

    if params.kind == BonusMarkerKind.MOVE_3:
        return context.push(Phase.COLLECTION)

    if params.kind == BonusMarkerKind.UPGRADE:
        return context.push(Phase.UPGRADE, rewards=[
            Reward(f"Upgrade {upgrade.value}", ActionRecord(ActionName.ROUTE_UPGRADE, UpgradeParams(upgrade)))
            for upgrade in player.available_upgrades()
        ])

    if params.kind == BonusMarkerKind.SWAP:
        return context.push(Phase.SWAP)

    if params.kind == BonusMarkerKind.OFFICE:
        return context.push(Phase.OFFICE, rewards=[
            Reward(f"Establish an extra office in {city}", ActionRecord(ActionName.MARKER_OFFICE, CityParams(city)))
            for city in valid_extra_office_locations(state)
        ])

    # Extra actions are counted from the marker-use records of this context
    return context


def handle_marker_swap(state: GameState, params: SwapParams, config: EngineConfig) -> PhaseContext:
    """Swap an office with the one to its right; the rightmost stays put."""
    context = state.context
    player = state.current_player()
    offices = state.cities[params.city].tokens

    other = params.office + 1 if params.office < len(offices) - 1 else params.office
    offices[params.office], offices[other] = offices[other], offices[params.office]

    state.add_log(f"{player.name} swaps their office in {params.city}", context.player)
    return context.pop()


def handle_marker_office(state: GameState, params: CityParams, config: EngineConfig) -> PhaseContext:
    """Set up an extra office, sourcing the token like a displaced token."""
    context = state.context
    player = state.current_player()

    token = take_priority_token(player, context.player)
    state.cities[params.city].extras.insert(0, token)
    state.add_log(f"{player.name} sets up an extra office in {params.city}", context.player)

    check_east_west(state, context.player)
    check_points_to_end(state, config)
    return context.pop()
