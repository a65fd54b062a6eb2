"""Route handlers: completing a route and resolving its reward.

Completing a route offers a list of rewards:
- Do nothing
- The next office at either endpoint, if the privilege tier allows it and
  a merchant is on the route when the office needs one
- The upgrade of either endpoint city, if not maxed out
- A free Coellen barrel, for routes ending in Coellen with a merchant on
  them, if the privilege tier allows it

The tokens taken off the route are held in the Route context's hand until
a reward is chosen; whatever the reward does not use goes back to the
general stock.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.config import EngineConfig
from core.constants import (
    CITY_OWNER_ROUTE_POINTS,
    COELLEN,
    COELLEN_BARREL_NAMES,
    COELLEN_BARRELS,
    SYSTEM_PLAYER,
    ActionName,
    Phase,
)
from core.components import Token
from core.context import ActionRecord, PhaseContext, Reward
from core.params import BarrelParams, CityParams, NoParams, RouteParams, UpgradeParams

from ..scoring import NO_OWNER, city_owner
from .common import (
    check_east_west,
    check_full_cities,
    check_points_to_end,
    discard_hand,
)

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)


def route_rewards(state: GameState, route_index: int) -> list[Reward]:
    """Build the rewards the active player may choose for a complete route."""
    player = state.current_player()
    route = state.board.routes[route_index]
    merchants = sum(1 for t in state.routes[route_index].tokens if t is not None and t.merch)

    rewards = [Reward("Do nothing", ActionRecord(ActionName.ROUTE_EMPTY, NoParams()))]

    for name in route.endpoints:
        offices = state.board.cities[name].offices
        filled = len(state.cities[name].tokens)
        if filled >= len(offices):
            continue
        office = offices[filled]
        if office.privilege <= player.privilege and (not office.merch or merchants > 0):
            rewards.append(Reward(
                f"Office in {name}",
                ActionRecord(ActionName.ROUTE_OFFICE, CityParams(name)),
            ))

    offered = set()
    for name in route.endpoints:
        upgrade = state.board.cities[name].upgrade
        if upgrade is not None and upgrade not in offered and player.can_upgrade(upgrade):
            offered.add(upgrade)
            rewards.append(Reward(
                f"Upgrade {upgrade.value}",
                ActionRecord(ActionName.ROUTE_UPGRADE, UpgradeParams(upgrade)),
            ))

    if route.touches(COELLEN) and merchants > 0:
        for index, owner in enumerate(state.coellen):
            if owner is None and player.privilege >= index + 1:
                rewards.append(Reward(
                    f"Use a merchant to score {COELLEN_BARRELS[index]} points",
                    ActionRecord(ActionName.ROUTE_BARREL, BarrelParams(index)),
                ))

    return rewards


def handle_route(state: GameState, params: RouteParams, config: EngineConfig) -> PhaseContext:
    """Complete a route and push the Route reward choice."""
    context = state.context
    player = state.current_player()
    route = state.board.routes[params.route]
    route_state = state.routes[params.route]

    rewards = route_rewards(state, params.route)

    if route_state.marker is not None:
        if state.markers:
            player.unplaced_markers.append(state.markers.pop())
        else:
            context.root().end_game = True
            state.add_log("The game ends after this turn: all markers are used", SYSTEM_PLAYER)
            logger.info("Game %s ends this turn: marker stack exhausted", state.id)
        player.ready_markers.append(route_state.marker)
        state.add_log(f"{player.name} collects a \"{route_state.marker.value}\" marker", context.player)
        route_state.marker = None

    for name in route.endpoints:
        owner = city_owner(state, name)
        if owner != NO_OWNER:
            state.players[owner].add_points(CITY_OWNER_ROUTE_POINTS)
            state.add_log(
                f"{state.players[owner].name} scores {CITY_OWNER_ROUTE_POINTS} because they own {name}",
                owner,
            )

    removed = route_state.clear()
    hand = [Token(owner=context.player, merch=True) for t in removed if t.merch]
    hand += [Token(owner=context.player, merch=False) for t in removed if not t.merch]

    state.add_log(f"{player.name} completes the {state.route_name(params.route)} route", context.player)
    check_points_to_end(state, config)

    return context.push(Phase.ROUTE, hand=hand, rewards=rewards)


def handle_route_empty(state: GameState, params: NoParams, config: EngineConfig) -> PhaseContext:
    """Claim no reward; all route tokens return to the general stock."""
    context = state.context
    player = state.current_player()

    discard_hand(state, context)
    state.add_log(f"{player.name} claims no reward for completing the route", context.player)
    check_points_to_end(state, config)
    return context.pop()


def handle_route_office(state: GameState, params: CityParams, config: EngineConfig) -> PhaseContext:
    """Establish an office in an endpoint city.

    A merchant-only office uses a merchant from the hand; any other office
    uses a tradesman when one is held, else a merchant.
    """
    context = state.context
    player = state.current_player()
    city = state.board.cities[params.city]
    city_state = state.cities[params.city]
    office = city.offices[len(city_state.tokens)]

    needs_merchant = office.merch or not any(not t.merch for t in context.hand)
    token = context.take_from_hand(merch=needs_merchant)
    discard_hand(state, context)

    city_state.tokens.append(Token(owner=context.player, merch=token.merch))
    state.add_log(f"{player.name} establishes an office in {city.name}", context.player)
    if office.point:
        player.add_points(1)
        state.add_log(f"{player.name} scores 1 for the office in {city.name}", context.player)

    check_east_west(state, context.player)
    check_full_cities(state, context, config)
    check_points_to_end(state, config)
    return context.pop()


def handle_route_barrel(state: GameState, params: BarrelParams, config: EngineConfig) -> PhaseContext:
    """Place a merchant on a Coellen barrel."""
    context = state.context
    player = state.current_player()

    context.take_from_hand(merch=True)
    discard_hand(state, context)
    state.coellen[params.barrel] = context.player

    state.add_log(
        f"{player.name} takes the {COELLEN_BARREL_NAMES[params.barrel]} "
        f"({COELLEN_BARRELS[params.barrel]}pt) Coellen barrel",
        context.player,
    )
    check_points_to_end(state, config)
    return context.pop()


def handle_route_upgrade(state: GameState, params: UpgradeParams, config: EngineConfig) -> PhaseContext:
    """Raise an upgrade track; the uncovered token joins the personal supply."""
    context = state.context
    player = state.current_player()

    player.apply_upgrade(params.upgrade)
    discard_hand(state, context)

    state.add_log(f"{player.name} upgrades their {params.upgrade.value}", context.player)
    check_points_to_end(state, config)
    return context.pop()
