"""Scoring and graph algorithms for the Hansa rules engine.

Pure functions over GameState. Handlers call them to award bonuses during
play; read-only consumers call them for live score display.

Network and linkage queries run on the subgraph of the city graph induced
by the cities where a player holds at least one office.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import networkx as nx

from core.board import CityName, RouteIndex
from core.constants import (
    COELLEN_BARRELS,
    MARKER_BONUS_TIERS,
    MAXED_UPGRADE_POINTS,
    OWNED_CITY_POINTS,
    SCORED_UPGRADES,
)

if TYPE_CHECKING:
    from core.game_state import GameState


NO_OWNER = -1


@dataclass
class ScoreBreakdown:
    """A player's end-of-game score by source.

    Attributes:
        points: Points scored during play.
        markers: Bonus for collected markers.
        upgrades: Bonus for maxed upgrade tracks.
        network: Largest network times the keys multiplier.
        barrels: Value of owned Coellen barrels.
        cities: Bonus for owned cities.
    """

    points: int = 0
    markers: int = 0
    upgrades: int = 0
    network: int = 0
    barrels: int = 0
    cities: int = 0

    @property
    def total(self) -> int:
        return self.points + self.markers + self.upgrades + self.network + self.barrels + self.cities


# =============================================================================
# Cities
# =============================================================================


def city_owner(state: GameState, city: CityName) -> int:
    """Return the player who controls a city, or -1 if nobody does.

    Offices are counted in order, extras first. A player takes the lead
    when their count reaches the current leader's, so among tied players
    the one who reached the count last holds the city.
    """
    counts = [0] * len(state.players)
    owner = NO_OWNER
    for token in state.cities[city].all_tokens():
        counts[token.owner] += 1
        if token.owner != owner and (owner == NO_OWNER or counts[token.owner] >= counts[owner]):
            owner = token.owner
    return owner


def owned_cities(state: GameState, player: int) -> list[CityName]:
    return [name for name in state.board.cities if city_owner(state, name) == player]


def full_city_count(state: GameState) -> int:
    """Count cities whose regular offices are all occupied."""
    return sum(1 for name in state.board.cities if state.is_city_full(name))


# =============================================================================
# Networks
# =============================================================================


def player_network(state: GameState, player: int) -> nx.Graph:
    """Build the city graph induced by the cities a player has offices in.

    Each node carries an `offices` attribute with the player's office count
    in that city, extras included.
    """
    graph = state.board.city_graph()
    counts = {
        name: city.office_count(player)
        for name, city in state.cities.items()
    }
    network = graph.subgraph(name for name, count in counts.items() if count > 0).copy()
    nx.set_node_attributes(network, {name: counts[name] for name in network.nodes}, "offices")
    return network


def largest_network(state: GameState, player: int) -> int:
    """Return the office count of the player's largest connected network.

    Each connected component is summed once, so branching and cyclic
    networks are not double counted.
    """
    network = player_network(state, player)
    best = 0
    for component in nx.connected_components(network):
        best = max(best, sum(network.nodes[name]["offices"] for name in component))
    return best


def are_cities_linked(state: GameState, from_city: CityName, to_city: CityName, player: int) -> bool:
    """Check if two cities are joined through cities the player has offices in."""
    network = player_network(state, player)
    if from_city not in network or to_city not in network:
        return False
    return nx.has_path(network, from_city, to_city)


# =============================================================================
# Displacement
# =============================================================================


def _vacant_posts(state: GameState, route_indices: list[RouteIndex]) -> int:
    return sum(state.routes[i].vacant_count() for i in route_indices)


def valid_displaced_token_routes(state: GameState, origin: RouteIndex) -> list[RouteIndex]:
    """Return the routes a displaced token may be placed on.

    Starting from the route the token was evicted from, expand across
    routes sharing an endpoint until the frontier holds a vacant post. The
    frontier is returned; an empty list means no vacant post is reachable.
    """
    traversed = [origin]
    frontier = state.board.neighboring_routes(traversed)
    while frontier and _vacant_posts(state, frontier) == 0:
        traversed.extend(frontier)
        frontier = state.board.neighboring_routes(traversed)
    return frontier


# =============================================================================
# Score
# =============================================================================


def marker_bonus(markers_held: int) -> int:
    """Points for the number of bonus markers a player has collected."""
    bonus = 0
    for threshold, points in MARKER_BONUS_TIERS:
        if markers_held >= threshold:
            bonus = points
    return bonus


def score_breakdown(state: GameState, player: int) -> ScoreBreakdown:
    """Compute a player's score by source."""
    p = state.get_player(player)
    return ScoreBreakdown(
        points=p.points,
        markers=marker_bonus(p.markers_held()),
        upgrades=MAXED_UPGRADE_POINTS * sum(1 for u in SCORED_UPGRADES if p.is_maxed(u)),
        network=largest_network(state, player) * p.keys_multiplier(),
        barrels=sum(
            value for value, owner in zip(COELLEN_BARRELS, state.coellen) if owner == player
        ),
        cities=OWNED_CITY_POINTS * len(owned_cities(state, player)),
    )


def total_points(state: GameState, player: int) -> int:
    """Compute a player's aggregate score for display."""
    return score_breakdown(state, player).total
