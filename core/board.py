"""Board definition for the Hansa rules engine.

The board is a static attributed graph:
- Cities are nodes carrying an ordered row of office slots
- Routes are edges carrying a number of trading posts
- Topology is immutable; dynamic occupancy lives in GameState
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

import networkx as nx

from .constants import Upgrade


# Type aliases for clarity
CityName = str
RouteIndex = int
PostAddress = tuple[int, int]  # (route index, post index)


@dataclass(frozen=True)
class Office:
    """A single office slot in a city.

    Attributes:
        privilege: Privilege tier (1-4) required to claim the slot.
        merch: True if only a merchant may claim the slot.
        point: True if claiming the slot scores a point immediately.
    """

    privilege: int = 1
    merch: bool = False
    point: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"privilege": self.privilege, "merch": self.merch, "point": self.point}


@dataclass(frozen=True)
class City:
    """A city on the board.

    Attributes:
        name: Unique city name.
        offices: Office slots, claimed strictly left to right.
        position: (x, y) coordinates for display collaborators.
        upgrade: Upgrade granted by completing a route here, if any.
        color: Optional color tag.
    """

    name: CityName
    offices: tuple[Office, ...] = ()
    position: tuple[float, float] = (0.0, 0.0)
    upgrade: Optional[Upgrade] = None
    color: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "offices": [office.to_dict() for office in self.offices],
            "position": list(self.position),
            "upgrade": self.upgrade.value if self.upgrade else None,
            "color": self.color,
        }


@dataclass(frozen=True)
class Route:
    """A trade route between two cities.

    Attributes:
        from_city: First endpoint.
        to_city: Second endpoint.
        posts: Number of trading posts on the route.
        tavern: True if a starting bonus marker may be dealt here.
    """

    from_city: CityName
    to_city: CityName
    posts: int
    tavern: bool = False

    @property
    def endpoints(self) -> tuple[CityName, CityName]:
        """Return both endpoint city names."""
        return (self.from_city, self.to_city)

    def touches(self, city: CityName) -> bool:
        """Check if the route ends at the given city."""
        return city in self.endpoints

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_city,
            "to": self.to_city,
            "posts": self.posts,
            "tavern": self.tavern,
        }


@dataclass(frozen=True)
class BoardDefinition:
    """The static board: cities, routes and the Coellen barrel track.

    Loaded once and never mutated by the engine.

    Attributes:
        name: Board variant name.
        cities: Mapping from city name to City, in definition order.
        routes: Routes in definition order; route state is parallel to this.
        coellen_position: (x, y) of the Coellen barrel track.
        adjacency: Mapping from city name to the names of neighboring cities.
    """

    name: str
    cities: dict[CityName, City] = field(default_factory=dict)
    routes: tuple[Route, ...] = ()
    coellen_position: tuple[float, float] = (0.0, 0.0)
    adjacency: dict[CityName, frozenset[CityName]] = field(default_factory=dict)

    def get_city(self, name: CityName) -> City:
        """Get a city definition.

        Raises:
            KeyError: If the city does not exist.
        """
        return self.cities[name]

    def has_post(self, post: PostAddress) -> bool:
        """Check if a post address exists on this board."""
        route_index, post_index = post
        return 0 <= route_index < len(self.routes) and 0 <= post_index < self.routes[route_index].posts

    def get_neighbors(self, city: CityName) -> frozenset[CityName]:
        """Get all cities connected to a city by a route."""
        return self.adjacency.get(city, frozenset())

    def routes_at(self, city: CityName) -> list[RouteIndex]:
        """Return indices of all routes ending at a city."""
        return [i for i, route in enumerate(self.routes) if route.touches(city)]

    def neighboring_routes(self, route_indices: Iterable[RouteIndex]) -> list[RouteIndex]:
        """Return routes sharing an endpoint with any of the given routes.

        The given routes themselves are excluded.
        """
        indices = set(route_indices)
        cities = {city for i in indices for city in self.routes[i].endpoints}
        return [
            i for i, route in enumerate(self.routes)
            if i not in indices and (route.from_city in cities or route.to_city in cities)
        ]

    def tavern_routes(self) -> list[RouteIndex]:
        """Return indices of tavern routes."""
        return [i for i, route in enumerate(self.routes) if route.tavern]

    def city_graph(self) -> nx.Graph:
        """Build the city adjacency graph."""
        graph = nx.Graph()
        graph.add_nodes_from(self.cities)
        for route in self.routes:
            graph.add_edge(route.from_city, route.to_city)
        return graph

    def to_dict(self) -> dict[str, Any]:
        """Serialize the board in the loader's JSON format."""
        return {
            "name": self.name,
            "coellen": list(self.coellen_position),
            "cities": [city.to_dict() for city in self.cities.values()],
            "routes": [route.to_dict() for route in self.routes],
        }
