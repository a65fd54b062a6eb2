"""Board data loader for the Hansa rules engine.

Loads and validates board definitions from JSON files, converting them
into BoardDefinition instances ready for use in the game.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.board import BoardDefinition, City, Office, Route
from core.constants import (
    BOARD_VARIANTS,
    COELLEN,
    EAST_WEST_FROM,
    EAST_WEST_TO,
    MAX_PLAYERS,
    MIN_PLAYERS,
    STARTING_TAVERN_MARKERS,
    Upgrade,
)

BOARDS_DIR = Path(__file__).parent / "boards"


class BoardLoadError(Exception):
    """Raised when board loading or validation fails."""
    pass


class BoardLoader:
    """Loads and validates board data from JSON files."""

    # Cities the scoring rules refer to by name
    REQUIRED_CITIES = (COELLEN, EAST_WEST_FROM, EAST_WEST_TO)

    def __init__(self, strict: bool = True):
        """Initialize the loader.

        Args:
            strict: If True, enforce the rules a playable board needs (special
                    cities, enough taverns, a connected map). Set to False for
                    custom test boards.
        """
        self.strict = strict

    def load_from_file(self, file_path: str | Path) -> BoardDefinition:
        """Load a board from a JSON file.

        Raises:
            BoardLoadError: If the file cannot be read, parsed or validated.
        """
        path = Path(file_path)

        if not path.exists():
            raise BoardLoadError(f"Board file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise BoardLoadError(f"Invalid JSON in board file: {e}")
        except IOError as e:
            raise BoardLoadError(f"Error reading board file: {e}")

        if isinstance(data, dict):
            data.setdefault("name", path.stem)
        return self.load_from_dict(data)

    def load_from_dict(self, data: dict[str, Any]) -> BoardDefinition:
        """Load a board from a dictionary.

        Args:
            data: Dictionary containing 'cities' and 'routes' keys.

        Raises:
            BoardLoadError: If validation fails.
        """
        self._validate_structure(data)

        cities: dict[str, City] = {}
        for city_data in data["cities"]:
            city = self._create_city(city_data)
            if city.name in cities:
                raise BoardLoadError(f"Duplicate city: {city.name}")
            cities[city.name] = city

        routes: list[Route] = []
        adjacency: dict[str, set[str]] = {name: set() for name in cities}
        for i, route_data in enumerate(data["routes"]):
            route = self._create_route(i, route_data)
            for endpoint in route.endpoints:
                if endpoint not in cities:
                    raise BoardLoadError(f"Route {i} references unknown city: {endpoint}")
            if route.from_city == route.to_city:
                raise BoardLoadError(f"Route {i} connects {route.from_city} to itself")
            routes.append(route)
            adjacency[route.from_city].add(route.to_city)
            adjacency[route.to_city].add(route.from_city)

        coellen = data.get("coellen", [0, 0])
        if not isinstance(coellen, (list, tuple)) or len(coellen) != 2:
            raise BoardLoadError("'coellen' must be an [x, y] pair")

        board = BoardDefinition(
            name=data.get("name", "custom"),
            cities=cities,
            routes=tuple(routes),
            coellen_position=(coellen[0], coellen[1]),
            adjacency={name: frozenset(neighbors) for name, neighbors in adjacency.items()},
        )

        self._validate_board(board)
        return board

    def _validate_structure(self, data: dict[str, Any]) -> None:
        """Validate the basic structure of the board data."""
        if not isinstance(data, dict):
            raise BoardLoadError("Board data must be a dictionary")

        for key in ("cities", "routes"):
            if key not in data:
                raise BoardLoadError(f"Board data missing '{key}' key")
            if not isinstance(data[key], list):
                raise BoardLoadError(f"'{key}' must be a list")

        if len(data["cities"]) == 0:
            raise BoardLoadError("Board must have at least one city")

    def _create_city(self, city_data: dict[str, Any]) -> City:
        """Create a City from city data dictionary."""
        for field in ("name", "offices", "position"):
            if field not in city_data:
                raise BoardLoadError(f"City missing required field: {field}")

        name = city_data["name"]
        if not isinstance(name, str) or not name:
            raise BoardLoadError(f"Invalid city name: {name!r}")

        offices = []
        for office_data in city_data["offices"]:
            privilege = office_data.get("privilege", 1)
            if not isinstance(privilege, int) or not 1 <= privilege <= 4:
                raise BoardLoadError(f"Invalid office privilege {privilege!r} in {name}")
            offices.append(Office(
                privilege=privilege,
                merch=bool(office_data.get("merch", False)),
                point=bool(office_data.get("point", False)),
            ))
        if not offices:
            raise BoardLoadError(f"City {name} has no offices")

        position = city_data["position"]
        if not isinstance(position, (list, tuple)) or len(position) != 2:
            raise BoardLoadError(f"Invalid position format for city {name}")

        upgrade = city_data.get("upgrade")
        if upgrade is not None:
            try:
                upgrade = Upgrade(upgrade)
            except ValueError:
                raise BoardLoadError(
                    f"Invalid upgrade '{upgrade}' in city {name}. "
                    f"Valid upgrades: {[u.value for u in Upgrade]}"
                )

        return City(
            name=name,
            offices=tuple(offices),
            position=(position[0], position[1]),
            upgrade=upgrade,
            color=city_data.get("color"),
        )

    def _create_route(self, index: int, route_data: dict[str, Any]) -> Route:
        """Create a Route from route data dictionary."""
        for field in ("from", "to", "posts"):
            if field not in route_data:
                raise BoardLoadError(f"Route {index} missing required field: {field}")

        posts = route_data["posts"]
        if not isinstance(posts, int) or posts < 1:
            raise BoardLoadError(f"Route {index} has invalid post count: {posts!r}")

        return Route(
            from_city=route_data["from"],
            to_city=route_data["to"],
            posts=posts,
            tavern=bool(route_data.get("tavern", False)),
        )

    def _validate_board(self, board: BoardDefinition) -> None:
        """Validate the complete board."""
        if not self.strict:
            return

        for name in self.REQUIRED_CITIES:
            if name not in board.cities:
                raise BoardLoadError(f"Board is missing required city: {name}")

        taverns = board.tavern_routes()
        if len(taverns) < STARTING_TAVERN_MARKERS:
            raise BoardLoadError(
                f"Expected at least {STARTING_TAVERN_MARKERS} tavern routes, found {len(taverns)}"
            )

        # Check connectivity (all cities should be reachable from any city)
        if len(board.cities) > 1:
            start_city = next(iter(board.cities))
            visited: set[str] = set()
            self._dfs(board, start_city, visited)

            if len(visited) != len(board.cities):
                unreachable = set(board.cities) - visited
                raise BoardLoadError(
                    f"Board is not connected. Unreachable cities: {sorted(unreachable)}"
                )

    def _dfs(self, board: BoardDefinition, city: str, visited: set[str]) -> None:
        """Depth-first search to check connectivity."""
        visited.add(city)
        for neighbor in board.get_neighbors(city):
            if neighbor not in visited:
                self._dfs(board, neighbor, visited)


def load_board(file_path: str | Path, strict: bool = True) -> BoardDefinition:
    """Convenience function to load a board from a file."""
    loader = BoardLoader(strict=strict)
    return loader.load_from_file(file_path)


def load_board_variant(name: str) -> BoardDefinition:
    """Load one of the bundled boards by name.

    Raises:
        BoardLoadError: If the board file is missing or invalid.
    """
    return load_board(BOARDS_DIR / f"{name}.json", strict=True)


def load_board_for_players(num_players: int) -> BoardDefinition:
    """Load the bundled board used for a seat count.

    Raises:
        ValueError: If the seat count is out of range.
    """
    if num_players not in BOARD_VARIANTS:
        raise ValueError(
            f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
            f"got {num_players}"
        )
    return load_board_variant(BOARD_VARIANTS[num_players])


def get_board_stats(board: BoardDefinition) -> dict[str, Any]:
    """Get statistics about a board."""
    return {
        "name": board.name,
        "num_cities": len(board.cities),
        "num_routes": len(board.routes),
        "num_posts": sum(route.posts for route in board.routes),
        "num_offices": sum(len(city.offices) for city in board.cities.values()),
        "num_taverns": len(board.tavern_routes()),
        "upgrade_cities": {
            city.name: city.upgrade.value
            for city in board.cities.values()
            if city.upgrade is not None
        },
    }
