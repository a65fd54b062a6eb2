"""Game state for the Hansa rules engine.

GameState is the single source of truth for a game. It combines the static
board with players, city and route occupancy, the bonus marker stack, the
Coellen barrels, the game log and the active phase context, and provides
cloning, serialization, hashing and consistency checks.
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .board import BoardDefinition, CityName, PostAddress
from .components import CityState, LogEntry, RouteState, Token
from .constants import (
    COELLEN_BARRELS,
    MAX_PLAYERS,
    MIN_PLAYERS,
    STARTING_MERCHANTS,
    STARTING_TRADESMEN,
    SYSTEM_PLAYER,
    UPGRADE_CAPS,
    BonusMarkerKind,
    Phase,
    Upgrade,
)
from .context import PhaseContext
from .player import PlayerState

logger = logging.getLogger(__name__)


def _empty_barrels() -> list[Optional[int]]:
    return [None] * len(COELLEN_BARRELS)


@dataclass
class GameState:
    """The complete game state.

    Attributes:
        board: The static board definition.
        id: Game identifier.
        turn: Cumulative turn counter; the seat in turn is turn % players.
        context: The active phase context.
        players: Player states in seat order.
        cities: Per-city occupancy, keyed by city name.
        routes: Per-route occupancy, parallel to board.routes.
        markers: Bonus marker draw pile; drawn from the end.
        coellen: Owner of each Coellen barrel, or None.
        log: Append-only game log.
        is_over: True once the game has ended.
        version: Number of actions applied so far.
    """

    board: BoardDefinition
    id: str
    context: PhaseContext
    players: list[PlayerState]
    cities: dict[CityName, CityState]
    routes: list[RouteState]
    turn: int = 0
    markers: list[BonusMarkerKind] = field(default_factory=list)
    coellen: list[Optional[int]] = field(default_factory=_empty_barrels)
    log: list[LogEntry] = field(default_factory=list)
    is_over: bool = False
    version: int = 0

    @classmethod
    def create_initial_state(
        cls,
        board: BoardDefinition,
        players: list[PlayerState],
        game_id: str,
    ) -> GameState:
        """Create a game state with an empty board.

        Args:
            board: The board definition.
            players: Player states in seat order (3-5).
            game_id: Game identifier.

        Returns:
            A new GameState with player 0 to act.

        Raises:
            ValueError: If the number of players is out of range.
        """
        if not MIN_PLAYERS <= len(players) <= MAX_PLAYERS:
            raise ValueError(
                f"Number of players must be between {MIN_PLAYERS} and {MAX_PLAYERS}, "
                f"got {len(players)}"
            )

        return cls(
            board=board,
            id=game_id,
            context=PhaseContext(phase=Phase.ACTIONS, player=0),
            players=players,
            cities={name: CityState() for name in board.cities},
            routes=[RouteState.empty(route.posts) for route in board.routes],
        )

    # -------------------------------------------------------------------------
    # Player access
    # -------------------------------------------------------------------------

    def get_player(self, player_idx: int) -> PlayerState:
        """Get a player by seat index.

        Raises:
            ValueError: If the index is invalid.
        """
        if not 0 <= player_idx < len(self.players):
            raise ValueError(f"Invalid player index: {player_idx}")
        return self.players[player_idx]

    def current_player(self) -> PlayerState:
        """Get the player the active context is waiting on."""
        return self.players[self.context.player]

    def num_players(self) -> int:
        return len(self.players)

    def seat_in_turn(self) -> int:
        """Seat whose physical turn it is."""
        return self.turn % len(self.players)

    def next_turn_context(self) -> PhaseContext:
        """Advance the turn counter and return a fresh Actions context."""
        self.turn += 1
        seat = self.seat_in_turn()
        self.add_log(f"It's {self.players[seat].name}'s turn", seat)
        logger.info("Game %s: turn %d, seat %d", self.id, self.turn, seat)
        return PhaseContext(phase=Phase.ACTIONS, player=seat)

    # -------------------------------------------------------------------------
    # Board access
    # -------------------------------------------------------------------------

    def get_post(self, post: PostAddress) -> Optional[Token]:
        """Get the token on a trading post, or None if vacant."""
        return self.routes[post[0]].tokens[post[1]]

    def route_name(self, route_index: int) -> str:
        route = self.board.routes[route_index]
        return f"{route.from_city} - {route.to_city}"

    def is_city_full(self, city: CityName) -> bool:
        """Check if all regular offices of a city are occupied."""
        return len(self.cities[city].tokens) >= len(self.board.cities[city].offices)

    def add_log(self, message: str, player: int = SYSTEM_PLAYER) -> None:
        """Append an entry to the game log."""
        self.log.append(LogEntry(player=player, message=message))
        logger.debug("Game %s: %s", self.id, message)

    # -------------------------------------------------------------------------
    # Token accounting
    # -------------------------------------------------------------------------

    def token_ledger(self, player_idx: int) -> tuple[int, int]:
        """Count (merchants, tradesmen) a player owns across all locations.

        Locations are the general stock, the personal supply, route posts,
        city offices and extras, Coellen barrels and every hand on the
        context stack.
        """
        player = self.get_player(player_idx)
        merchants = player.general_stock.m + player.personal_supply.m
        tradesmen = player.general_stock.t + player.personal_supply.t

        placed: list[Token] = []
        for route in self.routes:
            placed.extend(t for t in route.tokens if t is not None)
        for city in self.cities.values():
            placed.extend(city.all_tokens())
        for context in self.context.chain():
            placed.extend(context.hand)

        for token in placed:
            if token.owner == player_idx:
                if token.merch:
                    merchants += 1
                else:
                    tradesmen += 1

        merchants += sum(1 for owner in self.coellen if owner == player_idx)
        return merchants, tradesmen

    def expected_ledger(self, player_idx: int) -> tuple[int, int]:
        """Return the (merchants, tradesmen) a player must own.

        The starting allotment plus the tokens uncovered on upgrade tracks.
        """
        released_m, released_t = self.get_player(player_idx).released_tokens()
        return STARTING_MERCHANTS + released_m, STARTING_TRADESMEN + released_t

    # -------------------------------------------------------------------------
    # Cloning and serialization
    # -------------------------------------------------------------------------

    def clone(self) -> GameState:
        """Create a deep copy of the game state.

        Used for turn snapshots and hypothetical exploration.
        """
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the game state to a self-contained dictionary."""
        return {
            "id": self.id,
            "turn": self.turn,
            "version": self.version,
            "context": self.context.to_dict(),
            "players": [p.to_dict() for p in self.players],
            "cities": {name: c.to_dict() for name, c in self.cities.items()},
            "routes": [r.to_dict() for r in self.routes],
            "markers": [m.value for m in self.markers],
            "coellen": list(self.coellen),
            "log": [entry.to_dict() for entry in self.log],
            "is_over": self.is_over,
            "board": self.board.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameState:
        """Rebuild a game state from to_dict() output.

        Raises:
            BoardLoadError: If the embedded board is invalid.
        """
        # Imported here to keep core free of a load-time dependency on data
        from data.loader import BoardLoader

        board = BoardLoader(strict=False).load_from_dict(data["board"])
        return cls(
            board=board,
            id=data["id"],
            turn=data["turn"],
            version=data.get("version", 0),
            context=PhaseContext.from_dict(data["context"]),
            players=[PlayerState.from_dict(p) for p in data["players"]],
            cities={name: CityState.from_dict(c) for name, c in data["cities"].items()},
            routes=[RouteState.from_dict(r) for r in data["routes"]],
            markers=[BonusMarkerKind(m) for m in data["markers"]],
            coellen=list(data["coellen"]),
            log=[LogEntry.from_dict(entry) for entry in data["log"]],
            is_over=data["is_over"],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, text: str) -> GameState:
        return cls.from_dict(json.loads(text))

    def state_hash(self) -> str:
        """Compute a sha256 hash of the canonical serialized state."""
        return hashlib.sha256(self.to_json().encode()).hexdigest()

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> list[str]:
        """Validate the game state for consistency.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors: list[str] = []

        if not MIN_PLAYERS <= len(self.players) <= MAX_PLAYERS:
            errors.append(
                f"Invalid player count: {len(self.players)} "
                f"(must be {MIN_PLAYERS}-{MAX_PLAYERS})"
            )

        for context in self.context.chain():
            if not 0 <= context.player < len(self.players):
                errors.append(f"Context {context.phase.value} has invalid player {context.player}")

        if len(self.routes) != len(self.board.routes):
            errors.append(
                f"Route state count {len(self.routes)} does not match board ({len(self.board.routes)})"
            )
        for i, (route, state) in enumerate(zip(self.board.routes, self.routes)):
            if len(state.tokens) != route.posts:
                errors.append(f"Route {i} has {len(state.tokens)} posts, expected {route.posts}")

        for name, city in self.board.cities.items():
            state = self.cities.get(name)
            if state is None:
                errors.append(f"Missing state for city {name}")
            elif len(state.tokens) > len(city.offices):
                errors.append(f"City {name} has more tokens than offices")

        for i, player in enumerate(self.players):
            for upgrade in Upgrade:
                tier = player.get_tier(upgrade)
                if not 1 <= tier <= UPGRADE_CAPS[upgrade]:
                    errors.append(f"Player {i} has invalid {upgrade.value} tier {tier}")
            if min(player.general_stock.m, player.general_stock.t,
                   player.personal_supply.m, player.personal_supply.t) < 0:
                errors.append(f"Player {i} has a negative token count")
            if self.token_ledger(i) != self.expected_ledger(i):
                errors.append(
                    f"Player {i} owns {self.token_ledger(i)} tokens (merchants, tradesmen), "
                    f"expected {self.expected_ledger(i)}"
                )

        return errors

    # -------------------------------------------------------------------------
    # String representation
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        """Return a human-readable string representation."""
        lines = [
            f"GameState(id={self.id}, turn={self.turn}, over={self.is_over})",
            f"  Context: {self.context.phase.value} for player {self.context.player} "
            f"(depth {self.context.depth()})",
            f"  Markers in stack: {len(self.markers)}",
            f"  Players ({len(self.players)}):",
        ]
        for i, p in enumerate(self.players):
            lines.append(
                f"    P{i} {p.name} ({p.color.value}): points={p.points}, "
                f"stock={p.general_stock.m}m/{p.general_stock.t}t, "
                f"supply={p.personal_supply.m}m/{p.personal_supply.t}t"
            )
        return "\n".join(lines)
