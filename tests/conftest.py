"""Shared fixtures for the Hansa engine tests.

The test board is small enough to reason about by hand:

    Coellen --2-- Arnheim --3-- Hamburg --2-- Stendal
                                   \\           /
                                    3         2
                                     \\       /
                                      Lubeck

Route indices: 0 Arnheim-Hamburg, 1 Hamburg-Stendal, 2 Coellen-Arnheim,
3 Hamburg-Lubeck, 4 Lubeck-Stendal. Routes 2-4 are taverns.
"""

import copy
from typing import Callable

import pytest

from core.board import BoardDefinition
from core.components import Token
from core.constants import Color
from core.game_state import GameState
from core.player import PlayerState
from data.loader import BoardLoader


TEST_BOARD = {
    "name": "test",
    "coellen": [0, 0],
    "cities": [
        {"name": "Arnheim", "position": [0, 100], "offices": [{"privilege": 1}, {"privilege": 1}]},
        {"name": "Coellen", "position": [0, 200], "offices": [{"privilege": 1}, {"privilege": 2}]},
        {
            "name": "Hamburg",
            "position": [100, 100],
            "offices": [{"privilege": 1}, {"privilege": 2, "merch": True}, {"privilege": 3}],
        },
        {
            "name": "Stendal",
            "position": [200, 100],
            "upgrade": "keys",
            "offices": [{"privilege": 1, "point": True}],
        },
        {"name": "Lubeck", "position": [150, 0], "upgrade": "bank", "offices": [{"privilege": 1}]},
    ],
    "routes": [
        {"from": "Arnheim", "to": "Hamburg", "posts": 3},
        {"from": "Hamburg", "to": "Stendal", "posts": 2},
        {"from": "Coellen", "to": "Arnheim", "posts": 2, "tavern": True},
        {"from": "Hamburg", "to": "Lubeck", "posts": 3, "tavern": True},
        {"from": "Lubeck", "to": "Stendal", "posts": 2, "tavern": True},
    ],
}


@pytest.fixture
def board_data() -> dict:
    """A fresh copy of the test board JSON."""
    return copy.deepcopy(TEST_BOARD)


@pytest.fixture
def board(board_data: dict) -> BoardDefinition:
    """The small test board."""
    return BoardLoader(strict=False).load_from_dict(board_data)


@pytest.fixture
def state(board: BoardDefinition) -> GameState:
    """A fresh three-player game on the test board, seat 0 to act."""
    players = [
        PlayerState(id="p0", name="Ann", color=Color.RED),
        PlayerState(id="p1", name="Bo", color=Color.BLUE),
        PlayerState(id="p2", name="Cy", color=Color.GREEN),
    ]
    return GameState.create_initial_state(board, players, game_id="test-game")


@pytest.fixture
def put() -> Callable[..., None]:
    """Return a helper that moves a token from a player's supply to a post.

    The token comes from the personal supply, falling back to the general
    stock, so the player's token count is unchanged.
    """

    def _put(state: GameState, route: int, post: int, owner: int, merch: bool = False) -> None:
        player = state.players[owner]
        pool = player.personal_supply if player.personal_supply.count(merch) else player.general_stock
        pool.take(merch)
        state.routes[route].place(post, Token(owner=owner, merch=merch))

    return _put


@pytest.fixture
def office() -> Callable[..., None]:
    """Return a helper that moves a token from a player's stock to a city office."""

    def _office(state: GameState, city: str, owner: int, merch: bool = False, extra: bool = False) -> None:
        player = state.players[owner]
        pool = player.general_stock if player.general_stock.count(merch) else player.personal_supply
        pool.take(merch)
        token = Token(owner=owner, merch=merch)
        if extra:
            state.cities[city].extras.insert(0, token)
        else:
            state.cities[city].tokens.append(token)

    return _office
