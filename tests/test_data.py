"""Tests for the board data loading module."""

import copy
import json

import pytest

from core.board import BoardDefinition, Office
from core.constants import COELLEN, EAST_WEST_FROM, EAST_WEST_TO, Upgrade
from core.game_state import GameState
from data.loader import (
    BoardLoader,
    BoardLoadError,
    get_board_stats,
    load_board,
    load_board_for_players,
    load_board_variant,
)


# =============================================================================
# BoardLoader Tests
# =============================================================================

class TestBoardLoader:
    """Test BoardLoader class."""

    def test_load_test_board(self, board: BoardDefinition):
        """Should load cities and routes in definition order."""
        assert list(board.cities) == ["Arnheim", "Coellen", "Hamburg", "Stendal", "Lubeck"]
        assert len(board.routes) == 5
        assert board.routes[0].endpoints == ("Arnheim", "Hamburg")
        assert board.routes[0].posts == 3

    def test_office_attributes(self, board: BoardDefinition):
        hamburg = board.get_city("Hamburg")
        assert hamburg.offices == (
            Office(privilege=1),
            Office(privilege=2, merch=True),
            Office(privilege=3),
        )
        assert board.get_city("Stendal").offices[0].point

    def test_upgrade_cities(self, board: BoardDefinition):
        assert board.get_city("Stendal").upgrade == Upgrade.KEYS
        assert board.get_city("Lubeck").upgrade == Upgrade.BANK
        assert board.get_city("Hamburg").upgrade is None

    def test_adjacency_built_correctly(self, board: BoardDefinition):
        """Adjacency should be symmetric."""
        assert board.get_neighbors("Hamburg") == frozenset({"Arnheim", "Stendal", "Lubeck"})
        assert board.get_neighbors("Coellen") == frozenset({"Arnheim"})
        assert "Hamburg" in board.get_neighbors("Lubeck")

    def test_tavern_routes(self, board: BoardDefinition):
        assert board.tavern_routes() == [2, 3, 4]

    def test_routes_at(self, board: BoardDefinition):
        assert board.routes_at("Hamburg") == [0, 1, 3]
        assert board.routes_at("Coellen") == [2]

    def test_neighboring_routes(self, board: BoardDefinition):
        """Routes sharing an endpoint, excluding the given ones."""
        assert board.neighboring_routes([2]) == [0]
        assert board.neighboring_routes([1]) == [0, 3, 4]

    def test_has_post(self, board: BoardDefinition):
        assert board.has_post((0, 2))
        assert not board.has_post((0, 3))
        assert not board.has_post((5, 0))
        assert not board.has_post((-1, 0))

    def test_city_graph(self, board: BoardDefinition):
        graph = board.city_graph()
        assert graph.number_of_nodes() == 5
        assert graph.number_of_edges() == 5
        assert graph.has_edge("Lubeck", "Stendal")

    def test_round_trip(self, board: BoardDefinition):
        """to_dict output should load back into an equal board."""
        assert BoardLoader(strict=False).load_from_dict(board.to_dict()) == board


class TestBoardLoaderValidation:
    """Test board validation errors."""

    def test_missing_cities_key(self):
        with pytest.raises(BoardLoadError, match="cities"):
            BoardLoader(strict=False).load_from_dict({"routes": []})

    def test_missing_routes_key(self):
        with pytest.raises(BoardLoadError, match="routes"):
            BoardLoader(strict=False).load_from_dict({"cities": []})

    def test_empty_cities(self):
        with pytest.raises(BoardLoadError):
            BoardLoader(strict=False).load_from_dict({"cities": [], "routes": []})

    def test_duplicate_city(self, board_data):
        data = board_data
        data["cities"].append(copy.deepcopy(data["cities"][0]))
        with pytest.raises(BoardLoadError, match="Duplicate city"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_city_without_offices(self, board_data):
        data = board_data
        data["cities"][0]["offices"] = []
        with pytest.raises(BoardLoadError, match="no offices"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_invalid_privilege(self, board_data):
        data = board_data
        data["cities"][0]["offices"][0]["privilege"] = 5
        with pytest.raises(BoardLoadError, match="privilege"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_invalid_upgrade(self, board_data):
        data = board_data
        data["cities"][0]["upgrade"] = "wealth"
        with pytest.raises(BoardLoadError, match="Invalid upgrade"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_route_unknown_city(self, board_data):
        data = board_data
        data["routes"].append({"from": "Hamburg", "to": "Bremen", "posts": 2})
        with pytest.raises(BoardLoadError, match="unknown city"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_self_loop_route(self, board_data):
        data = board_data
        data["routes"].append({"from": "Hamburg", "to": "Hamburg", "posts": 2})
        with pytest.raises(BoardLoadError, match="itself"):
            BoardLoader(strict=False).load_from_dict(data)

    def test_invalid_post_count(self, board_data):
        data = board_data
        data["routes"][0]["posts"] = 0
        with pytest.raises(BoardLoadError, match="post count"):
            BoardLoader(strict=False).load_from_dict(data)


class TestBoardLoaderStrictMode:
    """Test rules only enforced for playable boards."""

    def test_test_board_is_strict_valid(self, board_data):
        board = BoardLoader(strict=True).load_from_dict(board_data)
        assert len(board.tavern_routes()) == 3

    def test_strict_mode_requires_taverns(self, board_data):
        """A playable board needs a tavern for each starting marker."""
        board_data["routes"][2]["tavern"] = False
        with pytest.raises(BoardLoadError, match="tavern"):
            BoardLoader(strict=True).load_from_dict(board_data)

    def test_strict_mode_requires_special_cities(self, board_data):
        data = board_data
        data["cities"] = [c for c in data["cities"] if c["name"] != "Coellen"]
        data["routes"] = [r for r in data["routes"] if "Coellen" not in (r["from"], r["to"])]
        with pytest.raises(BoardLoadError, match="Coellen"):
            BoardLoader(strict=True).load_from_dict(data)

    def test_strict_mode_requires_connected_map(self, board_data):
        data = board_data
        data["routes"] = [r for r in data["routes"] if r["from"] != "Coellen"]
        for route in data["routes"]:
            route["tavern"] = True
        with pytest.raises(BoardLoadError, match="not connected"):
            BoardLoader(strict=True).load_from_dict(data)


class TestBoardLoaderFile:
    """Test loading boards from files."""

    def test_load_from_file(self, tmp_path, board_data):
        path = tmp_path / "tiny.json"
        path.write_text(json.dumps({k: v for k, v in board_data.items() if k != "name"}))

        board = load_board(path, strict=False)

        assert board.name == "tiny"
        assert len(board.cities) == 5

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(BoardLoadError, match="not found"):
            load_board(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{ not json")
        with pytest.raises(BoardLoadError, match="Invalid JSON"):
            load_board(path)


# =============================================================================
# Bundled Board Tests
# =============================================================================

class TestBundledBoards:
    """Test the boards shipped with the engine."""

    def test_three_player_board(self):
        board = load_board_for_players(3)
        stats = get_board_stats(board)
        assert stats["name"] == "standard_3"
        assert stats["num_cities"] == 22
        assert stats["num_routes"] == 33
        assert stats["num_taverns"] == 5

    @pytest.mark.parametrize("num_players", [4, 5])
    def test_four_and_five_player_board(self, num_players):
        board = load_board_for_players(num_players)
        stats = get_board_stats(board)
        assert stats["name"] == "standard_45"
        assert stats["num_cities"] == 27
        assert stats["num_routes"] == 43
        assert stats["num_taverns"] == 6

    @pytest.mark.parametrize("name", ["standard_3", "standard_45"])
    def test_upgrade_cities(self, name):
        stats = get_board_stats(load_board_variant(name))
        assert stats["upgrade_cities"] == {
            "Groningen": "keys",
            "Stade": "privilege",
            "Lubeck": "bank",
            "Stendal": "actions",
            "Goettingen": "book",
        }

    @pytest.mark.parametrize("name", ["standard_3", "standard_45"])
    def test_special_cities_present(self, name):
        board = load_board_variant(name)
        for city in (COELLEN, EAST_WEST_FROM, EAST_WEST_TO):
            assert city in board.cities

    def test_coellen_offices(self):
        coellen = load_board_variant("standard_45").get_city(COELLEN)
        assert [office.privilege for office in coellen.offices] == [1, 3]

    @pytest.mark.parametrize("num_players", [2, 6])
    def test_invalid_player_count(self, num_players):
        with pytest.raises(ValueError):
            load_board_for_players(num_players)

    def test_unknown_variant(self):
        with pytest.raises(BoardLoadError, match="not found"):
            load_board_variant("standard_9")

    def test_game_state_on_bundled_board(self, state: GameState):
        """A loaded board should back a consistent initial state."""
        board = load_board_for_players(4)
        game = GameState.create_initial_state(board, state.players + [copy.deepcopy(state.players[0])], "g")
        assert len(game.routes) == 43
        assert sum(len(r.tokens) for r in game.routes) == get_board_stats(board)["num_posts"]
        assert game.validate() == []
