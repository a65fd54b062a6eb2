"""Tests for the phase context rules.

Tests cover:
1. Context transitions (valid and invalid)
2. Action budgets per phase
3. Marker and extra office locations
4. Whether the turn may end
"""

import pytest

from core.components import Token
from core.constants import ActionName, BonusMarkerKind, Phase
from core.context import ActionRecord, PhaseContext
from core.game_state import GameState
from core.params import MarkerParams, PlaceParams, PostParams
from engine.phase_machine import (
    PHASE_TRANSITIONS,
    TransitionKind,
    available_actions_count,
    can_end_turn,
    can_place_bonus_marker,
    classify_transition,
    displacement_origin,
    is_move_3,
    owns_regular_office,
    placeable_marker_routes,
    remaining_actions,
    valid_extra_office_locations,
)


# =============================================================================
# Transition Tests
# =============================================================================


class TestClassifyTransition:
    """Test how handler results relate to the active context."""

    @pytest.fixture
    def root(self) -> PhaseContext:
        return PhaseContext(phase=Phase.ACTIONS, player=0)

    def test_stay(self, root: PhaseContext):
        result = classify_transition(root, root)
        assert result.success
        assert result.kind == TransitionKind.STAY

    @pytest.mark.parametrize("phase", PHASE_TRANSITIONS[Phase.ACTIONS])
    def test_push_from_actions(self, root: PhaseContext, phase: Phase):
        result = classify_transition(root, root.push(phase))
        assert result.success
        assert result.kind == TransitionKind.PUSH
        assert result.new_phase == phase

    def test_movement_cannot_be_pushed(self, root: PhaseContext):
        """Movement only ever replaces a Collection context."""
        result = classify_transition(root, root.push(Phase.MOVEMENT))
        assert not result.success
        assert "Cannot push" in result.reason

    def test_no_nested_pushes(self, root: PhaseContext):
        route = root.push(Phase.ROUTE)
        result = classify_transition(route, route.push(Phase.UPGRADE))
        assert not result.success

    def test_pop(self, root: PhaseContext):
        child = root.push(Phase.DISPLACEMENT, player=1)
        result = classify_transition(child, root)
        assert result.success
        assert result.kind == TransitionKind.POP
        assert result.new_phase == Phase.ACTIONS

    def test_collection_replaced_by_movement(self, root: PhaseContext):
        collection = root.push(Phase.COLLECTION)
        result = classify_transition(collection, root.push(Phase.MOVEMENT))
        assert result.success
        assert result.kind == TransitionKind.REPLACE

    def test_other_replacements_rejected(self, root: PhaseContext):
        route = root.push(Phase.ROUTE)
        result = classify_transition(route, root.push(Phase.MARKERS))
        assert not result.success
        assert "Cannot replace" in result.reason

    def test_new_turn(self, root: PhaseContext):
        result = classify_transition(root, PhaseContext(phase=Phase.ACTIONS, player=1))
        assert result.success
        assert result.kind == TransitionKind.NEW_TURN

    def test_unrelated_context_rejected(self, root: PhaseContext):
        other = PhaseContext(phase=Phase.ACTIONS, player=1).push(Phase.ROUTE)
        result = classify_transition(root, other)
        assert not result.success
        assert "Unrelated" in result.reason


# =============================================================================
# Context Query Tests
# =============================================================================


class TestContextQueries:
    """Test what a context says about how it was opened."""

    def test_is_move_3(self):
        root = PhaseContext(phase=Phase.ACTIONS, player=0, actions=[
            ActionRecord(ActionName.MARKER_USE, MarkerParams(BonusMarkerKind.MOVE_3)),
        ])
        assert is_move_3(root.push(Phase.COLLECTION))

    def test_regular_collection_is_not_move_3(self):
        root = PhaseContext(phase=Phase.ACTIONS, player=0, actions=[
            ActionRecord(ActionName.MOVE_COLLECT, PostParams(post=(0, 0))),
        ])
        assert not is_move_3(root.push(Phase.COLLECTION))
        assert not is_move_3(root)

    def test_displacement_origin(self):
        root = PhaseContext(phase=Phase.ACTIONS, player=0, actions=[
            ActionRecord(ActionName.DISPLACE, PlaceParams(post=(3, 1))),
        ])
        assert displacement_origin(root.push(Phase.DISPLACEMENT, player=1)) == 3
        assert displacement_origin(root) is None


# =============================================================================
# Action Budget Tests
# =============================================================================


class TestActionBudget:
    """Test available_actions_count for each phase."""

    def test_actions_by_tier(self, state: GameState):
        assert available_actions_count(state) == 2
        state.players[0].actions = 4
        assert available_actions_count(state) == 4

    def test_actions_with_markers(self, state: GameState):
        state.context.actions = [
            ActionRecord(ActionName.MARKER_USE, MarkerParams(BonusMarkerKind.THREE_ACTIONS)),
            ActionRecord(ActionName.MARKER_USE, MarkerParams(BonusMarkerKind.FOUR_ACTIONS)),
            ActionRecord(ActionName.INCOME),
        ]
        assert available_actions_count(state) == 9
        assert remaining_actions(state) == 8

    def test_displacement_budget(self, state: GameState):
        state.context = state.context.push(Phase.DISPLACEMENT, player=1, hand=[Token(owner=1)])
        assert available_actions_count(state) == 2
        state.context.displaced_merchant = True
        assert available_actions_count(state) == 3

    def test_collection_budget(self, state: GameState):
        state.context = state.context.push(Phase.COLLECTION)
        assert available_actions_count(state) == 2
        state.players[0].book = 3
        assert available_actions_count(state) == 4

    def test_move_3_budget(self, state: GameState):
        state.players[0].book = 4
        state.context.actions.append(
            ActionRecord(ActionName.MARKER_USE, MarkerParams(BonusMarkerKind.MOVE_3))
        )
        state.context = state.context.push(Phase.COLLECTION)
        assert available_actions_count(state) == 3

    def test_movement_budget(self, state: GameState):
        state.context = state.context.push(
            Phase.MOVEMENT,
            hand=[Token(owner=0), Token(owner=0)],
            actions=[ActionRecord(ActionName.MOVE_PLACE, PostParams(post=(0, 0)))],
        )
        assert available_actions_count(state) == 3
        assert remaining_actions(state) == 2

    def test_markers_budget(self, state: GameState):
        state.players[0].unplaced_markers = [BonusMarkerKind.SWAP]
        state.context = state.context.push(
            Phase.MARKERS,
            actions=[ActionRecord(ActionName.MARKER_PLACE)],
        )
        assert available_actions_count(state) == 2
        assert remaining_actions(state) == 1

    def test_choice_phases_have_no_budget(self, state: GameState):
        state.context = state.context.push(Phase.ROUTE)
        assert available_actions_count(state) == 0

    def test_remaining_never_negative(self, state: GameState):
        state.context.actions = [ActionRecord(ActionName.INCOME)] * 3
        assert remaining_actions(state) == 0


# =============================================================================
# Board Query Tests
# =============================================================================


class TestBoardQueries:
    """Test marker and extra office locations."""

    def test_empty_route_takes_marker(self, state: GameState):
        assert can_place_bonus_marker(state, 0)
        assert placeable_marker_routes(state) == [0, 1, 2, 3, 4]

    def test_occupied_route_refuses_marker(self, state: GameState, put):
        put(state, 0, 1, owner=1)
        state.routes[1].marker = BonusMarkerKind.SWAP
        assert not can_place_bonus_marker(state, 0)
        assert not can_place_bonus_marker(state, 1)
        assert placeable_marker_routes(state) == [2, 3, 4]

    def test_route_between_full_cities_refuses_marker(self, state: GameState, office):
        """Lubeck-Stendal needs a free office at either end."""
        office(state, "Stendal", owner=0)
        assert can_place_bonus_marker(state, 4)
        office(state, "Lubeck", owner=1)
        assert not can_place_bonus_marker(state, 4)

    def test_out_of_range_route(self, state: GameState):
        assert not can_place_bonus_marker(state, 5)
        assert not can_place_bonus_marker(state, -1)

    def test_extra_office_locations(self, state: GameState, office):
        assert valid_extra_office_locations(state) == []
        office(state, "Lubeck", owner=2)
        office(state, "Hamburg", owner=0)
        assert valid_extra_office_locations(state) == ["Hamburg", "Lubeck"]

    def test_extras_alone_do_not_qualify(self, state: GameState, office):
        office(state, "Arnheim", owner=0, extra=True)
        assert valid_extra_office_locations(state) == []
        assert not owns_regular_office(state, 0)

    def test_owns_regular_office(self, state: GameState, office):
        office(state, "Coellen", owner=1)
        assert owns_regular_office(state, 1)
        assert not owns_regular_office(state, 0)


# =============================================================================
# Turn End Tests
# =============================================================================


class TestCanEndTurn:
    """Test when "done" is allowed."""

    def test_actions_phase(self, state: GameState):
        assert can_end_turn(state)

    @pytest.mark.parametrize("phase", [
        Phase.ROUTE, Phase.SWAP, Phase.UPGRADE, Phase.OFFICE, Phase.COLLECTION, Phase.MOVEMENT,
    ])
    def test_pending_choice_blocks(self, state: GameState, phase: Phase):
        state.context = state.context.push(phase)
        assert not can_end_turn(state)

    def test_token_in_hand_blocks(self, state: GameState):
        state.context = state.context.push(Phase.DISPLACEMENT, player=1, hand=[Token(owner=1)])
        assert not can_end_turn(state)
        state.context.hand.clear()
        assert can_end_turn(state)

    def test_unplaced_markers_block(self, state: GameState):
        state.players[0].unplaced_markers = [BonusMarkerKind.OFFICE]
        state.context = state.context.push(Phase.MARKERS)
        assert not can_end_turn(state)

    def test_unplaceable_markers_do_not_block(self, state: GameState, put):
        """With no route able to take a marker, the player may give up."""
        state.players[0].unplaced_markers = [BonusMarkerKind.OFFICE]
        for route in range(5):
            put(state, route, 0, owner=route % 3)
        state.context = state.context.push(Phase.MARKERS)
        assert can_end_turn(state)
