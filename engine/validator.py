"""Action validation for the Hansa rules engine.

Every action is checked before it may mutate the state. Each precondition
is a small predicate returning a rejection message or None; the predicates
are composed per action kind and the first message wins.

Turn order is not checked here: the engine rejects actions from anyone but
the active player before the validator runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, TYPE_CHECKING, Union

from core.board import PostAddress
from core.constants import (
    COELLEN_BARRELS,
    DISPLACE_PRICE_MERCHANT,
    DISPLACE_PRICE_TRADESMAN,
    ActionName,
    BonusMarkerKind,
    Phase,
)
from core.errors import ActionParamsError
from core.params import (
    ActionParams,
    BarrelParams,
    CityParams,
    MarkerParams,
    NoParams,
    PlaceParams,
    PostParams,
    RouteParams,
    SwapParams,
    UpgradeParams,
    parse_action_name,
    parse_params,
)

from .phase_machine import (
    can_end_turn,
    can_place_bonus_marker,
    displacement_origin,
    is_move_3,
    owns_regular_office,
    remaining_actions,
    valid_extra_office_locations,
)
from .scoring import valid_displaced_token_routes

if TYPE_CHECKING:
    from core.game_state import GameState


@dataclass
class ValidationResult:
    """Result of validating an action.

    Attributes:
        valid: Whether the action is permitted.
        reason: Description of why the action is rejected (if it is).
    """

    valid: bool
    reason: Optional[str] = None


# =============================================================================
# Predicates
# =============================================================================


def game_is_over(s: GameState) -> Optional[str]:
    return "The game is over" if s.is_over else None


def phase_is_not(s: GameState, phases: tuple[Phase, ...]) -> Optional[str]:
    return None if s.context.phase in phases else "You can't perform that action now"


def no_actions_remaining(s: GameState) -> Optional[str]:
    return "No actions remaining" if remaining_actions(s) == 0 else None


def insufficient_ready_tokens(s: GameState, amount: int, merch: Optional[bool] = None) -> Optional[str]:
    if s.current_player().personal_supply.count(merch) >= amount:
        return None
    if merch is None:
        return "Not enough tokens"
    return f"Not enough {'merchants' if merch else 'tradesmen'}"


def general_stock_empty(s: GameState) -> Optional[str]:
    return "General Stock is Empty" if s.current_player().general_stock.total() < 1 else None


def no_more_tokens(s: GameState) -> Optional[str]:
    player = s.current_player()
    if s.context.hand or player.general_stock.total() + player.personal_supply.total() > 0:
        return None
    return "You have no more tokens"


def invalid_post(s: GameState, post: PostAddress) -> Optional[str]:
    return None if s.board.has_post(post) else "Invalid trading post"


def trading_post_taken(s: GameState, post: PostAddress) -> Optional[str]:
    return "Trading Post is Taken" if s.get_post(post) is not None else None


def trading_post_empty(s: GameState, post: PostAddress) -> Optional[str]:
    return "Trading Post is Empty" if s.get_post(post) is None else None


def trading_post_own(s: GameState, post: PostAddress) -> Optional[str]:
    token = s.get_post(post)
    return "Trading Post is Yours" if token is not None and token.owner == s.context.player else None


def trading_post_not_own(s: GameState, post: PostAddress) -> Optional[str]:
    token = s.get_post(post)
    return "Trading Post is not Yours" if token is not None and token.owner != s.context.player else None


def invalid_displace_route(s: GameState, post: PostAddress) -> Optional[str]:
    origin = displacement_origin(s.context)
    if origin is None or post[0] not in valid_displaced_token_routes(s, origin):
        return "You can't move a displaced token there"
    return None


def no_displaced_token_destination(s: GameState, post: PostAddress) -> Optional[str]:
    if valid_displaced_token_routes(s, post[0]):
        return None
    return "There is nowhere to move the displaced token"


def hand_empty(s: GameState) -> Optional[str]:
    return "You have no tokens in hand" if not s.context.hand else None


def invalid_route(s: GameState, route: int) -> Optional[str]:
    return None if 0 <= route < len(s.routes) else "Invalid route"


def route_is_not_complete(s: GameState, route: int) -> Optional[str]:
    return None if s.routes[route].is_complete_for(s.context.player) else "The route is not complete"


def invalid_city(s: GameState, city: str) -> Optional[str]:
    return None if city in s.board.cities else f"Unknown city {city!r}"


def city_is_full(s: GameState, city: str) -> Optional[str]:
    return "City is full" if s.is_city_full(city) else None


def insufficient_privilege_for_city(s: GameState, city: str) -> Optional[str]:
    office = s.board.cities[city].offices[len(s.cities[city].tokens)]
    if office.privilege > s.current_player().privilege:
        return "Insufficient privilege to claim this city"
    return None


def no_merchant_token(s: GameState, city: str) -> Optional[str]:
    office = s.board.cities[city].offices[len(s.cities[city].tokens)]
    if office.merch and not any(token.merch for token in s.context.hand):
        return "A merchant is required to claim that office"
    return None


def reward_not_offered(s: GameState, name: ActionName, params: ActionParams) -> Optional[str]:
    for reward in s.context.rewards or []:
        if reward.action.name == name and reward.action.params == params:
            return None
    return "That reward is not available"


def invalid_barrel(s: GameState, barrel: int) -> Optional[str]:
    if not 0 <= barrel < len(COELLEN_BARRELS):
        return "Invalid barrel"
    if s.coellen[barrel] is not None:
        return "That barrel is taken"
    if s.current_player().privilege < barrel + 1:
        return "Insufficient privilege for that barrel"
    if not any(token.merch for token in s.context.hand):
        return "A merchant is required to score a barrel"
    return None


def upgrade_maxed(s: GameState, params: UpgradeParams) -> Optional[str]:
    if s.current_player().can_upgrade(params.upgrade):
        return None
    return f"Your {params.upgrade.value} is already at its maximum"


def no_unplaced_markers(s: GameState) -> Optional[str]:
    return "You have no markers to place" if not s.current_player().unplaced_markers else None


def invalid_marker_route(s: GameState, route: int) -> Optional[str]:
    return None if can_place_bonus_marker(s, route) else "A marker can't be placed there"


def marker_not_ready(s: GameState, kind: BonusMarkerKind) -> Optional[str]:
    if kind in s.current_player().ready_markers:
        return None
    return f"You don't have a ready {kind.value!r} marker"


def marker_has_no_effect(s: GameState, kind: BonusMarkerKind) -> Optional[str]:
    player = s.current_player()
    if kind == BonusMarkerKind.UPGRADE and not player.available_upgrades():
        return "You have nothing left to upgrade"
    if kind == BonusMarkerKind.OFFICE and not valid_extra_office_locations(s):
        return "There is no city for an extra office"
    if kind == BonusMarkerKind.OFFICE and player.general_stock.total() + player.personal_supply.total() == 0:
        return "You have no more tokens"
    if kind == BonusMarkerKind.SWAP and not owns_regular_office(s, s.context.player):
        return "You have no office to swap"
    if kind == BonusMarkerKind.MOVE_3 and all(route.is_empty() for route in s.routes):
        return "There are no tokens to move"
    return None


def invalid_swap(s: GameState, params: SwapParams) -> Optional[str]:
    tokens = s.cities[params.city].tokens
    if not 0 <= params.office < len(tokens):
        return "Invalid office"
    if tokens[params.office].owner != s.context.player:
        return "That office is not yours"
    return None


def cannot_end_turn(s: GameState) -> Optional[str]:
    return None if can_end_turn(s) else "You can't end your turn now"


def _first(*checks: Callable[[], Optional[str]]) -> Optional[str]:
    """Run checks lazily and return the first rejection message."""
    for check in checks:
        reason = check()
        if reason is not None:
            return reason
    return None


# =============================================================================
# Per-action validators
# =============================================================================


def _validate_income(s: GameState, params: NoParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ACTIONS,)),
        lambda: no_actions_remaining(s),
        lambda: general_stock_empty(s),
    )


def _validate_place(s: GameState, params: PlaceParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ACTIONS,)),
        lambda: no_actions_remaining(s),
        lambda: invalid_post(s, params.post),
        lambda: insufficient_ready_tokens(s, 1, params.merch),
        lambda: trading_post_taken(s, params.post),
    )


def _displace_price(s: GameState, post: PostAddress) -> int:
    token = s.get_post(post)
    return DISPLACE_PRICE_MERCHANT if token is not None and token.merch else DISPLACE_PRICE_TRADESMAN


def _validate_displace(s: GameState, params: PlaceParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ACTIONS,)),
        lambda: no_actions_remaining(s),
        lambda: invalid_post(s, params.post),
        lambda: trading_post_empty(s, params.post),
        lambda: trading_post_own(s, params.post),
        lambda: insufficient_ready_tokens(s, 1, params.merch),
        lambda: insufficient_ready_tokens(s, 1 + _displace_price(s, params.post)),
        lambda: no_displaced_token_destination(s, params.post),
    )


def _validate_displace_place(s: GameState, params: PostParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.DISPLACEMENT,)),
        lambda: no_actions_remaining(s),
        lambda: invalid_post(s, params.post),
        lambda: invalid_displace_route(s, params.post),
        lambda: trading_post_taken(s, params.post),
        lambda: no_more_tokens(s),
    )


def _validate_move_collect(s: GameState, params: PostParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ACTIONS, Phase.COLLECTION)),
        lambda: no_actions_remaining(s),
        lambda: invalid_post(s, params.post),
        lambda: trading_post_empty(s, params.post),
        lambda: None if is_move_3(s.context) else trading_post_not_own(s, params.post),
    )


def _validate_move_place(s: GameState, params: PostParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.COLLECTION, Phase.MOVEMENT)),
        lambda: hand_empty(s),
        lambda: no_actions_remaining(s) if s.context.phase == Phase.MOVEMENT else None,
        lambda: invalid_post(s, params.post),
        lambda: trading_post_taken(s, params.post),
    )


def _validate_route(s: GameState, params: RouteParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ACTIONS,)),
        lambda: no_actions_remaining(s),
        lambda: invalid_route(s, params.route),
        lambda: route_is_not_complete(s, params.route),
    )


def _validate_route_empty(s: GameState, params: NoParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ROUTE,)),
        lambda: reward_not_offered(s, ActionName.ROUTE_EMPTY, params),
    )


def _validate_route_office(s: GameState, params: CityParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ROUTE,)),
        lambda: invalid_city(s, params.city),
        lambda: reward_not_offered(s, ActionName.ROUTE_OFFICE, params),
        lambda: city_is_full(s, params.city),
        lambda: insufficient_privilege_for_city(s, params.city),
        lambda: no_merchant_token(s, params.city),
    )


def _validate_route_barrel(s: GameState, params: BarrelParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ROUTE,)),
        lambda: reward_not_offered(s, ActionName.ROUTE_BARREL, params),
        lambda: invalid_barrel(s, params.barrel),
    )


def _validate_route_upgrade(s: GameState, params: UpgradeParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ROUTE, Phase.UPGRADE)),
        lambda: reward_not_offered(s, ActionName.ROUTE_UPGRADE, params),
        lambda: upgrade_maxed(s, params),
    )


def _validate_marker_place(s: GameState, params: RouteParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.MARKERS,)),
        lambda: no_unplaced_markers(s),
        lambda: invalid_route(s, params.route),
        lambda: invalid_marker_route(s, params.route),
    )


def _validate_marker_use(s: GameState, params: MarkerParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.ACTIONS,)),
        lambda: marker_not_ready(s, params.kind),
        lambda: marker_has_no_effect(s, params.kind),
    )


def _validate_marker_swap(s: GameState, params: SwapParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.SWAP,)),
        lambda: invalid_city(s, params.city),
        lambda: invalid_swap(s, params),
    )


def _validate_marker_office(s: GameState, params: CityParams) -> Optional[str]:
    return _first(
        lambda: phase_is_not(s, (Phase.OFFICE,)),
        lambda: invalid_city(s, params.city),
        lambda: reward_not_offered(s, ActionName.MARKER_OFFICE, params),
        lambda: no_more_tokens(s),
    )


def _validate_done(s: GameState, params: NoParams) -> Optional[str]:
    return cannot_end_turn(s)


VALIDATORS: dict[ActionName, Callable[[Any, Any], Optional[str]]] = {
    ActionName.INCOME: _validate_income,
    ActionName.DONE: _validate_done,
    ActionName.PLACE: _validate_place,
    ActionName.DISPLACE: _validate_displace,
    ActionName.DISPLACE_PLACE: _validate_displace_place,
    ActionName.MOVE_COLLECT: _validate_move_collect,
    ActionName.MOVE_PLACE: _validate_move_place,
    ActionName.ROUTE: _validate_route,
    ActionName.ROUTE_EMPTY: _validate_route_empty,
    ActionName.ROUTE_OFFICE: _validate_route_office,
    ActionName.ROUTE_BARREL: _validate_route_barrel,
    ActionName.ROUTE_UPGRADE: _validate_route_upgrade,
    ActionName.MARKER_PLACE: _validate_marker_place,
    ActionName.MARKER_USE: _validate_marker_use,
    ActionName.MARKER_SWAP: _validate_marker_swap,
    ActionName.MARKER_OFFICE: _validate_marker_office,
}


def validate_action(
    state: GameState,
    name: Union[str, ActionName],
    params: Union[ActionParams, dict[str, Any], None] = None,
) -> ValidationResult:
    """Check whether an action may be applied to the state.

    Args:
        state: The current game state; never modified.
        name: The action kind.
        params: The action payload, typed or as a dict.

    Returns:
        ValidationResult with the first rejection reason, if any.
    """
    try:
        action = parse_action_name(name)
        payload = parse_params(action, params)
    except ActionParamsError as e:
        return ValidationResult(valid=False, reason=f"Invalid parameters: {e}")

    reason = game_is_over(state) or VALIDATORS[action](state, payload)
    return ValidationResult(valid=reason is None, reason=reason)
