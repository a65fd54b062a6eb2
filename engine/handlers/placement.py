"""Placement handlers: placing, displacing and re-placing displaced tokens.

Displacement rules:
- Evicting a tradesman costs 1 token, a merchant 2
- The price comes from the personal supply, tradesmen first; any shortfall
  is paid in merchants, each paid token returns to the general stock
- Control passes to the evicted player, who holds the evicted token and
  places it plus 1 (tradesman evicted) or 2 (merchant evicted) more tokens
  near the route it came from
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from core.components import Stock, Token
from core.config import EngineConfig
from core.constants import DISPLACE_PRICE_MERCHANT, DISPLACE_PRICE_TRADESMAN, Phase
from core.context import PhaseContext
from core.params import PlaceParams, PostParams

from .common import take_priority_token

if TYPE_CHECKING:
    from core.game_state import GameState

logger = logging.getLogger(__name__)


def displacement_price(token: Token) -> int:
    return DISPLACE_PRICE_MERCHANT if token.merch else DISPLACE_PRICE_TRADESMAN


def pay_displacement_price(supply: Stock, stock: Stock, price: int) -> None:
    """Pay a displacement price from a personal supply into a general stock.

    Tradesmen pay first. When they do not cover the price the remainder is
    paid in merchants.
    """
    if price > supply.t:
        shortfall = price - supply.t
        supply.take(True, shortfall)
        stock.add(True, shortfall)
        stock.add(False, supply.t)
        supply.t = 0
    else:
        supply.take(False, price)
        stock.add(False, price)


def handle_place(state: GameState, params: PlaceParams, config: EngineConfig) -> PhaseContext:
    """Put a token from the personal supply on a vacant post."""
    player = state.current_player()
    route_index, post_index = params.post

    player.personal_supply.take(params.merch)
    token = Token(owner=state.context.player, merch=params.merch)
    state.routes[route_index].place(post_index, token)

    state.add_log(
        f"{player.name} places a {token.kind} at {state.route_name(route_index)}",
        state.context.player,
    )
    return state.context


def handle_displace(state: GameState, params: PlaceParams, config: EngineConfig) -> PhaseContext:
    """Evict an opponent's token and hand control to its owner."""
    player = state.current_player()
    route_index, post_index = params.post
    route = state.routes[route_index]

    evicted = route.remove(post_index)
    player.personal_supply.take(params.merch)
    route.place(post_index, Token(owner=state.context.player, merch=params.merch))
    pay_displacement_price(player.personal_supply, player.general_stock, displacement_price(evicted))

    victim = state.get_player(evicted.owner)
    state.add_log(
        f"{player.name} displaces {victim.name}'s {evicted.kind} with a "
        f"{'merchant' if params.merch else 'tradesman'} at {state.route_name(route_index)}",
        state.context.player,
    )
    logger.debug("Game %s: control passes to seat %d after displacement", state.id, evicted.owner)

    return state.context.push(
        Phase.DISPLACEMENT,
        player=evicted.owner,
        hand=[evicted],
        displaced_merchant=evicted.merch,
    )


def handle_displace_place(state: GameState, params: PostParams, config: EngineConfig) -> PhaseContext:
    """Place the next displaced token.

    The evicted token goes first; after it the player sets up tokens by
    the priority of take_priority_token.
    """
    context = state.context
    player = state.current_player()
    route_index, post_index = params.post

    if context.hand:
        held = context.take_from_hand()
        token = Token(owner=context.player, merch=held.merch)
    else:
        token = take_priority_token(player, context.player)
    state.routes[route_index].place(post_index, token)

    state.add_log(
        f"{player.name} places a displaced {token.kind} at {state.route_name(route_index)}",
        context.player,
    )
    return context
