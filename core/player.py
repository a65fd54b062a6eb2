"""Player model for the Hansa rules engine.

Each player has two token pools (the general stock and the personal supply),
five upgrade tracks, a score and three lists of bonus markers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .components import Stock
from .constants import (
    ACTIONS_PER_TIER,
    INCOME_PER_TIER,
    INITIAL_UPGRADE_TIER,
    KEYS_MULTIPLIER,
    STARTING_GENERAL_STOCK,
    STARTING_PERSONAL_SUPPLY,
    UPGRADE_CAPS,
    BonusMarkerKind,
    Color,
    Upgrade,
)


def _starting_stock() -> Stock:
    return Stock(*STARTING_GENERAL_STOCK)


def _starting_supply() -> Stock:
    return Stock(*STARTING_PERSONAL_SUPPLY)


@dataclass
class PlayerState:
    """Represents a seat in the game.

    Attributes:
        id: Opaque player identifier.
        name: Display name.
        color: Seat color.
        general_stock: Unpurchased reserve.
        personal_supply: Purchased, placeable tokens.
        actions: Actions upgrade tier (1-6).
        privilege: Privilege upgrade tier (1-4).
        bank: Bank upgrade tier (1-4).
        book: Book upgrade tier (1-4).
        keys: Keys upgrade tier (1-5).
        points: Victory points scored during play.
        unplaced_markers: Markers won but not yet placed on a route.
        ready_markers: Markers collected and usable.
        used_markers: Markers spent.
        link_east_west: True once the player has linked Arnheim and Stendal.
    """

    id: str
    name: str
    color: Color
    general_stock: Stock = field(default_factory=_starting_stock)
    personal_supply: Stock = field(default_factory=_starting_supply)
    actions: int = INITIAL_UPGRADE_TIER
    privilege: int = INITIAL_UPGRADE_TIER
    bank: int = INITIAL_UPGRADE_TIER
    book: int = INITIAL_UPGRADE_TIER
    keys: int = INITIAL_UPGRADE_TIER
    points: int = 0
    unplaced_markers: list[BonusMarkerKind] = field(default_factory=list)
    ready_markers: list[BonusMarkerKind] = field(default_factory=list)
    used_markers: list[BonusMarkerKind] = field(default_factory=list)
    link_east_west: bool = False

    # -------------------------------------------------------------------------
    # Upgrades
    # -------------------------------------------------------------------------

    def get_tier(self, upgrade: Upgrade) -> int:
        """Get the current tier of an upgrade track."""
        return getattr(self, upgrade.value)

    def can_upgrade(self, upgrade: Upgrade) -> bool:
        """Check if an upgrade track is below its cap."""
        return self.get_tier(upgrade) < UPGRADE_CAPS[upgrade]

    def available_upgrades(self) -> list[Upgrade]:
        """Return all upgrade tracks that are not maxed out."""
        return [upgrade for upgrade in Upgrade if self.can_upgrade(upgrade)]

    def is_maxed(self, upgrade: Upgrade) -> bool:
        return self.get_tier(upgrade) >= UPGRADE_CAPS[upgrade]

    def apply_upgrade(self, upgrade: Upgrade) -> None:
        """Raise an upgrade track by one tier.

        The token uncovered on the track joins the personal supply: a
        merchant for the book, a tradesman otherwise.

        Raises:
            ValueError: If the track is already maxed out.
        """
        if not self.can_upgrade(upgrade):
            raise ValueError(f"Player {self.name} cannot upgrade {upgrade.value} any further")
        setattr(self, upgrade.value, self.get_tier(upgrade) + 1)
        self.personal_supply.add(merch=upgrade == Upgrade.BOOK)

    def released_tokens(self) -> tuple[int, int]:
        """Return (merchants, tradesmen) released from the upgrade tracks."""
        merchants = self.book - 1
        tradesmen = (self.actions - 1) + (self.privilege - 1) + (self.bank - 1) + (self.keys - 1)
        return merchants, tradesmen

    # -------------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------------

    def income_value(self) -> Optional[int]:
        """Tokens bought by one income action, or None for all of them."""
        return INCOME_PER_TIER[self.bank - 1]

    def actions_per_turn(self) -> int:
        """Base number of actions per turn."""
        return ACTIONS_PER_TIER[self.actions - 1]

    def collection_limit(self) -> int:
        """Number of tokens a move action may collect."""
        return self.book + 1

    def keys_multiplier(self) -> int:
        return KEYS_MULTIPLIER[self.keys - 1]

    # -------------------------------------------------------------------------
    # Score and markers
    # -------------------------------------------------------------------------

    def add_points(self, points: int) -> None:
        """Add points to the score.

        Raises:
            ValueError: If points is negative; scores never decrease.
        """
        if points < 0:
            raise ValueError(f"Cannot remove points from {self.name}")
        self.points += points

    def markers_held(self) -> int:
        """Count collected markers, used or not."""
        return len(self.ready_markers) + len(self.used_markers)

    def use_marker(self, kind: BonusMarkerKind) -> None:
        """Move a ready marker to the used pile.

        Raises:
            ValueError: If no ready marker of that kind is held.
        """
        if kind not in self.ready_markers:
            raise ValueError(f"Player {self.name} has no ready {kind.value!r} marker")
        self.ready_markers.remove(kind)
        self.used_markers.append(kind)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color.value,
            "general_stock": self.general_stock.to_dict(),
            "personal_supply": self.personal_supply.to_dict(),
            "actions": self.actions,
            "privilege": self.privilege,
            "bank": self.bank,
            "book": self.book,
            "keys": self.keys,
            "points": self.points,
            "unplaced_markers": [m.value for m in self.unplaced_markers],
            "ready_markers": [m.value for m in self.ready_markers],
            "used_markers": [m.value for m in self.used_markers],
            "link_east_west": self.link_east_west,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerState:
        return cls(
            id=data["id"],
            name=data["name"],
            color=Color(data["color"]),
            general_stock=Stock.from_dict(data["general_stock"]),
            personal_supply=Stock.from_dict(data["personal_supply"]),
            actions=data["actions"],
            privilege=data["privilege"],
            bank=data["bank"],
            book=data["book"],
            keys=data["keys"],
            points=data["points"],
            unplaced_markers=[BonusMarkerKind(m) for m in data["unplaced_markers"]],
            ready_markers=[BonusMarkerKind(m) for m in data["ready_markers"]],
            used_markers=[BonusMarkerKind(m) for m in data["used_markers"]],
            link_east_west=data["link_east_west"],
        )
