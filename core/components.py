"""Game components for the Hansa rules engine.

Tokens, token pools and the dynamic state of routes and cities. Every token
is held by exactly one location at a time: a route post, a city office, a
city extra office, a Coellen barrel, a context hand or a stock counter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .constants import BonusMarkerKind
from .errors import InvariantViolation


@dataclass
class Token:
    """A merchant or tradesman owned by a player.

    Also used for tokens held in a context's hand, where `owner` is the
    token's original owner.
    """

    owner: int
    merch: bool = False

    @property
    def kind(self) -> str:
        return "merchant" if self.merch else "tradesman"

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "merch": self.merch}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Token:
        return cls(owner=data["owner"], merch=bool(data.get("merch", False)))


@dataclass
class Stock:
    """A pool of merchants (m) and tradesmen (t)."""

    m: int = 0
    t: int = 0

    def total(self) -> int:
        return self.m + self.t

    def count(self, merch: Optional[bool] = None) -> int:
        """Count tokens of one kind, or all tokens when merch is None."""
        if merch is None:
            return self.total()
        return self.m if merch else self.t

    def add(self, merch: bool, amount: int = 1) -> None:
        if merch:
            self.m += amount
        else:
            self.t += amount

    def take(self, merch: bool, amount: int = 1) -> None:
        """Remove tokens of one kind.

        Raises:
            InvariantViolation: If not enough tokens of that kind are present.
        """
        if self.count(merch) < amount:
            kind = "merchants" if merch else "tradesmen"
            raise InvariantViolation(f"Cannot take {amount} {kind} from {self}")
        self.add(merch, -amount)

    def to_dict(self) -> dict[str, int]:
        return {"m": self.m, "t": self.t}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Stock:
        return cls(m=data["m"], t=data["t"])


@dataclass
class RouteState:
    """Dynamic state of a route.

    Attributes:
        tokens: One entry per trading post, None when vacant.
        marker: Bonus marker lying on the route, if any.
    """

    tokens: list[Optional[Token]] = field(default_factory=list)
    marker: Optional[BonusMarkerKind] = None

    @classmethod
    def empty(cls, posts: int) -> RouteState:
        return cls(tokens=[None] * posts)

    def get(self, post_index: int) -> Optional[Token]:
        return self.tokens[post_index]

    def is_vacant(self, post_index: int) -> bool:
        return self.tokens[post_index] is None

    def vacant_count(self) -> int:
        return sum(1 for token in self.tokens if token is None)

    def is_empty(self) -> bool:
        """Check if no post holds a token."""
        return all(token is None for token in self.tokens)

    def is_complete_for(self, player: int) -> bool:
        """Check if every post holds a token of the given player."""
        return all(token is not None and token.owner == player for token in self.tokens)

    def place(self, post_index: int, token: Token) -> None:
        """Put a token on a vacant post.

        Raises:
            InvariantViolation: If the post is occupied.
        """
        if self.tokens[post_index] is not None:
            raise InvariantViolation(f"Post {post_index} is already occupied")
        self.tokens[post_index] = token

    def remove(self, post_index: int) -> Token:
        """Take the token off a post.

        Raises:
            InvariantViolation: If the post is vacant.
        """
        token = self.tokens[post_index]
        if token is None:
            raise InvariantViolation(f"Post {post_index} is vacant")
        self.tokens[post_index] = None
        return token

    def clear(self) -> list[Token]:
        """Remove and return every token on the route."""
        removed = [token for token in self.tokens if token is not None]
        self.tokens = [None] * len(self.tokens)
        return removed

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokens": [token.to_dict() if token else None for token in self.tokens],
            "marker": self.marker.value if self.marker else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouteState:
        marker = data.get("marker")
        return cls(
            tokens=[Token.from_dict(t) if t else None for t in data["tokens"]],
            marker=BonusMarkerKind(marker) if marker else None,
        )


@dataclass
class CityState:
    """Dynamic state of a city.

    Attributes:
        tokens: Occupied regular offices, left to right.
        extras: Extra offices granted by markers; new ones go to the front.
    """

    tokens: list[Token] = field(default_factory=list)
    extras: list[Token] = field(default_factory=list)

    def all_tokens(self) -> list[Token]:
        """Return extras followed by regular offices."""
        return [*self.extras, *self.tokens]

    def office_count(self, player: int) -> int:
        """Count the offices a player holds here, extras included."""
        return sum(1 for token in self.all_tokens() if token.owner == player)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokens": [token.to_dict() for token in self.tokens],
            "extras": [token.to_dict() for token in self.extras],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CityState:
        return cls(
            tokens=[Token.from_dict(t) for t in data["tokens"]],
            extras=[Token.from_dict(t) for t in data["extras"]],
        )


@dataclass
class LogEntry:
    """A human-readable game log line.

    Attributes:
        player: Player the entry is about, or -1 for system entries.
        message: The text.
    """

    player: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"player": self.player, "message": self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEntry:
        return cls(player=data["player"], message=data["message"])
