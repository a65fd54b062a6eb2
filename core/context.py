"""Phase contexts: the nodes of the turn state machine.

A context describes whose decision is pending and what has been done so far.
Sub-decisions push a child context that owns a reference to its suspended
parent; resolving the sub-decision pops by handing the parent back. The chain
from the active context to the root is the logical control stack.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from .components import Token
from .constants import ActionName, BonusMarkerKind, Phase
from .errors import InvariantViolation
from .params import ActionParams, MarkerParams, NoParams, parse_params


@dataclass
class ActionRecord:
    """An action taken within a context.

    Attributes:
        name: The action kind.
        params: Its typed payload.
        context_actions: Actions of the sub-context this action opened,
            attached once that sub-context resolved.
    """

    name: ActionName
    params: ActionParams = field(default_factory=NoParams)
    context_actions: Optional[list[ActionRecord]] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name.value, "params": self.params.to_dict()}
        if self.context_actions is not None:
            data["context_actions"] = [a.to_dict() for a in self.context_actions]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActionRecord:
        name = ActionName(data["name"])
        sub = data.get("context_actions")
        return cls(
            name=name,
            params=parse_params(name, data.get("params")),
            context_actions=[cls.from_dict(a) for a in sub] if sub is not None else None,
        )


@dataclass
class Reward:
    """An option presented to the player, resolved by submitting its action."""

    title: str
    action: ActionRecord

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "action": self.action.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reward:
        return cls(title=data["title"], action=ActionRecord.from_dict(data["action"]))


@dataclass
class PhaseContext:
    """A node of the turn state machine.

    Attributes:
        phase: The pending decision.
        player: Index of the player who must act.
        actions: Actions taken in this context so far.
        hand: Tokens held off-board, each tagged with its original owner.
        rewards: Options offered in Route, Upgrade and Office contexts.
        parent: The suspended context to return to.
        end_game: Set when the game must end at the end of this turn.
        displaced_merchant: In Displacement, whether the evicted token was a
            merchant.
    """

    phase: Phase
    player: int
    actions: list[ActionRecord] = field(default_factory=list)
    hand: list[Token] = field(default_factory=list)
    rewards: Optional[list[Reward]] = None
    parent: Optional[PhaseContext] = None
    end_game: bool = False
    displaced_merchant: bool = False

    # -------------------------------------------------------------------------
    # Stack operations
    # -------------------------------------------------------------------------

    def push(
        self,
        phase: Phase,
        player: Optional[int] = None,
        hand: Optional[list[Token]] = None,
        actions: Optional[list[ActionRecord]] = None,
        rewards: Optional[list[Reward]] = None,
        **kwargs: Any,
    ) -> PhaseContext:
        """Create a child context suspended on this one."""
        return PhaseContext(
            phase=phase,
            player=self.player if player is None else player,
            actions=actions or [],
            hand=hand or [],
            rewards=rewards,
            parent=self,
            **kwargs,
        )

    def pop(self) -> PhaseContext:
        """Return the suspended parent context.

        Raises:
            InvariantViolation: If this is a root context.
        """
        if self.parent is None:
            raise InvariantViolation(f"Cannot pop the root {self.phase.value} context")
        return self.parent

    def chain(self) -> Iterator[PhaseContext]:
        """Iterate from this context up to the root."""
        context: Optional[PhaseContext] = self
        while context is not None:
            yield context
            context = context.parent

    def depth(self) -> int:
        """Number of suspended ancestors."""
        return sum(1 for _ in self.chain()) - 1

    def root(self) -> PhaseContext:
        *_, last = self.chain()
        return last

    def ends_game(self) -> bool:
        """Check if this context or any ancestor carries the end game flag."""
        return any(context.end_game for context in self.chain())

    # -------------------------------------------------------------------------
    # Action history
    # -------------------------------------------------------------------------

    def last_action(self) -> Optional[ActionRecord]:
        return self.actions[-1] if self.actions else None

    def counted_actions(self) -> int:
        """Count actions that use up the budget; marker use is free."""
        return sum(1 for a in self.actions if a.name != ActionName.MARKER_USE)

    def markers_used(self) -> list[BonusMarkerKind]:
        """Return the kinds of markers used in this context."""
        return [
            a.params.kind for a in self.actions
            if a.name == ActionName.MARKER_USE and isinstance(a.params, MarkerParams)
        ]

    def take_from_hand(self, merch: Optional[bool] = None, index: int = 0) -> Token:
        """Remove a token from the hand.

        Args:
            merch: Kind to take, or None to take the token at `index`.
            index: Position used when no kind is requested.

        Raises:
            InvariantViolation: If no such token is in hand.
        """
        if merch is None:
            if not -len(self.hand) <= index < len(self.hand):
                raise InvariantViolation("The hand is empty")
            return self.hand.pop(index)
        for i, token in enumerate(self.hand):
            if token.merch == merch:
                return self.hand.pop(i)
        kind = "merchant" if merch else "tradesman"
        raise InvariantViolation(f"No {kind} in hand")

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase.value,
            "player": self.player,
            "actions": [a.to_dict() for a in self.actions],
            "hand": [t.to_dict() for t in self.hand],
            "rewards": [r.to_dict() for r in self.rewards] if self.rewards is not None else None,
            "parent": self.parent.to_dict() if self.parent is not None else None,
            "end_game": self.end_game,
            "displaced_merchant": self.displaced_merchant,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhaseContext:
        rewards = data.get("rewards")
        parent = data.get("parent")
        return cls(
            phase=Phase(data["phase"]),
            player=data["player"],
            actions=[ActionRecord.from_dict(a) for a in data["actions"]],
            hand=[Token.from_dict(t) for t in data["hand"]],
            rewards=[Reward.from_dict(r) for r in rewards] if rewards is not None else None,
            parent=cls.from_dict(parent) if parent is not None else None,
            end_game=data.get("end_game", False),
            displaced_merchant=data.get("displaced_merchant", False),
        )
