"""Typed action payloads.

Each action kind takes one payload shape. Payloads arrive as plain dicts
(for example from a serialized client message) and are parsed into frozen
dataclasses before validation, so handlers never inspect raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .board import PostAddress
from .constants import ActionName, BonusMarkerKind, Upgrade
from .errors import ActionParamsError


def _int(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise ActionParamsError(f"'{key}' must be an integer, got {value!r}")
    return value


def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ActionParamsError(f"'{key}' must be a string, got {value!r}")
    return value


def _post(data: dict[str, Any]) -> PostAddress:
    value = data.get("post")
    if (
        not isinstance(value, (list, tuple))
        or len(value) != 2
        or any(isinstance(v, bool) or not isinstance(v, int) for v in value)
    ):
        raise ActionParamsError(f"'post' must be a [route, post] pair, got {value!r}")
    return (value[0], value[1])


@dataclass(frozen=True)
class NoParams:
    """Payload of actions that take no parameters."""

    def to_dict(self) -> dict[str, Any]:
        return {}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NoParams:
        return cls()


@dataclass(frozen=True)
class PlaceParams:
    """A post to place on and the kind of token to use."""

    post: PostAddress
    merch: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"post": list(self.post), "merch": self.merch}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlaceParams:
        merch = data.get("merch", False)
        if not isinstance(merch, bool):
            raise ActionParamsError(f"'merch' must be a boolean, got {merch!r}")
        return cls(post=_post(data), merch=merch)


@dataclass(frozen=True)
class PostParams:
    """A single post address."""

    post: PostAddress

    def to_dict(self) -> dict[str, Any]:
        return {"post": list(self.post)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PostParams:
        return cls(post=_post(data))


@dataclass(frozen=True)
class RouteParams:
    """A route index."""

    route: int

    def to_dict(self) -> dict[str, Any]:
        return {"route": self.route}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RouteParams:
        return cls(route=_int(data, "route"))


@dataclass(frozen=True)
class CityParams:
    """A city name."""

    city: str

    def to_dict(self) -> dict[str, Any]:
        return {"city": self.city}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CityParams:
        return cls(city=_str(data, "city"))


@dataclass(frozen=True)
class BarrelParams:
    """A Coellen barrel index."""

    barrel: int

    def to_dict(self) -> dict[str, Any]:
        return {"barrel": self.barrel}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BarrelParams:
        return cls(barrel=_int(data, "barrel"))


@dataclass(frozen=True)
class UpgradeParams:
    """An upgrade track."""

    upgrade: Upgrade

    def to_dict(self) -> dict[str, Any]:
        return {"upgrade": self.upgrade.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UpgradeParams:
        value = data.get("upgrade")
        if isinstance(value, Upgrade):
            return cls(upgrade=value)
        try:
            return cls(upgrade=Upgrade(value))
        except ValueError:
            raise ActionParamsError(f"Unknown upgrade {value!r}")


@dataclass(frozen=True)
class MarkerParams:
    """A bonus marker kind."""

    kind: BonusMarkerKind

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MarkerParams:
        value = data.get("kind")
        if isinstance(value, BonusMarkerKind):
            return cls(kind=value)
        try:
            return cls(kind=BonusMarkerKind(value))
        except ValueError:
            raise ActionParamsError(f"Unknown marker kind {value!r}")


@dataclass(frozen=True)
class SwapParams:
    """An office slot in a city."""

    city: str
    office: int

    def to_dict(self) -> dict[str, Any]:
        return {"city": self.city, "office": self.office}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SwapParams:
        return cls(city=_str(data, "city"), office=_int(data, "office"))


ActionParams = Union[
    NoParams,
    PlaceParams,
    PostParams,
    RouteParams,
    CityParams,
    BarrelParams,
    UpgradeParams,
    MarkerParams,
    SwapParams,
]

PARAMS_BY_ACTION: dict[ActionName, type] = {
    ActionName.INCOME: NoParams,
    ActionName.DONE: NoParams,
    ActionName.PLACE: PlaceParams,
    ActionName.DISPLACE: PlaceParams,
    ActionName.DISPLACE_PLACE: PostParams,
    ActionName.MOVE_COLLECT: PostParams,
    ActionName.MOVE_PLACE: PostParams,
    ActionName.ROUTE: RouteParams,
    ActionName.ROUTE_EMPTY: NoParams,
    ActionName.ROUTE_OFFICE: CityParams,
    ActionName.ROUTE_BARREL: BarrelParams,
    ActionName.ROUTE_UPGRADE: UpgradeParams,
    ActionName.MARKER_PLACE: RouteParams,
    ActionName.MARKER_USE: MarkerParams,
    ActionName.MARKER_SWAP: SwapParams,
    ActionName.MARKER_OFFICE: CityParams,
}


def parse_action_name(name: Union[str, ActionName]) -> ActionName:
    """Convert an action name to ActionName.

    Raises:
        ActionParamsError: If the name is unknown.
    """
    if isinstance(name, ActionName):
        return name
    try:
        return ActionName(name)
    except ValueError:
        raise ActionParamsError(f"Unknown action {name!r}")


def parse_params(
    name: ActionName,
    params: Union[ActionParams, dict[str, Any], None] = None,
) -> ActionParams:
    """Convert a raw payload into the typed payload for an action.

    Args:
        name: The action kind.
        params: A typed payload, a dict, or None for an empty payload.

    Returns:
        The typed payload.

    Raises:
        ActionParamsError: If the payload does not fit the action.
    """
    expected = PARAMS_BY_ACTION[name]
    if isinstance(params, expected):
        return params
    if params is None:
        params = {}
    if not isinstance(params, dict):
        raise ActionParamsError(
            f"Action {name.value!r} expects {expected.__name__}, got {type(params).__name__}"
        )
    return expected.from_dict(params)
