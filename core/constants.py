"""Constants and enums for the Hansa rules engine."""

from enum import Enum


class Color(Enum):
    """Seat colors."""

    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"


class Phase(Enum):
    """What is being decided right now.

    `ACTIONS` is the regular phase of a turn; every other phase is a
    sub-decision pushed on top of a suspended parent context.
    """

    ACTIONS = "Actions"
    DISPLACEMENT = "Displacement"  # Evicted player re-places tokens
    COLLECTION = "Collection"  # Collecting tokens to move
    MOVEMENT = "Movement"  # Placing collected tokens
    ROUTE = "Route"  # Choosing a route reward
    MARKERS = "Markers"  # Placing won bonus markers
    UPGRADE = "Upgrade"  # Choosing a free upgrade
    SWAP = "Swap"  # Choosing an office to swap
    OFFICE = "Office"  # Choosing a city for an extra office


class ActionName(Enum):
    """The action kinds understood by the executor."""

    INCOME = "income"
    DONE = "done"
    PLACE = "place"
    DISPLACE = "displace"
    DISPLACE_PLACE = "displace-place"
    MOVE_COLLECT = "move-collect"
    MOVE_PLACE = "move-place"
    ROUTE = "route"
    ROUTE_EMPTY = "route-empty"
    ROUTE_OFFICE = "route-office"
    ROUTE_BARREL = "route-barrel"
    ROUTE_UPGRADE = "route-upgrade"
    MARKER_PLACE = "marker-place"
    MARKER_USE = "marker-use"
    MARKER_SWAP = "marker-swap"
    MARKER_OFFICE = "marker-office"


class Upgrade(Enum):
    """Player upgrade tracks."""

    ACTIONS = "actions"
    PRIVILEGE = "privilege"
    BANK = "bank"
    BOOK = "book"
    KEYS = "keys"


class BonusMarkerKind(Enum):
    """Bonus marker kinds."""

    OFFICE = "Office"
    FOUR_ACTIONS = "4 Actions"
    THREE_ACTIONS = "3 Actions"
    UPGRADE = "Upgrade"
    SWAP = "Swap"
    MOVE_3 = "Move 3"


# Player limits
MIN_PLAYERS = 3
MAX_PLAYERS = 5

# Starting tokens per seat
STARTING_GENERAL_STOCK = (0, 7)  # (merchants, tradesmen)
STARTING_PERSONAL_SUPPLY = (1, 4)
STARTING_MERCHANTS = STARTING_GENERAL_STOCK[0] + STARTING_PERSONAL_SUPPLY[0]
STARTING_TRADESMEN = STARTING_GENERAL_STOCK[1] + STARTING_PERSONAL_SUPPLY[1]

# Upgrade tracks start at 1 and are capped
INITIAL_UPGRADE_TIER = 1
UPGRADE_CAPS: dict[Upgrade, int] = {
    Upgrade.ACTIONS: 6,
    Upgrade.PRIVILEGE: 4,
    Upgrade.BANK: 4,
    Upgrade.BOOK: 4,
    Upgrade.KEYS: 5,
}

# Upgrades worth 4 points each when maxed out
SCORED_UPGRADES = (Upgrade.BOOK, Upgrade.BANK, Upgrade.PRIVILEGE, Upgrade.ACTIONS)
MAXED_UPGRADE_POINTS = 4

# Actions per turn, indexed by actions tier - 1
ACTIONS_PER_TIER = (2, 3, 3, 4, 4, 5)

# Tokens bought by an income action, indexed by bank tier - 1 (None = all)
INCOME_PER_TIER: tuple[int | None, ...] = (3, 5, 7, None)

# Network multiplier, indexed by keys tier - 1
KEYS_MULTIPLIER = (1, 2, 2, 3, 4)

# Extra actions granted by bonus markers
EXTRA_ACTIONS: dict[BonusMarkerKind, int] = {
    BonusMarkerKind.THREE_ACTIONS: 3,
    BonusMarkerKind.FOUR_ACTIONS: 4,
}

# Displacement
DISPLACE_PRICE_TRADESMAN = 1
DISPLACE_PRICE_MERCHANT = 2
DISPLACED_TRADESMAN_PLACEMENTS = 2
DISPLACED_MERCHANT_PLACEMENTS = 3

# Move 3 marker collection limit
MOVE_3_LIMIT = 3

# Bonus marker stack: (kind, count)
MARKER_MULTISET: tuple[tuple[BonusMarkerKind, int], ...] = (
    (BonusMarkerKind.OFFICE, 4),
    (BonusMarkerKind.FOUR_ACTIONS, 2),
    (BonusMarkerKind.THREE_ACTIONS, 2),
    (BonusMarkerKind.UPGRADE, 2),
    (BonusMarkerKind.SWAP, 2),
    (BonusMarkerKind.MOVE_3, 1),
)
STARTING_TAVERN_MARKERS = 3

# Marker bonus: (minimum markers held, points), highest threshold wins
MARKER_BONUS_TIERS: tuple[tuple[int, int], ...] = (
    (0, 0),
    (1, 1),
    (3, 3),
    (5, 6),
    (7, 10),
    (9, 15),
    (10, 21),
)

# Special cities
COELLEN = "Coellen"
EAST_WEST_FROM = "Arnheim"
EAST_WEST_TO = "Stendal"

# Coellen barrels, left to right; barrel i requires privilege tier i + 1
COELLEN_BARRELS = (7, 8, 9, 11)
COELLEN_BARREL_NAMES = ("white", "orange", "purple", "black")

# East-west link bonus, indexed by how many players already linked
EAST_WEST_BONUS = (7, 4, 2, 0, 0)

# Route completion awards one point to each endpoint owner
CITY_OWNER_ROUTE_POINTS = 1
OWNED_CITY_POINTS = 2

# End game conditions
POINTS_TO_END = 20
FULL_CITIES_TO_END = 10

# Board variant by seat count
BOARD_VARIANTS: dict[int, str] = {
    3: "standard_3",
    4: "standard_45",
    5: "standard_45",
}

# Log entries not attributed to a player
SYSTEM_PLAYER = -1
