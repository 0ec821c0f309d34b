"""Constants for the EcoMarket ledger and cart."""

from decimal import Decimal
from enum import Enum, IntEnum


TIER_HARVESTER_FLOOR = Decimal("1000")
TIER_BLOOMER_FLOOR = Decimal("500")
TIER_SPROUT_FLOOR = Decimal("100")

SEED_USER_COUNT = 22
SEED_BALANCE_CEILING = 2000  # exclusive upper bound for seeded balances

MAX_LINE_QUANTITY = 999  # units of one product per cart

LEDGER_KEY = "ecoManureDB_v4"
SESSION_KEY = "ecoManureSession"
CART_KEY = "ecoManureCart"

EVENT_BALANCE_CHANGED = "balance-changed"
EVENT_CART_CHANGED = "cart-changed"
EVENT_SESSION_CHANGED = "session-changed"


class Tier(IntEnum):
    """Membership tiers derived from balance, lowest first."""

    SEEDLING = 0
    SPROUT = 1
    BLOOMER = 2
    HARVESTER = 3

    @property
    def label(self) -> str:
        return self.name.capitalize()


class Role(str, Enum):
    ADMIN = "admin"
    MODERATOR = "moderator"
    USER = "user"


# (id/username, credential, balance, role) for the fixed bootstrap accounts.
SEED_STAFF = (
    ("admin", "adminpassword123", Decimal("5000.00"), Role.ADMIN),
    ("mod1", "modpassword", Decimal("1500.00"), Role.MODERATOR),
    ("mod2", "modpassword", Decimal("800.00"), Role.MODERATOR),
)
