"""EcoMarket configuration — plain frozen dataclass.

The host application constructs this from its own settings and passes it
to the ledger and cart services.
"""

from dataclasses import dataclass

from ecomarket.constants import (
    CART_KEY,
    LEDGER_KEY,
    SEED_BALANCE_CEILING,
    SEED_USER_COUNT,
    SESSION_KEY,
)


@dataclass(frozen=True)
class MarketConfig:
    ledger_key: str = LEDGER_KEY
    session_key: str = SESSION_KEY
    cart_key: str = CART_KEY
    seed_user_count: int = SEED_USER_COUNT
    seed_balance_ceiling: int = SEED_BALANCE_CEILING
