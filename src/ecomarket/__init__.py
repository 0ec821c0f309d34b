"""EcoMarket core — wallet ledger and shopping cart.

Storage-agnostic services for the EcoManure marketplace views.
"""

__version__ = "0.1.0"

from ecomarket.accounts import Account, LedgerDocument, credentials_match, derive_tier
from ecomarket.cart import CartEntry, CartLine, CartService, CartSummary
from ecomarket.config import MarketConfig
from ecomarket.constants import Role, Tier
from ecomarket.errors import ErrorCode, OperationResult
from ecomarket.ledger_service import LedgerService, RandomSource
from ecomarket.store_backend import StoreBackend
from ecomarket.stores import JsonFileStore, MemoryStore

__all__ = [
    "Account",
    "LedgerDocument",
    "credentials_match",
    "derive_tier",
    "CartEntry",
    "CartLine",
    "CartService",
    "CartSummary",
    "MarketConfig",
    "Role",
    "Tier",
    "ErrorCode",
    "OperationResult",
    "LedgerService",
    "RandomSource",
    "StoreBackend",
    "JsonFileStore",
    "MemoryStore",
]
