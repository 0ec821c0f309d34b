"""Abstract persistence interface for marketplace state.

Defines the StoreBackend Protocol that LedgerService and CartService
depend on. Concrete implementations live in ``ecomarket.stores``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class StoreBackend(Protocol):
    """Durable key/value storage of whole JSON documents.

    Any object implementing these three methods can back the ledger,
    the session and the cart. Writers replace the entire document;
    there is no partial update and no isolation between contexts
    sharing one store (last writer wins).
    """

    def fetch(self, key: str) -> str | None: ...

    def store(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...
