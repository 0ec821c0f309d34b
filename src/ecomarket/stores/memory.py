"""In-process StoreBackend, for tests and throwaway sessions."""

from __future__ import annotations


class MemoryStore:
    """Dict-backed store. Contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def fetch(self, key: str) -> str | None:
        return self._items.get(key)

    def store(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)
