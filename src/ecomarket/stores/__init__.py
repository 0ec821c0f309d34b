from ecomarket.stores.json_file import JsonFileStore
from ecomarket.stores.memory import MemoryStore

__all__ = ["JsonFileStore", "MemoryStore"]
