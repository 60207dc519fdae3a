"""Persistent storage for auction records and events"""
from dutchswap.core.storage.sqlite_adapter import SQLiteAdapter
from dutchswap.core.storage.storage_manager import StorageManager

__all__ = [
    "SQLiteAdapter",
    "StorageManager",
]
