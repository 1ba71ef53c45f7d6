"""
Storage Layer for the URAuth Registry

Provides:
- RegistryStore abstraction with atomic transactions
- In-memory implementation with a hash-chained event log
"""

from .store import (
    ChainHead,
    InMemoryRegistryStore,
    RegistryState,
    RegistryStore,
    Transaction,
)

__all__ = [
    "ChainHead",
    "InMemoryRegistryStore",
    "RegistryState",
    "RegistryStore",
    "Transaction",
]
