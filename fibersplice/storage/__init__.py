"""Storage collaborators for the splice engine."""

from .base import CircuitStore
from .memory_store import InMemoryStore

__all__ = [
    "CircuitStore",
    "InMemoryStore",
]
