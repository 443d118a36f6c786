"""Repository layer for data persistence.

Player records live in an external record store; this package defines
the contract the matching service consumes and an in-memory store.
"""

from src.repositories.player_store import InMemoryPlayerStore, PlayerStore

__all__ = [
    "InMemoryPlayerStore",
    "PlayerStore",
]
