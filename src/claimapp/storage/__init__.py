"""
Storage module for persisting claims.

Provides:
- In-memory storage (per process)
- SQLite-based storage (survives restarts)
"""

from .claim_store import (
    ClaimRepository,
    InMemoryClaimStore,
    SQLiteClaimStore,
    create_claim_store,
)

__all__ = [
    "ClaimRepository",
    "InMemoryClaimStore",
    "SQLiteClaimStore",
    "create_claim_store",
]
