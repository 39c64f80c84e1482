"""
Claim storage.

Two interchangeable backends behind ClaimRepository:
- InMemoryClaimStore: a dict keyed by claim id, for tests and single-process use
- SQLiteClaimStore: a local SQLite database, no external setup required

Stores are plain objects. Create one and hand it to the intake workflow; there
is no module-level default store.
"""

import json
import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, TYPE_CHECKING

from ..domain.schema import Claim, ClaimAdapter, RegistrationNumber, VehicleClaim

if TYPE_CHECKING:
    from ..utils.config import Settings

logger = logging.getLogger(__name__)


class ClaimRepository(ABC):
    """Storage contract used by the intake workflow."""

    @abstractmethod
    def save(self, claim: Claim) -> Claim:
        """Insert the claim, or replace the stored claim with the same id."""

    @abstractmethod
    def get_by_id(self, claim_id: str) -> Optional[Claim]:
        """Return the claim, or None if no claim has this id."""

    @abstractmethod
    def get_all(self) -> List[Claim]:
        """Return a snapshot of all claims in no particular order."""

    @abstractmethod
    def get_by_registration_number(self, registration_number: str) -> List[Claim]:
        """
        Return all vehicle claims for a registration number.

        Raises:
            InvalidFormatError: if registration_number is not a valid plate
        """

    @abstractmethod
    def count(self) -> int:
        """Number of stored claims."""


# =============================================================================
# In-memory
# =============================================================================


class InMemoryClaimStore(ClaimRepository):
    """
    Claims held in a dict keyed by claim id.

    A lock makes save() atomic and keeps get_all() from reading a dict that is
    being written. Each instance has its own state.
    """

    def __init__(self):
        self._claims: Dict[str, Claim] = {}
        self._lock = threading.Lock()

    def save(self, claim: Claim) -> Claim:
        with self._lock:
            replaced = claim.claim_id in self._claims
            self._claims[claim.claim_id] = claim
        logger.debug(f"{'Replaced' if replaced else 'Inserted'} claim {claim.claim_id}")
        return claim

    def get_by_id(self, claim_id: str) -> Optional[Claim]:
        with self._lock:
            return self._claims.get(claim_id)

    def get_all(self) -> List[Claim]:
        with self._lock:
            return list(self._claims.values())

    def get_by_registration_number(self, registration_number: str) -> List[Claim]:
        wanted = RegistrationNumber(registration_number)
        return [
            claim
            for claim in self.get_all()
            if isinstance(claim, VehicleClaim) and claim.registration_number == wanted
        ]

    def count(self) -> int:
        with self._lock:
            return len(self._claims)


# =============================================================================
# SQLite
# =============================================================================


DEFAULT_DB_PATH = Path("data") / "claims.db"


class SQLiteClaimStore(ClaimRepository):
    """
    SQLite-based storage for claims.

    The full claim is stored as JSON; kind, status, report date and
    registration number are also kept in columns for filtering.

    Usage:
        store = SQLiteClaimStore(Path("data/claims.db"))

        # Save (insert or replace)
        store.save(claim)

        # Retrieve
        claim = store.get_by_id(claim_id)

        # Search by plate
        claims = store.get_by_registration_number("ABC 123")
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the claim store."""
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS claims (
                    claim_id TEXT PRIMARY KEY,
                    claim_type TEXT NOT NULL,
                    status TEXT NOT NULL,
                    reported_date TEXT NOT NULL,
                    registration_number TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,

                    -- Full claim (JSON)
                    payload TEXT NOT NULL
                )
            """)

            # Indexes for common queries
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_claims_registration ON claims(registration_number)"
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_claims_status ON claims(status)")

            conn.commit()

    @contextmanager
    def _get_connection(self):
        """Get a database connection."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def save(self, claim: Claim) -> Claim:
        """
        Save a claim to the database.

        A claim whose id is already stored is replaced in a single statement;
        its created_at is kept.
        """
        now = datetime.now().isoformat()
        payload = claim.model_dump(mode="json")
        registration_number = (
            claim.registration_number.value if isinstance(claim, VehicleClaim) else None
        )

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO claims (
                    claim_id, claim_type, status, reported_date, registration_number,
                    created_at, updated_at, payload
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(claim_id) DO UPDATE SET
                    claim_type = excluded.claim_type,
                    status = excluded.status,
                    reported_date = excluded.reported_date,
                    registration_number = excluded.registration_number,
                    updated_at = excluded.updated_at,
                    payload = excluded.payload
            """, (
                claim.claim_id,
                payload["claim_type"],
                payload["status"],
                payload["reported_date"],
                registration_number,
                now,
                now,
                json.dumps(payload),
            ))
            conn.commit()

        logger.debug(f"Saved claim {claim.claim_id} to {self.db_path}")
        return claim

    def get_by_id(self, claim_id: str) -> Optional[Claim]:
        """
        Retrieve a claim by ID.

        Returns:
            The claim or None if not found
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT payload FROM claims WHERE claim_id = ?",
                (claim_id,)
            ).fetchone()

            if row:
                return self._row_to_claim(row)
        return None

    def get_all(self) -> List[Claim]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT payload FROM claims").fetchall()
            return [self._row_to_claim(row) for row in rows]

    def get_by_registration_number(self, registration_number: str) -> List[Claim]:
        wanted = RegistrationNumber(registration_number)
        with self._get_connection() as conn:
            rows = conn.execute(
                "SELECT payload FROM claims WHERE registration_number = ?",
                (wanted.value,)
            ).fetchall()
            return [self._row_to_claim(row) for row in rows]

    def count(self) -> int:
        with self._get_connection() as conn:
            row = conn.execute("SELECT COUNT(*) FROM claims").fetchone()
            return row[0]

    def _row_to_claim(self, row: sqlite3.Row) -> Claim:
        """Rebuild the claim variant from its JSON payload."""
        return ClaimAdapter.validate_python(json.loads(row["payload"]))


# =============================================================================
# Factory
# =============================================================================


def create_claim_store(settings: "Settings") -> ClaimRepository:
    """Build the store backend named by the settings."""
    if settings.storage_backend == "memory":
        logger.debug("Using in-memory claim store")
        return InMemoryClaimStore()
    if settings.storage_backend == "sqlite":
        logger.debug(f"Using SQLite claim store at {settings.db_path}")
        return SQLiteClaimStore(settings.db_path)
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
