"""
SQLite Database Repository - Customers, Reviews and Cached Aggregates
=====================================================================

Stores customers by phone-derived lookup key (never the raw number) and
their reviews. Each customer row also carries the cached aggregate with an
explicit stale/current state.

Every review write bumps the customer's aggregate_version in the same
transaction. A recomputed aggregate is saved only against the version read
before its review snapshot, so a slow recompute can never replace a newer
one and mark it current.
"""

import sqlite3
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from contextlib import contextmanager

from src.domain.models import (
    AggregateScores,
    AggregateState,
    Customer,
    Review,
    ReviewerRole,
)

logger = logging.getLogger(__name__)

DATABASE_FILE = "welp.db"

REVIEW_COLUMNS = {
    "overall_rating", "behavior_rating", "payment_rating", "maintenance_rating",
    "comment", "reviewer_role", "business_name", "shared_url",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_text(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_text(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class Database:
    """
    SQLite store for the reputation engine.

    Usage:
        db = Database()
        db.init()

        customer_id = db.create_customer(phone_hash, display_id="Amy K.")
        review_id = db.add_review(customer_id, overall_rating=4, ...)
        reviews = db.get_reviews_for_customer(customer_id)
    """

    def __init__(self, db_path: str = DATABASE_FILE):
        self.db_path = db_path

    @contextmanager
    def _get_connection(self):
        """Get database connection with context manager."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self):
        """Initialize database tables."""
        with self._get_connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS customers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    phone_hash TEXT UNIQUE NOT NULL,
                    display_id TEXT NOT NULL,
                    display_name TEXT DEFAULT '',
                    overall_score REAL DEFAULT 0,
                    behavior_score REAL DEFAULT 0,
                    payment_score REAL DEFAULT 0,
                    maintenance_score REAL DEFAULT 0,
                    total_reviews INTEGER DEFAULT 0,
                    is_flagged INTEGER DEFAULT 0,
                    last_review_at TEXT,
                    aggregate_state TEXT DEFAULT 'stale',
                    aggregate_version INTEGER DEFAULT 0,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS reviews (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    customer_id INTEGER NOT NULL REFERENCES customers(id) ON DELETE CASCADE,
                    overall_rating REAL NOT NULL,
                    behavior_rating REAL NOT NULL,
                    payment_rating REAL NOT NULL,
                    maintenance_rating REAL NOT NULL,
                    comment TEXT DEFAULT '',
                    reviewer_role TEXT NOT NULL,
                    business_name TEXT DEFAULT '',
                    shared_url TEXT DEFAULT '',
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_reviews_customer ON reviews(customer_id)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_reviews_business ON reviews(business_name)")

            logger.info(f"Database initialized: {self.db_path}")

    # ── Customer CRUD ──────────────────────────────────────────────

    def create_customer(self, phone_hash: str, display_id: str, display_name: str = "") -> int:
        """
        Create a customer, or return the existing id for this lookup key.
        Two racing submissions for a new number end up on the same row.
        """
        with self._get_connection() as conn:
            conn.execute(
                """INSERT OR IGNORE INTO customers (phone_hash, display_id, display_name, created_at)
                   VALUES (?, ?, ?, ?)""",
                (phone_hash, display_id, display_name, _to_text(utc_now()))
            )
            row = conn.execute(
                "SELECT id FROM customers WHERE phone_hash = ?", (phone_hash,)
            ).fetchone()
            return row["id"]

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        """Get customer by ID."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM customers WHERE id = ?", (customer_id,)
            ).fetchone()
            return self._row_to_customer(row) if row else None

    def get_customer_by_phone_hash(self, phone_hash: str) -> Optional[Customer]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM customers WHERE phone_hash = ?", (phone_hash,)
            ).fetchone()
            return self._row_to_customer(row) if row else None

    def get_customer_ids(self, stale_only: bool = False) -> List[int]:
        """Customer ids, optionally only those whose aggregate is stale."""
        with self._get_connection() as conn:
            if stale_only:
                rows = conn.execute(
                    "SELECT id FROM customers WHERE aggregate_state = ? ORDER BY id",
                    (AggregateState.STALE.value,)
                ).fetchall()
            else:
                rows = conn.execute("SELECT id FROM customers ORDER BY id").fetchall()
            return [row["id"] for row in rows]

    # ── Aggregate cache ────────────────────────────────────────────

    def get_aggregate_version(self, customer_id: int) -> Optional[int]:
        """Write counter of a customer's reviews. Read it before the review snapshot."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT aggregate_version FROM customers WHERE id = ?", (customer_id,)
            ).fetchone()
            return row["aggregate_version"] if row else None

    def save_aggregate(self, customer_id: int, scores: AggregateScores, version: int) -> bool:
        """
        Write a recomputed aggregate and mark the cache current, but only if
        no review write happened since `version` was read.
        Returns False when a newer write won; the cache is left untouched.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """UPDATE customers
                   SET overall_score = ?, behavior_score = ?, payment_score = ?,
                       maintenance_score = ?, total_reviews = ?, is_flagged = ?,
                       last_review_at = ?, aggregate_state = ?
                   WHERE id = ? AND aggregate_version = ?""",
                (
                    scores.overall, scores.behavior, scores.payment, scores.maintenance,
                    scores.total_reviews, int(scores.is_flagged),
                    _to_text(scores.last_review_at), AggregateState.CURRENT.value,
                    customer_id, version,
                )
            )
            return cursor.rowcount > 0

    @staticmethod
    def _invalidate_aggregate(conn: sqlite3.Connection, customer_id: int):
        """Mark stale and bump the write counter, inside the caller's transaction."""
        conn.execute(
            """UPDATE customers
               SET aggregate_state = ?, aggregate_version = aggregate_version + 1
               WHERE id = ?""",
            (AggregateState.STALE.value, customer_id)
        )

    # ── Review CRUD ────────────────────────────────────────────────

    def add_review(
        self,
        customer_id: int,
        overall_rating: float,
        behavior_rating: float,
        payment_rating: float,
        maintenance_rating: float,
        reviewer_role: ReviewerRole,
        comment: str = "",
        business_name: str = "",
    ) -> int:
        """
        Insert a review and mark the owner's aggregate stale in the same
        transaction.
        """
        now = _to_text(utc_now())
        with self._get_connection() as conn:
            cursor = conn.execute(
                """INSERT INTO reviews (customer_id, overall_rating, behavior_rating,
                       payment_rating, maintenance_rating, comment, reviewer_role,
                       business_name, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    customer_id, overall_rating, behavior_rating, payment_rating,
                    maintenance_rating, comment, reviewer_role.value, business_name,
                    now, now,
                )
            )
            self._invalidate_aggregate(conn, customer_id)
            return cursor.lastrowid

    def get_review(self, review_id: int) -> Optional[Review]:
        """Get review by ID."""
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM reviews WHERE id = ?", (review_id,)
            ).fetchone()
            return self._row_to_review(row) if row else None

    def get_reviews_for_customer(self, customer_id: int) -> List[Review]:
        """All reviews of one customer, newest first."""
        return self.get_reviews(customer_id=customer_id)

    def get_reviews(
        self,
        customer_id: Optional[int] = None,
        business_name: Optional[str] = None,
    ) -> List[Review]:
        """Reviews filtered by customer and/or business, newest first."""
        clauses = []
        params: List[Any] = []
        if customer_id is not None:
            clauses.append("customer_id = ?")
            params.append(customer_id)
        if business_name:
            clauses.append("business_name = ?")
            params.append(business_name)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._get_connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM reviews {where} ORDER BY created_at DESC, id DESC",
                params
            ).fetchall()
            return [self._row_to_review(row) for row in rows]

    def update_review(self, review_id: int, **updates) -> bool:
        """
        Update review fields and mark the owner's aggregate stale.
        Returns False if the review does not exist.
        """
        unknown = set(updates) - REVIEW_COLUMNS
        if unknown:
            raise ValueError(f"Unknown review columns: {sorted(unknown)}")

        values: Dict[str, Any] = {
            k: (v.value if isinstance(v, ReviewerRole) else v) for k, v in updates.items()
        }
        values["updated_at"] = _to_text(utc_now())

        set_clause = ", ".join(f"{k} = ?" for k in values.keys())

        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT customer_id FROM reviews WHERE id = ?", (review_id,)
            ).fetchone()
            if not row:
                return False
            conn.execute(
                f"UPDATE reviews SET {set_clause} WHERE id = ?",
                list(values.values()) + [review_id]
            )
            self._invalidate_aggregate(conn, row["customer_id"])
            return True

    def set_shared_url(self, review_id: int, url: str):
        """Record where a review was published. Does not touch aggregates."""
        with self._get_connection() as conn:
            conn.execute(
                "UPDATE reviews SET shared_url = ? WHERE id = ?", (url, review_id)
            )

    def delete_review(self, review_id: int) -> Optional[int]:
        """
        Delete a review and mark its owner's aggregate stale.
        Returns the owning customer id, or None if there was no such review.
        """
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT customer_id FROM reviews WHERE id = ?", (review_id,)
            ).fetchone()
            if not row:
                return None
            conn.execute("DELETE FROM reviews WHERE id = ?", (review_id,))
            self._invalidate_aggregate(conn, row["customer_id"])
            return row["customer_id"]

    def get_stats(self) -> dict:
        """Counts read from the aggregate cache."""
        with self._get_connection() as conn:
            customers = conn.execute("SELECT COUNT(*) FROM customers").fetchone()[0]
            reviews = conn.execute("SELECT COUNT(*) FROM reviews").fetchone()[0]
            flagged = conn.execute(
                "SELECT COUNT(*) FROM customers WHERE is_flagged = 1"
            ).fetchone()[0]
            stale = conn.execute(
                "SELECT COUNT(*) FROM customers WHERE aggregate_state = ?",
                (AggregateState.STALE.value,)
            ).fetchone()[0]
            shared = conn.execute(
                "SELECT COUNT(*) FROM reviews WHERE shared_url != ''"
            ).fetchone()[0]

            return {
                "customers": customers,
                "reviews": reviews,
                "flagged_customers": flagged,
                "stale_aggregates": stale,
                "shared_reviews": shared,
                "flagged_rate": round(flagged / customers * 100, 1) if customers > 0 else 0
            }

    def _row_to_customer(self, row: sqlite3.Row) -> Customer:
        """Convert database row to Customer object."""
        return Customer(
            id=row["id"],
            phone_hash=row["phone_hash"],
            display_id=row["display_id"],
            display_name=row["display_name"] or "",
            created_at=_from_text(row["created_at"]),
            overall_score=row["overall_score"] or 0.0,
            behavior_score=row["behavior_score"] or 0.0,
            payment_score=row["payment_score"] or 0.0,
            maintenance_score=row["maintenance_score"] or 0.0,
            total_reviews=row["total_reviews"] or 0,
            is_flagged=bool(row["is_flagged"]),
            last_review_at=_from_text(row["last_review_at"]),
            aggregate_state=AggregateState(row["aggregate_state"] or AggregateState.STALE.value),
        )

    def _row_to_review(self, row: sqlite3.Row) -> Review:
        """Convert database row to Review object."""
        return Review(
            id=row["id"],
            customer_id=row["customer_id"],
            overall_rating=row["overall_rating"],
            behavior_rating=row["behavior_rating"],
            payment_rating=row["payment_rating"],
            maintenance_rating=row["maintenance_rating"],
            reviewer_role=ReviewerRole(row["reviewer_role"]),
            comment=row["comment"] or "",
            business_name=row["business_name"] or "",
            created_at=_from_text(row["created_at"]),
            updated_at=_from_text(row["updated_at"]),
            shared_url=row["shared_url"] or "",
        )

