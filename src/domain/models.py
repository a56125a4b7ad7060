"""
Domain Models - Customers, Reviews and Derived Profiles
=======================================================

Plain dataclasses shared by every layer. Nothing in here talks to the
database or the network.

Customer and Review mirror the stored rows. AggregateScores,
ReputationProfile and ShareContent are derived values and are always
rebuilt from a customer's review set.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class ReviewerRole(Enum):
    """Role of the service worker who wrote a review."""
    OWNER = "owner"
    MANAGER = "manager"
    SERVER = "server"
    CASHIER = "cashier"

    @classmethod
    def parse(cls, value: str) -> Optional["ReviewerRole"]:
        """Case-insensitive lookup. Returns None for unknown roles."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None

    @property
    def label(self) -> str:
        return self.value.capitalize()


class AggregateState(Enum):
    """State of the cached aggregate stored on a customer row."""
    STALE = "stale"
    CURRENT = "current"


@dataclass
class Customer:
    """Customer record. The raw phone number is never kept."""
    id: int
    phone_hash: str
    display_id: str
    display_name: str = ""
    created_at: Optional[datetime] = None

    # Cached aggregate slot
    overall_score: float = 0.0
    behavior_score: float = 0.0
    payment_score: float = 0.0
    maintenance_score: float = 0.0
    total_reviews: int = 0
    is_flagged: bool = False
    last_review_at: Optional[datetime] = None
    aggregate_state: AggregateState = AggregateState.STALE

    @property
    def display_identity(self) -> str:
        """Name shown to businesses: the override if one was given."""
        return self.display_name or self.display_id

    @property
    def needs_recompute(self) -> bool:
        return self.aggregate_state is AggregateState.STALE


@dataclass
class Review:
    """One rating event written by a service worker."""
    id: int
    customer_id: int
    overall_rating: float
    behavior_rating: float
    payment_rating: float
    maintenance_rating: float
    reviewer_role: ReviewerRole
    comment: str = ""
    business_name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    shared_url: str = ""


@dataclass(frozen=True)
class AggregateScores:
    """Per-dimension means over a customer's reviews (rounded to 2 places)."""
    overall: float = 0.0
    behavior: float = 0.0
    payment: float = 0.0
    maintenance: float = 0.0
    total_reviews: int = 0
    is_flagged: bool = False
    last_review_at: Optional[datetime] = None


@dataclass(frozen=True)
class RecentReview:
    """A review as shown inside a profile, with inferred tags."""
    review_id: int
    business_name: str
    overall_rating: float
    comment: str
    reviewer_role: str
    created_at: Optional[datetime]
    tags: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ReputationProfile:
    """Customer-facing profile returned by a lookup."""
    customer_id: int
    display_id: str
    overall_score: float
    behavior_score: float
    payment_score: float
    maintenance_score: float
    total_reviews: int
    is_flagged: bool
    last_review_at: Optional[datetime]
    recent_reviews: List[RecentReview] = field(default_factory=list)


@dataclass(frozen=True)
class ShareContent:
    """Anonymized post ready for an external network."""
    title: str
    body: str
    channel: str
    flair: str
    actor_label: str


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a publish attempt. Exactly one of url/error is meaningful."""
    success: bool
    url: str = ""
    error: str = ""

    @classmethod
    def ok(cls, url: str) -> "PublishResult":
        return cls(success=True, url=url)

    @classmethod
    def failed(cls, error: str) -> "PublishResult":
        return cls(success=False, error=error)


@dataclass(frozen=True)
class PostMetrics:
    """Engagement numbers for a published post."""
    score: int
    num_comments: int
