"""
Reputation Profile Builder
==========================

Composes the aggregate scores, the customer's display identity and the
tagged most-recent reviews into the profile returned by a lookup.
The result depends only on (customer, reviews).
"""

from typing import List, Optional, Sequence

from .models import Customer, RecentReview, ReputationProfile, Review
from .scoring import ScoreAggregator
from .tags import infer_tags

RECENT_REVIEW_LIMIT = 10


def newest_first(reviews: Sequence[Review]) -> List[Review]:
    """Sort by creation time, newest first. Equal timestamps: later insert first."""
    return sorted(
        reviews,
        key=lambda r: (r.created_at is not None, r.created_at or 0, r.id),
        reverse=True,
    )


class ReputationProfileBuilder:

    def __init__(
        self,
        aggregator: Optional[ScoreAggregator] = None,
        recent_limit: int = RECENT_REVIEW_LIMIT
    ):
        self.aggregator = aggregator or ScoreAggregator()
        self.recent_limit = recent_limit

    def build(self, customer: Customer, reviews: Sequence[Review]) -> ReputationProfile:
        """Build a profile. An empty review set gives a 'no reviews yet' profile."""
        scores = self.aggregator.recompute(customer.id, reviews)

        recent = [
            RecentReview(
                review_id=r.id,
                business_name=r.business_name,
                overall_rating=r.overall_rating,
                comment=r.comment,
                reviewer_role=r.reviewer_role.value,
                created_at=r.created_at,
                tags=infer_tags(r.overall_rating, r.comment),
            )
            for r in newest_first(reviews)[:self.recent_limit]
        ]

        return ReputationProfile(
            customer_id=customer.id,
            display_id=customer.display_identity,
            overall_score=scores.overall,
            behavior_score=scores.behavior,
            payment_score=scores.payment,
            maintenance_score=scores.maintenance,
            total_reviews=scores.total_reviews,
            is_flagged=scores.is_flagged,
            last_review_at=scores.last_review_at,
            recent_reviews=recent,
        )
