"""
Score Aggregator - Per-Customer Aggregate Scores and Flagging
==============================================================

ARCHITECTURAL DECISION:
- recompute() is a pure fold over the full review set, never an
  incremental counter. Running it twice, or concurrently, over the same
  snapshot gives the same answer.
- Sums use math.fsum so the mean does not depend on review order,
  not even in the last bit.
- Stored scores are rounded to 2 decimals; the flag decision uses the
  unrounded mean.
"""

import logging
import math
from typing import Iterable, Sequence

from .models import AggregateScores, Review

logger = logging.getLogger(__name__)

# Customers whose mean overall rating is strictly below this are flagged.
FLAG_THRESHOLD = 2.5

SCORE_PRECISION = 2


def _mean(values: Iterable[float], count: int) -> float:
    return math.fsum(values) / count


class ScoreAggregator:
    """
    Usage:
        aggregator = ScoreAggregator()
        scores = aggregator.recompute(customer.id, reviews)
        print(scores.overall, scores.is_flagged)
    """

    def __init__(self, flag_threshold: float = FLAG_THRESHOLD):
        self.flag_threshold = flag_threshold

    def is_flagged(self, overall_mean: float) -> bool:
        return overall_mean < self.flag_threshold

    def recompute(
        self,
        customer_id: int,
        reviews: Sequence[Review],
        expected_minimum: int = 0
    ) -> AggregateScores:
        """
        Fold a customer's reviews into aggregate scores.

        Args:
            customer_id: Owner of the reviews (used for logging only).
            reviews: Consistent snapshot of the customer's reviews.
            expected_minimum: Reviews the caller knows must be visible,
                e.g. 1 right after inserting one. Seeing fewer means the
                store returned a stale snapshot.

        Returns:
            AggregateScores. Zero reviews give zero scores, unflagged.
        """
        total = len(reviews)

        if total < expected_minimum:
            logger.warning(
                f"Customer {customer_id}: recompute saw {total} reviews, "
                f"expected at least {expected_minimum}. Store snapshot may be stale."
            )

        if total == 0:
            return AggregateScores()

        overall = _mean((r.overall_rating for r in reviews), total)
        behavior = _mean((r.behavior_rating for r in reviews), total)
        payment = _mean((r.payment_rating for r in reviews), total)
        maintenance = _mean((r.maintenance_rating for r in reviews), total)

        timestamps = [r.created_at for r in reviews if r.created_at is not None]

        scores = AggregateScores(
            overall=round(overall, SCORE_PRECISION),
            behavior=round(behavior, SCORE_PRECISION),
            payment=round(payment, SCORE_PRECISION),
            maintenance=round(maintenance, SCORE_PRECISION),
            total_reviews=total,
            is_flagged=self.is_flagged(overall),
            last_review_at=max(timestamps) if timestamps else None,
        )

        logger.debug(
            f"Customer {customer_id}: {total} reviews, overall={scores.overall}, "
            f"flagged={scores.is_flagged}"
        )
        return scores
