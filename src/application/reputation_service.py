"""
Reputation Service - Use Cases
===============================

Orchestrates the domain components over the store:

- lookup:  phone number -> ReputationProfile (or None)
- submit / update / delete reviews
- share:   review -> ShareContent -> Publisher

AGGREGATE CACHE:
Every write marks the owning customer's cached aggregate stale (in the same
transaction as the write) and then calls _recompute(), the single entry point
that folds the current review snapshot and marks the cache current. Readers
that find a stale cache recompute before serving. A recompute whose snapshot
predates a later write does not save.
"""

import logging
from typing import List, Optional

from src.domain.anonymizer import PhoneAnonymizer
from src.domain.errors import NotFoundError
from src.domain.models import (
    AggregateScores,
    PostMetrics,
    PublishResult,
    ReputationProfile,
    Review,
)
from src.domain.ports import Publisher
from src.domain.profile import ReputationProfileBuilder
from src.domain.scoring import ScoreAggregator
from src.domain.sharing import ShareContentGenerator
from src.infrastructure.persistence import Database

from .validation import validate_submission, validate_update

logger = logging.getLogger(__name__)


class ReputationService:
    """
    Usage:
        service = ReputationService(db, PhoneAnonymizer(), ScoreAggregator(),
                                    ReputationProfileBuilder(), ShareContentGenerator(),
                                    DryRunPublisher())
        review = service.submit_review("555-123-4567", overall_rating=4, reviewer_role="server")
        profile = service.lookup("5551234567")
    """

    def __init__(
        self,
        db: Database,
        anonymizer: PhoneAnonymizer,
        aggregator: ScoreAggregator,
        builder: ReputationProfileBuilder,
        share_generator: ShareContentGenerator,
        publisher: Publisher,
    ):
        self.db = db
        self.anonymizer = anonymizer
        self.aggregator = aggregator
        self.builder = builder
        self.share_generator = share_generator
        self.publisher = publisher

    # ── Aggregate cache ────────────────────────────────────────────

    def _recompute(self, customer_id: int, expected_minimum: int = 0) -> AggregateScores:
        """
        Recompute from the current review snapshot and store it as current.
        If another write lands after the version is read, the save is
        skipped and that write's own recompute stores the newer aggregate.
        """
        version = self.db.get_aggregate_version(customer_id)
        reviews = self.db.get_reviews_for_customer(customer_id)
        scores = self.aggregator.recompute(customer_id, reviews, expected_minimum)
        if version is None or not self.db.save_aggregate(customer_id, scores, version):
            logger.debug(f"Customer {customer_id}: newer write since snapshot, aggregate not saved")
        return scores

    def refresh_aggregates(self, stale_only: bool = True) -> int:
        """Recompute cached aggregates. Returns how many customers were refreshed."""
        customer_ids = self.db.get_customer_ids(stale_only=stale_only)
        for customer_id in customer_ids:
            self._recompute(customer_id)
        if customer_ids:
            logger.info(f"Refreshed aggregates for {len(customer_ids)} customers")
        return len(customer_ids)

    # ── Lookup ─────────────────────────────────────────────────────

    def lookup(self, phone_number: str) -> Optional[ReputationProfile]:
        """
        Profile for a phone number.

        Returns:
            ReputationProfile, or None if no customer has this number.

        Raises:
            ValidationError: if the phone number is malformed.
        """
        phone_hash = self.anonymizer.hash(phone_number)
        customer = self.db.get_customer_by_phone_hash(phone_hash)
        if customer is None:
            logger.info(f"Lookup miss for key {phone_hash[:8]}")
            return None

        if customer.needs_recompute:
            self._recompute(customer.id)

        reviews = self.db.get_reviews_for_customer(customer.id)
        return self.builder.build(customer, reviews)

    # ── Reviews ────────────────────────────────────────────────────

    def submit_review(
        self,
        phone_number: Optional[str],
        overall_rating: Optional[float],
        reviewer_role: Optional[str],
        behavior_rating: Optional[float] = None,
        payment_rating: Optional[float] = None,
        maintenance_rating: Optional[float] = None,
        comment: Optional[str] = None,
        business_name: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Review:
        """Validate, find-or-create the customer, store the review, recompute."""
        draft = validate_submission(
            phone_number=phone_number,
            overall_rating=overall_rating,
            reviewer_role=reviewer_role,
            behavior_rating=behavior_rating,
            payment_rating=payment_rating,
            maintenance_rating=maintenance_rating,
            comment=comment,
            business_name=business_name,
            display_name=display_name,
        )

        customer_id = self.db.create_customer(
            phone_hash=self.anonymizer.hash(draft.phone_number),
            display_id=self.anonymizer.display_identity(draft.phone_number),
            display_name=draft.display_name,
        )

        review_id = self.db.add_review(
            customer_id,
            overall_rating=draft.overall_rating,
            behavior_rating=draft.behavior_rating,
            payment_rating=draft.payment_rating,
            maintenance_rating=draft.maintenance_rating,
            reviewer_role=draft.reviewer_role,
            comment=draft.comment,
            business_name=draft.business_name,
        )

        self._recompute(customer_id, expected_minimum=1)
        logger.info(f"Review {review_id} stored for customer {customer_id}")
        return self.db.get_review(review_id)

    def get_review(self, review_id: int) -> Optional[Review]:
        return self.db.get_review(review_id)

    def list_reviews(
        self,
        customer_id: Optional[int] = None,
        business_name: Optional[str] = None,
    ) -> List[Review]:
        return self.db.get_reviews(customer_id=customer_id, business_name=business_name)

    def update_review(self, review_id: int, **fields) -> Review:
        """
        Apply a partial update and recompute the owner's aggregate.

        Raises:
            ValidationError: if a provided field is invalid.
            NotFoundError: if the review does not exist.
        """
        updates = validate_update(**fields)

        review = self.db.get_review(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")

        if updates and not self.db.update_review(review_id, **updates):
            raise NotFoundError(f"Review {review_id} not found")

        self._recompute(review.customer_id, expected_minimum=1)
        return self.db.get_review(review_id)

    def delete_review(self, review_id: int):
        """
        Delete a review and recompute the owner's aggregate.

        Raises:
            NotFoundError: if the review does not exist.
        """
        customer_id = self.db.delete_review(review_id)
        if customer_id is None:
            raise NotFoundError(f"Review {review_id} not found")

        self._recompute(customer_id)
        logger.info(f"Review {review_id} deleted for customer {customer_id}")

    # ── Sharing ────────────────────────────────────────────────────

    def share_review(self, review_id: int) -> PublishResult:
        """
        Generate anonymized content for a review and publish it.
        Publisher failures come back as a failed PublishResult; no retries.

        Raises:
            NotFoundError: if the review does not exist.
        """
        review = self.db.get_review(review_id)
        if review is None:
            raise NotFoundError(f"Review {review_id} not found")

        customer = self.db.get_customer(review.customer_id)
        redact = [customer.display_name] if customer and customer.display_name else []

        content = self.share_generator.generate(review, redact=redact)
        result = self.publisher.publish(content)

        if result.success:
            self.db.set_shared_url(review_id, result.url)
            logger.info(f"Review {review_id} shared to r/{content.channel}")
        else:
            logger.warning(f"Sharing review {review_id} failed: {result.error}")

        return result

    def post_metrics(self, permalink: str) -> Optional[PostMetrics]:
        return self.publisher.fetch_post_metrics(permalink)

    # ── Stats ──────────────────────────────────────────────────────

    def get_stats(self) -> dict:
        """Platform counts from the aggregate cache (stale entries refreshed first)."""
        self.refresh_aggregates(stale_only=True)
        return self.db.get_stats()
