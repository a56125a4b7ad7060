"""
Shared fixtures: a temporary database, fake collaborators and a wired service.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from src.application import ReputationService
from src.domain.anonymizer import PhoneAnonymizer
from src.domain.models import PostMetrics, PublishResult, Review, ReviewerRole, ShareContent
from src.domain.ports import Publisher, TitleGenerator
from src.domain.profile import ReputationProfileBuilder
from src.domain.scoring import ScoreAggregator
from src.domain.sharing import ShareContentGenerator
from src.infrastructure.persistence import Database

BASE_TIME = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)


class FakeTitleGenerator(TitleGenerator):
    """Returns a fixed title, or raises the given error."""

    def __init__(self, title: Optional[str] = None, error: Optional[Exception] = None):
        self.title = title
        self.error = error
        self.calls = []

    def generate_title(self, rating, tags, comment):
        self.calls.append((rating, list(tags), comment))
        if self.error:
            raise self.error
        return self.title


class FakePublisher(Publisher):
    """Records published content and returns a configurable result."""

    def __init__(self, result: Optional[PublishResult] = None):
        self.result = result or PublishResult.ok("https://reddit.com/r/test/comments/abc123/post")
        self.published: List[ShareContent] = []

    def publish(self, content: ShareContent) -> PublishResult:
        self.published.append(content)
        return self.result

    def fetch_post_metrics(self, permalink: str) -> Optional[PostMetrics]:
        return PostMetrics(score=42, num_comments=7)


@pytest.fixture
def make_review():
    """Factory for in-memory reviews; unset dimensions copy the overall rating."""

    def _make(
        id: int = 1,
        overall: float = 5.0,
        behavior: Optional[float] = None,
        payment: Optional[float] = None,
        maintenance: Optional[float] = None,
        comment: str = "",
        created_at: Optional[datetime] = None,
        customer_id: int = 1,
        role: ReviewerRole = ReviewerRole.SERVER,
        business_name: str = "Bistro",
    ) -> Review:
        return Review(
            id=id,
            customer_id=customer_id,
            overall_rating=overall,
            behavior_rating=overall if behavior is None else behavior,
            payment_rating=overall if payment is None else payment,
            maintenance_rating=overall if maintenance is None else maintenance,
            reviewer_role=role,
            comment=comment,
            business_name=business_name,
            created_at=created_at or BASE_TIME + timedelta(minutes=id),
        )

    return _make


@pytest.fixture
def db(tmp_path):
    database = Database(str(tmp_path / "test_welp.db"))
    database.init()
    return database


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def title_generator():
    return FakeTitleGenerator(title=None)


@pytest.fixture
def service(db, publisher, title_generator):
    aggregator = ScoreAggregator(flag_threshold=2.5)
    return ReputationService(
        db=db,
        anonymizer=PhoneAnonymizer(),
        aggregator=aggregator,
        builder=ReputationProfileBuilder(aggregator=aggregator),
        share_generator=ShareContentGenerator(
            title_generator=title_generator,
            rng=random.Random(7),
        ),
        publisher=publisher,
    )
