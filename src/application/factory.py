"""
Service wiring from Settings.

Collaborators are chosen here once; everything below receives them through
constructors.
"""

import logging
from typing import Optional

from src.domain.anonymizer import PhoneAnonymizer
from src.domain.ports import Publisher, TitleGenerator
from src.domain.profile import ReputationProfileBuilder
from src.domain.scoring import ScoreAggregator
from src.domain.sharing import ShareContentGenerator
from src.infrastructure.config import Settings, get_settings
from src.infrastructure.llm import OpenAITitleService
from src.infrastructure.persistence import Database
from src.infrastructure.publishing import DryRunPublisher, RedditPublisher

from .reputation_service import ReputationService

logger = logging.getLogger(__name__)


def build_service(
    settings: Optional[Settings] = None,
    db: Optional[Database] = None,
    title_generator: Optional[TitleGenerator] = None,
    publisher: Optional[Publisher] = None,
) -> ReputationService:
    """Build a ReputationService. Any collaborator can be overridden."""
    settings = settings or get_settings()

    for issue in settings.validate():
        logger.warning(issue)

    if db is None:
        db = Database(str(settings.database_file))
        db.init()

    if title_generator is None:
        title_generator = OpenAITitleService(settings.llm)

    if publisher is None:
        publisher = DryRunPublisher() if settings.reddit.dry_run else RedditPublisher(settings.reddit)

    aggregator = ScoreAggregator(flag_threshold=settings.reputation.flag_threshold)

    return ReputationService(
        db=db,
        anonymizer=PhoneAnonymizer(pepper=settings.reputation.phone_hash_pepper),
        aggregator=aggregator,
        builder=ReputationProfileBuilder(
            aggregator=aggregator,
            recent_limit=settings.reputation.recent_review_limit,
        ),
        share_generator=ShareContentGenerator(
            title_generator=title_generator,
            positive_channel=settings.reddit.positive_subreddit,
            negative_channel=settings.reddit.negative_subreddit,
            positive_boundary=settings.reputation.share_positive_boundary,
        ),
        publisher=publisher,
    )
