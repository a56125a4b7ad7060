# Domain Layer
# ============
# Pure business logic with no external service dependencies:
# - anonymizer: phone number -> lookup key / display identity
# - tags:       rating + comment -> descriptive labels
# - scoring:    review set -> aggregate scores + flag decision
# - profile:    customer + reviews -> reputation profile
# - sharing:    review -> anonymized, channel-routed post
# - ports:      interfaces for the title generator and publisher

from .anonymizer import PhoneAnonymizer
from .errors import CollaboratorError, NotFoundError, ReputationError, ValidationError
from .models import (
    AggregateScores,
    AggregateState,
    Customer,
    PostMetrics,
    PublishResult,
    RecentReview,
    ReputationProfile,
    Review,
    ReviewerRole,
    ShareContent,
)
from .ports import Publisher, TitleGenerator
from .profile import ReputationProfileBuilder
from .scoring import FLAG_THRESHOLD, ScoreAggregator
from .sharing import ShareContentGenerator
from .tags import infer_tags
