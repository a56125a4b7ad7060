"""
Collaborator Ports - Interfaces for External Services
======================================================

The core never constructs network clients itself. Implementations are
passed in through constructors so tests can swap in deterministic fakes.

USAGE:
    publisher = RedditPublisher(settings.reddit)
    result = publisher.publish(content)
    if not result.success:
        print(result.error)
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .models import PostMetrics, PublishResult, ShareContent


class TitleGenerator(ABC):
    """
    Short-text generation service used for catchy post titles.
    Must tolerate missing credentials by returning None.
    """

    @abstractmethod
    def generate_title(self, rating: float, tags: List[str], comment: str) -> Optional[str]:
        """Return a one-line title, or None if no title could be produced."""
        ...


class Publisher(ABC):
    """
    Third-party network that accepts ShareContent.
    Implementations must report failures through PublishResult, never raise.
    """

    @abstractmethod
    def publish(self, content: ShareContent) -> PublishResult:
        """Publish content. Returns success with a URL or failure with an error."""
        ...

    def fetch_post_metrics(self, permalink: str) -> Optional[PostMetrics]:
        """Engagement numbers for a published post. None if unsupported."""
        return None
