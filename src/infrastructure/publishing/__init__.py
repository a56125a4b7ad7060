from .reddit_publisher import RedditPublisher, DryRunPublisher

__all__ = ["RedditPublisher", "DryRunPublisher"]
