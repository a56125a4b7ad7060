"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses
- Single source of truth for all configurable values

EXTENSIBILITY:
- To switch LLM provider: point LLM_API_URL at any OpenAI-compatible endpoint
- To post somewhere other than Reddit: add a Publisher and its settings group
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

from src.domain.profile import RECENT_REVIEW_LIMIT
from src.domain.scoring import FLAG_THRESHOLD
from src.domain.sharing import NEGATIVE_CHANNEL, POSITIVE_BOUNDARY, POSITIVE_CHANNEL

# Load .env file if present (development convenience)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ReputationSettings:
    """Aggregation, anonymization and sharing rules."""

    # Strictly below this mean overall rating a customer is flagged
    flag_threshold: float = field(default_factory=lambda: _env_float("FLAG_THRESHOLD", FLAG_THRESHOLD))

    recent_review_limit: int = RECENT_REVIEW_LIMIT

    # Ratings at or above this go to the positive channel
    share_positive_boundary: float = POSITIVE_BOUNDARY

    # Optional secret mixed into lookup keys (HMAC)
    phone_hash_pepper: str = field(default_factory=lambda: os.getenv("PHONE_HASH_PEPPER", ""))


@dataclass(frozen=True)
class LLMSettings:
    """OpenAI-compatible chat completion settings for post titles."""

    api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    api_url: str = field(
        default_factory=lambda: os.getenv("LLM_API_URL", "https://api.openai.com/v1/chat/completions")
    )
    model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", "gpt-4.1-nano"))

    # Titles should be playful, not deterministic
    temperature: float = 0.9
    max_tokens: int = 32
    timeout_seconds: int = 15


@dataclass(frozen=True)
class RedditSettings:
    """Reddit API credentials and target subreddits."""

    client_id: str = field(default_factory=lambda: os.getenv("REDDIT_CLIENT_ID", ""))
    client_secret: str = field(default_factory=lambda: os.getenv("REDDIT_CLIENT_SECRET", ""))
    username: str = field(default_factory=lambda: os.getenv("REDDIT_USERNAME", ""))
    password: str = field(default_factory=lambda: os.getenv("REDDIT_PASSWORD", ""))
    user_agent: str = "Welp:v1.0.0 (by /u/WelpApp)"

    positive_subreddit: str = field(
        default_factory=lambda: os.getenv("REDDIT_POSITIVE_SUBREDDIT", POSITIVE_CHANNEL)
    )
    negative_subreddit: str = field(
        default_factory=lambda: os.getenv("REDDIT_NEGATIVE_SUBREDDIT", NEGATIVE_CHANNEL)
    )

    timeout_seconds: int = 15

    # SAFETY: bounded back-off on HTTP 429
    max_rate_limit_retries: int = 3

    # Log posts instead of sending them
    dry_run: bool = field(default_factory=lambda: _env_flag("REDDIT_DRY_RUN"))

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret)


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from src.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.reputation.flag_threshold)
    """

    reputation: ReputationSettings = field(default_factory=ReputationSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)
    reddit: RedditSettings = field(default_factory=RedditSettings)

    database_file: Path = field(
        default_factory=lambda: Path(os.getenv("DATABASE_FILE", "welp.db"))
    )

    def validate(self) -> list[str]:
        """
        Validate settings and return list of warnings.
        Returns empty list if all settings are valid.
        """
        issues = []

        if not self.llm.api_key:
            issues.append(
                "WARNING: OPENAI_API_KEY not set. "
                "Shared posts will use the fallback title."
            )

        if not self.reddit.has_credentials and not self.reddit.dry_run:
            issues.append(
                "WARNING: REDDIT_CLIENT_ID / REDDIT_CLIENT_SECRET not set. "
                "Sharing will fail (set REDDIT_DRY_RUN=1 for local testing)."
            )

        if not self.reputation.phone_hash_pepper:
            issues.append(
                "WARNING: PHONE_HASH_PEPPER not set. "
                "Lookup keys are plain SHA-256 digests."
            )

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
