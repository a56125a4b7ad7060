"""
Reddit Publisher - Posting Shared Reviews
==========================================

Implements the Publisher port against the Reddit OAuth API.

USAGE:
    # Live posting
    publisher = RedditPublisher()
    result = publisher.publish(content)

    # Local development (no credentials needed)
    publisher = DryRunPublisher()
    result = publisher.publish(content)   # always succeeds with a mock URL

SAFETY:
- Every HTTP call has a timeout
- HTTP 429 is retried at most `max_rate_limit_retries` times with
  exponential back-off; nothing else is retried
- publish() never raises; failures come back as PublishResult.failed()
"""

import logging
import random
import re
import time
from typing import Callable, Optional

import requests

from src.domain.errors import CollaboratorError
from src.domain.models import PostMetrics, PublishResult, ShareContent
from src.domain.ports import Publisher

from ..config import RedditSettings, get_settings

logger = logging.getLogger(__name__)

TOKEN_URL = "https://www.reddit.com/api/v1/access_token"
SUBMIT_URL = "https://oauth.reddit.com/api/submit"
PUBLIC_URL = "https://www.reddit.com"

# Reddit tokens live for an hour; refresh a bit earlier
TOKEN_TTL_SECONDS = 50 * 60


class RedditPublisher(Publisher):
    """Self-posts ShareContent to the subreddit named by its channel."""

    def __init__(
        self,
        settings: Optional[RedditSettings] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._settings = settings or get_settings().reddit
        self._session = session or requests.Session()
        self._sleep = sleep
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    # ── Auth ───────────────────────────────────────────────────────

    def _get_access_token(self) -> str:
        """Fetch (or reuse) an OAuth token. Raises CollaboratorError on failure."""
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        if self._settings.username and self._settings.password:
            # Script app - resource-owner password grant
            data = {
                "grant_type": "password",
                "username": self._settings.username,
                "password": self._settings.password,
                "scope": "submit flair",
            }
        else:
            # App-only, may not be allowed to submit
            data = {"grant_type": "client_credentials", "scope": "submit"}

        try:
            response = self._session.post(
                TOKEN_URL,
                auth=(self._settings.client_id, self._settings.client_secret),
                data=data,
                headers={"User-Agent": self._settings.user_agent},
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as e:
            raise CollaboratorError(f"Reddit auth request failed: {e}") from e

        if not response.ok:
            raise CollaboratorError(f"Reddit auth failed: {response.status_code}")

        token = response.json().get("access_token")
        if not token:
            raise CollaboratorError("Reddit auth response had no access_token")

        self._access_token = token
        self._token_expires_at = time.monotonic() + TOKEN_TTL_SECONDS
        return token

    # ── Posting ────────────────────────────────────────────────────

    def _submit(self, token: str, form: dict) -> requests.Response:
        """POST the submission, backing off on rate limits."""
        retry = 0
        while True:
            response = self._session.post(
                SUBMIT_URL,
                data=form,
                headers={
                    "Authorization": f"Bearer {token}",
                    "User-Agent": self._settings.user_agent,
                },
                timeout=self._settings.timeout_seconds,
            )
            if response.status_code != 429 or retry >= self._settings.max_rate_limit_retries:
                return response

            wait = (2 ** retry) + random.uniform(0, 0.5)
            logger.warning(f"Reddit rate limit hit, retrying in {wait:.1f}s")
            self._sleep(wait)
            retry += 1

    def publish(self, content: ShareContent) -> PublishResult:
        """Post content. Returns success with the post URL, or a failure."""
        try:
            if not self._settings.has_credentials:
                raise CollaboratorError("Reddit API credentials not configured")

            token = self._get_access_token()

            form = {
                "api_type": "json",
                "kind": "self",
                "sr": content.channel,
                "title": content.title,
                "text": content.body,
                "resubmit": "true",
            }
            if content.flair:
                form["flair_text"] = content.flair

            response = self._submit(token, form)
            if not response.ok:
                raise CollaboratorError(f"Reddit API error: {response.status_code}")

            data = response.json().get("json", {})
            errors = data.get("errors") or []
            if errors:
                raise CollaboratorError(f"Reddit error: {errors[0][1]}")

            url = data.get("data", {}).get("url", "")
            logger.info(f"Posted to r/{content.channel}: {url}")
            return PublishResult.ok(url)

        except CollaboratorError as e:
            logger.warning(f"Reddit publish failed: {e}")
            return PublishResult.failed(str(e))

        except (requests.RequestException, ValueError, AttributeError, IndexError, TypeError) as e:
            logger.warning(f"Reddit publish failed: {e}")
            return PublishResult.failed(f"Reddit request failed: {e}")

    # ── Metrics ────────────────────────────────────────────────────

    def fetch_post_metrics(self, permalink: str) -> Optional[PostMetrics]:
        """Score and comment count from the public JSON view of a post."""
        permalink = permalink.replace(PUBLIC_URL, "").rstrip("/")
        try:
            response = self._session.get(
                f"{PUBLIC_URL}{permalink}.json",
                headers={"User-Agent": self._settings.user_agent},
                timeout=self._settings.timeout_seconds,
            )
            response.raise_for_status()
            post = response.json()[0]["data"]["children"][0]["data"]
            return PostMetrics(score=int(post["score"]), num_comments=int(post["num_comments"]))

        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Could not fetch metrics for {permalink}: {e}")
            return None


class DryRunPublisher(Publisher):
    """
    Logs posts instead of sending them.
    Returns a deterministic mock URL so the rest of the flow can be exercised.
    """

    def publish(self, content: ShareContent) -> PublishResult:
        slug = re.sub(r"[^a-z0-9]+", "_", content.title.lower()).strip("_")[:60]
        url = f"{PUBLIC_URL}/r/{content.channel}/comments/dryrun/{slug}"
        logger.info(f"[dry run] Would post to r/{content.channel}: {content.title}")
        return PublishResult.ok(url)

    def fetch_post_metrics(self, permalink: str) -> Optional[PostMetrics]:
        return PostMetrics(score=0, num_comments=0)
