"""
Share Content Generator - Anonymized Posts from a Single Review
================================================================

ARCHITECTURAL DECISION:
- Routing is a fixed polarity rule on the overall rating: a review at or
  above the boundary goes to the positive channel, everything else to
  the negative one.
- Each post gets a fresh random actor label ("Secret Patron #42"). It is
  never the customer's display identity, so a post cannot be matched to a
  lookup-able profile.
- Title generation is optional. Any failure falls back to the fixed
  "{rating}/5 Customer Review" template and is never raised.

PRIVACY:
- Phone-number-like digit runs in the comment are redacted.
- Extra strings (e.g. a stored customer name) can be redacted via `redact`.
- The reviewer is only described by role category.
"""

import logging
import math
import random
import re
from typing import Iterable, Optional

from .models import Review, ShareContent
from .ports import TitleGenerator
from .tags import infer_tags

logger = logging.getLogger(__name__)

POSITIVE_BOUNDARY = 3.5
POSITIVE_CHANNEL = "CustomerFromHeaven"
NEGATIVE_CHANNEL = "CustomerFromHell"

POSITIVE_FLAIR_MIN = 4.5
NEGATIVE_FLAIR_MAX = 1.5

MAX_TITLE_LENGTH = 300
FALLBACK_TITLE_TEMPLATE = "{rating}/5 Customer Review"

ACTOR_ADJECTIVES = ["Mysterious", "Anonymous", "Unknown", "Random", "Secret"]
ACTOR_NOUNS = ["Customer", "Person", "Individual", "Patron", "Client"]

REDACTED = "[redacted]"

# 10+ digits, optionally split by spaces, dots, dashes, parentheses or a leading +
_PHONE_LIKE = re.compile(r"\+?\(?\d(?:[\s.\-()]*\d){9,}")


def format_rating(rating: float) -> str:
    """4.5 -> '4.5', 5.0 -> '5'."""
    return f"{rating:g}"


def fallback_title(rating: float) -> str:
    return FALLBACK_TITLE_TEMPLATE.format(rating=format_rating(rating))


def redact_identifiers(text: str, extra: Iterable[str] = ()) -> str:
    """Remove phone-number-like sequences and any of the given strings as whole words."""
    cleaned = _PHONE_LIKE.sub(REDACTED, text or "")
    for value in extra:
        value = (value or "").strip()
        if value:
            pattern = rf"(?<!\w){re.escape(value)}(?!\w)"
            cleaned = re.sub(pattern, REDACTED, cleaned, flags=re.IGNORECASE)
    return cleaned


class ShareContentGenerator:
    """
    Usage:
        generator = ShareContentGenerator(title_generator=OpenAITitleService())
        content = generator.generate(review)
        publisher.publish(content)
    """

    def __init__(
        self,
        title_generator: Optional[TitleGenerator] = None,
        positive_channel: str = POSITIVE_CHANNEL,
        negative_channel: str = NEGATIVE_CHANNEL,
        positive_boundary: float = POSITIVE_BOUNDARY,
        rng: Optional[random.Random] = None
    ):
        self._title_generator = title_generator
        self.positive_channel = positive_channel
        self.negative_channel = negative_channel
        self.positive_boundary = positive_boundary
        self._rng = rng or random.SystemRandom()

    def route(self, rating: float) -> str:
        """Pick the target channel for a rating."""
        if rating >= self.positive_boundary:
            return self.positive_channel
        return self.negative_channel

    @staticmethod
    def flair_for(rating: float) -> str:
        if rating >= POSITIVE_FLAIR_MIN:
            return "Positive"
        if rating <= NEGATIVE_FLAIR_MAX:
            return "Negative"
        return "Neutral"

    def anonymous_actor(self) -> str:
        adjective = self._rng.choice(ACTOR_ADJECTIVES)
        noun = self._rng.choice(ACTOR_NOUNS)
        number = self._rng.randint(1, 999)
        return f"{adjective} {noun} #{number}"

    def generate(self, review: Review, redact: Iterable[str] = ()) -> ShareContent:
        """
        Build the post for one review.

        Args:
            review: Review to share.
            redact: Extra strings to strip from the comment (e.g. a stored name).

        Returns:
            ShareContent with title, body, channel, flair and actor label.
        """
        rating = review.overall_rating
        comment = redact_identifiers(review.comment, redact).strip()
        tags = infer_tags(rating, comment)
        actor = self.anonymous_actor()

        title = self._title(rating, tags, comment)
        body = self._body(rating, comment, tags, actor, review.reviewer_role.label)

        return ShareContent(
            title=title,
            body=body,
            channel=self.route(rating),
            flair=self.flair_for(rating),
            actor_label=actor,
        )

    def _title(self, rating: float, tags, comment: str) -> str:
        if self._title_generator is None:
            return fallback_title(rating)

        try:
            title = self._title_generator.generate_title(rating, list(tags), comment)
        except Exception as e:
            logger.warning(f"Title generation failed: {e}, using fallback title")
            return fallback_title(rating)

        title = (title or "").strip().strip('"').strip()
        if not title or len(title) > MAX_TITLE_LENGTH:
            logger.debug("No usable generated title, using fallback title")
            return fallback_title(rating)

        return title

    @staticmethod
    def _body(rating: float, comment: str, tags, actor: str, role: str) -> str:
        stars = "⭐" * math.floor(rating + 0.5)
        text = f"{stars} ({format_rating(rating)}/5)\n\n"
        text += f"**Customer:** {actor}\n\n"
        if comment:
            text += f"**Story:**\n{comment}\n\n"
        if tags:
            text += f"**Tags:** {', '.join(tags)}\n\n"
        text += f"*Reviewer role:* {role}\n\n"
        text += "*Posted via Welp, the customer rating platform.*"
        return text
