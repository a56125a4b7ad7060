"""
Title Service - LLM-Generated Post Titles
==========================================

ARCHITECTURAL DECISION:
- Uses any OpenAI-compatible chat completions endpoint
- Returns None when no API key is set or the call fails in any way
- The caller owns the fallback title; this service never raises

EXTENSIBILITY:
- To use a different model: set LLM_MODEL
- To use OpenRouter or a local server: set LLM_API_URL
"""

import logging
import requests
from typing import List, Optional

from src.domain.ports import TitleGenerator

from ..config import LLMSettings, get_settings

logger = logging.getLogger(__name__)


class OpenAITitleService(TitleGenerator):
    """
    Catchy one-line titles for shared reviews.

    USAGE:
        service = OpenAITitleService()
        title = service.generate_title(1.0, ["Rude"], "Yelled at the cashier")
        # "Man Yells At Cashier Over Expired Coupon, Loses" or None

    FALLBACK BEHAVIOR:
    - If no API key: returns None
    - If API fails or times out: returns None
    - If response is empty: returns None
    """

    SYSTEM_PROMPT = (
        "You generate catchy, 1-sentence Reddit post titles for customer reviews. "
        "The user is a service worker describing an experience with a customer. "
        "Be funny and clickbaity. Do NOT exceed 120 characters, but do not cut off "
        "the sentence. Do NOT put quotes around it. Never include names, phone "
        "numbers or other personal details."
    )

    USER_TEMPLATE = "Rating: {rating}/5\nTags: {tags}\nComment: {comment}"

    def __init__(self, settings: Optional[LLMSettings] = None):
        """Initialize title service with settings."""
        settings = settings or get_settings().llm
        self._api_key = settings.api_key
        self._api_url = settings.api_url
        self._model = settings.model
        self._temperature = settings.temperature
        self._max_tokens = settings.max_tokens
        self._timeout = settings.timeout_seconds

        if not self._api_key:
            logger.warning(
                "No OPENAI_API_KEY set. "
                "Shared posts will use the fallback title."
            )

    def generate_title(self, rating: float, tags: List[str], comment: str) -> Optional[str]:
        """
        Ask the LLM for a title.

        Returns:
            Title text or None if unavailable.
        """
        if not self._api_key:
            return None

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self.SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": self.USER_TEMPLATE.format(
                        rating=f"{rating:g}",
                        tags=", ".join(tags),
                        comment=comment,
                    )
                },
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }

        try:
            response = requests.post(
                self._api_url,
                headers=headers,
                json=payload,
                timeout=self._timeout
            )
            response.raise_for_status()

            content = self._extract_response_content(response.json())
            if not content:
                logger.warning("LLM returned an empty title")
                return None

            logger.debug(f"LLM title: {content}")
            return content

        except requests.Timeout:
            logger.warning("LLM API timeout, using fallback title")
            return None

        except requests.RequestException as e:
            logger.warning(f"LLM API error: {e}, using fallback title")
            return None

        except ValueError as e:
            logger.warning(f"LLM API returned invalid JSON: {e}")
            return None

    def _extract_response_content(self, data: dict) -> str:
        """Extract text content from API response."""
        try:
            choices = data.get("choices", [])
            if choices:
                message = choices[0].get("message", {})
                return (message.get("content") or "").strip()
        except (AttributeError, KeyError, IndexError, TypeError):
            pass
        return ""
