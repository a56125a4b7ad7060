"""
Phone Anonymizer - Lookup Keys and Display Identities
======================================================

Two independent, deterministic transforms of a phone number:

- hash():             one-way digest used as the customer lookup key.
- display_identity(): low-entropy "First I." handle shown to businesses.

The display identity is derived from the digit sum only, so many numbers
share the same handle. It is a memorable label, not an identifier.
"""

import hashlib
import hmac
import re

from .errors import ValidationError

PHONE_DIGITS = 10

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "David", "Lisa", "Chris", "Amy", "Tom", "Kate"]
LAST_INITIALS = [chr(c) for c in range(ord("A"), ord("Z") + 1)]

_NON_DIGITS = re.compile(r"\D")


class PhoneAnonymizer:
    """
    Usage:
        anonymizer = PhoneAnonymizer()
        key = anonymizer.hash("(555) 123-4567")       # 64 hex chars
        name = anonymizer.display_identity("5551234567")  # e.g. "Amy K."

    When a pepper is given the lookup key is an HMAC-SHA256 keyed with it,
    so keys are stable per deployment and cannot be recomputed without
    the pepper.
    """

    def __init__(self, pepper: str = ""):
        self._pepper = pepper.encode() if pepper else b""

    @staticmethod
    def normalize(phone_number: str) -> str:
        """Strip everything but digits. Raises ValidationError unless 10 remain."""
        digits = _NON_DIGITS.sub("", phone_number or "")
        if len(digits) != PHONE_DIGITS:
            raise ValidationError(
                "phone_number",
                f"must contain exactly {PHONE_DIGITS} digits (got {len(digits)})"
            )
        return digits

    def hash(self, phone_number: str) -> str:
        digits = self.normalize(phone_number)
        if self._pepper:
            return hmac.new(self._pepper, digits.encode(), hashlib.sha256).hexdigest()
        return hashlib.sha256(digits.encode()).hexdigest()

    def display_identity(self, phone_number: str) -> str:
        digits = self.normalize(phone_number)
        digit_sum = sum(int(d) for d in digits)
        first = FIRST_NAMES[digit_sum % len(FIRST_NAMES)]
        initial = LAST_INITIALS[digit_sum % len(LAST_INITIALS)]
        return f"{first} {initial}."
