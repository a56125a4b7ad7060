"""
Tag Inferencer - Descriptive Labels from Rating + Comment
==========================================================

Deterministic keyword heuristic; it is allowed to miss. Ratings are split
into three bands:

- high (>= 4): look for praise keywords, else "Great Customer"
- low  (<= 2): look for complaint keywords, else "Difficult Customer"
- otherwise:   "Average"
"""

from typing import List, Optional, Tuple

HIGH_BAND_MIN = 4
LOW_BAND_MAX = 2

# (label, keywords) in scan order
POSITIVE_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Generous Tipper", ("tip", "generous")),
    ("Polite", ("polite", "pleasant")),
    ("Patient", ("understanding", "patient")),
]

NEGATIVE_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    ("Rude", ("rude", "difficult")),
    ("Messy", ("mess", "dirty")),
    ("Dispute", ("dispute", "refund")),
]

POSITIVE_FALLBACK = "Great Customer"
NEGATIVE_FALLBACK = "Difficult Customer"
AVERAGE_TAG = "Average"


def _scan(text: str, categories: List[Tuple[str, Tuple[str, ...]]]) -> List[str]:
    return [
        label for label, keywords in categories
        if any(kw in text for kw in keywords)
    ]


def infer_tags(rating: float, comment: Optional[str]) -> List[str]:
    """
    Derive labels for a single review.

    Args:
        rating: Overall rating of the review.
        comment: Free text, may be empty or None.

    Returns:
        Labels in stable scan order, each at most once.
    """
    lower_comment = (comment or "").lower()

    if rating >= HIGH_BAND_MIN:
        return _scan(lower_comment, POSITIVE_CATEGORIES) or [POSITIVE_FALLBACK]

    if rating <= LOW_BAND_MAX:
        return _scan(lower_comment, NEGATIVE_CATEGORIES) or [NEGATIVE_FALLBACK]

    return [AVERAGE_TAG]
