"""
Submission Validation - Materialize Review Input
=================================================

Single pre-step for every write. A submission leaves here with all four
rating dimensions filled in (unset ones default to the overall rating) and
a known reviewer role, or a ValidationError naming the bad field is raised.
Nothing is written before this passes.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from src.domain.anonymizer import PhoneAnonymizer
from src.domain.errors import ValidationError
from src.domain.models import ReviewerRole

MIN_RATING = 1.0
MAX_RATING = 5.0

DIMENSIONS = ("behavior_rating", "payment_rating", "maintenance_rating")
UPDATABLE_FIELDS = ("overall_rating",) + DIMENSIONS + ("reviewer_role", "comment", "business_name")


@dataclass(frozen=True)
class ReviewDraft:
    """A fully materialized, not yet persisted review submission."""
    phone_number: str
    overall_rating: float
    behavior_rating: float
    payment_rating: float
    maintenance_rating: float
    reviewer_role: ReviewerRole
    comment: str = ""
    business_name: str = ""
    display_name: str = ""


def is_set(value: Any) -> bool:
    """A rating counts as set unless it is missing or a number <= 0."""
    if value is None:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value > 0
    return True


def check_rating(field: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, "must be a number")
    rating = float(value)
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(field, f"must be between {MIN_RATING:g} and {MAX_RATING:g}")
    return rating


def check_role(value: Optional[str]) -> ReviewerRole:
    if not value:
        raise ValidationError("reviewer_role", "is required")
    role = ReviewerRole.parse(value)
    if role is None:
        allowed = ", ".join(r.value for r in ReviewerRole)
        raise ValidationError("reviewer_role", f"must be one of: {allowed}")
    return role


def validate_submission(
    phone_number: Optional[str],
    overall_rating: Optional[float],
    reviewer_role: Optional[str],
    behavior_rating: Optional[float] = None,
    payment_rating: Optional[float] = None,
    maintenance_rating: Optional[float] = None,
    comment: Optional[str] = None,
    business_name: Optional[str] = None,
    display_name: Optional[str] = None,
) -> ReviewDraft:
    """
    Validate a new review and fill in defaulted dimensions.

    Returns:
        ReviewDraft with normalized phone digits.

    Raises:
        ValidationError: on the first invalid or missing field.
    """
    if not phone_number:
        raise ValidationError("phone_number", "is required")
    digits = PhoneAnonymizer.normalize(phone_number)

    if not is_set(overall_rating):
        raise ValidationError("overall_rating", "is required")
    overall = check_rating("overall_rating", overall_rating)

    ratings = {}
    for field, value in zip(DIMENSIONS, (behavior_rating, payment_rating, maintenance_rating)):
        ratings[field] = check_rating(field, value) if is_set(value) else overall

    role = check_role(reviewer_role)

    return ReviewDraft(
        phone_number=digits,
        overall_rating=overall,
        reviewer_role=role,
        comment=(comment or "").strip(),
        business_name=(business_name or "").strip(),
        display_name=(display_name or "").strip(),
        **ratings,
    )


def validate_update(**fields) -> Dict[str, Any]:
    """
    Validate a partial review update.

    Unset ratings (None or <= 0) and None values are dropped, so they leave
    the stored value unchanged. Returns only the columns to write.
    """
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(sorted(unknown)[0], "cannot be updated")

    updates: Dict[str, Any] = {}

    for field in ("overall_rating",) + DIMENSIONS:
        value = fields.get(field)
        if is_set(value):
            updates[field] = check_rating(field, value)

    if fields.get("reviewer_role") is not None:
        updates["reviewer_role"] = check_role(fields["reviewer_role"])

    if fields.get("comment") is not None:
        updates["comment"] = fields["comment"].strip()

    if fields.get("business_name") is not None:
        updates["business_name"] = fields["business_name"].strip()

    return updates
