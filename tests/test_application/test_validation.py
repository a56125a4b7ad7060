"""
Unit tests for submission validation.
"""

import pytest

from src.application.validation import validate_submission, validate_update
from src.domain.errors import ValidationError
from src.domain.models import ReviewerRole


def submit(**overrides):
    fields = dict(phone_number="555-123-4567", overall_rating=4, reviewer_role="server")
    fields.update(overrides)
    return validate_submission(**fields)


def test_defaults_unset_dimensions_to_overall():
    draft = submit(overall_rating=3, behavior_rating=None, payment_rating=0, maintenance_rating=5)

    assert draft.behavior_rating == 3.0
    assert draft.payment_rating == 3.0
    assert draft.maintenance_rating == 5.0


def test_normalizes_fields():
    draft = submit(comment="  nice  ", business_name=" Bistro ", display_name=" ", reviewer_role="Manager")

    assert draft.phone_number == "5551234567"
    assert draft.comment == "nice"
    assert draft.business_name == "Bistro"
    assert draft.display_name == ""
    assert draft.reviewer_role is ReviewerRole.MANAGER


def test_fractional_ratings_allowed():
    assert submit(overall_rating=4.5).overall_rating == 4.5


@pytest.mark.parametrize("overrides,field", [
    ({"phone_number": None}, "phone_number"),
    ({"phone_number": "12345"}, "phone_number"),
    ({"overall_rating": None}, "overall_rating"),
    ({"overall_rating": 0}, "overall_rating"),
    ({"overall_rating": 6}, "overall_rating"),
    ({"overall_rating": 0.5}, "overall_rating"),
    ({"behavior_rating": 7}, "behavior_rating"),
    ({"maintenance_rating": "five"}, "maintenance_rating"),
    ({"reviewer_role": None}, "reviewer_role"),
    ({"reviewer_role": "chef"}, "reviewer_role"),
])
def test_rejects_invalid_submissions(overrides, field):
    with pytest.raises(ValidationError) as exc:
        submit(**overrides)
    assert exc.value.field == field


def test_update_keeps_only_set_fields():
    updates = validate_update(
        overall_rating=2, behavior_rating=None, payment_rating=0,
        comment=" edited ", reviewer_role=None,
    )
    assert updates == {"overall_rating": 2.0, "comment": "edited"}


def test_update_parses_role():
    assert validate_update(reviewer_role="CASHIER") == {"reviewer_role": ReviewerRole.CASHIER}


def test_update_rejects_out_of_range():
    with pytest.raises(ValidationError) as exc:
        validate_update(payment_rating=5.5)
    assert exc.value.field == "payment_rating"


def test_update_rejects_unknown_fields():
    with pytest.raises(ValidationError) as exc:
        validate_update(customer_id=3)
    assert exc.value.field == "customer_id"
