"""
Unit tests for the tag inferencer.
"""

import pytest

from src.domain.tags import infer_tags


def test_high_rating_tipper_is_stable():
    """Same inputs, same tags."""
    first = infer_tags(4.5, "Great tipper!")
    assert first == ["Generous Tipper"]
    assert infer_tags(4.5, "Great tipper!") == first


def test_low_rating_empty_comment_gets_fallback():
    assert infer_tags(1, "") == ["Difficult Customer"]


def test_high_rating_without_keywords_gets_fallback():
    assert infer_tags(5, "Came in, ordered, left.") == ["Great Customer"]


def test_multiple_positive_categories_in_scan_order():
    tags = infer_tags(5, "Patient and polite, and a GENEROUS tip")
    assert tags == ["Generous Tipper", "Polite", "Patient"]


def test_multiple_negative_categories_in_scan_order():
    tags = infer_tags(1.5, "Demanded a refund, rude to staff, left a huge mess")
    assert tags == ["Rude", "Messy", "Dispute"]


def test_each_label_at_most_once():
    tags = infer_tags(2, "rude rude rude and difficult")
    assert tags == ["Rude"]


@pytest.mark.parametrize("rating", [2.1, 3, 3.9])
def test_mid_band_is_average(rating):
    assert infer_tags(rating, "rude but tipped well") == ["Average"]


def test_band_edges():
    """4 is high band, 2 is low band."""
    assert infer_tags(4, "") == ["Great Customer"]
    assert infer_tags(2, "") == ["Difficult Customer"]


def test_none_comment_does_not_raise():
    assert infer_tags(4, None) == ["Great Customer"]
