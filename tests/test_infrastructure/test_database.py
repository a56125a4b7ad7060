"""
Tests for the SQLite repository.
"""

import pytest

from src.domain.models import AggregateScores, AggregateState, ReviewerRole
from src.infrastructure.persistence import Database


def add(db, customer_id, overall=4.0, **kwargs):
    kwargs.setdefault("reviewer_role", ReviewerRole.SERVER)
    return db.add_review(
        customer_id,
        overall_rating=overall,
        behavior_rating=overall,
        payment_rating=overall,
        maintenance_rating=overall,
        **kwargs,
    )


def save_current(db, customer_id, scores):
    assert db.save_aggregate(customer_id, scores, db.get_aggregate_version(customer_id))


@pytest.fixture
def customer_id(db):
    return db.create_customer("hash-1", display_id="Amy K.")


def test_init_is_idempotent(tmp_path):
    path = str(tmp_path / "twice.db")
    Database(path).init()
    db = Database(path)
    db.init()
    assert db.get_stats()["customers"] == 0


def test_every_review_write_bumps_aggregate_version(db, customer_id):
    assert db.get_aggregate_version(customer_id) == 0

    review_id = add(db, customer_id)
    db.update_review(review_id, comment="edited")
    db.delete_review(review_id)

    assert db.get_aggregate_version(customer_id) == 3
    assert db.get_aggregate_version(999) is None


def test_save_against_outdated_version_is_rejected(db, customer_id):
    version = db.get_aggregate_version(customer_id)
    add(db, customer_id, overall=1.0)

    saved = db.save_aggregate(customer_id, AggregateScores(overall=5.0, total_reviews=1), version)

    assert saved is False
    customer = db.get_customer(customer_id)
    assert customer.aggregate_state is AggregateState.STALE
    assert customer.overall_score == 0.0

    save_current(db, customer_id, AggregateScores(overall=1.0, total_reviews=1))
    assert db.get_customer(customer_id).aggregate_state is AggregateState.CURRENT


def test_create_customer_is_find_or_create(db):
    first = db.create_customer("hash-1", display_id="Amy K.")
    second = db.create_customer("hash-1", display_id="Someone Else")

    assert first == second
    customer = db.get_customer(first)
    assert customer.display_id == "Amy K."
    assert customer.aggregate_state is AggregateState.STALE
    assert customer.total_reviews == 0


def test_get_customer_by_phone_hash(db, customer_id):
    assert db.get_customer_by_phone_hash("hash-1").id == customer_id
    assert db.get_customer_by_phone_hash("missing") is None
    assert db.get_customer(999) is None


def test_add_review_marks_owner_stale(db, customer_id):
    save_current(db, customer_id, AggregateScores())
    assert db.get_customer(customer_id).aggregate_state is AggregateState.CURRENT

    review_id = add(db, customer_id, comment="ok", business_name="Bistro")

    assert db.get_customer(customer_id).aggregate_state is AggregateState.STALE
    review = db.get_review(review_id)
    assert review.customer_id == customer_id
    assert review.reviewer_role is ReviewerRole.SERVER
    assert review.business_name == "Bistro"
    assert review.created_at is not None
    assert review.created_at.tzinfo is not None


def test_save_aggregate_round_trips(db, customer_id, make_review):
    last = make_review().created_at
    scores = AggregateScores(
        overall=3.33, behavior=3.0, payment=2.5, maintenance=4.0,
        total_reviews=3, is_flagged=False, last_review_at=last,
    )

    save_current(db, customer_id, scores)

    customer = db.get_customer(customer_id)
    assert customer.overall_score == 3.33
    assert customer.payment_score == 2.5
    assert customer.total_reviews == 3
    assert customer.last_review_at == last
    assert customer.aggregate_state is AggregateState.CURRENT


def test_customer_ids_stale_only(db, customer_id):
    other = db.create_customer("hash-2", display_id="Tom B.")
    save_current(db, other, AggregateScores())

    assert db.get_customer_ids() == [customer_id, other]
    assert db.get_customer_ids(stale_only=True) == [customer_id]


def test_reviews_newest_first_with_id_tiebreak(db, customer_id):
    ids = [add(db, customer_id) for _ in range(3)]
    assert [r.id for r in db.get_reviews_for_customer(customer_id)] == list(reversed(ids))


def test_get_reviews_filters(db, customer_id):
    other = db.create_customer("hash-2", display_id="Tom B.")
    add(db, customer_id, business_name="Bistro")
    add(db, other, business_name="Bistro")
    add(db, other, business_name="Diner")

    assert len(db.get_reviews()) == 3
    assert len(db.get_reviews(business_name="Bistro")) == 2
    assert len(db.get_reviews(customer_id=other, business_name="Diner")) == 1


def test_update_review(db, customer_id):
    review_id = add(db, customer_id)
    save_current(db, customer_id, AggregateScores())

    assert db.update_review(review_id, overall_rating=2.0, reviewer_role=ReviewerRole.OWNER) is True

    review = db.get_review(review_id)
    assert review.overall_rating == 2.0
    assert review.reviewer_role is ReviewerRole.OWNER
    assert review.updated_at >= review.created_at
    assert db.get_customer(customer_id).aggregate_state is AggregateState.STALE


def test_update_missing_review(db):
    assert db.update_review(404, comment="x") is False


def test_update_rejects_unknown_columns(db, customer_id):
    review_id = add(db, customer_id)
    with pytest.raises(ValueError):
        db.update_review(review_id, customer_id=2)


def test_delete_review(db, customer_id):
    review_id = add(db, customer_id)
    save_current(db, customer_id, AggregateScores())

    assert db.delete_review(review_id) == customer_id
    assert db.get_review(review_id) is None
    assert db.get_customer(customer_id).aggregate_state is AggregateState.STALE
    assert db.delete_review(review_id) is None


def test_set_shared_url_leaves_aggregate_alone(db, customer_id):
    review_id = add(db, customer_id)
    save_current(db, customer_id, AggregateScores())

    db.set_shared_url(review_id, "https://reddit.com/r/x/comments/1/y")

    assert db.get_review(review_id).shared_url == "https://reddit.com/r/x/comments/1/y"
    assert db.get_customer(customer_id).aggregate_state is AggregateState.CURRENT


def test_stats_on_empty_database(tmp_path):
    db = Database(str(tmp_path / "empty.db"))
    db.init()
    assert db.get_stats() == {
        "customers": 0,
        "reviews": 0,
        "flagged_customers": 0,
        "stale_aggregates": 0,
        "shared_reviews": 0,
        "flagged_rate": 0,
    }
