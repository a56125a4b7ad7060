"""
Tests for RedditPublisher and DryRunPublisher.

The HTTP session is a MagicMock and sleep is recorded, so nothing leaves
the process and back-off is instant.
"""

from unittest.mock import MagicMock

import pytest
import requests

from src.domain.models import ShareContent
from src.infrastructure.config import RedditSettings
from src.infrastructure.publishing import DryRunPublisher, RedditPublisher
from src.infrastructure.publishing.reddit_publisher import SUBMIT_URL, TOKEN_URL


def http_response(status=200, payload=None):
    response = MagicMock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = payload if payload is not None else {}
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(str(status))
    return response


TOKEN_OK = http_response(payload={"access_token": "tok"})
POSTED = http_response(payload={"json": {"errors": [], "data": {"url": "https://www.reddit.com/r/x/comments/1/y/"}}})


@pytest.fixture
def content():
    return ShareContent(
        title="Customer Tips In Gold Coins",
        body="⭐⭐⭐⭐⭐ (5/5)",
        channel="CustomerFromHeaven",
        flair="Positive",
        actor_label="Secret Patron #12",
    )


@pytest.fixture
def settings():
    return RedditSettings(
        client_id="id", client_secret="secret", username="bot", password="pw",
        positive_subreddit="CustomerFromHeaven", negative_subreddit="CustomerFromHell",
        dry_run=False,
    )


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def publisher(settings, session, sleeps):
    return RedditPublisher(settings=settings, session=session, sleep=sleeps.append)


def test_publish_success(publisher, session, content):
    session.post.side_effect = [TOKEN_OK, POSTED]

    result = publisher.publish(content)

    assert result.success is True
    assert result.url == "https://www.reddit.com/r/x/comments/1/y/"

    token_call, submit_call = session.post.call_args_list
    assert token_call.args[0] == TOKEN_URL
    assert token_call.kwargs["auth"] == ("id", "secret")
    assert token_call.kwargs["data"]["grant_type"] == "password"

    assert submit_call.args[0] == SUBMIT_URL
    form = submit_call.kwargs["data"]
    assert form["sr"] == "CustomerFromHeaven"
    assert form["kind"] == "self"
    assert form["title"] == content.title
    assert form["flair_text"] == "Positive"
    assert submit_call.kwargs["headers"]["Authorization"] == "Bearer tok"


def test_token_is_reused(publisher, session, content):
    session.post.side_effect = [TOKEN_OK, POSTED, POSTED]

    publisher.publish(content)
    publisher.publish(content)

    assert session.post.call_count == 3


def test_client_credentials_without_user(session, content):
    publisher = RedditPublisher(
        settings=RedditSettings(client_id="id", client_secret="secret", username="", password=""),
        session=session,
    )
    session.post.side_effect = [TOKEN_OK, POSTED]

    publisher.publish(content)

    assert session.post.call_args_list[0].kwargs["data"]["grant_type"] == "client_credentials"


def test_missing_credentials_fail_without_http(session, content):
    publisher = RedditPublisher(
        settings=RedditSettings(client_id="", client_secret=""), session=session
    )

    result = publisher.publish(content)

    assert result.success is False
    assert result.error == "Reddit API credentials not configured"
    session.post.assert_not_called()


def test_auth_failure(publisher, session, content):
    session.post.return_value = http_response(401)

    result = publisher.publish(content)

    assert result.success is False
    assert result.error == "Reddit auth failed: 401"


def test_submit_http_error(publisher, session, content):
    session.post.side_effect = [TOKEN_OK, http_response(500)]

    result = publisher.publish(content)

    assert result.error == "Reddit API error: 500"


def test_reddit_reported_error(publisher, session, content):
    rejected = http_response(payload={"json": {"errors": [["SUBREDDIT_NOEXIST", "that subreddit doesn't exist", "sr"]]}})
    session.post.side_effect = [TOKEN_OK, rejected]

    result = publisher.publish(content)

    assert result.success is False
    assert result.error == "Reddit error: that subreddit doesn't exist"


def test_network_error_becomes_failure(publisher, session, content):
    session.post.side_effect = [TOKEN_OK, requests.ConnectionError("down")]

    result = publisher.publish(content)

    assert result.success is False
    assert "down" in result.error


def test_rate_limit_backs_off_then_succeeds(publisher, session, sleeps, content):
    limited = http_response(429)
    session.post.side_effect = [TOKEN_OK, limited, limited, POSTED]

    result = publisher.publish(content)

    assert result.success is True
    assert len(sleeps) == 2
    assert 1 <= sleeps[0] < 1.5
    assert 2 <= sleeps[1] < 2.5


def test_rate_limit_retries_are_bounded(publisher, session, sleeps, content):
    limited = http_response(429)
    session.post.side_effect = [TOKEN_OK] + [limited] * 10

    result = publisher.publish(content)

    assert result.success is False
    assert result.error == "Reddit API error: 429"
    assert len(sleeps) == 3
    assert session.post.call_count == 5


def test_fetch_post_metrics(publisher, session):
    session.get.return_value = http_response(payload=[
        {"data": {"children": [{"data": {"score": 128, "num_comments": 31}}]}},
        {"data": {"children": []}},
    ])

    metrics = publisher.fetch_post_metrics("https://www.reddit.com/r/x/comments/1/y/")

    assert (metrics.score, metrics.num_comments) == (128, 31)
    assert session.get.call_args.args[0] == "https://www.reddit.com/r/x/comments/1/y.json"


def test_fetch_post_metrics_failure(publisher, session):
    session.get.return_value = http_response(404)
    assert publisher.fetch_post_metrics("/r/x/comments/1/y") is None

    session.get.return_value = http_response(payload=[])
    assert publisher.fetch_post_metrics("/r/x/comments/1/y") is None


def test_dry_run_publisher(content):
    result = DryRunPublisher().publish(content)

    assert result.success is True
    assert result.url == (
        "https://www.reddit.com/r/CustomerFromHeaven/comments/dryrun/customer_tips_in_gold_coins"
    )
    assert DryRunPublisher().fetch_post_metrics(result.url).score == 0
