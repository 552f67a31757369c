"""Tests for the JSON API."""
import dataclasses
import logging

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock, patch

from topicboard.api.server import create_app
from topicboard.ingest.record_store import RemoteRejectedError, StoreUnavailableError
from topicboard.pipeline.models import (
    Stance,
    StanceGroup,
    TopicSummary,
    TopicViewModel,
    Viewpoint,
)


@pytest.fixture
def pipeline(settings):
    p = MagicMock()
    p.settings = settings
    return p


@pytest.fixture
def api(pipeline, settings):
    return TestClient(create_app(settings=settings, pipeline=pipeline))


def sample_view():
    v1 = Viewpoint("v1", "yes", url="https://example.com", author="Ada", stance=Stance.FOR)
    v2 = Viewpoint("v2", "no", stance=Stance.AGAINST)
    v3 = Viewpoint("v3", "hmm", stance=Stance.UNRECOGNIZED)
    return TopicViewModel(
        topic_id="rec1",
        question="Is X good?",
        hashtags=("#x", "#y"),
        buckets=(StanceGroup(Stance.FOR, (v1,)), StanceGroup(Stance.AGAINST, (v2,))),
        unrecognized=(v3,),
        viewpoint_count=3,
    )


class TestTopicDetail:

    def test_ok(self, api, pipeline):
        pipeline.topic_view.return_value = sample_view()

        response = api.get("/topics/rec1")

        assert response.status_code == 200
        body = response.json()
        assert body["question"] == "Is X good?"
        assert body["hashtags"] == ["#x", "#y"]
        assert [b["stance"] for b in body["buckets"]] == ["For", "Against"]
        assert body["buckets"][0]["viewpoints"][0]["author"] == "Ada"
        assert "unrecognized" not in body
        assert response.headers["cache-control"] == "public, s-maxage=60, stale-while-revalidate"
        pipeline.topic_view.assert_called_once_with("rec1")

    def test_not_found(self, api, pipeline):
        pipeline.topic_view.return_value = None

        response = api.get("/topics/missing")

        assert response.status_code == 404

    @pytest.mark.parametrize("error", [
        StoreUnavailableError("tblTopics", "down"),
        RemoteRejectedError("tblTopics", 500, "oops"),
    ])
    def test_store_failure(self, api, pipeline, error):
        pipeline.topic_view.side_effect = error

        response = api.get("/topics/rec1")

        assert response.status_code == 502
        assert "oops" not in response.text


class TestTopicList:

    def test_ok(self, api, pipeline):
        pipeline.recent_topics.return_value = [TopicSummary("rec1", "Is X good?", ("#x",))]

        response = api.get("/topics", params={"limit": 5})

        assert response.status_code == 200
        assert response.json() == [{"id": "rec1", "question": "Is X good?", "hashtags": ["#x"]}]
        assert "s-maxage=60" in response.headers["cache-control"]
        pipeline.recent_topics.assert_called_once_with(5)

    def test_default_limit(self, api, pipeline):
        pipeline.recent_topics.return_value = []

        api.get("/topics")

        pipeline.recent_topics.assert_called_once_with(None)

    def test_invalid_limit(self, api, pipeline):
        assert api.get("/topics", params={"limit": 0}).status_code == 422
        pipeline.recent_topics.assert_not_called()


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_logging_configured_from_settings(settings, pipeline):
    settings = dataclasses.replace(settings, log_level=logging.DEBUG, log_file="logs/api.log")

    with patch("topicboard.api.server.configure_logging") as configure:
        create_app(settings=settings, pipeline=pipeline)

    configure.assert_called_once_with(logging.DEBUG, "logs/api.log")
