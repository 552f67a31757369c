"""Tests for the command-line interface."""
import json
from unittest.mock import patch

import pytest

from topicboard import cli
from topicboard.config.settings import ConfigError
from topicboard.ingest.record_store import StoreUnavailableError
from topicboard.pipeline.models import TopicSummary, TopicViewModel


@pytest.fixture(autouse=True)
def logging_setup():
    with patch("topicboard.cli.configure_logging") as configure:
        yield configure


@pytest.fixture
def pipeline_cls():
    with patch("topicboard.cli.load_settings"), patch("topicboard.cli.TopicPipeline") as cls:
        yield cls


def test_show(pipeline_cls, capsys):
    pipeline = pipeline_cls.from_settings.return_value
    pipeline.topic_view.return_value = TopicViewModel("rec1", "Q?", ("#a",), ())

    assert cli.main(["show", "rec1"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["id"] == "rec1"
    assert out["hashtags"] == ["#a"]
    pipeline.close.assert_called_once()


def test_show_not_found(pipeline_cls, capsys):
    pipeline_cls.from_settings.return_value.topic_view.return_value = None

    assert cli.main(["show", "missing"]) == 2
    assert "not found" in capsys.readouterr().err


def test_topics(pipeline_cls, capsys):
    pipeline = pipeline_cls.from_settings.return_value
    pipeline.recent_topics.return_value = [TopicSummary("rec1", "Q?")]

    assert cli.main(["topics", "--limit", "3"]) == 0

    assert json.loads(capsys.readouterr().out) == [{"id": "rec1", "question": "Q?", "hashtags": []}]
    pipeline.recent_topics.assert_called_once_with(3)


def test_store_error(pipeline_cls, capsys):
    pipeline_cls.from_settings.return_value.recent_topics.side_effect = StoreUnavailableError("tblTopics", "down")

    assert cli.main(["topics"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_config_error(capsys):
    with patch("topicboard.cli.load_settings", side_effect=ConfigError("Missing required settings: AIRTABLE_API_KEY")):
        assert cli.main(["show", "rec1"]) == 1
    assert "AIRTABLE_API_KEY" in capsys.readouterr().err


def test_check(capsys):
    status = {"AIRTABLE_API_KEY": "OK", "AIRTABLE_BASE_ID": "MISSING"}
    with patch("topicboard.cli.check_settings", return_value=status):
        assert cli.main(["check"]) == 1
    assert "AIRTABLE_BASE_ID: MISSING" in capsys.readouterr().out


@pytest.mark.parametrize("limit", ["0", "-2", "many"])
def test_topics_limit_must_be_positive(pipeline_cls, limit, capsys):
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["topics", "--limit", limit])

    assert exc_info.value.code == 2
    pipeline_cls.from_settings.return_value.recent_topics.assert_not_called()


def test_logging_flags(pipeline_cls, logging_setup):
    pipeline_cls.from_settings.return_value.recent_topics.return_value = []

    assert cli.main(["--log-level", "debug", "--log-file", "out/cli.log", "topics"]) == 0

    logging_setup.assert_called_once_with("DEBUG", "out/cli.log")


def test_default_log_level(pipeline_cls, logging_setup):
    pipeline_cls.from_settings.return_value.recent_topics.return_value = []

    cli.main(["topics"])

    logging_setup.assert_called_once_with("WARNING", None)
