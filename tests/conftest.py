"""Shared fixtures: fake HTTP responses and settings."""
from unittest.mock import MagicMock

import pytest

from topicboard.config.settings import Settings
from topicboard.pipeline.models import LinkageStrategy


def make_response(status_code=200, json_data=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    response.text = text if text is not None else ""
    return response


@pytest.fixture
def settings():
    return Settings(
        base_id="appBase",
        topics_table="tblTopics",
        viewpoints_table="tblViews",
        api_key="key-123",
        revalidate_seconds=60,
        newest_first_view="NewestFirst",
        linkage=LinkageStrategy.BACK_REFERENCE,
    )


@pytest.fixture
def session():
    return MagicMock()
