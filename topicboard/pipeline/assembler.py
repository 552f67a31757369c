"""
Topic view model assembly.

Composes the record store client, the linked-record resolver, normalization
and stance grouping into the read models handed to the rendering layer.
"""

import logging
from typing import List, Optional

from ..ingest.record_store import RecordStoreClient
from .aggregate import aggregate
from .models import TopicSummary, TopicViewModel
from .normalize import topic_from_record
from .resolver import LinkedRecordResolver

logger = logging.getLogger(__name__)


class TopicPipeline:
    """Per-deployment entry point: one instance, many requests."""

    def __init__(self, client: RecordStoreClient, resolver: LinkedRecordResolver, settings):
        self.client = client
        self.resolver = resolver
        self.settings = settings

    @classmethod
    def from_settings(cls, settings, session=None) -> "TopicPipeline":
        client = RecordStoreClient.from_settings(settings, session=session)
        return cls(client, LinkedRecordResolver.from_settings(client, settings), settings)

    def close(self) -> None:
        self.client.close()

    def topic_view(self, topic_id: str) -> Optional[TopicViewModel]:
        """
        Build the detail view model for one topic.

        Args:
            topic_id: Store record id of the topic

        Returns:
            TopicViewModel, or None if the topic does not exist

        Raises:
            RecordStoreError: If either store call fails
        """
        raw_topic = self.client.fetch_one(self.settings.topics_table, topic_id)
        if raw_topic is None:
            return None

        topic = topic_from_record(raw_topic, self.settings.viewpoint_link_field)
        viewpoints = self.resolver.resolve_viewpoints(topic)
        buckets = aggregate(viewpoints)

        if buckets.unrecognized:
            logger.info(
                f"Topic {topic.id}: {len(buckets.unrecognized)} viewpoint(s) with unrecognized stance hidden"
            )

        return TopicViewModel(
            topic_id=topic.id,
            question=topic.question,
            hashtags=topic.hashtags,
            buckets=buckets.displayed(),
            unrecognized=buckets.unrecognized,
            viewpoint_count=len(viewpoints),
        )

    def recent_topics(self, limit: Optional[int] = None) -> List[TopicSummary]:
        """
        Newest topics for the index page.

        Uses the configured newest-first view and/or sort spec.

        Args:
            limit: Maximum topics to return (default: settings.topics_limit)

        Raises:
            ValueError: If limit is less than 1
        """
        if limit is None:
            limit = self.settings.topics_limit
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        records = self.client.fetch_many(
            self.settings.topics_table,
            sort=self.settings.sort,
            view=self.settings.newest_first_view,
            max_records=limit,
        )

        summaries = []
        for record in records:
            topic = topic_from_record(record, self.settings.viewpoint_link_field)
            summaries.append(TopicSummary(topic.id, topic.question, topic.hashtags))
        return summaries
