"""
Linked viewpoint resolution.

A topic's viewpoints are reachable in one of two ways depending on how the
base is laid out:

- FORWARD_LINKS: the topic holds a list of viewpoint record ids.
- BACK_REFERENCE: each viewpoint holds a field naming its topic.

The strategy is fixed per deployment and passed in once.
"""

import logging
from typing import List

from . import formula
from .models import (
    DEFAULT_BACK_REFERENCE_FIELD,
    LinkageStrategy,
    RawRecord,
    Topic,
    Viewpoint,
)
from .normalize import viewpoint_from_record

logger = logging.getLogger(__name__)

# Lower bound on page size for forward-link queries
MIN_FORWARD_PAGE_SIZE = 50
DEFAULT_BACK_REFERENCE_PAGE_SIZE = 20


class LinkedRecordResolver:
    """Fetch the raw viewpoint records belonging to a topic."""

    def __init__(
        self,
        client,
        viewpoints_table: str,
        strategy: LinkageStrategy = LinkageStrategy.BACK_REFERENCE,
        back_reference_field: str = DEFAULT_BACK_REFERENCE_FIELD,
        page_size: int = DEFAULT_BACK_REFERENCE_PAGE_SIZE,
    ):
        self.client = client
        self.viewpoints_table = viewpoints_table
        self.strategy = strategy
        self.back_reference_field = back_reference_field
        self.page_size = page_size

    @classmethod
    def from_settings(cls, client, settings) -> "LinkedRecordResolver":
        return cls(
            client=client,
            viewpoints_table=settings.viewpoints_table,
            strategy=settings.linkage,
            back_reference_field=settings.back_reference_field,
            page_size=settings.viewpoint_page_size,
        )

    def resolve(self, topic: Topic) -> List[RawRecord]:
        """Raw viewpoint records for a topic, in store response order."""
        if self.strategy is LinkageStrategy.FORWARD_LINKS:
            return self._resolve_forward(topic)
        if self.strategy is LinkageStrategy.BACK_REFERENCE:
            return self._resolve_back_reference(topic)
        raise ValueError(f"Unknown linkage strategy: {self.strategy!r}")

    def resolve_viewpoints(self, topic: Topic) -> List[Viewpoint]:
        return [viewpoint_from_record(r) for r in self.resolve(topic)]

    def _resolve_forward(self, topic: Topic) -> List[RawRecord]:
        refs = list(topic.viewpoint_refs)
        if not refs:
            return []

        records = self.client.fetch_many(
            self.viewpoints_table,
            formula.or_of_ids(refs),
            page_size=max(MIN_FORWARD_PAGE_SIZE, len(refs)),
        )

        # Ids deleted downstream simply do not come back
        returned = {r.id for r in records}
        missing = [rid for rid in refs if rid not in returned]
        if missing:
            logger.debug(f"Topic {topic.id}: {len(missing)} linked viewpoint(s) not returned: {missing}")

        return records

    def _resolve_back_reference(self, topic: Topic) -> List[RawRecord]:
        return self.client.fetch_many(
            self.viewpoints_table,
            formula.equality(self.back_reference_field, topic.id),
            page_size=self.page_size,
        )
