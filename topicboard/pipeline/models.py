"""
Domain models for the topic/viewpoint read pipeline.

Everything here is an immutable value built fresh per request from raw
record-store payloads. Sequences are tuples so a finished view model can be
shared with the rendering layer without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


# Field names used by the record store
TOPIC_NAME_FIELD = "Name"
TOPIC_QUESTION_FIELD = "Question"
TOPIC_HASHTAGS_FIELD = "Hashtag List"
VIEWPOINT_TEXT_FIELD = "Text"
VIEWPOINT_URL_FIELD = "URL"
VIEWPOINT_AUTHOR_FIELD = "Author"
VIEWPOINT_STANCE_FIELD = "Stance"

DEFAULT_VIEWPOINT_LINK_FIELD = "Viewpoints"
DEFAULT_BACK_REFERENCE_FIELD = "Topic"


class Stance(Enum):
    """Position a viewpoint takes on its topic."""
    FOR = "For"
    AGAINST = "Against"
    MIXED = "Mixed"
    UNRECOGNIZED = "Unrecognized"


# Order in which stance groups are displayed
DISPLAY_ORDER: Tuple[Stance, ...] = (Stance.FOR, Stance.AGAINST, Stance.MIXED)


class LinkageStrategy(Enum):
    """How viewpoint records are tied to their topic in the store."""
    FORWARD_LINKS = "forward_links"    # topic lists viewpoint ids
    BACK_REFERENCE = "back_reference"  # viewpoint names its topic


@dataclass(frozen=True)
class SortSpec:
    """Single-field sort for list queries."""
    field: str
    direction: str = "asc"

    def __post_init__(self):
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"sort direction must be 'asc' or 'desc', got {self.direction!r}")


@dataclass(frozen=True)
class RawRecord:
    """Untyped {id, fields} payload as returned by the store."""
    id: str
    fields: Mapping[str, Any] = field(default_factory=dict)
    created_time: Optional[str] = None


@dataclass(frozen=True)
class Topic:
    id: str
    question: str = ""
    hashtags: Tuple[str, ...] = ()
    viewpoint_refs: Tuple[str, ...] = ()
    name: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Topic id must be non-empty")


@dataclass(frozen=True)
class Viewpoint:
    id: str
    text: str = ""
    url: Optional[str] = None
    author: Optional[str] = None
    stance: Stance = Stance.UNRECOGNIZED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "url": self.url,
            "author": self.author,
            "stance": self.stance.value,
        }


@dataclass(frozen=True)
class StanceGroup:
    """Viewpoints sharing one stance, in resolver order."""
    stance: Stance
    members: Tuple[Viewpoint, ...] = ()

    def __len__(self) -> int:
        return len(self.members)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stance": self.stance.value,
            "viewpoints": [v.to_dict() for v in self.members],
        }


@dataclass(frozen=True)
class StanceBuckets:
    """Result of partitioning viewpoints by stance.

    ``groups`` holds one group per displayed stance (empty ones included)
    so that callers and tests can inspect every bucket; ``unrecognized``
    holds viewpoints whose stance did not match any displayed value.
    """
    groups: Tuple[StanceGroup, ...]
    unrecognized: Tuple[Viewpoint, ...] = ()

    def displayed(self) -> Tuple[StanceGroup, ...]:
        """Non-empty groups in display order."""
        return tuple(g for g in self.groups if g.members)

    def group(self, stance: Stance) -> StanceGroup:
        if stance is Stance.UNRECOGNIZED:
            return StanceGroup(stance, self.unrecognized)
        for g in self.groups:
            if g.stance is stance:
                return g
        return StanceGroup(stance)


@dataclass(frozen=True)
class TopicViewModel:
    """Everything the rendering layer needs for a topic detail page."""
    topic_id: str
    question: str
    hashtags: Tuple[str, ...]
    buckets: Tuple[StanceGroup, ...]
    unrecognized: Tuple[Viewpoint, ...] = ()
    viewpoint_count: int = 0

    @property
    def has_viewpoints(self) -> bool:
        return self.viewpoint_count > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.topic_id,
            "question": self.question,
            "hashtags": list(self.hashtags),
            "buckets": [g.to_dict() for g in self.buckets],
            "unrecognized": [v.to_dict() for v in self.unrecognized],
            "viewpoint_count": self.viewpoint_count,
        }


@dataclass(frozen=True)
class TopicSummary:
    """Index entry for the topic list."""
    topic_id: str
    question: str
    hashtags: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.topic_id,
            "question": self.question,
            "hashtags": list(self.hashtags),
        }
