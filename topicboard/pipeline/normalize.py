"""
Field normalization for loosely-typed record store values.

The store returns the same field as a string, a list, or not at all
depending on how the table is set up. Each function here maps one kind of
field to a single canonical type. None of them perform I/O or raise.
"""

import re
from typing import Any, List, Optional

from .models import (
    DEFAULT_VIEWPOINT_LINK_FIELD,
    RawRecord,
    Stance,
    Topic,
    Viewpoint,
    TOPIC_HASHTAGS_FIELD,
    TOPIC_NAME_FIELD,
    TOPIC_QUESTION_FIELD,
    VIEWPOINT_AUTHOR_FIELD,
    VIEWPOINT_STANCE_FIELD,
    VIEWPOINT_TEXT_FIELD,
    VIEWPOINT_URL_FIELD,
)

# Commas and/or whitespace runs separate tags in free-text hashtag fields
_TAG_SEPARATOR = re.compile(r"[,\s]+")

_STANCES = {s.value: s for s in (Stance.FOR, Stance.AGAINST, Stance.MIXED)}


def _as_tag(piece: str) -> Optional[str]:
    piece = piece.strip()
    if not piece:
        return None
    return piece if piece.startswith("#") else f"#{piece}"


def normalize_hashtags(raw: Any) -> List[str]:
    """
    Canonicalize a hashtag field to an ordered list of '#'-prefixed tags.

    - None -> []
    - list -> each element trimmed, empties dropped, '#' added if missing
    - string -> split on commas/whitespace, then as above
    - anything else is treated as its string form

    Duplicates are kept. Already-canonical input comes back unchanged.
    """
    if raw is None:
        return []

    if isinstance(raw, (list, tuple)):
        pieces = [str(item) for item in raw if item is not None]
    else:
        pieces = _TAG_SEPARATOR.split(str(raw))

    tags = []
    for piece in pieces:
        tag = _as_tag(piece)
        if tag:
            tags.append(tag)
    return tags


def normalize_stance(raw: Any) -> Stance:
    """Map a stance value to Stance; exact, case-sensitive match."""
    if isinstance(raw, str):
        return _STANCES.get(raw, Stance.UNRECOGNIZED)
    return Stance.UNRECOGNIZED


def normalize_optional_text(raw: Any) -> Optional[str]:
    """Return the value unchanged if it is a non-blank string, else None."""
    if isinstance(raw, str) and raw.strip():
        return raw
    return None


def normalize_text(raw: Any) -> str:
    """Required display text; missing or non-string values become ''."""
    return raw if isinstance(raw, str) else ""


def normalize_record_ids(raw: Any) -> List[str]:
    """Linked-record field -> list of ids. Absent and empty are the same."""
    if isinstance(raw, str):
        return [raw] if raw.strip() else []
    if isinstance(raw, (list, tuple)):
        return [item for item in raw if isinstance(item, str) and item.strip()]
    return []


def topic_from_record(record: RawRecord, link_field: str = DEFAULT_VIEWPOINT_LINK_FIELD) -> Topic:
    fields = record.fields
    return Topic(
        id=record.id,
        question=normalize_text(fields.get(TOPIC_QUESTION_FIELD)),
        hashtags=tuple(normalize_hashtags(fields.get(TOPIC_HASHTAGS_FIELD))),
        viewpoint_refs=tuple(normalize_record_ids(fields.get(link_field))),
        name=normalize_optional_text(fields.get(TOPIC_NAME_FIELD)),
    )


def viewpoint_from_record(record: RawRecord) -> Viewpoint:
    fields = record.fields
    return Viewpoint(
        id=record.id,
        text=normalize_text(fields.get(VIEWPOINT_TEXT_FIELD)),
        url=normalize_optional_text(fields.get(VIEWPOINT_URL_FIELD)),
        author=normalize_optional_text(fields.get(VIEWPOINT_AUTHOR_FIELD)),
        stance=normalize_stance(fields.get(VIEWPOINT_STANCE_FIELD)),
    )
