"""
Filter formula construction for list queries.

Formulas are plain strings evaluated by the store. Output is deterministic:
the same inputs in the same order always give byte-identical formulas.
"""

from typing import Iterable


def quote_literal(value: str) -> str:
    """Quote a string literal, escaping backslashes and double quotes."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def field_ref(name: str) -> str:
    """Reference a field by name, e.g. {Hashtag List}."""
    return "{" + name + "}"


def equality(field: str, literal: str) -> str:
    """Formula matching records whose field equals the literal."""
    return f"{field_ref(field)}={quote_literal(literal)}"


def record_id_equals(record_id: str) -> str:
    return f"RECORD_ID()={quote_literal(record_id)}"


def or_of_ids(record_ids: Iterable[str]) -> str:
    """
    Formula matching any of the given record ids, in input order.

    Args:
        record_ids: Non-empty ordered ids

    Returns:
        e.g. OR(RECORD_ID()="r1",RECORD_ID()="r2")

    Raises:
        ValueError: If no ids are given. Callers resolve an empty id list
            to an empty result without querying.
    """
    terms = [record_id_equals(rid) for rid in record_ids]
    if not terms:
        raise ValueError("or_of_ids requires at least one record id")
    return "OR(" + ",".join(terms) + ")"
