"""Canonical forms for identity fields and feed references."""

from __future__ import annotations

from typing import Any, List

_FEED_SCHEMES = ("https://", "http://", "at://")


def normalize_handle(value: Any) -> str:
    """Trim, drop one leading ``@`` and lower-case a handle.

    Non-string input yields an empty string.
    """

    if not isinstance(value, str):
        return ""
    value = value.strip()
    if value.startswith("@"):
        value = value[1:]
    return value.lower()


def normalize_did(value: Any) -> str:
    if isinstance(value, str) and value.startswith("did:"):
        return value
    return ""


def resolve_feed_href(value: Any) -> str:
    """Return a linkable feed reference, or ``""`` for anything we won't link.

    Scheme-less or unknown-scheme references are rejected rather than guessed.
    """

    if not isinstance(value, str):
        return ""
    value = value.strip()
    if value.startswith(_FEED_SCHEMES):
        return value
    return ""


def to_type_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    return [value] if value else []


def has_type(record: Any, type_name: str) -> bool:
    if not isinstance(record, dict):
        return False
    return type_name in to_type_list(record.get("@type"))
