from __future__ import annotations

from typing import Any

ATPROTO_NAMESPACE = "https://atproto.com/ns"


def has_atproto_context(context_value: Any, prefix: str = ATPROTO_NAMESPACE) -> bool:
    """Check whether a JSON-LD ``@context`` list declares the atproto namespace.

    Only a list is inspected; a bare string or object context is not coerced.
    An entry counts when it is an object with at least one string value
    starting with ``prefix``.
    """

    if not isinstance(context_value, list):
        return False
    for entry in context_value:
        if not isinstance(entry, dict):
            continue
        if any(isinstance(v, str) and v.startswith(prefix) for v in entry.values()):
            return True
    return False
