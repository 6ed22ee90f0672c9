"""Discovery and decoding of JSON-LD blocks embedded in an HTML page."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, List, Union

from bs4 import BeautifulSoup

LOGGER = logging.getLogger(__name__)

LD_JSON_SELECTOR = 'script[type="application/ld+json"]'


def find_ld_json_blocks(page: Union[str, BeautifulSoup]) -> List[str]:
    soup = page if isinstance(page, BeautifulSoup) else BeautifulSoup(page, "html.parser")
    return [script.string or "" for script in soup.select(LD_JSON_SELECTOR)]


def _expand_graph(record: Dict[str, Any]) -> List[Dict[str, Any]]:
    graph = record.get("@graph")
    if not isinstance(graph, list):
        return [record]

    outer_context = record.get("@context")
    members: List[Dict[str, Any]] = []
    for member in graph:
        if not isinstance(member, dict):
            continue
        if outer_context is not None and "@context" not in member:
            member = {"@context": outer_context, **member}
        members.append(member)
    return members


def parse_ld_json_blocks(texts: Iterable[str]) -> List[Dict[str, Any]]:
    """Decode JSON-LD block texts into metadata records, in document order.

    A block that fails to decode, or decodes to something other than an
    object or a list of objects, is logged and skipped.
    """

    docs: List[Dict[str, Any]] = []
    for index, text in enumerate(texts):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Could not parse JSON-LD block %d: %s", index, exc)
            continue

        if isinstance(parsed, dict):
            docs.extend(_expand_graph(parsed))
        elif isinstance(parsed, list):
            for entry in parsed:
                if isinstance(entry, dict):
                    docs.extend(_expand_graph(entry))
        else:
            LOGGER.warning(
                "Skipping JSON-LD block %d: expected an object, got %s",
                index,
                type(parsed).__name__,
            )
    return docs


def extract_records(page: Union[str, BeautifulSoup]) -> List[Dict[str, Any]]:
    return parse_ld_json_blocks(find_ld_json_blocks(page))
