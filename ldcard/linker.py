from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .context import ATPROTO_NAMESPACE, has_atproto_context
from .normalize import has_type

MetadataRecord = Dict[str, Any]

# Person-to-author match clauses, strongest identifier first.
PERSON_MATCH_KEYS: Tuple[str, ...] = ("@id", "atproto:did", "atproto:handle")


@dataclass(frozen=True)
class ArticleView:
    """Fields of the selected Article, merged with its linked Person."""

    headline: str
    description: str
    images: Tuple[str, ...]
    author_name: str
    author_image: Optional[str]
    did: str
    handle: str
    feed: str
    atproto_present: bool


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _image_url(value: Any) -> str:
    # schema.org allows a bare URL or an ImageObject
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return _string(value.get("url") or value.get("contentUrl"))
    return ""


def _image_list(value: Any) -> List[str]:
    entries = value if isinstance(value, list) else ([value] if value else [])
    return [url for url in (_image_url(entry) for entry in entries) if url]


def _author_record(value: Any) -> MetadataRecord:
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        for entry in value:
            if isinstance(entry, dict):
                return entry
        return {}
    if isinstance(value, str) and value.strip():
        return {"name": value.strip()}
    return {}


def select_article(docs: Sequence[Any]) -> Optional[MetadataRecord]:
    for doc in docs:
        if has_type(doc, "Article"):
            return doc
    return None


def _matches_author(record: MetadataRecord, expected: Sequence[Tuple[str, str]]) -> bool:
    for key, value in expected:
        # Empty author-side values never take part in a comparison.
        if value and record.get(key) == value:
            return True
    return False


def select_linked_person(
    docs: Sequence[Any], author_id: str, did: str, handle: str
) -> Optional[MetadataRecord]:
    """Return the first Person record in document order describing the author.

    Clauses are tried in ``PERSON_MATCH_KEYS`` order; a record is accepted as
    soon as any clause with a non-empty author value matches.
    """

    expected = list(zip(PERSON_MATCH_KEYS, (author_id, did, handle)))
    if not any(value for _, value in expected):
        return None

    for doc in docs:
        if not has_type(doc, "Person"):
            continue
        if _matches_author(doc, expected):
            return doc
    return None


def _first_image(value: Any) -> Optional[str]:
    if isinstance(value, list):
        value = value[0] if value else None
    url = _image_url(value)
    return url or None


def build_article_view(
    docs: Sequence[Any], namespace: str = ATPROTO_NAMESPACE
) -> Optional[ArticleView]:
    """Select the Article among ``docs`` and project it into an ``ArticleView``.

    Returns ``None`` when the document carries no Article record.
    """

    data = select_article(docs)
    if data is None:
        return None

    author = _author_record(data.get("author"))
    author_id = _string(author.get("@id"))
    did = _string(author.get("atproto:did"))
    handle = _string(author.get("atproto:handle"))
    feed = _string(data.get("atproto:feed"))

    linked_person = select_linked_person(docs, author_id, did, handle)

    image_source = author.get("image")
    if not image_source and linked_person is not None:
        image_source = linked_person.get("image")

    is_atproto = has_atproto_context(data.get("@context"), namespace)

    return ArticleView(
        headline=_string(data.get("headline")),
        description=_string(data.get("description")),
        images=tuple(_image_list(data.get("image"))),
        author_name=_string(author.get("name")),
        author_image=_first_image(image_source) if image_source else None,
        did=did,
        handle=handle,
        feed=feed,
        atproto_present=is_atproto and bool(did or handle or feed),
    )
