"""Summary card markup for an ``ArticleView``.

The card is built directly into the page tree with BeautifulSoup. When the
author has no embedded image, an avatar lookup is started and the image is
patched into the author block once the lookup settles.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Optional

from bs4 import BeautifulSoup, Tag

from .avatar import AvatarResolver, Identity
from .linker import ArticleView
from .normalize import normalize_handle, resolve_feed_href

DID_DISPLAY_LENGTH = 20
FEED_LINK_TEXT = "View series →"


@dataclass
class CardRender:
    """The mounted card and, when one was started, its pending avatar lookup."""

    article: Tag
    avatar_lookup: Optional["asyncio.Future[str]"] = None


def format_did(did: str, limit: int = DID_DISPLAY_LENGTH) -> str:
    if len(did) > limit:
        return did[:limit] + "…"
    return did


def _element(soup: BeautifulSoup, name: str, class_name: str, text: str = "", **attrs: str) -> Tag:
    tag = soup.new_tag(name, attrs={"class": class_name, **attrs})
    if text:
        tag.string = text
    return tag


def _avatar_image(soup: BeautifulSoup, src: str, alt: str) -> Tag:
    return soup.new_tag("img", attrs={"class": "card__author-avatar", "src": src, "alt": alt})


def _patch_avatar(
    soup: BeautifulSoup, name_el: Tag, alt: str, lookup: "asyncio.Future[str]"
) -> None:
    if lookup.cancelled() or lookup.exception() is not None:
        return
    avatar_url = lookup.result()
    if not avatar_url:
        return
    name_el.insert_before(_avatar_image(soup, avatar_url, alt))


def _atproto_meta(soup: BeautifulSoup, view: ArticleView) -> Tag:
    meta = _element(soup, "div", "card__atproto-meta")
    meta.append(_element(soup, "span", "card__atproto-badge", "atproto"))

    handle = normalize_handle(view.handle)
    if handle:
        meta.append(_element(soup, "span", "card__atproto-handle", "@" + handle))

    if view.did:
        meta.append(_element(soup, "span", "card__atproto-did", format_did(view.did)))

    feed_href = resolve_feed_href(view.feed)
    if feed_href:
        meta.append(
            _element(
                soup,
                "a",
                "card__atproto-feed",
                FEED_LINK_TEXT,
                href=feed_href,
                target="_blank",
                rel="noopener noreferrer",
                title=view.feed,
            )
        )
    return meta


def assemble_card(
    soup: BeautifulSoup,
    container: Optional[Tag],
    view: Optional[ArticleView],
    resolver: Optional[AvatarResolver] = None,
) -> Optional[CardRender]:
    """Append the card for ``view`` to ``container``.

    Returns ``None`` without touching the page when there is nothing to
    render or nowhere to render it. An avatar lookup needs a running event
    loop; it is skipped when ``resolver`` is ``None``.
    """

    if view is None or container is None:
        return None

    class_name = "card card--atproto" if view.atproto_present else "card"
    article = _element(soup, "article", class_name)

    if view.images:
        article.append(
            soup.new_tag(
                "img", attrs={"class": "card__image", "src": view.images[0], "alt": view.headline}
            )
        )

    body = _element(soup, "div", "card__body")
    title = _element(soup, "div", "card__title", view.headline)
    body.append(title)

    if view.description:
        body.append(_element(soup, "p", "card__description", view.description))

    lookup = None
    if view.author_name:
        author_el = _element(soup, "div", "card__author")
        if view.author_image:
            author_el.append(_avatar_image(soup, view.author_image, view.author_name))

        name_el = _element(soup, "span", "card__author-name", "By " + view.author_name)
        author_el.append(name_el)
        body.append(author_el)

        if not view.author_image and resolver is not None:
            lookup = resolver.resolve(Identity.of(view.handle, view.did))
            lookup.add_done_callback(partial(_patch_avatar, soup, name_el, view.author_name))

    if view.atproto_present:
        body.append(_atproto_meta(soup, view))

    article.append(body)
    container.append(article)
    return CardRender(article=article, avatar_lookup=lookup)
