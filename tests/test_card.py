import asyncio

from bs4 import BeautifulSoup

from conftest import StubAdapter, ld_json_page
from ldcard.card import assemble_card, format_did
from ldcard.config import Settings
from ldcard.linker import ArticleView
from ldcard.main import render_page

ATPROTO_CONTEXT = ["https://schema.org", {"atproto": "https://atproto.com/ns/article#"}]


def _render(html, resolver):
    page = asyncio.run(render_page(html, Settings(), resolver))
    return None if page is None else BeautifulSoup(page, "html.parser")


def _view(**overrides):
    fields = dict(
        headline="Hi",
        description="",
        images=(),
        author_name="Bob",
        author_image=None,
        did="",
        handle="bob",
        feed="",
        atproto_present=False,
    )
    fields.update(overrides)
    return ArticleView(**fields)


def test_linked_person_image_renders_inline_without_lookup(make_resolver) -> None:
    adapter = StubAdapter("https://cdn/never.jpg")
    html = ld_json_page(
        {"@type": "Article", "headline": "Hi", "author": {"name": "Bob", "atproto:handle": "bob"}},
        {"@type": "Person", "atproto:handle": "bob", "image": "https://cdn/bob.jpg"},
    )

    soup = _render(html, make_resolver(adapter))

    card = soup.select_one("#card > article.card")
    assert card.select_one(".card__title").get_text() == "Hi"
    assert card.select_one(".card__author-name").get_text() == "By Bob"
    avatar = card.select_one(".card__author-avatar")
    assert avatar["src"] == "https://cdn/bob.jpg"
    assert avatar["alt"] == "Bob"
    assert card.select_one(".card__image") is None
    assert adapter.calls == []


def test_atproto_card_with_handle_only(make_resolver) -> None:
    adapter = StubAdapter("")
    html = ld_json_page(
        {
            "@context": ATPROTO_CONTEXT,
            "@type": "Article",
            "headline": "Hello",
            "author": {"name": "Alice", "atproto:handle": "alice"},
        }
    )

    soup = _render(html, make_resolver(adapter))

    card = soup.select_one("article.card.card--atproto")
    assert card is not None
    assert card.select_one(".card__atproto-badge").get_text() == "atproto"
    assert card.select_one(".card__atproto-handle").get_text() == "@alice"
    assert card.select_one(".card__atproto-did") is None
    assert card.select_one(".card__atproto-feed") is None
    # the lookup missed, so no avatar was inserted
    assert card.select_one(".card__author-avatar") is None
    assert len(adapter.calls) == 1


def test_resolved_avatar_is_patched_before_author_name(make_resolver) -> None:
    adapter = StubAdapter("https://cdn/alice.jpg")
    html = ld_json_page(
        {
            "@type": "Article",
            "headline": "Hello",
            "description": "Body",
            "image": "https://cdn/cover.jpg",
            "author": {"name": "Alice", "atproto:did": "did:plc:alice"},
        }
    )

    soup = _render(html, make_resolver(adapter))

    author = soup.select_one(".card__author")
    children = [child["class"] for child in author.find_all(True, recursive=False)]
    assert children == [["card__author-avatar"], ["card__author-name"]]
    assert author.select_one("img")["src"] == "https://cdn/alice.jpg"
    assert soup.select_one(".card__image")["src"] == "https://cdn/cover.jpg"
    assert soup.select_one(".card__description").get_text() == "Body"
    assert adapter.calls[0].did == "did:plc:alice"


def test_no_article_or_no_container_renders_nothing(make_resolver) -> None:
    resolver = make_resolver(StubAdapter(""))
    no_article = ld_json_page({"@type": "Person", "name": "P"})
    no_container = ld_json_page({"@type": "Article", "headline": "Hi"}, container=False)
    no_blocks = "<html><body><div id='card'></div></body></html>"

    assert _render(no_article, resolver) is None
    assert _render(no_container, resolver) is None
    assert _render(no_blocks, resolver) is None


def test_meta_line_truncates_did_and_links_feed() -> None:
    did = "did:plc:abcdefghijklmnopqrstuvwxyz"
    feed = " at://did:plc:x/app.bsky.feed.generator/f "
    soup = BeautifulSoup('<div id="card"></div>', "html.parser")
    view = _view(did=did, feed=feed, atproto_present=True, author_image="https://cdn/b.jpg")

    render = assemble_card(soup, soup.find(id="card"), view)

    assert render.avatar_lookup is None
    assert soup.select_one(".card__atproto-did").get_text() == did[:20] + "…"
    link = soup.select_one("a.card__atproto-feed")
    assert link["href"] == feed.strip()
    assert link["title"] == feed
    assert link["target"] == "_blank"
    assert link["rel"] == "noopener noreferrer"
    assert link.get_text() == "View series →"


def test_unlinkable_feed_is_dropped() -> None:
    soup = BeautifulSoup('<div id="card"></div>', "html.parser")
    view = _view(feed="ftp://example.com/feed", atproto_present=True)
    assemble_card(soup, soup.find(id="card"), view)
    assert soup.select_one(".card__atproto-meta") is not None
    assert soup.select_one(".card__atproto-feed") is None


def test_format_did_keeps_short_values() -> None:
    assert format_did("did:plc:short") == "did:plc:short"
    assert format_did("x" * 20) == "x" * 20
    assert format_did("x" * 21) == "x" * 20 + "…"


def test_cards_for_same_author_share_one_lookup(make_resolver) -> None:
    adapter = StubAdapter("https://cdn/bob.jpg")

    async def scenario():
        resolver = make_resolver(adapter)
        soup = BeautifulSoup('<div id="a"></div><div id="b"></div>', "html.parser")
        first = assemble_card(soup, soup.find(id="a"), _view(), resolver)
        second = assemble_card(soup, soup.find(id="b"), _view(), resolver)
        assert first.avatar_lookup is second.avatar_lookup
        await first.avatar_lookup
        await asyncio.sleep(0)
        return soup

    soup = asyncio.run(scenario())
    assert len(adapter.calls) == 1
    assert len(soup.select(".card__author-avatar")) == 2


def test_same_author_renders_in_separate_event_loops(make_resolver) -> None:
    adapter = StubAdapter("https://cdn/alice.jpg")
    resolver = make_resolver(adapter)
    html = ld_json_page(
        {"@type": "Article", "headline": "Hello", "author": {"name": "Alice", "atproto:handle": "alice"}}
    )

    first = _render(html, resolver)
    second = _render(html, resolver)

    for soup in (first, second):
        assert soup.select_one(".card__author-avatar")["src"] == "https://cdn/alice.jpg"
    assert len(adapter.calls) == 1
