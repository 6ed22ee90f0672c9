from __future__ import annotations

import asyncio
import logging
import sys
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from .avatar import AvatarResolver
from .blocks import extract_records
from .card import assemble_card
from .config import Settings
from .fetch import load_page
from .linker import build_article_view

LOGGER = logging.getLogger(__name__)


async def render_page(
    html: str,
    settings: Optional[Settings] = None,
    resolver: Optional[AvatarResolver] = None,
) -> Optional[str]:
    """Mount the Article card into ``html`` and return the updated page.

    Waits for a pending avatar lookup so the returned markup includes the
    patched image. Returns ``None`` when no card was rendered.
    """

    settings = settings or Settings.from_env()
    resolver = resolver or AvatarResolver.from_settings(settings)

    soup = BeautifulSoup(html, "html.parser")
    docs = extract_records(soup)
    if not docs:
        return None

    view = build_article_view(docs)
    if view is None:
        LOGGER.info("No Article record found; nothing to render.")
        return None

    container = soup.find(id=settings.container_id)
    render = assemble_card(soup, container, view, resolver)
    if render is None:
        LOGGER.info("No #%s container found; nothing to render.", settings.container_id)
        return None

    if render.avatar_lookup is not None:
        await render.avatar_lookup
        # let the completion callback patch the author block
        await asyncio.sleep(0)

    return str(soup)


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def main(argv: List[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        print("Usage: python -m ldcard.main <html_file_or_url>")
        raise SystemExit(1)

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        html = load_page(argv[0], settings)
    except (OSError, httpx.HTTPError) as e:
        print(f"Could not load {argv[0]}: {e}", file=sys.stderr)
        raise SystemExit(1)

    page = asyncio.run(render_page(html, settings))
    # no card: the page goes out unchanged
    print(html if page is None else page)


if __name__ == "__main__":
    main()
