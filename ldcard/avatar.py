"""Avatar lookup for an author identity.

An ``AvatarResolver`` runs an ordered chain of adapters until one of them
produces a URL. Results, including misses, are memoized per identity in an
``AvatarCache`` so that every identity triggers at most one chain, even when
several cards ask for it concurrently.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx

from .normalize import normalize_did, normalize_handle

DEFAULT_APPVIEW_BASE = "https://public.api.bsky.app"


@dataclass(frozen=True)
class Identity:
    """Normalised author identity used for avatar lookups."""

    handle: str = ""
    did: str = ""

    @classmethod
    def of(cls, handle: Any = "", did: Any = "") -> "Identity":
        return cls(handle=normalize_handle(handle), did=normalize_did(did))

    @property
    def cache_key(self) -> str:
        if not self.handle and not self.did:
            return ""
        return f"{self.handle}|{self.did}"

    @property
    def actor(self) -> str:
        return self.handle or self.did


class AvatarAdapter(Protocol):
    """A single avatar source. Returns a URL, or ``""`` when it has none."""

    async def resolve(self, identity: Identity) -> str: ...


class BskyAppViewAdapter:
    """Look up ``avatar`` via ``app.bsky.actor.getProfile`` on a public AppView."""

    def __init__(
        self,
        base_url: str = DEFAULT_APPVIEW_BASE,
        *,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/xrpc/app.bsky.actor.getProfile"

    async def _get(self, actor: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.endpoint, params={"actor": actor})
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(self.endpoint, params={"actor": actor})

    async def resolve(self, identity: Identity) -> str:
        actor = identity.actor
        if not actor:
            return ""

        try:
            resp = await self._get(actor)
            if not resp.is_success:
                return ""
            profile = resp.json()
        except (httpx.HTTPError, ValueError):
            return ""

        if not isinstance(profile, dict):
            return ""
        avatar = profile.get("avatar")
        return avatar if isinstance(avatar, str) else ""


class AvatarCache:
    """Cache key -> pending or settled avatar lookup.

    Entries are never evicted; the key space is bounded by the distinct
    authors rendered during a session.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, "asyncio.Future[str]"] = {}

    def get(self, key: str) -> Optional["asyncio.Future[str]"]:
        return self._entries.get(key)

    def put(self, key: str, lookup: "asyncio.Future[str]") -> None:
        self._entries[key] = lookup

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Shared by resolvers that are not handed their own cache.
DEFAULT_CACHE = AvatarCache()


def default_adapters(
    appview_base: str = DEFAULT_APPVIEW_BASE, timeout: float = 15.0
) -> List[AvatarAdapter]:
    return [BskyAppViewAdapter(appview_base, timeout=timeout)]


class AvatarResolver:
    def __init__(
        self,
        adapters: Optional[Sequence[AvatarAdapter]] = None,
        cache: Optional[AvatarCache] = None,
    ) -> None:
        self.adapters: List[AvatarAdapter] = (
            list(adapters) if adapters is not None else default_adapters()
        )
        self.cache = cache if cache is not None else DEFAULT_CACHE

    @classmethod
    def from_settings(cls, settings: Any, cache: Optional[AvatarCache] = None) -> "AvatarResolver":
        return cls(
            default_adapters(settings.bluesky_appview_base, settings.http_timeout),
            cache=cache,
        )

    def resolve(self, identity: Identity) -> "asyncio.Future[str]":
        """Start (or join) the lookup for ``identity`` and return its future.

        Must be called from a running event loop. The cache entry is stored
        before this method returns, so a concurrent caller for the same
        identity always receives the same future.
        """

        loop = asyncio.get_running_loop()
        identity = Identity.of(identity.handle, identity.did)
        key = identity.cache_key
        if not key:
            skipped: "asyncio.Future[str]" = loop.create_future()
            skipped.set_result("")
            return skipped

        existing = self.cache.get(key)
        if existing is not None and existing.get_loop() is loop:
            return existing
        if existing is not None and existing.done() and not existing.cancelled():
            # Settled under an earlier event loop: rebind the result to this one.
            settled: "asyncio.Future[str]" = loop.create_future()
            settled.set_result(existing.result())
            self.cache.put(key, settled)
            return settled

        # No entry, or one left pending by a loop that has since stopped.
        lookup = loop.create_task(self._run_chain(identity))
        self.cache.put(key, lookup)
        return lookup

    async def _run_chain(self, identity: Identity) -> str:
        for adapter in self.adapters:
            try:
                avatar_url = await adapter.resolve(identity)
            except Exception:
                # A failing adapter counts as a miss.
                continue
            if avatar_url:
                return avatar_url
        return ""
