import asyncio
import json

import pytest

from ldcard.avatar import AvatarCache, AvatarResolver


class StubAdapter:
    """Avatar adapter returning a fixed result and counting its calls."""

    def __init__(self, result="", error=None, gate=None):
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = []

    async def resolve(self, identity):
        self.calls.append(identity)
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result


def ld_json_page(*records, container=True, raw_blocks=()):
    scripts = [
        f'<script type="application/ld+json">{json.dumps(record)}</script>'
        for record in records
    ]
    scripts.extend(f'<script type="application/ld+json">{raw}</script>' for raw in raw_blocks)
    target = '<div id="card"></div>' if container else ""
    return f"<html><head>{''.join(scripts)}</head><body>{target}</body></html>"


@pytest.fixture
def cache():
    return AvatarCache()


@pytest.fixture
def make_resolver(cache):
    def _make(*adapters):
        return AvatarResolver(list(adapters), cache=cache)

    return _make
