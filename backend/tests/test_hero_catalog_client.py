"""Tests for the remote hero catalog client."""

import httpx
import pytest

from mlbb_draft.models.hero import HeroRole
from mlbb_draft.services.hero_catalog_client import HeroCatalogClient, parse_hero_catalog

pytestmark = pytest.mark.anyio

CATALOG = [
    {"name": "Chou", "role": "Fighter", "image": "chou.png"},
    {"name": "Ling", "role": "assassin", "image": "ling.png"},
    {"name": "", "role": "Mage"},
    {"name": "Mystery", "role": "Coach"},
    {"name": "Chou", "role": "Tank"},
]


def test_parse_skips_bad_rows_and_duplicates():
    heroes = parse_hero_catalog(CATALOG)

    assert [(h.name, h.role) for h in heroes] == [("Chou", HeroRole.FIGHTER), ("Ling", HeroRole.ASSASSIN)]
    assert heroes[0].image_ref == "chou.png"


def test_parse_accepts_image_ref_spellings():
    heroes = parse_hero_catalog([{"name": "Tigreal", "role": "Tank", "imageRef": "t.png"}])
    assert heroes[0].image_ref == "t.png"


async def test_fetch_heroes():
    requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return httpx.Response(200, json=CATALOG)

    client = HeroCatalogClient("https://backend.test/", transport=httpx.MockTransport(handler))
    try:
        heroes = await client.fetch_heroes()
    finally:
        await client.close()

    assert requested == ["/api/heroes"]
    assert [h.name for h in heroes] == ["Chou", "Ling"]


async def test_fetch_heroes_raises_on_server_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = HeroCatalogClient("https://backend.test", transport=transport)

    with pytest.raises(httpx.HTTPStatusError):
        await client.fetch_heroes()
    await client.close()


async def test_client_recreated_after_close():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    client = HeroCatalogClient("https://backend.test", transport=transport)

    assert await client.fetch_heroes() == []
    await client.close()
    assert await client.fetch_heroes() == []
    await client.close()
