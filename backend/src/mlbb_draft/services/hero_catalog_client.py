"""HTTP client for a remote hero catalog.

The match backend exposes ``GET /api/heroes`` returning a list of
``{"name", "role", "image"}`` objects. This client fetches and parses it.
"""

import logging
from typing import Optional

import httpx

from mlbb_draft.models.hero import HeroRef, HeroRole

logger = logging.getLogger(__name__)


def parse_hero_catalog(data: list[dict]) -> list[HeroRef]:
    """Convert catalog rows into HeroRefs.

    Rows without a name or with an unknown role are skipped with a warning;
    later duplicates of a name are ignored.
    """
    heroes: list[HeroRef] = []
    seen: set[str] = set()
    for row in data:
        name = (row.get("name") or "").strip()
        role = HeroRole.parse(row.get("role"))
        if not name or role is None:
            logger.warning(f"Skipping hero catalog row: {row!r}")
            continue
        if name in seen:
            continue
        seen.add(name)
        image = row.get("image") or row.get("image_ref") or row.get("imageRef") or ""
        heroes.append(HeroRef(name=name, role=role, image_ref=image))
    return heroes


class HeroCatalogClient:
    """Async client for ``/api/heroes`` on the match backend."""

    HEROES_PATH = "/api/heroes"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the catalog client.

        Args:
            base_url: Backend root, e.g. "https://api.example.com"
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def fetch_heroes(self) -> list[HeroRef]:
        """Fetch and parse the hero catalog.

        Raises:
            httpx.HTTPError: On transport failures or non-2xx responses
        """
        client = await self._get_client()
        response = await client.get(self.HEROES_PATH)
        response.raise_for_status()
        heroes = parse_hero_catalog(response.json())
        logger.info(f"Fetched {len(heroes)} heroes from {self.base_url}")
        return heroes
