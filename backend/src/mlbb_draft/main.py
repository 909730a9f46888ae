"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mlbb_draft import __version__
from mlbb_draft.api.routes.drafts import router as drafts_router
from mlbb_draft.api.routes.matches import router as matches_router
from mlbb_draft.config import settings
from mlbb_draft.repositories.draft_repository import DraftRepository
from mlbb_draft.services.hero_catalog_client import HeroCatalogClient

logger = logging.getLogger(__name__)


def get_database_path() -> Path:
    """Get the database path from settings, relative paths from the repo root."""
    db_path = Path(settings.database_path)
    if db_path.is_absolute():
        return db_path
    repo_root = Path(__file__).parent.parent.parent.parent
    return repo_root / settings.database_path


async def sync_hero_catalog(repo: DraftRepository, base_url: str) -> int:
    """Copy the remote hero catalog into the local database.

    Failures are logged and the existing local catalog is kept.
    """
    client = HeroCatalogClient(base_url)
    try:
        heroes = await client.fetch_heroes()
    except httpx.HTTPError as e:
        logger.error(f"Hero catalog sync from {base_url} failed: {e}")
        return 0
    finally:
        await client.close()

    for hero in heroes:
        repo.add_hero(hero)
    return len(heroes)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    if not hasattr(app.state, "repository"):
        app.state.repository = DraftRepository(get_database_path(), create=True)
        if settings.hero_catalog_url:
            await sync_hero_catalog(app.state.repository, settings.hero_catalog_url)
    yield


app = FastAPI(
    title="MLBB Draft",
    description="Mobile Legends draft session engine",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "mlbb-draft"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "MLBB Draft API",
        "version": __version__,
        "docs": "/docs",
    }


app.include_router(drafts_router)
app.include_router(matches_router)


def run():
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run("mlbb_draft.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
