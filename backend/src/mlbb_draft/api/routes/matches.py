"""REST endpoints for saved matches and team rosters."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, HTTPException, Query, Request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["matches"])


@router.get("/matches")
async def list_matches(
    request: Request,
    team: Optional[str] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
):
    """Recent saved matches, newest first, optionally only those of one team."""
    repo = request.app.state.repository
    return {"matches": repo.list_matches(team_name=team, limit=limit)}


@router.get("/matches/{match_id}")
async def get_match(request: Request, match_id: str):
    """Stored draft payload of one match."""
    match = request.app.state.repository.get_match(match_id)
    if match is None:
        logger.info(f"Match not found: {match_id}")
        raise HTTPException(status_code=404, detail=f"Match not found: {match_id}")
    return match


@router.get("/teams")
async def list_teams(request: Request):
    """Names of teams with registered players."""
    return {"teams": request.app.state.repository.get_team_names()}


@router.get("/teams/{team_name}/roster")
async def get_roster(request: Request, team_name: str):
    players = request.app.state.repository.get_roster(team_name)
    return {
        "team": team_name,
        "players": [
            {
                "name": p.name,
                "role": p.role,
                "is_substitute": p.is_substitute,
                "substitute_order": p.substitute_order,
            }
            for p in players
        ],
    }
