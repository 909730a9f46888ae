"""REST endpoints for interactive draft sessions."""

import logging
import threading
import time
import uuid
from contextlib import contextmanager
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from mlbb_draft.config import settings
from mlbb_draft.errors import (
    DecisionPending,
    DraftError,
    HeroUnavailable,
    IllegalStep,
    InvalidChoice,
    LaneRequired,
    PreconditionNotMet,
    UnknownHero,
    ValidationFailed,
)
from mlbb_draft.models.draft import ActionKind, DraftRecord, HeroSlot, Lane, PickSlot, Team
from mlbb_draft.models.hero import HeroRef, HeroRole
from mlbb_draft.models.session import DraftSession
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.repositories.draft_repository import DraftRepository
from mlbb_draft.services.catalog_cache import TTLCache
from mlbb_draft.services.draft_export import export_draft, record_from_payload
from mlbb_draft.services.draft_sequencer import DraftSequencer
from mlbb_draft.services.draft_validator import ValidationContext, validate
from mlbb_draft.services.player_resolver import PendingDecision

logger = logging.getLogger(__name__)

SESSION_CLEANUP_INTERVAL_SECONDS = 60

router = APIRouter(prefix="/api/drafts", tags=["drafts"])

# In-memory session storage with thread-safe access
_sessions: dict[str, DraftSession] = {}
_sessions_lock = threading.Lock()
_session_locks: dict[str, threading.Lock] = {}
_cleanup_lock = threading.Lock()
_last_cleanup = 0.0

_ERROR_STATUS: dict[type[DraftError], int] = {
    IllegalStep: 409,
    DecisionPending: 409,
    LaneRequired: 409,
    PreconditionNotMet: 409,
    HeroUnavailable: 400,
    UnknownHero: 400,
    InvalidChoice: 400,
    ValidationFailed: 422,
}


def _is_session_expired(session: DraftSession, now: float) -> bool:
    return (now - session.last_access) >= settings.session_ttl_seconds


def _prune_expired_sessions(now: float | None = None) -> None:
    """Remove expired sessions opportunistically."""
    global _last_cleanup
    now = now or time.time()
    if now - _last_cleanup < SESSION_CLEANUP_INTERVAL_SECONDS:
        return

    with _cleanup_lock:
        if now - _last_cleanup < SESSION_CLEANUP_INTERVAL_SECONDS:
            return

        with _sessions_lock:
            expired = [
                session_id
                for session_id, session in _sessions.items()
                if _is_session_expired(session, now)
                and not (_session_locks.get(session_id) and _session_locks[session_id].locked())
            ]
            for session_id in expired:
                _sessions.pop(session_id, None)
                _session_locks.pop(session_id, None)
        if expired:
            logger.info(f"Pruned {len(expired)} expired draft session(s)")

        _last_cleanup = now


@contextmanager
def _locked_session(session_id: str):
    """Yield a live session while holding its lock."""
    _prune_expired_sessions()
    with _sessions_lock:
        session = _sessions.get(session_id)
        if not session:
            raise HTTPException(status_code=404, detail="Session not found")
        lock = _session_locks.setdefault(session_id, threading.Lock())

    with lock:
        now = time.time()
        if _is_session_expired(session, now):
            raise HTTPException(status_code=404, detail="Session expired")
        session.last_access = now
        try:
            yield session
        except DraftError as e:
            raise _to_http_exception(e) from e


def _to_http_exception(error: DraftError) -> HTTPException:
    detail: dict = {"reason": error.reason, "message": error.message}
    if isinstance(error, ValidationFailed):
        detail["errors"] = [err.to_dict() for err in error.errors]
    if isinstance(error, DecisionPending) and error.decision is not None:
        detail["decision"] = _serialize_decision(error.decision)
    status = next(
        (code for cls, code in _ERROR_STATUS.items() if isinstance(error, cls)),
        400,
    )
    return HTTPException(status_code=status, detail=detail)


def _get_or_create_services(request: Request) -> tuple[DraftRepository, TTLCache, TTLCache]:
    """Get the repository and lazily create the catalog caches."""
    repo = request.app.state.repository

    if not hasattr(request.app.state, "hero_cache"):
        request.app.state.hero_cache = TTLCache(
            lambda _: repo.get_heroes(),
            ttl_seconds=settings.hero_cache_ttl_seconds,
        )
        request.app.state.roster_cache = TTLCache(
            lambda team_name: repo.get_roster(team_name) if team_name else [],
            ttl_seconds=settings.roster_cache_ttl_seconds,
        )

    return repo, request.app.state.hero_cache, request.app.state.roster_cache


class CreateSessionRequest(BaseModel):
    blue_team_name: str = ""
    red_team_name: str = ""
    home_team_name: Optional[str] = None
    mode: Literal["mock", "comprehensive"] = "mock"
    default_lanes: bool = False
    match_id: Optional[str] = None  # edit a stored match instead of starting blank


class LaneRequest(BaseModel):
    team: Team
    slot_index: int = Field(ge=0, le=4)
    lane: Optional[Lane] = None


class SwapRequest(BaseModel):
    team: Team
    slot_a: int = Field(ge=0, le=4)
    slot_b: int = Field(ge=0, le=4)


class TeamRequest(BaseModel):
    team: Team


class BanRequest(BaseModel):
    hero: Optional[str] = None  # None skips the ban
    team: Optional[Team] = None


class PickRequest(BaseModel):
    hero: str
    team: Optional[Team] = None


class ChoosePlayerRequest(BaseModel):
    player: str


class EditSlotRequest(BaseModel):
    kind: ActionKind
    team: Team
    index: int = Field(ge=0, le=4)
    hero: Optional[str] = None


class AssignPlayerRequest(BaseModel):
    team: Team
    slot_index: int = Field(ge=0, le=4)
    player: Optional[str] = None


class ResetRequest(BaseModel):
    clear_assignments: bool = False


class MetadataRequest(BaseModel):
    match_date: Optional[date] = None
    winner: Optional[str] = None
    blue_team_name: Optional[str] = None
    red_team_name: Optional[str] = None
    turtle_taken_blue: Optional[int] = None
    turtle_taken_red: Optional[int] = None
    lord_taken_blue: Optional[int] = None
    lord_taken_red: Optional[int] = None
    notes: Optional[str] = None
    playstyle: Optional[str] = None


def _load_saved_record(repo: DraftRepository, hero_cache: TTLCache, roster_cache: TTLCache, match_id: str):
    """Rebuild the record of a stored match, with rosters of its two teams."""
    payload = repo.get_match(match_id)
    if payload is None:
        raise HTTPException(status_code=404, detail=f"Match not found: {match_id}")

    names = {team.get("team_color"): (team.get("team") or "").strip() for team in payload.get("teams", [])}
    rosters = {team: roster_cache.get(names.get(team.value, "")) for team in Team}
    try:
        record = record_from_payload(payload, hero_cache.get(), rosters=rosters)
    except DraftError as e:
        raise _to_http_exception(e) from e
    return record, rosters


@router.post("/sessions", status_code=201)
async def create_session(request: Request, body: CreateSessionRequest):
    """Create a draft session with catalog and roster snapshots.

    With ``match_id`` the session edits that stored match: its bans, picks
    and metadata are loaded, and exporting replaces the stored match.
    """
    _prune_expired_sessions()
    repo, hero_cache, roster_cache = _get_or_create_services(request)

    if body.match_id:
        record, rosters = _load_saved_record(repo, hero_cache, roster_cache, body.match_id)
        sequencer = DraftSequencer(
            heroes=hero_cache.get(),
            blue_roster=rosters[Team.BLUE],
            red_roster=rosters[Team.RED],
            record=record,
        )
    else:
        sequencer = DraftSequencer(
            heroes=hero_cache.get(),
            blue_roster=roster_cache.get(body.blue_team_name.strip()),
            red_roster=roster_cache.get(body.red_team_name.strip()),
        )
        sequencer.record.metadata.blue_team_name = body.blue_team_name
        sequencer.record.metadata.red_team_name = body.red_team_name
    if body.default_lanes:
        for team in Team:
            if not any(sequencer.record.lanes(team)):
                sequencer.assign_default_lanes(team)

    session = DraftSession(
        session_id=f"draft_{uuid.uuid4().hex[:12]}",
        sequencer=sequencer,
        mode=body.mode,
        home_team_name=body.home_team_name,
        match_id=body.match_id,
    )
    with _sessions_lock:
        _sessions[session.session_id] = session
        _session_locks[session.session_id] = threading.Lock()

    logger.info(
        f"Draft session {session.session_id} created ({body.mode}): "
        f"{body.blue_team_name or '?'} vs {body.red_team_name or '?'}"
    )
    return _serialize_session(session)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str):
    with _locked_session(session_id) as session:
        return _serialize_session(session)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    with _sessions_lock:
        if _sessions.pop(session_id, None) is None:
            raise HTTPException(status_code=404, detail="Session not found")
        _session_locks.pop(session_id, None)


@router.put("/sessions/{session_id}/lanes")
async def assign_lane(session_id: str, body: LaneRequest):
    with _locked_session(session_id) as session:
        session.sequencer.assign_lane(body.team, body.slot_index, body.lane)
        return _serialize_session(session)


@router.post("/sessions/{session_id}/lanes/swap")
async def swap_lanes(session_id: str, body: SwapRequest):
    with _locked_session(session_id) as session:
        session.sequencer.swap_lanes(body.team, body.slot_a, body.slot_b)
        return _serialize_session(session)


@router.post("/sessions/{session_id}/lanes/default")
async def assign_default_lanes(session_id: str, body: TeamRequest):
    with _locked_session(session_id) as session:
        session.sequencer.assign_default_lanes(body.team)
        return _serialize_session(session)


@router.post("/sessions/{session_id}/start")
async def start_draft(session_id: str):
    with _locked_session(session_id) as session:
        session.sequencer.start()
        return _serialize_session(session)


@router.post("/sessions/{session_id}/bans")
async def submit_ban(session_id: str, body: BanRequest):
    """Ban a hero on the current step; a null or blank hero skips the ban."""
    hero = (body.hero or "").strip() or None
    with _locked_session(session_id) as session:
        session.sequencer.submit_ban(hero, team=body.team)
        return _serialize_session(session)


@router.post("/sessions/{session_id}/picks")
async def submit_pick(session_id: str, body: PickRequest):
    """Pick a hero; the response carries ``pending_decision`` if a player must be chosen."""
    with _locked_session(session_id) as session:
        session.sequencer.submit_pick(body.hero, team=body.team)
        return _serialize_session(session)


@router.post("/sessions/{session_id}/decision")
async def choose_player(session_id: str, body: ChoosePlayerRequest):
    with _locked_session(session_id) as session:
        session.sequencer.choose_player(body.player)
        return _serialize_session(session)


@router.delete("/sessions/{session_id}/decision")
async def discard_decision(session_id: str):
    with _locked_session(session_id) as session:
        session.sequencer.discard_decision()
        return _serialize_session(session)


@router.put("/sessions/{session_id}/slots")
async def edit_slot(session_id: str, body: EditSlotRequest):
    with _locked_session(session_id) as session:
        session.sequencer.edit_slot(body.kind, body.team, body.index, body.hero)
        return _serialize_session(session)


@router.put("/sessions/{session_id}/players")
async def assign_player(session_id: str, body: AssignPlayerRequest):
    with _locked_session(session_id) as session:
        session.sequencer.assign_player(body.team, body.slot_index, body.player)
        return _serialize_session(session)


@router.post("/sessions/{session_id}/undo")
async def undo_step(session_id: str):
    with _locked_session(session_id) as session:
        session.sequencer.undo()
        return _serialize_session(session)


@router.post("/sessions/{session_id}/expire")
async def expire_turn(session_id: str):
    """Called by the UI when its local countdown for the current step runs out."""
    with _locked_session(session_id) as session:
        session.sequencer.expire_turn()
        return _serialize_session(session)


@router.post("/sessions/{session_id}/reset")
async def reset_draft(session_id: str, body: ResetRequest):
    with _locked_session(session_id) as session:
        session.sequencer.reset(clear_assignments=body.clear_assignments)
        return _serialize_session(session)


@router.put("/sessions/{session_id}/metadata")
async def update_metadata(session_id: str, body: MetadataRequest):
    with _locked_session(session_id) as session:
        metadata = session.sequencer.record.metadata
        for field_name, value in body.model_dump(exclude_none=True).items():
            setattr(metadata, field_name, value)
        return _serialize_session(session)


@router.get("/sessions/{session_id}/heroes")
async def list_available_heroes(
    session_id: str,
    role: Optional[HeroRole] = None,
    lane: Optional[Lane] = None,
    search: str = "",
):
    """Heroes still selectable, filtered like the hero grid."""
    with _locked_session(session_id) as session:
        heroes = session.sequencer.available_heroes(role=role, lane=lane, search=search)
        return {"heroes": [_serialize_hero(hero) for hero in heroes]}


@router.get("/sessions/{session_id}/validation")
async def validate_session(session_id: str):
    with _locked_session(session_id) as session:
        errors = validate(session.sequencer.record, _validation_context(session))
        return {
            "exportable": not errors,
            "errors": [err.to_dict() for err in errors],
        }


@router.post("/sessions/{session_id}/export", status_code=201)
async def export_session(request: Request, session_id: str):
    """Validate the draft and persist it as a match (replacing it when editing one)."""
    repo, _, _ = _get_or_create_services(request)
    with _locked_session(session_id) as session:
        payload = export_draft(session.sequencer.record, _validation_context(session))
        session.match_id = repo.save_match(payload, match_id=session.match_id)
        return {"match_id": session.match_id, "payload": payload}


def _validation_context(session: DraftSession) -> ValidationContext:
    return ValidationContext.from_metadata(
        session.sequencer.record.metadata,
        home_team_name=session.home_team_name,
        require_match_date=session.mode == "comprehensive",
    )


def _serialize_hero(hero: Optional[HeroRef]) -> Optional[dict]:
    if hero is None:
        return None
    return {"name": hero.name, "role": hero.role.value, "image_ref": hero.image_ref}


def _serialize_player(player: Optional[RosterPlayer]) -> Optional[dict]:
    if player is None:
        return None
    return {
        "name": player.name,
        "role": player.role,
        "is_substitute": player.is_substitute,
    }


def _serialize_ban(slot: HeroSlot) -> dict:
    return {"state": slot.state.value, "hero": _serialize_hero(slot.hero)}


def _serialize_pick(slot: PickSlot) -> dict:
    return {
        "hero": _serialize_hero(slot.hero),
        "lane": slot.lane.value if slot.lane else None,
        "player": _serialize_player(slot.player),
    }


def _serialize_decision(decision: Optional[PendingDecision]) -> Optional[dict]:
    if decision is None:
        return None
    return {
        "team": decision.team.value,
        "slot_index": decision.slot_index,
        "lane": decision.lane.value,
        "hero": decision.hero.name,
        "candidates": [_serialize_player(p) for p in decision.candidates],
    }


def _serialize_record(record: DraftRecord) -> dict:
    meta = record.metadata
    return {
        "bans": {team.value: [_serialize_ban(s) for s in record.bans[team]] for team in Team},
        "picks": {team.value: [_serialize_pick(s) for s in record.picks[team]] for team in Team},
        "metadata": {
            "match_date": meta.match_date.isoformat() if meta.match_date else None,
            "winner": meta.winner,
            "blue_team_name": meta.blue_team_name,
            "red_team_name": meta.red_team_name,
            "turtle_taken_blue": meta.turtle_taken_blue,
            "turtle_taken_red": meta.turtle_taken_red,
            "lord_taken_blue": meta.lord_taken_blue,
            "lord_taken_red": meta.lord_taken_red,
            "notes": meta.notes,
            "playstyle": meta.playstyle,
        },
    }


def _serialize_session(session: DraftSession) -> dict:
    """Serialize a DraftSession to dict."""
    sequencer = session.sequencer
    step = sequencer.current_step()
    return {
        "session_id": session.session_id,
        "mode": session.mode,
        "state": sequencer.state.value,
        "current_step": {
            "sequence": step.sequence,
            "kind": step.kind.value,
            "team": step.team.value,
            "phase": step.phase,
            "slot_index": sequencer.active_slot(step.kind, step.team),
        } if step else None,
        "turn_seconds": settings.draft_turn_seconds,
        "pending_decision": _serialize_decision(sequencer.pending),
        "unavailable": sorted(sequencer.unavailable()),
        "lanes_ready": all(
            sequencer.lane_resolver.is_complete(team) and sequencer.lane_resolver.is_valid(team)
            for team in Team
        ),
        "record": _serialize_record(sequencer.record),
        "match_id": session.match_id,
    }
