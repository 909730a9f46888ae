"""Conversion between a DraftRecord and the match persistence payload.

Payload shape (one entry per team in ``teams``)::

    {
        "team": "Team Name", "team_color": "blue",
        "banning_phase1": ["Hero", null, "Hero"],
        "banning_phase2": ["Hero", "Hero"],
        "picks1": [{"team": ..., "lane": "exp", "hero": "Hero", "player": "Name"}, ...],
        "picks2": [...],
    }

Skipped bans are ``null``; trailing positions never reached are omitted.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from mlbb_draft.errors import UnknownHero, ValidationFailed
from mlbb_draft.models.draft import (
    DraftRecord,
    HeroSlot,
    Lane,
    MatchMetadata,
    PickSlot,
    SlotState,
    Team,
    phase_slots,
)
from mlbb_draft.models.hero import HeroRef
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.services.draft_validator import ValidationContext, validate

logger = logging.getLogger(__name__)


def _ban_names(slots: list[HeroSlot]) -> list[Optional[str]]:
    # Trailing unreached positions are dropped; positions stay aligned
    while slots and slots[-1].state is SlotState.UNFILLED:
        slots = slots[:-1]
    # null means skipped, so an unreached position before a played one has no encoding
    if any(slot.state is SlotState.UNFILLED for slot in slots):
        raise ValueError("Ban group has an unreached position before a banned or skipped one")
    return [slot.hero_name for slot in slots]


def _pick_entries(team_name: str, slots: list[PickSlot]) -> list[dict]:
    while slots and slots[-1].is_blank():
        slots = slots[:-1]
    return [
        {
            "team": team_name,
            "lane": slot.lane.value if slot.lane else None,
            "hero": slot.hero_name,
            "player": slot.player.name if slot.player else None,
        }
        for slot in slots
    ]


def _objective_score(blue: int, red: int) -> Optional[str]:
    if not blue and not red:
        return None
    return f"{blue or 0}-{red or 0}"


def _parse_objective_score(value: Optional[str]) -> tuple[int, int]:
    if not value:
        return 0, 0
    blue, _, red = str(value).partition("-")
    return int(blue or 0), int(red or 0)


def build_payload(record: DraftRecord) -> dict:
    """Serialize a record into the persistence payload. Does not validate.

    Raises:
        ValueError: If a ban group has an unreached position before a
            banned or skipped one (``null`` is reserved for skipped bans)
    """
    meta = record.metadata
    teams = []
    for team in Team:
        name = meta.team_name(team)
        teams.append({
            "team": name,
            "team_color": team.value,
            "banning_phase1": _ban_names(record.ban_group(team, 1)),
            "banning_phase2": _ban_names(record.ban_group(team, 2)),
            "picks1": _pick_entries(name, record.pick_group(team, 1)),
            "picks2": _pick_entries(name, record.pick_group(team, 2)),
        })

    return {
        "match_date": meta.match_date.isoformat() if meta.match_date else None,
        "winner": meta.winner,
        "turtle_taken": _objective_score(meta.turtle_taken_blue, meta.turtle_taken_red),
        "lord_taken": _objective_score(meta.lord_taken_blue, meta.lord_taken_red),
        "notes": meta.notes,
        "playstyle": meta.playstyle,
        "teams": teams,
    }


def export_draft(record: DraftRecord, context: ValidationContext) -> dict:
    """Validate and serialize a finished draft.

    Raises:
        ValidationFailed: With every validation error, when any rule fails
    """
    errors = validate(record, context)
    if errors:
        logger.info(f"Draft export rejected with {len(errors)} error(s)")
        raise ValidationFailed(errors)
    payload = build_payload(record)
    logger.info(f"Draft exported: {context.blue_team_name} vs {context.red_team_name}")
    return payload


def record_from_payload(
    payload: dict,
    heroes: Iterable[HeroRef],
    rosters: Optional[dict[Team, list[RosterPlayer]]] = None,
) -> DraftRecord:
    """Rebuild a DraftRecord from a stored payload, e.g. to edit a saved match.

    Player names not on the supplied roster become bare ``RosterPlayer``
    entries with the slot's lane as role.

    Raises:
        UnknownHero: If a payload hero is not in the catalog
    """
    catalog = {hero.name: hero for hero in heroes}
    rosters = rosters or {}

    def hero_ref(name: str) -> HeroRef:
        if name not in catalog:
            raise UnknownHero(name)
        return catalog[name]

    record = DraftRecord()
    meta = record.metadata
    if payload.get("match_date"):
        meta.match_date = date.fromisoformat(payload["match_date"])
    meta.winner = payload.get("winner") or ""
    meta.notes = payload.get("notes") or ""
    meta.playstyle = payload.get("playstyle") or ""
    meta.turtle_taken_blue, meta.turtle_taken_red = _parse_objective_score(payload.get("turtle_taken"))
    meta.lord_taken_blue, meta.lord_taken_red = _parse_objective_score(payload.get("lord_taken"))

    for entry in payload.get("teams", []):
        team = Team(entry.get("team_color"))
        if team is Team.BLUE:
            meta.blue_team_name = entry.get("team") or ""
        else:
            meta.red_team_name = entry.get("team") or ""
        roster = {player.name: player for player in rosters.get(team, [])}

        for phase in (1, 2):
            slots = phase_slots(phase)
            for offset, name in enumerate(entry.get(f"banning_phase{phase}") or []):
                if offset >= len(slots):
                    break
                ban = HeroSlot.filled(hero_ref(name)) if name else HeroSlot.skipped()
                record.bans[team][slots.start + offset] = ban

            for offset, pick in enumerate(entry.get(f"picks{phase}") or []):
                if offset >= len(slots):
                    break
                slot = record.picks[team][slots.start + offset]
                slot.lane = Lane(pick["lane"]) if pick.get("lane") else None
                slot.hero = hero_ref(pick["hero"]) if pick.get("hero") else None
                player_name = pick.get("player")
                if player_name:
                    slot.player = roster.get(player_name) or RosterPlayer(
                        name=player_name, role=slot.lane.value if slot.lane else ""
                    )

    return record
