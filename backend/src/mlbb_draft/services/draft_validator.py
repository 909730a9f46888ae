"""Checks whether a draft record is complete enough to export."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from mlbb_draft.models.draft import DraftRecord, MatchMetadata, SlotState, Team, phase_slots
from mlbb_draft.utils.lane_normalizer import lane_label

PHASES = (1, 2)


class ValidationCode(str, Enum):
    MISSING_TEAM_NAME = "missing_team_name"
    MISSING_BAN_GROUP = "missing_ban_group"
    MISSING_PICK_GROUP = "missing_pick_group"
    MISSING_HERO = "missing_hero"
    MISSING_LANE = "missing_lane"
    MISSING_PLAYER = "missing_player"
    INVALID_WINNER = "invalid_winner"
    MISSING_MATCH_DATE = "missing_match_date"
    NEGATIVE_OBJECTIVE = "negative_objective"


@dataclass(frozen=True)
class ValidationError:
    """One problem found in a draft, pointing at the offending slot if any."""

    code: ValidationCode
    message: str
    team: Optional[Team] = None
    phase: Optional[int] = None
    slot_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "message": self.message,
            "team": self.team.value if self.team else None,
            "phase": self.phase,
            "slot_index": self.slot_index,
        }


@dataclass(frozen=True)
class ValidationContext:
    """Match facts the validator checks the draft against.

    ``home_team_name`` names the side whose picks must all credit a roster
    player; the opponent usually has no roster and is exempt.
    """

    winner: str
    blue_team_name: str
    red_team_name: str
    home_team_name: Optional[str] = None
    match_date: Optional[date] = None
    require_match_date: bool = False

    @classmethod
    def from_metadata(
        cls,
        metadata: MatchMetadata,
        home_team_name: Optional[str] = None,
        require_match_date: bool = False,
    ) -> "ValidationContext":
        return cls(
            winner=metadata.winner,
            blue_team_name=metadata.blue_team_name,
            red_team_name=metadata.red_team_name,
            home_team_name=home_team_name,
            match_date=metadata.match_date,
            require_match_date=require_match_date,
        )

    def team_name(self, team: Team) -> str:
        return self.blue_team_name if team is Team.BLUE else self.red_team_name

    @property
    def home_team(self) -> Optional[Team]:
        home = (self.home_team_name or "").strip()
        if not home:
            return None
        for team in Team:
            if self.team_name(team).strip() == home:
                return team
        return None


def _slot_label(team: Team, slot_index: int, lane) -> str:
    label = f"{team.value} pick {slot_index + 1}"
    return f"{label} ({lane_label(lane)})" if lane else label


def validate(record: DraftRecord, context: ValidationContext) -> list[ValidationError]:
    """Collect every reason the draft cannot be exported.

    Rules are independent; an empty list means the draft is exportable.
    """
    errors: list[ValidationError] = []

    for team in Team:
        if not context.team_name(team).strip():
            errors.append(ValidationError(
                ValidationCode.MISSING_TEAM_NAME,
                f"{team.value.capitalize()} team name is required",
                team=team,
            ))

    # A ban group is present once every position is banned or skipped
    for team in Team:
        for phase in PHASES:
            group = record.ban_group(team, phase)
            if any(slot.state is SlotState.UNFILLED for slot in group):
                errors.append(ValidationError(
                    ValidationCode.MISSING_BAN_GROUP,
                    f"{team.value} phase {phase} bans are incomplete",
                    team=team,
                    phase=phase,
                ))

    # A pick group is present once any of its slots has a hero; lanes alone do not count
    for team in Team:
        for phase in PHASES:
            if all(slot.hero is None for slot in record.pick_group(team, phase)):
                errors.append(ValidationError(
                    ValidationCode.MISSING_PICK_GROUP,
                    f"{team.value} phase {phase} picks are missing",
                    team=team,
                    phase=phase,
                ))

    home = context.home_team
    for team in Team:
        for phase in PHASES:
            for slot_index in phase_slots(phase):
                slot = record.picks[team][slot_index]
                where = _slot_label(team, slot_index, slot.lane)
                if slot.hero is None:
                    errors.append(ValidationError(
                        ValidationCode.MISSING_HERO, f"{where} has no hero",
                        team=team, phase=phase, slot_index=slot_index,
                    ))
                if slot.lane is None:
                    errors.append(ValidationError(
                        ValidationCode.MISSING_LANE, f"{where} has no lane",
                        team=team, phase=phase, slot_index=slot_index,
                    ))
                if team is home and slot.player is None:
                    errors.append(ValidationError(
                        ValidationCode.MISSING_PLAYER, f"{where} has no player assigned",
                        team=team, phase=phase, slot_index=slot_index,
                    ))

    names = {context.blue_team_name.strip(), context.red_team_name.strip()} - {""}
    if not context.winner.strip() or context.winner.strip() not in names:
        errors.append(ValidationError(
            ValidationCode.INVALID_WINNER,
            "Winner must be one of the two teams",
        ))

    if context.require_match_date and context.match_date is None:
        errors.append(ValidationError(ValidationCode.MISSING_MATCH_DATE, "Match date is required"))

    meta = record.metadata
    for field_name in ("turtle_taken_blue", "turtle_taken_red", "lord_taken_blue", "lord_taken_red"):
        if getattr(meta, field_name) < 0:
            errors.append(ValidationError(
                ValidationCode.NEGATIVE_OBJECTIVE,
                f"{field_name.replace('_', ' ')} cannot be negative",
            ))

    return errors


def is_exportable(record: DraftRecord, context: ValidationContext) -> bool:
    return not validate(record, context)
