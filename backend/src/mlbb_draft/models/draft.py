"""Draft schedule, slot and record models."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional

from mlbb_draft.models.hero import HeroRef
from mlbb_draft.models.team import RosterPlayer

SLOTS_PER_TEAM = 5
PHASE_1_SLOTS = 3  # slots 0-2 are filled in phase 1, 3-4 in phase 2


class Team(str, Enum):
    """Draft sides."""

    BLUE = "blue"
    RED = "red"

    @property
    def opponent(self) -> "Team":
        return Team.RED if self is Team.BLUE else Team.BLUE


class ActionKind(str, Enum):
    BAN = "ban"
    PICK = "pick"


class Lane(str, Enum):
    """The five MLBB lanes, in their fixed display order."""

    EXP = "exp"
    JUNGLER = "jungler"
    MID = "mid"
    GOLD = "gold"
    ROAM = "roam"


LANE_ORDER: tuple[Lane, ...] = tuple(Lane)


class SessionState(str, Enum):
    """Lifecycle of a draft session."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


def phase_slots(phase: int) -> range:
    """Team-local slot indices that belong to a draft phase."""
    if phase == 1:
        return range(0, PHASE_1_SLOTS)
    if phase == 2:
        return range(PHASE_1_SLOTS, SLOTS_PER_TEAM)
    raise ValueError(f"Unknown draft phase: {phase}")


@dataclass(frozen=True)
class DraftStep:
    """One scheduled action of the draft."""

    sequence: int  # 0-19
    kind: ActionKind
    team: Team
    phase: int  # 1 or 2
    slot_index: int  # team-local position 0-4

    @property
    def phase_slot(self) -> int:
        """Position inside this step's team/phase/kind group."""
        return self.slot_index - phase_slots(self.phase).start


class SlotState(str, Enum):
    UNFILLED = "unfilled"  # not reached yet
    SKIPPED = "skipped"  # ban explicitly passed
    FILLED = "filled"


@dataclass(frozen=True)
class HeroSlot:
    """Tagged union for a ban position: unfilled, skipped or a hero."""

    state: SlotState = SlotState.UNFILLED
    hero: Optional[HeroRef] = None

    def __post_init__(self):
        if (self.state is SlotState.FILLED) != (self.hero is not None):
            raise ValueError("Only FILLED slots carry a hero")

    @classmethod
    def unfilled(cls) -> "HeroSlot":
        return cls(SlotState.UNFILLED)

    @classmethod
    def skipped(cls) -> "HeroSlot":
        return cls(SlotState.SKIPPED)

    @classmethod
    def filled(cls, hero: HeroRef) -> "HeroSlot":
        return cls(SlotState.FILLED, hero)

    @property
    def hero_name(self) -> Optional[str]:
        return self.hero.name if self.hero else None


@dataclass
class PickSlot:
    """A team's pick position. Hero, lane and player clear independently."""

    hero: Optional[HeroRef] = None
    lane: Optional[Lane] = None
    player: Optional[RosterPlayer] = None

    @property
    def hero_name(self) -> Optional[str]:
        return self.hero.name if self.hero else None

    def is_blank(self) -> bool:
        return self.hero is None and self.lane is None and self.player is None


@dataclass
class MatchMetadata:
    """Match fields owned by the match-entry feature, carried with the draft."""

    match_date: Optional[date] = None
    winner: str = ""
    blue_team_name: str = ""
    red_team_name: str = ""
    turtle_taken_blue: int = 0
    turtle_taken_red: int = 0
    lord_taken_blue: int = 0
    lord_taken_red: int = 0
    notes: str = ""
    playstyle: str = ""

    def team_name(self, team: Team) -> str:
        return self.blue_team_name if team is Team.BLUE else self.red_team_name


def _empty_bans() -> dict[Team, list[HeroSlot]]:
    return {team: [HeroSlot.unfilled() for _ in range(SLOTS_PER_TEAM)] for team in Team}


def _empty_picks() -> dict[Team, list[PickSlot]]:
    return {team: [PickSlot() for _ in range(SLOTS_PER_TEAM)] for team in Team}


@dataclass
class DraftRecord:
    """Bans, picks, lanes and players of both teams plus match metadata."""

    bans: dict[Team, list[HeroSlot]] = field(default_factory=_empty_bans)
    picks: dict[Team, list[PickSlot]] = field(default_factory=_empty_picks)
    metadata: MatchMetadata = field(default_factory=MatchMetadata)

    def ban_group(self, team: Team, phase: int) -> list[HeroSlot]:
        """Ban positions of one team in one phase (3 in phase 1, 2 in phase 2)."""
        return [self.bans[team][i] for i in phase_slots(phase)]

    def pick_group(self, team: Team, phase: int) -> list[PickSlot]:
        """Pick positions of one team in one phase."""
        return [self.picks[team][i] for i in phase_slots(phase)]

    def lanes(self, team: Team) -> list[Optional[Lane]]:
        """Lane assignment of a team, indexed by pick slot."""
        return [slot.lane for slot in self.picks[team]]

    def players(self, team: Team) -> dict[Lane, Optional[RosterPlayer]]:
        """Player assignment of a team, keyed by lane (assigned lanes only)."""
        return {slot.lane: slot.player for slot in self.picks[team] if slot.lane is not None}

    def clear_heroes(self) -> None:
        """Reset every ban and pick hero, keeping lanes and players."""
        for team in Team:
            self.bans[team] = [HeroSlot.unfilled() for _ in range(SLOTS_PER_TEAM)]
            for slot in self.picks[team]:
                slot.hero = None

    def clear_assignments(self) -> None:
        """Drop every lane and player assignment."""
        for team in Team:
            for slot in self.picks[team]:
                slot.lane = None
                slot.player = None
