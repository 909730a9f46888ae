"""Data models for the MLBB draft engine."""

from mlbb_draft.models.draft import (
    LANE_ORDER,
    ActionKind,
    DraftRecord,
    DraftStep,
    HeroSlot,
    Lane,
    MatchMetadata,
    PickSlot,
    SessionState,
    SlotState,
    Team,
)
from mlbb_draft.models.hero import HeroRef, HeroRole
from mlbb_draft.models.team import RosterPlayer

__all__ = [
    "LANE_ORDER",
    "ActionKind",
    "DraftRecord",
    "DraftStep",
    "HeroSlot",
    "Lane",
    "MatchMetadata",
    "PickSlot",
    "SessionState",
    "SlotState",
    "Team",
    "HeroRef",
    "HeroRole",
    "RosterPlayer",
]
