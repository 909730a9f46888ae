"""Roster models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RosterPlayer:
    """A registered player of a team."""

    name: str
    role: str  # free-form roster role, e.g. "jungler", "Gold Lane", "adc"
    is_substitute: bool = False
    substitute_order: Optional[int] = None
