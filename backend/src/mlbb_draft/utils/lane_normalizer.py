"""Centralized lane normalization.

All roster-role to lane matching goes through this module so that the
lookup and its inverse come from the same table. The canonical format is the
``Lane`` enum: exp, jungler, mid, gold, roam.
"""

import re
from typing import Optional

from mlbb_draft.models.draft import LANE_ORDER, Lane

# Every known spelling of a lane, in compact form (lowercase, no separators)
LANE_ALIASES: dict[str, Lane] = {
    # Exp lane
    "exp": Lane.EXP,
    "explane": Lane.EXP,
    "explaner": Lane.EXP,
    "experience": Lane.EXP,
    "top": Lane.EXP,
    "toplane": Lane.EXP,
    "toplaner": Lane.EXP,
    "offlane": Lane.EXP,

    # Jungle
    "jungler": Lane.JUNGLER,
    "jungle": Lane.JUNGLER,
    "jng": Lane.JUNGLER,
    "jg": Lane.JUNGLER,

    # Mid lane
    "mid": Lane.MID,
    "midlane": Lane.MID,
    "midlaner": Lane.MID,
    "middle": Lane.MID,

    # Gold lane - marksman/adc spellings all land here
    "gold": Lane.GOLD,
    "goldlane": Lane.GOLD,
    "goldlaner": Lane.GOLD,
    "adc": Lane.GOLD,
    "marksman": Lane.GOLD,
    "mm": Lane.GOLD,
    "carry": Lane.GOLD,
    "bot": Lane.GOLD,
    "botlane": Lane.GOLD,

    # Roam
    "roam": Lane.ROAM,
    "roamer": Lane.ROAM,
    "roamlane": Lane.ROAM,
    "support": Lane.ROAM,
    "sup": Lane.ROAM,
    "supp": Lane.ROAM,
}

# Shorter aliases are too ambiguous to match inside longer strings
CONTAINMENT_MIN_LENGTH = 3

_CONTAINMENT_ALIASES = sorted(
    (alias for alias in LANE_ALIASES if len(alias) >= CONTAINMENT_MIN_LENGTH),
    key=lambda alias: (-len(alias), alias),
)

LANE_LABELS: dict[Lane, str] = {
    Lane.EXP: "Exp Lane",
    Lane.JUNGLER: "Jungler",
    Lane.MID: "Mid Lane",
    Lane.GOLD: "Gold Lane",
    Lane.ROAM: "Roam",
}

_SEPARATORS = re.compile(r"[\s_\-]+")


def _compact(value: str) -> str:
    return _SEPARATORS.sub("", value.strip().lower())


def normalize_lane(role: Optional[str]) -> Optional[Lane]:
    """Normalize a roster role string to a lane.

    Exact aliases win; otherwise the longest alias contained in the string
    decides, so "Jungle Main" is a jungler and "Gold Lane (sub)" is gold.

    Examples:
        >>> normalize_lane("Gold Lane")
        <Lane.GOLD: 'gold'>
        >>> normalize_lane("support")
        <Lane.ROAM: 'roam'>
        >>> normalize_lane("coach") is None
        True
    """
    if role is None:
        return None
    if isinstance(role, Lane):
        return role

    compact = _compact(role)
    if not compact:
        return None
    if compact in LANE_ALIASES:
        return LANE_ALIASES[compact]

    for alias in _CONTAINMENT_ALIASES:
        if alias in compact:
            return LANE_ALIASES[alias]
    return None


def normalize_lane_strict(role: str) -> Lane:
    """Normalize a role string, raising ValueError if unknown."""
    lane = normalize_lane(role)
    if lane is None:
        raise ValueError(f"Unknown lane: {role}")
    return lane


def role_matches_lane(role: Optional[str], lane: Lane) -> bool:
    """True if a roster role string plays the given lane."""
    return normalize_lane(role) is lane


def lane_aliases(lane: Lane) -> frozenset[str]:
    """Every alias that normalizes to ``lane`` (inverse of LANE_ALIASES)."""
    return frozenset(alias for alias, target in LANE_ALIASES.items() if target is lane)


def lane_label(lane: Optional[Lane]) -> str:
    if lane is None:
        return "No lane assigned"
    return LANE_LABELS[lane]


def sort_by_lane(players: list, role_attr: str = "role") -> list:
    """Sort roster entries (objects or dicts) by the fixed lane order."""

    def lane_sort_key(player) -> int:
        role = player.get(role_attr) if isinstance(player, dict) else getattr(player, role_attr, None)
        lane = normalize_lane(role)
        return LANE_ORDER.index(lane) if lane else 99

    return sorted(players, key=lane_sort_key)
