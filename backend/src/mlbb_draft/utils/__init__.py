"""Utility modules for mlbb_draft."""

from mlbb_draft.utils.lane_normalizer import (
    LANE_ALIASES,
    LANE_LABELS,
    lane_aliases,
    lane_label,
    normalize_lane,
    normalize_lane_strict,
    role_matches_lane,
    sort_by_lane,
)

__all__ = [
    "LANE_ALIASES",
    "LANE_LABELS",
    "lane_aliases",
    "lane_label",
    "normalize_lane",
    "normalize_lane_strict",
    "role_matches_lane",
    "sort_by_lane",
]
