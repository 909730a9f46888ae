"""Draft engine services."""

from mlbb_draft.services.availability import is_available, selectable_heroes, unavailable
from mlbb_draft.services.draft_export import build_payload, export_draft, record_from_payload
from mlbb_draft.services.draft_sequencer import DRAFT_SCHEDULE, DraftSequencer, PickResult
from mlbb_draft.services.draft_validator import (
    ValidationCode,
    ValidationContext,
    ValidationError,
    validate,
)
from mlbb_draft.services.lane_resolver import LaneResolver
from mlbb_draft.services.player_resolver import PendingDecision, PlayerResolution, PlayerResolver

__all__ = [
    "is_available",
    "selectable_heroes",
    "unavailable",
    "build_payload",
    "export_draft",
    "record_from_payload",
    "DRAFT_SCHEDULE",
    "DraftSequencer",
    "PickResult",
    "ValidationCode",
    "ValidationContext",
    "ValidationError",
    "validate",
    "LaneResolver",
    "PendingDecision",
    "PlayerResolution",
    "PlayerResolver",
]
