"""Errors raised by the draft engine.

Every error is recoverable by the caller: fix the input and call again.
``reason`` is a stable machine-readable code for the HTTP layer.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from mlbb_draft.services.draft_validator import ValidationError
    from mlbb_draft.services.player_resolver import PendingDecision


class DraftError(Exception):
    """Base class for draft engine errors."""

    reason = "draft_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class IllegalStep(DraftError):
    """Action does not match the current scheduled step or session state."""

    reason = "illegal_step"


class HeroUnavailable(DraftError):
    """Hero is already banned or picked."""

    reason = "hero_unavailable"

    def __init__(self, hero_name: str):
        super().__init__(f"Hero '{hero_name}' is not available (already picked or banned)")
        self.hero_name = hero_name


class UnknownHero(DraftError):
    """Hero is not part of the catalog snapshot."""

    reason = "unknown_hero"

    def __init__(self, hero_name: str):
        super().__init__(f"Unknown hero: {hero_name}")
        self.hero_name = hero_name


class LaneRequired(DraftError):
    """Pick attempted on a slot without a lane."""

    reason = "lane_required"


class DecisionPending(DraftError):
    """A player disambiguation is outstanding."""

    reason = "decision_pending"

    def __init__(self, message: str, decision: Optional["PendingDecision"] = None):
        super().__init__(message)
        self.decision = decision


class InvalidChoice(DraftError):
    """Chosen player is not one of the pending candidates."""

    reason = "invalid_choice"


class PreconditionNotMet(DraftError):
    """``start()`` called with incomplete or duplicate lane assignments."""

    reason = "precondition_not_met"


class ValidationFailed(DraftError):
    """Draft cannot be exported; carries every validation error."""

    reason = "validation_failed"

    def __init__(self, errors: list["ValidationError"]):
        super().__init__(f"Draft has {len(errors)} validation error(s)")
        self.errors = errors
