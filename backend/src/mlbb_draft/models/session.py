"""Models for interactive draft sessions."""

import time
from dataclasses import dataclass, field
from typing import Literal, Optional

from mlbb_draft.services.draft_sequencer import DraftSequencer


@dataclass
class DraftSession:
    """State for an active draft session.

    ``mode`` is "mock" for the practice board and "comprehensive" for the
    match-entry capture flow, which also requires a match date on export.
    """

    session_id: str
    sequencer: DraftSequencer
    mode: Literal["mock", "comprehensive"] = "mock"
    home_team_name: Optional[str] = None
    created_at: float = field(default_factory=time.time)
    last_access: float = field(default_factory=time.time)
    match_id: Optional[str] = None  # set once exported
