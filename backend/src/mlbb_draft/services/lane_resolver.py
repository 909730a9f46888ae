"""Lane assignment for pick slots."""

import logging
from collections import Counter
from typing import Optional

from mlbb_draft.models.draft import LANE_ORDER, SLOTS_PER_TEAM, DraftRecord, Lane, Team

logger = logging.getLogger(__name__)


class LaneResolver:
    """Maps pick slots to lanes for both teams of a draft record.

    Assignments may be transiently invalid (a lane used twice) while the user
    is editing; ``is_complete`` and ``is_valid`` must both hold before a draft
    session can start.
    """

    def __init__(self, record: DraftRecord):
        self.record = record

    @staticmethod
    def _check_index(slot_index: int) -> None:
        if not 0 <= slot_index < SLOTS_PER_TEAM:
            raise IndexError(f"Pick slot index out of range: {slot_index}")

    def lanes(self, team: Team) -> list[Optional[Lane]]:
        return self.record.lanes(team)

    def assign(self, team: Team, slot_index: int, lane: Optional[Lane]) -> None:
        """Set (or clear, with None) the lane of one slot. Never touches the player."""
        self._check_index(slot_index)
        self.record.picks[team][slot_index].lane = Lane(lane) if lane is not None else None
        logger.debug(f"{team.value} slot {slot_index} lane -> {lane}")

    def assign_all(self, team: Team, lanes: list[Optional[Lane]]) -> None:
        if len(lanes) != SLOTS_PER_TEAM:
            raise ValueError(f"Expected {SLOTS_PER_TEAM} lanes, got {len(lanes)}")
        for slot_index, lane in enumerate(lanes):
            self.assign(team, slot_index, lane)

    def assign_default(self, team: Team) -> None:
        """Assign the fixed order exp, jungler, mid, gold, roam."""
        self.assign_all(team, list(LANE_ORDER))

    def swap(self, team: Team, slot_a: int, slot_b: int) -> None:
        """Exchange two slots of a team.

        Lane, hero and player move together so that they never get out of
        step with each other. Swapping twice restores the original state.
        """
        self._check_index(slot_a)
        self._check_index(slot_b)
        if slot_a == slot_b:
            return
        picks = self.record.picks[team]
        picks[slot_a], picks[slot_b] = picks[slot_b], picks[slot_a]
        logger.debug(f"{team.value} swapped slots {slot_a} and {slot_b}")

    def is_complete(self, team: Team) -> bool:
        """True iff all five slots have a lane."""
        return all(lane is not None for lane in self.lanes(team))

    def duplicates(self, team: Team) -> set[Lane]:
        counts = Counter(lane for lane in self.lanes(team) if lane is not None)
        return {lane for lane, count in counts.items() if count > 1}

    def is_valid(self, team: Team) -> bool:
        """True iff no lane repeats among the assigned slots."""
        return not self.duplicates(team)

    def problems(self, team: Team) -> list[str]:
        """Human-readable reasons why a team's lanes block the draft start."""
        issues = []
        missing = [i for i, lane in enumerate(self.lanes(team)) if lane is None]
        if missing:
            issues.append(f"{team.value} slots without a lane: {missing}")
        dupes = sorted(lane.value for lane in self.duplicates(team))
        if dupes:
            issues.append(f"{team.value} lanes assigned twice: {dupes}")
        return issues

    def available_lanes(self, team: Team, slot_index: int) -> list[Lane]:
        """Lanes not used by the team's other slots, in fixed order."""
        self._check_index(slot_index)
        used = {lane for i, lane in enumerate(self.lanes(team)) if i != slot_index and lane is not None}
        return [lane for lane in LANE_ORDER if lane not in used]
