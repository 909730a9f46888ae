"""Resolves which roster player is credited for a pick."""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from mlbb_draft.models.draft import ActionKind, Lane, Team
from mlbb_draft.models.hero import HeroRef
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.utils.lane_normalizer import role_matches_lane


@dataclass(frozen=True)
class PlayerResolution:
    """Outcome of a lookup: a player (possibly None) or a pending choice."""

    player: Optional[RosterPlayer] = None
    candidates: tuple[RosterPlayer, ...] = ()

    @property
    def pending(self) -> bool:
        return len(self.candidates) > 1


@dataclass(frozen=True)
class PendingDecision:
    """A pick suspended until the caller picks one of ``candidates``.

    ``sequence`` is the schedule step that raised it, or None when it came
    from an out-of-band slot edit.
    """

    team: Team
    slot_index: int
    lane: Lane
    hero: HeroRef
    candidates: tuple[RosterPlayer, ...] = field(default_factory=tuple)
    sequence: Optional[int] = None
    kind: ActionKind = ActionKind.PICK


class PlayerResolver:
    """Matches a lane against a team's roster."""

    @staticmethod
    def candidates(roster: Sequence[RosterPlayer], lane: Lane) -> list[RosterPlayer]:
        """Roster players for a lane: starters first, then substitutes by order."""
        matches = [player for player in roster if role_matches_lane(player.role, lane)]

        def sort_key(item: tuple[int, RosterPlayer]):
            position, player = item
            order = player.substitute_order if player.substitute_order is not None else 99
            return (player.is_substitute, order if player.is_substitute else 0, position)

        return [player for _, player in sorted(enumerate(matches), key=sort_key)]

    def resolve(self, roster: Sequence[RosterPlayer], lane: Lane) -> PlayerResolution:
        """Resolve the credited player for a lane.

        No roster or no matching player leaves the slot without a player;
        exactly one match is assigned; several matches need a decision.
        """
        if not roster:
            return PlayerResolution()
        matches = self.candidates(roster, lane)
        if len(matches) == 1:
            return PlayerResolution(player=matches[0], candidates=(matches[0],))
        if not matches:
            return PlayerResolution()
        return PlayerResolution(candidates=tuple(matches))

    @staticmethod
    def find_candidate(decision: PendingDecision, choice: RosterPlayer | str) -> Optional[RosterPlayer]:
        """Find the candidate matching a player or player name."""
        for candidate in decision.candidates:
            if isinstance(choice, RosterPlayer) and candidate == choice:
                return candidate
            if isinstance(choice, str) and candidate.name == choice:
                return candidate
        return None
