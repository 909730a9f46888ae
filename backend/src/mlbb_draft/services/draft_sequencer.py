"""Turn-based ban/pick sequencing for an MLBB draft session.

The official order is fixed::

    Ban phase 1:  blue, red, blue, red, blue, red
    Pick phase 1: blue, red, red, blue, blue, red
    Ban phase 2:  red, blue, red, blue
    Pick phase 2: red, blue, blue, red

Each team ends with five ban positions (three from phase 1, two from
phase 2) and five pick slots. Lanes must be assigned to every pick slot
before the draft starts; the credited player is resolved when a hero is
picked.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from mlbb_draft.errors import (
    DecisionPending,
    HeroUnavailable,
    IllegalStep,
    InvalidChoice,
    LaneRequired,
    PreconditionNotMet,
    UnknownHero,
)
from mlbb_draft.models.draft import (
    SLOTS_PER_TEAM,
    ActionKind,
    DraftRecord,
    DraftStep,
    HeroSlot,
    Lane,
    PickSlot,
    SessionState,
    SlotState,
    Team,
    phase_slots,
)
from mlbb_draft.models.hero import HeroRef, HeroRole
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.services.availability import selectable_heroes, unavailable
from mlbb_draft.services.lane_resolver import LaneResolver
from mlbb_draft.services.player_resolver import PendingDecision, PlayerResolver

logger = logging.getLogger(__name__)

_B, _R = Team.BLUE, Team.RED
_BAN, _PICK = ActionKind.BAN, ActionKind.PICK

DRAFT_ORDER: tuple[tuple[ActionKind, Team, int], ...] = (
    (_BAN, _B, 1), (_BAN, _R, 1), (_BAN, _B, 1), (_BAN, _R, 1), (_BAN, _B, 1), (_BAN, _R, 1),
    (_PICK, _B, 1), (_PICK, _R, 1), (_PICK, _R, 1), (_PICK, _B, 1), (_PICK, _B, 1), (_PICK, _R, 1),
    (_BAN, _R, 2), (_BAN, _B, 2), (_BAN, _R, 2), (_BAN, _B, 2),
    (_PICK, _R, 2), (_PICK, _B, 2), (_PICK, _B, 2), (_PICK, _R, 2),
)


def build_schedule() -> tuple[DraftStep, ...]:
    """Build the 20-step schedule with team-local slot indices precomputed."""
    used: dict[tuple[ActionKind, Team, int], int] = {}
    steps = []
    for sequence, (kind, team, phase) in enumerate(DRAFT_ORDER):
        key = (kind, team, phase)
        offset = used.get(key, 0)
        used[key] = offset + 1
        steps.append(DraftStep(
            sequence=sequence,
            kind=kind,
            team=team,
            phase=phase,
            slot_index=phase_slots(phase).start + offset,
        ))
    return tuple(steps)


DRAFT_SCHEDULE = build_schedule()


@dataclass(frozen=True)
class PickResult:
    """Result of ``submit_pick``: either written or waiting on a player choice."""

    step: DraftStep
    slot_index: int
    slot: PickSlot
    pending: Optional[PendingDecision] = None

    @property
    def is_pending(self) -> bool:
        return self.pending is not None


class DraftSequencer:
    """Owns the step cursor and the ban/pick slots of one draft session.

    The hero catalog and rosters are snapshots taken at construction; changes
    to the underlying sources during a session are not picked up.
    """

    def __init__(
        self,
        heroes: Iterable[HeroRef],
        blue_roster: Optional[Sequence[RosterPlayer]] = None,
        red_roster: Optional[Sequence[RosterPlayer]] = None,
        record: Optional[DraftRecord] = None,
    ):
        """Initialize a session in the NOT_STARTED state.

        Args:
            heroes: Hero catalog snapshot
            blue_roster: Registered players of the blue team (empty for opponents)
            red_roster: Registered players of the red team
            record: Existing record to continue editing, or None for a blank draft
        """
        self.heroes: dict[str, HeroRef] = {hero.name: hero for hero in heroes}
        self.rosters: dict[Team, tuple[RosterPlayer, ...]] = {
            Team.BLUE: tuple(blue_roster or ()),
            Team.RED: tuple(red_roster or ()),
        }
        self.record = record if record is not None else DraftRecord()
        self.lane_resolver = LaneResolver(self.record)
        self.player_resolver = PlayerResolver()

        self.state = SessionState.NOT_STARTED
        self.cursor: Optional[int] = None
        self.pending: Optional[PendingDecision] = None
        # sequence -> pick slot written by that step, for undo (slots move with swaps)
        self._picked: dict[int, PickSlot] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def steps(self) -> tuple[DraftStep, ...]:
        return DRAFT_SCHEDULE

    def current_step(self) -> Optional[DraftStep]:
        """The step awaiting an action, or None when not started or finished."""
        if self.state is not SessionState.IN_PROGRESS or self.cursor is None:
            return None
        return DRAFT_SCHEDULE[self.cursor]

    @property
    def is_finished(self) -> bool:
        return self.state is SessionState.FINISHED

    def unavailable(self) -> set[str]:
        """Heroes taken in the record plus the hero held by a pending pick."""
        taken = unavailable(self.record)
        if self.pending is not None:
            taken.add(self.pending.hero.name)
        return taken

    def available_heroes(
        self,
        role: Optional[HeroRole] = None,
        lane: Optional[Lane] = None,
        search: str = "",
    ) -> list[HeroRef]:
        heroes = selectable_heroes(self.heroes.values(), self.record, role=role, lane=lane, search=search)
        if self.pending is not None:
            heroes = [hero for hero in heroes if hero.name != self.pending.hero.name]
        return heroes

    def active_slot(self, kind: ActionKind, team: Team) -> Optional[int]:
        """Slot index to highlight for ``(kind, team)``, if it is that turn."""
        step = self.current_step()
        if step is None or step.kind is not kind or step.team is not team:
            return None
        if kind is ActionKind.PICK:
            return self._pick_target(step)
        return step.slot_index

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> DraftStep:
        """Begin banning. Both teams need five distinct lanes and an empty board."""
        if self.state is not SessionState.NOT_STARTED:
            raise IllegalStep(f"Draft cannot start from state {self.state.value}")

        problems = []
        for team in Team:
            problems.extend(self.lane_resolver.problems(team))
        if problems:
            raise PreconditionNotMet("Lane assignments incomplete or invalid: " + "; ".join(problems))
        if self._board_has_heroes():
            raise PreconditionNotMet("Draft board already has bans or picks; reset it before starting")

        self.state = SessionState.IN_PROGRESS
        self.cursor = 0
        logger.info("Draft started")
        return DRAFT_SCHEDULE[0]

    def reset(self, clear_assignments: bool = False) -> None:
        """Return to NOT_STARTED, emptying every ban and pick hero.

        Lanes and players are kept unless ``clear_assignments`` is set. Any
        pending player decision is discarded.
        """
        self.record.clear_heroes()
        if clear_assignments:
            self.record.clear_assignments()
        self.state = SessionState.NOT_STARTED
        self.cursor = None
        self.pending = None
        self._picked.clear()
        logger.info(f"Draft reset (clear_assignments={clear_assignments})")

    # ------------------------------------------------------------------
    # Scheduled actions
    # ------------------------------------------------------------------

    def submit_ban(self, hero: Optional[HeroRef | str] = None, team: Optional[Team] = None) -> DraftStep:
        """Ban a hero on the current step, or skip the ban with ``hero=None``."""
        step = self._require_step(ActionKind.BAN, team)

        current = self.record.bans[step.team][step.slot_index]
        if current.state is not SlotState.UNFILLED:
            raise IllegalStep(f"{step.team.value} ban {step.slot_index} is already {current.state.value}")

        if hero is None:
            self.record.bans[step.team][step.slot_index] = HeroSlot.skipped()
            logger.debug(f"Step {step.sequence}: {step.team.value} skipped ban")
        else:
            ref = self._lookup_hero(hero)
            self._ensure_available(ref)
            self.record.bans[step.team][step.slot_index] = HeroSlot.filled(ref)
            logger.debug(f"Step {step.sequence}: {step.team.value} banned {ref.name}")

        self._advance()
        return step

    def skip_ban(self, team: Optional[Team] = None) -> DraftStep:
        return self.submit_ban(None, team=team)

    def submit_pick(self, hero: HeroRef | str, team: Optional[Team] = None) -> PickResult:
        """Pick a hero on the current step.

        The target slot's lane must already be assigned. When several roster
        players fit the lane the pick is held in a ``PendingDecision`` and the
        cursor stays put until ``choose_player`` is called.

        Raises:
            IllegalStep: Not a pick step, or not this team's turn
            DecisionPending: A player choice is still outstanding
            HeroUnavailable: Hero already banned or picked
            LaneRequired: Target slot has no lane
        """
        step = self._require_step(ActionKind.PICK, team)
        ref = self._lookup_hero(hero)
        self._ensure_available(ref)

        slot_index = self._pick_target(step)
        slot = self.record.picks[step.team][slot_index]
        if slot.lane is None:
            raise LaneRequired(f"Assign a lane to {step.team.value} pick slot {slot_index} before picking")

        player = slot.player
        if player is None:
            resolution = self.player_resolver.resolve(self.rosters[step.team], slot.lane)
            if resolution.pending:
                self.pending = PendingDecision(
                    team=step.team,
                    slot_index=slot_index,
                    lane=slot.lane,
                    hero=ref,
                    candidates=resolution.candidates,
                    sequence=step.sequence,
                )
                logger.info(
                    f"Step {step.sequence}: {ref.name} for {step.team.value} {slot.lane.value} "
                    f"waits on a choice between {len(resolution.candidates)} players"
                )
                return PickResult(step=step, slot_index=slot_index, slot=slot, pending=self.pending)
            player = resolution.player

        slot.hero = ref
        slot.player = player
        self._picked[step.sequence] = slot
        logger.debug(f"Step {step.sequence}: {step.team.value} picked {ref.name} ({slot.lane.value})")
        self._advance()
        return PickResult(step=step, slot_index=slot_index, slot=slot)

    def choose_player(self, choice: RosterPlayer | str) -> PickSlot:
        """Resolve the pending decision with one of its candidates.

        A decision raised by ``submit_pick`` also advances the cursor; one
        raised by ``edit_slot`` only writes the slot.
        """
        decision = self.pending
        if decision is None:
            raise IllegalStep("No player decision is pending")

        player = self.player_resolver.find_candidate(decision, choice)
        if player is None:
            name = choice.name if isinstance(choice, RosterPlayer) else choice
            raise InvalidChoice(f"'{name}' is not a candidate for {decision.team.value} {decision.lane.value}")

        slot = self.record.picks[decision.team][decision.slot_index]
        slot.hero = decision.hero
        slot.player = player
        self.pending = None
        logger.debug(f"{decision.team.value} {decision.lane.value}: {decision.hero.name} credited to {player.name}")

        if decision.sequence is not None:
            self._picked[decision.sequence] = slot
            self._advance()
        return slot

    def discard_decision(self) -> Optional[PendingDecision]:
        """Drop the pending decision without writing anything."""
        decision, self.pending = self.pending, None
        return decision

    def expire_turn(self) -> DraftStep:
        """Handle a local timer running out on the current step.

        A ban step becomes a skipped ban. A pick step advances with its slot
        left empty so the hero can be filled in later with ``edit_slot``.
        """
        step = self.current_step()
        if step is None:
            raise IllegalStep("Draft is not in progress")
        if step.kind is ActionKind.BAN:
            return self.submit_ban(None)

        self._require_step(ActionKind.PICK, None)
        logger.info(f"Step {step.sequence}: {step.team.value} pick timed out")
        self._advance()
        return step

    def undo(self) -> DraftStep:
        """Rewind one step and clear what it wrote.

        A pick keeps its lane and player, so re-picking does not ask for the
        player again.
        """
        if self.pending is not None:
            raise DecisionPending("Resolve or discard the pending player decision first", self.pending)
        if self.state is SessionState.NOT_STARTED:
            raise IllegalStep("Draft has not started")
        if self.state is SessionState.FINISHED:
            target = len(DRAFT_SCHEDULE) - 1
        elif self.cursor == 0:
            raise IllegalStep("Nothing to undo")
        else:
            target = self.cursor - 1

        step = DRAFT_SCHEDULE[target]
        if step.kind is ActionKind.BAN:
            self.record.bans[step.team][step.slot_index] = HeroSlot.unfilled()
        else:
            # Expired picks wrote nothing; edited picks clear whatever is there now
            slot = self._picked.pop(step.sequence, None)
            if slot is not None:
                slot.hero = None

        self.state = SessionState.IN_PROGRESS
        self.cursor = target
        logger.debug(f"Undo to step {target}")
        return step

    # ------------------------------------------------------------------
    # Out-of-band edits
    # ------------------------------------------------------------------

    def assign_lane(self, team: Team, slot_index: int, lane: Optional[Lane]) -> None:
        self._ensure_slot_not_pending(team, slot_index)
        self.lane_resolver.assign(team, slot_index, lane)

    def assign_default_lanes(self, team: Team) -> None:
        """Assign exp, jungler, mid, gold, roam to slots 0-4."""
        for slot_index in range(SLOTS_PER_TEAM):
            self._ensure_slot_not_pending(team, slot_index)
        self.lane_resolver.assign_default(team)

    def swap_lanes(self, team: Team, slot_a: int, slot_b: int) -> None:
        self._ensure_slot_not_pending(team, slot_a)
        self._ensure_slot_not_pending(team, slot_b)
        self.lane_resolver.swap(team, slot_a, slot_b)

    def assign_player(self, team: Team, slot_index: int, player: Optional[RosterPlayer | str]) -> PickSlot:
        """Credit a roster player to a pick slot explicitly (None clears)."""
        self._check_slot_index(slot_index)
        self._ensure_slot_not_pending(team, slot_index)
        slot = self.record.picks[team][slot_index]
        if player is None:
            slot.player = None
            return slot

        name = player.name if isinstance(player, RosterPlayer) else player
        for member in self.rosters[team]:
            if member.name == name:
                slot.player = member
                return slot
        raise InvalidChoice(f"'{name}' is not on the {team.value} roster")

    def edit_slot(
        self,
        kind: ActionKind,
        team: Team,
        index: int,
        hero: Optional[HeroRef | str],
    ) -> Optional[PendingDecision]:
        """Correct a ban or pick slot, in any session state.

        For bans, ``hero=None`` marks the ban as skipped. For picks,
        ``hero=None`` clears the hero and keeps lane and player. Picking into
        a slot that already has a player keeps that player; a slot without a
        player is resolved as a fresh pick and may return a pending decision.

        While drafting, a ban can only be corrected once its step is played,
        and an empty pick slot can only be filled while the team has played
        more pick steps than it holds heroes (e.g. after a timed-out pick).
        """
        self._check_slot_index(index)
        kind = ActionKind(kind)

        if kind is ActionKind.BAN:
            self._ensure_ban_reached(team, index)
            if hero is None:
                self.record.bans[team][index] = HeroSlot.skipped()
            else:
                ref = self._lookup_hero(hero)
                if self.record.bans[team][index].hero_name != ref.name:
                    self._ensure_available(ref)
                self.record.bans[team][index] = HeroSlot.filled(ref)
            logger.debug(f"Edited {team.value} ban {index} -> {hero}")
            return None

        self._ensure_slot_not_pending(team, index)
        slot = self.record.picks[team][index]
        if hero is None:
            slot.hero = None
            return None

        ref = self._lookup_hero(hero)
        if slot.hero_name != ref.name:
            self._ensure_available(ref)
        credited_step = self._timed_out_pick_step(team) if slot.hero is None else None
        if slot.lane is None:
            raise LaneRequired(f"Assign a lane to {team.value} pick slot {index} before picking")

        if slot.player is None:
            resolution = self.player_resolver.resolve(self.rosters[team], slot.lane)
            if resolution.pending:
                if self.pending is not None:
                    raise DecisionPending("Another player decision is still pending", self.pending)
                self.pending = PendingDecision(
                    team=team,
                    slot_index=index,
                    lane=slot.lane,
                    hero=ref,
                    candidates=resolution.candidates,
                )
                return self.pending
            slot.player = resolution.player

        slot.hero = ref
        if credited_step is not None:
            self._picked[credited_step] = slot
        logger.debug(f"Edited {team.value} pick {index} -> {ref.name}")
        return None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lookup_hero(self, hero: HeroRef | str) -> HeroRef:
        name = hero.name if isinstance(hero, HeroRef) else hero
        ref = self.heroes.get(name)
        if ref is None:
            raise UnknownHero(name)
        return ref

    def _ensure_available(self, hero: HeroRef) -> None:
        if hero.name in self.unavailable():
            raise HeroUnavailable(hero.name)

    @staticmethod
    def _check_slot_index(index: int) -> None:
        if not 0 <= index < SLOTS_PER_TEAM:
            raise IndexError(f"Slot index out of range: {index}")

    def _ensure_slot_not_pending(self, team: Team, slot_index: int) -> None:
        decision = self.pending
        if decision is not None and decision.team is team and decision.slot_index == slot_index:
            raise DecisionPending(
                f"{team.value} pick slot {slot_index} is waiting on a player choice", decision
            )

    def _board_has_heroes(self) -> bool:
        for team in Team:
            if any(slot.state is not SlotState.UNFILLED for slot in self.record.bans[team]):
                return True
            if any(slot.hero is not None for slot in self.record.picks[team]):
                return True
        return False

    def _ensure_ban_reached(self, team: Team, index: int) -> None:
        """While drafting, a ban position may only be corrected once its step has been played."""
        if self.state is not SessionState.IN_PROGRESS:
            return
        step = next(s for s in DRAFT_SCHEDULE if s.kind is ActionKind.BAN and s.team is team and s.slot_index == index)
        if step.sequence >= self.cursor:
            raise IllegalStep(f"{team.value} ban {index} is drafted at step {step.sequence}; edit it after that step")

    def _timed_out_pick_step(self, team: Team) -> Optional[int]:
        """Played pick step of ``team`` that an edit filling an empty slot is credited to.

        While drafting, a team cannot hold more pick heroes than pick steps it
        has played. Outside a draft there is no step to credit.
        """
        if self.state is not SessionState.IN_PROGRESS:
            return None
        played = [s.sequence for s in DRAFT_SCHEDULE[:self.cursor] if s.kind is ActionKind.PICK and s.team is team]
        filled = sum(1 for slot in self.record.picks[team] if slot.hero is not None)
        decision = self.pending
        if decision is not None and decision.sequence is None and decision.team is team:
            filled += 1
        if filled >= len(played):
            raise IllegalStep(f"{team.value} has no played pick step left to correct; pick on its turn instead")
        return next((seq for seq in reversed(played) if seq not in self._picked), None)

    def _require_step(self, kind: ActionKind, team: Optional[Team]) -> DraftStep:
        step = self.current_step()
        if step is None:
            raise IllegalStep(f"Draft is not in progress (state: {self.state.value})")
        if self.pending is not None:
            raise DecisionPending("A player choice is pending for the current step", self.pending)
        if step.kind is not kind:
            raise IllegalStep(f"Step {step.sequence} is a {step.kind.value}, not a {kind.value}")
        if team is not None and Team(team) is not step.team:
            raise IllegalStep(f"It is {step.team.value}'s turn, not {Team(team).value}'s")
        return step

    def _pick_target(self, step: DraftStep) -> int:
        """Slot written by a pick step.

        Normally the step's own slot; if a lane swap moved a picked hero into
        it, the team's lowest empty slot instead.
        """
        picks = self.record.picks[step.team]
        if picks[step.slot_index].hero is None:
            return step.slot_index
        for index, slot in enumerate(picks):
            if slot.hero is None:
                return index
        raise IllegalStep(f"{step.team.value} has no empty pick slot left")

    def _advance(self) -> None:
        assert self.cursor is not None
        self.cursor += 1
        if self.cursor >= len(DRAFT_SCHEDULE):
            self.cursor = None
            self.state = SessionState.FINISHED
            logger.info("Draft finished")
