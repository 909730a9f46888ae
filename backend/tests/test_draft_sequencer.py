"""Tests for the draft sequencer state machine."""

import pytest

from mlbb_draft.errors import (
    DecisionPending,
    HeroUnavailable,
    IllegalStep,
    InvalidChoice,
    LaneRequired,
    PreconditionNotMet,
    UnknownHero,
)
from mlbb_draft.models.draft import ActionKind, HeroSlot, Lane, SessionState, SlotState, Team
from mlbb_draft.services.draft_export import build_payload, record_from_payload
from mlbb_draft.services.draft_sequencer import DRAFT_SCHEDULE, DraftSequencer, build_schedule
from mlbb_draft.services.draft_validator import ValidationContext, validate

B, R = Team.BLUE, Team.RED
BAN, PICK = ActionKind.BAN, ActionKind.PICK


# =============================================================================
# Schedule
# =============================================================================


def test_schedule_matches_official_order():
    """Ban B,R,B,R,B,R / pick B,R,R,B,B,R / ban R,B,R,B / pick R,B,B,R."""
    expected = (
        [(BAN, B), (BAN, R)] * 3
        + [(PICK, B), (PICK, R), (PICK, R), (PICK, B), (PICK, B), (PICK, R)]
        + [(BAN, R), (BAN, B)] * 2
        + [(PICK, R), (PICK, B), (PICK, B), (PICK, R)]
    )
    assert [(step.kind, step.team) for step in DRAFT_SCHEDULE] == expected
    assert [step.sequence for step in DRAFT_SCHEDULE] == list(range(20))


def test_schedule_is_deterministic():
    assert build_schedule() == DRAFT_SCHEDULE


def test_schedule_slot_indices_cover_each_team_once():
    """Every team gets ban slots 0-4 and pick slots 0-4, each exactly once."""
    for kind in ActionKind:
        for team in Team:
            slots = [s.slot_index for s in DRAFT_SCHEDULE if s.kind is kind and s.team is team]
            assert slots == [0, 1, 2, 3, 4]


def test_schedule_phases_and_group_positions():
    phase_2_bans = [s for s in DRAFT_SCHEDULE if s.kind is BAN and s.phase == 2]
    assert [(s.team, s.slot_index, s.phase_slot) for s in phase_2_bans] == [
        (R, 3, 0), (B, 3, 0), (R, 4, 1), (B, 4, 1),
    ]
    assert all(s.phase == 1 for s in DRAFT_SCHEDULE[:12])
    assert all(s.phase == 2 for s in DRAFT_SCHEDULE[12:])


# =============================================================================
# Start preconditions
# =============================================================================


def test_start_requires_all_lanes(sequencer):
    """start() before assigning all lanes fails and leaves the session untouched."""
    sequencer.assign_lane(B, 0, Lane.EXP)

    with pytest.raises(PreconditionNotMet):
        sequencer.start()
    assert sequencer.state is SessionState.NOT_STARTED
    assert sequencer.current_step() is None


def test_start_rejects_duplicate_lane(sequencer):
    """All ten lanes assigned but exp twice for blue still fails."""
    for team in Team:
        sequencer.assign_default_lanes(team)
    sequencer.assign_lane(B, 1, Lane.EXP)

    with pytest.raises(PreconditionNotMet) as exc_info:
        sequencer.start()
    assert "exp" in exc_info.value.message


def test_start_succeeds_with_valid_lanes(lanes_assigned):
    step = lanes_assigned.start()

    assert lanes_assigned.state is SessionState.IN_PROGRESS
    assert step == DRAFT_SCHEDULE[0]
    assert lanes_assigned.current_step() == DRAFT_SCHEDULE[0]


def test_start_twice_is_illegal(started):
    with pytest.raises(IllegalStep):
        started.start()


def test_start_requires_empty_board(lanes_assigned):
    lanes_assigned.record.bans[R][2] = HeroSlot.skipped()

    with pytest.raises(PreconditionNotMet):
        lanes_assigned.start()

    assert lanes_assigned.state is SessionState.NOT_STARTED


def test_saved_match_is_edited_not_replayed(started, full_draft, play, heroes, home_roster):
    play(started, full_draft)
    record = record_from_payload(build_payload(started.record), heroes, rosters={B: home_roster})
    seq = DraftSequencer(heroes, blue_roster=home_roster, red_roster=[], record=record)

    with pytest.raises(PreconditionNotMet):
        seq.start()
    with pytest.raises(IllegalStep):
        seq.submit_ban("Atlas")

    seq.edit_slot(BAN, R, 0, "Atlas")
    assert seq.record.bans[R][0].hero_name == "Atlas"
    assert validate(seq.record, ValidationContext(winner="Onic", blue_team_name="Onic", red_team_name="RRQ")) == []


def test_actions_before_start_are_illegal(sequencer):
    with pytest.raises(IllegalStep):
        sequencer.submit_ban("Fanny")
    with pytest.raises(IllegalStep):
        sequencer.submit_pick("Fanny")


# =============================================================================
# Bans
# =============================================================================


def test_submit_ban_writes_slot_and_advances(started):
    step = started.submit_ban("Fanny")

    assert step.team is B
    assert started.record.bans[B][0].hero_name == "Fanny"
    assert started.current_step() == DRAFT_SCHEDULE[1]


def test_skip_ban_is_distinct_from_unfilled(started):
    started.skip_ban()

    assert started.record.bans[B][0].state is SlotState.SKIPPED
    assert started.record.bans[B][1].state is SlotState.UNFILLED
    assert started.cursor == 1


def test_skipped_ban_can_be_edited_later(started):
    started.skip_ban()
    started.edit_slot(BAN, B, 0, "Ling")

    assert started.record.bans[B][0].state is SlotState.FILLED
    assert started.record.bans[B][0].hero_name == "Ling"


def test_ban_wrong_kind_or_team_rejected(started):
    with pytest.raises(IllegalStep):
        started.submit_pick("Fanny")
    with pytest.raises(IllegalStep):
        started.submit_ban("Fanny", team=R)
    assert started.cursor == 0


def test_ban_taken_hero_rejected(started):
    started.submit_ban("Fanny")
    with pytest.raises(HeroUnavailable):
        started.submit_ban("Fanny")
    assert started.cursor == 1


def test_unknown_hero_rejected(started):
    with pytest.raises(UnknownHero):
        started.submit_ban("Not A Hero")


def test_submit_ban_refuses_slot_already_written(started):
    started.record.bans[B][0] = HeroSlot.filled(started.heroes["Atlas"])

    with pytest.raises(IllegalStep):
        started.submit_ban("Fanny")

    assert started.record.bans[B][0].hero_name == "Atlas"
    assert started.cursor == 0


# =============================================================================
# Picks
# =============================================================================


def test_full_draft_reaches_finished(started, full_draft, play):
    """Six bans, six picks, four bans, four picks fill every slot."""
    play(started, full_draft)

    assert started.state is SessionState.FINISHED
    assert started.current_step() is None
    for team in Team:
        assert all(slot.state is SlotState.FILLED for slot in started.record.bans[team])
        assert all(slot.hero is not None for slot in started.record.picks[team])
        assert started.record.lanes(team) == list(Lane)

    context = ValidationContext(winner="Onic", blue_team_name="Onic", red_team_name="RRQ", home_team_name="Onic")
    assert validate(started.record, context) == []


def test_pick_auto_assigns_single_roster_player(started, full_draft, play):
    play(started, full_draft[:7])  # through blue's first pick

    slot = started.record.picks[B][0]
    assert slot.hero.name == "Chou"
    assert slot.player.name == "Kiboy"


def test_opponent_pick_has_no_player(started, full_draft, play):
    play(started, full_draft[:8])

    slot = started.record.picks[R][0]
    assert slot.hero.name == "Alucard"
    assert slot.player is None


def test_pick_requires_lane(started, full_draft, play):
    play(started, full_draft[:6])
    started.assign_lane(B, 0, None)

    with pytest.raises(LaneRequired):
        started.submit_pick("Chou")
    assert started.cursor == 6

    started.assign_lane(B, 0, Lane.EXP)
    result = started.submit_pick("Chou")
    assert not result.is_pending
    assert started.cursor == 7


def test_pick_after_finish_is_illegal(started, full_draft, play):
    play(started, full_draft)
    with pytest.raises(IllegalStep):
        started.submit_pick("Atlas")


# =============================================================================
# Player disambiguation
# =============================================================================


@pytest.fixture
def sub_sequencer(heroes, roster_with_sub):
    seq = DraftSequencer(heroes, blue_roster=roster_with_sub, red_roster=[])
    for team in Team:
        seq.assign_default_lanes(team)
    seq.start()
    return seq


def test_two_candidates_suspend_the_pick(sub_sequencer, full_draft, play):
    """Blue gold has a starter and a substitute: the pick waits for a choice."""
    play(sub_sequencer, full_draft[:17])
    assert sub_sequencer.current_step().sequence == 17

    result = sub_sequencer.submit_pick("Claude")

    assert result.is_pending
    assert [p.name for p in result.pending.candidates] == ["CW", "Lutpiii"]
    assert sub_sequencer.cursor == 17
    assert sub_sequencer.record.picks[B][3].hero is None
    assert "Claude" in sub_sequencer.unavailable()


def test_second_pick_while_pending_rejected(sub_sequencer, full_draft, play):
    play(sub_sequencer, full_draft[:17])
    sub_sequencer.submit_pick("Claude")

    with pytest.raises(DecisionPending):
        sub_sequencer.submit_pick("Atlas")
    with pytest.raises(DecisionPending):
        sub_sequencer.expire_turn()
    with pytest.raises(DecisionPending):
        sub_sequencer.swap_lanes(B, 3, 4)
    assert sub_sequencer.cursor == 17


def test_choosing_player_resolves_and_advances(sub_sequencer, full_draft, play):
    play(sub_sequencer, full_draft[:17])
    sub_sequencer.submit_pick("Claude")

    slot = sub_sequencer.choose_player("Lutpiii")

    assert slot.hero.name == "Claude"
    assert slot.player.name == "Lutpiii"
    assert sub_sequencer.pending is None
    assert sub_sequencer.cursor == 18


def test_choose_player_not_a_candidate(sub_sequencer, full_draft, play):
    play(sub_sequencer, full_draft[:17])
    sub_sequencer.submit_pick("Claude")

    with pytest.raises(InvalidChoice):
        sub_sequencer.choose_player("Kiboy")
    assert sub_sequencer.pending is not None


def test_choose_player_without_pending(started):
    with pytest.raises(IllegalStep):
        started.choose_player("Kiboy")


def test_discard_decision_allows_new_pick(sub_sequencer, full_draft, play):
    play(sub_sequencer, full_draft[:17])
    sub_sequencer.submit_pick("Claude")

    discarded = sub_sequencer.discard_decision()

    assert discarded.hero.name == "Claude"
    assert "Claude" not in sub_sequencer.unavailable()
    sub_sequencer.assign_player(B, 3, "CW")
    result = sub_sequencer.submit_pick("Claude")
    assert not result.is_pending
    assert sub_sequencer.record.picks[B][3].player.name == "CW"


# =============================================================================
# Edits
# =============================================================================


def test_edit_pick_keeps_lane_and_player(sub_sequencer, full_draft, play):
    play(sub_sequencer, full_draft)
    assert sub_sequencer.record.picks[B][3].player.name == "CW"

    pending = sub_sequencer.edit_slot(PICK, B, 3, "Atlas")

    slot = sub_sequencer.record.picks[B][3]
    assert pending is None
    assert slot.hero.name == "Atlas"
    assert slot.lane is Lane.GOLD
    assert slot.player.name == "CW"


def test_edit_pick_without_player_disambiguates(sub_sequencer, full_draft, play):
    play(sub_sequencer, full_draft)
    sub_sequencer.assign_player(B, 3, None)

    pending = sub_sequencer.edit_slot(PICK, B, 3, "Atlas")

    assert pending is not None
    assert pending.sequence is None
    sub_sequencer.choose_player("Lutpiii")
    slot = sub_sequencer.record.picks[B][3]
    assert (slot.hero.name, slot.player.name) == ("Atlas", "Lutpiii")
    assert sub_sequencer.state is SessionState.FINISHED


def test_clearing_pick_hero_keeps_lane_and_player(started, full_draft, play):
    play(started, full_draft)

    started.edit_slot(PICK, B, 0, None)

    slot = started.record.picks[B][0]
    assert slot.hero is None
    assert slot.lane is Lane.EXP
    assert slot.player.name == "Kiboy"


def test_edit_to_taken_hero_rejected(started, full_draft, play):
    play(started, full_draft)
    with pytest.raises(HeroUnavailable):
        started.edit_slot(PICK, B, 0, "Alucard")
    # Re-setting the slot's own hero is fine
    started.edit_slot(PICK, B, 0, "Chou")


def test_assign_player_must_be_on_roster(started):
    with pytest.raises(InvalidChoice):
        started.assign_player(B, 0, "Stranger")


def test_future_ban_cannot_be_edited_while_drafting(started, full_draft, play):
    with pytest.raises(IllegalStep):
        started.edit_slot(BAN, R, 0, "Atlas")
    assert started.record.bans[R][0].state is SlotState.UNFILLED
    assert "Atlas" not in started.unavailable()

    play(started, full_draft)

    # Red's first ban is written by its own step, not by the rejected edit
    assert started.record.bans[R][0].hero_name == "Ling"
    assert started.state is SessionState.FINISHED


def test_played_ban_can_be_edited_while_drafting(started):
    started.submit_ban("Fanny")

    started.edit_slot(BAN, B, 0, "Atlas")

    assert started.record.bans[B][0].hero_name == "Atlas"
    assert "Fanny" not in started.unavailable()
    assert started.cursor == 1


def test_future_pick_cannot_be_filled_while_drafting(started, full_draft, play):
    play(started, full_draft[:6])

    with pytest.raises(IllegalStep):
        started.edit_slot(PICK, R, 0, "Chou")
    with pytest.raises(IllegalStep):
        started.edit_slot(PICK, B, 1, "Chou")

    assert all(slot.hero is None for team in Team for slot in started.record.picks[team])
    play(started, full_draft[6:])
    assert started.record.picks[B][0].hero_name == "Chou"


def test_timed_out_pick_filled_by_edit_then_draft_finishes(started, full_draft, play):
    play(started, full_draft[:6])
    started.expire_turn()

    assert started.edit_slot(PICK, B, 0, "Chou") is None
    # Only one blue pick step has been played
    with pytest.raises(IllegalStep):
        started.edit_slot(PICK, B, 1, "Atlas")

    play(started, full_draft[7:])

    blue = started.record.picks[B]
    assert (blue[0].hero.name, blue[0].player.name) == ("Chou", "Kiboy")
    assert [slot.hero_name for slot in blue] == ["Chou", "Hayabusa", "Pharsa", "Claude", "Tigreal"]
    assert started.state is SessionState.FINISHED


def test_timed_out_pick_filled_in_another_slot(started, full_draft, play):
    play(started, full_draft[:6])
    started.expire_turn()
    started.edit_slot(PICK, B, 3, "Chou")

    play(started, full_draft[7:])

    blue = started.record.picks[B]
    assert (blue[3].hero.name, blue[3].lane) == ("Chou", Lane.GOLD)
    # Blue's gold step finds slot 3 taken and falls back to the empty exp slot
    assert (blue[0].hero.name, blue[0].lane, blue[0].player.name) == ("Claude", Lane.EXP, "Kiboy")
    assert started.state is SessionState.FINISHED


def test_undo_clears_pick_filled_after_timeout(started, full_draft, play):
    play(started, full_draft[:6])
    started.expire_turn()
    started.edit_slot(PICK, B, 0, "Chou")

    step = started.undo()

    assert step.sequence == 6
    slot = started.record.picks[B][0]
    assert slot.hero is None
    assert slot.player.name == "Kiboy"
    assert "Chou" not in started.unavailable()

    started.submit_pick("Chou")
    assert started.record.picks[B][0].hero_name == "Chou"
    assert started.cursor == 7


# =============================================================================
# Lane swaps during a draft
# =============================================================================


def test_swap_moves_picked_hero_and_next_pick_uses_empty_slot(started, full_draft, play):
    play(started, full_draft[:7])  # blue picked Chou into slot 0 (exp)
    started.swap_lanes(B, 0, 3)

    play(started, full_draft[7:])

    blue = started.record.picks[B]
    assert (blue[3].hero.name, blue[3].lane, blue[3].player.name) == ("Chou", Lane.EXP, "Kiboy")
    # Blue's phase-2 gold pick lands in slot 0, which now carries the gold lane
    assert (blue[0].hero.name, blue[0].lane, blue[0].player.name) == ("Claude", Lane.GOLD, "CW")
    assert started.state is SessionState.FINISHED


# =============================================================================
# Undo, timer expiry, reset
# =============================================================================


def test_undo_clears_last_ban(started):
    started.submit_ban("Fanny")
    step = started.undo()

    assert step.sequence == 0
    assert started.cursor == 0
    assert started.record.bans[B][0].state is SlotState.UNFILLED
    assert "Fanny" not in started.unavailable()


def test_undo_at_first_step_is_illegal(started):
    with pytest.raises(IllegalStep):
        started.undo()


def test_undo_from_finished_reopens_last_pick(started, full_draft, play):
    play(started, full_draft)

    started.undo()

    assert started.state is SessionState.IN_PROGRESS
    assert started.cursor == 19
    slot = started.record.picks[R][4]
    assert slot.hero is None
    assert slot.lane is Lane.ROAM


def test_expire_turn_skips_ban(started):
    started.expire_turn()
    assert started.record.bans[B][0].state is SlotState.SKIPPED
    assert started.cursor == 1


def test_expire_turn_on_pick_leaves_slot_empty(started, full_draft, play):
    play(started, full_draft[:6])
    step = started.expire_turn()

    assert step.kind is PICK
    assert started.record.picks[B][0].hero is None
    assert started.cursor == 7


def test_reset_keeps_lanes_by_default(started, full_draft, play):
    play(started, full_draft[:10])

    started.reset()

    assert started.state is SessionState.NOT_STARTED
    assert started.cursor is None
    assert started.unavailable() == set()
    assert started.record.lanes(B) == list(Lane)
    assert started.record.picks[B][0].player.name == "Kiboy"
    started.start()


def test_reset_can_clear_assignments(started):
    started.reset(clear_assignments=True)
    assert started.record.lanes(B) == [None] * 5
    with pytest.raises(PreconditionNotMet):
        started.start()


def test_active_slot_highlights_current_turn(started):
    assert started.active_slot(BAN, B) == 0
    assert started.active_slot(BAN, R) is None
    assert started.active_slot(PICK, B) is None
