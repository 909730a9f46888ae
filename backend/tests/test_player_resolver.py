"""Tests for roster player resolution."""

import pytest

from mlbb_draft.models.draft import Lane, Team
from mlbb_draft.models.hero import HeroRef, HeroRole
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.services.player_resolver import PendingDecision, PlayerResolver


@pytest.fixture
def resolver():
    return PlayerResolver()


def test_empty_roster_resolves_to_no_player(resolver):
    resolution = resolver.resolve([], Lane.GOLD)
    assert resolution.player is None
    assert not resolution.pending


def test_no_matching_player(resolver):
    resolution = resolver.resolve([RosterPlayer(name="Coach", role="analyst")], Lane.MID)
    assert resolution.player is None
    assert not resolution.pending


def test_single_match_is_assigned(resolver, home_roster):
    resolution = resolver.resolve(home_roster, Lane.JUNGLER)
    assert resolution.player.name == "Kairi"
    assert not resolution.pending


@pytest.mark.parametrize("lane", list(Lane))
def test_single_candidate_is_never_pending(resolver, home_roster, lane):
    """One player per lane means no lane ever needs a decision."""
    resolution = resolver.resolve(home_roster, lane)
    assert resolution.player is not None
    assert not resolution.pending


def test_multiple_matches_need_a_decision(resolver, roster_with_sub):
    resolution = resolver.resolve(roster_with_sub, Lane.GOLD)

    assert resolution.pending
    assert resolution.player is None
    assert [p.name for p in resolution.candidates] == ["CW", "Lutpiii"]


def test_candidates_starters_before_substitutes(resolver):
    roster = [
        RosterPlayer(name="Sub2", role="roam", is_substitute=True, substitute_order=2),
        RosterPlayer(name="Sub1", role="support", is_substitute=True, substitute_order=1),
        RosterPlayer(name="Main", role="Roamer"),
    ]
    assert [p.name for p in resolver.candidates(roster, Lane.ROAM)] == ["Main", "Sub1", "Sub2"]


def test_find_candidate_by_name_or_player(resolver, roster_with_sub):
    decision = PendingDecision(
        team=Team.BLUE,
        slot_index=3,
        lane=Lane.GOLD,
        hero=HeroRef(name="Claude", role=HeroRole.MARKSMAN),
        candidates=tuple(resolver.candidates(roster_with_sub, Lane.GOLD)),
    )

    assert resolver.find_candidate(decision, "Lutpiii").name == "Lutpiii"
    assert resolver.find_candidate(decision, roster_with_sub[3]).name == "CW"
    assert resolver.find_candidate(decision, "Kiboy") is None
