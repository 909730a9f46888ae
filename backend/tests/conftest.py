"""Shared fixtures for draft engine tests."""

import pytest

from mlbb_draft.models.draft import LANE_ORDER, Team
from mlbb_draft.models.hero import HeroRef, HeroRole
from mlbb_draft.models.team import RosterPlayer
from mlbb_draft.services.draft_sequencer import DraftSequencer

HERO_ROWS = [
    ("Alucard", HeroRole.FIGHTER),
    ("Chou", HeroRole.FIGHTER),
    ("Yu Zhong", HeroRole.FIGHTER),
    ("Paquito", HeroRole.FIGHTER),
    ("Ling", HeroRole.ASSASSIN),
    ("Fanny", HeroRole.ASSASSIN),
    ("Lancelot", HeroRole.ASSASSIN),
    ("Hayabusa", HeroRole.ASSASSIN),
    ("Kagura", HeroRole.MAGE),
    ("Pharsa", HeroRole.MAGE),
    ("Valentina", HeroRole.MAGE),
    ("Yve", HeroRole.MAGE),
    ("Beatrix", HeroRole.MARKSMAN),
    ("Brody", HeroRole.MARKSMAN),
    ("Claude", HeroRole.MARKSMAN),
    ("Harith", HeroRole.MAGE),
    ("Mathilda", HeroRole.SUPPORT),
    ("Estes", HeroRole.SUPPORT),
    ("Tigreal", HeroRole.TANK),
    ("Khufra", HeroRole.TANK),
    ("Franco", HeroRole.TANK),
    ("Atlas", HeroRole.TANK),
]


@pytest.fixture
def heroes():
    """Hero catalog snapshot."""
    return [HeroRef(name=name, role=role, image_ref=f"{name.lower()}.png") for name, role in HERO_ROWS]


@pytest.fixture
def home_roster():
    """Home roster with one player per lane."""
    return [
        RosterPlayer(name="Kiboy", role="exp"),
        RosterPlayer(name="Kairi", role="Jungler"),
        RosterPlayer(name="Sanz", role="Mid Lane"),
        RosterPlayer(name="CW", role="gold"),
        RosterPlayer(name="Butsss", role="roam"),
    ]


@pytest.fixture
def roster_with_sub(home_roster):
    """Home roster with a substitute gold laner (two candidates for gold)."""
    return home_roster + [RosterPlayer(name="Lutpiii", role="marksman", is_substitute=True, substitute_order=1)]


@pytest.fixture
def sequencer(heroes, home_roster):
    """Blue is the home team with a roster, red is an opponent without one."""
    return DraftSequencer(heroes, blue_roster=home_roster, red_roster=[])


@pytest.fixture
def lanes_assigned(sequencer):
    """Sequencer with exp, jungler, mid, gold, roam on slots 0-4 of both teams."""
    for team in Team:
        for slot_index, lane in enumerate(LANE_ORDER):
            sequencer.assign_lane(team, slot_index, lane)
    return sequencer


@pytest.fixture
def started(lanes_assigned):
    lanes_assigned.start()
    return lanes_assigned


# Heroes in schedule order: 6 bans, 6 picks, 4 bans, 4 picks
FULL_DRAFT = [
    "Fanny", "Ling", "Kagura", "Beatrix", "Franco", "Estes",
    "Chou", "Alucard", "Lancelot", "Hayabusa", "Pharsa", "Valentina",
    "Yu Zhong", "Paquito", "Yve", "Harith",
    "Brody", "Claude", "Tigreal", "Khufra",
]


@pytest.fixture
def full_draft():
    return list(FULL_DRAFT)


def play_steps(seq: DraftSequencer, hero_names: list[str]) -> None:
    """Submit heroes in schedule order, choosing the first candidate when asked."""
    for name in hero_names:
        step = seq.current_step()
        if step.kind.value == "ban":
            seq.submit_ban(name)
        else:
            result = seq.submit_pick(name)
            if result.is_pending:
                seq.choose_player(result.pending.candidates[0])


@pytest.fixture
def play():
    return play_steps
