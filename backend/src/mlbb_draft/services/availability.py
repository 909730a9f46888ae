"""Hero availability: which heroes can still be banned or picked."""

from typing import Iterable, Optional

from mlbb_draft.models.draft import DraftRecord, Lane, Team
from mlbb_draft.models.hero import HeroRef, HeroRole

# Hero classes suggested for each lane in the hero picker
LANE_HERO_ROLES: dict[Lane, frozenset[HeroRole]] = {
    Lane.EXP: frozenset({HeroRole.FIGHTER}),
    Lane.JUNGLER: frozenset({HeroRole.ASSASSIN}),
    Lane.MID: frozenset({HeroRole.MAGE}),
    Lane.GOLD: frozenset({HeroRole.MARKSMAN}),
    Lane.ROAM: frozenset({HeroRole.SUPPORT, HeroRole.TANK}),
}


def unavailable(record: DraftRecord) -> set[str]:
    """Names of every hero sitting in a ban or pick slot of either team.

    Skipped and unfilled slots contribute nothing. Recomputed on each call.
    """
    taken: set[str] = set()
    for team in Team:
        taken.update(slot.hero_name for slot in record.bans[team] if slot.hero_name)
        taken.update(slot.hero_name for slot in record.picks[team] if slot.hero_name)
    return taken


def is_available(record: DraftRecord, hero_name: str) -> bool:
    return hero_name not in unavailable(record)


def selectable_heroes(
    heroes: Iterable[HeroRef],
    record: DraftRecord,
    role: Optional[HeroRole] = None,
    lane: Optional[Lane] = None,
    search: str = "",
) -> list[HeroRef]:
    """Filter the catalog for the hero grid.

    Args:
        heroes: Hero catalog snapshot
        record: Current draft record (taken heroes are removed)
        role: Optional role tab filter
        lane: Optional lane; keeps heroes whose class suits that lane
        search: Case-insensitive name substring

    Returns:
        Available heroes sorted by name, duplicates by name removed
    """
    taken = unavailable(record)
    needle = search.strip().lower()
    lane_roles = LANE_HERO_ROLES.get(lane) if lane else None

    seen: set[str] = set()
    result: list[HeroRef] = []
    for hero in heroes:
        if hero.name in taken or hero.name in seen:
            continue
        if role is not None and hero.role is not role:
            continue
        if lane_roles is not None and hero.role not in lane_roles:
            continue
        if needle and needle not in hero.name.lower():
            continue
        seen.add(hero.name)
        result.append(hero)

    return sorted(result, key=lambda h: h.name.lower())
