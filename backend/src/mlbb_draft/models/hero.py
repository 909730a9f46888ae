"""Hero catalog models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class HeroRole(str, Enum):
    """Hero classes as tagged by the hero catalog."""

    ASSASSIN = "Assassin"
    FIGHTER = "Fighter"
    MAGE = "Mage"
    MARKSMAN = "Marksman"
    SUPPORT = "Support"
    TANK = "Tank"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["HeroRole"]:
        """Parse a catalog role string case-insensitively, None if unknown."""
        if not value:
            return None
        wanted = value.strip().lower()
        for role in cls:
            if role.value.lower() == wanted:
                return role
        return None


@dataclass(frozen=True)
class HeroRef:
    """A selectable hero. ``name`` is the unique key."""

    name: str
    role: HeroRole
    image_ref: str = ""
