"""Location registry for the simulated town.

Passive keyed lookup only: the core seeds it once and never routes agents
through it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .schemas import Location


DEFAULT_LOCATIONS = (
    Location(id="home", name="Home", type="residential", capacity=4),
    Location(id="office", name="Office Building", type="workplace", capacity=50),
    Location(id="park", name="Central Park", type="recreation", capacity=100),
    Location(id="cafe", name="Coffee Shop", type="commercial", capacity=20),
)


@dataclass
class Environment:
    """Locations keyed by id. Adding an existing id replaces it."""

    locations: Dict[str, Location] = field(default_factory=dict)

    @classmethod
    def with_defaults(cls) -> "Environment":
        environment = cls()
        for location in DEFAULT_LOCATIONS:
            environment.add_location(location)
        return environment

    def add_location(self, location: Location) -> None:
        self.locations[location.id] = location

    def location(self, location_id: str) -> Optional[Location]:
        return self.locations.get(location_id)

    def all_locations(self) -> List[Location]:
        return list(self.locations.values())

    def __len__(self) -> int:
        return len(self.locations)

    def __contains__(self, location_id: str) -> bool:
        return location_id in self.locations


__all__ = ["Environment", "DEFAULT_LOCATIONS"]
