"""Data models for Korean transit search."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class StopKind(str, Enum):
    """Which provider a stop came from."""

    BUS = "bus"
    SUBWAY = "subway"

    def __str__(self) -> str:
        return self.value


class Coordinate(BaseModel):
    """Coordinate pair kept exactly as the provider sent it."""

    x: str = Field("", description="X / longitude text (TM or GRS80)")
    y: str = Field("", description="Y / latitude text (TM or GRS80)")

    def is_empty(self) -> bool:
        return not self.x and not self.y


class TransitStop(BaseModel):
    """Canonical record for a bus stop or subway station."""

    kind: StopKind = Field(..., description="Provider the stop came from")
    id: str = Field(..., min_length=1, description="Provider station ID")
    name: str = Field(..., min_length=1, description="Station name")
    coordinate: Coordinate = Field(
        default_factory=Coordinate, description="Planar coordinate pair"
    )
    auxiliary: str = Field(
        "", description="Bus: boarding-sign (ARS) ID, subway: route/line name"
    )
    # GRS80 pair from the bus registry (posX/posY); empty for subway stations
    geodetic: Coordinate = Field(
        default_factory=Coordinate, description="Geodetic coordinate pair"
    )

    def __str__(self) -> str:
        if self.auxiliary:
            return f"{self.name} ({self.auxiliary})"
        return self.name


class SearchOutcome(BaseModel):
    """Result of one provider branch of a search."""

    provider: StopKind = Field(..., description="Branch provider")
    stops: list[TransitStop] = Field(
        default_factory=list, description="Normalized stops in provider order"
    )
    failed: bool = Field(False, description="True when the provider request failed")
    error: str | None = Field(None, description="Failure message for failed branches")


class UnifiedResult(BaseModel):
    """Merged outcome of a fanned-out search."""

    outcomes: list[SearchOutcome] = Field(default_factory=list)

    @property
    def stops(self) -> list[TransitStop]:
        """All successful stops, bus branch first, then subway."""
        order = {StopKind.BUS: 0, StopKind.SUBWAY: 1}
        merged: list[TransitStop] = []
        for outcome in sorted(self.outcomes, key=lambda o: order[o.provider]):
            if not outcome.failed:
                merged.extend(outcome.stops)
        return merged

    @property
    def failed_providers(self) -> list[StopKind]:
        return [outcome.provider for outcome in self.outcomes if outcome.failed]

    def is_empty(self) -> bool:
        return not self.stops


class SearchContext(BaseModel):
    """What was searched for, used to title rendered output."""

    mode: Literal["name", "location"] = Field(..., description="Search mode")
    term: str | None = Field(None, description="Search term for name searches")
    x: float | None = Field(None, description="TM X for location searches")
    y: float | None = Field(None, description="TM Y for location searches")
    radius: float | None = Field(None, description="Radius in meters")

    @classmethod
    def by_name(cls, term: str) -> "SearchContext":
        return cls(mode="name", term=term)

    @classmethod
    def by_location(cls, x: float, y: float, radius: float) -> "SearchContext":
        return cls(mode="location", x=x, y=y, radius=radius)
