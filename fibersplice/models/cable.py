"""Cable data model for fiber/copper splice management."""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum


def new_record_id() -> str:
    """Generate an opaque record identifier."""
    return uuid.uuid4().hex


class CableRole(Enum):
    """Cable role in a splice."""
    FEED = "Feed"                   # Splice source
    DISTRIBUTION = "Distribution"   # Splice target

    @classmethod
    def parse(cls, value) -> "CableRole":
        """Parse a role from its value or name, ignoring case."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for role in cls:
            if text in (role.value.lower(), role.name.lower()):
                return role
        raise ValueError(f"Unknown cable role: {value!r}. Expected one of: Feed, Distribution")


class SpliceMode(Enum):
    """Physical medium the cable carries."""
    FIBER = "fiber"     # Strands grouped in 12-fiber ribbons
    COPPER = "copper"   # Pairs grouped in 25-pair binders

    @classmethod
    def parse(cls, value) -> "SpliceMode":
        """Parse a mode from its value or name, ignoring case."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for mode in cls:
            if text in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"Unknown splice mode: {value!r}. Expected one of: fiber, copper")


# ============================================================================
# MODE CONSTANTS
# ============================================================================
#
# FIBER: strands are bundled in 12-fiber ribbons, colour coded per TIA-598.
# COPPER: pairs are bundled in 25-pair binders, colour coded by tip/ring.
#
# Every SpliceMode must appear in each table below; a missing entry raises
# KeyError at the lookup site instead of silently falling through.
# ============================================================================

GROUP_SIZES = {
    SpliceMode.FIBER: 12,
    SpliceMode.COPPER: 25,
}

DEFAULT_CAPACITIES = {
    SpliceMode.FIBER: 24,
    SpliceMode.COPPER: 50,
}

UNIT_NAMES = {
    SpliceMode.FIBER: "fiber",
    SpliceMode.COPPER: "pair",
}

GROUP_NAMES = {
    SpliceMode.FIBER: "ribbon",
    SpliceMode.COPPER: "binder",
}

# TIA-598 fiber colour sequence, position 1..12
FIBER_COLORS = [
    "blue", "orange", "green", "brown", "slate", "white",
    "red", "black", "yellow", "violet", "pink", "aqua",
]

# 25-pair colour code: pair n uses TIP_COLORS[(n-1)//5] / RING_COLORS[(n-1)%5]
TIP_COLORS = ["white", "red", "black", "yellow", "violet"]
RING_COLORS = ["blue", "orange", "green", "brown", "slate"]


@dataclass
class Cable:
    """Represents a physical cable whose capacity is split into circuits."""

    name: str                    # e.g., "f1", "d3"
    capacity: int                # Total strand/pair count
    role: CableRole              # FEED or DISTRIBUTION
    mode: SpliceMode = SpliceMode.FIBER
    group_size: Optional[int] = None  # Ribbon/binder size, defaults from mode
    id: str = field(default_factory=new_record_id)

    def __post_init__(self):
        self.role = CableRole.parse(self.role)
        self.mode = SpliceMode.parse(self.mode)
        if self.group_size is None:
            self.group_size = GROUP_SIZES[self.mode]

    @property
    def is_feed(self) -> bool:
        """Check if cable is a splice source."""
        return self.role == CableRole.FEED

    @property
    def is_distribution(self) -> bool:
        """Check if cable is a splice target."""
        return self.role == CableRole.DISTRIBUTION

    @property
    def unit_name(self) -> str:
        return UNIT_NAMES[self.mode]

    @property
    def group_name(self) -> str:
        return GROUP_NAMES[self.mode]

    @property
    def group_count(self) -> int:
        """Number of ribbons/binders needed to hold the full capacity."""
        return -(-self.capacity // self.group_size)

    def to_record(self) -> Dict[str, Any]:
        """Persisted field shape."""
        return {
            "id": self.id,
            "name": self.name,
            "capacity": self.capacity,
            "groupSize": self.group_size,
            "role": self.role.value,
        }
