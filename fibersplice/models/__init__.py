"""Data models for fiber/copper splice management."""

from .cable import (
    Cable,
    CableRole,
    SpliceMode,
    GROUP_SIZES,
    DEFAULT_CAPACITIES,
    UNIT_NAMES,
    GROUP_NAMES,
    FIBER_COLORS,
    TIP_COLORS,
    RING_COLORS,
    new_record_id,
)

from .circuit import (
    Circuit,
    CircuitUpdate,
    CableUpdate,
    CircuitBatch,
    CLEARED_SPLICE,
    CIRCUIT_FIELD_NAMES,
    CABLE_FIELD_NAMES,
)

__all__ = [
    # Cable
    "Cable",
    "CableRole",
    "SpliceMode",
    "GROUP_SIZES",
    "DEFAULT_CAPACITIES",
    "UNIT_NAMES",
    "GROUP_NAMES",
    "FIBER_COLORS",
    "TIP_COLORS",
    "RING_COLORS",
    "new_record_id",
    # Circuit
    "Circuit",
    "CircuitUpdate",
    "CableUpdate",
    "CircuitBatch",
    "CLEARED_SPLICE",
    "CIRCUIT_FIELD_NAMES",
    "CABLE_FIELD_NAMES",
]
