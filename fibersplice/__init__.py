"""Fiber/Copper Splice Manager.

Allocates cable strands to circuits, keeps allocations contiguous as
circuits change, and matches Distribution circuits to the Feed circuits
they splice to.
"""

__version__ = "1.0.0"

from .errors import (
    SpliceEngineError,
    MalformedIdentifierError,
    NoMatchingFeedCircuitError,
    FeedRangeConflictError,
    CapacityExceededError,
    OverlappingIdentifierError,
    DuplicateCableNameError,
    InvalidCableError,
    InvalidSpliceTargetError,
    InvalidReorderError,
    RecordNotFoundError,
    CableNotFoundError,
    CircuitNotFoundError,
    BatchApplyError,
)

from .models import (
    Cable,
    CableRole,
    SpliceMode,
    Circuit,
    CircuitUpdate,
    CircuitBatch,
)

from .engine import (
    parse_identifier,
    format_identifier,
    identifier_width,
    allocate,
    match_feed_circuit,
    ConflictDetector,
    segment_range,
    RecalculationCoordinator,
)

from .storage import (
    CircuitStore,
    InMemoryStore,
)

__all__ = [
    # Version
    "__version__",
    # Errors
    "SpliceEngineError",
    "MalformedIdentifierError",
    "NoMatchingFeedCircuitError",
    "FeedRangeConflictError",
    "CapacityExceededError",
    "OverlappingIdentifierError",
    "DuplicateCableNameError",
    "InvalidCableError",
    "InvalidSpliceTargetError",
    "InvalidReorderError",
    "RecordNotFoundError",
    "CableNotFoundError",
    "CircuitNotFoundError",
    "BatchApplyError",
    # Models
    "Cable",
    "CableRole",
    "SpliceMode",
    "Circuit",
    "CircuitUpdate",
    "CircuitBatch",
    # Engine
    "parse_identifier",
    "format_identifier",
    "identifier_width",
    "allocate",
    "match_feed_circuit",
    "ConflictDetector",
    "segment_range",
    "RecalculationCoordinator",
    # Storage
    "CircuitStore",
    "InMemoryStore",
]
