"""Exceptions raised by the splice engine.

All of these are local, recoverable conditions reported back to the caller.
"""


class SpliceEngineError(Exception):
    """Base class for splice engine errors."""
    pass


class MalformedIdentifierError(SpliceEngineError):
    """Circuit identifier does not match "prefix,start-end"."""

    def __init__(self, identifier, reason: str):
        self.identifier = identifier
        self.reason = reason
        super().__init__(
            f"Invalid circuit ID {identifier!r}: {reason}. "
            f'Expected format: "prefix,start-end" (e.g., "lg,33-36")'
        )


class NoMatchingFeedCircuitError(SpliceEngineError):
    """No Feed circuit contains the Distribution circuit's range."""

    def __init__(self, prefix: str, range_start: int, range_end: int):
        self.prefix = prefix
        self.range_start = range_start
        self.range_end = range_end
        super().__init__(
            f'Could not find a Feed circuit with prefix "{prefix}" '
            f"that contains the range {range_start}-{range_end}"
        )


class FeedRangeConflictError(SpliceEngineError):
    """Requested feed range overlaps a range already claimed on the same Feed cable."""

    def __init__(self, feed_cable_id: str, feed_start: int, feed_end: int, conflicting_circuit):
        self.feed_cable_id = feed_cable_id
        self.feed_start = feed_start
        self.feed_end = feed_end
        self.conflicting_circuit = conflicting_circuit
        super().__init__(
            f"Feed strands {feed_start}-{feed_end} overlap strands "
            f"{conflicting_circuit.feed_strand_start}-{conflicting_circuit.feed_strand_end} "
            f'already spliced to circuit "{conflicting_circuit.identifier}"'
        )


class CapacityExceededError(SpliceEngineError):
    """Allocated spans would run past the cable capacity."""

    def __init__(self, identifier: str, required: int, remaining: int, capacity: int):
        self.identifier = identifier
        self.required = required
        self.remaining = remaining
        self.capacity = capacity
        super().__init__(
            f'Circuit "{identifier}" requires {required} strands but only '
            f"{remaining} strands remaining in cable (capacity {capacity})"
        )


class OverlappingIdentifierError(SpliceEngineError):
    """Two circuits in one cable claim overlapping ranges of the same prefix."""

    def __init__(self, identifier: str, existing_identifier: str):
        self.identifier = identifier
        self.existing_identifier = existing_identifier
        super().__init__(
            f'Circuit ID "{identifier}" overlaps with existing circuit '
            f'"{existing_identifier}". Ranges cannot overlap for the same prefix.'
        )


class DuplicateCableNameError(SpliceEngineError):
    """Cable name already used (case-insensitive) within the same mode."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'A cable named "{name}" already exists')


class InvalidCableError(SpliceEngineError):
    """Cable attributes are unusable (empty name, non-positive capacity)."""
    pass


class InvalidSpliceTargetError(SpliceEngineError):
    """Splice requested on a circuit that does not belong to a Distribution cable."""
    pass


class InvalidReorderError(SpliceEngineError):
    """Requested circuit order is not a permutation of the cable's circuits."""
    pass


class RecordNotFoundError(SpliceEngineError):
    """Referenced record does not exist in the store."""

    kind = "Record"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"{self.kind} not found: {record_id}")


class CableNotFoundError(RecordNotFoundError):
    kind = "Cable"


class CircuitNotFoundError(RecordNotFoundError):
    kind = "Circuit"


class BatchApplyError(SpliceEngineError):
    """A write batch was rejected in full."""
    pass
