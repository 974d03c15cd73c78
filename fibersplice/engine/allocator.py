"""
Strand Allocation Engine

Turns an ordered list of circuit identifiers into contiguous strand ranges
inside one cable.

Allocation rules:
- The cursor starts at strand 1
- Each circuit takes as many strands as its identifier range is wide
- Circuits are packed back to back in the given order with no gaps
- Malformed identifiers are reported and skipped; they do not move the cursor

Capacity is not enforced here. A cable whose spans run past its capacity is
reported through check_capacity() or summarize_utilization().
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .identifier_codec import parse_identifier, try_parse_identifier
from ..errors import CapacityExceededError, MalformedIdentifierError


@dataclass
class AllocatedSpan:
    """Strand range assigned to one identifier."""
    index: int                   # Position in the input list
    identifier: str
    strand_start: int            # 1-based inclusive
    strand_end: int              # 1-based inclusive

    @property
    def width(self) -> int:
        return self.strand_end - self.strand_start + 1


@dataclass
class SkippedIdentifier:
    """Identifier that could not be allocated."""
    index: int
    identifier: str
    reason: str


@dataclass
class AllocationResult:
    """Result of allocating one ordered identifier list."""
    spans: List[AllocatedSpan] = field(default_factory=list)
    skipped: List[SkippedIdentifier] = field(default_factory=list)
    group_size: int = 12

    @property
    def total_strands(self) -> int:
        """Strands consumed by all allocated spans."""
        if not self.spans:
            return 0
        return self.spans[-1].strand_end

    @property
    def has_skipped(self) -> bool:
        return len(self.skipped) > 0

    def span_for(self, index: int) -> Optional[AllocatedSpan]:
        """Get the span allocated to the input at a given index."""
        for span in self.spans:
            if span.index == index:
                return span
        return None


def allocate(identifiers: Sequence[str], group_size: int = 12) -> AllocationResult:
    """
    Allocate contiguous strand ranges for an ordered identifier list.

    Args:
        identifiers: Circuit identifiers in allocation order
        group_size: Ribbon/binder size of the cable (carried on the result)

    Returns:
        AllocationResult with one span per well-formed identifier

    Example:
        >>> result = allocate(["a,1-2", "b,1-4"])
        >>> [(s.strand_start, s.strand_end) for s in result.spans]
        [(1, 2), (3, 6)]
    """
    result = AllocationResult(group_size=group_size)
    cursor = 1

    for index, identifier in enumerate(identifiers):
        try:
            width = parse_identifier(identifier).width
        except MalformedIdentifierError as e:
            result.skipped.append(SkippedIdentifier(index, identifier, e.reason))
            continue

        result.spans.append(AllocatedSpan(
            index=index,
            identifier=identifier,
            strand_start=cursor,
            strand_end=cursor + width - 1,
        ))
        cursor += width

    return result


def usable_identifiers(lines: Iterable[str]) -> List[str]:
    """
    Stripped, well-formed identifiers from pasted or imported lines.

    Blank and malformed lines are dropped, so the result allocates with
    contiguous indices.
    """
    usable = []
    for line in lines or []:
        line = (line or "").strip()
        if line and try_parse_identifier(line) is not None:
            usable.append(line)
    return usable


def check_capacity(result: AllocationResult, capacity: int):
    """
    Verify that every allocated span fits in the cable.

    Args:
        result: Allocation to check
        capacity: Cable capacity in strands/pairs

    Raises:
        CapacityExceededError: Naming the first span that runs past capacity
    """
    for span in result.spans:
        if span.strand_end > capacity:
            remaining = max(capacity - span.strand_start + 1, 0)
            raise CapacityExceededError(span.identifier, span.width, remaining, capacity)


@dataclass
class CableUtilization:
    """How much of a cable's capacity its circuits use."""
    assigned_strands: int
    capacity: int

    @property
    def remaining(self) -> int:
        return self.capacity - self.assigned_strands

    @property
    def is_complete(self) -> bool:
        """Pass when the circuits use exactly the full capacity."""
        return self.assigned_strands == self.capacity

    @property
    def is_over_capacity(self) -> bool:
        return self.assigned_strands > self.capacity

    @property
    def utilization_percent(self) -> float:
        if self.capacity <= 0:
            return 0.0
        return self.assigned_strands / self.capacity * 100


def summarize_utilization(circuits: Iterable, capacity: int) -> CableUtilization:
    """
    Summarize strand usage for allocated circuits.

    Args:
        circuits: Circuits carrying strand_start/strand_end
        capacity: Cable capacity

    Returns:
        CableUtilization
    """
    assigned = 0
    for circuit in circuits:
        if circuit.strand_end >= circuit.strand_start > 0:
            assigned += circuit.strand_end - circuit.strand_start + 1
    return CableUtilization(assigned_strands=assigned, capacity=capacity)
