"""
Feed Range Conflict Detector

Two spliced Distribution circuits may share a Feed cable only when their
feed strand ranges are disjoint. This check gates every splice-on.
"""

from typing import Iterable, List, Optional, Tuple

from ..errors import FeedRangeConflictError
from ..models import Circuit


def ranges_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Closed-interval overlap test."""
    return start_a <= end_b and start_b <= end_a


def find_conflict(
    circuits: Iterable[Circuit],
    feed_cable_id: str,
    feed_start: int,
    feed_end: int,
    excluding_circuit_id: Optional[str] = None,
) -> Optional[Circuit]:
    """
    Find a spliced circuit whose feed range overlaps the candidate range.

    Args:
        circuits: Circuits to scan (non-spliced ones are ignored)
        feed_cable_id: Feed cable the candidate splices to
        feed_start: Candidate first feed strand
        feed_end: Candidate last feed strand
        excluding_circuit_id: Circuit being spliced, ignored in the scan

    Returns:
        First conflicting circuit, or None
    """
    for other in circuits:
        if other.id == excluding_circuit_id:
            continue
        if not other.is_spliced or other.feed_cable_id != feed_cable_id:
            continue
        if not other.has_feed_range:
            continue
        if ranges_overlap(feed_start, feed_end, other.feed_strand_start, other.feed_strand_end):
            return other
    return None


def has_conflict(
    circuits: Iterable[Circuit],
    feed_cable_id: str,
    feed_start: int,
    feed_end: int,
    excluding_circuit_id: Optional[str] = None,
) -> bool:
    """Check if the candidate feed range collides with an existing splice."""
    return find_conflict(circuits, feed_cable_id, feed_start, feed_end, excluding_circuit_id) is not None


def ensure_no_conflict(
    circuits: Iterable[Circuit],
    feed_cable_id: str,
    feed_start: int,
    feed_end: int,
    excluding_circuit_id: Optional[str] = None,
):
    """
    Raises:
        FeedRangeConflictError: Naming the first conflicting circuit
    """
    other = find_conflict(circuits, feed_cable_id, feed_start, feed_end, excluding_circuit_id)
    if other is not None:
        raise FeedRangeConflictError(feed_cable_id, feed_start, feed_end, other)


def scan_feed_conflicts(circuits: Iterable[Circuit]) -> List[Tuple[Circuit, Circuit]]:
    """
    List every pair of spliced circuits whose feed ranges overlap.

    Useful for auditing data that was written without going through the
    splice gate (imports, propagation leaving stale ranges).
    """
    spliced = [c for c in circuits if c.is_spliced and c.has_feed_range]
    conflicts = []
    for i, first in enumerate(spliced):
        for second in spliced[i + 1:]:
            if first.feed_cable_id != second.feed_cable_id:
                continue
            if ranges_overlap(first.feed_strand_start, first.feed_strand_end,
                              second.feed_strand_start, second.feed_strand_end):
                conflicts.append((first, second))
    return conflicts


class ConflictDetector:
    """Conflict gate bound to a circuit store."""

    def __init__(self, store):
        self.store = store

    def find_conflict(self, feed_cable_id: str, feed_start: int, feed_end: int,
                      excluding_circuit_id: Optional[str] = None) -> Optional[Circuit]:
        circuits = self.store.list_spliced_circuits(feed_cable_id)
        return find_conflict(circuits, feed_cable_id, feed_start, feed_end, excluding_circuit_id)

    def has_conflict(self, feed_cable_id: str, feed_start: int, feed_end: int,
                     excluding_circuit_id: Optional[str] = None) -> bool:
        return self.find_conflict(feed_cable_id, feed_start, feed_end, excluding_circuit_id) is not None

    def ensure_no_conflict(self, feed_cable_id: str, feed_start: int, feed_end: int,
                           excluding_circuit_id: Optional[str] = None):
        other = self.find_conflict(feed_cable_id, feed_start, feed_end, excluding_circuit_id)
        if other is not None:
            raise FeedRangeConflictError(feed_cable_id, feed_start, feed_end, other)
