"""
Ribbon / Binder Segmenter

Splits a spliced strand range into chunks that never straddle a ribbon
(fiber) or binder (copper) boundary on either the Distribution or the Feed
side. Each chunk is one row of a splice schedule.

Example (group size 12):
    Distribution strands 10..15, Feed strands 1..6
    -> D R1:10-12 / F R1:1-3
       D R2:1-3   / F R1:4-6

Both sides are walked in lock-step; the step is the number of strands left
until the nearer ribbon boundary on either side.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from .identifier_codec import try_parse_identifier
from ..models import Circuit, FIBER_COLORS, TIP_COLORS, RING_COLORS


def ribbon_number(strand: int, group_size: int) -> int:
    """Ribbon/binder holding a 1-based strand."""
    return (strand - 1) // group_size + 1


def position_in_ribbon(strand: int, group_size: int) -> int:
    """1-based position of a strand inside its ribbon/binder."""
    return (strand - 1) % group_size + 1


@dataclass(frozen=True)
class Segment:
    """One ribbon-aligned slice of a splice."""
    dist_ribbon: int
    dist_pos_start: int
    dist_pos_end: int
    feed_ribbon: int
    feed_pos_start: int
    feed_pos_end: int
    circuit_sub_start: int       # Slice of the circuit's logical numbering
    circuit_sub_end: int
    dist_strand_start: int = 0   # Absolute strands, for schedules
    dist_strand_end: int = 0
    feed_strand_start: int = 0
    feed_strand_end: int = 0

    @property
    def width(self) -> int:
        return self.dist_pos_end - self.dist_pos_start + 1

    @property
    def dist_label(self) -> str:
        return segment_label(self.dist_ribbon, self.dist_pos_start, self.dist_pos_end)

    @property
    def feed_label(self) -> str:
        return segment_label(self.feed_ribbon, self.feed_pos_start, self.feed_pos_end)


@dataclass
class SegmentationResult:
    """Segments for one splice, or the reason none could be produced."""
    segments: List[Segment] = field(default_factory=list)
    is_valid: bool = True
    reason: Optional[str] = None

    @property
    def row_count(self) -> int:
        return len(self.segments)

    @classmethod
    def invalid(cls, reason: str) -> "SegmentationResult":
        return cls(segments=[], is_valid=False, reason=reason)


def segment_label(ribbon: int, pos_start: int, pos_end: int) -> str:
    """Segment label such as R2:3-5, or R2:3 for a single strand."""
    if pos_start == pos_end:
        return f"R{ribbon}:{pos_start}"
    return f"R{ribbon}:{pos_start}-{pos_end}"


def segment_range(
    dist_start: Optional[int],
    dist_end: Optional[int],
    feed_start: Optional[int],
    feed_end: Optional[int],
    group_size: int,
    circuit_start: Optional[int] = None,
) -> SegmentationResult:
    """
    Split a Distribution/Feed strand pairing into ribbon-aligned segments.

    Args:
        dist_start: First Distribution strand
        dist_end: Last Distribution strand
        feed_start: First Feed strand (None when not spliced)
        feed_end: Last Feed strand (None when not spliced)
        group_size: Strands per ribbon/binder
        circuit_start: Logical number of the first strand (defaults to 1)

    Returns:
        SegmentationResult; invalid input yields no segments and a reason
    """
    if dist_start is None or dist_end is None:
        return SegmentationResult.invalid("distribution range is missing")
    if feed_start is None or feed_end is None:
        return SegmentationResult.invalid("feed range is missing")
    if group_size is None or group_size < 1:
        return SegmentationResult.invalid(f"group size must be positive, got {group_size}")
    if dist_start < 1 or feed_start < 1:
        return SegmentationResult.invalid("strand numbers start at 1")
    if dist_end < dist_start or feed_end < feed_start:
        return SegmentationResult.invalid("range end is before range start")
    if dist_end - dist_start != feed_end - feed_start:
        return SegmentationResult.invalid(
            f"distribution range {dist_start}-{dist_end} and feed range "
            f"{feed_start}-{feed_end} differ in width"
        )

    if circuit_start is None:
        circuit_start = 1

    segments = []
    dist_cursor = dist_start
    feed_cursor = feed_start

    while dist_cursor <= dist_end:
        dist_ribbon = ribbon_number(dist_cursor, group_size)
        feed_ribbon = ribbon_number(feed_cursor, group_size)

        dist_left = min(dist_ribbon * group_size, dist_end) - dist_cursor + 1
        feed_left = min(feed_ribbon * group_size, feed_end) - feed_cursor + 1
        step = min(dist_left, feed_left)

        consumed = dist_cursor - dist_start
        segments.append(Segment(
            dist_ribbon=dist_ribbon,
            dist_pos_start=position_in_ribbon(dist_cursor, group_size),
            dist_pos_end=position_in_ribbon(dist_cursor + step - 1, group_size),
            feed_ribbon=feed_ribbon,
            feed_pos_start=position_in_ribbon(feed_cursor, group_size),
            feed_pos_end=position_in_ribbon(feed_cursor + step - 1, group_size),
            circuit_sub_start=circuit_start + consumed,
            circuit_sub_end=circuit_start + consumed + step - 1,
            dist_strand_start=dist_cursor,
            dist_strand_end=dist_cursor + step - 1,
            feed_strand_start=feed_cursor,
            feed_strand_end=feed_cursor + step - 1,
        ))

        dist_cursor += step
        feed_cursor += step

    return SegmentationResult(segments=segments)


def segment_circuit(circuit: Circuit, group_size: int) -> SegmentationResult:
    """
    Segment a spliced circuit, numbering slices by its identifier range.
    """
    if not circuit.is_spliced or not circuit.has_feed_range:
        return SegmentationResult.invalid("circuit is not spliced")

    parsed = try_parse_identifier(circuit.identifier)
    if parsed is None:
        return SegmentationResult.invalid(f"malformed identifier {circuit.identifier!r}")

    return segment_range(
        circuit.strand_start,
        circuit.strand_end,
        circuit.feed_strand_start,
        circuit.feed_strand_end,
        group_size,
        circuit_start=parsed.range_start,
    )


def count_splice_rows(circuits: Iterable[Circuit], group_size: int, ribbon_view: bool = True) -> int:
    """
    Count the schedule rows needed for a set of spliced circuits.

    Ribbon view: one row per segment, one row for a circuit that cannot be
    segmented. Strand view: one row per strand.
    """
    rows = 0
    for circuit in circuits:
        if not circuit.is_spliced:
            continue
        if ribbon_view:
            result = segment_circuit(circuit, group_size)
            rows += result.row_count if result.is_valid else 1
        else:
            rows += max(circuit.strand_count, 1)
    return rows


def describe_span(strand_start: int, strand_end: int, group_size: int) -> str:
    """
    Compact ribbon label for a strand span.

    Examples (group size 12):
        1..12  -> "R1"
        3..6   -> "R1:3-6"
        3..42  -> "R1:3-12, R2-R3, R4:1-6"
    """
    first_ribbon = ribbon_number(strand_start, group_size)
    last_ribbon = ribbon_number(strand_end, group_size)
    first_pos = position_in_ribbon(strand_start, group_size)
    last_pos = position_in_ribbon(strand_end, group_size)

    if first_ribbon == last_ribbon:
        if first_pos == 1 and last_pos == group_size:
            return f"R{first_ribbon}"
        return f"R{first_ribbon}:{first_pos}-{last_pos}"

    parts = []
    starts_partial = first_pos != 1
    ends_partial = last_pos != group_size

    if starts_partial:
        parts.append(f"R{first_ribbon}:{first_pos}-{group_size}")

    full_first = first_ribbon + 1 if starts_partial else first_ribbon
    full_last = last_ribbon - 1 if ends_partial else last_ribbon
    if full_first == full_last:
        parts.append(f"R{full_first}")
    elif full_first < full_last:
        parts.append(f"R{full_first}-R{full_last}")

    if ends_partial:
        parts.append(f"R{last_ribbon}:1-{last_pos}")

    return ", ".join(parts)


def strand_color(strand: int) -> str:
    """TIA-598 colour of a fiber strand (repeats every 12)."""
    return FIBER_COLORS[(strand - 1) % len(FIBER_COLORS)]


def pair_colors(pair: int) -> Tuple[str, str]:
    """(tip, ring) colours of a copper pair (repeats every 25)."""
    index = (pair - 1) % (len(TIP_COLORS) * len(RING_COLORS))
    return TIP_COLORS[index // len(RING_COLORS)], RING_COLORS[index % len(RING_COLORS)]
