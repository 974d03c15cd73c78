"""Allocation and splice-matching engine."""

from .identifier_codec import (
    ParsedIdentifier,
    RANGE_PATTERN,
    parse_identifier,
    try_parse_identifier,
    identifier_width,
    format_identifier,
    normalize_identifier,
    identifiers_overlap,
)

from .allocator import (
    AllocatedSpan,
    SkippedIdentifier,
    AllocationResult,
    CableUtilization,
    allocate,
    usable_identifiers,
    check_capacity,
    summarize_utilization,
)

from .splice_matcher import (
    FeedMatch,
    match_feed_circuit,
    require_feed_match,
)

from .conflict_detector import (
    ConflictDetector,
    ranges_overlap,
    find_conflict,
    has_conflict,
    ensure_no_conflict,
    scan_feed_conflicts,
)

from .ribbon_segmenter import (
    Segment,
    SegmentationResult,
    ribbon_number,
    position_in_ribbon,
    segment_label,
    segment_range,
    segment_circuit,
    count_splice_rows,
    describe_span,
    strand_color,
    pair_colors,
)

from .mode_settings import (
    ModeSpec,
    ModeSettings,
    get_mode_settings,
)

from .recalculator import (
    RecalculationCoordinator,
    MOVE_UP,
    MOVE_DOWN,
)

__all__ = [
    # Identifier Codec
    "ParsedIdentifier",
    "RANGE_PATTERN",
    "parse_identifier",
    "try_parse_identifier",
    "identifier_width",
    "format_identifier",
    "normalize_identifier",
    "identifiers_overlap",
    # Allocator
    "AllocatedSpan",
    "SkippedIdentifier",
    "AllocationResult",
    "CableUtilization",
    "allocate",
    "usable_identifiers",
    "check_capacity",
    "summarize_utilization",
    # Splice Matcher
    "FeedMatch",
    "match_feed_circuit",
    "require_feed_match",
    # Conflict Detector
    "ConflictDetector",
    "ranges_overlap",
    "find_conflict",
    "has_conflict",
    "ensure_no_conflict",
    "scan_feed_conflicts",
    # Ribbon Segmenter
    "Segment",
    "SegmentationResult",
    "ribbon_number",
    "position_in_ribbon",
    "segment_label",
    "segment_range",
    "segment_circuit",
    "count_splice_rows",
    "describe_span",
    "strand_color",
    "pair_colors",
    # Mode Settings
    "ModeSpec",
    "ModeSettings",
    "get_mode_settings",
    # Recalculation
    "RecalculationCoordinator",
    "MOVE_UP",
    "MOVE_DOWN",
]
