"""
Circuit Identifier Codec

Parses and formats the human-entered circuit identifier "prefix,start-end".

The prefix names a logical service (e.g., "pon", "lg", "xe") and the
range gives that circuit's own logical numbering. The width of the range
is how many strands/pairs the circuit occupies in its cable.

Accepted forms:
    "pon,1-8"       -> prefix "pon", range 1..8
    " lg , 33-36 "  -> prefix "lg",  range 33..36 (whitespace trimmed)
    "xe,5-5"        -> single strand

Rejected forms:
    "pon1-8"        (no comma)
    "a,b,1-2"       (more than one comma)
    ",1-8"          (empty prefix)
    "pon,8-1"       (start after end)
    "pon,1-x"       (non-numeric range)
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..errors import MalformedIdentifierError


RANGE_PATTERN = re.compile(r'^\s*(\d+)\s*-\s*(\d+)\s*$', re.ASCII)


@dataclass(frozen=True)
class ParsedIdentifier:
    """Decoded circuit identifier."""
    prefix: str
    range_start: int
    range_end: int

    @property
    def width(self) -> int:
        """Number of strands/pairs the identifier claims."""
        return self.range_end - self.range_start + 1

    def contains(self, other: "ParsedIdentifier") -> bool:
        """
        Check if this range fully contains another range of the same prefix.

        Equal ranges count as contained.
        """
        return (
            self.prefix == other.prefix
            and other.range_start >= self.range_start
            and other.range_end <= self.range_end
        )

    def overlaps(self, other: "ParsedIdentifier") -> bool:
        """Check if two identifiers share a prefix and any range value."""
        return (
            self.prefix == other.prefix
            and self.range_start <= other.range_end
            and other.range_start <= self.range_end
        )

    def __str__(self) -> str:
        return format_identifier(self.prefix, self.range_start, self.range_end)


def parse_identifier(identifier: str) -> ParsedIdentifier:
    """
    Parse a "prefix,start-end" circuit identifier.

    Args:
        identifier: Raw identifier text

    Returns:
        ParsedIdentifier with trimmed prefix and integer range

    Raises:
        MalformedIdentifierError: If the text does not match the format
    """
    if not isinstance(identifier, str):
        raise MalformedIdentifierError(identifier, "identifier must be text")

    parts = identifier.split(',')
    if len(parts) != 2:
        raise MalformedIdentifierError(
            identifier, f"expected exactly one comma, found {len(parts) - 1}"
        )

    prefix = parts[0].strip()
    if not prefix:
        raise MalformedIdentifierError(identifier, "prefix is empty")

    match = RANGE_PATTERN.match(parts[1])
    if not match:
        raise MalformedIdentifierError(
            identifier, f"range {parts[1].strip()!r} is not of the form start-end"
        )

    range_start = int(match.group(1))
    range_end = int(match.group(2))
    if range_start > range_end:
        raise MalformedIdentifierError(
            identifier, f"range start {range_start} is greater than end {range_end}"
        )

    return ParsedIdentifier(prefix, range_start, range_end)


def try_parse_identifier(identifier: str) -> Optional[ParsedIdentifier]:
    """Parse an identifier, returning None instead of raising."""
    try:
        return parse_identifier(identifier)
    except MalformedIdentifierError:
        return None


def identifier_width(identifier: str) -> int:
    """
    Get the strand/pair count an identifier claims.

    Raises:
        MalformedIdentifierError: If the identifier is malformed
    """
    return parse_identifier(identifier).width


def format_identifier(prefix: str, range_start: int, range_end: int) -> str:
    """
    Build the canonical identifier text.

    Args:
        prefix: Service prefix, must not be empty or contain a comma
        range_start: First logical number (>= 0)
        range_end: Last logical number (>= range_start)

    Returns:
        "prefix,start-end"

    Raises:
        MalformedIdentifierError: If the parts cannot form a valid identifier
    """
    prefix = (prefix or "").strip()
    text = f"{prefix},{range_start}-{range_end}"

    if not prefix:
        raise MalformedIdentifierError(text, "prefix is empty")
    if ',' in prefix:
        raise MalformedIdentifierError(text, "prefix must not contain a comma")
    if range_start < 0:
        raise MalformedIdentifierError(text, "range start must not be negative")
    if range_start > range_end:
        raise MalformedIdentifierError(
            text, f"range start {range_start} is greater than end {range_end}"
        )

    return text


def normalize_identifier(identifier: str) -> str:
    """Canonical spelling of a valid identifier (whitespace removed)."""
    return str(parse_identifier(identifier))


def identifiers_overlap(first: str, second: str) -> bool:
    """
    Check if two identifiers claim overlapping ranges of the same prefix.

    Malformed identifiers never overlap anything.
    """
    a = try_parse_identifier(first)
    b = try_parse_identifier(second)
    if a is None or b is None:
        return False
    return a.overlaps(b)
