"""
Splice Matcher

Finds the Feed circuit a Distribution circuit splices to and translates the
Distribution circuit's logical range into physical Feed strands.

A Feed circuit F matches Distribution circuit D when both identifiers have
the same prefix and F's range fully contains D's range. The first match in
iteration order wins; several candidates are not treated as an error.

    D = "pon,3-4", F = "pon,1-12" at strands 13..24
    -> feed strands 15..16
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .identifier_codec import parse_identifier, try_parse_identifier
from ..errors import NoMatchingFeedCircuitError
from ..models import Circuit


logger = logging.getLogger(__name__)


@dataclass
class FeedMatch:
    """Located Feed circuit and the physical strands the splice uses."""
    feed_cable_id: str
    feed_circuit_id: str
    feed_identifier: str
    feed_strand_start: int
    feed_strand_end: int

    def as_splice_fields(self) -> Dict:
        """Circuit field values that record this splice."""
        return {
            "is_spliced": True,
            "feed_cable_id": self.feed_cable_id,
            "feed_strand_start": self.feed_strand_start,
            "feed_strand_end": self.feed_strand_end,
        }


def match_feed_circuit(dist_circuit: Circuit, feed_circuits: Iterable[Circuit]) -> Optional[FeedMatch]:
    """
    Find the Feed circuit containing a Distribution circuit's range.

    Args:
        dist_circuit: Distribution circuit to splice
        feed_circuits: Candidate Feed circuits in search order

    Returns:
        FeedMatch for the first containing circuit, None when nothing matches

    Raises:
        MalformedIdentifierError: If the Distribution identifier is malformed
    """
    wanted = parse_identifier(dist_circuit.identifier)

    for feed in feed_circuits:
        candidate = try_parse_identifier(feed.identifier)
        if candidate is None:
            logger.debug("Skipping feed circuit %s with malformed identifier %r",
                         feed.id, feed.identifier)
            continue
        if not candidate.contains(wanted):
            continue

        offset = wanted.range_start - candidate.range_start
        return FeedMatch(
            feed_cable_id=feed.cable_id,
            feed_circuit_id=feed.id,
            feed_identifier=feed.identifier,
            feed_strand_start=feed.strand_start + offset,
            feed_strand_end=feed.strand_start + offset + wanted.width - 1,
        )

    return None


def require_feed_match(dist_circuit: Circuit, feed_circuits: Iterable[Circuit]) -> FeedMatch:
    """
    Same as match_feed_circuit() but fails when nothing matches.

    Raises:
        NoMatchingFeedCircuitError: If no Feed circuit contains the range
    """
    match = match_feed_circuit(dist_circuit, feed_circuits)
    if match is None:
        wanted = parse_identifier(dist_circuit.identifier)
        raise NoMatchingFeedCircuitError(wanted.prefix, wanted.range_start, wanted.range_end)
    return match
