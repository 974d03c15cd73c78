"""
Recalculation Coordinator

Every structural change to a cable's circuit list goes through here:

1. Re-derive order_index 0..n-1 from the new circuit order
2. Re-run allocation over the ordered identifiers
3. Queue order_index/strand_start/strand_end for every changed circuit
4. When the cable is a Feed cable, re-translate the feed strands of every
   Distribution circuit spliced to it

All writes of one operation go to the store as a single CircuitBatch, so a
reader never sees a half-recalculated cable.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .allocator import AllocationResult, allocate, check_capacity, usable_identifiers
from .conflict_detector import ConflictDetector
from .identifier_codec import ParsedIdentifier, parse_identifier, try_parse_identifier
from .mode_settings import ModeSettings, get_mode_settings
from .splice_matcher import FeedMatch, match_feed_circuit, require_feed_match
from ..errors import (
    CableNotFoundError,
    CapacityExceededError,
    CircuitNotFoundError,
    DuplicateCableNameError,
    InvalidCableError,
    InvalidReorderError,
    InvalidSpliceTargetError,
    MalformedIdentifierError,
    OverlappingIdentifierError,
)
from ..models import (
    Cable,
    CableRole,
    Circuit,
    CircuitBatch,
    SpliceMode,
    CLEARED_SPLICE,
)


logger = logging.getLogger(__name__)


MOVE_UP = "up"
MOVE_DOWN = "down"


class RecalculationCoordinator:
    """Applies cable and circuit edits and keeps allocations consistent."""

    def __init__(self, store, settings: Optional[ModeSettings] = None):
        """
        Args:
            store: CircuitStore the coordinator reads and writes
            settings: Mode settings, defaults to the shared instance
        """
        self.store = store
        self.settings = settings or get_mode_settings()
        self.conflicts = ConflictDetector(store)

    # ========================================================================
    # CABLES
    # ========================================================================

    def create_cable(
        self,
        name: str,
        role,
        capacity: Optional[int] = None,
        mode=SpliceMode.FIBER,
        identifiers: Optional[Iterable[str]] = None,
    ) -> Cable:
        """
        Create a cable and allocate its initial circuits.

        Blank and malformed lines in identifiers are skipped.

        Args:
            name: Cable name, unique per mode ignoring case
            role: CableRole or its name
            capacity: Strand/pair count, defaults from the mode settings
            mode: SpliceMode or its name
            identifiers: Circuit identifiers in allocation order

        Returns:
            The stored Cable

        Raises:
            InvalidCableError: If name is empty or capacity is not positive
            DuplicateCableNameError: If the name is already used in the mode
            CapacityExceededError: If the circuits need more than capacity
        """
        mode = SpliceMode.parse(mode)
        role = CableRole.parse(role)
        name = (name or "").strip()
        if not name:
            raise InvalidCableError("Cable name is required")
        if capacity is None:
            capacity = self.settings.default_capacity(mode)
        if capacity < 1:
            raise InvalidCableError(f"Cable capacity must be positive, got {capacity}")
        if self.store.find_cable_by_name(name, mode) is not None:
            raise DuplicateCableNameError(name)

        cable = Cable(
            name=name,
            capacity=capacity,
            role=role,
            mode=mode,
            group_size=self.settings.group_size(mode),
        )

        lines = [line for line in identifiers or [] if (line or "").strip()]
        valid = usable_identifiers(lines)
        if len(valid) < len(lines):
            logger.debug("Skipping %d malformed circuit lines for cable %s", len(lines) - len(valid), name)

        result = allocate(valid, cable.group_size)
        check_capacity(result, capacity)

        batch = CircuitBatch()
        batch.insert_cable(cable)
        for span in result.spans:
            batch.insert(Circuit(
                cable_id=cable.id,
                identifier=span.identifier,
                order_index=span.index,
                strand_start=span.strand_start,
                strand_end=span.strand_end,
            ))

        self.store.apply_batch(batch)
        logger.info("Created %s cable %s with %d circuits (%d/%d %ss)",
                    role.value, name, len(result.spans), result.total_strands,
                    capacity, cable.unit_name)
        return cable

    def update_cable(self, cable_id: str, name: Optional[str] = None,
                     capacity: Optional[int] = None) -> Cable:
        """
        Rename a cable or change its capacity.

        Capacity changes do not reallocate; utilization reports the result.
        """
        cable = self._get_cable(cable_id)
        values = {}

        if name is not None:
            name = name.strip()
            if not name:
                raise InvalidCableError("Cable name is required")
            other = self.store.find_cable_by_name(name, cable.mode)
            if other is not None and other.id != cable.id:
                raise DuplicateCableNameError(name)
            values["name"] = name

        if capacity is not None:
            if capacity < 1:
                raise InvalidCableError(f"Cable capacity must be positive, got {capacity}")
            values["capacity"] = capacity

        if values:
            batch = CircuitBatch()
            batch.update_cable(cable.id, **values)
            self.store.apply_batch(batch)
        return self.store.get_cable(cable.id)

    def change_role(self, cable_id: str, role) -> Cable:
        """
        Switch a cable between Feed and Distribution.

        Splice links that the new role makes meaningless are cleared in the
        same batch: a former Distribution cable loses its own links, a former
        Feed cable's dependents lose theirs.
        """
        cable = self._get_cable(cable_id)
        role = CableRole.parse(role)
        if role == cable.role:
            return cable

        batch = CircuitBatch()
        batch.update_cable(cable.id, role=role)

        if cable.is_distribution:
            for circuit in self.store.list_circuits(cable.id):
                if circuit.is_spliced:
                    batch.update(circuit.id, **CLEARED_SPLICE)
        else:
            self._clear_dependents(cable, batch)

        self.store.apply_batch(batch)
        logger.info("Cable %s role changed to %s", cable.name, role.value)
        return self.store.get_cable(cable.id)

    def delete_cable(self, cable_id: str):
        """
        Delete a cable and all of its circuits.

        Distribution circuits spliced to a deleted Feed cable are un-spliced.
        """
        cable = self._get_cable(cable_id)
        batch = CircuitBatch()

        circuits = self.store.list_circuits(cable.id)
        for circuit in circuits:
            batch.delete(circuit.id)
        if cable.is_feed:
            self._clear_dependents(cable, batch)
        batch.delete_cable(cable.id)

        self.store.apply_batch(batch)
        logger.info("Deleted cable %s and %d circuits", cable.name, len(circuits))

    # ========================================================================
    # CIRCUITS
    # ========================================================================

    def add_circuit(self, cable_id: str, identifier: str) -> Circuit:
        """
        Append a circuit to a cable.

        Raises:
            MalformedIdentifierError: If the identifier is malformed
            OverlappingIdentifierError: If it overlaps a circuit of the cable
            CapacityExceededError: If the cable has too few strands left
        """
        cable = self._get_cable(cable_id)
        identifier = (identifier or "").strip()
        parsed = parse_identifier(identifier)

        ordered = self.store.list_circuits(cable.id)
        self._check_overlap(identifier, parsed, ordered)

        used = sum(c.strand_count for c in ordered)
        remaining = cable.capacity - used
        if parsed.width > remaining:
            raise CapacityExceededError(identifier, parsed.width, max(remaining, 0), cable.capacity)

        circuit = Circuit(cable_id=cable.id, identifier=identifier)
        ordered.append(circuit)

        batch = CircuitBatch()
        batch.insert(circuit)
        self._recalculate(cable, ordered, batch, inserted_ids={circuit.id})
        self.store.apply_batch(batch)

        logger.info("Added circuit %s to cable %s at strands %d-%d",
                    identifier, cable.name, circuit.strand_start, circuit.strand_end)
        return self.store.get_circuit(circuit.id)

    def edit_identifier(self, circuit_id: str, identifier: str) -> Circuit:
        """
        Replace a circuit's identifier and reallocate its cable.

        A spliced Distribution circuit loses its splice link; it is not
        matched again automatically.

        Raises:
            MalformedIdentifierError: If the identifier is malformed
            OverlappingIdentifierError: If it overlaps another circuit of the cable
        """
        circuit = self._get_circuit(circuit_id)
        cable = self._get_cable(circuit.cable_id)
        identifier = (identifier or "").strip()
        parsed = parse_identifier(identifier)

        ordered = self.store.list_circuits(cable.id)
        self._check_overlap(identifier, parsed, ordered, excluding_circuit_id=circuit.id)

        batch = CircuitBatch()
        for sibling in ordered:
            if sibling.id == circuit.id:
                sibling.identifier = identifier
        batch.update(circuit.id, identifier=identifier)
        if cable.is_distribution and circuit.is_spliced:
            batch.update(circuit.id, **CLEARED_SPLICE)

        self._recalculate(cable, ordered, batch)
        self.store.apply_batch(batch)
        return self.store.get_circuit(circuit.id)

    def move_circuit(self, circuit_id: str, direction: str) -> bool:
        """
        Swap a circuit with its neighbour.

        Args:
            circuit_id: Circuit to move
            direction: "up" (towards strand 1) or "down"

        Returns:
            False when the circuit is already at that end of the cable
        """
        if direction not in (MOVE_UP, MOVE_DOWN):
            raise ValueError(f"direction must be '{MOVE_UP}' or '{MOVE_DOWN}', got {direction!r}")

        circuit = self._get_circuit(circuit_id)
        cable = self._get_cable(circuit.cable_id)
        ordered = self.store.list_circuits(cable.id)

        index = next(i for i, c in enumerate(ordered) if c.id == circuit.id)
        target = index - 1 if direction == MOVE_UP else index + 1
        if target < 0 or target >= len(ordered):
            return False

        ordered[index], ordered[target] = ordered[target], ordered[index]

        batch = CircuitBatch()
        self._recalculate(cable, ordered, batch)
        self.store.apply_batch(batch)
        return True

    def reorder_circuits(self, cable_id: str, ordered_ids: Sequence[str]):
        """
        Put a cable's circuits in an explicit order and reallocate.

        Raises:
            InvalidReorderError: If ordered_ids is not a permutation of the
                cable's circuit ids
        """
        cable = self._get_cable(cable_id)
        current = {c.id: c for c in self.store.list_circuits(cable.id)}

        if len(ordered_ids) != len(current) or set(ordered_ids) != set(current):
            raise InvalidReorderError(
                f"Expected a permutation of the {len(current)} circuits of cable {cable.name}"
            )

        ordered = [current[circuit_id] for circuit_id in ordered_ids]
        batch = CircuitBatch()
        self._recalculate(cable, ordered, batch)
        self.store.apply_batch(batch)

    def delete_circuit(self, circuit_id: str):
        """Remove a circuit and close the gap it leaves."""
        circuit = self._get_circuit(circuit_id)
        cable = self._get_cable(circuit.cable_id)
        remaining = [c for c in self.store.list_circuits(cable.id) if c.id != circuit.id]

        batch = CircuitBatch()
        batch.delete(circuit.id)
        self._recalculate(cable, remaining, batch)
        self.store.apply_batch(batch)
        logger.info("Deleted circuit %s from cable %s", circuit.identifier, cable.name)

    # ========================================================================
    # SPLICING
    # ========================================================================

    def set_splice(self, circuit_id: str, spliced: bool) -> Optional[FeedMatch]:
        """
        Splice a Distribution circuit to its Feed circuit, or clear the splice.

        Splicing on finds the Feed circuit, checks the feed strands are free
        and only then writes. Splicing off always succeeds.

        Returns:
            The FeedMatch when spliced on, None when cleared

        Raises:
            InvalidSpliceTargetError: If the circuit is not on a Distribution cable
            MalformedIdentifierError: If the circuit identifier is malformed
            NoMatchingFeedCircuitError: If no Feed circuit contains the range
            FeedRangeConflictError: If the feed strands are already spliced
        """
        circuit = self._get_circuit(circuit_id)
        batch = CircuitBatch()

        if not spliced:
            batch.update(circuit.id, **CLEARED_SPLICE)
            self.store.apply_batch(batch)
            return None

        cable = self._get_cable(circuit.cable_id)
        if not cable.is_distribution:
            raise InvalidSpliceTargetError(
                f"Circuit {circuit.identifier} is on {cable.role.value} cable {cable.name}; "
                f"only Distribution circuits can be spliced"
            )

        match = require_feed_match(circuit, self._feed_circuits(cable.mode))
        self.conflicts.ensure_no_conflict(
            match.feed_cable_id,
            match.feed_strand_start,
            match.feed_strand_end,
            excluding_circuit_id=circuit.id,
        )

        batch.update(circuit.id, **match.as_splice_fields())
        self.store.apply_batch(batch)
        logger.info("Spliced %s to feed strands %d-%d",
                    circuit.identifier, match.feed_strand_start, match.feed_strand_end)
        return match

    def toggle_splice(self, circuit_id: str) -> Optional[FeedMatch]:
        """Flip a circuit's splice state."""
        circuit = self._get_circuit(circuit_id)
        return self.set_splice(circuit.id, not circuit.is_spliced)

    # ========================================================================
    # INTERNALS
    # ========================================================================

    def _recalculate(
        self,
        cable: Cable,
        ordered: List[Circuit],
        batch: CircuitBatch,
        inserted_ids: Optional[set] = None,
    ) -> AllocationResult:
        """
        Reallocate a cable's circuits in the given order into the batch.

        The circuits in ordered are updated in place to their new values.
        """
        inserted_ids = inserted_ids or set()
        result = allocate([c.identifier for c in ordered], cable.group_size)
        spans = {span.index: span for span in result.spans}

        for index, circuit in enumerate(ordered):
            span = spans.get(index)
            values = {
                "order_index": index,
                "strand_start": span.strand_start if span else 0,
                "strand_end": span.strand_end if span else 0,
            }
            if span is None:
                logger.warning("Circuit %s on cable %s has a malformed identifier %r; "
                               "no strands allocated", circuit.id, cable.name, circuit.identifier)

            changed = {k: v for k, v in values.items() if getattr(circuit, k) != v}
            for key, value in values.items():
                setattr(circuit, key, value)
            if changed and circuit.id not in inserted_ids:
                batch.update(circuit.id, **changed)

        if cable.is_feed:
            self._propagate_feed_offsets(cable, ordered, batch)

        return result

    def _propagate_feed_offsets(self, cable: Cable, feed_circuits: List[Circuit], batch: CircuitBatch):
        """Re-translate feed strands of Distribution circuits spliced to this cable."""
        for dist in self.store.list_spliced_circuits(cable.id):
            if batch.is_deleted(dist.id):
                continue
            if batch.pending_fields(dist.id).get("is_spliced") is False:
                continue

            try:
                match = match_feed_circuit(dist, feed_circuits)
            except MalformedIdentifierError:
                logger.warning("Spliced circuit %s has a malformed identifier %r; feed range kept",
                               dist.id, dist.identifier)
                continue

            if match is None:
                logger.warning("Spliced circuit %s no longer falls inside a circuit of feed cable %s; "
                               "keeping feed strands %s-%s", dist.identifier, cable.name,
                               dist.feed_strand_start, dist.feed_strand_end)
                continue

            changed = {}
            if dist.feed_strand_start != match.feed_strand_start:
                changed["feed_strand_start"] = match.feed_strand_start
            if dist.feed_strand_end != match.feed_strand_end:
                changed["feed_strand_end"] = match.feed_strand_end
            if changed:
                batch.update(dist.id, **changed)

    def _clear_dependents(self, feed_cable: Cable, batch: CircuitBatch):
        for dist in self.store.list_spliced_circuits(feed_cable.id):
            if not batch.is_deleted(dist.id):
                batch.update(dist.id, **CLEARED_SPLICE)

    def _feed_circuits(self, mode: SpliceMode) -> List[Circuit]:
        """Feed circuits of a mode, cable by cable in store order."""
        circuits = []
        for cable in self.store.list_cables(role=CableRole.FEED, mode=mode):
            circuits.extend(self.store.list_circuits(cable.id))
        return circuits

    def _check_overlap(self, identifier: str, parsed: ParsedIdentifier, circuits: List[Circuit],
                       excluding_circuit_id: Optional[str] = None):
        for other in circuits:
            if other.id == excluding_circuit_id:
                continue
            existing = try_parse_identifier(other.identifier)
            if existing is not None and parsed.overlaps(existing):
                raise OverlappingIdentifierError(identifier, other.identifier)

    def _get_cable(self, cable_id: str) -> Cable:
        cable = self.store.get_cable(cable_id)
        if cable is None:
            raise CableNotFoundError(cable_id)
        return cable

    def _get_circuit(self, circuit_id: str) -> Circuit:
        circuit = self.store.get_circuit(circuit_id)
        if circuit is None:
            raise CircuitNotFoundError(circuit_id)
        return circuit
