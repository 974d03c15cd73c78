"""Circuit data models for fiber/copper splice management."""

from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Dict, List, Optional, Tuple

from .cable import Cable, new_record_id


# Splice link fields; either all set or all cleared
CLEARED_SPLICE = {
    "is_spliced": False,
    "feed_cable_id": None,
    "feed_strand_start": None,
    "feed_strand_end": None,
}


@dataclass
class Circuit:
    """A logical slice of a cable described by a "prefix,start-end" identifier."""

    cable_id: str                # Owning cable
    identifier: str              # e.g., "pon,1-8"
    order_index: int = 0         # 0-based allocation order within the cable
    strand_start: int = 0        # Computed, 1-based inclusive
    strand_end: int = 0          # Computed, 1-based inclusive
    is_spliced: bool = False
    feed_cable_id: Optional[str] = None     # Set only on spliced Distribution circuits
    feed_strand_start: Optional[int] = None
    feed_strand_end: Optional[int] = None
    id: str = field(default_factory=new_record_id)

    @property
    def strand_count(self) -> int:
        """Number of strands allocated to this circuit."""
        if self.strand_start < 1 or self.strand_end < self.strand_start:
            return 0
        return self.strand_end - self.strand_start + 1

    @property
    def has_feed_range(self) -> bool:
        """Check if both ends of the feed range are recorded."""
        return self.feed_strand_start is not None and self.feed_strand_end is not None

    def to_record(self) -> Dict[str, Any]:
        """Persisted field shape."""
        return {
            "id": self.id,
            "cableId": self.cable_id,
            "identifier": self.identifier,
            "orderIndex": self.order_index,
            "strandStart": self.strand_start,
            "strandEnd": self.strand_end,
            "isSpliced": self.is_spliced,
            "feedCableId": self.feed_cable_id,
            "feedStrandStart": self.feed_strand_start,
            "feedStrandEnd": self.feed_strand_end,
        }


CIRCUIT_FIELD_NAMES = frozenset(f.name for f in dataclass_fields(Circuit)) - {"id"}
CABLE_FIELD_NAMES = frozenset(f.name for f in dataclass_fields(Cable)) - {"id"}


@dataclass
class CircuitUpdate:
    """New field values for one circuit."""
    circuit_id: str
    fields: Dict[str, Any]


@dataclass
class CableUpdate:
    """New field values for one cable."""
    cable_id: str
    fields: Dict[str, Any]


@dataclass
class CircuitBatch:
    """
    All writes produced by a single engine operation.

    The storage layer must apply a batch as one unit: either every entry is
    written or none is.
    """

    cable_inserts: List[Cable] = field(default_factory=list)
    inserts: List[Circuit] = field(default_factory=list)
    updates: List[CircuitUpdate] = field(default_factory=list)
    cable_updates: List[CableUpdate] = field(default_factory=list)
    deletes: List[str] = field(default_factory=list)
    cable_deletes: List[str] = field(default_factory=list)

    def insert_cable(self, cable: Cable):
        self.cable_inserts.append(cable)

    def insert(self, circuit: Circuit):
        self.inserts.append(circuit)

    def update(self, circuit_id: str, **values):
        """Merge field values into the pending update for a circuit."""
        for pending in self.updates:
            if pending.circuit_id == circuit_id:
                pending.fields.update(values)
                return
        self.updates.append(CircuitUpdate(circuit_id, dict(values)))

    def update_cable(self, cable_id: str, **values):
        for pending in self.cable_updates:
            if pending.cable_id == cable_id:
                pending.fields.update(values)
                return
        self.cable_updates.append(CableUpdate(cable_id, dict(values)))

    def delete(self, circuit_id: str):
        if circuit_id not in self.deletes:
            self.deletes.append(circuit_id)

    def delete_cable(self, cable_id: str):
        if cable_id not in self.cable_deletes:
            self.cable_deletes.append(cable_id)

    def pending_fields(self, circuit_id: str) -> Dict[str, Any]:
        """Field values queued for a circuit so far."""
        for pending in self.updates:
            if pending.circuit_id == circuit_id:
                return dict(pending.fields)
        return {}

    def is_deleted(self, circuit_id: str) -> bool:
        return circuit_id in self.deletes

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def __len__(self) -> int:
        return (
            len(self.cable_inserts) + len(self.inserts) + len(self.updates)
            + len(self.cable_updates) + len(self.deletes) + len(self.cable_deletes)
        )

    def summary(self) -> Tuple[int, int, int]:
        """(inserted, updated, deleted) circuit counts."""
        return len(self.inserts), len(self.updates), len(self.deletes)
