"""Storage contract the splice engine writes through."""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..models import Cable, CableRole, Circuit, CircuitBatch, SpliceMode


class CircuitStore(ABC):
    """
    Persistence collaborator for cables and circuits.

    Implementations must apply a CircuitBatch atomically: every write in the
    batch lands, or none does and BatchApplyError is raised.
    """

    @abstractmethod
    def get_cable(self, cable_id: str) -> Optional[Cable]:
        ...

    @abstractmethod
    def list_cables(self, role: Optional[CableRole] = None,
                    mode: Optional[SpliceMode] = None) -> List[Cable]:
        """Cables in creation order, optionally filtered."""
        ...

    @abstractmethod
    def get_circuit(self, circuit_id: str) -> Optional[Circuit]:
        ...

    @abstractmethod
    def list_circuits(self, cable_id: str) -> List[Circuit]:
        """Circuits of one cable ordered by order_index."""
        ...

    @abstractmethod
    def list_spliced_circuits(self, feed_cable_id: Optional[str] = None) -> List[Circuit]:
        """Spliced circuits, optionally only those pointing at one Feed cable."""
        ...

    @abstractmethod
    def apply_batch(self, batch: CircuitBatch):
        """
        Apply every write in the batch as one unit.

        Raises:
            BatchApplyError: If any write is invalid; nothing is applied
        """
        ...

    def add_cable(self, cable: Cable) -> Cable:
        """Insert a single cable."""
        batch = CircuitBatch()
        batch.insert_cable(cable)
        self.apply_batch(batch)
        return cable

    def find_cable_by_name(self, name: str, mode: Optional[SpliceMode] = None) -> Optional[Cable]:
        """Case-insensitive cable name lookup."""
        wanted = name.strip().lower()
        for cable in self.list_cables(mode=mode):
            if cable.name.strip().lower() == wanted:
                return cable
        return None
