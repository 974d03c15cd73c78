"""In-memory circuit store with all-or-nothing batch writes."""

import copy
import logging
import threading
from dataclasses import replace
from typing import Dict, List, Optional

from .base import CircuitStore
from ..errors import BatchApplyError
from ..models import (
    Cable,
    CableRole,
    Circuit,
    CircuitBatch,
    SpliceMode,
    CIRCUIT_FIELD_NAMES,
    CABLE_FIELD_NAMES,
)


logger = logging.getLogger(__name__)


class InMemoryStore(CircuitStore):
    """
    Dictionary backed store.

    Records handed out are copies; callers change state only through
    apply_batch().
    """

    def __init__(self):
        self._cables: Dict[str, Cable] = {}
        self._circuits: Dict[str, Circuit] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_cable(self, cable_id: str) -> Optional[Cable]:
        cable = self._cables.get(cable_id)
        return copy.copy(cable) if cable else None

    def list_cables(self, role: Optional[CableRole] = None,
                    mode: Optional[SpliceMode] = None) -> List[Cable]:
        cables = []
        for cable in self._cables.values():
            if role is not None and cable.role != role:
                continue
            if mode is not None and cable.mode != mode:
                continue
            cables.append(copy.copy(cable))
        return cables

    def get_circuit(self, circuit_id: str) -> Optional[Circuit]:
        circuit = self._circuits.get(circuit_id)
        return copy.copy(circuit) if circuit else None

    def list_circuits(self, cable_id: str) -> List[Circuit]:
        circuits = [copy.copy(c) for c in self._circuits.values() if c.cable_id == cable_id]
        circuits.sort(key=lambda c: c.order_index)
        return circuits

    def list_spliced_circuits(self, feed_cable_id: Optional[str] = None) -> List[Circuit]:
        return [
            copy.copy(c) for c in self._circuits.values()
            if c.is_spliced and (feed_cable_id is None or c.feed_cable_id == feed_cable_id)
        ]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def apply_batch(self, batch: CircuitBatch):
        """
        Stage the batch against copies of the current state and swap them in.

        Raises:
            BatchApplyError: On unknown ids, unknown fields, duplicate inserts
                or circuits left pointing at a deleted cable
        """
        if batch.is_empty:
            return

        with self._lock:
            cables = dict(self._cables)
            circuits = dict(self._circuits)

            for cable in batch.cable_inserts:
                if cable.id in cables:
                    raise BatchApplyError(f"Cable already exists: {cable.id}")
                cables[cable.id] = copy.copy(cable)

            for pending in batch.cable_updates:
                if pending.cable_id not in cables:
                    raise BatchApplyError(f"Cannot update missing cable: {pending.cable_id}")
                self._check_fields(pending.fields, CABLE_FIELD_NAMES, "cable")
                cables[pending.cable_id] = replace(cables[pending.cable_id], **pending.fields)

            for circuit in batch.inserts:
                if circuit.id in circuits:
                    raise BatchApplyError(f"Circuit already exists: {circuit.id}")
                circuits[circuit.id] = copy.copy(circuit)

            for pending in batch.updates:
                if pending.circuit_id not in circuits:
                    raise BatchApplyError(f"Cannot update missing circuit: {pending.circuit_id}")
                self._check_fields(pending.fields, CIRCUIT_FIELD_NAMES, "circuit")
                circuits[pending.circuit_id] = replace(circuits[pending.circuit_id], **pending.fields)

            for circuit_id in batch.deletes:
                if circuits.pop(circuit_id, None) is None:
                    raise BatchApplyError(f"Cannot delete missing circuit: {circuit_id}")

            for cable_id in batch.cable_deletes:
                if cables.pop(cable_id, None) is None:
                    raise BatchApplyError(f"Cannot delete missing cable: {cable_id}")

            for circuit in circuits.values():
                if circuit.cable_id not in cables:
                    raise BatchApplyError(
                        f"Circuit {circuit.id} references missing cable {circuit.cable_id}"
                    )

            self._cables = cables
            self._circuits = circuits

        inserted, updated, deleted = batch.summary()
        logger.debug("Applied batch: %d inserted, %d updated, %d deleted circuits",
                     inserted, updated, deleted)

    @staticmethod
    def _check_fields(fields: Dict, allowed, kind: str):
        unknown = set(fields) - set(allowed)
        if unknown:
            raise BatchApplyError(f"Unknown {kind} field(s): {', '.join(sorted(unknown))}")
