"""
Project file loading.

A project file describes the cables of one splice mode and their circuits:

    mode: fiber
    cables:
      - name: f1
        role: Feed
        capacity: 24
        circuits: ["pon,1-12", "lg,1-12"]
      - name: d1
        role: Distribution
        capacity: 12
        circuits: ["pon,3-4", "lg,5-8"]
        spliced:
          - pon,3-4
          - circuit: lg,5-8
            feed_cable: f1
            feed_start: 17
            feed_end: 20

A spliced entry is either a bare identifier, matched against the Feed
cables on load, or a mapping that records the feed cable and strands as
they were saved. Recorded splices are restored as-is, stale ranges included.

Cables are restored in file order without the creation-time capacity
check, so a cable edited past its capacity loads the way it was saved.
"""

import json
import logging
import yaml
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from ..engine.allocator import allocate, usable_identifiers
from ..engine.identifier_codec import try_parse_identifier
from ..engine.mode_settings import ModeSettings
from ..engine.recalculator import RecalculationCoordinator
from ..models import Cable, CableRole, Circuit, CircuitBatch, SpliceMode
from ..storage import InMemoryStore


logger = logging.getLogger(__name__)


class ProjectLoadError(Exception):
    """Exception raised when a project file cannot be read or is invalid."""
    pass


class SpliceEntry(BaseModel):
    """A spliced Distribution circuit, with its feed strands once recorded."""
    circuit: str = Field(min_length=1)
    feed_cable: Optional[str] = None
    feed_start: Optional[int] = Field(default=None, ge=1)
    feed_end: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _complete_feed_range(self):
        recorded = [v is not None for v in (self.feed_cable, self.feed_start, self.feed_end)]
        if any(recorded) and not all(recorded):
            raise ValueError(f"splice {self.circuit}: feed_cable, feed_start and feed_end go together")
        if all(recorded) and self.feed_end < self.feed_start:
            raise ValueError(f"splice {self.circuit}: feed_end is before feed_start")
        return self

    @property
    def is_recorded(self) -> bool:
        return self.feed_cable is not None


class CableEntry(BaseModel):
    """One cable in a project file."""
    name: str = Field(min_length=1)
    role: CableRole
    capacity: Optional[int] = Field(default=None, gt=0)
    circuits: List[str] = Field(default_factory=list)
    spliced: List[SpliceEntry] = Field(default_factory=list)

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value):
        return CableRole.parse(value)

    @field_validator("spliced", mode="before")
    @classmethod
    def _bare_identifiers(cls, value):
        return [{"circuit": item} if isinstance(item, str) else item for item in value or []]

    @model_validator(mode="after")
    def _spliced_on_distribution(self):
        if self.spliced and self.role != CableRole.DISTRIBUTION:
            raise ValueError(f"cable {self.name}: only Distribution cables can list spliced circuits")
        return self


class ProjectFile(BaseModel):
    """Whole project: a mode and its cables."""
    mode: SpliceMode = SpliceMode.FIBER
    cables: List[CableEntry] = Field(default_factory=list)

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, value):
        return SpliceMode.parse(value)

    @model_validator(mode="after")
    def _unique_names(self):
        seen = set()
        for cable in self.cables:
            key = cable.name.strip().lower()
            if key in seen:
                raise ValueError(f'duplicate cable name "{cable.name}"')
            seen.add(key)
        return self


def load_project(path: str) -> ProjectFile:
    """
    Read and validate a YAML or JSON project file.

    Raises:
        ProjectLoadError: If the file is missing, unparsable or invalid
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == '.json':
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ProjectLoadError(f"Project file not found: {path}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ProjectLoadError(f"Cannot parse project file {path}: {e}") from e

    try:
        return ProjectFile.model_validate(data or {})
    except ValidationError as e:
        raise ProjectLoadError(f"Invalid project file {path}:\n{e}") from e


def build_store(project: ProjectFile,
                settings: Optional[ModeSettings] = None) -> Tuple[InMemoryStore, RecalculationCoordinator]:
    """
    Load a project into a fresh in-memory store.

    Cables, circuits and recorded splices are written as one batch. Bare
    spliced identifiers are then matched through the coordinator.

    Raises:
        ProjectLoadError: If a recorded splice names an unknown Feed cable
        SpliceEngineError: If a bare spliced identifier cannot be spliced
    """
    store = InMemoryStore()
    coordinator = RecalculationCoordinator(store, settings)
    settings = coordinator.settings
    mode = project.mode

    batch = CircuitBatch()
    restored = []
    for entry in project.cables:
        cable = Cable(
            name=entry.name.strip(),
            capacity=entry.capacity or settings.default_capacity(mode),
            role=entry.role,
            mode=mode,
            group_size=settings.group_size(mode),
        )
        batch.insert_cable(cable)

        result = allocate(usable_identifiers(entry.circuits), cable.group_size)
        if result.total_strands > cable.capacity:
            logger.warning("Cable %s uses %d of %d %ss", cable.name,
                           result.total_strands, cable.capacity, cable.unit_name)

        circuits = []
        for span in result.spans:
            circuit = Circuit(
                cable_id=cable.id,
                identifier=span.identifier,
                order_index=span.index,
                strand_start=span.strand_start,
                strand_end=span.strand_end,
            )
            batch.insert(circuit)
            circuits.append(circuit)
        restored.append((entry, cable, circuits))

    feed_cables = {cable.name.lower(): cable for _, cable, _ in restored if cable.is_feed}
    pending = []
    for entry, cable, circuits in restored:
        by_identifier = _index_by_identifier(circuits)
        for splice in entry.spliced:
            parsed = try_parse_identifier(splice.circuit)
            circuit = by_identifier.get(str(parsed)) if parsed else None
            if circuit is None:
                logger.warning("Cable %s has no circuit %r to splice", cable.name, splice.circuit)
                continue
            if not splice.is_recorded:
                pending.append(circuit.id)
                continue

            feed = feed_cables.get(splice.feed_cable.strip().lower())
            if feed is None:
                raise ProjectLoadError(
                    f"Circuit {splice.circuit} on cable {cable.name} is spliced to "
                    f"unknown Feed cable {splice.feed_cable!r}"
                )
            circuit.is_spliced = True
            circuit.feed_cable_id = feed.id
            circuit.feed_strand_start = splice.feed_start
            circuit.feed_strand_end = splice.feed_end

    store.apply_batch(batch)

    for circuit_id in pending:
        coordinator.set_splice(circuit_id, True)

    return store, coordinator


def _index_by_identifier(circuits: List[Circuit]) -> Dict[str, Circuit]:
    indexed = {}
    for circuit in circuits:
        parsed = try_parse_identifier(circuit.identifier)
        if parsed is not None:
            indexed.setdefault(str(parsed), circuit)
    return indexed


def _splice_entry(circuit: Circuit, cable_names: Dict[str, str]) -> SpliceEntry:
    feed_name = cable_names.get(circuit.feed_cable_id)
    if feed_name is None or not circuit.has_feed_range:
        return SpliceEntry(circuit=circuit.identifier)
    return SpliceEntry(
        circuit=circuit.identifier,
        feed_cable=feed_name,
        feed_start=circuit.feed_strand_start,
        feed_end=circuit.feed_strand_end,
    )


def dump_project(store, mode=SpliceMode.FIBER) -> ProjectFile:
    """Describe the cables of one mode in a store as a ProjectFile."""
    mode = SpliceMode.parse(mode)
    cables = store.list_cables(mode=mode)
    cable_names = {cable.id: cable.name for cable in cables}

    entries = []
    for cable in cables:
        circuits = store.list_circuits(cable.id)
        spliced = []
        if cable.is_distribution:
            spliced = [_splice_entry(c, cable_names) for c in circuits if c.is_spliced]
        entries.append(CableEntry(
            name=cable.name,
            role=cable.role,
            capacity=cable.capacity,
            circuits=[c.identifier for c in circuits],
            spliced=spliced,
        ))
    return ProjectFile(mode=mode, cables=entries)


def save_project(project: ProjectFile, path: str):
    """Write a project file as YAML (or JSON for a .json path)."""
    path = Path(path)
    data = project.model_dump(mode="json", exclude_none=True)
    with open(path, 'w', encoding='utf-8') as f:
        if path.suffix.lower() == '.json':
            json.dump(data, f, indent=2)
        else:
            yaml.safe_dump(data, f, sort_keys=False)
