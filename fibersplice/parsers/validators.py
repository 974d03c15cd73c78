"""Input validation utilities for cable and circuit entry."""

from typing import List, Optional, Tuple
from dataclasses import dataclass

from ..engine.identifier_codec import parse_identifier, try_parse_identifier
from ..engine.allocator import summarize_utilization
from ..errors import MalformedIdentifierError


@dataclass
class ValidationError:
    """Represents a validation error."""
    field: str
    message: str
    row: Optional[int] = None
    value: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of a validation operation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[ValidationError]

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(is_valid=True, errors=[], warnings=[])

    @classmethod
    def failure(cls, errors: List[ValidationError]) -> "ValidationResult":
        return cls(is_valid=False, errors=errors, warnings=[])

    def add_error(self, error: ValidationError):
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: ValidationError):
        self.warnings.append(warning)

    def merge(self, other: "ValidationResult"):
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)


def validate_circuit_identifier(identifier: str) -> Tuple[bool, str]:
    """
    Validate circuit identifier format.

    Expected format: prefix,start-end
    Where:
        - prefix: Service name, anything but a comma (e.g., "pon", "lg")
        - start-end: Logical numbering, start <= end (e.g., "33-36")

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not identifier or not str(identifier).strip():
        return False, "Circuit ID is required"

    try:
        parse_identifier(str(identifier))
    except MalformedIdentifierError as e:
        return False, str(e)

    return True, ""


def validate_cable_name(name: str, existing_names: List[str]) -> ValidationResult:
    """
    Validate a new cable name.

    Names must be non-empty and unique ignoring case.
    """
    result = ValidationResult.success()
    name = (name or "").strip()

    if not name:
        result.add_error(ValidationError("name", "Cable name is required"))
        return result

    if name.lower() in {n.strip().lower() for n in existing_names}:
        result.add_error(ValidationError("name", f'A cable named "{name}" already exists', value=name))

    return result


def validate_cable_circuits(cable, circuits: List) -> ValidationResult:
    """
    Check a cable's allocated circuits.

    Errors:
        - order_index not 0..n-1
        - spans not contiguous from strand 1
        - span width different from identifier width
    Warnings:
        - assigned strands do not equal cable capacity
        - malformed identifiers

    Args:
        cable: Cable the circuits belong to
        circuits: Circuits of the cable in order_index order

    Returns:
        ValidationResult
    """
    result = ValidationResult.success()
    expected_start = 1

    for index, circuit in enumerate(circuits):
        row = index + 1

        if circuit.order_index != index:
            result.add_error(ValidationError(
                "order_index",
                f"Circuit {circuit.identifier} has order index {circuit.order_index}, expected {index}",
                row, circuit.identifier,
            ))

        parsed = try_parse_identifier(circuit.identifier)
        if parsed is None:
            result.add_warning(ValidationError(
                "identifier", f"Malformed circuit ID {circuit.identifier!r}", row, circuit.identifier
            ))
            continue

        if circuit.strand_start != expected_start:
            result.add_error(ValidationError(
                "strand_start",
                f"Circuit {circuit.identifier} starts at strand {circuit.strand_start}, "
                f"expected {expected_start}",
                row, circuit.identifier,
            ))

        if circuit.strand_count != parsed.width:
            result.add_error(ValidationError(
                "strand_end",
                f"Circuit {circuit.identifier} spans {circuit.strand_count} strands, "
                f"identifier claims {parsed.width}",
                row, circuit.identifier,
            ))

        expected_start = circuit.strand_end + 1

    utilization = summarize_utilization(circuits, cable.capacity)
    if not utilization.is_complete:
        result.add_warning(ValidationError(
            "capacity",
            f"{utilization.assigned_strands} of {cable.capacity} {cable.unit_name}s assigned",
            value=cable.name,
        ))

    return result
