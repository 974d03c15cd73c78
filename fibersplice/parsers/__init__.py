"""Parsers for circuit lists and project files."""

from .circuit_list_parser import (
    CircuitListParser,
    CircuitListParseError,
    CircuitListResult,
    parse_circuit_text,
    load_circuit_list,
)

from .validators import (
    ValidationError,
    ValidationResult,
    validate_circuit_identifier,
    validate_cable_name,
    validate_cable_circuits,
)

from .project_file import (
    ProjectLoadError,
    SpliceEntry,
    CableEntry,
    ProjectFile,
    load_project,
    build_store,
    dump_project,
    save_project,
)

__all__ = [
    # Circuit List Parser
    "CircuitListParser",
    "CircuitListParseError",
    "CircuitListResult",
    "parse_circuit_text",
    "load_circuit_list",
    # Validators
    "ValidationError",
    "ValidationResult",
    "validate_circuit_identifier",
    "validate_cable_name",
    "validate_cable_circuits",
    # Project File
    "ProjectLoadError",
    "SpliceEntry",
    "CableEntry",
    "ProjectFile",
    "load_project",
    "build_store",
    "dump_project",
    "save_project",
]
