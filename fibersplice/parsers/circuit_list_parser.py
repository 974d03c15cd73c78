"""Circuit list parser for pasted text and Excel/CSV sheets."""

import logging
import pandas as pd
from pathlib import Path
from typing import List, Optional, Dict
from dataclasses import dataclass, field

from .validators import (
    validate_circuit_identifier,
    ValidationResult,
    ValidationError,
)


logger = logging.getLogger(__name__)


class CircuitListParseError(Exception):
    """Exception raised for circuit list parsing errors."""
    pass


@dataclass
class CircuitListResult:
    """Result of parsing a circuit list."""
    identifiers: List[str]
    validation_result: ValidationResult
    column_mapping: Dict[str, str] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return self.validation_result.is_valid

    @property
    def circuit_count(self) -> int:
        return len(self.identifiers)

    @property
    def skipped_count(self) -> int:
        return len(self.validation_result.warnings)


def parse_circuit_text(text: str) -> CircuitListResult:
    """
    Parse pasted circuit identifiers, one per line.

    Blank lines are ignored. Malformed lines are dropped and reported as
    warnings, mirroring how bulk cable creation treats them.

    Args:
        text: Raw pasted text

    Returns:
        CircuitListResult with the well-formed identifiers in order
    """
    validation = ValidationResult.success()
    identifiers = []

    for line_number, line in enumerate((text or "").splitlines(), start=1):
        line = line.strip()
        if not line:
            continue

        is_valid, message = validate_circuit_identifier(line)
        if is_valid:
            identifiers.append(line)
        else:
            validation.add_warning(ValidationError("identifier", message, line_number, line))

    return CircuitListResult(identifiers=identifiers, validation_result=validation)


class CircuitListParser:
    """Parser for circuit lists stored in spreadsheets or text files."""

    SUPPORTED_SUFFIXES = ['.xlsx', '.xls', '.csv', '.txt']

    # Common column name variations
    COLUMN_ALIASES = {
        "Circuit ID": ["circuit id", "circuit_id", "circuit", "circuitid", "id", "identifier", "circuit no"],
        "Cable": ["cable", "cable name", "cable_name", "cable id"],
    }

    def __init__(self, file_path: str):
        """
        Initialize the parser with a file path.

        Args:
            file_path: Path to the circuit list (.xlsx, .xls, .csv or .txt)
        """
        self.file_path = Path(file_path)
        if not self.file_path.exists():
            raise CircuitListParseError(f"File not found: {file_path}")
        if self.file_path.suffix.lower() not in self.SUPPORTED_SUFFIXES:
            raise CircuitListParseError(
                f"Invalid file type: {self.file_path.suffix}. "
                f"Expected one of {', '.join(self.SUPPORTED_SUFFIXES)}"
            )

    def _normalize_column_name(self, column: str) -> str:
        """Normalize a column name to standard format."""
        col_lower = str(column).strip().lower()

        for standard_name, aliases in self.COLUMN_ALIASES.items():
            if col_lower == standard_name.lower() or col_lower in aliases:
                return standard_name

        return column

    def _create_column_mapping(self, columns: List[str]) -> Dict[str, str]:
        """Create a mapping from original column names to standard names."""
        mapping = {}
        for col in columns:
            normalized = self._normalize_column_name(col)
            if normalized != col:
                mapping[col] = normalized
        return mapping

    def _read_frame(self, sheet_name: Optional[str]) -> pd.DataFrame:
        suffix = self.file_path.suffix.lower()
        if suffix == '.csv':
            return pd.read_csv(self.file_path)
        if sheet_name:
            return pd.read_excel(self.file_path, sheet_name=sheet_name)
        return pd.read_excel(self.file_path)

    def parse(self, sheet_name: Optional[str] = None, cable: Optional[str] = None) -> CircuitListResult:
        """
        Parse the circuit list.

        Args:
            sheet_name: Optional sheet name. If None, uses the first sheet.
            cable: Only keep rows whose Cable column matches (ignoring case)

        Returns:
            CircuitListResult with identifiers and validation results

        Raises:
            CircuitListParseError: If the file cannot be read
        """
        if self.file_path.suffix.lower() == '.txt':
            return parse_circuit_text(self.file_path.read_text(encoding='utf-8'))

        try:
            df = self._read_frame(sheet_name)
        except (OSError, ValueError) as e:
            raise CircuitListParseError(f"Failed to read circuit list: {e}") from e

        column_mapping = self._create_column_mapping(df.columns.tolist())
        if column_mapping:
            df = df.rename(columns=column_mapping)

        validation = ValidationResult.success()
        if "Circuit ID" not in df.columns:
            validation.add_error(ValidationError(
                "columns", f"Missing required column: Circuit ID (found: {', '.join(map(str, df.columns))})"
            ))
            return CircuitListResult([], validation, column_mapping)

        if cable and "Cable" in df.columns:
            wanted = cable.strip().lower()
            df = df[df["Cable"].astype(str).str.strip().str.lower() == wanted]

        identifiers = []
        for idx, row in df.iterrows():
            value = row.get("Circuit ID")

            # Skip empty rows
            if pd.isna(value) or not str(value).strip():
                continue

            text = str(value).strip()
            is_valid, message = validate_circuit_identifier(text)
            if is_valid:
                identifiers.append(text)
            else:
                validation.add_warning(ValidationError("identifier", message, idx + 2, text))  # +2 for header and 0-index

        logger.debug("Parsed %d circuits from %s (%d skipped)",
                     len(identifiers), self.file_path.name, len(validation.warnings))
        return CircuitListResult(identifiers, validation, column_mapping)

    def get_sheet_names(self) -> List[str]:
        """Get list of sheet names in the Excel file."""
        if self.file_path.suffix.lower() not in ['.xlsx', '.xls']:
            return []
        xl = pd.ExcelFile(self.file_path)
        return xl.sheet_names


def load_circuit_list(file_path: str, sheet_name: Optional[str] = None,
                      cable: Optional[str] = None) -> CircuitListResult:
    """
    Convenience function to load and parse a circuit list.

    Args:
        file_path: Path to the circuit list
        sheet_name: Optional sheet name
        cable: Optional cable name filter

    Returns:
        CircuitListResult
    """
    parser = CircuitListParser(file_path)
    return parser.parse(sheet_name, cable)
