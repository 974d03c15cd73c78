"""Tests for splice schedules and reports."""

import pandas as pd
import pytest

from fibersplice.drawing import (
    SCHEDULE_COLUMNS,
    STRAND_COLUMNS,
    ReportConfig,
    build_cable_summary,
    build_splice_schedule,
    export_splice_schedule,
    generate_splice_report,
)
from fibersplice.engine import strand_color
from fibersplice.models import CircuitBatch, SpliceMode
from fibersplice.parsers import build_store, load_project


@pytest.fixture
def sample_store(sample_project_path):
    store, _ = build_store(load_project(sample_project_path))
    return store


def _circuit(store, cable_name, identifier):
    cable = store.find_cable_by_name(cable_name)
    return next(c for c in store.list_circuits(cable.id) if c.identifier == identifier)


class TestSpliceSchedule:
    """Tests for build_splice_schedule."""

    def test_ribbon_rows(self, sample_store):
        """Test one row per ribbon segment, sorted by prefix."""
        schedule = build_splice_schedule(sample_store)
        assert list(schedule.columns) == SCHEDULE_COLUMNS
        assert len(schedule) == 3

        first = schedule.iloc[0]
        assert first["Distribution Cable"] == "d1"
        assert first["Circuit"] == "lg,3-6"
        assert first["Dist Ribbon"] == 1
        assert first["Dist Positions"] == "9-12"
        assert first["Feed Cable"] == "f1"
        assert first["Feed Ribbon"] == 3
        assert first["Feed Positions"] == "3-6"
        assert first["Status"] == "OK"

        assert list(schedule["Circuit"]) == ["lg,3-6", "pon,1-4", "pon,13-20"]

    def test_strand_rows(self, sample_store):
        """Test one row per strand with colours."""
        schedule = build_splice_schedule(sample_store, ribbon_view=False)
        assert list(schedule.columns) == STRAND_COLUMNS
        assert len(schedule) == 16

        first = schedule.iloc[0]
        assert first["Circuit"] == "lg,3"
        assert first["Dist Strand"] == 9
        assert first["Dist Color"] == strand_color(9)
        assert first["Feed Strand"] == 27
        assert first["Feed Ribbon"] == 3
        assert first["Feed Color"] == strand_color(3)

    def test_invalid_circuit_single_row(self, sample_store):
        """Test a circuit that cannot be segmented gets one INVALID row."""
        circuit = _circuit(sample_store, "d1", "pon,1-4")
        batch = CircuitBatch()
        batch.update(circuit.id, feed_strand_end=6)
        sample_store.apply_batch(batch)

        schedule = build_splice_schedule(sample_store)
        assert len(schedule) == 3
        row = schedule[schedule["Circuit"] == "pon,1-4"].iloc[0]
        assert row["Status"].startswith("INVALID:")

    def test_copper_pair_colors(self, coordinator, store):
        """Test copper strand rows use tip/ring colours."""
        coordinator.create_cable("f1", "Feed", mode="copper", identifiers=["pots,1-4"])
        dist = coordinator.create_cable("d1", "Distribution", mode="copper", identifiers=["pots,1-2"])
        coordinator.set_splice(store.list_circuits(dist.id)[0].id, True)

        schedule = build_splice_schedule(store, SpliceMode.COPPER, ribbon_view=False)
        assert list(schedule["Dist Color"]) == ["white/blue", "white/orange"]
        assert build_splice_schedule(store, SpliceMode.FIBER).empty


class TestCableSummary:
    """Tests for build_cable_summary."""

    def test_pass_and_fail(self, sample_store, coordinator, store):
        """Test fully assigned cables pass and partial ones fail."""
        summary = build_cable_summary(sample_store)
        assert list(summary["Status"]) == ["PASS", "PASS", "PASS"]
        assert list(summary["Spliced"]) == [0, 2, 1]

        coordinator.create_cable("f1", "Feed", capacity=24, identifiers=["pon,1-4"])
        summary = build_cable_summary(store)
        assert summary.iloc[0]["Assigned"] == 4
        assert summary.iloc[0]["Status"] == "FAIL"


class TestExport:
    """Tests for schedule export and the PDF report."""

    def test_export_csv(self, sample_store, tmp_path):
        """Test CSV export."""
        path = export_splice_schedule(sample_store, str(tmp_path / "out" / "schedule.csv"))
        frame = pd.read_csv(path)
        assert len(frame) == 3

    def test_export_excel_sheets(self, sample_store, tmp_path):
        """Test Excel export carries summary and splices sheets."""
        path = export_splice_schedule(sample_store, str(tmp_path / "schedule.xlsx"))
        sheets = pd.read_excel(path, sheet_name=None)
        assert set(sheets) == {"Summary", "Splices"}
        assert len(sheets["Splices"]) == 3
        assert len(sheets["Summary"]) == 3

    def test_pdf_report(self, sample_store, tmp_path):
        """Test PDF report is written."""
        output = tmp_path / "report.pdf"
        generate_splice_report(sample_store, str(output), config=ReportConfig(project_name="Test"))
        assert output.exists()
        assert output.read_bytes().startswith(b"%PDF")
