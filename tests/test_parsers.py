"""Tests for circuit list parsing, validation and project files."""

import pandas as pd
import pytest
from fibersplice.models import Cable, CableRole, Circuit, SpliceMode
from fibersplice.errors import FeedRangeConflictError
from fibersplice.parsers import (
    CircuitListParseError,
    CircuitListParser,
    ProjectLoadError,
    build_store,
    dump_project,
    load_circuit_list,
    load_project,
    parse_circuit_text,
    save_project,
    validate_cable_circuits,
    validate_cable_name,
    validate_circuit_identifier,
)


PROJECT_YAML = """
mode: fiber
cables:
  - name: d1
    role: Distribution
    capacity: 12
    circuits: ["pon,3-4", "lg,5-8"]
    spliced: ["pon,3-4", "lg,5-8"]
  - name: f1
    role: feed
    capacity: 24
    circuits: ["pon,1-12", "lg,1-12"]
"""


class TestValidators:
    """Tests for validation helpers."""

    def test_valid_identifier(self):
        """Test a good identifier passes."""
        assert validate_circuit_identifier("pon,1-8") == (True, "")

    def test_empty_identifier(self):
        """Test an empty identifier is required."""
        is_valid, message = validate_circuit_identifier("  ")
        assert not is_valid
        assert "required" in message

    def test_cable_name(self):
        """Test cable names are unique ignoring case."""
        assert validate_cable_name("f2", ["f1"]).is_valid
        assert not validate_cable_name("F1", ["f1"]).is_valid
        assert not validate_cable_name("", []).is_valid

    def test_cable_circuits_contiguous(self):
        """Test a correct allocation passes with a capacity warning."""
        cable = Cable(name="f1", capacity=24, role=CableRole.FEED)
        circuits = [
            Circuit(cable_id=cable.id, identifier="a,1-2", order_index=0, strand_start=1, strand_end=2),
            Circuit(cable_id=cable.id, identifier="b,1-4", order_index=1, strand_start=3, strand_end=6),
        ]
        result = validate_cable_circuits(cable, circuits)
        assert result.is_valid
        assert len(result.warnings) == 1
        assert "6 of 24" in result.warnings[0].message

    def test_cable_circuits_gap(self):
        """Test a gap and a width mismatch are errors."""
        cable = Cable(name="f1", capacity=6, role=CableRole.FEED)
        circuits = [
            Circuit(cable_id=cable.id, identifier="a,1-2", order_index=0, strand_start=1, strand_end=2),
            Circuit(cable_id=cable.id, identifier="b,1-4", order_index=1, strand_start=4, strand_end=6),
        ]
        result = validate_cable_circuits(cable, circuits)
        assert not result.is_valid
        assert {e.field for e in result.errors} == {"strand_start", "strand_end"}


class TestCircuitListParser:
    """Tests for circuit list parsing."""

    def test_parse_text(self):
        """Test pasted text keeps good lines in order."""
        result = parse_circuit_text("pon,1-4\n\n  lg,1-2  \nnonsense\n")
        assert result.identifiers == ["pon,1-4", "lg,1-2"]
        assert result.skipped_count == 1
        assert result.validation_result.warnings[0].row == 4

    def test_parse_csv_with_alias(self, tmp_path):
        """Test CSV with an aliased column name."""
        path = tmp_path / "circuits.csv"
        pd.DataFrame({"circuit_id": ["pon,1-4", "bad", None, "lg,1-2"]}).to_csv(path, index=False)
        result = load_circuit_list(str(path))
        assert result.identifiers == ["pon,1-4", "lg,1-2"]
        assert result.column_mapping == {"circuit_id": "Circuit ID"}
        assert result.skipped_count == 1

    def test_parse_excel_filtered_by_cable(self, tmp_path):
        """Test Excel rows filtered by cable name."""
        path = tmp_path / "circuits.xlsx"
        pd.DataFrame({
            "Cable": ["f1", "d1", "F1"],
            "Circuit ID": ["pon,1-12", "pon,3-4", "lg,1-12"],
        }).to_excel(path, index=False)
        result = load_circuit_list(str(path), cable="f1")
        assert result.identifiers == ["pon,1-12", "lg,1-12"]

    def test_missing_column(self, tmp_path):
        """Test a sheet without a circuit column is invalid."""
        path = tmp_path / "circuits.csv"
        pd.DataFrame({"Name": ["x"]}).to_csv(path, index=False)
        result = load_circuit_list(str(path))
        assert not result.is_valid

    def test_text_file(self, tmp_path):
        """Test plain text files."""
        path = tmp_path / "circuits.txt"
        path.write_text("pon,1-4\nlg,1-2\n")
        assert load_circuit_list(str(path)).identifiers == ["pon,1-4", "lg,1-2"]

    def test_bad_paths(self, tmp_path):
        """Test missing files and unsupported types."""
        with pytest.raises(CircuitListParseError):
            CircuitListParser(str(tmp_path / "missing.csv"))
        other = tmp_path / "circuits.json"
        other.write_text("{}")
        with pytest.raises(CircuitListParseError):
            CircuitListParser(str(other))


class TestProjectFile:
    """Tests for project file loading."""

    def test_load_and_build(self, tmp_path):
        """Test splices are applied after all cables exist."""
        path = tmp_path / "project.yaml"
        path.write_text(PROJECT_YAML)
        project = load_project(str(path))
        assert project.mode == SpliceMode.FIBER
        assert project.cables[1].role == CableRole.FEED

        store, _ = build_store(project)
        dist = store.find_cable_by_name("d1")
        pon, lg = store.list_circuits(dist.id)
        assert (pon.feed_strand_start, pon.feed_strand_end) == (3, 4)
        assert (lg.feed_strand_start, lg.feed_strand_end) == (17, 20)

    def test_missing_file(self, tmp_path):
        """Test missing project file."""
        with pytest.raises(ProjectLoadError):
            load_project(str(tmp_path / "nope.yaml"))

    def test_invalid_project(self, tmp_path):
        """Test schema violations are reported."""
        path = tmp_path / "project.yaml"
        path.write_text("cables:\n  - name: f1\n    role: Splitter\n")
        with pytest.raises(ProjectLoadError):
            load_project(str(path))

    def test_duplicate_names(self, tmp_path):
        """Test duplicate cable names are rejected."""
        path = tmp_path / "project.yaml"
        path.write_text("cables:\n  - {name: f1, role: Feed}\n  - {name: F1, role: Feed}\n")
        with pytest.raises(ProjectLoadError):
            load_project(str(path))

    def test_conflicting_splices(self, tmp_path):
        """Test overlapping splices in a project fail to build."""
        path = tmp_path / "project.yaml"
        path.write_text(
            "cables:\n"
            "  - {name: f1, role: Feed, capacity: 12, circuits: ['pon,1-12']}\n"
            "  - {name: d1, role: Distribution, capacity: 12, circuits: ['pon,1-4'], spliced: ['pon,1-4']}\n"
            "  - {name: d2, role: Distribution, capacity: 12, circuits: ['pon,3-6'], spliced: ['pon,3-6']}\n"
        )
        with pytest.raises(FeedRangeConflictError):
            build_store(load_project(str(path)))

    def test_save_and_reload(self, tmp_path):
        """Test a dumped project rebuilds the same splices."""
        source = tmp_path / "project.yaml"
        source.write_text(PROJECT_YAML)
        store, _ = build_store(load_project(str(source)))

        target = tmp_path / "saved.json"
        save_project(dump_project(store), str(target))
        reloaded, _ = build_store(load_project(str(target)))

        dist = reloaded.find_cable_by_name("d1")
        assert [c.is_spliced for c in reloaded.list_circuits(dist.id)] == [True, True]

    def test_stale_feed_range_survives_reload(self, coordinator, store, tmp_path):
        """Test a splice left outside its Feed circuit reloads unchanged."""
        feed = coordinator.create_cable("f1", "Feed", capacity=12, identifiers=["pon,1-12"])
        dist = coordinator.create_cable("d1", "Distribution", capacity=12, identifiers=["pon,9-12"])
        coordinator.set_splice(store.list_circuits(dist.id)[0].id, True)
        coordinator.edit_identifier(store.list_circuits(feed.id)[0].id, "pon,1-6")

        path = tmp_path / "project.yaml"
        save_project(dump_project(store), str(path))
        reloaded, _ = build_store(load_project(str(path)))

        circuit = reloaded.list_circuits(reloaded.find_cable_by_name("d1").id)[0]
        assert circuit.is_spliced
        assert circuit.feed_cable_id == reloaded.find_cable_by_name("f1").id
        assert (circuit.feed_strand_start, circuit.feed_strand_end) == (9, 12)

    def test_over_capacity_cable_reloads(self, coordinator, store, tmp_path):
        """Test a cable edited past its capacity reloads without error."""
        cable = coordinator.create_cable("f1", "Feed", capacity=12, identifiers=["pon,1-12"])
        coordinator.edit_identifier(store.list_circuits(cable.id)[0].id, "pon,1-14")

        path = tmp_path / "project.yaml"
        save_project(dump_project(store), str(path))
        reloaded, _ = build_store(load_project(str(path)))

        restored = reloaded.find_cable_by_name("f1")
        circuit = reloaded.list_circuits(restored.id)[0]
        assert restored.capacity == 12
        assert (circuit.strand_start, circuit.strand_end) == (1, 14)

    def test_recorded_feed_cable_is_kept(self, tmp_path):
        """Test a recorded splice is restored to its own Feed cable, not re-matched."""
        path = tmp_path / "project.yaml"
        path.write_text(
            "cables:\n"
            "  - {name: f1, role: Feed, capacity: 12, circuits: ['pon,1-12']}\n"
            "  - {name: f2, role: Feed, capacity: 12, circuits: ['pon,1-12']}\n"
            "  - name: d1\n"
            "    role: Distribution\n"
            "    capacity: 12\n"
            "    circuits: ['pon,1-4']\n"
            "    spliced:\n"
            "      - {circuit: 'pon,1-4', feed_cable: f2, feed_start: 1, feed_end: 4}\n"
        )
        store, _ = build_store(load_project(str(path)))

        circuit = store.list_circuits(store.find_cable_by_name("d1").id)[0]
        assert circuit.feed_cable_id == store.find_cable_by_name("f2").id

    def test_recorded_splice_unknown_feed_cable(self, tmp_path):
        """Test a recorded splice naming a missing Feed cable fails to build."""
        path = tmp_path / "project.yaml"
        path.write_text(
            "cables:\n"
            "  - name: d1\n"
            "    role: Distribution\n"
            "    circuits: ['pon,1-4']\n"
            "    spliced:\n"
            "      - {circuit: 'pon,1-4', feed_cable: f9, feed_start: 1, feed_end: 4}\n"
        )
        with pytest.raises(ProjectLoadError):
            build_store(load_project(str(path)))

    def test_incomplete_recorded_splice(self, tmp_path):
        """Test feed cable and strands must be recorded together."""
        path = tmp_path / "project.yaml"
        path.write_text(
            "cables:\n"
            "  - name: d1\n"
            "    role: Distribution\n"
            "    circuits: ['pon,1-4']\n"
            "    spliced:\n"
            "      - {circuit: 'pon,1-4', feed_cable: f1}\n"
        )
        with pytest.raises(ProjectLoadError):
            load_project(str(path))
