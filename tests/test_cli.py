"""Tests for the command-line interface."""

import shutil

import pytest
from click.testing import CliRunner

from fibersplice.cli.main import cli
from fibersplice.parsers import load_project


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project_copy(sample_project_path, tmp_path):
    target = tmp_path / "project.yaml"
    shutil.copy(sample_project_path, target)
    return str(target)


class TestAllocateCommand:
    """Tests for the allocate command."""

    def test_allocate_pass(self, runner, tmp_path):
        """Test a circuit list that fills the cable."""
        path = tmp_path / "circuits.txt"
        path.write_text("pon,1-4\nlg,1-4\n")
        result = runner.invoke(cli, ["allocate", str(path), "--capacity", "8"])
        assert result.exit_code == 0
        assert "Assigned 8/8" in result.output
        assert "PASS" in result.output

    def test_allocate_over_capacity(self, runner, tmp_path):
        """Test exceeding capacity exits non-zero."""
        path = tmp_path / "circuits.txt"
        path.write_text("pon,1-4\nlg,1-4\n")
        result = runner.invoke(cli, ["allocate", str(path), "--capacity", "6"])
        assert result.exit_code == 1


class TestSegmentCommand:
    """Tests for the segment command."""

    def test_segments_across_ribbons(self, runner):
        """Test a span crossing a ribbon boundary."""
        result = runner.invoke(cli, ["segment", "10", "15", "1", "6"])
        assert result.exit_code == 0
        assert "2 segment(s)" in result.output
        assert "R1:10-12" in result.output
        assert "R2:1-3" in result.output

    def test_width_mismatch(self, runner):
        """Test mismatched widths are rejected."""
        result = runner.invoke(cli, ["segment", "1", "4", "1", "5"])
        assert result.exit_code == 1
        assert "differ in width" in result.output


class TestProjectCommands:
    """Tests for project based commands."""

    def test_show(self, runner, sample_project_path):
        """Test show lists every cable."""
        result = runner.invoke(cli, ["show", "-p", sample_project_path])
        assert result.exit_code == 0
        for name in ("f1", "d1", "d2"):
            assert name in result.output

    def test_check_clean_project(self, runner, sample_project_path):
        """Test check passes on the sample project."""
        result = runner.invoke(cli, ["check", "-p", sample_project_path])
        assert result.exit_code == 0
        assert "No errors found" in result.output

    def test_invalid_project(self, runner, tmp_path):
        """Test an invalid project file exits non-zero."""
        path = tmp_path / "bad.yaml"
        path.write_text("cables:\n  - {name: f1, role: Splitter}\n")
        result = runner.invoke(cli, ["check", "-p", str(path)])
        assert result.exit_code == 1

    def test_splice_saves_project(self, runner, project_copy):
        """Test splice updates the project file."""
        result = runner.invoke(cli, ["splice", "-p", project_copy, "-c", "d1", "-i", "pon,5-8"])
        assert result.exit_code == 0
        assert "feed strands 5-8" in result.output

        d1 = next(c for c in load_project(project_copy).cables if c.name == "d1")
        assert "pon,5-8" in [s.circuit for s in d1.spliced]

    def test_unsplice(self, runner, project_copy):
        """Test --off removes a splice."""
        result = runner.invoke(cli, ["splice", "-p", project_copy, "-c", "d1", "-i", "pon,1-4", "--off"])
        assert result.exit_code == 0

        d1 = next(c for c in load_project(project_copy).cables if c.name == "d1")
        assert [s.circuit for s in d1.spliced] == ["lg,3-6"]

    def test_splice_unknown_circuit(self, runner, project_copy):
        """Test splicing a missing circuit fails."""
        result = runner.invoke(cli, ["splice", "-p", project_copy, "-c", "d1", "-i", "pon,90-99"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_splice_schedule(self, runner, sample_project_path, tmp_path):
        """Test schedule export."""
        output = tmp_path / "schedule.csv"
        result = runner.invoke(cli, ["splice-schedule", "-p", sample_project_path, "-o", str(output)])
        assert result.exit_code == 0
        assert output.exists()
        assert "Total rows: 3" in result.output

    def test_report(self, runner, sample_project_path, tmp_path):
        """Test PDF report generation."""
        output = tmp_path / "report.pdf"
        result = runner.invoke(cli, ["report", "-p", sample_project_path, "-o", str(output), "-t", "Demo"])
        assert result.exit_code == 0
        assert output.exists()


def _cable(project_path, name):
    return next((c for c in load_project(project_path).cables if c.name == name), None)


class TestCircuitCommands:
    """Tests for the circuit editing commands."""

    def test_add_to_new_cable(self, runner, project_copy):
        """Test a circuit added to an empty cable lands on strand 1."""
        runner.invoke(cli, ["cable", "add", "-p", project_copy, "-r", "Distribution", "-n", "d3", "--capacity", "12"])
        result = runner.invoke(cli, ["circuit", "add", "-p", project_copy, "-c", "d3", "-i", "pon,21-24"])
        assert result.exit_code == 0
        assert "strands 1-4" in result.output
        assert _cable(project_copy, "d3").circuits == ["pon,21-24"]

    def test_add_over_capacity(self, runner, project_copy):
        """Test adding to a full cable fails and leaves the file alone."""
        result = runner.invoke(cli, ["circuit", "add", "-p", project_copy, "-c", "d1", "-i", "pon,9-10"])
        assert result.exit_code == 1
        assert "pon,9-10" not in _cable(project_copy, "d1").circuits

    def test_edit_clears_splice(self, runner, project_copy):
        """Test editing a spliced circuit saves the new ID without its splice."""
        result = runner.invoke(cli, ["circuit", "edit", "-p", project_copy, "-c", "d1", "-i", "lg,3-6", "--to", "lg,3-5"])
        assert result.exit_code == 0
        assert "Splice removed" in result.output

        d1 = _cable(project_copy, "d1")
        assert "lg,3-5" in d1.circuits
        assert [s.circuit for s in d1.spliced] == ["pon,1-4"]

    def test_edit_overlap(self, runner, project_copy):
        """Test an edit overlapping a sibling circuit fails."""
        result = runner.invoke(cli, ["circuit", "edit", "-p", project_copy, "-c", "d1", "-i", "pon,5-8", "--to", "pon,3-6"])
        assert result.exit_code == 1

    def test_move_up(self, runner, project_copy):
        """Test moving a circuit up swaps it with its neighbour."""
        result = runner.invoke(cli, ["circuit", "move", "-p", project_copy, "-c", "d1", "-i", "pon,5-8", "-d", "up"])
        assert result.exit_code == 0
        assert "strands 1-4" in result.output
        assert _cable(project_copy, "d1").circuits[:2] == ["pon,5-8", "pon,1-4"]

    def test_move_past_end(self, runner, project_copy):
        """Test the first circuit cannot move up."""
        result = runner.invoke(cli, ["circuit", "move", "-p", project_copy, "-c", "d1", "-i", "pon,1-4", "-d", "up"])
        assert result.exit_code == 0
        assert "cannot move up" in result.output
        assert _cable(project_copy, "d1").circuits[0] == "pon,1-4"

    def test_delete(self, runner, project_copy):
        """Test deleting a circuit saves the project."""
        result = runner.invoke(cli, ["circuit", "delete", "-p", project_copy, "-c", "d2", "-i", "lg,7-10"])
        assert result.exit_code == 0
        assert _cable(project_copy, "d2").circuits == ["pon,13-20"]

    def test_unknown_cable(self, runner, project_copy):
        """Test a missing cable name fails."""
        result = runner.invoke(cli, ["circuit", "delete", "-p", project_copy, "-c", "d9", "-i", "pon,1-4"])
        assert result.exit_code == 1
        assert "Cable not found" in result.output


class TestCableCommands:
    """Tests for the cable editing commands."""

    def test_add_with_default_name(self, runner, project_copy, tmp_path):
        """Test a new cable takes the next free name and allocates its list."""
        circuits = tmp_path / "circuits.txt"
        circuits.write_text("pon,21-24\nlg,11-12\n")
        result = runner.invoke(cli, [
            "cable", "add", "-p", project_copy, "-r", "Distribution", "--capacity", "12", "-l", str(circuits),
        ])
        assert result.exit_code == 0
        assert "d3" in result.output

        d3 = _cable(project_copy, "d3")
        assert d3.capacity == 12
        assert d3.circuits == ["pon,21-24", "lg,11-12"]

    def test_add_duplicate_name(self, runner, project_copy):
        """Test a cable name already in use is rejected."""
        result = runner.invoke(cli, ["cable", "add", "-p", project_copy, "-r", "Feed", "-n", "F1"])
        assert result.exit_code == 1

    def test_delete(self, runner, project_copy):
        """Test deleting a cable removes it from the project file."""
        result = runner.invoke(cli, ["cable", "delete", "-p", project_copy, "-c", "d2"])
        assert result.exit_code == 0
        assert _cable(project_copy, "d2") is None

    def test_change_role(self, runner, project_copy):
        """Test a Distribution cable becomes Feed without splices."""
        result = runner.invoke(cli, ["cable", "role", "-p", project_copy, "-c", "d2", "Feed"])
        assert result.exit_code == 0
        assert "Feed cable" in result.output

        d2 = _cable(project_copy, "d2")
        assert d2.role.value == "Feed"
        assert d2.spliced == []
