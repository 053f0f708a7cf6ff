import json

import pytest

from cli.main import main


@pytest.fixture
def state(tmp_path):
    return str(tmp_path / "state")


def run(state, *argv):
    main(["--out", state, "--log-level", "WARNING", *argv])


def add_tulsi(state):
    run(state, "add", "H1", "--name", "Tulsi", "--scientific-name", "Ocimum tenuiflorum",
        "--region", "Kerala", "--growth-stage", "Seedling")


class TestCommands:

    def test_add_and_get(self, state, capsys):
        add_tulsi(state)
        capsys.readouterr()
        run(state, "get", "H1")
        record = json.loads(capsys.readouterr().out)
        assert record["herbID"] == "H1"
        assert record["status"] == "Submitted"

    def test_duplicate_add_exits_with_error(self, state):
        add_tulsi(state)
        with pytest.raises(SystemExit) as exc:
            add_tulsi(state)
        assert "AlreadyExists" in str(exc.value.code)

    def test_update_lab_report_from_file(self, state, tmp_path, capsys):
        report = tmp_path / "report.pdf"
        report.write_bytes(b"heavy metals: none detected")
        add_tulsi(state)
        run(state, "update-lab-report", "H1", "--report", str(report), "--status", "Approved")
        capsys.readouterr()

        run(state, "get", "H1")
        record = json.loads(capsys.readouterr().out)
        assert record["status"] == "Approved"
        assert len(record["labReportHash"]) == 64

    def test_update_lab_report_with_empty_values(self, state, capsys):
        add_tulsi(state)
        run(state, "update-lab-report", "H1", "--hash", "", "--status", "")
        capsys.readouterr()

        run(state, "get", "H1")
        record = json.loads(capsys.readouterr().out)
        assert record["labReportHash"] == ""
        assert record["status"] == ""

    def test_list_by_region(self, state, capsys):
        add_tulsi(state)
        run(state, "add", "H2", "--name", "Ashwagandha", "--region", "Karnataka")
        capsys.readouterr()
        run(state, "list", "--region", "kerala")
        assert [h["herbID"] for h in json.loads(capsys.readouterr().out)] == ["H1"]

    def test_history(self, state, capsys):
        add_tulsi(state)
        run(state, "update-stage", "H1", "Flowering")
        capsys.readouterr()
        run(state, "history", "H1")
        history = json.loads(capsys.readouterr().out)
        assert [h["value"]["growthStage"] for h in history] == ["Seedling", "Flowering"]

    def test_exists_exit_code(self, state, capsys):
        with pytest.raises(SystemExit) as exc:
            run(state, "exists", "H1")
        assert exc.value.code == 1
        add_tulsi(state)
        run(state, "exists", "H1")
        assert capsys.readouterr().out.strip().endswith("true")

    def test_invoke(self, state, capsys):
        run(state, "invoke", "AddHerb", "H1", "Tulsi", "Ocimum tenuiflorum", "Ravi", "12.5",
            "10.85", "76.27", "Kerala", "Palakkad", "Seedling", "2025-01-15")
        run(state, "invoke", "HerbExists", "H1")
        assert capsys.readouterr().out.strip() == "true"

    def test_verify(self, state, capsys):
        add_tulsi(state)
        run(state, "verify")
        assert "Ledger OK: 1 block(s)" in capsys.readouterr().out
