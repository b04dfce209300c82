from __future__ import annotations

import json

import pytest

from realitycheck.cli._dispatcher import build_parser, main
from realitycheck.cli.settings.set import parse_assignments


def _run(capsys, project_root, *argv: str):
    code = main([*argv, "--repo-root", str(project_root)])
    captured = capsys.readouterr()
    return code, captured.out, captured.err


def test_parser_discovers_domains() -> None:
    parser = build_parser()
    args = parser.parse_args(["scan", "run", "--docs", "d.json"])
    assert (args.domain, args.command, args.docs) == ("scan", "run", "d.json")
    with pytest.raises(SystemExit):
        parser.parse_args(["scan", "run", "--docs", "a.json", "--docs-cmd", "x"])


def test_no_domain_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "realitycheck" in capsys.readouterr().out


def test_settings_init_show_and_set(capsys, project_root) -> None:
    code, out, _ = _run(capsys, project_root, "settings", "init")
    assert code == 0
    assert (project_root / ".reality-check").is_dir()

    code, _, err = _run(capsys, project_root, "settings", "init")
    assert code == 1
    assert "already exists" in err

    code, _, _ = _run(capsys, project_root, "settings", "set", "scan_depth=quick", "exclusions.labels=[wontfix, \"needs info\"]")
    assert code == 0

    code, out, _ = _run(capsys, project_root, "settings", "show", "--json")
    assert code == 0
    data = json.loads(out)
    assert data["exists"] is True
    assert data["settings"]["scan_depth"] == "quick"
    assert data["settings"]["exclusions"]["labels"] == ["wontfix", "needs info"]


def test_settings_set_rejects_invalid_value(capsys, project_root) -> None:
    code, _, err = _run(capsys, project_root, "settings", "set", "scan_depth=forever")
    assert code == 1
    assert err.startswith("Error:")


def test_parse_assignments() -> None:
    assert parse_assignments(["output.write_to_file=false", "priority_weights.testing=4"]) == {
        "output.write_to_file": False,
        "priority_weights.testing": 4,
    }
    with pytest.raises(ValueError, match="KEY=VALUE"):
        parse_assignments(["scan_depth"])


def test_scan_run_status_report_reset(capsys, project_root) -> None:
    docs = project_root / "docs.json"
    docs.write_text(json.dumps({"checkboxTotal": 20, "completedCount": 2}), encoding="utf-8")
    code_file = project_root / "code.yaml"
    code_file.write_text("patterns:\n  hasTests: false\nhealth:\n  hasCI: false\n", encoding="utf-8")

    code, out, _ = _run(capsys, project_root, "scan", "run", "--docs", str(docs), "--code", str(code_file), "--json")
    assert code == 0
    result = json.loads(out)
    assert result["producers"] == {
        "issueScanner": "skipped",
        "docAnalyzer": "completed",
        "codeExplorer": "completed",
    }
    assert result["summary"]["driftCount"] == 1
    assert result["summary"]["gapCount"] == 2
    assert (project_root / "reality-check-report.md").exists()

    code, out, _ = _run(capsys, project_root, "scan", "status", "--json")
    assert code == 0
    state = json.loads(out)
    assert state["scan"]["id"] == result["scanId"]
    assert state["phases"]["current"] == "complete"

    code, out, _ = _run(capsys, project_root, "scan", "report")
    assert code == 0
    assert out.startswith("# Reality Check Report")
    assert "no-tests" in out

    code, out, _ = _run(capsys, project_root, "scan", "reset")
    assert code == 0
    assert "Scan state removed" in out

    code, out, _ = _run(capsys, project_root, "scan", "status")
    assert code == 0
    assert "No active scan" in out


def test_scan_run_text_output(capsys, project_root) -> None:
    code, out, _ = _run(capsys, project_root, "scan", "run")
    assert code == 0
    assert "completed" in out
    assert "issueScanner: skipped" in out


def test_scan_report_without_run(capsys, project_root) -> None:
    code, _, err = _run(capsys, project_root, "scan", "report")
    assert code == 1
    assert "No report available" in err


def test_failed_scan_reports_json_error(capsys, project_root) -> None:
    (project_root / ".reality-check" / "settings.local.md").mkdir(parents=True)
    code, _, err = _run(capsys, project_root, "scan", "run", "--json")
    assert code == 1
    payload = json.loads(err)
    assert payload["error"]["code"] == "ScanFailedError"
    assert payload["error"]["context"]["phase"] == "settings-check"
