"""Tests for the command-line interface."""

import io
import json

import pytest

from rgpd_gateway.cli import main


def _run(capsys, monkeypatch, argv, stdin=""):
    monkeypatch.setattr("sys.stdin", io.StringIO(stdin))
    code = main(["--config", "", *argv])
    return code, json.loads(capsys.readouterr().out)


def test_detect_prints_positions_not_values(capsys, monkeypatch):
    code, out = _run(capsys, monkeypatch, ["detect"], "Contact Jean Dupont at jean@example.com")
    assert code == 0
    assert out["total_count"] == 2
    assert out["detected_types"] == ["EMAIL", "PERSON"]
    assert out["entities"][0] == {
        "type": "PERSON", "start": 8, "end": 19, "confidence": 1.0, "source": "regex",
    }
    assert "Jean Dupont" not in json.dumps(out)


def test_mask(capsys, monkeypatch):
    code, out = _run(capsys, monkeypatch, ["mask"], "Contact Jean Dupont at jean@example.com")
    assert code == 0
    assert out == {
        "text": "Contact [PERSON_1] at [EMAIL_1]",
        "pii_types": ["PERSON", "EMAIL"],
        "pii_count": 2,
    }


def test_mask_honours_config_file(capsys, monkeypatch, tmp_path):
    path = tmp_path / "gateway.yaml"
    path.write_text("redaction:\n  skip_types: [EMAIL]\n")
    monkeypatch.setattr("sys.stdin", io.StringIO("Jean Dupont, jean@example.com"))

    assert main(["--config", str(path), "mask"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["text"] == "[PERSON_1], jean@example.com"


def test_check_allowed_use_case(capsys, monkeypatch):
    code, out = _run(capsys, monkeypatch, ["check-use-case", "WRITING_ASSISTANCE"])
    assert code == 0
    assert out["allowed"] is True
    assert out["risk_level"] == "high"
    assert out["human_validation_required"] is True


@pytest.mark.parametrize("use_case", ["LOAN_APPROVAL", "TOTALLY_UNKNOWN"])
def test_check_rejected_use_case(capsys, monkeypatch, use_case):
    code, out = _run(capsys, monkeypatch, ["check-use-case", use_case])
    assert code == 1
    assert out["allowed"] is False
    assert use_case in out["rejection_reason"]


def test_scan_logs(capsys, monkeypatch, tmp_path):
    log = tmp_path / "app.log"
    log.write_text("boot ok\nlogin jean@example.com\nNIR 1 89 05 75 123 456 78\n")

    code, out = _run(capsys, monkeypatch, ["scan-logs", str(log)])

    assert code == 1
    assert out["total_lines"] == 4
    assert out["leak_count"] == 2
    assert [(l["line"], l["severity"]) for l in out["leaks"]] == [(2, "warning"), (3, "critical")]
    assert "jean@example.com" not in json.dumps(out)


def test_scan_clean_logs(capsys, monkeypatch, tmp_path):
    log = tmp_path / "app.log"
    log.write_text("boot ok\nrequest done\n")
    code, out = _run(capsys, monkeypatch, ["scan-logs", str(log)])
    assert code == 0
    assert out["leaks"] == []
