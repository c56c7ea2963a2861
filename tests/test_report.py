import json
import os

import pandas as pd
import pytest

import report


def _frames():
    channel = {"Stripe.csv": pd.DataFrame([["10.02.2024", "Jane Doe"]], columns=["Datum", "Kundenname"])}
    unmatched = pd.DataFrame(columns=["channel", "reason"])
    suggestions = pd.DataFrame(columns=["customer_id"])
    return channel, unmatched, suggestions


def test_write_outputs(tmp_path):
    out_dir = tmp_path / "output"
    channel, unmatched, suggestions = _frames()

    files = report.write_outputs(str(out_dir), channel, unmatched, suggestions, {"payments": 1})

    assert sorted(os.listdir(out_dir)) == ["Stripe.csv", "recon_summary.json", "suggestions.csv", "unmatched.csv"]
    assert len(files) == 4
    assert (out_dir / "Stripe.csv").read_text(encoding="utf-8").splitlines() == ["Datum,Kundenname", "10.02.2024,Jane Doe"]
    assert json.loads((out_dir / "recon_summary.json").read_text()) == {"payments": 1}


def test_failed_write_leaves_no_output(tmp_path, monkeypatch):
    out_dir = tmp_path / "output"
    channel, unmatched, suggestions = _frames()

    def broken_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(report.json, "dump", broken_dump)

    with pytest.raises(OSError):
        report.write_outputs(str(out_dir), channel, unmatched, suggestions, {})

    assert os.listdir(out_dir) == []


def test_unexpected_error_leaves_no_output(tmp_path, monkeypatch):
    out_dir = tmp_path / "output"
    channel, unmatched, suggestions = _frames()

    def broken_dump(*args, **kwargs):
        raise TypeError("not serializable")

    monkeypatch.setattr(report.json, "dump", broken_dump)

    with pytest.raises(TypeError):
        report.write_outputs(str(out_dir), channel, unmatched, suggestions, {})

    assert os.listdir(out_dir) == []


def test_failed_move_removes_reports_already_moved(tmp_path, monkeypatch):
    out_dir = tmp_path / "output"
    channel, unmatched, suggestions = _frames()
    real_replace = os.replace
    calls = []

    def flaky_replace(src, dst):
        calls.append(dst)
        if len(calls) == 2:
            raise OSError("device busy")
        real_replace(src, dst)

    monkeypatch.setattr(report.os, "replace", flaky_replace)

    with pytest.raises(OSError):
        report.write_outputs(str(out_dir), channel, unmatched, suggestions, {})

    assert os.listdir(out_dir) == []
