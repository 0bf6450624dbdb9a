import json
import sys
from pathlib import Path

import pytest

import cli

FIXTURE = Path(__file__).parent / "fixtures" / "Counter.tsx"


def _run(monkeypatch, capsys, *argv):
	monkeypatch.setattr(sys, "argv", ["renderviz", *argv])
	cli.main()
	return json.loads(capsys.readouterr().out)


def test_analyze_prints_facts(monkeypatch, capsys):
	out = _run(monkeypatch, capsys, "analyze", str(FIXTURE))
	assert out["facts"]["component_name"] == "Counter"
	assert out["facts"]["file_name"] == "Counter.tsx"
	assert "layout" not in out
	names = [h["name"] for h in out["facts"]["hooks"]]
	assert names == ["count", "setCount", "boxRef", "reset"]


def test_analyze_with_layout(monkeypatch, capsys):
	out = _run(monkeypatch, capsys, "analyze", str(FIXTURE), "--layout")
	kinds = {n["kind"] for n in out["layout"]["nodes"]}
	assert {"independent", "state", "side_effect", "element", "external"} <= kinds
	assert out["layout"]["col_x"]["jsx"] == 960


def test_analyze_rejects_missing_file(monkeypatch, tmp_path):
	monkeypatch.setattr(sys, "argv", ["renderviz", "analyze", str(tmp_path / "missing.tsx")])
	with pytest.raises(SystemExit) as exc:
		cli.main()
	assert exc.value.code == 2


def test_serve_runs_uvicorn(monkeypatch):
	calls = []
	monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kw: calls.append((app, kw)))
	monkeypatch.setattr(sys, "argv", ["renderviz", "serve", "--port", "9001"])
	cli.main()
	assert calls == [("api:app", {"host": "127.0.0.1", "port": 9001, "reload": False})]
