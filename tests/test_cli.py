from __future__ import annotations

import json

import pytest

from cli.main import main


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("EVENTINDEX_HOME", str(home))
    return home


def run(capsys, *argv: str) -> str:
    main(list(argv))
    return capsys.readouterr().out


def test_add_list_ack_rm(capsys, isolated_home):
    out = run(capsys, "add", "DB down", "--type", "error", "--severity", "high", "--source", "db")
    event_id = out.split()[-1]
    run(capsys, "add", "Login spike", "--type", "warning", "--source", "auth")
    assert (isolated_home / "snapshot.json").exists()

    out = run(capsys, "list", "--source", "db")
    assert "DB down" in out
    assert "Login spike" not in out
    assert "source=db" in out

    # the filter is persisted with the snapshot
    out = run(capsys, "list")
    assert "Login spike" not in out

    out = run(capsys, "list", "--reset")
    assert "Login spike" in out
    assert "2 unacknowledged of 2" in out

    out = run(capsys, "ack", event_id, "evt_missing")
    assert "Acknowledged 1 event(s)" in out

    out = run(capsys, "stats")
    assert "Unacknowledged: 1" in out

    out = run(capsys, "rm", event_id)
    assert f"Removed {event_id}" in out
    out = run(capsys, "rm", event_id)
    assert f"No event {event_id}" in out

    snapshot = json.loads((isolated_home / "snapshot.json").read_text())
    assert [e["title"] for e in snapshot["events"]] == ["Login spike"]


def test_export_to_stdout(capsys):
    run(capsys, "add", "Pod started", "--source", "k8s")
    out = run(capsys, "export", "--format", "csv", "--output", "-")
    assert out.splitlines()[0].startswith("ID,Title")
    assert "Pod started" in out


def test_clear(capsys):
    run(capsys, "add", "one", "--source", "k8s")
    run(capsys, "add", "two", "--source", "k8s")
    assert "Removed 2 event(s)" in run(capsys, "clear")
    assert "No events." in run(capsys, "list")


def test_bad_lookback_exits(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["list", "--lookback", "soon"])
    assert exc.value.code == 1
    assert "Error" in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 0
