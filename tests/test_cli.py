"""
Tests for the command line front end, driven by snapshot files.
"""

import json

import pytest

from openwith.cli import main


@pytest.fixture
def snapshot_file(tmp_path, scenario_a, markdown_tree):
    scenario_a.content_types["md"] = markdown_tree
    scenario_a.handler(LSHandlerContentType="public.plain-text", LSHandlerRoleAll="com.example.writer")
    path = tmp_path / "machine.json"
    path.write_text(json.dumps(scenario_a.snapshot()), encoding="utf-8")
    return path


def test_text_output(snapshot_file, tmp_path, capsys):
    target = tmp_path / "notes.md"
    assert main(["--snapshot", str(snapshot_file), str(target)]) == 0
    out = capsys.readouterr().out
    assert "Found 2 apps:" in out
    assert out.index("1. Writer") < out.index("2. Viewer")
    assert "Rank: Owner" in out
    assert "System default application" in out
    assert "User default" in out


def test_json_output(snapshot_file, tmp_path, capsys):
    assert main(["--snapshot", str(snapshot_file), "--json", "--max-results", "1", str(tmp_path / "notes.md")]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rows] == ["Writer"]
    assert rows[0]["rank"] == "Owner"
    assert rows[0]["isSystemDefault"] is True
    assert rows[0]["isFileDefault"] is False


def test_config_file(snapshot_file, tmp_path, capsys):
    config = tmp_path / "openwith.json"
    config.write_text(json.dumps({"includeAlternate": False}), encoding="utf-8")
    main(["--snapshot", str(snapshot_file), "--config", str(config), "--json", str(tmp_path / "notes.md")])
    rows = json.loads(capsys.readouterr().out)
    assert [r["name"] for r in rows] == ["Writer"]


def test_icons_flag(snapshot_file, tmp_path, capsys):
    main(["--snapshot", str(snapshot_file), "--icons", str(tmp_path / "notes.md")])
    assert "Successfully extracted 0/2 icons" in capsys.readouterr().out


def test_invalid_option_exits(snapshot_file, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--snapshot", str(snapshot_file), "--max-results", "0", str(tmp_path / "notes.md")])
    assert exc.value.code == 2


def test_unreadable_snapshot_exits(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("nope", encoding="utf-8")
    with pytest.raises(SystemExit) as exc:
        main(["--snapshot", str(bad), str(tmp_path / "notes.md")])
    assert exc.value.code == 2
