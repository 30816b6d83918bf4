import json

import pytest

from dungeon_master.__main__ import main


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch):
    monkeypatch.delenv("DM_CONFIG", raising=False)
    monkeypatch.delenv("DM_LOG_LEVEL", raising=False)


def test_headless_run_reports_summary(capsys):
    assert main(["--steps", "5", "--seed", "3"]) == 0
    out = capsys.readouterr().out
    assert "Dungeon Master (headless)" in out
    assert "ticks=5" in out
    assert "floors=1" in out


def test_run_with_adventurers_and_save(tmp_path, capsys):
    assert main(["--steps", "3", "--seed", "11", "--adventurers", "2", "--save", str(tmp_path)]) == 0
    document = json.loads((tmp_path / "dungeon_save.json").read_text(encoding="utf-8"))
    assert "payload" in document
    assert "adventurers=" in capsys.readouterr().out


def test_resume_from_saved_directory(tmp_path):
    assert main(["--steps", "2", "--seed", "5", "--save", str(tmp_path)]) == 0
    assert main(["--steps", "2", "--load", str(tmp_path)]) == 0


def test_missing_save_fails(tmp_path, capsys):
    assert main(["--steps", "1", "--load", str(tmp_path / "nowhere")]) == 1
    assert "No usable save" in capsys.readouterr().err


def test_config_file_is_used(tmp_path, capsys):
    path = tmp_path / "game.yaml"
    path.write_text("floor_width: 6\nfloor_height: 6\nstarting_dp: 250\n", encoding="utf-8")
    assert main(["--config", str(path), "--steps", "1", "--seed", "1"]) == 0
    assert "dp=250" in capsys.readouterr().out
