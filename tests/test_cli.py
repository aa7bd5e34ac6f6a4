import json
from pathlib import Path

from cardpuzzle.cli import main, parse_args


def run(tmp_path: Path, *args):
    return main(["--save-dir", str(tmp_path), "--seed", "3", *args])


def test_parse_args_defaults():
    args = parse_args([])
    assert args.command is None
    assert args.debug is False


def test_status_on_fresh_save(tmp_path: Path, capsys):
    assert run(tmp_path, "status") == 0
    out = capsys.readouterr().out
    assert "Level: 1/30" in out
    assert "Coins: 50" in out
    assert "Unlocks after level 5" in out


def test_play_through_collection_unlock(tmp_path: Path, capsys):
    for _ in range(5):
        assert run(tmp_path, "play", "--cheat") == 0
    out = capsys.readouterr().out
    assert "Unlocked: collection" in out

    data = json.loads((tmp_path / "puzzleGame_save_v2.json").read_text(encoding="utf-8"))
    assert data["currentLevel"] == 5
    assert data["collectionTutorialCompleted"] is True
    assert data["cards"]["newInbox"] == ["fresh_0", "fresh_1"]

    assert run(tmp_path, "collect") == 0
    out = capsys.readouterr().out
    assert "Collected Elephant" in out
    assert "Collected Drums" in out


def test_collect_unknown_card(tmp_path: Path, capsys):
    assert run(tmp_path, "collect", "nope") == 2
    assert "Unknown card" in capsys.readouterr().err


def test_spin_locked_wheel(tmp_path: Path, capsys):
    assert run(tmp_path, "spin") == 1
    assert "Unlocks at level 8" in capsys.readouterr().out


def test_reset(tmp_path: Path, capsys):
    run(tmp_path, "play")
    assert run(tmp_path, "reset") == 0
    data = json.loads((tmp_path / "puzzleGame_save_v2.json").read_text(encoding="utf-8"))
    assert data["currentLevel"] == 0


def test_open_albums(tmp_path: Path, capsys):
    assert run(tmp_path, "open-albums") == 0
    assert "8/8" in capsys.readouterr().out
