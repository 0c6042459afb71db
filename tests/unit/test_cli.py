"""Tests for CLI commands."""

import json

import pytest

from divtrack.cli.commands import create_parser, main
from divtrack.config.preferences import load_preferences


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "cli.db"


@pytest.fixture
def seeded_db_path(db_path, fixtures_dir):
    assert main(["--db", str(db_path), "init", "--seed", str(fixtures_dir / "sample_seed.json")]) == 0
    return db_path


class TestParser:
    """Tests for argument parsing."""

    def test_search_arguments(self):
        args = create_parser().parse_args(["search", "Rain", "--game", "poe2", "--page", "2"])
        assert args.command == "search"
        assert args.card_name == "Rain"
        assert args.game == "poe2"
        assert args.page == 2
        assert args.page_size is None

    def test_unknown_game_rejected(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["show-sessions", "--game", "poe3"])


class TestCommands:
    """Tests for command execution."""

    def test_init_without_seed(self, db_path, capsys):
        assert main(["--db", str(db_path), "init"]) == 0
        assert db_path.exists()
        assert "0 poe1 sessions" in capsys.readouterr().out

    def test_init_with_missing_seed_file(self, db_path, tmp_path):
        assert main(["--db", str(db_path), "init", "--seed", str(tmp_path / "none.json")]) == 1

    def test_init_with_invalid_seed(self, db_path, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("[", encoding="utf-8")
        assert main(["--db", str(db_path), "init", "--seed", str(bad)]) == 1

    def test_init_with_unknown_league_reference(self, db_path, tmp_path, capsys):
        seed = tmp_path / "orphan.json"
        seed.write_text(
            json.dumps(
                {
                    "sessions": [
                        {
                            "id": "s1",
                            "game": "poe1",
                            "league_id": "no-such-league",
                            "started_at": "2026-03-01T10:00:00",
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )
        assert main(["--db", str(db_path), "init", "--seed", str(seed)]) == 1
        assert "Seed import failed" in capsys.readouterr().out

    def test_show_sessions(self, seeded_db_path, capsys):
        capsys.readouterr()
        assert main(["--db", str(seeded_db_path), "show-sessions"]) == 0
        out = capsys.readouterr().out
        assert "3 total" in out
        assert "sess-pri" in out

    def test_invalid_page_size(self, seeded_db_path):
        assert main(["--db", str(seeded_db_path), "show-sessions", "--page-size", "500"]) == 1

    def test_seed_twice(self, seeded_db_path, fixtures_dir, capsys):
        seed = str(fixtures_dir / "sample_seed.json")
        assert main(["--db", str(seeded_db_path), "init", "--seed", seed]) == 0
        capsys.readouterr()
        assert main(["--db", str(seeded_db_path), "show-sessions"]) == 0
        assert "3 total" in capsys.readouterr().out

    def test_invalid_page(self, seeded_db_path, capsys):
        capsys.readouterr()
        assert main(["--db", str(seeded_db_path), "show-sessions", "--page", "0"]) == 1
        assert "Page must be 1 or greater" in capsys.readouterr().out
        assert main(["--db", str(seeded_db_path), "search", "Rain", "--page", "-1"]) == 1

    def test_set_defaults(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        assert main(["set-defaults", "--game", "poe2", "--page-size", "50"]) == 0
        out = capsys.readouterr().out
        assert "Default game: poe2" in out
        assert "Default page size: 50" in out
        assert load_preferences(tmp_path / "DivTrack").sessions_page_size == 50

    def test_set_defaults_rejects_page_size(self, tmp_path, monkeypatch):
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
        assert main(["set-defaults", "--page-size", "0"]) == 1
        assert not (tmp_path / "DivTrack" / "preferences.json").exists()

    def test_show_session(self, seeded_db_path, capsys):
        capsys.readouterr()
        assert main(["--db", str(seeded_db_path), "show-session", "sess-priced"]) == 0
        out = capsys.readouterr().out
        assert "The Doctor" in out
        assert "= 150.0c" in out

    def test_show_unknown_session(self, seeded_db_path):
        assert main(["--db", str(seeded_db_path), "show-session", "nope"]) == 1

    def test_search(self, seeded_db_path, capsys):
        capsys.readouterr()
        assert main(["--db", str(seeded_db_path), "search", "Rain"]) == 0
        out = capsys.readouterr().out
        assert "3 total" in out

    def test_export_session(self, seeded_db_path, tmp_path):
        output = tmp_path / "out" / "session.csv"
        assert main(["--db", str(seeded_db_path), "export-session", "sess-priced", str(output)]) == 0
        content = output.read_text(encoding="utf-8")
        assert content.startswith("Card Name,Count")
        assert "Exchange Net Profit (chaos),9850.00" in content

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out
