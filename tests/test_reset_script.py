"""Tests for the scripts/reset_db.py entry point."""

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "reset_db.py"


@pytest.fixture
def reset_db():
    spec = importlib.util.spec_from_file_location("reset_db", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestResetScript:
    def test_empties_sqlite_database(self, reset_db, tmp_path, monkeypatch, capsys):
        path = tmp_path / "app.sqlite"
        path.write_bytes(b"not empty")
        monkeypatch.setenv("DB_CONNECTION", "sqlite")
        monkeypatch.setenv("SQLITE_DATABASE", str(path))

        reset_db.main()

        assert path.exists() and path.stat().st_size == 0
        assert "[OK] Database is empty." in capsys.readouterr().out

    def test_relies_on_project_root_env(self, reset_db):
        # freshdb.manager loads PROJECT_ROOT/.env on import
        assert not hasattr(reset_db, "load_dotenv")
