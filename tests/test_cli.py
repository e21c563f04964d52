from __future__ import annotations

import sys
from typing import List

import pytest

from db.connection import get_connection
from db.kv_store import SqliteKeyValueStore
from db.repos.profiles_repo import PROFILES_KEY


def _run_cli_with_args(args_list: List[str]) -> None:
    """Simulate CLI execution of cli.py with given args (non-interactive)."""
    argv_backup = sys.argv[:]
    try:
        sys.argv = ["cli.py"] + args_list
        # Reload cli fresh to re-parse args and pick up monkeypatches
        if "cli" in sys.modules:
            del sys.modules["cli"]
        import cli  # noqa: F401
        try:
            cli.main()  # type: ignore[attr-defined]
        except SystemExit as e:
            if e.code not in (0, None):
                raise
    finally:
        sys.argv = argv_backup


def _stored_profiles(db_path) -> list:
    conn = get_connection(str(db_path))
    try:
        return SqliteKeyValueStore(conn).get_json(PROFILES_KEY, default=[])
    finally:
        conn.close()


CREATE_ARGS = [
    "create",
    "--name", "Ana Silva",
    "--role", "Dev",
    "--area", "TI",
    "--city", "Recife",
    "--state", "PE",
    "--linkedin-url", "https://linkedin.com/in/anasilva",
]


@pytest.fixture(autouse=True)
def _no_ai(monkeypatch):
    # Ensure no real API/AI usage
    monkeypatch.setenv("AI_ENABLED", "false")
    from config.settings import get_settings
    get_settings.cache_clear()


def test_cli_create_list_and_filters(tmp_path, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "bootstrap"])
    _run_cli_with_args(["--db", str(db_path), "--email", "ana@example.com"] + CREATE_ARGS)

    rows = _stored_profiles(db_path)
    assert len(rows) == 1
    assert rows[0]["location"] == "Recife - PE"
    assert rows[0]["tags"] == ["TI", "Networking"]
    assert rows[0]["bio"] == "Dev atuando na área de TI."

    capsys.readouterr()
    _run_cli_with_args(["--db", str(db_path), "--email", "ana@example.com", "list", "--city", "Recife"])
    out = capsys.readouterr().out
    assert "1 profile(s)" in out
    assert "Ana Silva" in out and "[me]" in out

    _run_cli_with_args(["--db", str(db_path), "--email", "ana@example.com", "filters"])
    out = capsys.readouterr().out
    assert '"Recife"' in out and '"TI"' in out


def test_cli_duplicate_exits_nonzero(tmp_path, capsys):
    db_path = tmp_path / "cli.db"
    _run_cli_with_args(["--db", str(db_path), "--email", "ana@example.com"] + CREATE_ARGS)
    dup = list(CREATE_ARGS)
    dup[-1] = "https://linkedin.com/in/AnaSilva"
    with pytest.raises(SystemExit) as excinfo:
        _run_cli_with_args(["--db", str(db_path), "--email", "bruno@example.com"] + dup)
    assert excinfo.value.code == 1
    assert "already registered" in capsys.readouterr().err
    assert len(_stored_profiles(db_path)) == 1


def test_cli_requires_email(tmp_path, monkeypatch):
    monkeypatch.delenv("CONNECTAI_EMAIL", raising=False)
    with pytest.raises(SystemExit) as excinfo:
        _run_cli_with_args(["--db", str(tmp_path / "cli.db"), "list"])
    assert "--email" in str(excinfo.value.code)


def test_cli_update_follow_and_delete(tmp_path, capsys):
    db_path = tmp_path / "cli.db"
    base = ["--db", str(db_path), "--email", "ana@example.com"]
    _run_cli_with_args(base + CREATE_ARGS)
    profile_id = _stored_profiles(db_path)[0]["id"]

    _run_cli_with_args(base + ["update", profile_id, "--city", "Natal", "--state", "RN"])
    assert _stored_profiles(db_path)[0]["location"] == "Natal - RN"

    capsys.readouterr()
    _run_cli_with_args(["--db", str(db_path), "--email", "bruno@example.com", "follow", profile_id])
    assert "https://linkedin.com/in/anasilva" in capsys.readouterr().out
    _run_cli_with_args(["--db", str(db_path), "--email", "bruno@example.com", "followed"])
    assert profile_id in capsys.readouterr().out

    with pytest.raises(SystemExit):
        _run_cli_with_args(["--db", str(db_path), "--email", "bruno@example.com", "delete", profile_id])
    _run_cli_with_args(base + ["delete", profile_id])
    assert _stored_profiles(db_path) == []


def test_cli_enhance_prints_fallback_when_ai_disabled(tmp_path, capsys):
    _run_cli_with_args(["--db", str(tmp_path / "cli.db"), "enhance", "--role", "Dev", "--area", "TI"])
    out = capsys.readouterr().out
    assert '"normalizedRole": "Dev"' in out
    assert '"Networking"' in out
