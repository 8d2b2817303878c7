import pytest

from main import _parse_args, _resolve_settings


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_global_storage_option_precedes_subcommand() -> None:
    args = _parse_args(["--storage", "memory", "admin"])
    assert args.command == "admin"
    assert args.storage == "memory"

    args = _parse_args(["--storage", "memory"])
    assert args.command == "serve"


def test_admin_and_init_db_subcommands() -> None:
    assert _parse_args(["admin"]).command == "admin"
    assert _parse_args(["init-db"]).command == "init-db"


def test_storage_option_without_value_is_an_error() -> None:
    with pytest.raises(SystemExit):
        _parse_args(["--db"])


def test_storage_options_may_follow_serve_options() -> None:
    args = _parse_args(["--port", "8080", "--db", "x.sqlite3"])
    assert args.command == "serve"
    assert args.port == 8080
    assert args.db_path == "x.sqlite3"

    args = _parse_args(["admin", "--storage", "memory"])
    assert args.command == "admin"
    assert args.storage == "memory"


def test_cli_flags_override_settings(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("RENTALS_CONFIG", str(tmp_path / "absent.yaml"))
    monkeypatch.delenv("RENTALS_STORAGE", raising=False)
    monkeypatch.delenv("RENTALS_PORT", raising=False)
    monkeypatch.delenv("RENTALS_DB_PATH", raising=False)
    db_path = tmp_path / "cli.sqlite3"

    args = _parse_args(["--db", str(db_path), "serve", "--port", "9001"])
    settings = _resolve_settings(args)

    assert settings.port == 9001
    assert settings.storage == "sqlite"
    assert settings.database_path == db_path.resolve()


def test_admin_add_user_asks_before_reusing_pseudo(stores, monkeypatch, capsys) -> None:
    from main import _add_user, _list_users

    stores.users.add({"pseudo": "ana", "name": "Ana"})
    answers = iter(["ana", "n"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))

    _add_user(stores)

    assert len(stores.users) == 1
    assert "User creation cancelled." in capsys.readouterr().out

    answers = iter(["bo", "Bo Berg"])
    _add_user(stores)
    _list_users(stores)

    output = capsys.readouterr().out
    assert "2 user(s) found" in output
    assert "Bo Berg" in output
