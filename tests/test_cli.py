from __future__ import annotations

import pytest
from sqlalchemy import inspect

from octonius.cli import build_parser, main
from octonius.cli.commands import serve
from octonius.config import Settings
from octonius.db import init_engine


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_serve_defaults():
    args = build_parser().parse_args(["serve"])

    assert args.host == "127.0.0.1"
    assert args.port == 8000
    assert args.handler is serve.run


def test_log_level_is_accepted_per_command():
    args = build_parser().parse_args(["init-db", "--drop", "--log-level", "debug"])

    assert args.drop is True
    assert args.log_level == "debug"


def test_init_db_and_seed_permissions(tmp_path, monkeypatch, capsys):
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    monkeypatch.setenv("OCTONIUS_DATABASE_URL", url)
    monkeypatch.delenv("ENVIRONMENT", raising=False)

    main(["init-db"])
    main(["seed-permissions"])
    main(["seed-permissions"])

    out = capsys.readouterr().out
    assert "Database tables created" in out
    assert "Seeded 0 permission(s)" in out

    tables = inspect(init_engine(Settings(database_url=url))).get_table_names()
    assert {"users", "workplaces", "tasks", "permissions"} <= set(tables)


def test_serve_runs_uvicorn(monkeypatch):
    calls = {}

    def fake_run(app, host, port, log_level):
        calls.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr(serve.uvicorn, "run", fake_run)
    args = build_parser().parse_args(["serve", "--port", "9000", "--log-level", "WARNING"])

    serve.run(args, Settings(database_url="sqlite:///:memory:"))

    assert calls["port"] == 9000
    assert calls["log_level"] == "warning"
    assert calls["app"].title == "Octonius API"
