import pytest
from click.testing import CliRunner

import labrecord_backend.cli.cli as cli_module
from labrecord_backend.cli.cli import cli
from labrecord_backend.model import FacultySubject, Profile, Subject


@pytest.fixture
def runner(Session, monkeypatch):
    monkeypatch.setattr(cli_module, "_SessionLocal", Session)
    return CliRunner()


def test_seed_subjects(runner, db):
    result = runner.invoke(cli, ["seed-subjects"])

    assert result.exit_code == 0, result.output
    assert db.query(Subject).filter(Subject.code == "CS101").count() == 1


def test_provision_then_assign(runner, db):
    runner.invoke(cli, ["seed-subjects"])

    result = runner.invoke(cli, ["provision", "fac-9", "--name", "Dr. Iyer", "--role", "faculty", "--department", "IT"])
    assert result.exit_code == 0, result.output
    assert db.get(Profile, "fac-9").role == "faculty"

    result = runner.invoke(cli, ["assign", "fac-9", "CS304"])
    assert result.exit_code == 0, result.output
    assert db.query(FacultySubject).filter(FacultySubject.faculty_id == "fac-9").count() == 1


def test_errors_are_reported(runner, db):
    result = runner.invoke(cli, ["enroll", "nobody", "CS101"])

    assert result.exit_code != 0
    assert "[404]" in result.output


def test_init_db_upgrades_to_head(monkeypatch):
    from functools import partial
    from sqlalchemy import inspect
    from sqlalchemy.pool import StaticPool
    from labrecord_backend.database import build_engine, upgrade_database

    engine = build_engine("sqlite://", poolclass=StaticPool)
    monkeypatch.setattr(cli_module, "upgrade_database", partial(upgrade_database, engine=engine))

    result = CliRunner().invoke(cli, ["init-db"])

    assert result.exit_code == 0, result.output
    assert {"alembic_version", "profile", "evaluation"} <= set(inspect(engine).get_table_names())
    engine.dispose()
