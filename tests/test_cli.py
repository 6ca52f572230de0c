import pytest
from typer.testing import CliRunner
from todos.api.cli import app

runner = CliRunner()


@pytest.fixture
def db_args(tmp_path):
    return ["--store", "sql", "--database-url", f"sqlite:///{tmp_path / 'tasks.db'}", "--log-level", "WARNING"]


def test_add_then_list(db_args):
    result = runner.invoke(app, [*db_args, "add", "buy milk"])
    assert result.exit_code == 0
    assert "Task added" in result.output

    result = runner.invoke(app, [*db_args, "list"])
    assert result.exit_code == 0
    assert "buy milk" in result.output
    assert "Total: 1" in result.output


def test_done_and_show(db_args):
    runner.invoke(app, [*db_args, "add", "buy milk"])

    result = runner.invoke(app, [*db_args, "done", "1"])
    assert result.exit_code == 0
    assert "done" in result.output

    result = runner.invoke(app, [*db_args, "show", "1"])
    assert "buy milk" in result.output
    assert "done" in result.output


def test_rename_and_undo(db_args):
    runner.invoke(app, [*db_args, "add", "old", "--done"])

    result = runner.invoke(app, [*db_args, "rename", "1", "new"])
    assert "new" in result.output

    result = runner.invoke(app, [*db_args, "undo", "1"])
    assert "open" in result.output


def test_rm_missing_task_shows_not_found(db_args):
    result = runner.invoke(app, [*db_args, "rm", "7"])

    assert result.exit_code == 0
    assert "Not found" in result.output


def test_invalid_id_shows_validation_error(db_args):
    result = runner.invoke(app, [*db_args, "show", "abc"])

    assert "invalid id" in result.output


def test_empty_title_shows_validation_error(db_args):
    result = runner.invoke(app, [*db_args, "add", "  "])

    assert "title required" in result.output


def test_unknown_store_is_rejected():
    result = runner.invoke(app, ["--store", "redis", "list"])

    assert result.exit_code != 0
