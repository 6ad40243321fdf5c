import pytest
from typer.testing import CliRunner

from stickytodo.commands import Commands
from stickytodo.NOTE.database import NoteStore
from stickytodo.storage import Database
from stickytodo.TODO.database import TodoStore


@pytest.fixture()
def db(tmp_path):
    database = Database(tmp_path / "sticky_notes.db")
    database.connect()
    yield database
    database.close()


@pytest.fixture()
def store(db):
    return TodoStore(db)


@pytest.fixture()
def notes(db):
    return NoteStore(db)


@pytest.fixture()
def commands(tmp_path):
    cmds = Commands(tmp_path / "commands.db")
    assert cmds.init()
    yield cmds
    cmds.close()


@pytest.fixture()
def runner():
    return CliRunner()
