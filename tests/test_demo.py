import pytest
from sqlalchemy.exc import OperationalError

from voting import create_app, db
from voting.database.models import User, Vote
from voting.demo import main, run_demo
from voting.errors import Status

EXPECTED_OUTPUT = [
    "Candidate: ID=1, Name=Candidate A",
    "Candidate: ID=2, Name=Candidate B",
    "Candidate: ID=3, Name=Candidate C",
    "Vote is registered!",
    "Error of registering the vote!",
]


@pytest.fixture
def demo_config(tmp_path, db_uri):
    return {
        'SQLALCHEMY_DATABASE_URI': db_uri,
        'AUDIT_LOG_DIR': str(tmp_path / 'logs'),
    }


def test_run_demo(store, capsys):
    results = run_demo(store)

    assert results == [Status.SUCCESS, Status.CANDIDATE_NOT_FOUND]
    assert capsys.readouterr().out.splitlines() == EXPECTED_OUTPUT
    assert User.query.count() == 2
    vote = Vote.query.one()
    assert (vote.user_id, vote.candidate_id) == (1, 1)


def test_main(demo_config, capsys):
    assert main(demo_config) == 0
    assert capsys.readouterr().out.splitlines() == EXPECTED_OUTPUT

    app = create_app(demo_config)
    with app.app_context():
        assert Vote.query.count() == 1
        db.session.remove()


def test_main_is_repeatable(demo_config, capsys):
    assert main(demo_config) == 0
    capsys.readouterr()

    # Tables are cleared and candidate ids restart on every run
    assert main(demo_config) == 0
    assert capsys.readouterr().out.splitlines() == EXPECTED_OUTPUT


def test_main_storage_unavailable(tmp_path, capsys):
    config = {'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'missing' / 'voting.db'}",
              'AUDIT_LOG_DIR': ''}
    assert main(config) == 1
    captured = capsys.readouterr()
    assert 'Error opening the voting database' in captured.err
    assert captured.out == ''


def test_main_schema_creation_failed(demo_config, monkeypatch, capsys):
    def boom(*args, **kwargs):
        raise OperationalError("CREATE TABLE users", {}, Exception("database is locked"))

    monkeypatch.setattr(db, 'create_all', boom)
    assert main(demo_config) == 1
    assert 'Error creating tables: database is locked' in capsys.readouterr().err


def test_main_with_unusable_audit_dir(tmp_path, db_uri, capsys):
    blocker = tmp_path / 'blocker'
    blocker.write_text('not a directory')

    assert main({'SQLALCHEMY_DATABASE_URI': db_uri, 'AUDIT_LOG_DIR': str(blocker / 'logs')}) == 0
    captured = capsys.readouterr()
    assert captured.out.splitlines() == EXPECTED_OUTPUT


def test_main_default_config_writes_no_audit_trail(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert main() == 0
    assert (tmp_path / 'voting.db').exists()
    assert not (tmp_path / 'logs').exists()


def test_create_app_ignores_environment(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('DATABASE_URL', 'sqlite:////elsewhere/other.db')
    monkeypatch.setenv('AUDIT_LOG_DIR', str(tmp_path / 'logs'))
    monkeypatch.setenv('LOG_LEVEL', 'DEBUG')

    app = create_app()
    assert app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///' + str(tmp_path / 'voting.db')
    assert app.config['AUDIT_LOG_DIR'] == ''
    assert app.config['LOG_LEVEL'] == 'INFO'
