import pytest

from voting import create_app, db
from voting.store import VotingStore


@pytest.fixture
def db_uri(tmp_path):
    return f"sqlite:///{tmp_path / 'voting.db'}"


@pytest.fixture
def app(tmp_path, db_uri):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': db_uri,
        'AUDIT_LOG_DIR': str(tmp_path / 'logs'),
    })
    with app.app_context():
        yield app
        db.session.remove()


@pytest.fixture
def store(app):
    store = VotingStore(db)
    store.create_tables()
    return store
