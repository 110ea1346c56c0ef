from pathlib import Path
import sys
import os

import pytest
from sqlalchemy.exc import OperationalError
from werkzeug.security import generate_password_hash

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Safety default for any module-level app creation during test imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from ballotbox import create_app
from ballotbox.extensions import db
from ballotbox.models import Ballot, BallotItem, User
from ballotbox.services.security import generate_api_token


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "SECRET_KEY": "test-secret",
        }
    )

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session


def _make_user(db_session, username):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=generate_password_hash("correct-horse", method="pbkdf2:sha256"),
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def voter(db_session):
    return _make_user(db_session, "voter1")


@pytest.fixture()
def other_voter(db_session):
    return _make_user(db_session, "voter2")


@pytest.fixture()
def ballot(db_session, voter):
    ballot = Ballot(title="Favourite language", creator_id=voter.id)
    db_session.add(ballot)
    db_session.flush()

    db_session.add_all(
        [
            BallotItem(ballot_id=ballot.id, title="Go", description="Gophers"),
            BallotItem(ballot_id=ballot.id, title="Python", description="Snakes"),
        ]
    )
    db_session.commit()
    return ballot


@pytest.fixture()
def options(ballot):
    return sorted(ballot.items, key=lambda item: item.id)


@pytest.fixture()
def inactive_ballot(db_session, voter):
    ballot = Ballot(title="Closed poll", creator_id=voter.id, is_active=False)
    db_session.add(ballot)
    db_session.flush()
    db_session.add(BallotItem(ballot_id=ballot.id, title="Only option"))
    db_session.commit()
    return ballot


@pytest.fixture()
def auth_headers(app, voter):
    return {"Authorization": f"Bearer {generate_api_token(voter)}"}


class _UnreachableQuery:
    def _fail(self, *args, **kwargs):
        raise OperationalError(
            "SELECT", {}, Exception("(2013, 'Lost connection to MySQL server')")
        )

    filter = filter_by = get = _fail


@pytest.fixture()
def break_query(monkeypatch):
    """Make ``Model.query`` fail as if the database went away."""

    def _break(model):
        monkeypatch.setattr(model, "query", _UnreachableQuery())

    return _break
