import os
import sys
from datetime import datetime, timedelta

import pytest

# Ensure the backend root (containing the `stuffhappens` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from stuffhappens import create_app, db, socketio
from stuffhappens.models import Card, User


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    BCRYPT_LOG_ROUNDS = 4
    CORS_ORIGINS = ['http://localhost:5173']
    ROUND_TIME_LIMIT_SEC = 30
    INITIAL_HAND_SIZE = 3
    CARDS_TO_WIN = 6
    MAX_WRONG_GUESSES = 3
    DEFAULT_THEME = 'university_life'
    THEMES = ('university_life', 'travel', 'sports', 'love_life', 'work_life')
    STALE_GAME_DAYS = 7
    CLEANUP_INTERVAL_SEC = 0


class FakeClock:
    """Stands in for the wall clock; tests move time forward explicitly."""

    def __init__(self, start=None):
        self.current = start or datetime(2026, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.current

    def advance(self, seconds):
        self.current += timedelta(seconds=seconds)


class LowestIdFirst:
    """Deterministic stand-in for the supplier's random source."""

    def sample(self, population, k):
        return sorted(population)[:k]


def _make_app(config):
    application = create_app(config)
    with application.app_context():
        # Ensure models are imported so tables are created
        import stuffhappens.models  # noqa: F401
        db.create_all()
    return application


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        import stuffhappens.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def file_app(tmp_path):
    """App on a file database so several threads get their own connections."""

    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'games.sqlite'}"

    application = _make_app(FileConfig)
    yield application
    with application.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture()
def engine(flask_app):
    return flask_app.extensions['game_engine']


@pytest.fixture()
def clock(flask_app):
    fake = FakeClock()
    flask_app.extensions['game_engine'].clock._now = fake
    return fake


@pytest.fixture()
def ordered_dealing(flask_app):
    flask_app.extensions['game_engine'].supplier._rng = LowestIdFirst()


def add_cards(severities, theme='university_life'):
    """Insert cards in the given order; with ordered dealing the first three form the hand."""
    cards = []
    for idx, severity in enumerate(severities, start=1):
        card = Card(
            name=f'{theme} card {idx} ({severity})',
            image_url=f'/images/{theme}/{idx:02d}.png',
            bad_luck_index=severity,
            theme=theme,
        )
        db.session.add(card)
        cards.append(card)
    db.session.commit()
    return cards


def add_user(username, password='password'):
    user = User(username=username, email=f'{username}@example.com')
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture()
def deck(flask_app):
    # Hand 20, 55, 80; then round cards in this order
    return add_cards([20, 55, 80, 55, 10, 90, 30, 60, 70, 5, 95, 40])


@pytest.fixture()
def alice(flask_app):
    return add_user('alice')


@pytest.fixture()
def bob(flask_app):
    return add_user('bob')


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def login(test_client, username, password='password'):
    return test_client.post('/api/sessions', json={'username': username, 'password': password})


@pytest.fixture()
def alice_client(flask_app, alice):
    test_client = flask_app.test_client()
    assert login(test_client, 'alice').status_code == 201
    return test_client


@pytest.fixture()
def sio_client(flask_app, alice_client):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=alice_client,
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
