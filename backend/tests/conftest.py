import os
import sys
import pytest

# Ensure the backend root (containing the `memory_match` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from memory_match import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ALLOWED_ORIGINS = '*'
    REVEAL_DELAY_MS = 900
    CLOCK_TICK_SEC = 1
    LEADERBOARD_SIZE = 5
    LEADERBOARD_RECORD_NAME = 'test-best-scores'
    DEFAULT_DIFFICULTY = 'easy'
    DEFAULT_THEME = 'animals'
    SESSION_GRACE_SEC = 2
    SESSION_IDLE_SEC = 600


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def scheduler(flask_app):
    """The ManualScheduler installed in TESTING mode."""
    return flask_app.extensions['memory_match']['scheduler']


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
