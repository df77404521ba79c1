import os
import sys
import pytest
from flask import g

# Ensure the backend root (containing the `worldstage` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from worldstage import create_app, db, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    JWT_SECRET = 'test-jwt-secret'
    JWT_ALGORITHM = 'HS256'
    TOKEN_TTL_DAYS = 7
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = None
    ALLOWED_ORIGINS = ['http://localhost:5173']
    REQUIRE_ALL_READY = False
    ENVIRONMENT = 'test'


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)

    @application.teardown_request
    def forget_login(exc):
        # Requests reuse the app context pushed below, and with it `g`, so
        # drop the user Flask-Login cached for the previous bearer token
        g.pop('_login_user', None)

    with application.app_context():
        # Ensure models are imported so tables are created
        import worldstage.models  # noqa: F401
        from worldstage.services.catalog import seed_catalog
        db.create_all()
        seed_catalog()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


def register(client, username, password='password123'):
    """Register a user and return (user dict, auth headers)."""
    res = client.post('/api/auth/register', json={
        'username': username,
        'email': f'{username}@example.com',
        'password': password,
    })
    assert res.status_code == 201, res.get_json()
    body = res.get_json()
    return body['user'], {'Authorization': f"Bearer {body['token']}"}


@pytest.fixture()
def alice(client):
    return register(client, 'alice')


@pytest.fixture()
def bob(client):
    return register(client, 'bob')


@pytest.fixture()
def carol(client):
    return register(client, 'carol')


def create_game(client, headers, **overrides):
    payload = {'name': 'Test World'}
    payload.update(overrides)
    res = client.post('/api/games', json=payload, headers=headers)
    assert res.status_code == 201, res.get_json()
    return res.get_json()['game']


def join_game(client, headers, game_id, **body):
    return client.post(f'/api/games/{game_id}/join', json=body, headers=headers)


@pytest.fixture()
def player(client, alice):
    """Alice's player in a fresh game: (player dict, headers)."""
    _, headers = alice
    game = create_game(client, headers)
    res = join_game(client, headers, game['id'], nationName='Aland', leaderName='Alice')
    assert res.status_code == 200, res.get_json()
    return res.get_json()['player'], headers


def sio_connect(flask_app, headers=None, auth=None):
    """Open a Socket.IO test client, authenticating with the bearer token when given."""
    if auth is None and headers:
        auth = {'token': headers['Authorization'].split()[1]}
    return socketio.test_client(flask_app, flask_test_client=flask_app.test_client(), auth=auth)
