from datetime import datetime, timedelta, timezone

from jose import jwt


def test_register_returns_user_and_token(client):
    res = client.post('/api/auth/register', json={
        'username': 'alice', 'email': 'alice@example.com', 'password': 'secret1',
    })
    assert res.status_code == 201
    body = res.get_json()
    assert body['success'] is True
    assert body['user']['username'] == 'alice'
    assert body['token']
    claims = jwt.decode(body['token'], 'test-jwt-secret', algorithms=['HS256'])
    assert claims['id'] == body['user']['id']
    assert claims['username'] == 'alice'
    assert claims['email'] == 'alice@example.com'
    # Seven-day validity window
    assert claims['exp'] - claims['iat'] == 7 * 24 * 3600


def test_register_validation(client):
    res = client.post('/api/auth/register', json={'username': 'alice', 'password': 'secret1'})
    assert res.status_code == 400
    assert res.get_json()['success'] is False

    res = client.post('/api/auth/register', json={
        'username': 'alice', 'email': 'alice@example.com', 'password': 'short',
    })
    assert res.status_code == 400
    assert 'at least 6' in res.get_json()['message']


def test_register_duplicate_username_or_email(client, alice):
    res = client.post('/api/auth/register', json={
        'username': 'alice', 'email': 'other@example.com', 'password': 'secret1',
    })
    assert res.status_code == 400
    res = client.post('/api/auth/register', json={
        'username': 'other', 'email': 'alice@example.com', 'password': 'secret1',
    })
    assert res.status_code == 400
    assert res.get_json()['message'] == 'Username or email already exists'


def test_login_and_profile(client, alice):
    res = client.post('/api/auth/login', json={'username': 'alice', 'password': 'password123'})
    assert res.status_code == 200
    body = res.get_json()
    assert body['success'] is True
    # First login: no previous login recorded
    assert body['user']['lastLogin'] is None

    headers = {'Authorization': f"Bearer {body['token']}"}
    res = client.get('/api/auth/profile', headers=headers)
    assert res.status_code == 200
    profile = res.get_json()['user']
    assert profile['username'] == 'alice'
    assert profile['lastLogin'] is not None


def test_each_request_resolves_its_own_token(client, alice, bob):
    _, a_headers = alice
    _, b_headers = bob
    for headers, expected in ((a_headers, 'alice'), (b_headers, 'bob'), (a_headers, 'alice')):
        res = client.get('/api/auth/profile', headers=headers)
        assert res.get_json()['user']['username'] == expected
    # A token-less request after authenticated ones is still rejected
    assert client.get('/api/auth/profile').status_code == 401


def test_login_rejects_bad_credentials(client, alice):
    res = client.post('/api/auth/login', json={'username': 'alice', 'password': 'wrong-password'})
    assert res.status_code == 401
    assert res.get_json()['message'] == 'Invalid username or password'

    res = client.post('/api/auth/login', json={'username': 'nobody', 'password': 'password123'})
    assert res.status_code == 401

    res = client.post('/api/auth/login', json={'username': 'alice'})
    assert res.status_code == 400


def test_missing_token_is_unauthorized(client):
    res = client.get('/api/auth/profile')
    assert res.status_code == 401
    assert res.get_json()['message'] == 'Access token required'
    assert client.get('/api/games').status_code == 401


def test_invalid_token_is_forbidden(client):
    res = client.get('/api/games', headers={'Authorization': 'Bearer not-a-token'})
    assert res.status_code == 403
    assert res.get_json()['message'] == 'Invalid or expired token'


def test_expired_token_is_forbidden(client, alice):
    user, _ = alice
    past = datetime.now(timezone.utc) - timedelta(days=8)
    token = jwt.encode(
        {'id': user['id'], 'username': 'alice', 'email': 'alice@example.com',
         'iat': past, 'exp': past + timedelta(days=7)},
        'test-jwt-secret', algorithm='HS256',
    )
    res = client.get('/api/auth/profile', headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 403


def test_token_signed_with_other_secret_is_forbidden(client, alice):
    user, _ = alice
    token = jwt.encode({'id': user['id'], 'username': 'alice'}, 'some-other-secret', algorithm='HS256')
    res = client.get('/api/auth/profile', headers={'Authorization': f'Bearer {token}'})
    assert res.status_code == 403


def test_unset_signing_secret_fails_closed(flask_app, client, alice):
    _, headers = alice
    flask_app.config['JWT_SECRET'] = None
    res = client.get('/api/auth/profile', headers=headers)
    assert res.status_code == 500
    assert res.get_json()['message'] == 'Server configuration error'

    res = client.post('/api/auth/login', json={'username': 'alice', 'password': 'password123'})
    assert res.status_code == 500


def test_health_is_public(client):
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.get_json()['status'] == 'ok'
