from worldstage import socketio

from conftest import sio_connect


def _names(events):
    return [e['name'] for e in events]


def _first(events, name):
    return next(e['args'][0] for e in events if e['name'] == name)


def test_connection_without_token_is_refused(flask_app):
    sio = socketio.test_client(flask_app)
    assert not sio.is_connected()


def test_connection_with_bad_token_is_refused(flask_app):
    sio = sio_connect(flask_app, auth={'token': 'garbage'})
    assert not sio.is_connected()


def test_connection_with_authorization_header(flask_app, alice):
    _, headers = alice
    sio = socketio.test_client(flask_app, headers=headers)
    assert sio.is_connected()
    sio.disconnect()


def test_join_game_confirms_and_notifies_peers(flask_app, alice, bob):
    a_user, a_headers = alice
    b_user, b_headers = bob
    a = sio_connect(flask_app, a_headers)
    b = sio_connect(flask_app, b_headers)
    assert a.is_connected() and b.is_connected()

    a.emit('join_game', 7)
    joined = a.get_received()
    assert _first(joined, 'game_joined')['gameId'] == 7
    # Sender does not get its own player_joined
    assert 'player_joined' not in _names(joined)

    b.emit('join_game', {'gameId': 7})
    peer = _first(a.get_received(), 'player_joined')
    assert peer['userId'] == b_user['id']
    assert peer['username'] == 'bob'
    assert 'game_joined' in _names(b.get_received())

    b.emit('leave_game', 7)
    left = _first(a.get_received(), 'player_left')
    assert left['username'] == 'bob'
    a.disconnect()
    b.disconnect()


def test_game_action_is_relayed_to_everyone_including_sender(flask_app, alice, bob):
    a_user, a_headers = alice
    _, b_headers = bob
    a = sio_connect(flask_app, a_headers)
    b = sio_connect(flask_app, b_headers)
    a.emit('join_game', 3)
    b.emit('join_game', 3)
    a.get_received()
    b.get_received()

    a.emit('game_action', {'gameId': 3, 'action': 'declare_war', 'payload': {'target': 'bob', 'odd': [1, 2]}})
    for client in (a, b):
        update = _first(client.get_received(), 'game_update')
        assert update['action'] == 'declare_war'
        assert update['payload'] == {'target': 'bob', 'odd': [1, 2]}
        assert update['userId'] == a_user['id']
    a.disconnect()
    b.disconnect()


def test_game_action_only_reaches_its_room(flask_app, alice, bob):
    _, a_headers = alice
    _, b_headers = bob
    a = sio_connect(flask_app, a_headers)
    b = sio_connect(flask_app, b_headers)
    a.emit('join_game', 1)
    b.emit('join_game', 2)
    b.get_received()

    a.emit('game_action', {'gameId': 1, 'action': 'build'})
    assert 'game_update' not in _names(b.get_received())
    a.disconnect()
    b.disconnect()


def test_direct_message_and_receipt(flask_app, alice, bob):
    a_user, a_headers = alice
    b_user, b_headers = bob
    a = sio_connect(flask_app, a_headers)
    b = sio_connect(flask_app, b_headers)
    a.get_received()
    b.get_received()

    a.emit('send_message', {'gameId': 5, 'toUserId': b_user['id'], 'subject': 'Treaty', 'message': 'Peace?'})
    delivered = _first(b.get_received(), 'new_message')
    assert delivered['fromUserId'] == a_user['id']
    assert delivered['fromUsername'] == 'alice'
    assert delivered['message'] == 'Peace?'
    assert delivered['gameId'] == 5

    receipt = _first(a.get_received(), 'message_sent')
    assert receipt['toUserId'] == b_user['id']
    assert receipt['subject'] == 'Treaty'
    a.disconnect()
    b.disconnect()


def test_typing_indicators(flask_app, alice, bob):
    a_user, a_headers = alice
    b_user, b_headers = bob
    a = sio_connect(flask_app, a_headers)
    b = sio_connect(flask_app, b_headers)
    a.emit('join_game', 9)
    b.emit('join_game', 9)
    a.get_received()
    b.get_received()

    # Game chat: everyone but the typist
    a.emit('typing_start', {'gameId': 9})
    assert _first(b.get_received(), 'user_typing')['fromUserId'] == a_user['id']
    assert 'user_typing' not in _names(a.get_received())

    # Private: only the recipient's user group
    b.emit('typing_stop', {'gameId': 9, 'toUserId': a_user['id']})
    assert _first(a.get_received(), 'user_stopped_typing')['fromUsername'] == 'bob'
    a.disconnect()
    b.disconnect()


def test_malformed_payloads_are_dropped(flask_app, alice):
    _, headers = alice
    sio = sio_connect(flask_app, headers)
    sio.get_received()
    sio.emit('join_game', {'nothing': 'here'})
    sio.emit('game_action', 'not-an-object')
    sio.emit('send_message', {'message': 'to nobody'})
    assert sio.get_received() == []
    assert sio.is_connected()
    sio.disconnect()
