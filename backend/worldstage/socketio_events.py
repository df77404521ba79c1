from flask import current_app, request
from flask_socketio import ConnectionRefusedError, join_room, leave_room, emit
from typing import Any, Dict, Optional

from worldstage import socketio
from worldstage.services.errors import WorldStageError
from worldstage.services.notify import game_room, user_room, timestamp
from worldstage.services.tokens import decode_access_token, token_from_header


# Identity established at connect time, keyed by socket id
_sid_to_identity: Dict[str, Dict[str, Any]] = {}


def _get_sid() -> str:
    return request.sid  # type: ignore[attr-defined]


def _identity() -> Dict[str, Any]:
    return _sid_to_identity.get(_get_sid(), {})


def _game_id(data) -> Optional[int]:
    """Accept a bare game id or an object carrying ``gameId``/``game_id``."""
    if isinstance(data, dict):
        data = data.get('gameId', data.get('game_id'))
    if isinstance(data, bool):
        return None
    try:
        return int(data)
    except (TypeError, ValueError):
        return None


def _sender() -> Dict[str, Any]:
    ident = _identity()
    return {'fromUserId': ident.get('user_id'), 'fromUsername': ident.get('username')}


def handle_connect(auth=None):
    token = (auth or {}).get('token') if isinstance(auth, dict) else None
    token = token or token_from_header(request.headers.get('Authorization'))
    if not token:
        current_app.logger.info("[ws] connection rejected: no token provided")
        raise ConnectionRefusedError('Authentication error: No token provided')
    try:
        claims = decode_access_token(token)
    except WorldStageError:
        current_app.logger.info("[ws] connection rejected: invalid token")
        raise ConnectionRefusedError('Authentication error: Invalid token')

    _sid_to_identity[_get_sid()] = {'user_id': claims['id'], 'username': claims.get('username')}
    join_room(user_room(claims['id']))
    current_app.logger.info(f"[ws] user={claims['id']} connected sid={_get_sid()}")


def handle_disconnect(*args):
    # Room membership is torn down by the transport
    ident = _sid_to_identity.pop(_get_sid(), None)
    if ident:
        current_app.logger.info(f"[ws] user={ident['user_id']} disconnected")


def handle_join_game(data):
    game_id = _game_id(data)
    if game_id is None:
        current_app.logger.warning(f"[ws] join_game without a game id: {data!r}")
        return
    ident = _identity()
    room = game_room(game_id)
    join_room(room)
    emit('player_joined', {
        'userId': ident.get('user_id'),
        'username': ident.get('username'),
        'timestamp': timestamp(),
    }, to=room, include_self=False)
    emit('game_joined', {
        'gameId': game_id,
        'message': f"Successfully joined game {game_id}",
        'timestamp': timestamp(),
    })


def handle_leave_game(data):
    game_id = _game_id(data)
    if game_id is None:
        current_app.logger.warning(f"[ws] leave_game without a game id: {data!r}")
        return
    ident = _identity()
    room = game_room(game_id)
    leave_room(room)
    emit('player_left', {
        'userId': ident.get('user_id'),
        'username': ident.get('username'),
        'timestamp': timestamp(),
    }, to=room)


def handle_game_action(data):
    game_id = _game_id(data)
    if game_id is None or not isinstance(data, dict):
        current_app.logger.warning(f"[ws] game_action without a game id: {data!r}")
        return
    ident = _identity()
    current_app.logger.info(f"[ws] user={ident.get('user_id')} action={data.get('action')!r} game={game_id}")
    # Relayed verbatim to the whole room, sender included
    emit('game_update', {
        'userId': ident.get('user_id'),
        'username': ident.get('username'),
        'action': data.get('action'),
        'payload': data.get('payload'),
        'timestamp': timestamp(),
    }, to=game_room(game_id))


def handle_send_message(data):
    if not isinstance(data, dict) or data.get('toUserId') is None:
        current_app.logger.warning(f"[ws] send_message without a recipient: {data!r}")
        return
    to_user_id = data['toUserId']
    game_id = _game_id(data)
    emit('new_message', {
        **_sender(),
        'gameId': game_id,
        'subject': data.get('subject'),
        'message': data.get('message'),
        'timestamp': timestamp(),
    }, to=user_room(to_user_id))
    emit('message_sent', {
        'toUserId': to_user_id,
        'subject': data.get('subject'),
        'message': data.get('message'),
        'timestamp': timestamp(),
    })


def _relay_typing(event: str, data) -> None:
    if not isinstance(data, dict):
        return
    payload = {**_sender(), 'gameId': _game_id(data)}
    if data.get('toUserId') is not None:
        emit(event, payload, to=user_room(data['toUserId']))
    elif payload['gameId'] is not None:
        emit(event, payload, to=game_room(payload['gameId']), include_self=False)


def handle_typing_start(data):
    _relay_typing('user_typing', data)


def handle_typing_stop(data):
    _relay_typing('user_stopped_typing', data)


def handle_error(exc):
    # Per-event failures stay with the sender's socket; nothing is broadcast
    current_app.logger.error(f"[ws] error for user={_identity().get('user_id')}: {exc!r}")


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_game', handle_join_game, namespace=namespace)
    socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
    socketio.on_event('game_action', handle_game_action, namespace=namespace)
    socketio.on_event('send_message', handle_send_message, namespace=namespace)
    socketio.on_event('typing_start', handle_typing_start, namespace=namespace)
    socketio.on_event('typing_stop', handle_typing_stop, namespace=namespace)
    socketio.on_error_default(handle_error)
