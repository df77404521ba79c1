"""Server-side pushes to the realtime groups.

Broadcasts are best-effort: they happen after the database commit and a
failure to emit is logged, never raised to the caller.
"""

from datetime import datetime, timezone

from flask import current_app

from worldstage import socketio


def game_room(game_id) -> str:
    return f"game_{game_id}"


def user_room(user_id) -> str:
    return f"user_{user_id}"


def timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _emit(event: str, payload: dict, room: str) -> None:
    try:
        socketio.emit(event, {**payload, 'timestamp': timestamp()}, to=room)
    except Exception:
        current_app.logger.exception(f"[notify] failed to emit {event} to {room}")


def broadcast_to_game(game_id, event: str, payload: dict) -> None:
    _emit(event, payload, game_room(game_id))


def send_notification_to_user(user_id, notification: dict) -> None:
    _emit('notification', notification, user_room(user_id))
