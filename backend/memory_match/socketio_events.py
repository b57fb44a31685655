from flask import current_app, request
from flask_socketio import join_room, leave_room, emit
from memory_match import socketio
from memory_match.api.sessions import get_session, viewer_joined, viewer_left
from typing import Any, Dict, Optional, Set

# Session codes each socket has joined
_sid_to_codes: Dict[str, Set[str]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _payload(data: Any) -> Optional[dict]:
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _session_code(data: Any) -> Optional[str]:
    payload = _payload(data)
    code = payload.get('session_code') if payload is not None else None
    return code.upper() if isinstance(code, str) and code else None


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    # Every session this socket was watching loses a view; the last one
    # leaving starts the grace period before the session is ended
    app = current_app._get_current_object()
    for code in _sid_to_codes.pop(_get_sid(), set()):
        viewer_left(app, code)


def handle_join_session(data):
    session = get_session(_session_code(data))
    if not session:
        emit('error', {'message': 'A known session_code is required'})
        return
    room = f"session:{session.code}"
    join_room(room)
    joined = _sid_to_codes.setdefault(_get_sid(), set())
    if session.code not in joined:
        joined.add(session.code)
        viewer_joined(session.code)
    emit('joined', {'room': room})
    # Bring the new view up to date straight away
    emit('state_update', session.snapshot())


def handle_leave_session(data):
    session_code = _session_code(data)
    if not session_code:
        emit('error', {'message': 'session_code is required'})
        return
    room = f"session:{session_code}"
    leave_room(room)
    emit('left', {'room': room})
    joined = _sid_to_codes.get(_get_sid(), set())
    if session_code in joined:
        joined.discard(session_code)
        viewer_left(current_app._get_current_object(), session_code)


def handle_flip(data):
    session = get_session(_session_code(data))
    if not session:
        emit('error', {'message': 'A known session_code is required'})
        return
    tile_id = data.get('tile_id')
    if isinstance(tile_id, bool) or not isinstance(tile_id, int):
        emit('error', {'message': 'tile_id must be an integer'})
        return
    # Accepted flips are broadcast to the room by the session itself
    if not session.flip(tile_id):
        emit('flip_ignored', {'session_code': session.code, 'tile_id': tile_id})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'join_session': handle_join_session,
        'leave_session': handle_leave_session,
        'flip': handle_flip,
        'ping': handle_ping,
    }
    for event, handler in handlers.items():
        socketio.on_event(event, handler, namespace='/ws')
    if testing:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace='/')
