from flask import Blueprint, jsonify, request, current_app
from memory_match import socketio
from memory_match.services.memory import CUSTOM_THEME, DIFFICULTY_PAIRS, THEMES, MemorySession
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict, Optional
import itertools
import random
import string


sessions = Blueprint('sessions', __name__)

# Live sessions for this process, keyed by session code
_sessions: Dict[str, MemorySession] = {}
# Sockets currently in each session's room
_viewers: Dict[str, int] = {}
# Latest scheduled end per session; an older runner finding another token backs off
_end_tokens: Dict[str, int] = {}
_end_counter = itertools.count(1)


def generate_session_code(length=4):
    """Generate a unique, short session code."""
    while True:
        code = ''.join(random.choices(string.ascii_uppercase + string.digits, k=length))
        if code not in _sessions:
            return code


def get_session(code) -> Optional[MemorySession]:
    if not code or not isinstance(code, str):
        return None
    return _sessions.get(code.upper())


def _room(code: str) -> str:
    return f"session:{code}"


def _emitters(code: str):
    def on_signal(name: str) -> None:
        socketio.emit('signal', {'session_code': code, 'signal': name}, to=_room(code), namespace='/ws')

    def on_change(snapshot: dict) -> None:
        socketio.emit('state_update', snapshot, to=_room(code), namespace='/ws')

    return on_signal, on_change


# ---- Session lifecycle helpers ----

def end_session(code: str) -> Optional[MemorySession]:
    """Stop the session, forget it and tell any remaining views."""
    session = _sessions.pop(code, None)
    _viewers.pop(code, None)
    _end_tokens.pop(code, None)
    if session:
        session.close()
        socketio.emit('session_ended', {'session_code': code}, to=_room(code), namespace='/ws')
    return session


def schedule_end_if_abandoned(app, code: str, delay: float) -> None:
    """End ``code`` after ``delay`` seconds unless a view joins or it is touched again."""
    if code not in _sessions or _viewers.get(code, 0) > 0:
        return
    token = next(_end_counter)
    _end_tokens[code] = token

    def _runner():
        if _viewers.get(code, 0) == 0 and _end_tokens.get(code) == token:
            app.logger.info(f"[session-expire] session={code} after {delay}s without a view")
            end_session(code)

    app.extensions['memory_match']['scheduler'].call_later(delay, _runner)


def cancel_scheduled_end(code: str) -> None:
    _end_tokens.pop(code, None)


def viewer_joined(code: str) -> None:
    _viewers[code] = _viewers.get(code, 0) + 1
    cancel_scheduled_end(code)


def viewer_left(app, code: str) -> None:
    _viewers[code] = max(0, _viewers.get(code, 0) - 1)
    if _viewers[code] == 0:
        schedule_end_if_abandoned(app, code, float(app.config.get('SESSION_GRACE_SEC', 30)))


def _touch(session: MemorySession) -> None:
    # Sessions driven over HTTP alone expire after an idle period
    app = current_app._get_current_object()
    schedule_end_if_abandoned(app, session.code, float(app.config.get('SESSION_IDLE_SEC', 900)))


# ---- Request helpers ----

def _json_body() -> Optional[dict]:
    """The JSON object sent with the request, {} when absent, None when not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _validate_settings(data: dict) -> Optional[str]:
    difficulty = data.get('difficulty')
    theme = data.get('theme')
    if difficulty is not None and (not isinstance(difficulty, str) or difficulty not in DIFFICULTY_PAIRS):
        return f"Unknown difficulty '{difficulty}'"
    if theme is not None and (not isinstance(theme, str) or (theme != CUSTOM_THEME and theme not in THEMES)):
        return f"Unknown theme '{theme}'"
    custom = data.get('custom_symbols')
    if custom is not None and not isinstance(custom, (str, list)):
        return 'custom_symbols must be a string or a list'
    return None


@sessions.route('/create', methods=['POST'])
def create_session():
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    error = _validate_settings(data)
    if error:
        return jsonify({'error': error}), 400

    cfg = current_app.config
    engine = current_app.extensions['memory_match']
    code = generate_session_code()
    on_signal, on_change = _emitters(code)
    session = MemorySession(
        engine['scheduler'],
        engine['leaderboard'],
        code=code,
        difficulty=data.get('difficulty') or cfg.get('DEFAULT_DIFFICULTY', 'easy'),
        theme=data.get('theme') or cfg.get('DEFAULT_THEME', 'animals'),
        custom_symbols=data.get('custom_symbols'),
        reveal_delay=int(cfg.get('REVEAL_DELAY_MS', 900)) / 1000.0,
        tick_interval=float(cfg.get('CLOCK_TICK_SEC', 1)),
        on_signal=on_signal,
        on_change=on_change,
        logger=current_app.logger,
    )
    _sessions[code] = session
    _touch(session)
    current_app.logger.info(f"[session-create] session={code} key={session.leaderboard_key}")
    return jsonify(session.snapshot()), 201


@sessions.route('/<string:session_code>/state', methods=['GET'])
def get_state(session_code):
    session = get_session(session_code)
    if not session:
        return jsonify({'error': 'Session not found'}), 404
    _touch(session)
    return jsonify(session.snapshot())


@sessions.route('/<string:session_code>/flip', methods=['POST'])
def flip_tile(session_code):
    session = get_session(session_code)
    if not session:
        return jsonify({'error': 'Session not found'}), 404
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    tile_id = data.get('tile_id')
    if isinstance(tile_id, bool) or not isinstance(tile_id, int):
        return jsonify({'error': 'tile_id must be an integer'}), 400
    _touch(session)
    accepted = session.flip(tile_id)
    payload = session.snapshot()
    payload['accepted'] = accepted
    return jsonify(payload)


@sessions.route('/<string:session_code>/configure', methods=['POST'])
def configure_session(session_code):
    session = get_session(session_code)
    if not session:
        return jsonify({'error': 'Session not found'}), 404
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    error = _validate_settings(data)
    if error:
        return jsonify({'error': error}), 400
    _touch(session)
    session.configure(data.get('difficulty'), data.get('theme'), data.get('custom_symbols'))
    return jsonify(session.snapshot())


@sessions.route('/<string:session_code>/restart', methods=['POST'])
def restart_session(session_code):
    session = get_session(session_code)
    if not session:
        return jsonify({'error': 'Session not found'}), 404
    _touch(session)
    session.restart()
    return jsonify(session.snapshot())


@sessions.route('/<string:session_code>/finish', methods=['POST'])
def finish_session(session_code):
    session = get_session(session_code)
    if not session:
        return jsonify({'error': 'Session not found'}), 404
    data = _json_body()
    if data is None:
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    name = data.get('name')
    if name is not None and not isinstance(name, str):
        return jsonify({'error': 'name must be a string'}), 400
    _touch(session)
    key = session.leaderboard_key
    try:
        ranked = session.finish_win(name)
    except SQLAlchemyError as e:
        return jsonify({'error': str(e)}), 500
    if ranked is None:
        return jsonify({'error': 'Session has not been won yet'}), 400
    return jsonify({
        'leaderboard_key': key,
        'leaderboard': [entry.to_dict() for entry in ranked],
        'state': session.snapshot(),
    })


@sessions.route('/<string:session_code>', methods=['DELETE'])
def delete_session(session_code):
    session = end_session(session_code.upper())
    if not session:
        return jsonify({'error': 'Session not found'}), 404
    return jsonify({'message': f'Session {session.code} ended'})
