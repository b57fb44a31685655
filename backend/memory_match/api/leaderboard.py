from flask import Blueprint, jsonify, current_app

leaderboard = Blueprint('leaderboard', __name__)


@leaderboard.route('/<string:key>', methods=['GET'])
def read_leaderboard(key):
    """Best scores for a ``{theme}-{difficulty}`` key, fastest first."""
    store = current_app.extensions['memory_match']['leaderboard']
    entries = store.read(key)
    return jsonify({
        'key': key,
        'entries': [entry.to_dict() for entry in entries],
    })
