from flask import Blueprint, jsonify
from memory_match.services.memory import CUSTOM_THEME, DIFFICULTY_PAIRS, THEMES

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Memory Match server!'})

@main.route('/api/themes')
def list_themes():
    return jsonify({
        'themes': {name: list(symbols) for name, symbols in THEMES.items()},
        'custom_theme': CUSTOM_THEME,
        'difficulties': dict(DIFFICULTY_PAIRS),
    })
