import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///memory_match.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Comma separated origins for CORS and Socket.IO
    ALLOWED_ORIGINS = os.environ.get('ALLOWED_ORIGINS', 'http://localhost:5173,http://127.0.0.1:5173')
    # How long two flipped tiles stay visible before they are compared (ms)
    REVEAL_DELAY_MS = int(os.environ.get('REVEAL_DELAY_MS', '900'))
    # Session clock tick (seconds)
    CLOCK_TICK_SEC = float(os.environ.get('CLOCK_TICK_SEC', '1'))
    # Best scores kept per theme/difficulty
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '5'))
    LEADERBOARD_RECORD_NAME = os.environ.get('LEADERBOARD_RECORD_NAME', 'memory-match-best-scores')
    DEFAULT_DIFFICULTY = os.environ.get('DEFAULT_DIFFICULTY', 'easy')
    DEFAULT_THEME = os.environ.get('DEFAULT_THEME', 'animals')
    # A session with no socket views is ended after this grace period (seconds)
    SESSION_GRACE_SEC = float(os.environ.get('SESSION_GRACE_SEC', '30'))
    # A session only driven over HTTP is ended after this long without a request (seconds)
    SESSION_IDLE_SEC = float(os.environ.get('SESSION_IDLE_SEC', '900'))
