from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = [o.strip() for o in str(flask_app.config.get('ALLOWED_ORIGINS', '')).split(',') if o.strip()]
    if allowed_origins == ['*']:
        allowed_origins = '*'

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Engine collaborators shared by every session in this process
    from memory_match.services.memory import BackgroundScheduler, LeaderboardStore, ManualScheduler
    from memory_match.services.memory.storage import SqlRecordStorage

    if flask_app.config.get('TESTING') and not flask_app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        scheduler = ManualScheduler()
    else:
        scheduler = BackgroundScheduler(socketio, logger=flask_app.logger)
    storage = SqlRecordStorage(
        flask_app.config.get('LEADERBOARD_RECORD_NAME', 'memory-match-best-scores'),
        logger=flask_app.logger,
    )
    flask_app.extensions['memory_match'] = {
        'scheduler': scheduler,
        'leaderboard': LeaderboardStore(
            storage,
            size=int(flask_app.config.get('LEADERBOARD_SIZE', 5)),
            logger=flask_app.logger,
        ),
    }

    # Import and register blueprints here
    from memory_match.routes import main
    flask_app.register_blueprint(main)

    from memory_match.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from memory_match.api.leaderboard import leaderboard
    flask_app.register_blueprint(leaderboard, url_prefix='/api/leaderboard')

    from memory_match.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from memory_match import models  # noqa: F401
    with flask_app.app_context():
        db.create_all()

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the tables, clearing the best scores."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
