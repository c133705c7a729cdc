from flask import Flask, current_app, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def get_engine():
    return current_app.extensions['game_engine']


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One engine per app; it owns the per-game locks
    from stuffhappens.services.games import GameEngine
    flask_app.extensions['game_engine'] = GameEngine.from_config(flask_app.config)

    # Import and register blueprints here
    from stuffhappens.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from stuffhappens.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from stuffhappens.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    # Flask-Login user loader
    from stuffhappens.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        from stuffhappens.errors import Unauthenticated
        exc = Unauthenticated()
        return jsonify(exc.to_dict()), exc.status_code

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from stuffhappens.seed import seed_cards, seed_users
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            users = seed_users()
            cards = seed_cards()
            db.session.commit()
            click.echo(f'Database has been reset and seeded! users={users} cards={cards}')

    @click.command('cleanup-games')
    @click.option('--days', type=int, default=None, help='Remove playing games older than this many days.')
    def cleanup_games_command(days):
        """Deletes playing games that have been idle for too long."""
        from stuffhappens.services.games.housekeeping import run_cleanup
        removed = run_cleanup(flask_app, days)
        click.echo(f'Removed {removed} stale game(s).')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(cleanup_games_command)

    return flask_app
