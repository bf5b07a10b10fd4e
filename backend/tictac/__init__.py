from flask import Flask
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

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # One presence table per application, alive as long as the process
    from tictac.services.presence import PresenceStore
    flask_app.extensions['presence'] = PresenceStore()

    # Reject suspicious input before any handler runs; add security headers
    from tictac.security import register_request_filters
    register_request_filters(flask_app)

    from tictac.errors import register_error_handlers
    register_error_handlers(flask_app)

    from tictac.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from tictac.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from tictac.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from tictac.models import User

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, user_id)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            for name in ('player1', 'player2'):
                user = User(username=name)
                user.set_password('password')
                db.session.add(user)
            admin = User(username='admin', is_admin=True)
            admin.set_password('admin')
            db.session.add(admin)

            db.session.commit()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app


def get_presence_store():
    from flask import current_app
    return current_app.extensions['presence']
