from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
from werkzeug.exceptions import HTTPException
import click
import redis
from worldstage.config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def _connect_cache(flask_app):
    """Return the message queue URL when the realtime cache answers, else None.

    The cache only fans Socket.IO events out across server processes, so an
    unreachable cache is logged and the server runs single-process.
    """
    url = flask_app.config.get('REDIS_URL')
    if not url:
        return None
    try:
        redis.Redis.from_url(url, socket_connect_timeout=2).ping()
    except redis.RedisError as exc:
        flask_app.logger.warning(f"[cache] Redis unavailable ({exc}); continuing without a message queue")
        return None
    flask_app.logger.info("[cache] connected to Redis")
    return url


def _register_error_handlers(flask_app):
    from worldstage.services.errors import WorldStageError

    @flask_app.errorhandler(WorldStageError)
    def handle_domain_error(exc):
        return jsonify({'success': False, 'message': exc.message}), exc.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'success': False, 'message': exc.description}), exc.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        db.session.rollback()
        flask_app.logger.exception(f"[error] {request.method} {request.path} failed")
        return jsonify({'success': False, 'message': 'Internal server error'}), 500


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('ALLOWED_ORIGINS') or []

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        message_queue=_connect_cache(flask_app),
    )

    # Import and register blueprints here
    from worldstage.main import main
    flask_app.register_blueprint(main, url_prefix='/api')

    from worldstage.api.auth import auth
    flask_app.register_blueprint(auth, url_prefix='/api/auth')

    from worldstage.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from worldstage.api.players import players
    flask_app.register_blueprint(players, url_prefix='/api/players')

    from worldstage.socketio_events import register_socketio_handlers
    register_socketio_handlers()

    _register_error_handlers(flask_app)

    # Bearer tokens instead of session cookies: every request is authenticated
    # from its Authorization header
    from worldstage.models import User
    from worldstage.services.errors import AuthenticationError
    from worldstage.services.tokens import decode_access_token, token_from_header

    @login_manager.request_loader
    def load_user_from_request(req):
        token = token_from_header(req.headers.get('Authorization'))
        if not token:
            return None
        claims = decode_access_token(token)
        user = db.session.get(User, claims['id'])
        if user is None or not user.is_active:
            return None
        return user

    @login_manager.unauthorized_handler
    def unauthorized():
        raise AuthenticationError('Access token required')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from worldstage.services.catalog import seed_catalog
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_catalog()

            # Seed users
            users = ['testuser1', 'testuser2', 'testuser3']
            for u in users:
                user = User(username=u, email=f"{u}@example.com")
                user.set_password('password')
                db.session.add(user)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('seed-catalog')
    def seed_catalog_command():
        """Adds any missing countries, building types and technologies."""
        from worldstage.services.catalog import seed_catalog
        with flask_app.app_context():
            added = seed_catalog()
            print(f"Catalog seeded: {added}")

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(seed_catalog_command)

    return flask_app
