import logging
import sys

from sqlalchemy import text

from worldstage import create_app, db, socketio

app = create_app()
logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))


def check_database(flask_app) -> None:
    """Exit when the database is unreachable; nothing works without it."""
    with flask_app.app_context():
        try:
            db.session.execute(text('SELECT 1'))
        except Exception:
            flask_app.logger.exception("[startup] failed to connect to the database")
            sys.exit(1)
        finally:
            db.session.remove()
    flask_app.logger.info("[startup] connected to the database")


if __name__ == '__main__':
    check_database(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, host='0.0.0.0', port=app.config['PORT'],
                 debug=app.config.get('ENVIRONMENT') == 'development', allow_unsafe_werkzeug=True)
