import os


def _database_uri():
    if os.environ.get('DATABASE_URL'):
        return os.environ['DATABASE_URL']
    return 'postgresql://{user}:{password}@{host}:{port}/{name}'.format(
        user=os.environ.get('DB_USER', 'worldstage_user'),
        password=os.environ.get('DB_PASSWORD', 'password'),
        host=os.environ.get('DB_HOST', 'localhost'),
        port=os.environ.get('DB_PORT', '5432'),
        name=os.environ.get('DB_NAME', 'worldstage'),
    )


def _redis_url():
    if os.environ.get('REDIS_URL'):
        return os.environ['REDIS_URL']
    host = os.environ.get('REDIS_HOST', 'localhost')
    port = os.environ.get('REDIS_PORT', '6379')
    password = os.environ.get('REDIS_PASSWORD')
    auth = f":{password}@" if password else ''
    return f"redis://{auth}{host}:{port}/0"


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_size': int(os.environ.get('DB_POOL_SIZE', '20')),
        'pool_pre_ping': True,
    }
    # Token signing; no default so a missing secret fails closed
    JWT_SECRET = os.environ.get('JWT_SECRET')
    JWT_ALGORITHM = 'HS256'
    TOKEN_TTL_DAYS = int(os.environ.get('TOKEN_TTL_DAYS', '7'))
    # Optional realtime cache (Socket.IO message queue). None disables.
    REDIS_URL = _redis_url()
    ALLOWED_ORIGINS = [
        o.strip() for o in os.environ.get('ALLOWED_ORIGINS', 'http://localhost:5173').split(',') if o.strip()
    ]
    PORT = int(os.environ.get('PORT', '3001'))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    ENVIRONMENT = os.environ.get('FLASK_ENV', 'development')
    # Gate game start on every player being ready (off: any non-empty game may start)
    REQUIRE_ALL_READY = os.environ.get('REQUIRE_ALL_READY', '0').lower() in ('1', 'true', 'yes')
