from datetime import datetime, timedelta, timezone

from flask import current_app
from jose import JWTError, jwt

from worldstage.services.errors import ConfigurationError, TokenError


def _secret():
    secret = current_app.config.get('JWT_SECRET')
    if not secret:
        current_app.logger.error("[auth] JWT_SECRET not configured")
        raise ConfigurationError()
    return secret


def create_access_token(user) -> str:
    """Sign a bearer token carrying the user's id, username and email."""
    secret = _secret()
    now = datetime.now(timezone.utc)
    ttl = timedelta(days=int(current_app.config.get('TOKEN_TTL_DAYS', 7)))
    payload = {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'iat': now,
        'exp': now + ttl,
    }
    return jwt.encode(payload, secret, algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256'))


def decode_access_token(token: str) -> dict:
    """Return the token claims or raise TokenError for a bad/expired token."""
    secret = _secret()
    try:
        claims = jwt.decode(token, secret, algorithms=[current_app.config.get('JWT_ALGORITHM', 'HS256')])
    except JWTError as exc:
        current_app.logger.info(f"[auth] token verification failed: {exc}")
        raise TokenError() from exc
    if not isinstance(claims.get('id'), int):
        raise TokenError()
    return claims


def token_from_header(header_value):
    """Extract the token from an ``Authorization: Bearer <token>`` header value."""
    if not header_value:
        return None
    parts = header_value.split()
    if len(parts) == 2 and parts[0].lower() == 'bearer':
        return parts[1]
    return None
