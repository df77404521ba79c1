"""Domain errors raised by services and mapped to HTTP responses in create_app."""


class WorldStageError(Exception):
    status_code = 400
    default_message = 'Bad request'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(WorldStageError):
    status_code = 400
    default_message = 'Invalid request'


class AuthenticationError(WorldStageError):
    status_code = 401
    default_message = 'Access token required'


class TokenError(WorldStageError):
    status_code = 403
    default_message = 'Invalid or expired token'


class AccessDenied(WorldStageError):
    status_code = 403
    default_message = 'Access denied'


class NotFound(WorldStageError):
    status_code = 404
    default_message = 'Not found'


class InvalidState(WorldStageError):
    status_code = 400
    default_message = 'Invalid state'


class InsufficientResources(WorldStageError):
    status_code = 400
    default_message = 'Insufficient resources'


class ConfigurationError(WorldStageError):
    status_code = 500
    default_message = 'Server configuration error'
