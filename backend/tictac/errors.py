from functools import wraps
from typing import Iterable, Optional

from flask import jsonify, current_app

from tictac import db


class ApiError(Exception):
    """Error that maps directly onto a JSON error response."""
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(ApiError):
    status_code = 400
    message = 'Missing required fields'

    def __init__(self, missing: Iterable[str] = (), message: Optional[str] = None):
        super().__init__(message)
        self.missing = list(missing)

    def to_dict(self):
        payload = super().to_dict()
        if self.missing:
            payload['missing'] = self.missing
        return payload


class UnauthorizedError(ApiError):
    status_code = 401
    message = 'Unauthorized'


class ForbiddenError(ApiError):
    status_code = 403
    message = 'Forbidden'


class NotFoundError(ApiError):
    status_code = 404
    message = 'Not found'


class InternalError(ApiError):
    """Unexpected failure; details go to the log, never to the client."""
    status_code = 500


def json_errors(label: str):
    """Log unexpected exceptions in a view and answer with a generic 500."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ApiError:
                raise
            except Exception as exc:
                current_app.logger.exception(f"[{label}] unexpected error: {exc}")
                db.session.rollback()
                raise InternalError() from exc
        return wrapped
    return decorator


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        return jsonify(err.to_dict()), err.status_code
