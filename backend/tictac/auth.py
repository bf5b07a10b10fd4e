from functools import wraps
from flask_login import current_user
from tictac.errors import UnauthorizedError


def is_admin_session() -> bool:
    return bool(current_user.is_authenticated and getattr(current_user, 'is_admin', False))


def admin_required(view):
    """Allow the view only for a logged-in admin; 401 otherwise."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            raise UnauthorizedError('No admin session')
        if not is_admin_session():
            raise UnauthorizedError('Invalid admin session')
        return view(*args, **kwargs)
    return wrapped
