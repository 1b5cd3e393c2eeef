from functools import wraps

from flask_login import current_user, login_required

from billing.errors import AuthenticationError, PermissionDenied


def role_required(*roles):
    """Restrict a view to authenticated users holding one of ``roles``."""
    def decorator(view):
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            if current_user.role not in roles:
                raise PermissionDenied()
            return view(*args, **kwargs)
        return wrapped
    return decorator


def unauthorized():
    raise AuthenticationError()
