from functools import wraps
from flask import current_app
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from itabaza.utils.responses import ApiError, error_response

ROLES = ('patient', 'doctor', 'admin')


def current_role():
    return get_jwt().get('role')


def role_required(*roles):
    """Require a valid access token whose `role` claim is one of `roles`."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            verify_jwt_in_request()
            role = current_role()
            if role not in roles:
                current_app.logger.warning(
                    f"Role '{role}' (id={get_jwt_identity()}) denied on {f.__name__}"
                )
                return error_response('Permission denied', 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def ensure_owner(role, entity_id):
    """Admins pass; otherwise the token must belong to `role` with the same id."""
    token_role = current_role()
    if token_role == 'admin':
        return
    if token_role != role or str(get_jwt_identity()) != str(entity_id):
        raise ApiError('Access denied', 403)
