from datetime import datetime, timezone
from flask import request, current_app
from flask_jwt_extended import (
    create_access_token, create_refresh_token,
    get_jwt_identity, get_jwt
)
from itabaza.extensions import db
from itabaza.models.user_models import User, Doctor, Admin
from itabaza.models.system_models import RevokedToken
from itabaza.utils.responses import success_response, error_response

ACCOUNT_MODELS = {
    'patient': User,
    'doctor': Doctor,
    'admin': Admin,
}


def issue_tokens(role, account):
    """Access + refresh token pair; identity is the row id, role goes in the claims."""
    claims = {'role': role}
    return {
        'access_token': create_access_token(identity=str(account.id), additional_claims=claims),
        'refresh_token': create_refresh_token(identity=str(account.id), additional_claims=claims),
    }


def authenticate(role, email, password):
    """Returns (account, error_message, status)."""
    if not isinstance(email, str) or not isinstance(password, str):
        return None, 'Email and password must be strings', 400
    model = ACCOUNT_MODELS[role]
    account = model.query.filter_by(email=User.normalize_email(email)).first()
    if not account or not account.check_password(password):
        return None, 'Invalid credentials', 401
    if role == 'doctor' and not account.status:
        return None, 'Invalid credentials or doctor not approved', 401
    return account, None, None


def login():
    """Unified login for patients, doctors and admins."""
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        return error_response('Email and password are required', 400)

    role = data.get('role', 'patient')
    if not isinstance(role, str) or role not in ACCOUNT_MODELS:
        return error_response('Invalid role', 400)

    account, error, status = authenticate(role, data['email'], data['password'])
    if error:
        current_app.logger.info(f"Failed {role} login for {data['email']}")
        return error_response(error, status)

    return success_response(
        {**issue_tokens(role, account), 'role': role, 'account': account.to_dict()},
        message='Login Successful',
    )


def logout():
    token = get_jwt()
    revoked_token = RevokedToken(
        jti=token['jti'],
        expires_at=datetime.fromtimestamp(token['exp'], tz=timezone.utc).replace(tzinfo=None),
    )
    db.session.add(revoked_token)
    db.session.commit()
    return success_response(message='Successfully logged out')


def refresh_token():
    role = get_jwt().get('role')
    model = ACCOUNT_MODELS.get(role)
    account = db.session.get(model, int(get_jwt_identity())) if model else None
    if not account:
        return error_response('Account not found', 403)

    access_token = create_access_token(identity=str(account.id), additional_claims={'role': role})
    return success_response({'access_token': access_token})


def get_current_account():
    role = get_jwt().get('role')
    model = ACCOUNT_MODELS.get(role)
    account = db.session.get(model, int(get_jwt_identity())) if model else None
    if not account:
        return error_response('Account not found', 404)
    return success_response({'role': role, 'account': account.to_dict()})
