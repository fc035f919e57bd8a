import secrets
from datetime import datetime
from flask import request, current_app
from sqlalchemy.exc import IntegrityError

from itabaza.extensions import db
from itabaza.models.user_models import User
from itabaza.models.system_models import EmailVerification
from itabaza.utils.email_util import send_otp_email
from itabaza.utils.responses import success_response, error_response
from .auth_controller import issue_tokens


def _generate_otp(length=4):
    return ''.join(str(secrets.randbelow(10)) for _ in range(length))


def _mobile(value):
    """Mobile numbers may arrive as JSON numbers; anything else that is not a string is rejected."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return None


def send_email_otp():
    """Emails a 4-digit code; only its hash is kept, never the code itself."""
    data = request.get_json(silent=True) or {}
    email = User.normalize_email(data.get('email'))
    if not email:
        return error_response('Email is required', 400)

    otp = _generate_otp()
    verification = EmailVerification(
        email=email,
        expires_at=datetime.utcnow() + current_app.config['OTP_EXPIRES'],
    )
    verification.set_otp(otp)
    db.session.add(verification)
    db.session.commit()

    result = send_otp_email(email, otp)
    if not result.success:
        return error_response(result.message, 500, message='Could not send verification email')
    return success_response({'email': email}, message='Mail has been sent')


def verify_email_otp():
    data = request.get_json(silent=True) or {}
    email = User.normalize_email(data.get('email'))
    otp = str(data.get('otp') or '')
    if not email or not otp:
        return error_response('Email and otp are required', 400)

    verification = (
        EmailVerification.query.filter_by(email=email, verified_at=None)
        .order_by(EmailVerification.created_at.desc(), EmailVerification.id.desc())
        .first()
    )
    if not verification or not verification.check_otp(otp):
        return error_response('Invalid or expired code', 400)

    verification.verified_at = datetime.utcnow()
    db.session.commit()
    return success_response({'email': email}, message='Email verified')


def _is_email_verified(email):
    return EmailVerification.query.filter(
        EmailVerification.email == email,
        EmailVerification.verified_at.isnot(None),
    ).first() is not None


def signup():
    data = request.get_json(silent=True) or {}

    required_fields = ['first_name', 'email', 'mobile', 'password']
    if any(not data.get(field) for field in required_fields):
        return error_response('Missing required fields', 400)

    email = User.normalize_email(data['email'])
    if not email:
        return error_response('email must be a string', 400)
    if not isinstance(data['password'], str) or not isinstance(data['first_name'], str):
        return error_response('first_name and password must be strings', 400)
    mobile = _mobile(data['mobile'])
    if not mobile:
        return error_response('mobile must be a string or number', 400)

    if User.query.filter_by(email=email).first():
        return error_response('User already registered', 409)
    if User.query.filter_by(mobile=mobile).first():
        return error_response('Mobile number already registered', 409)
    if current_app.config.get('REQUIRE_EMAIL_VERIFICATION') and not _is_email_verified(email):
        return error_response('Email address has not been verified', 400)

    user = User(
        first_name=data['first_name'],
        last_name=data.get('last_name'),
        email=email,
        mobile=mobile,
    )
    try:
        user.set_password(data['password'])
    except ValueError as e:
        return error_response(str(e), 400)

    try:
        db.session.add(user)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return error_response('User already registered', 409)

    current_app.logger.info(f"Patient {user.id} signed up")
    return success_response({'id': user.id, 'email': user.email}, message='Signup Successful', status=201)


def signin():
    """Patients sign in with either their email or mobile number as `payload`."""
    data = request.get_json(silent=True) or {}
    payload = data.get('payload') or data.get('email')
    password = data.get('password')
    if not payload or not password:
        return error_response('Email/mobile and password are required', 400)
    if not isinstance(password, str):
        return error_response('password must be a string', 400)

    email = User.normalize_email(payload)
    user = User.query.filter_by(email=email).first() if email else None
    if not user:
        mobile = _mobile(payload)
        if not mobile:
            return error_response('payload must be an email or mobile number', 400)
        user = User.query.filter_by(mobile=mobile).first()
    if not user:
        return error_response('User not Found', 404)
    if not user.check_password(password):
        return error_response('Wrong Password', 401)

    return success_response(
        {
            **issue_tokens('patient', user),
            'id': user.id,
            'name': user.first_name,
            'last_name': user.last_name,
            'email': user.email,
            'mobile': user.mobile,
        },
        message='Login Successful',
    )
