from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from itabaza.extensions import db, jwt
from itabaza.utils.responses import ApiError, error_response


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def api_error(error):
        return error_response(error.message, error.status_code)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return error_response(error.description or error.name, error.code)

    @app.errorhandler(SQLAlchemyError)
    def database_error(error):
        db.session.rollback()
        current_app.logger.error(f"Database error: {error}")
        return error_response('Internal server error', 500)

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return http_error(error)
        db.session.rollback()
        current_app.logger.exception(f"Internal server error: {error}")
        return error_response('Internal server error', 500)


def register_jwt_handlers():
    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response(reason, 401, message='Authentication required')

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response(reason, 401, message='Invalid token')

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response('Token has expired', 401)

    @jwt.revoked_token_loader
    def revoked_token(jwt_header, jwt_payload):
        return error_response('Token has been revoked', 401)

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        from itabaza.models.system_models import RevokedToken
        jti = jwt_payload['jti']
        return RevokedToken.query.filter_by(jti=jti).first() is not None
