import os
from flask import Flask, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from itabaza.extensions import db, bcrypt, migrate, jwt, limiter, cors
from itabaza.utils.error_handlers import register_error_handlers, register_jwt_handlers
from itabaza.utils.responses import success_response, error_response
from itabaza.commands import register_commands
from config import config


def create_app(config_name=None):
    app = Flask(__name__)

    config_name = config_name or os.getenv('FLASK_CONFIG') or os.getenv('FLASK_ENV') or 'default'
    config_class = config.get(config_name, config['default'])
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    limiter.init_app(app)
    cors.init_app(
        app,
        origins=app.config['ALLOWED_ORIGINS'],
        supports_credentials=True,
        allow_headers=['Origin', 'X-Requested-With', 'Content-Type', 'Accept', 'Authorization'],
        methods=['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'],
    )

    config_class.init_app(app)

    # Models must be imported before create_all / migrations see the metadata
    from itabaza import models  # noqa: F401

    from itabaza.api import register_blueprints
    register_blueprints(app)

    register_error_handlers(app)
    register_jwt_handlers()
    register_commands(app)

    @app.route('/api/health', methods=['GET'])
    def health():
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError as e:
            current_app.logger.error(f"Health check failed: {e}")
            return error_response('Database connection failed', 500)
        return success_response({'status': 'Connected to database'})

    return app
