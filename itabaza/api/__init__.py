from flask import Blueprint

auth_bp = Blueprint('auth', __name__)
user_bp = Blueprint('user', __name__)
doctor_bp = Blueprint('doctor', __name__)
department_bp = Blueprint('department', __name__)
appointment_bp = Blueprint('appointment', __name__)
enhanced_appointment_bp = Blueprint('enhanced_appointment', __name__)
email_confirmation_bp = Blueprint('email_confirmation', __name__)
admin_bp = Blueprint('admin', __name__)
dashboard_api_bp = Blueprint('dashboard_api', __name__)
admin_dashboard_bp = Blueprint('admin_dashboard', __name__)

URL_PREFIXES = [
    (auth_bp, '/auth'),
    (user_bp, '/user'),
    (doctor_bp, '/doctor'),
    (department_bp, '/department'),
    (appointment_bp, '/appointment'),
    (enhanced_appointment_bp, '/enhanced-appointment'),
    (email_confirmation_bp, '/email-confirmation'),
    (admin_bp, '/admin'),
    (dashboard_api_bp, '/api/dashboard'),
    (admin_dashboard_bp, '/api/admin'),
]


def register_blueprints(app):
    for blueprint, prefix in URL_PREFIXES:
        app.register_blueprint(blueprint, url_prefix=prefix)


from . import routes  # noqa: E402,F401
