from flask import request

from itabaza.models.user_models import User, Doctor, Department
from itabaza.services.appointment_store import AppointmentStore
from itabaza.utils.responses import success_response, error_response


def get_appointment_statistics():
    return success_response(AppointmentStore.get_statistics())


def get_all_appointments():
    appointments = AppointmentStore.find_all()
    return success_response(appointments, total=len(appointments))


def get_pending_appointments():
    appointments = AppointmentStore.find_pending()
    return success_response(appointments, total=len(appointments))


def get_appointments_by_date(appointment_date):
    try:
        appointments = AppointmentStore.find_by_date(appointment_date)
    except ValueError as e:
        return error_response(str(e), 400)
    return success_response(appointments, total=len(appointments))


def platform_dashboard():
    """Platform-wide counts for the admin landing page."""
    return success_response({
        'total_users': User.query.count(),
        'total_doctors': Doctor.query.count(),
        'approved_doctors': Doctor.query.filter_by(status=True).count(),
        'pending_doctors': Doctor.query.filter_by(status=False).count(),
        'total_departments': Department.query.count(),
        'appointments': AppointmentStore.get_statistics(),
    })


def list_users():
    users = User.query.order_by(User.created_at.desc(), User.id.desc()).all()
    return success_response([u.to_dict() for u in users], total=len(users))


def list_doctors():
    query = Doctor.query
    status = request.args.get('status')
    if status == 'approved':
        query = query.filter_by(status=True)
    elif status == 'pending':
        query = query.filter_by(status=False)
    elif status not in (None, '', 'all'):
        return error_response("status must be one of: all, approved, pending", 400)
    doctors = query.order_by(Doctor.id).all()
    return success_response([d.to_dict() for d in doctors], total=len(doctors))
