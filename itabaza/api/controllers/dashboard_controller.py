from datetime import date
from flask import request
from flask_jwt_extended import get_jwt_identity

from itabaza.services.appointment_store import AppointmentStore
from itabaza.utils.decorators import current_role, ensure_owner
from itabaza.utils.responses import ApiError, success_response, error_response
from .appointment_controller import patient_view, view_for_caller

DEFAULT_PAGE_SIZE = 10


def _today():
    return date.today().isoformat()


def _positive_int(name, default):
    raw = request.args.get(name)
    if raw in (None, ''):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ApiError(f'{name} must be an integer', 400)
    if value < 1:
        raise ApiError(f'{name} must be positive', 400)
    return value


def _filter_status(appointments, status):
    if not status or status == 'all':
        return appointments
    if status == 'booked':
        return [a for a in appointments if a['status'] != 'cancelled']
    return [a for a in appointments if a['status'] == status]


def _paginate(items):
    """Slice by ?page=&limit=; with neither given everything is returned."""
    if 'page' not in request.args and 'limit' not in request.args:
        return items, None
    page = _positive_int('page', 1)
    limit = _positive_int('limit', DEFAULT_PAGE_SIZE)
    start = (page - 1) * limit
    return items[start:start + limit], {'page': page, 'limit': limit, 'total': len(items)}


def _paged_response(items):
    page, pagination = _paginate(items)
    if pagination:
        return success_response(page, pagination=pagination)
    return success_response(page)


def doctor_dashboard(doctor_id):
    ensure_owner('doctor', doctor_id)
    appointments = AppointmentStore.find_by_doctor_id(doctor_id)

    today = _today()
    month_start = date.today().replace(day=1).isoformat()
    monthly_revenue = sum(
        a['payment_amount'] for a in appointments
        if a['payment_status'] and a['payment_amount'] is not None and a['appointment_date'] >= month_start
    )

    return success_response({
        'total_appointments': len(appointments),
        'pending_appointments': sum(1 for a in appointments if a['status'] == 'pending'),
        'completed_appointments': sum(1 for a in appointments if a['status'] == 'completed'),
        'today_appointments': sum(1 for a in appointments if a['appointment_date'] == today),
        'upcoming_appointments': sum(1 for a in appointments if a['appointment_date'] > today),
        'total_patients': len({a['patient_id'] for a in appointments}),
        'video_call_appointments': sum(1 for a in appointments if a['consultation_type'] == 'video-call'),
        'monthly_revenue': monthly_revenue,
        'total_documents': 0,
        'support_tickets': 0,
    })


def patient_dashboard(patient_id):
    ensure_owner('patient', patient_id)
    appointments = AppointmentStore.find_by_patient_id(patient_id)
    today = _today()

    return success_response({
        'total_appointments': len(appointments),
        'upcoming_appointments': sum(
            1 for a in appointments if a['appointment_date'] >= today and a['status'] != 'cancelled'
        ),
        'pending_appointments': sum(1 for a in appointments if a['status'] == 'pending'),
        'completed_appointments': sum(1 for a in appointments if a['status'] == 'completed'),
        'video_call_appointments': sum(1 for a in appointments if a['consultation_type'] == 'video-call'),
        'total_documents': 0,
        'support_tickets': 0,
    })


def doctor_appointments(doctor_id):
    ensure_owner('doctor', doctor_id)
    appointments = _filter_status(AppointmentStore.find_by_doctor_id(doctor_id), request.args.get('status'))
    return _paged_response(appointments)


def patient_appointments(patient_id):
    ensure_owner('patient', patient_id)
    appointments = _filter_status(AppointmentStore.find_by_patient_id(patient_id), request.args.get('status'))
    return _paged_response([view_for_caller(a) for a in appointments])


def patient_appointment_detail(patient_id, appointment_id):
    ensure_owner('patient', patient_id)
    appointment = AppointmentStore.find_by_id(appointment_id)
    if not appointment:
        return error_response('Appointment not found', 404)
    if str(appointment['patient_id']) != str(patient_id):
        return error_response('Access denied', 403)
    return success_response(view_for_caller(appointment))


def doctor_patients(doctor_id):
    """One entry per patient seen by the doctor, with their latest visit."""
    ensure_owner('doctor', doctor_id)
    patients = {}
    for appointment in AppointmentStore.find_by_doctor_id(doctor_id):
        entry = patients.setdefault(appointment['patient_id'], {
            'patient_id': appointment['patient_id'],
            'patient_first_name': appointment['patient_first_name'],
            'patient_email': appointment['patient_email'],
            'appointment_count': 0,
            'last_appointment_date': None,
            'last_problem_description': None,
        })
        entry['appointment_count'] += 1
        if entry['last_appointment_date'] is None or appointment['appointment_date'] > entry['last_appointment_date']:
            entry['last_appointment_date'] = appointment['appointment_date']
            entry['last_problem_description'] = appointment['problem_description']
    return success_response(list(patients.values()))


def video_appointments():
    """Video calls that have a meeting link, scoped to the caller."""
    role = current_role()
    patient_id = request.args.get('patientId')
    doctor_id = request.args.get('doctorId')
    if role == 'patient':
        patient_id = int(get_jwt_identity())
    elif role == 'doctor':
        doctor_id = int(get_jwt_identity())

    appointments = AppointmentStore.find_video_call_appointments(patient_id, doctor_id)
    if role == 'patient':
        appointments = [patient_view(a) for a in appointments]
    return success_response(appointments)


def list_documents(owner_role, owner_id):
    ensure_owner(owner_role, owner_id)
    return success_response([], message='Documents are not available yet')


def list_support_tickets(user_id):
    if current_role() != 'admin' and str(get_jwt_identity()) != str(user_id):
        return error_response('Access denied', 403)
    return success_response([], message='Support tickets are not available yet')


def not_implemented(feature):
    return error_response(f'{feature} not implemented yet', 501)
