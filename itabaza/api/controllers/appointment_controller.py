from flask import request, current_app
from flask_jwt_extended import get_jwt_identity

from itabaza.extensions import db
from itabaza.models.appointment_models import Appointment, CONSULTATION_TYPES, VIDEO_FIELDS
from itabaza.models.user_models import User, Doctor
from itabaza.services.appointment_store import AppointmentStore, FIELD_ALIASES, normalize_status
from itabaza.services.video_rooms import provision_video_room, available_rooms
from itabaza.utils.decorators import current_role, ensure_owner
from itabaza.utils.email_util import send_appointment_confirmation
from itabaza.utils.responses import ApiError, success_response, error_response

# Forward path of an appointment. Other moves are still accepted, only logged.
EXPECTED_TRANSITIONS = {
    'pending': {'confirmed', 'cancelled'},
    'confirmed': {'completed', 'cancelled'},
    'completed': set(),
    'cancelled': set(),
}

# Booking payloads can never set these; payment and rooms have their own flows
SERVER_MANAGED_FIELDS = {
    'status', 'payment_status', 'payment_transaction_id', 'payment_method',
    'patient_id', 'doctor_id', 'patient_first_name', 'patient_email', 'doc_first_name',
    *VIDEO_FIELDS,
}
# Payment details only change through confirm_payment
UPDATE_BLOCKED_FIELDS = SERVER_MANAGED_FIELDS | {'payment_amount', 'payment_currency'}


def patient_view(appointment: dict) -> dict:
    """Patient-facing copy of an appointment: no meeting details before payment."""
    if appointment.get('payment_status'):
        return appointment
    masked = dict(appointment)
    for field in VIDEO_FIELDS:
        masked[field] = None
    return masked


def view_for_caller(appointment: dict) -> dict:
    return patient_view(appointment) if current_role() == 'patient' else appointment


def load_for_caller(appointment_id) -> Appointment:
    """Fetch an appointment the caller may act on, or raise 404/403."""
    appointment = AppointmentStore.get(appointment_id)
    if not appointment:
        raise ApiError('Appointment not found', 404)

    role = current_role()
    identity = str(get_jwt_identity())
    if role == 'patient' and str(appointment.patient_id) != identity:
        raise ApiError('Access denied', 403)
    if role == 'doctor' and str(appointment.doctor_id) != identity:
        raise ApiError('Access denied', 403)
    return appointment


def _notify(appointment: dict, patient: User, doctor: Doctor):
    """Send the confirmation email; the outcome is reported, never raised."""
    result = send_appointment_confirmation(
        appointment.get('patient_email') or patient.email,
        appointment.get('patient_first_name') or patient.first_name,
        appointment.get('doc_first_name') or doctor.doctor_name,
        appointment,
    )
    return result.to_dict()


def _book(doctor_id, data):
    patient = db.session.get(User, int(get_jwt_identity()))
    if not patient:
        return error_response('Patient not found', 404)

    doctor = db.session.get(Doctor, doctor_id) if doctor_id else None
    if not doctor or not doctor.status:
        return error_response('Doctor not found', 404)
    if not doctor.is_available:
        return error_response('Doctor is not available for appointments', 400)

    payload = {k: v for k, v in data.items() if k not in SERVER_MANAGED_FIELDS}
    payload.update({
        'patient_id': patient.id,
        'doctor_id': doctor.id,
        'patient_first_name': patient.first_name,
        'patient_email': patient.email,
        'doc_first_name': doctor.doctor_name,
        'status': 'pending',
        'payment_status': False,
    })
    if not (payload.get('appointment_date') or payload.get('appointmentDate')):
        return error_response('appointment_date is required', 400)

    try:
        appointment = AppointmentStore.create(payload)
    except ValueError as e:
        return error_response(str(e), 400)

    appointment = provision_video_room(appointment)
    current_app.logger.info(
        f"Appointment {appointment['id']} booked by patient {patient.id} "
        f"with doctor {doctor.id} ({appointment['consultation_type']})"
    )

    email = _notify(appointment, patient, doctor)
    return success_response(
        patient_view(appointment),
        message='Appointment booked successfully',
        status=201,
        email=email,
    )


def create_appointment(doctor_id):
    """Book with a doctor taken from the URL."""
    data = request.get_json(silent=True) or {}
    return _book(doctor_id, data)


def book_appointment():
    """Book with an explicit consultation type; video calls get a meeting room."""
    data = request.get_json(silent=True) or {}
    doctor_id = data.pop('doctor_id', None) or data.pop('doctorId', None)
    if not doctor_id:
        return error_response('doctor_id is required', 400)
    consultation_type = data.get('consultation_type') or data.get('appointmentType') or 'in-person'
    if consultation_type not in CONSULTATION_TYPES:
        return error_response(f"consultation_type must be one of: {', '.join(CONSULTATION_TYPES)}", 400)
    return _book(doctor_id, data)


def get_all_appointments():
    appointments = AppointmentStore.find_all()
    return success_response(appointments, total=len(appointments))


def get_appointment_by_id(appointment_id):
    appointment = load_for_caller(appointment_id)
    return success_response(view_for_caller(appointment.to_dict()))


def get_patient_appointments_by_type(patient_id):
    ensure_owner('patient', patient_id)

    consultation_type = request.args.get('type')
    if consultation_type:
        if consultation_type not in CONSULTATION_TYPES:
            return error_response(f"type must be one of: {', '.join(CONSULTATION_TYPES)}", 400)
        appointments = AppointmentStore.find_by_type_and_patient(consultation_type, patient_id)
    else:
        appointments = AppointmentStore.find_by_patient_id(patient_id)
    return success_response([view_for_caller(a) for a in appointments])


def update_appointment(appointment_id):
    load_for_caller(appointment_id)
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict) or not data:
        return error_response('No fields to update', 400)

    fields = {FIELD_ALIASES.get(key, key) for key in data}
    if 'status' in fields:
        return error_response('Use the status endpoint to change status', 400)
    blocked = sorted(fields & UPDATE_BLOCKED_FIELDS)
    if blocked:
        return error_response(f"These fields cannot be updated here: {', '.join(blocked)}", 400)

    try:
        appointment = AppointmentStore.update(appointment_id, data)
    except ValueError as e:
        return error_response(str(e), 400)
    if appointment is None:
        return error_response('Appointment not found', 404)
    return success_response(appointment, message='Appointment updated successfully')


def update_appointment_status(appointment_id):
    existing = load_for_caller(appointment_id)
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict) or 'status' not in data:
        return error_response('status is required', 400)

    try:
        status = normalize_status(data['status'])
    except ValueError as e:
        return error_response(str(e), 400)

    role = current_role()
    if role == 'patient' and status != 'cancelled':
        return error_response('Patients can only cancel appointments', 403)

    previous = existing.status
    try:
        appointment = AppointmentStore.update(appointment_id, {'status': status})
    except ValueError as e:
        return error_response(str(e), 400)
    if appointment is None:
        return error_response('Appointment not found', 404)

    new_status = appointment['status']
    if new_status != previous and new_status not in EXPECTED_TRANSITIONS.get(previous, set()):
        current_app.logger.warning(
            f"Appointment {appointment_id} moved {previous} -> {new_status} by {role} {get_jwt_identity()}"
        )
    return success_response(view_for_caller(appointment), message='Appointment status updated')


def delete_appointment(appointment_id):
    if not AppointmentStore.delete(appointment_id):
        return error_response('Appointment not found', 404)
    current_app.logger.info(f"Appointment {appointment_id} deleted by admin {get_jwt_identity()}")
    return success_response(message='Appointment deleted successfully')


def confirm_payment(appointment_id):
    """Record a successful payment, confirm the appointment and email the patient."""
    existing = load_for_caller(appointment_id)
    data = request.get_json(silent=True) or {}

    transaction_id = data.get('transaction_id') or data.get('transactionId')
    if not transaction_id:
        return error_response('transaction_id is required', 400)

    updates = {
        'payment_status': True,
        'payment_transaction_id': transaction_id,
        'payment_method': data.get('payment_method') or data.get('paymentMethod'),
    }
    amount = data.get('amount', data.get('payment_amount'))
    if amount is not None:
        updates['payment_amount'] = amount
    currency = data.get('currency') or data.get('payment_currency')
    if currency:
        updates['payment_currency'] = currency
    if existing.status == 'pending':
        updates['status'] = 'confirmed'

    try:
        appointment = AppointmentStore.update(appointment_id, updates)
    except ValueError as e:
        return error_response(str(e), 400)

    appointment = provision_video_room(appointment)
    current_app.logger.info(f"Payment {transaction_id} recorded for appointment {appointment_id}")

    email = _notify(appointment, existing.patient, existing.doctor)
    return success_response(appointment, message='Payment confirmed', email=email)


def get_available_video_rooms():
    appointment_date = request.args.get('date')
    appointment_time = request.args.get('time')
    if not appointment_date or not appointment_time:
        return error_response('Date and time parameters are required', 400)
    try:
        rooms = available_rooms(appointment_date, appointment_time)
    except ValueError as e:
        return error_response(str(e), 400)
    return success_response(rooms)
