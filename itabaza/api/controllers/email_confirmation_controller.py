from datetime import datetime, timedelta
from flask import request, current_app, jsonify
from flask_jwt_extended import get_jwt_identity

from itabaza.extensions import db
from itabaza.models.user_models import User, Doctor
from itabaza.services.appointment_store import AppointmentStore
from itabaza.utils.decorators import current_role
from itabaza.utils.email_util import send_appointment_confirmation
from itabaza.utils.responses import ApiError, success_response, error_response
from .appointment_controller import load_for_caller, view_for_caller

RECENT_WINDOW = timedelta(days=30)
RECENT_LIMIT = 5


def _find_appointments(appointment_id, patient_email):
    if appointment_id:
        try:
            appointment = load_for_caller(int(appointment_id))
        except (TypeError, ValueError):
            raise ApiError('appointmentId must be an integer', 400)
        return [appointment.to_dict()]

    email = User.normalize_email(patient_email)
    if not email:
        raise ApiError('patientEmail must be a string', 400)
    if current_role() == 'patient':
        patient = db.session.get(User, int(get_jwt_identity()))
        if not patient or patient.email != email:
            raise ApiError('Access denied', 403)
    appointments = AppointmentStore.find_recent_by_email(email, datetime.utcnow() - RECENT_WINDOW, RECENT_LIMIT)
    if current_role() == 'doctor':
        appointments = [a for a in appointments if str(a['doctor_id']) == str(get_jwt_identity())]
    return appointments


def send_confirmation():
    """Resend confirmation emails. Each appointment gets its own result; one failure
    does not stop the others."""
    data = request.get_json(silent=True) or {}
    appointment_id = data.get('appointmentId')
    patient_email = data.get('patientEmail')

    if not appointment_id and not patient_email:
        return error_response('Either appointment ID or patient email is required', 400)

    current_app.logger.info(f"[EMAIL-CONFIRMATION] Request received: appointment={appointment_id} email={patient_email}")

    appointments = _find_appointments(appointment_id, patient_email)
    if not appointments:
        return error_response('No appointments found with the provided criteria', 404)

    results = []
    for appointment in appointments:
        patient = db.session.get(User, appointment['patient_id']) if appointment.get('patient_id') else None
        doctor = db.session.get(Doctor, appointment['doctor_id']) if appointment.get('doctor_id') else None

        patient_name = appointment.get('patient_first_name') or (patient.first_name if patient else None) or 'Patient'
        doctor_name = appointment.get('doc_first_name') or (doctor.doctor_name if doctor else None) or 'Doctor'
        email_address = appointment.get('patient_email') or (patient.email if patient else None) or patient_email

        if not email_address:
            results.append({
                'appointmentId': appointment['id'],
                'success': False,
                'message': 'No email address found for this appointment',
            })
            continue

        result = send_appointment_confirmation(email_address, patient_name, doctor_name, appointment)
        results.append({'appointmentId': appointment['id'], **result.to_dict()})

    success_count = sum(1 for r in results if r['success'])
    return jsonify({
        'success': success_count > 0,
        'message': f"Successfully sent {success_count} out of {len(appointments)} confirmation emails",
        'data': {
            'results': results,
            'totalAppointments': len(appointments),
            'successCount': success_count,
        },
    }), 200


def get_appointment_details(appointment_id):
    appointment = load_for_caller(appointment_id)
    details = view_for_caller(appointment.to_dict())
    details.update({
        'patient_name': appointment.patient_first_name or (appointment.patient.first_name if appointment.patient else None),
        'doctor_name': appointment.doc_first_name or (appointment.doctor.doctor_name if appointment.doctor else None),
        'patient_email': appointment.patient_email or (appointment.patient.email if appointment.patient else None),
        'doctor_qualifications': appointment.doctor.qualifications if appointment.doctor else None,
    })
    return success_response(details)
