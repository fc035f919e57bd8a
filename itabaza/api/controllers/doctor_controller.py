from flask import request, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from sqlalchemy.exc import IntegrityError

from itabaza.extensions import db
from itabaza.models.user_models import User, Doctor, Department
from itabaza.utils.decorators import ensure_owner
from itabaza.utils.responses import success_response, error_response
from .auth_controller import issue_tokens, authenticate


def _visible_doctors():
    """Doctors patients may see: approved ones only."""
    return Doctor.query.filter_by(status=True).order_by(Doctor.doctor_name)


def get_all_doctors():
    doctors = [d.to_dict() for d in _visible_doctors().all()]
    return success_response(doctors, total=len(doctors))


def get_doctors_by_department(department_id):
    doctors = [d.to_dict() for d in _visible_doctors().filter_by(department_id=department_id).all()]
    if not doctors:
        return success_response([], message='This Department have no doctors', total=0)
    return success_response(doctors, total=len(doctors))


def search_doctors():
    term = (request.args.get('q') or '').strip()
    if not term:
        return error_response('Query parameter q is required', 400)
    doctors = _visible_doctors().filter(Doctor.doctor_name.ilike(f'%{term}%')).all()
    return success_response([d.to_dict() for d in doctors], total=len(doctors))


def add_doctor():
    """Doctor application. Applications start unapproved unless an admin creates the doctor."""
    data = request.get_json(silent=True) or {}

    required_fields = ['doctorName', 'email', 'qualifications', 'departmentId']
    if any(not data.get(field) for field in required_fields):
        return error_response('Missing required fields', 400)

    email = User.normalize_email(data['email'])
    if not email:
        return error_response('email must be a string', 400)
    is_available = data.get('isAvailable', True)
    if not isinstance(is_available, bool):
        return error_response('isAvailable must be true or false', 400)

    if not db.session.get(Department, data['departmentId']):
        return error_response('Department not found', 404)

    if Doctor.query.filter_by(email=email).first():
        return error_response('A doctor with this email already exists', 409)

    verify_jwt_in_request(optional=True)
    is_admin = (get_jwt() or {}).get('role') == 'admin'

    doctor = Doctor(
        doctor_name=data['doctorName'],
        email=email,
        qualifications=data['qualifications'],
        experience=data.get('experience'),
        phone_no=data.get('phoneNo'),
        city=data.get('city'),
        department_id=data['departmentId'],
        status=bool(data.get('status')) if is_admin else False,
        image=data.get('image'),
        is_available=is_available,
    )
    if data.get('password'):
        try:
            doctor.set_password(data['password'])
        except ValueError as e:
            return error_response(str(e), 400)

    try:
        db.session.add(doctor)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return error_response('A doctor with this email already exists', 409)

    current_app.logger.info(f"Doctor {doctor.id} created (approved={doctor.status})")
    return success_response(doctor.to_dict(), message='Doctor has been created', status=201)


def remove_doctor(doctor_id):
    doctor = db.session.get(Doctor, doctor_id)
    if not doctor:
        return error_response('Doctor not found', 404)
    if doctor.appointments.count():
        return error_response('Doctor has appointments and cannot be removed', 409)
    db.session.delete(doctor)
    db.session.commit()
    return success_response(message='Doctor deleted')


def get_pending_doctors():
    pending = Doctor.query.filter_by(status=False).order_by(Doctor.created_at).all()
    if not pending:
        return success_response([], message='No Doc Pending for Approval')
    return success_response([d.to_dict() for d in pending], message='Doc Pending')


def update_doctor_status(doctor_id):
    """`status: true` approves the application, `status: false` rejects and deletes it."""
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get('status'), bool):
        return error_response('status must be true or false', 400)

    doctor = db.session.get(Doctor, doctor_id)
    if not doctor:
        return error_response('Doctor not found, check Id', 404)

    if data['status']:
        doctor.status = True
        db.session.commit()
        return success_response(doctor.to_dict(), message='Doctor Application Approved')

    if doctor.appointments.count():
        return error_response('Doctor has appointments and cannot be rejected', 409)
    db.session.delete(doctor)
    db.session.commit()
    return success_response(message='Doctor Application Rejected')


def update_availability(doctor_id):
    ensure_owner('doctor', doctor_id)
    data = request.get_json(silent=True) or {}
    if not isinstance(data.get('isAvailable'), bool):
        return error_response('isAvailable must be true or false', 400)

    doctor = db.session.get(Doctor, doctor_id)
    if not doctor:
        return error_response('Doctor not found, please check the ID', 404)

    doctor.is_available = data['isAvailable']
    db.session.commit()
    return success_response(doctor.to_dict(), message="Doctor's status has been updated")


def doctor_login():
    data = request.get_json(silent=True) or {}
    if not data.get('email') or not data.get('password'):
        return error_response('Email and password are required', 400)

    doctor, error, status = authenticate('doctor', data['email'], data['password'])
    if error:
        return error_response(error, status)

    return success_response({
        **issue_tokens('doctor', doctor),
        'doctor': {
            'id': doctor.id,
            'name': doctor.doctor_name,
            'email': doctor.email,
            'department_id': doctor.department_id,
        },
    })
