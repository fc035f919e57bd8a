import logging
import re
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from itabaza.extensions import db
from itabaza.models.appointment_models import (
    Appointment, APPOINTMENT_STATUSES, CONSULTATION_TYPES,
)
from itabaza.utils.room_assignment import ROOM_POOL_SIZE

logger = logging.getLogger("itabaza.appointment_store")

# Field names the older booking forms still send
FIELD_ALIASES = {
    'appointment_id': 'id',
    'appointmentType': 'consultation_type',
    'consultationType': 'consultation_type',
    'patientId': 'patient_id',
    'doctorId': 'doctor_id',
    'ageOfPatient': 'age_of_patient',
    'problemDescription': 'problem_description',
    'appointmentDate': 'appointment_date',
    'appointmentTime': 'appointment_time',
    'slotTime': 'slot_time',
    'paymentStatus': 'payment_status',
    'patientEmail': 'patient_email',
}

# Columns callers may never write directly
PROTECTED_FIELDS = {'id', 'created_at', 'updated_at'}

WRITABLE_FIELDS = {
    column.name for column in Appointment.__table__.columns
} - PROTECTED_FIELDS

_ISO_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')
_DMY_DATE = re.compile(r'^(\d{2})-(\d{2})-(\d{4})$')


def _normalize_date(value):
    if value is None:
        return None
    value = str(value).strip()
    if _ISO_DATE.match(value):
        datetime.strptime(value, '%Y-%m-%d')
        return value
    match = _DMY_DATE.match(value)
    if match:
        day, month, year = match.groups()
        iso = f"{year}-{month}-{day}"
        datetime.strptime(iso, '%Y-%m-%d')
        return iso
    raise ValueError(f"Invalid appointment_date '{value}', expected YYYY-MM-DD")


def normalize_status(value):
    # Legacy rows stored status as a boolean "done" flag
    if isinstance(value, bool):
        return 'completed' if value else 'pending'
    status = str(value).strip().lower()
    if status not in APPOINTMENT_STATUSES:
        raise ValueError(f"Invalid status '{value}'. Allowed: {', '.join(APPOINTMENT_STATUSES)}")
    return status


def _normalize_bool(value):
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 't', 'yes', 'paid')
    return bool(value)


def normalize_appointment_payload(data: dict) -> dict:
    """Map an incoming payload onto Appointment columns.

    Aliased keys are renamed (the canonical key wins when both are present),
    unknown and protected keys are dropped, and enum-like values are checked.
    Raises ValueError on a malformed value.
    """
    normalized = {}
    for key, value in (data or {}).items():
        canonical = FIELD_ALIASES.get(key, key)
        if canonical in normalized and canonical != key:
            continue
        normalized[canonical] = value

    cleaned = {k: v for k, v in normalized.items() if k in WRITABLE_FIELDS}

    if 'consultation_type' in cleaned:
        if cleaned['consultation_type'] not in CONSULTATION_TYPES:
            raise ValueError(
                f"Invalid consultation_type '{cleaned['consultation_type']}'. "
                f"Allowed: {', '.join(CONSULTATION_TYPES)}"
            )
    if 'status' in cleaned:
        cleaned['status'] = normalize_status(cleaned['status'])
    if 'appointment_date' in cleaned:
        cleaned['appointment_date'] = _normalize_date(cleaned['appointment_date'])
    if 'payment_status' in cleaned:
        cleaned['payment_status'] = _normalize_bool(cleaned['payment_status'])
    if cleaned.get('payment_amount') not in (None, ''):
        try:
            cleaned['payment_amount'] = float(cleaned['payment_amount'])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid payment_amount '{cleaned['payment_amount']}'")
    elif 'payment_amount' in cleaned:
        cleaned['payment_amount'] = None
    if cleaned.get('age_of_patient') not in (None, ''):
        try:
            cleaned['age_of_patient'] = int(cleaned['age_of_patient'])
        except (TypeError, ValueError):
            raise ValueError(f"Invalid age_of_patient '{cleaned['age_of_patient']}'")
    return cleaned


@contextmanager
def _write():
    """Commit on success; roll back and re-raise on a database error."""
    try:
        yield
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Appointment write failed")
        raise


def _dicts(query):
    return [appt.to_dict() for appt in query.all()]


class AppointmentStore:
    """Data access for the appointments table. Every method is a single round trip."""

    @staticmethod
    def create(data: dict) -> dict:
        fields = normalize_appointment_payload(data)
        appointment = Appointment(**fields)
        with _write():
            db.session.add(appointment)
        return appointment.to_dict()

    @staticmethod
    def get(appointment_id):
        """Return the model instance, or None."""
        return db.session.get(Appointment, appointment_id)

    @staticmethod
    def find_by_id(appointment_id):
        appointment = db.session.get(Appointment, appointment_id)
        return appointment.to_dict() if appointment else None

    @staticmethod
    def find_by_patient_id(patient_id):
        return _dicts(
            Appointment.query.filter_by(patient_id=patient_id)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        )

    @staticmethod
    def find_by_doctor_id(doctor_id):
        return _dicts(
            Appointment.query.filter_by(doctor_id=doctor_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.created_at.desc())
        )

    @staticmethod
    def find_all():
        return _dicts(Appointment.query.order_by(Appointment.created_at.desc(), Appointment.id.desc()))

    @staticmethod
    def find_pending():
        return _dicts(
            Appointment.query.filter_by(status='pending')
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        )

    @staticmethod
    def find_by_date(appointment_date):
        return _dicts(
            Appointment.query.filter_by(appointment_date=_normalize_date(appointment_date))
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        )

    @staticmethod
    def find_by_type_and_patient(consultation_type, patient_id):
        return _dicts(
            Appointment.query.filter_by(consultation_type=consultation_type, patient_id=patient_id)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        )

    @staticmethod
    def find_by_doctor_and_date(doctor_id, appointment_date):
        return _dicts(
            Appointment.query.filter_by(doctor_id=doctor_id, appointment_date=_normalize_date(appointment_date))
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
        )

    @staticmethod
    def find_recent_by_email(email, since, limit=5):
        return _dicts(
            Appointment.query.filter(
                Appointment.patient_email == email,
                Appointment.created_at >= since,
            )
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .limit(limit)
        )

    @staticmethod
    def update(appointment_id, updates: dict):
        """Apply a partial update. Returns the updated row, or None if it does not exist."""
        fields = normalize_appointment_payload(updates)
        appointment = db.session.get(Appointment, appointment_id)
        if appointment is None:
            return None
        with _write():
            for key, value in fields.items():
                setattr(appointment, key, value)
        return appointment.to_dict()

    @staticmethod
    def delete(appointment_id) -> bool:
        with _write():
            deleted = Appointment.query.filter_by(id=appointment_id).delete()
        return deleted > 0

    @staticmethod
    def get_statistics() -> dict:
        rows = db.session.query(
            Appointment.status,
            Appointment.payment_status,
            Appointment.consultation_type,
            Appointment.payment_amount,
        ).all()

        stats = {
            'total': len(rows),
            'pending': 0,
            'confirmed': 0,
            'completed': 0,
            'cancelled': 0,
            'paid': 0,
            'unpaid': 0,
            'video_calls': 0,
            'in_person': 0,
            'total_revenue': 0.0,
        }
        for status, paid, consultation_type, amount in rows:
            if status in APPOINTMENT_STATUSES:
                stats[status] += 1
            if paid:
                stats['paid'] += 1
                if amount is not None:
                    stats['total_revenue'] += float(amount)
            else:
                stats['unpaid'] += 1
            if consultation_type == 'video-call':
                stats['video_calls'] += 1
            elif consultation_type == 'in-person':
                stats['in_person'] += 1
        return stats

    @staticmethod
    def find_video_call_appointments(patient_id=None, doctor_id=None):
        query = Appointment.query.filter(
            Appointment.consultation_type == 'video-call',
            Appointment.video_call_url.isnot(None),
        )
        if patient_id:
            query = query.filter(Appointment.patient_id == patient_id)
        if doctor_id:
            query = query.filter(Appointment.doctor_id == doctor_id)
        return _dicts(query.order_by(Appointment.appointment_date.asc(), Appointment.id.asc()))

    @staticmethod
    def assign_video_room(appointment_id, room_id, room_name, video_url):
        appointment = db.session.get(Appointment, appointment_id)
        if appointment is None:
            return None
        with _write():
            appointment.video_call_room_id = room_id
            appointment.video_call_room_name = room_name
            appointment.video_call_url = video_url
        return appointment.to_dict()

    @staticmethod
    def get_available_video_rooms(appointment_date, appointment_time):
        """Room numbers (1-based) from the pool that no live video call holds in that slot."""
        taken = {
            room_id for (room_id,) in db.session.query(Appointment.video_call_room_id).filter(
                Appointment.consultation_type == 'video-call',
                Appointment.appointment_date == _normalize_date(appointment_date),
                db.or_(
                    Appointment.appointment_time == appointment_time,
                    Appointment.slot_time == appointment_time,
                ),
                Appointment.status != 'cancelled',
                Appointment.video_call_room_id.isnot(None),
            ).all()
        }
        return [room for room in range(1, ROOM_POOL_SIZE + 1) if room not in taken]
