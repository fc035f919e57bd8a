from datetime import datetime
from itabaza.extensions import db

CONSULTATION_TYPES = ('in-person', 'video-call')
APPOINTMENT_STATUSES = ('pending', 'confirmed', 'completed', 'cancelled')

VIDEO_FIELDS = ('video_call_room_id', 'video_call_room_name', 'video_call_url')

class Appointment(db.Model):
    """A consultation booked by a patient with a doctor."""
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)

    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id'), nullable=False, index=True)

    # Denormalized display fields, kept on the row so emails and dashboards need no joins
    patient_first_name = db.Column(db.String(100))
    doc_first_name = db.Column(db.String(255))
    patient_email = db.Column(db.String(255), index=True)
    age_of_patient = db.Column(db.Integer)
    gender = db.Column(db.String(20))
    address = db.Column(db.String(255))

    # Scheduling; dates are ISO strings (YYYY-MM-DD) so they compare lexicographically
    appointment_date = db.Column(db.String(10), nullable=False, index=True)
    appointment_time = db.Column(db.String(20))
    slot_time = db.Column(db.String(20))

    consultation_type = db.Column(db.String(20), nullable=False, default='in-person')
    problem_description = db.Column(db.Text)
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)

    # Payment
    payment_status = db.Column(db.Boolean, nullable=False, default=False)
    payment_transaction_id = db.Column(db.String(255))
    payment_amount = db.Column(db.Float)
    payment_currency = db.Column(db.String(10), default='RWF')
    payment_method = db.Column(db.String(50))

    # Video call, filled in after booking
    video_call_room_id = db.Column(db.Integer)
    video_call_room_name = db.Column(db.String(255))
    video_call_url = db.Column(db.String(1024))

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    patient = db.relationship('User', back_populates='appointments')
    doctor = db.relationship('Doctor', back_populates='appointments')

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'doctor_id': self.doctor_id,
            'patient_first_name': self.patient_first_name,
            'doc_first_name': self.doc_first_name,
            'patient_email': self.patient_email,
            'age_of_patient': self.age_of_patient,
            'gender': self.gender,
            'address': self.address,
            'appointment_date': self.appointment_date,
            'appointment_time': self.appointment_time,
            'slot_time': self.slot_time,
            'consultation_type': self.consultation_type,
            'problem_description': self.problem_description,
            'status': self.status,
            'payment_status': self.payment_status,
            'payment_transaction_id': self.payment_transaction_id,
            'payment_amount': self.payment_amount,
            'payment_currency': self.payment_currency,
            'payment_method': self.payment_method,
            'video_call_room_id': self.video_call_room_id,
            'video_call_room_name': self.video_call_room_name,
            'video_call_url': self.video_call_url,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
