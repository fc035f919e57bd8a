from itabaza.models.user_models import User, Doctor, Department, Admin
from itabaza.models.appointment_models import Appointment
from itabaza.models.system_models import RevokedToken, EmailVerification

__all__ = [
    'User', 'Doctor', 'Department', 'Admin',
    'Appointment', 'RevokedToken', 'EmailVerification',
]
