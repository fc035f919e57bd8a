# /itabaza/api/routes.py

from flask_jwt_extended import jwt_required
from . import (
    auth_bp, user_bp, doctor_bp, department_bp, appointment_bp,
    enhanced_appointment_bp, email_confirmation_bp, admin_bp,
    dashboard_api_bp, admin_dashboard_bp,
)
from itabaza.extensions import limiter
from itabaza.utils.decorators import role_required
from .controllers import (
    auth_controller, user_controller, doctor_controller, department_controller,
    appointment_controller, email_confirmation_controller, dashboard_controller,
    admin_controller,
)


# --- Unified Authentication Endpoints ---
@auth_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
def login():
    return auth_controller.login()

@auth_bp.route('/logout', methods=['POST'])
@jwt_required()
def logout():
    return auth_controller.logout()

@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    return auth_controller.refresh_token()

@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def me():
    return auth_controller.get_current_account()


# --- Patient Account Endpoints ---
@user_bp.route('/emailVerify', methods=['POST'])
@limiter.limit("5 per hour")
def email_verify():
    return user_controller.send_email_otp()

@user_bp.route('/verifyOtp', methods=['POST'])
@limiter.limit("10 per hour")
def verify_otp():
    return user_controller.verify_email_otp()

@user_bp.route('/signup', methods=['POST'])
@limiter.limit("10 per hour")
def signup():
    return user_controller.signup()

@user_bp.route('/signin', methods=['POST'])
@limiter.limit("10 per minute")
def signin():
    return user_controller.signin()


# --- Doctor Endpoints ---
@doctor_bp.route('/allDoctor', methods=['GET'])
def all_doctors():
    return doctor_controller.get_all_doctors()

@doctor_bp.route('/allDoctor/<int:department_id>', methods=['GET'])
def doctors_by_department(department_id):
    return doctor_controller.get_doctors_by_department(department_id)

@doctor_bp.route('/search', methods=['GET'])
def search_doctors():
    return doctor_controller.search_doctors()

@doctor_bp.route('/addDoctor', methods=['POST'])
@limiter.limit("10 per hour")
def add_doctor():
    return doctor_controller.add_doctor()

@doctor_bp.route('/removeDoctor/<int:doctor_id>', methods=['DELETE'])
@role_required('admin')
def remove_doctor(doctor_id):
    return doctor_controller.remove_doctor(doctor_id)

@doctor_bp.route('/docPending', methods=['GET'])
@role_required('admin')
def pending_doctors():
    return doctor_controller.get_pending_doctors()

@doctor_bp.route('/updateDoctorStatus/<int:doctor_id>', methods=['PATCH'])
@role_required('admin')
def update_doctor_status(doctor_id):
    return doctor_controller.update_doctor_status(doctor_id)

@doctor_bp.route('/isAvailable/<int:doctor_id>', methods=['PATCH'])
@role_required('doctor', 'admin')
def update_doctor_availability(doctor_id):
    return doctor_controller.update_availability(doctor_id)


# --- Department Endpoints ---
@department_bp.route('/all', methods=['GET'])
def all_departments():
    return department_controller.get_departments()

@department_bp.route('/<int:department_id>', methods=['GET'])
def get_department(department_id):
    return department_controller.get_department(department_id)

@department_bp.route('/add', methods=['POST'])
@role_required('admin')
def add_department():
    return department_controller.add_department()


# --- Appointment CRUD Endpoints ---
@appointment_bp.route('/create/<int:doctor_id>', methods=['POST'])
@role_required('patient')
def create_appointment(doctor_id):
    return appointment_controller.create_appointment(doctor_id)

@appointment_bp.route('/getAppointments', methods=['GET'])
@role_required('admin')
def get_appointments():
    return appointment_controller.get_all_appointments()

@appointment_bp.route('/<int:appointment_id>', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def get_appointment(appointment_id):
    return appointment_controller.get_appointment_by_id(appointment_id)

@appointment_bp.route('/<int:appointment_id>', methods=['PATCH'])
@role_required('doctor', 'admin')
def update_appointment(appointment_id):
    return appointment_controller.update_appointment(appointment_id)

@appointment_bp.route('/<int:appointment_id>/status', methods=['PUT'])
@role_required('patient', 'doctor', 'admin')
def update_appointment_status(appointment_id):
    return appointment_controller.update_appointment_status(appointment_id)

@appointment_bp.route('/<int:appointment_id>', methods=['DELETE'])
@role_required('admin')
def delete_appointment(appointment_id):
    return appointment_controller.delete_appointment(appointment_id)


# --- Booking with consultation type, payment and video rooms ---
@enhanced_appointment_bp.route('/create', methods=['POST'])
@role_required('patient')
def book_appointment():
    return appointment_controller.book_appointment()

@enhanced_appointment_bp.route('/patient/<int:patient_id>', methods=['GET'])
@role_required('patient', 'admin')
def patient_appointments_by_type(patient_id):
    return appointment_controller.get_patient_appointments_by_type(patient_id)

@enhanced_appointment_bp.route('/<int:appointment_id>/payment', methods=['POST'])
@role_required('patient', 'admin')
def confirm_payment(appointment_id):
    return appointment_controller.confirm_payment(appointment_id)

@enhanced_appointment_bp.route('/video-rooms/available', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def enhanced_available_video_rooms():
    return appointment_controller.get_available_video_rooms()


# --- Email Confirmation Endpoints ---
@email_confirmation_bp.route('/send-confirmation', methods=['POST'])
@limiter.limit("20 per hour")
@role_required('patient', 'doctor', 'admin')
def send_confirmation():
    return email_confirmation_controller.send_confirmation()

@email_confirmation_bp.route('/appointment/<int:appointment_id>', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def confirmation_details(appointment_id):
    return email_confirmation_controller.get_appointment_details(appointment_id)


# --- Admin Appointment Endpoints ---
@admin_bp.route('/stats', methods=['GET'])
@role_required('admin')
def appointment_stats():
    return admin_controller.get_appointment_statistics()

@admin_bp.route('/appointments', methods=['GET'])
@role_required('admin')
def admin_all_appointments():
    return admin_controller.get_all_appointments()

@admin_bp.route('/appointments/pending', methods=['GET'])
@role_required('admin')
def admin_pending_appointments():
    return admin_controller.get_pending_appointments()

@admin_bp.route('/appointments/date/<string:appointment_date>', methods=['GET'])
@role_required('admin')
def admin_appointments_by_date(appointment_date):
    return admin_controller.get_appointments_by_date(appointment_date)


# --- Dashboard Endpoints ---
@dashboard_api_bp.route('/doctor/login', methods=['POST'])
@limiter.limit("10 per minute")
def doctor_login():
    return doctor_controller.doctor_login()

@dashboard_api_bp.route('/doctor/<int:doctor_id>/dashboard', methods=['GET'])
@role_required('doctor', 'admin')
def doctor_dashboard(doctor_id):
    return dashboard_controller.doctor_dashboard(doctor_id)

@dashboard_api_bp.route('/patient/<int:patient_id>/dashboard', methods=['GET'])
@role_required('patient', 'admin')
def patient_dashboard(patient_id):
    return dashboard_controller.patient_dashboard(patient_id)

@dashboard_api_bp.route('/doctor/<int:doctor_id>/appointments', methods=['GET'])
@role_required('doctor', 'admin')
def doctor_appointments(doctor_id):
    return dashboard_controller.doctor_appointments(doctor_id)

@dashboard_api_bp.route('/patient/<int:patient_id>/appointments', methods=['GET'])
@role_required('patient', 'admin')
def patient_appointments(patient_id):
    return dashboard_controller.patient_appointments(patient_id)

@dashboard_api_bp.route('/patient/<int:patient_id>/appointments/<int:appointment_id>', methods=['GET'])
@role_required('patient', 'admin')
def patient_appointment_detail(patient_id, appointment_id):
    return dashboard_controller.patient_appointment_detail(patient_id, appointment_id)

@dashboard_api_bp.route('/doctor/<int:doctor_id>/patients', methods=['GET'])
@role_required('doctor', 'admin')
def doctor_patients(doctor_id):
    return dashboard_controller.doctor_patients(doctor_id)

@dashboard_api_bp.route('/video-appointments', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def video_appointments():
    return dashboard_controller.video_appointments()

@dashboard_api_bp.route('/video-rooms/available', methods=['GET'])
@role_required('patient', 'doctor', 'admin')
def available_video_rooms():
    return appointment_controller.get_available_video_rooms()

@dashboard_api_bp.route('/appointment/<int:appointment_id>/status', methods=['PUT'])
@role_required('patient', 'doctor', 'admin')
def dashboard_update_status(appointment_id):
    return appointment_controller.update_appointment_status(appointment_id)

@dashboard_api_bp.route('/doctor/<int:doctor_id>/documents', methods=['GET'])
@role_required('doctor', 'admin')
def doctor_documents(doctor_id):
    return dashboard_controller.list_documents('doctor', doctor_id)

@dashboard_api_bp.route('/patient/<int:patient_id>/documents', methods=['GET'])
@role_required('patient', 'admin')
def patient_documents(patient_id):
    return dashboard_controller.list_documents('patient', patient_id)

@dashboard_api_bp.route('/doctor/<int:doctor_id>/documents/upload', methods=['POST'])
@role_required('doctor', 'admin')
def upload_document(doctor_id):
    return dashboard_controller.not_implemented('Document upload')

@dashboard_api_bp.route('/support/ticket', methods=['POST'])
@jwt_required()
def create_support_ticket():
    return dashboard_controller.not_implemented('Support tickets')

@dashboard_api_bp.route('/support/tickets/<int:user_id>', methods=['GET'])
@jwt_required()
def list_support_tickets(user_id):
    return dashboard_controller.list_support_tickets(user_id)


# --- Admin Dashboard Endpoints ---
@admin_dashboard_bp.route('/dashboard', methods=['GET'])
@role_required('admin')
def admin_dashboard():
    return admin_controller.platform_dashboard()

@admin_dashboard_bp.route('/users', methods=['GET'])
@role_required('admin')
def admin_users():
    return admin_controller.list_users()

@admin_dashboard_bp.route('/doctors', methods=['GET'])
@role_required('admin')
def admin_doctors():
    return admin_controller.list_doctors()
