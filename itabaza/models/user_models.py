from datetime import datetime
from itabaza.extensions import db, bcrypt


class PasswordMixin:
    """bcrypt-backed password helpers shared by every account type."""

    def set_password(self, password: str) -> None:
        if not isinstance(password, str) or len(password) < 6:
            raise ValueError("Password must be at least 6 characters long")
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password: str) -> bool:
        if not self.password_hash or not isinstance(password, str) or not password:
            return False
        return bcrypt.check_password_hash(self.password_hash, password)


class User(PasswordMixin, db.Model):
    """A patient account."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    mobile = db.Column(db.String(30), unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    appointments = db.relationship('Appointment', back_populates='patient', lazy='dynamic')

    @staticmethod
    def normalize_email(value):
        """Lower-cased email, or None when the value is not a string."""
        return value.strip().lower() if isinstance(value, str) else None

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'mobile': self.mobile,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Department(db.Model):
    __tablename__ = 'departments'

    id = db.Column(db.Integer, primary_key=True)
    dept_name = db.Column(db.String(100), unique=True, nullable=False)
    about = db.Column(db.Text)
    image = db.Column(db.String(1024))

    doctors = db.relationship('Doctor', back_populates='department', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'dept_name': self.dept_name,
            'about': self.about,
            'image': self.image,
        }


class Doctor(PasswordMixin, db.Model):
    """A doctor; `status` is the admin approval flag that gates visibility to patients."""
    __tablename__ = 'doctors'

    id = db.Column(db.Integer, primary_key=True)
    doctor_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    qualifications = db.Column(db.String(255))
    experience = db.Column(db.String(100))
    phone_no = db.Column(db.String(30))
    city = db.Column(db.String(100))
    department_id = db.Column(db.Integer, db.ForeignKey('departments.id'))
    status = db.Column(db.Boolean, default=False, nullable=False)
    image = db.Column(db.String(1024))
    is_available = db.Column(db.Boolean, default=True, nullable=False)
    password_hash = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    department = db.relationship('Department', back_populates='doctors')
    appointments = db.relationship('Appointment', back_populates='doctor', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'doctor_name': self.doctor_name,
            'email': self.email,
            'qualifications': self.qualifications,
            'experience': self.experience,
            'phone_no': self.phone_no,
            'city': self.city,
            'department_id': self.department_id,
            'dept_name': self.department.dept_name if self.department else None,
            'status': self.status,
            'image': self.image,
            'is_available': self.is_available,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class Admin(PasswordMixin, db.Model):
    __tablename__ = 'admins'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}
