import smtplib
from datetime import date

import pytest
from flask import Flask
from flask_jwt_extended import create_access_token

from itabaza import create_app
from itabaza.extensions import db
from itabaza.models import User, Doctor, Department, Admin
from itabaza.services.appointment_store import AppointmentStore
from itabaza.utils import email_util


class Mailbox:
    """Stands in for the SMTP server; records every message handed to it."""

    def __init__(self):
        self.sent = []
        self.calls = 0
        self.fail_calls = set()

    def connect(self, host, port, timeout=None):
        return _FakeConnection(self)


class _FakeConnection:
    def __init__(self, mailbox):
        self.mailbox = mailbox

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self, context=None):
        pass

    def login(self, username, password):
        pass

    def sendmail(self, sender, recipient, message):
        self.mailbox.calls += 1
        if self.mailbox.calls in self.mailbox.fail_calls:
            raise smtplib.SMTPRecipientsRefused({recipient: (550, b'mailbox unavailable')})
        self.mailbox.sent.append({'from': sender, 'to': recipient, 'message': message})


@pytest.fixture(autouse=True)
def mailbox(monkeypatch):
    box = Mailbox()
    monkeypatch.setattr(email_util.smtplib, 'SMTP', box.connect)
    return box


@pytest.fixture
def app() -> Flask:
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def headers_for(app):
    def _headers(role, account):
        token = create_access_token(identity=str(account.id), additional_claims={'role': role})
        return {'Authorization': f'Bearer {token}'}
    return _headers


@pytest.fixture
def department(app):
    dept = Department(dept_name='Cardiology', about='Heart care')
    db.session.add(dept)
    db.session.commit()
    return dept


def _patient(first_name, email, mobile):
    user = User(first_name=first_name, last_name='Test', email=email, mobile=mobile)
    user.set_password('secret123')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def patient(app):
    return _patient('Alice', 'alice@example.com', '0788000001')


@pytest.fixture
def other_patient(app):
    return _patient('Bob', 'bob@example.com', '0788000002')


@pytest.fixture
def doctor(department):
    doc = Doctor(
        doctor_name='Jean Mugabo',
        email='mugabo@example.com',
        qualifications='MBBS',
        experience='5 years',
        department_id=department.id,
        status=True,
        is_available=True,
    )
    doc.set_password('doctorpass')
    db.session.add(doc)
    db.session.commit()
    return doc


@pytest.fixture
def admin(app):
    account = Admin(name='Admin', email='admin@example.com')
    account.set_password('adminpass')
    db.session.add(account)
    db.session.commit()
    return account


@pytest.fixture
def make_appointment(patient, doctor):
    """Insert an appointment directly through the store."""
    def _make(**overrides):
        data = {
            'patient_id': patient.id,
            'doctor_id': doctor.id,
            'patient_first_name': patient.first_name,
            'patient_email': patient.email,
            'doc_first_name': doctor.doctor_name,
            'appointment_date': date.today().isoformat(),
            'appointment_time': '10:00',
            'consultation_type': 'in-person',
            'problem_description': 'Headache',
        }
        data.update(overrides)
        return AppointmentStore.create(data)
    return _make
