from itabaza.utils.email_util import (
    build_confirmation_email, build_venue, send_appointment_confirmation, send_otp_email,
)
from itabaza.utils.room_assignment import assign_room, room_key


def _appointment(**overrides):
    appointment = {
        'id': 1,
        'patient_id': 12,
        'appointment_date': '2025-01-14',
        'appointment_time': '10:00',
        'consultation_type': 'in-person',
        'problem_description': 'Headache',
        'status': 'pending',
        'payment_status': False,
        'video_call_url': None,
    }
    appointment.update(overrides)
    return appointment


def test_in_person_venue(app):
    venue = build_venue(_appointment())
    assert venue['type'] == 'In-Person Visit'
    assert venue['location'] == 'Gihundwe Hospital'
    assert venue['room'] == assign_room(room_key(12, '2025-01-14'))
    assert venue['url'] == app.config['VIDEO_CALL_PORTAL_URL']


def test_video_venue_hides_link_until_paid(app):
    link = 'https://meet.jit.si/itabaza-videoroom20250114007'
    unpaid = build_venue(_appointment(consultation_type='video-call', video_call_url=link))
    paid = build_venue(_appointment(consultation_type='video-call', video_call_url=link, payment_status=True))

    assert unpaid['url'] == app.config['VIDEO_CALL_PORTAL_URL']
    assert paid['url'] == link
    assert 'room' not in paid


def test_message_contents(app):
    subject, text, html = build_confirmation_email('Alice', 'Mugabo', _appointment(status='confirmed'))

    assert subject == 'iTABAZA In-Person Appointment Confirmation'
    assert 'Dr. Mugabo' in text
    assert 'Payment Status: Pending' in text
    assert 'after completing payment' in text
    assert 'In-Person Visit Instructions' in html
    assert assign_room(room_key(12, '2025-01-14')) in html


def test_video_message(app):
    subject, text, html = build_confirmation_email(
        'Alice', 'Mugabo', _appointment(consultation_type='video-call', payment_status=True),
    )
    assert subject == 'iTABAZA Video Call Appointment Confirmation'
    assert 'Video Call Instructions' in html
    assert 'after completing payment' not in text


def test_html_is_escaped(app):
    _, _, html = build_confirmation_email(
        '<script>alert(1)</script>', 'Mugabo', _appointment(problem_description='<b>pain</b>'),
    )
    assert '<script>' not in html
    assert '&lt;script&gt;' in html
    assert '&lt;b&gt;pain&lt;/b&gt;' in html


def test_send_success(app, mailbox):
    result = send_appointment_confirmation('alice@example.com', 'Alice', 'Mugabo', _appointment())

    assert result.success is True
    assert result.sent_to == 'alice@example.com'
    assert result.to_dict()['sentTo'] == 'alice@example.com'
    assert len(mailbox.sent) == 1
    assert mailbox.sent[0]['to'] == 'alice@example.com'


def test_transport_failure_is_reported(app, mailbox):
    mailbox.fail_calls = {1}

    result = send_appointment_confirmation('alice@example.com', 'Alice', 'Mugabo', _appointment())

    assert result.success is False
    assert 'Failed to send email' in result.message
    assert 'sentTo' not in result.to_dict()


def test_unconfigured_mail(app, mailbox):
    app.config['MAIL_PASSWORD'] = None

    result = send_otp_email('alice@example.com', '1234')

    assert result.success is False
    assert mailbox.sent == []
