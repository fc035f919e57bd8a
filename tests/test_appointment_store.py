from datetime import datetime, timedelta

import pytest

from itabaza.services.appointment_store import AppointmentStore, normalize_appointment_payload


def test_create_and_fetch(app, make_appointment):
    created = make_appointment(problem_description='Chest pain')

    fetched = AppointmentStore.find_by_id(created['id'])
    assert fetched == created
    assert fetched['status'] == 'pending'
    assert fetched['payment_status'] is False
    assert fetched['payment_currency'] == 'RWF'
    assert fetched['video_call_url'] is None


def test_missing_appointment(app):
    assert AppointmentStore.find_by_id(999) is None
    assert AppointmentStore.update(999, {'status': 'confirmed'}) is None
    assert AppointmentStore.delete(999) is False


def test_aliases_are_mapped(app, patient, doctor):
    created = AppointmentStore.create({
        'patientId': patient.id,
        'doctorId': doctor.id,
        'appointmentDate': '14-01-2025',
        'appointmentType': 'video-call',
        'problemDescription': 'Rash',
    })
    assert created['appointment_date'] == '2025-01-14'
    assert created['consultation_type'] == 'video-call'
    assert created['problem_description'] == 'Rash'


def test_canonical_key_beats_alias():
    cleaned = normalize_appointment_payload({
        'consultation_type': 'in-person',
        'appointmentType': 'video-call',
    })
    assert cleaned['consultation_type'] == 'in-person'

    cleaned = normalize_appointment_payload({
        'appointmentType': 'video-call',
        'consultation_type': 'in-person',
    })
    assert cleaned['consultation_type'] == 'in-person'


def test_unknown_and_protected_fields_dropped():
    cleaned = normalize_appointment_payload({
        'id': 5,
        'created_at': 'yesterday',
        'favourite_colour': 'blue',
        'gender': 'F',
    })
    assert cleaned == {'gender': 'F'}


@pytest.mark.parametrize('payload', [
    {'consultation_type': 'phone'},
    {'status': 'archived'},
    {'appointment_date': '2025/01/14'},
    {'appointment_date': '2025-02-30'},
    {'payment_amount': 'lots'},
    {'age_of_patient': 'old'},
])
def test_malformed_values_rejected(payload):
    with pytest.raises(ValueError):
        normalize_appointment_payload(payload)


def test_legacy_boolean_status():
    assert normalize_appointment_payload({'status': True})['status'] == 'completed'
    assert normalize_appointment_payload({'status': False})['status'] == 'pending'


def test_update_is_idempotent(app, make_appointment):
    created = make_appointment()
    changes = {'status': 'confirmed', 'payment_amount': '5000'}

    first = AppointmentStore.update(created['id'], changes)
    second = AppointmentStore.update(created['id'], changes)

    assert first['status'] == 'confirmed'
    assert first['payment_amount'] == 5000.0
    first.pop('updated_at')
    second.pop('updated_at')
    assert first == second


def test_delete(app, make_appointment):
    created = make_appointment()
    assert AppointmentStore.delete(created['id']) is True
    assert AppointmentStore.find_by_id(created['id']) is None


def test_find_by_patient_and_type(app, make_appointment, other_patient):
    mine = make_appointment()
    video = make_appointment(consultation_type='video-call')
    make_appointment(patient_id=other_patient.id, patient_email=other_patient.email)

    ids = {a['id'] for a in AppointmentStore.find_by_patient_id(mine['patient_id'])}
    assert ids == {mine['id'], video['id']}

    videos = AppointmentStore.find_by_type_and_patient('video-call', mine['patient_id'])
    assert [a['id'] for a in videos] == [video['id']]


def test_find_by_date_and_doctor(app, make_appointment, doctor):
    on_day = make_appointment(appointment_date='2025-03-01')
    make_appointment(appointment_date='2025-03-02')

    assert [a['id'] for a in AppointmentStore.find_by_date('2025-03-01')] == [on_day['id']]
    assert [a['id'] for a in AppointmentStore.find_by_date('01-03-2025')] == [on_day['id']]
    assert [a['id'] for a in AppointmentStore.find_by_doctor_and_date(doctor.id, '2025-03-01')] == [on_day['id']]

    with pytest.raises(ValueError):
        AppointmentStore.find_by_date('March 1st')


def test_find_pending(app, make_appointment):
    pending = make_appointment()
    make_appointment(status='confirmed')
    assert [a['id'] for a in AppointmentStore.find_pending()] == [pending['id']]


def test_find_recent_by_email(app, make_appointment, patient):
    ids = [make_appointment()['id'] for _ in range(7)]

    since = datetime.utcnow() - timedelta(days=30)
    recent = AppointmentStore.find_recent_by_email(patient.email, since)
    assert len(recent) == 5
    assert {a['id'] for a in recent} <= set(ids)

    assert AppointmentStore.find_recent_by_email('nobody@example.com', since) == []


def test_statistics(app, make_appointment):
    make_appointment()
    make_appointment(status='confirmed', payment_status=True, payment_amount=5000)
    make_appointment(status='completed', payment_status=True, payment_amount=2500, consultation_type='video-call')
    make_appointment(status='cancelled', consultation_type='video-call')
    make_appointment(payment_status=True)

    stats = AppointmentStore.get_statistics()

    assert stats['total'] == 5
    assert stats['pending'] + stats['confirmed'] + stats['completed'] + stats['cancelled'] == stats['total']
    assert stats['paid'] + stats['unpaid'] == stats['total']
    assert stats['video_calls'] + stats['in_person'] == stats['total']
    assert stats['paid'] == 3
    assert stats['video_calls'] == 2
    assert stats['total_revenue'] == 7500.0


def test_statistics_empty(app):
    stats = AppointmentStore.get_statistics()
    assert stats['total'] == 0
    assert stats['total_revenue'] == 0.0


def test_video_call_listing(app, make_appointment, other_patient):
    later = make_appointment(consultation_type='video-call', appointment_date='2025-05-02')
    earlier = make_appointment(consultation_type='video-call', appointment_date='2025-05-01')
    no_link = make_appointment(consultation_type='video-call', appointment_date='2025-04-01')
    in_person = make_appointment(appointment_date='2025-04-01', video_call_url='https://example.com/stale')
    theirs = make_appointment(
        consultation_type='video-call', appointment_date='2025-05-03',
        patient_id=other_patient.id, patient_email=other_patient.email,
    )

    for appt in (later, earlier, theirs):
        AppointmentStore.assign_video_room(appt['id'], 1, 'Room', 'https://meet.jit.si/x')

    everything = AppointmentStore.find_video_call_appointments()
    assert [a['id'] for a in everything] == [earlier['id'], later['id'], theirs['id']]
    assert no_link['id'] not in {a['id'] for a in everything}
    assert in_person['id'] not in {a['id'] for a in everything}

    mine = AppointmentStore.find_video_call_appointments(patient_id=later['patient_id'])
    assert [a['id'] for a in mine] == [earlier['id'], later['id']]


def test_available_video_rooms(app, make_appointment):
    taken = make_appointment(consultation_type='video-call', appointment_date='2025-06-01', appointment_time='09:00')
    cancelled = make_appointment(
        consultation_type='video-call', appointment_date='2025-06-01',
        appointment_time='09:00', status='cancelled',
    )
    other_slot = make_appointment(consultation_type='video-call', appointment_date='2025-06-01', appointment_time='11:00')
    AppointmentStore.assign_video_room(taken['id'], 3, 'Room 3', 'https://meet.jit.si/3')
    AppointmentStore.assign_video_room(cancelled['id'], 4, 'Room 4', 'https://meet.jit.si/4')
    AppointmentStore.assign_video_room(other_slot['id'], 5, 'Room 5', 'https://meet.jit.si/5')

    free = AppointmentStore.get_available_video_rooms('2025-06-01', '09:00')

    assert 3 not in free
    assert 4 in free
    assert 5 in free
    assert len(free) == 19
    assert free == sorted(free)
