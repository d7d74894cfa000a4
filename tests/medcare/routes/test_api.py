from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from medcare.database import get_db
from medcare.main import app
from medcare.services.availability import day_of_week


@pytest.fixture
def client(session_factory, db):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def clinic(records):
    today = date.today()
    records.doctor(10)
    records.patient(7)
    records.patient(8, first_name='Grace', last_name='Hopper', phone_no='555-0101')
    return today


def test_root_reports_status(client) -> None:
    response = client.get('/')

    assert response.status_code == 200
    assert response.json() == {'status': 'MedCare Scheduling API Running'}


def test_schedule_then_book_over_http(client, clinic) -> None:
    today = clinic
    created = client.post('/api/doctors/10/schedules', json={'day_of_week': day_of_week(today), 'slot_id': 1})

    assert created.status_code == 201
    assert created.json()['schedule']['start_time'] == '09:00:00'

    duplicate = client.post('/api/doctors/10/schedules', json={'day_of_week': day_of_week(today), 'slot_id': 1})
    assert duplicate.status_code == 409

    booking = {'patient_id': 7, 'doctor_id': 10, 'appointment_date': today.isoformat(), 'slot_id': 1}
    booked = client.post('/api/slots/book', json=booking)

    assert booked.status_code == 201
    assert booked.json()['appointment']['status_name'] == 'Scheduled'
    assert booked.json()['appointment']['consultation_fee'] == 75.0

    taken = client.post('/api/slots/book', json={**booking, 'patient_id': 8})
    assert taken.status_code == 409
    assert taken.json() == {'detail': 'This slot is already booked for the selected date'}

    availability = client.get('/api/doctors/10/available-schedule', params={'date': today.isoformat()})
    assert availability.status_code == 200
    assert availability.json()['available_count'] == 0
    assert availability.json()['slots'][0]['status'] == 'Booked'


def test_latest_schedule_uses_from_key(client, records, clinic) -> None:
    records.schedule(10, day_of_week(clinic), 1)

    response = client.get('/api/doctors/10/latest-schedule')

    assert response.status_code == 200
    assert response.json()['schedule_period'] == {
        'from': clinic.isoformat(),
        'to': (clinic + timedelta(days=7)).isoformat(),
    }


def test_check_availability_omits_missing_slot_details(client, clinic) -> None:
    response = client.get(
        '/api/slots/check-availability',
        params={'doctor_id': 10, 'slot_id': 1, 'appointment_date': clinic.isoformat()},
    )

    assert response.status_code == 200
    assert response.json() == {'is_available': False, 'reason': "Slot not in doctor's schedule for this day of week"}


@pytest.mark.parametrize(
    ('method', 'url', 'kwargs'),
    [
        ('get', '/api/doctors/10/available-schedule', {'params': {'date': '19-10-2026'}}),
        ('post', '/api/slots/book', {'json': {'patient_id': 7, 'doctor_id': 10, 'appointment_date': 'tomorrow', 'slot_id': 1}}),
        ('get', '/api/slots/check-availability', {'params': {'doctor_id': 'ten'}}),
    ],
)
def test_malformed_input_is_a_bad_request(client, clinic, method, url, kwargs) -> None:
    response = getattr(client, method)(url, **kwargs)

    assert response.status_code == 400
    assert isinstance(response.json()['detail'], list)


def test_unknown_resources_are_not_found(client, clinic) -> None:
    assert client.get('/api/doctors/99/available-schedule', params={'date': clinic.isoformat()}).status_code == 404
    assert client.put('/api/schedules/99', json={'is_active': False}).status_code == 404
    assert client.put('/api/appointments/99/status', json={}).status_code == 404
    assert client.get('/api/consultations/99').status_code == 404


def test_appointment_form_over_http(client, records, clinic) -> None:
    appointment = records.appointment(7, 10, clinic, 1)
    form = {'appointment_id': appointment.appointment_id, 'patient_id': 7, 'symptoms': 'Headache'}

    created = client.post('/api/appointment-forms', json=form)
    duplicate = client.post('/api/appointment-forms', json=form)
    not_owned = client.post('/api/appointment-forms', json={**form, 'patient_id': 8})
    fetched = client.get(f'/api/appointment-forms/{appointment.appointment_id}')
    listed = client.get('/api/patients/7/appointment-forms')

    assert created.status_code == 201
    assert duplicate.status_code == 409
    assert not_owned.status_code == 404
    assert fetched.json()['doctor_name'] == 'Gregory House'
    assert [row['symptoms'] for row in listed.json()] == ['Headache']
    assert client.get('/api/appointment-forms/999').status_code == 404


def test_consultation_with_unknown_doctor_is_not_found(client, records, clinic) -> None:
    appointment = records.appointment(7, 10, clinic, 1)

    response = client.post(
        '/api/consultations',
        json={'appointment_id': appointment.appointment_id, 'doctor_id': 999, 'patient_id': 7},
    )

    assert response.status_code == 404
    assert response.json() == {'detail': 'Doctor not found'}


def test_consultation_completes_appointment_over_http(client, records, clinic) -> None:
    records.schedule(10, day_of_week(clinic), 1)
    booked = client.post(
        '/api/slots/book',
        json={'patient_id': 7, 'doctor_id': 10, 'appointment_date': clinic.isoformat(), 'slot_id': 1},
    ).json()['appointment']

    consultation = client.post(
        '/api/consultations',
        json={'appointment_id': booked['appointment_id'], 'doctor_id': 10, 'patient_id': 7, 'oxygen_saturation': 97},
    )
    status_update = client.put(f"/api/appointments/{booked['appointment_id']}/status", json={'updated_by_doctor_id': 10})
    lookup = client.get(f"/api/consultations/appointment/{booked['appointment_id']}")

    assert consultation.status_code == 201
    assert status_update.status_code == 200
    assert status_update.json()['success'] is True
    assert status_update.json()['new_status'] == 2
    assert lookup.json()['exists'] is True
