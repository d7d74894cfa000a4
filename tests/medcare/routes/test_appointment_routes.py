from datetime import date

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from medcare.routes.appointment_routes import (
    BookSlotRequest,
    CreateConsultationRequest,
    book_slot,
    cancel_appointment,
    create_consultation,
    get_consultation_for_appointment,
    list_appointments,
    list_doctor_schedule_appointments,
    update_appointment_status,
)
from medcare.services.availability import day_of_week


@pytest.fixture
def clinic_today(records):
    today = date.today()
    records.doctor(10)
    records.patient(7)
    records.schedule(10, day_of_week(today), 1)
    return today


def test_create_consultation_request_normalizes_text() -> None:
    request = CreateConsultationRequest(appointment_id=1, doctor_id=10, patient_id=7, diagnosis='  Flu  ', blood_pressure='  ')

    assert request.diagnosis == 'Flu'
    assert request.blood_pressure is None


@pytest.mark.parametrize(
    'fields',
    [
        {'oxygen_saturation': 101},
        {'oxygen_saturation': -1},
        {'diagnosis': 'x' * 501},
    ],
)
def test_create_consultation_request_rejects_invalid_vitals(fields) -> None:
    with pytest.raises(ValidationError):
        CreateConsultationRequest(appointment_id=1, doctor_id=10, patient_id=7, **fields)


def test_book_slot_route_returns_created_appointment(db, clinic_today) -> None:
    response = book_slot(BookSlotRequest(patient_id=7, doctor_id=10, appointment_date=clinic_today, slot_id=1), db=db)

    assert response['message'] == 'Slot booked successfully'
    assert response['appointment']['status_name'] == 'Scheduled'


def test_book_slot_route_rejects_second_booking(db, clinic_today) -> None:
    request = BookSlotRequest(patient_id=7, doctor_id=10, appointment_date=clinic_today, slot_id=1)
    book_slot(request, db=db)

    with pytest.raises(HTTPException) as exception_info:
        book_slot(request, db=db)

    assert exception_info.value.status_code == 409


def test_appointment_listings(db, clinic_today) -> None:
    booked = book_slot(BookSlotRequest(patient_id=7, doctor_id=10, appointment_date=clinic_today, slot_id=1), db=db)

    for_patient = list_appointments(patient_id=7, db=db)
    for_doctor = list_doctor_schedule_appointments(10, start_date=clinic_today, end_date=clinic_today, db=db)

    assert [row['appointment_id'] for row in for_patient] == [booked['appointment']['appointment_id']]
    assert [row['appointment_id'] for row in for_doctor] == [booked['appointment']['appointment_id']]


def test_list_appointments_requires_patient(db) -> None:
    with pytest.raises(HTTPException) as exception_info:
        list_appointments(patient_id=None, db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'patient_id is required'


def test_cancelled_appointment_leaves_listings(db, clinic_today) -> None:
    booked = book_slot(BookSlotRequest(patient_id=7, doctor_id=10, appointment_date=clinic_today, slot_id=1), db=db)
    appointment_id = booked['appointment']['appointment_id']

    response = cancel_appointment(appointment_id, db=db)

    assert response['message'] == 'Appointment cancelled'
    assert response['status_name'] == 'Cancelled'
    assert list_appointments(patient_id=7, db=db) == []
    assert list_doctor_schedule_appointments(10, start_date=None, end_date=None, db=db) == []


def test_status_route_completes_after_consultation(db, clinic_today) -> None:
    booked = book_slot(BookSlotRequest(patient_id=7, doctor_id=10, appointment_date=clinic_today, slot_id=1), db=db)
    appointment_id = booked['appointment']['appointment_id']

    unchanged = update_appointment_status(appointment_id, data=None, db=db)
    created = create_consultation(
        CreateConsultationRequest(appointment_id=appointment_id, doctor_id=10, patient_id=7, diagnosis='Flu'),
        db=db,
    )
    completed = update_appointment_status(appointment_id, data=None, db=db)
    repeated = update_appointment_status(appointment_id, data=None, db=db)

    assert unchanged['message'] == 'Appointment status unchanged'
    assert created['message'] == 'Consultation created successfully'
    assert completed['message'] == 'Appointment marked as completed (consultation exists)'
    assert completed['status_name'] == 'Completed'
    assert repeated['message'] == 'Appointment status unchanged'
    assert repeated['new_status'] == completed['new_status']
    assert get_consultation_for_appointment(appointment_id, db=db)['exists'] is True
