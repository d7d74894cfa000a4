from datetime import date, time, timedelta

import pytest
from fastapi import HTTPException

from medcare.routes.availability_routes import (
    SchedulePeriodResponse,
    check_slot_availability,
    get_available_schedule,
    get_latest_schedule,
)
from medcare.services.availability import day_of_week


@pytest.fixture
def clinic_today(records):
    today = date.today()
    records.doctor(10)
    records.patient(7)
    records.schedule(10, day_of_week(today), 1)
    records.schedule(10, day_of_week(today), 2)
    records.appointment(7, 10, today, 2)
    return today


def test_schedule_period_serializes_from_alias() -> None:
    period = SchedulePeriodResponse.model_validate({'from': date(2026, 10, 19), 'to': date(2026, 10, 26)})

    assert period.from_date == date(2026, 10, 19)
    assert period.model_dump(by_alias=True) == {'from': date(2026, 10, 19), 'to': date(2026, 10, 26)}


def test_get_available_schedule_for_today(db, clinic_today) -> None:
    result = get_available_schedule(10, date=clinic_today, db=db)

    assert result['date'] == clinic_today
    assert [(slot['slot_id'], slot['is_available']) for slot in result['slots']] == [(1, True), (2, False)]
    assert result['available_count'] == 1


def test_get_available_schedule_rejects_past_dates(db, clinic_today) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_available_schedule(10, date=clinic_today - timedelta(days=1), db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Cannot book appointments in the past'


def test_get_available_schedule_requires_date(db, clinic_today) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_available_schedule(10, date=None, db=db)

    assert exception_info.value.status_code == 400


def test_get_latest_schedule_starts_today(db, clinic_today) -> None:
    result = get_latest_schedule(10, db=db)

    assert result['schedule_period']['from'] == clinic_today
    assert result['availability'][0]['date'] == clinic_today
    assert result['availability'][0]['available_slots'] == 1


def test_check_slot_availability_route(db, clinic_today) -> None:
    free = check_slot_availability(doctor_id=10, slot_id=1, appointment_date=clinic_today, db=db)
    taken = check_slot_availability(doctor_id=10, slot_id=2, appointment_date=clinic_today, db=db)

    assert free['is_available'] is True
    assert free['slot_details'] == {'start_time': time(9, 0), 'end_time': time(9, 30)}
    assert taken == {
        'is_available': False,
        'reason': 'Already booked',
        'slot_details': {'start_time': time(9, 30), 'end_time': time(10, 0)},
    }
