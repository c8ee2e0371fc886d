# renal_care/conftest.py
"""
공용 테스트 픽스처

사용법: python -m pytest -v
"""

from datetime import datetime, time, timezone
from unittest import mock

import pytest

from renal_care.models.schedule import Schedule, TreatmentType, TreatmentFrequency
from renal_care.models.daily_summary import DailySummary


@pytest.fixture
def fake_db():
    """firestore.client()가 반환하는 DB를 MagicMock으로 대체"""
    db = mock.MagicMock(name='firestore_db')
    with mock.patch('firebase_admin.firestore.client', return_value=db):
        yield db


@pytest.fixture
def make_schedule():
    """테스트용 Schedule 생성 팩토리"""
    def _make(schedule_id='med1', treatment_type=TreatmentType.MEDICATION,
              frequency=TreatmentFrequency.ONCE_DAILY, created_at=datetime(2025, 10, 6, tzinfo=timezone.utc),
              reminder_times=(time(9, 0),), is_active=True, **extra):
        defaults = {}
        if treatment_type is TreatmentType.MEDICATION:
            defaults = {'medication_name': 'Benazepril', 'target_dosage': 2.5, 'medication_unit': 'mg'}
        else:
            defaults = {'target_volume': 100.0, 'preferred_location': 'shoulderBladeLeft', 'needle_gauge': 'gauge20'}
        defaults.update(extra)
        return Schedule(
            schedule_id=schedule_id,
            pet_id='pet-1',
            treatment_type=treatment_type,
            frequency=frequency,
            reminder_times=list(reminder_times),
            is_active=is_active,
            created_at=created_at,
            updated_at=defaults.pop('updated_at', created_at),
            **defaults
        )
    return _make


@pytest.fixture
def make_summary():
    """테스트용 DailySummary 생성 팩토리"""
    def _make(on_date, medication_total_doses=0, fluid_session_count=0):
        return DailySummary(
            pet_id='pet-1',
            date=on_date,
            medication_total_doses=medication_total_doses,
            fluid_session_count=fluid_session_count,
        )
    return _make
