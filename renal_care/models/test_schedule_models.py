# renal_care/models/test_schedule_models.py
"""
스케줄/이력/일일 요약 모델 변환 테스트

사용법: python -m pytest renal_care/models/test_schedule_models.py -v
"""

from datetime import date, datetime, time, timezone

import pytest

from renal_care.core.exceptions import UnsupportedFrequencyError
from renal_care.models.daily_summary import DailySummary
from renal_care.models.day_status import DayStatus
from renal_care.models.schedule import Schedule, TreatmentType, TreatmentFrequency
from renal_care.models.schedule_history_entry import ScheduleHistoryEntry

UTC = timezone.utc


def test_schedule_from_dict_parses_stored_document():
    schedule = Schedule.from_dict({
        'schedule_id': 'fluid1',
        'pet_id': 'pet-1',
        'treatment_type': 'fluid',
        'frequency': 'every_other_day',
        'reminder_times': ['08:00:00', '20:00'],
        'created_at': '2025-10-06T09:00:00Z',
        'target_volume': 100.0,
        'needle_gauge': 'gauge20',
    })

    assert schedule.is_fluid
    assert schedule.frequency is TreatmentFrequency.EVERY_OTHER_DAY
    assert schedule.reminder_times == [time(8, 0), time(20, 0)]
    assert schedule.updated_at == schedule.created_at == datetime(2025, 10, 6, 9, tzinfo=UTC)
    assert schedule.is_active


def test_schedule_from_dict_rejects_unknown_frequency():
    with pytest.raises(UnsupportedFrequencyError):
        Schedule.from_dict({
            'schedule_id': 'med1', 'pet_id': 'pet-1', 'treatment_type': 'medication',
            'frequency': 'weekly', 'created_at': '2025-10-06T09:00:00Z',
        })


def test_frequency_parse():
    assert TreatmentFrequency.parse('every_3_days') is TreatmentFrequency.EVERY_3_DAYS
    assert TreatmentFrequency.parse(TreatmentFrequency.ONCE_DAILY) is TreatmentFrequency.ONCE_DAILY
    with pytest.raises(UnsupportedFrequencyError):
        TreatmentFrequency.parse('hourly')


def test_schedule_to_dict_keeps_only_type_fields(make_schedule):
    data = make_schedule(reminder_times=(time(9, 0), time(21, 30))).to_dict()

    assert data['treatment_type'] == 'medication'
    assert data['reminder_times'] == ['09:00:00', '21:30:00']
    assert data['medication_name'] == 'Benazepril'
    assert 'target_volume' not in data
    assert 'needle_gauge' not in data


def test_schedule_is_flexible(make_schedule):
    assert make_schedule(reminder_times=()).is_flexible
    assert not make_schedule().is_flexible


def test_history_entry_snapshot_and_projection(make_schedule):
    before = make_schedule(frequency=TreatmentFrequency.TWICE_DAILY, reminder_times=(time(9, 0), time(21, 0)))
    live = make_schedule(frequency=TreatmentFrequency.ONCE_DAILY, target_dosage=5.0,
                         updated_at=datetime(2025, 10, 9, tzinfo=UTC))
    start, end = datetime(2025, 10, 6, tzinfo=UTC), datetime(2025, 10, 9, tzinfo=UTC)

    entry = ScheduleHistoryEntry.from_schedule(before, start, end)
    projected = entry.as_schedule(live)

    assert entry.document_id == str(int(start.timestamp() * 1000))
    assert projected.frequency is TreatmentFrequency.TWICE_DAILY
    assert projected.target_dosage == 2.5
    assert projected.created_at == live.created_at
    assert projected.updated_at == start
    assert live.frequency is TreatmentFrequency.ONCE_DAILY


def test_history_entry_contains():
    entry = ScheduleHistoryEntry(
        schedule_id='med1',
        effective_from=datetime(2025, 10, 6, tzinfo=UTC),
        effective_to=datetime(2025, 10, 9, tzinfo=UTC),
        treatment_type=TreatmentType.MEDICATION,
        frequency=TreatmentFrequency.ONCE_DAILY,
    )
    assert entry.contains(datetime(2025, 10, 6, tzinfo=UTC))
    assert entry.contains(datetime(2025, 10, 8, 23, 59, tzinfo=UTC))
    assert not entry.contains(datetime(2025, 10, 9, tzinfo=UTC))
    assert not entry.contains(datetime(2025, 10, 5, tzinfo=UTC))


def test_history_entry_dict_round_trip_preserves_interval(make_schedule):
    entry = ScheduleHistoryEntry.from_schedule(
        make_schedule(treatment_type=TreatmentType.FLUID, schedule_id='fluid1'),
        datetime(2025, 10, 6, tzinfo=UTC),
    )
    restored = ScheduleHistoryEntry.from_dict(entry.to_dict())

    assert restored == entry
    assert restored.effective_to is None


def test_daily_summary_from_dict_uses_search_date():
    summary = DailySummary.from_dict({
        'pet_id': 'pet-1',
        'searchDate': '2025-10-08',
        'medication_total_doses': 2,
        'medication_scheduled_doses': 4,
        'fluid_session_count': 1,
        'fluid_total_volume': 100,
    })

    assert summary.date == date(2025, 10, 8)
    assert summary.medication_total_doses == 2
    assert summary.medication_scheduled_doses == 4
    assert summary.fluid_total_volume == 100.0


def test_daily_summary_missing_counts_default_to_zero():
    summary = DailySummary.from_dict({'pet_id': 'pet-1', 'date': datetime(2025, 10, 8, tzinfo=UTC)})

    assert summary.date == date(2025, 10, 8)
    assert summary.medication_total_doses == 0
    assert summary.fluid_session_count == 0
    assert summary == DailySummary(pet_id='pet-1', date=date(2025, 10, 8))


def test_day_status_values():
    assert [s.value for s in DayStatus] == ['none', 'today', 'complete', 'missed']
