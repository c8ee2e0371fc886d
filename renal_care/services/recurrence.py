# renal_care/services/recurrence.py
"""
스케줄 반복 규칙 판정기

각 반복 규칙은 기준일(created_at 날짜)로부터의 경과 일수에 대한 닫힌 형태의 조건
(days_since_anchor % period == 0)으로 표현됩니다. 날짜를 하루씩 순회하지 않으므로
같은 (schedule, date) 쌍은 언제나 같은 결과를 냅니다.
"""

from datetime import date, datetime
from typing import Dict, Union

from renal_care.core.exceptions import UnsupportedFrequencyError
from renal_care.models.schedule import Schedule, TreatmentFrequency
from renal_care.utils.datetime_utils import DateTimeUtils

# 규칙 테이블: frequency -> 반복 주기(일)
# 하루 여러 번 투여하는 규칙도 적용일 판정은 매일이며, 횟수는 reminder_times로 결정됩니다.
RECURRENCE_PERIODS: Dict[TreatmentFrequency, int] = {
    TreatmentFrequency.ONCE_DAILY: 1,
    TreatmentFrequency.TWICE_DAILY: 1,
    TreatmentFrequency.THRICE_DAILY: 1,
    TreatmentFrequency.EVERY_OTHER_DAY: 2,
    TreatmentFrequency.EVERY_3_DAYS: 3,
}


def recurrence_period(frequency: TreatmentFrequency) -> int:
    """frequency의 반복 주기를 반환합니다. 테이블에 없으면 즉시 실패합니다."""
    try:
        return RECURRENCE_PERIODS[frequency]
    except KeyError:
        raise UnsupportedFrequencyError(f"반복 규칙 테이블에 없는 frequency입니다: {frequency!r}")


def applies(schedule: Schedule, on_date: Union[date, datetime]) -> bool:
    """
    스케줄이 해당 날짜에 치료를 요구하는지 판정합니다.

    - 비활성 버전은 어떤 날짜에도 적용되지 않습니다.
    - 생성일 이전 날짜에는 적용되지 않습니다.
    - 그 외에는 기준일로부터의 경과 일수가 주기의 배수일 때 적용됩니다 (기준일 당일 포함).
    """
    period = recurrence_period(schedule.frequency)
    if not schedule.is_active:
        return False

    days_since_anchor = DateTimeUtils.days_between(schedule.created_at, on_date)
    if days_since_anchor < 0:
        return False
    return days_since_anchor % period == 0


def required_count(schedule: Schedule) -> int:
    """적용일에 필요한 완료 횟수. 알림 시각이 없는 유연 스케줄도 최소 1회."""
    if schedule.is_flexible:
        return 1
    return len(schedule.reminder_times)
