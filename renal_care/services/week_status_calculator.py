# renal_care/services/week_status_calculator.py
"""
주간 진행 캘린더의 날짜별 상태 계산기

입력은 모두 이미 조회된 값(스케줄, 이력, 일일 요약, 현재 시각)이며,
저장소 접근이나 캐시 없이 매 호출마다 처음부터 계산하는 순수 함수입니다.

상태 규칙:
- 미래: none
- 적용되는 스케줄이 없는 지난 날: none
- 적용되는 스케줄이 없는 오늘: today
- 오늘, 미완료: today / 모두 충족: complete
- 지난 날, 하나라도 미충족: missed / 모두 충족: complete

치료 유형별로 (적용 스케줄의 required_count 합) <= (기록 수) 이면 충족으로 봅니다.
기록이 더 많은 경우(분할 투여 등)도 충족으로 처리합니다.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Mapping, Optional, Sequence, Union

from renal_care.models.daily_summary import DailySummary
from renal_care.models.day_status import DayStatus
from renal_care.models.schedule import Schedule, TreatmentType
from renal_care.models.schedule_history_entry import ScheduleHistoryEntry
from renal_care.services.recurrence import applies, required_count
from renal_care.services.schedule_history_service import find_effective_entry
from renal_care.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)

DAYS_IN_WEEK = 7


def version_lookup_instant(on_date: date, history: Sequence[ScheduleHistoryEntry]) -> datetime:
    """
    on_date의 버전을 고를 기준 시각.

    기본은 00:00 UTC이지만, 가장 오래된 이력이 그날 도중에 시작하면(생성일)
    그 시작 시각을 사용합니다. 하루 중 수정은 다음 날부터 적용됩니다.
    """
    day_start = DateTimeUtils.start_of_day(on_date)
    earliest = min(entry.effective_from for entry in history)
    if day_start < earliest and DateTimeUtils.to_date(earliest) == DateTimeUtils.to_date(on_date):
        return earliest
    return day_start


def effective_schedule(schedule: Schedule, on_date: date,
                       history: Optional[Sequence[ScheduleHistoryEntry]] = None) -> Schedule:
    """
    on_date 당시 유효했던 스케줄 버전을 반환합니다.
    이력에서 찾지 못하면 현재 스케줄이 그 날짜의 버전입니다.
    """
    if not history:
        return schedule
    entry = find_effective_entry(history, version_lookup_instant(on_date, history))
    if entry is None:
        return schedule
    return entry.as_schedule(schedule)


def actual_count(summary: Optional[DailySummary], treatment_type: TreatmentType) -> int:
    """일일 요약에서 치료 유형별 기록 수를 읽습니다. 요약이 없으면 0."""
    if summary is None:
        return 0
    if treatment_type is TreatmentType.MEDICATION:
        return summary.medication_total_doses
    return summary.fluid_session_count


def required_by_type(schedules: Sequence[Schedule]) -> Dict[TreatmentType, int]:
    """적용되는 스케줄들의 필요 횟수를 치료 유형별로 합산"""
    required: Dict[TreatmentType, int] = {}
    for schedule in schedules:
        required[schedule.treatment_type] = required.get(schedule.treatment_type, 0) + required_count(schedule)
    return required


def is_satisfied(required: Mapping[TreatmentType, int], summary: Optional[DailySummary]) -> bool:
    """의무가 있는 모든 치료 유형이 각각 충족되어야 True"""
    return all(actual_count(summary, t) >= count for t, count in required.items())


def classify_day(has_obligation: bool, is_future: bool, is_today: bool, satisfied: bool) -> DayStatus:
    """(의무 여부, 미래, 오늘, 충족) 조합에 대한 순수 분류 함수"""
    if is_future:
        return DayStatus.NONE
    if not has_obligation:
        return DayStatus.TODAY if is_today else DayStatus.NONE
    if satisfied:
        return DayStatus.COMPLETE
    return DayStatus.TODAY if is_today else DayStatus.MISSED


def compute_day_status(on_date: date, schedules: Sequence[Schedule],
                       summary: Optional[DailySummary], today: date,
                       histories: Optional[Mapping[str, Sequence[ScheduleHistoryEntry]]] = None) -> DayStatus:
    """하루의 상태를 계산합니다."""
    if on_date > today:
        return DayStatus.NONE

    histories = histories or {}
    applicable: List[Schedule] = []
    for schedule in schedules:
        version = effective_schedule(schedule, on_date, histories.get(schedule.schedule_id))
        if applies(version, on_date):
            applicable.append(version)

    required = required_by_type(applicable)
    return classify_day(
        has_obligation=bool(applicable),
        is_future=False,
        is_today=on_date == today,
        satisfied=is_satisfied(required, summary),
    )


def compute_week_statuses(week_start: Union[date, datetime],
                          medication_schedules: Sequence[Schedule],
                          fluid_schedule: Optional[Schedule],
                          summaries: Mapping[date, Optional[DailySummary]],
                          now: Union[date, datetime],
                          histories: Optional[Mapping[str, Sequence[ScheduleHistoryEntry]]] = None) -> Dict[date, DayStatus]:
    """
    week_start부터 7일간의 날짜별 상태를 계산합니다.

    Args:
        week_start: 주의 첫날 (시각은 무시)
        medication_schedules: 복약 스케줄 목록
        fluid_schedule: 수액 스케줄 (없으면 None)
        summaries: 날짜 -> 일일 요약. 없는 날짜는 기록 0건으로 처리
        now: 현재 시각
        histories: 스케줄 ID -> 버전 이력. 없으면 현재 스케줄로 계산

    Returns:
        날짜 순서대로 정렬된 {date: DayStatus}
    """
    start = DateTimeUtils.to_date(week_start)
    today = DateTimeUtils.to_date(now)

    schedules: List[Schedule] = list(medication_schedules)
    if fluid_schedule is not None:
        schedules.append(fluid_schedule)

    statuses: Dict[date, DayStatus] = {}
    for offset in range(DAYS_IN_WEEK):
        on_date = start + timedelta(days=offset)
        statuses[on_date] = compute_day_status(
            on_date, schedules, summaries.get(on_date), today, histories
        )

    logger.debug(f"Week statuses computed from {start}: {[s.value for s in statuses.values()]}")
    return statuses
