# renal_care/api/progress/services.py
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Any, Optional, Union

from renal_care.api.schedules.services import ScheduleService
from renal_care.models.schedule import TreatmentType
from renal_care.services.base import BaseCareService
from renal_care.services.schedule_history_service import ScheduleHistoryService
from renal_care.services.summary_service import SummaryService
from renal_care.services.week_status_calculator import compute_week_statuses, DAYS_IN_WEEK
from renal_care.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class WeeklyProgressService(BaseCareService):
    """
    주간 진행 캘린더 데이터를 조립하는 서비스.
    필요한 데이터를 모두 조회한 뒤 순수 계산기(compute_week_statuses)에 전달합니다.
    """

    def __init__(self, schedule_service: ScheduleService,
                 history_service: ScheduleHistoryService,
                 summary_service: SummaryService):
        super().__init__()
        self.schedule_service = schedule_service
        self.history_service = history_service
        self.summary_service = summary_service

    def get_week_statuses(self, pet_id: str, week_start: Union[date, datetime],
                          now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        특정 주의 날짜별 상태를 계산합니다.

        Args:
            pet_id: 반려동물 ID
            week_start: 주에 속한 아무 날짜 (해당 주 월요일로 정규화)
            now: 기준 시각 (기본값: 현재 UTC 시각)

        Returns:
            {'week_start': date, 'days': [{'date': date, 'status': str}, ...]}
        """
        start = DateTimeUtils.start_of_week(week_start)
        end = start + timedelta(days=DAYS_IN_WEEK - 1)
        now = now or DateTimeUtils.now()

        # 비활성 스케줄도 과거 날짜의 의무를 결정할 수 있으므로 모두 조회
        schedules = self.schedule_service.get_schedules(pet_id, active_only=False)
        medication_schedules = [s for s in schedules if s.treatment_type is TreatmentType.MEDICATION]
        fluid_schedule = self._pick_fluid_schedule(schedules)

        relevant = medication_schedules + ([fluid_schedule] if fluid_schedule else [])
        histories = {s.schedule_id: self.history_service.get_history(s.schedule_id) for s in relevant}
        summaries = self.summary_service.fetch_daily_summaries(pet_id, start, end)

        statuses = compute_week_statuses(
            week_start=start,
            medication_schedules=medication_schedules,
            fluid_schedule=fluid_schedule,
            summaries=summaries,
            now=now,
            histories=histories,
        )

        logger.info(f"Week statuses computed for pet {pet_id} (week: {start})")
        return {
            'week_start': start,
            'days': [{'date': d, 'status': status.value} for d, status in statuses.items()],
        }

    @staticmethod
    def _pick_fluid_schedule(schedules):
        """활성 수액 스케줄을 우선하고, 없으면 가장 최근 수액 스케줄을 사용"""
        fluids = [s for s in schedules if s.treatment_type is TreatmentType.FLUID]
        if not fluids:
            return None
        active = [s for s in fluids if s.is_active]
        return (active or fluids)[0]
