# renal_care/services/schedule_history_service.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from firebase_admin import firestore

from renal_care.models.schedule import Schedule
from renal_care.models.schedule_history_entry import ScheduleHistoryEntry
from renal_care.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


def find_effective_entry(entries: Iterable[ScheduleHistoryEntry], at: datetime) -> Optional[ScheduleHistoryEntry]:
    """
    이미 조회된 이력 목록에서 at 시점에 유효했던 버전을 찾습니다.

    effective_from <= at 인 항목 중 effective_from이 가장 늦은 것을 고른 뒤
    effective_to가 없거나 at < effective_to 인 경우에만 반환합니다.
    구간이 겹치는 경우에도 가장 최근 버전이 우선합니다.
    """
    candidates = [entry for entry in entries if entry.effective_from <= at]
    if not candidates:
        return None

    latest = max(candidates, key=lambda entry: entry.effective_from)
    return latest if latest.contains(at) else None


class ScheduleHistoryService:
    """
    스케줄 버전 이력(추가 전용 로그)의 저장 및 조회를 전담하는 서비스 클래스.
    저장소 오류는 로깅 후 그대로 호출자에게 전달하며 재시도하지 않습니다.
    """
    def __init__(self):
        self.db = firestore.client()
        self.schedules_ref = self.db.collection('treatment_schedules')
        logger.info("ScheduleHistoryService initialized.")

    def _history_ref(self, schedule_id: str):
        return self.schedules_ref.document(schedule_id).collection('history')

    def save_snapshot(self, schedule_id: str, schedule: Schedule,
                      effective_from: datetime, effective_to: Optional[datetime] = None) -> ScheduleHistoryEntry:
        """
        변경 직전의 스케줄 값을 [effective_from, effective_to) 구간의 스냅샷으로 저장합니다.
        라이브 스케줄을 수정하기 전에 반드시 먼저 호출되어야 합니다.
        """
        try:
            entry = ScheduleHistoryEntry.from_schedule(schedule, effective_from, effective_to)
            if entry.schedule_id != schedule_id:
                raise ValueError(f"스케줄 ID가 일치하지 않습니다: {schedule_id} != {entry.schedule_id}")

            firestore_data = DateTimeUtils.for_firestore(entry.to_dict())
            self._history_ref(schedule_id).document(entry.document_id).set(firestore_data)

            logger.info(
                f"Schedule snapshot saved (schedule: {schedule_id}, "
                f"from: {DateTimeUtils.to_iso_string(entry.effective_from)}, "
                f"to: {DateTimeUtils.to_iso_string(entry.effective_to) if entry.effective_to else None})"
            )
            return entry

        except Exception as e:
            logger.error(f"스케줄 스냅샷 저장 실패 (schedule: {schedule_id}): {e}", exc_info=True)
            raise

    def version_at(self, schedule_id: str, at: datetime) -> Optional[ScheduleHistoryEntry]:
        """
        at 시점에 유효했던 스케줄 버전을 조회합니다.
        해당하는 이력이 없으면 None을 반환하며, 호출자는 현재 스케줄을 사용해야 합니다.
        """
        at = DateTimeUtils.validate_datetime_field(at, 'at')
        try:
            query = self._history_ref(schedule_id) \
                .where('effective_from', '<=', at) \
                .order_by('effective_from', direction=firestore.Query.DESCENDING) \
                .limit(1)

            entries = [ScheduleHistoryEntry.from_dict(doc.to_dict()) for doc in query.stream()]

        except Exception as e:
            logger.error(f"스케줄 이력 조회 실패 (schedule: {schedule_id}, at: {at}): {e}", exc_info=True)
            raise

        entry = find_effective_entry(entries, at)
        if entry is None:
            logger.debug(f"No history version for schedule {schedule_id} at {DateTimeUtils.to_iso_string(at)}")
        return entry

    def get_history(self, schedule_id: str) -> List[ScheduleHistoryEntry]:
        """스케줄의 전체 이력을 effective_from 내림차순(최신 먼저)으로 반환합니다."""
        try:
            query = self._history_ref(schedule_id) \
                .order_by('effective_from', direction=firestore.Query.DESCENDING)
            entries = [ScheduleHistoryEntry.from_dict(doc.to_dict()) for doc in query.stream()]
            logger.info(f"Retrieved {len(entries)} history entries for schedule {schedule_id}")
            return entries

        except Exception as e:
            logger.error(f"스케줄 전체 이력 조회 실패 (schedule: {schedule_id}): {e}", exc_info=True)
            raise
