# renal_care/api/schedules/services.py
import logging
import uuid
from typing import Dict, Any, List, Optional

from renal_care.core.exceptions import ScheduleNotFoundError, ScheduleConflictError
from renal_care.models.schedule import (
    Schedule, TreatmentType, TreatmentFrequency, MEDICATION_FIELDS, FLUID_FIELDS
)
from renal_care.services.base import BaseCareService
from renal_care.services.schedule_history_service import ScheduleHistoryService
from renal_care.utils.datetime_utils import DateTimeUtils

# 새 버전을 만드는 수정 가능 필드 (treatment_type, pet_id, created_at은 변경 불가)
VERSIONED_FIELDS = ('frequency', 'reminder_times', 'is_active') + MEDICATION_FIELDS + FLUID_FIELDS


class ScheduleService(BaseCareService):
    """
    치료 스케줄의 생성, 조회, 버전 관리 수정을 전담하는 서비스 클래스.
    수정 시에는 항상 이전 버전의 이력 스냅샷을 먼저 저장한 뒤 라이브 문서를 갱신합니다.
    """
    def __init__(self, history_service: ScheduleHistoryService):
        super().__init__()
        self.schedules_ref = self.db.collection('treatment_schedules')
        self.history_service = history_service
        logging.info("ScheduleService initialized.")

    def create_schedule(self, pet_id: str, schedule_data: Dict[str, Any]) -> Schedule:
        """새 스케줄을 생성합니다. 반려동물당 활성 수액 스케줄은 하나만 허용됩니다."""
        treatment_type = TreatmentType(schedule_data['treatment_type'])
        if treatment_type is TreatmentType.FLUID and self.get_fluid_schedule(pet_id) is not None:
            raise ScheduleConflictError("이미 활성화된 수액 스케줄이 있습니다.")

        now = DateTimeUtils.now()
        type_fields = MEDICATION_FIELDS if treatment_type is TreatmentType.MEDICATION else FLUID_FIELDS
        schedule = Schedule(
            schedule_id=str(uuid.uuid4()),
            pet_id=pet_id,
            treatment_type=treatment_type,
            frequency=TreatmentFrequency.parse(schedule_data['frequency']),
            reminder_times=[DateTimeUtils.parse_time_of_day(t) for t in schedule_data.get('reminder_times', [])],
            is_active=True,
            created_at=now,
            updated_at=now,
            **{name: schedule_data.get(name) for name in type_fields}
        )

        try:
            firestore_data = self._convert_date_for_firestore(schedule.to_dict())
            self.schedules_ref.document(schedule.schedule_id).set(firestore_data)
        except Exception as e:
            logging.error(f"Failed to create schedule for pet {pet_id}: {e}", exc_info=True)
            raise

        logging.info(f"Schedule created for pet {pet_id} (id: {schedule.schedule_id}, type: {treatment_type.value})")
        return schedule

    def get_schedule(self, pet_id: str, schedule_id: str) -> Schedule:
        """스케줄 하나를 조회합니다. 다른 반려동물의 스케줄이면 찾을 수 없는 것으로 처리합니다."""
        doc = self.schedules_ref.document(schedule_id).get()
        if not doc.exists:
            raise ScheduleNotFoundError("해당 스케줄을 찾을 수 없습니다.")

        data = doc.to_dict()
        if data.get('pet_id') != pet_id:
            raise ScheduleNotFoundError("해당 스케줄을 찾을 수 없습니다.")
        return Schedule.from_dict(data)

    def get_schedules(self, pet_id: str, treatment_type: Optional[TreatmentType] = None,
                      active_only: bool = True) -> List[Schedule]:
        """반려동물의 스케줄 목록을 생성일 내림차순으로 조회합니다."""
        try:
            query = self.schedules_ref.where('pet_id', '==', pet_id)
            if treatment_type is not None:
                query = query.where('treatment_type', '==', treatment_type.value)
            if active_only:
                query = query.where('is_active', '==', True)

            # 복합 색인을 피하기 위해 정렬은 메모리에서 수행
            schedules = [Schedule.from_dict(doc.to_dict()) for doc in query.stream()]
            schedules.sort(key=lambda s: s.created_at, reverse=True)
            return schedules

        except Exception as e:
            logging.error(f"Failed to get schedules for pet {pet_id}: {e}", exc_info=True)
            raise

    def get_medication_schedules(self, pet_id: str, active_only: bool = True) -> List[Schedule]:
        return self.get_schedules(pet_id, TreatmentType.MEDICATION, active_only)

    def get_fluid_schedule(self, pet_id: str) -> Optional[Schedule]:
        """활성 수액 스케줄 (최대 1개)"""
        schedules = self.get_schedules(pet_id, TreatmentType.FLUID)
        return schedules[0] if schedules else None

    def update_schedule(self, pet_id: str, schedule_id: str, update_data: Dict[str, Any]) -> Schedule:
        """
        스케줄을 새 버전으로 수정합니다.

        1. 현재 버전을 [updated_at, now) 구간의 이력 스냅샷으로 저장
        2. 스냅샷 저장이 끝난 후에만 라이브 문서를 갱신
        스냅샷 저장이 실패하면 라이브 문서는 수정되지 않습니다.
        """
        changes = {k: v for k, v in update_data.items() if k in VERSIONED_FIELDS}
        if not changes:
            raise ValueError("수정할 데이터가 제공되지 않았습니다.")

        current = self.get_schedule(pet_id, schedule_id)

        # 다른 치료 유형의 필드는 저장되지 않으므로 버림
        other_type_fields = FLUID_FIELDS if current.is_medication else MEDICATION_FIELDS
        changes = {k: v for k, v in changes.items() if k not in other_type_fields}
        if not changes:
            raise ValueError(f"{current.treatment_type.value} 스케줄에 적용할 수 있는 수정 항목이 없습니다.")

        if 'frequency' in changes:
            changes['frequency'] = TreatmentFrequency.parse(changes['frequency'])
        if 'reminder_times' in changes:
            changes['reminder_times'] = [DateTimeUtils.parse_time_of_day(t) for t in changes['reminder_times']]
        if changes.get('is_active') and not current.is_active and current.is_fluid:
            if self.get_fluid_schedule(pet_id) is not None:
                raise ScheduleConflictError("이미 활성화된 수액 스케줄이 있습니다.")

        now = DateTimeUtils.now()
        self.history_service.save_snapshot(schedule_id, current, effective_from=current.updated_at, effective_to=now)

        updated = current.with_updates(updated_at=now, **changes)
        try:
            firestore_data = self._convert_date_for_firestore(updated.to_dict())
            self.schedules_ref.document(schedule_id).update(firestore_data)
        except Exception as e:
            logging.error(f"Failed to update schedule {schedule_id} after snapshot: {e}", exc_info=True)
            raise

        logging.info(f"Schedule {schedule_id} updated for pet {pet_id} with fields: {list(changes.keys())}")
        return updated

    def deactivate_schedule(self, pet_id: str, schedule_id: str) -> Schedule:
        """스케줄 비활성화 (이력은 유지)"""
        return self.update_schedule(pet_id, schedule_id, {'is_active': False})
