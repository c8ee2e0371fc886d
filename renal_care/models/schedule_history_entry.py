# renal_care/models/schedule_history_entry.py
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Optional, List, Dict, Any

from renal_care.models.schedule import (
    Schedule, TreatmentType, TreatmentFrequency, MEDICATION_FIELDS, FLUID_FIELDS
)
from renal_care.utils.datetime_utils import DateTimeUtils


@dataclass(frozen=True)
class ScheduleHistoryEntry:
    """
    'treatment_schedules/{schedule_id}/history' 서브컬렉션 문서 구조.
    특정 기간 [effective_from, effective_to) 동안 유효했던 스케줄의 불변 스냅샷.
    effective_to가 None이면 아직 대체되지 않은 버전입니다.
    """
    schedule_id: str
    effective_from: datetime
    treatment_type: TreatmentType
    frequency: TreatmentFrequency
    reminder_times: List[time] = field(default_factory=list)
    effective_to: Optional[datetime] = None
    is_active: bool = True
    medication_name: Optional[str] = None
    target_dosage: Optional[float] = None
    medication_unit: Optional[str] = None
    medication_strength_amount: Optional[str] = None
    medication_strength_unit: Optional[str] = None
    target_volume: Optional[float] = None
    preferred_location: Optional[str] = None
    needle_gauge: Optional[str] = None

    @property
    def document_id(self) -> str:
        """effective_from의 epoch 밀리초를 문서 ID로 사용"""
        return str(DateTimeUtils.to_timestamp_ms(self.effective_from))

    def contains(self, at: datetime) -> bool:
        """at 시점이 이 버전의 유효 구간 안에 있는지 확인 (끝은 미포함)"""
        if at < self.effective_from:
            return False
        return self.effective_to is None or at < self.effective_to

    @classmethod
    def from_schedule(cls, schedule: Schedule, effective_from: datetime,
                      effective_to: Optional[datetime] = None) -> "ScheduleHistoryEntry":
        """변경 직전의 Schedule 값으로 스냅샷을 만듭니다."""
        type_fields = MEDICATION_FIELDS if schedule.is_medication else FLUID_FIELDS
        return cls(
            schedule_id=schedule.schedule_id,
            effective_from=DateTimeUtils.validate_datetime_field(effective_from, 'effective_from'),
            effective_to=(DateTimeUtils.validate_datetime_field(effective_to, 'effective_to')
                          if effective_to is not None else None),
            treatment_type=schedule.treatment_type,
            frequency=schedule.frequency,
            reminder_times=list(schedule.reminder_times),
            is_active=schedule.is_active,
            **{name: getattr(schedule, name) for name in type_fields}
        )

    def as_schedule(self, live: Schedule) -> Schedule:
        """
        스냅샷을 Schedule 뷰로 투영합니다.
        식별자와 반복 기준일(created_at)은 현재 스케줄의 값을 그대로 사용합니다.
        """
        return live.with_updates(
            treatment_type=self.treatment_type,
            frequency=self.frequency,
            reminder_times=list(self.reminder_times),
            is_active=self.is_active,
            updated_at=self.effective_from,
            medication_name=self.medication_name,
            target_dosage=self.target_dosage,
            medication_unit=self.medication_unit,
            medication_strength_amount=self.medication_strength_amount,
            medication_strength_unit=self.medication_strength_unit,
            target_volume=self.target_volume,
            preferred_location=self.preferred_location,
            needle_gauge=self.needle_gauge,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleHistoryEntry":
        processed = DateTimeUtils.from_firestore(dict(data))
        processed['treatment_type'] = TreatmentType(processed['treatment_type'])
        processed['frequency'] = TreatmentFrequency.parse(processed['frequency'])
        processed['reminder_times'] = [
            DateTimeUtils.parse_time_of_day(t) for t in processed.get('reminder_times') or []
        ]
        processed['effective_from'] = DateTimeUtils.validate_datetime_field(
            processed.get('effective_from'), 'effective_from'
        )
        if processed.get('effective_to') is not None:
            processed['effective_to'] = DateTimeUtils.validate_datetime_field(
                processed['effective_to'], 'effective_to'
            )

        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'schedule_id': self.schedule_id,
            'effective_from': self.effective_from,
            'effective_to': self.effective_to,
            'treatment_type': self.treatment_type.value,
            'frequency': self.frequency.value,
            'reminder_times': [DateTimeUtils.to_time_string(t) for t in self.reminder_times],
            'is_active': self.is_active,
            'medication_name': self.medication_name,
            'target_dosage': self.target_dosage,
            'medication_unit': self.medication_unit,
            'medication_strength_amount': self.medication_strength_amount,
            'medication_strength_unit': self.medication_strength_unit,
            'target_volume': self.target_volume,
            'preferred_location': self.preferred_location,
            'needle_gauge': self.needle_gauge,
        }
