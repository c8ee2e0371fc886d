# renal_care/models/schedule.py
from dataclasses import dataclass, field, replace
from datetime import datetime, time
from enum import Enum
from typing import Optional, List, Dict, Any

from renal_care.core.exceptions import UnsupportedFrequencyError
from renal_care.utils.datetime_utils import DateTimeUtils


class TreatmentType(Enum):
    MEDICATION = "medication"
    FLUID = "fluid"


class TreatmentFrequency(Enum):
    """복약/수액 반복 규칙. 실제 판정 로직은 services.recurrence의 규칙 테이블에 있습니다."""
    ONCE_DAILY = "once_daily"
    TWICE_DAILY = "twice_daily"
    THRICE_DAILY = "thrice_daily"
    EVERY_OTHER_DAY = "every_other_day"
    EVERY_3_DAYS = "every_3_days"

    @classmethod
    def parse(cls, value: Any) -> "TreatmentFrequency":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedFrequencyError(f"지원하지 않는 반복 규칙입니다: {value!r}")


MEDICATION_FIELDS = (
    'medication_name', 'target_dosage', 'medication_unit',
    'medication_strength_amount', 'medication_strength_unit',
)
FLUID_FIELDS = ('target_volume', 'preferred_location', 'needle_gauge')


@dataclass(frozen=True)
class Schedule:
    """
    Firestore 'treatment_schedules' 컬렉션 문서 구조.
    반려동물의 반복 치료 의무(복약 또는 피하 수액)를 표현.

    created_at은 격일/3일 간격 규칙의 기준일(anchor)이며,
    updated_at은 현재 버전이 효력을 갖기 시작한 시점입니다.
    """
    schedule_id: str
    pet_id: str
    treatment_type: TreatmentType
    frequency: TreatmentFrequency
    created_at: datetime
    updated_at: datetime
    reminder_times: List[time] = field(default_factory=list)
    is_active: bool = True
    # 복약 전용
    medication_name: Optional[str] = None
    target_dosage: Optional[float] = None
    medication_unit: Optional[str] = None
    medication_strength_amount: Optional[str] = None
    medication_strength_unit: Optional[str] = None
    # 수액 전용
    target_volume: Optional[float] = None
    preferred_location: Optional[str] = None
    needle_gauge: Optional[str] = None

    @property
    def is_medication(self) -> bool:
        return self.treatment_type is TreatmentType.MEDICATION

    @property
    def is_fluid(self) -> bool:
        return self.treatment_type is TreatmentType.FLUID

    @property
    def is_flexible(self) -> bool:
        """고정 알림 시각이 없는 스케줄 (적용일마다 1회 완료 필요)."""
        return not self.reminder_times

    def with_updates(self, **changes) -> "Schedule":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schedule":
        """
        Firestore 문서 딕셔너리로부터 Schedule 인스턴스를 생성합니다.
        Enum 문자열은 엄격하게 변환하며, 알 수 없는 값은 예외를 발생시킵니다.
        """
        processed = DateTimeUtils.from_firestore(dict(data))

        processed['treatment_type'] = TreatmentType(processed['treatment_type'])
        processed['frequency'] = TreatmentFrequency.parse(processed['frequency'])
        processed['reminder_times'] = [
            DateTimeUtils.parse_time_of_day(t) for t in processed.get('reminder_times') or []
        ]
        processed['created_at'] = DateTimeUtils.validate_datetime_field(processed.get('created_at'), 'created_at')
        processed['updated_at'] = DateTimeUtils.validate_datetime_field(
            processed.get('updated_at') or processed['created_at'], 'updated_at'
        )
        processed['is_active'] = processed.get('is_active', True)

        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in processed.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        """Firestore 저장용 딕셔너리. 치료 유형에 해당하지 않는 필드는 제외합니다."""
        data = {
            'schedule_id': self.schedule_id,
            'pet_id': self.pet_id,
            'treatment_type': self.treatment_type.value,
            'frequency': self.frequency.value,
            'reminder_times': [DateTimeUtils.to_time_string(t) for t in self.reminder_times],
            'is_active': self.is_active,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }
        type_fields = MEDICATION_FIELDS if self.is_medication else FLUID_FIELDS
        for name in type_fields:
            data[name] = getattr(self, name)
        return data
