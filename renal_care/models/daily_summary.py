# renal_care/models/daily_summary.py
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Dict, Any

from renal_care.utils.datetime_utils import DateTimeUtils


@dataclass(frozen=True)
class DailySummary:
    """
    Firestore 'daily_summaries' 컬렉션 문서 구조 (읽기 전용).
    기록 서비스가 하루 단위로 집계한 복약/수액 기록 수를 담습니다.
    """
    pet_id: str
    date: date
    medication_total_doses: int = 0       # 완료된 복약 횟수 (모든 약 합산)
    medication_scheduled_doses: int = 0   # 기록된 복약 세션 수 (완료/누락 포함)
    medication_missed_count: int = 0
    fluid_session_count: int = 0
    fluid_total_volume: float = 0.0       # ml
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailySummary":
        processed = DateTimeUtils.from_firestore(dict(data))
        # 조회 최적화용 searchDate(YYYY-MM-DD)가 날짜의 기준 값
        raw_date = processed.get('searchDate') or processed.get('date')
        return cls(
            pet_id=processed['pet_id'],
            date=DateTimeUtils.validate_date_field(raw_date, 'date'),
            medication_total_doses=int(processed.get('medication_total_doses') or 0),
            medication_scheduled_doses=int(processed.get('medication_scheduled_doses') or 0),
            medication_missed_count=int(processed.get('medication_missed_count') or 0),
            fluid_session_count=int(processed.get('fluid_session_count') or 0),
            fluid_total_volume=float(processed.get('fluid_total_volume') or 0.0),
            created_at=processed.get('created_at'),
            updated_at=processed.get('updated_at'),
        )
