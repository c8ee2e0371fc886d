# renal_care/utils/datetime_utils.py
"""
스케줄/이력/요약 전반에서 공유하는 시간·날짜 유틸리티

- 백엔드의 모든 시각은 UTC timezone-aware datetime으로 다룹니다.
- 달력 날짜는 UTC 기준 날짜이며, 하루의 기준 시각은 00:00 UTC입니다.
- Firestore에는 date 타입이 없으므로 date는 00:00 UTC datetime으로 저장합니다.
"""

import logging
from datetime import datetime, date, timezone, time, timedelta
from typing import Union, Any
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


def _as_utc(dt: datetime) -> datetime:
    """naive datetime은 UTC로 간주하고, aware datetime은 UTC로 변환"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class DateTimeUtils:
    """UTC 기준 시간 처리와 Firestore 변환을 모아 둔 정적 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def today() -> date:
        """UTC 기준 오늘 날짜"""
        return DateTimeUtils.now().date()

    # ---------------------------------------------------------------------
    # 파싱
    # ---------------------------------------------------------------------
    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 8601 문자열을 UTC datetime으로 파싱합니다.

        '2025-10-13T10:30:00Z', '2025-10-13T10:30:00+09:00' 형식과
        오프셋 없는 값(UTC로 간주)을 허용합니다.
        """
        if not iso_string:
            raise ValueError("시각 문자열이 비어 있습니다")
        try:
            normalized = iso_string[:-1] + '+00:00' if iso_string.endswith('Z') else iso_string
            return _as_utc(dateutil_parser.isoparse(normalized))
        except (ValueError, OverflowError) as e:
            logger.error(f"ISO 시각 파싱 실패: {iso_string!r} ({e})")
            raise ValueError(f"잘못된 ISO 시각 형식입니다: {iso_string}")

    @staticmethod
    def parse_date_string(date_string: str) -> date:
        """'2025-10-13', '2025/10/13' 같은 날짜 문자열을 date로 파싱"""
        if not date_string:
            raise ValueError("날짜 문자열이 비어 있습니다")
        try:
            return dateutil_parser.parse(date_string).date()
        except (ValueError, OverflowError) as e:
            logger.error(f"날짜 파싱 실패: {date_string!r} ({e})")
            raise ValueError(f"잘못된 날짜 형식입니다: {date_string}")

    @staticmethod
    def parse_time_of_day(value: Union[str, time, datetime]) -> time:
        """
        알림 시각 값을 tz 없는 time 객체로 변환합니다.

        "21:00", "21:00:00" 문자열과 datetime(시각 부분만 사용)을 허용합니다.
        """
        if isinstance(value, datetime):
            return value.time().replace(tzinfo=None)
        if isinstance(value, time):
            return value.replace(tzinfo=None)
        if isinstance(value, str) and value:
            try:
                return time.fromisoformat(value)
            except ValueError:
                pass
        logger.error(f"알림 시각 파싱 실패: {value!r}")
        raise ValueError(f"잘못된 시각 형식입니다: {value!r}")

    # ---------------------------------------------------------------------
    # 문자열/숫자 변환
    # ---------------------------------------------------------------------
    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """UTC ISO 문자열 ('Z' 접미사)"""
        return _as_utc(dt).isoformat().replace('+00:00', 'Z')

    @staticmethod
    def to_date_string(d: date) -> str:
        """daily_summaries의 searchDate 형식 (YYYY-MM-DD)"""
        return d.strftime('%Y-%m-%d')

    @staticmethod
    def to_time_string(t: time) -> str:
        return t.strftime('%H:%M:%S')

    @staticmethod
    def to_timestamp_ms(dt: datetime) -> int:
        """epoch 밀리초. 이력 문서 ID로 사용됩니다."""
        return int(_as_utc(dt).timestamp() * 1000)

    # ---------------------------------------------------------------------
    # 날짜 단위 계산
    # ---------------------------------------------------------------------
    @staticmethod
    def to_date(value: DateLike) -> date:
        """
        datetime/date 값을 달력 날짜로 정규화합니다.
        timezone-aware datetime은 UTC로 변환한 뒤 날짜를 취합니다.
        """
        if isinstance(value, datetime):
            return _as_utc(value).date() if value.tzinfo is not None else value.date()
        if isinstance(value, date):
            return value
        raise ValueError(f"date 또는 datetime 객체여야 합니다: {value!r}")

    @staticmethod
    def start_of_day(value: DateLike) -> datetime:
        """해당 날짜의 00:00:00 UTC"""
        return datetime.combine(DateTimeUtils.to_date(value), time.min, tzinfo=timezone.utc)

    @staticmethod
    def start_of_week(value: DateLike) -> date:
        """해당 날짜가 속한 주의 월요일"""
        d = DateTimeUtils.to_date(value)
        return d - timedelta(days=d.weekday())

    @staticmethod
    def days_between(start: DateLike, end: DateLike) -> int:
        """end - start 일수. 시각은 무시하며 end가 앞서면 음수"""
        return (DateTimeUtils.to_date(end) - DateTimeUtils.to_date(start)).days

    # ---------------------------------------------------------------------
    # Firestore 변환
    # ---------------------------------------------------------------------
    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        저장 직전 값을 Firestore 호환 형태로 재귀 변환합니다.
        date는 00:00 UTC datetime으로, datetime은 UTC aware로 바꿉니다.
        """
        if isinstance(obj, datetime):
            return _as_utc(obj)
        if isinstance(obj, date):
            return DateTimeUtils.start_of_day(obj)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        조회한 문서 값을 재귀 변환합니다.
        Firestore Timestamp(DatetimeWithNanoseconds 포함)는 UTC datetime이 됩니다.
        """
        if isinstance(obj, datetime):
            return _as_utc(obj)
        if hasattr(obj, 'timestamp'):
            return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
        if isinstance(obj, list):
            return [DateTimeUtils.from_firestore(item) for item in obj]
        return obj

    # ---------------------------------------------------------------------
    # 필드 검증
    # ---------------------------------------------------------------------
    @staticmethod
    def validate_datetime_field(value: Any, field_name: str = "datetime") -> datetime:
        """
        문서/요청 필드를 UTC datetime으로 검증·변환합니다.

        Raises:
            ValueError: 값이 없거나 해석할 수 없는 경우
        """
        if value is None:
            raise ValueError(f"{field_name} 값이 없습니다")
        try:
            if isinstance(value, str):
                return DateTimeUtils.parse_iso_datetime(value)
            if isinstance(value, datetime) or hasattr(value, 'timestamp'):
                return DateTimeUtils.from_firestore(value)
        except ValueError as e:
            logger.error(f"{field_name} 검증 실패: {value!r} ({e})")
            raise ValueError(f"잘못된 {field_name} 형식입니다: {value}")
        raise ValueError(f"{field_name}은 ISO 문자열 또는 datetime이어야 합니다: {value!r}")

    @staticmethod
    def validate_date_field(value: Any, field_name: str = "date") -> date:
        """문서/요청 필드를 date로 검증·변환합니다."""
        if value is None:
            raise ValueError(f"{field_name} 값이 없습니다")
        if isinstance(value, str):
            return DateTimeUtils.parse_date_string(value)
        if isinstance(value, (date, datetime)):
            return DateTimeUtils.to_date(value)
        raise ValueError(f"{field_name}은 날짜 문자열 또는 date/datetime이어야 합니다: {value!r}")
