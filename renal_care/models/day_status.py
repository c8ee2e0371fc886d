# renal_care/models/day_status.py
from enum import Enum


class DayStatus(Enum):
    """주간 진행 캘린더의 날짜별 상태. 매 조회마다 새로 계산되며 저장하지 않습니다."""
    NONE = "none"          # 의무 없음 (오늘 제외) 또는 미래
    TODAY = "today"        # 오늘, 아직 미완료이거나 의무 없음
    COMPLETE = "complete"  # 해당 날짜의 모든 의무 충족
    MISSED = "missed"      # 지난 날짜, 하나 이상의 의무 미충족
