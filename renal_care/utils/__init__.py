# renal_care/utils/__init__.py
"""
공용 유틸리티 패키지

서비스와 모델이 함께 쓰는 시간/날짜 처리(DateTimeUtils)를 제공합니다.
"""

from .datetime_utils import DateTimeUtils

__all__ = ['DateTimeUtils']
