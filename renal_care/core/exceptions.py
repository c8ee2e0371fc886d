# renal_care/core/exceptions.py
"""
치료 스케줄 도메인 예외 정의.
라우트에서는 내장 예외 계층(FileNotFoundError, ValueError)으로도 처리할 수 있도록 함께 상속합니다.
"""


class ScheduleError(Exception):
    """스케줄 도메인 예외의 기반 클래스."""


class ScheduleNotFoundError(ScheduleError, FileNotFoundError):
    """요청한 스케줄 문서가 존재하지 않음."""


class ScheduleConflictError(ScheduleError, ValueError):
    """활성 수액 스케줄이 이미 있는 등, 현재 상태와 충돌하는 요청."""


class UnsupportedFrequencyError(ScheduleError, ValueError):
    """반복 규칙 테이블에 없는 frequency 값. 데이터 모델 불일치이므로 기본값으로 대체하지 않습니다."""
