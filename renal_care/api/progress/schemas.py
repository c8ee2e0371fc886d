# renal_care/api/progress/schemas.py
from marshmallow import Schema, fields, validate

from renal_care.models.day_status import DayStatus


class WeekStatusQuerySchema(Schema):
    """
    GET /api/pets/<pet_id>/progress/week 쿼리 파라미터 검증 스키마.
    week_start가 없으면 이번 주를 조회합니다.
    """
    week_start = fields.Date(format='%Y-%m-%d')


class DayStatusItemSchema(Schema):
    date = fields.Date()
    status = fields.Str(validate=validate.OneOf([s.value for s in DayStatus]))


class WeekStatusResponseSchema(Schema):
    """주간 진행 캘린더 응답 스키마."""
    week_start = fields.Date()
    days = fields.List(fields.Nested(DayStatusItemSchema), dump_default=[])
