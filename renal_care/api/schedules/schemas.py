# renal_care/api/schedules/schemas.py
from marshmallow import Schema, fields, validate, validates_schema, ValidationError, pre_load

from renal_care.models.schedule import TreatmentType, TreatmentFrequency

TREATMENT_TYPES = [t.value for t in TreatmentType]
FREQUENCIES = [f.value for f in TreatmentFrequency]


class ScheduleCreateSchema(Schema):
    """
    POST /api/pets/<pet_id>/schedules 요청 본문을 위한 스키마.
    치료 유형에 따라 필수 필드가 달라집니다.
    """
    treatment_type = fields.Str(required=True, validate=validate.OneOf(TREATMENT_TYPES))
    frequency = fields.Str(required=True, validate=validate.OneOf(FREQUENCIES))
    reminder_times = fields.List(fields.Time(), load_default=list)

    # 복약
    medication_name = fields.Str(validate=validate.Length(min=1, max=100))
    target_dosage = fields.Float(validate=validate.Range(min=0, min_inclusive=False))
    medication_unit = fields.Str(validate=validate.Length(min=1, max=30))
    medication_strength_amount = fields.Str(allow_none=True)
    medication_strength_unit = fields.Str(allow_none=True)

    # 수액
    target_volume = fields.Float(validate=validate.Range(min=0, min_inclusive=False))
    preferred_location = fields.Str(validate=validate.Length(min=1, max=50))
    needle_gauge = fields.Str(validate=validate.Length(min=1, max=20))

    @validates_schema
    def validate_fields_by_type(self, data, **kwargs):
        """treatment_type에 따라 필수 필드를 검증합니다."""
        if data.get('treatment_type') == TreatmentType.MEDICATION.value:
            required = ('medication_name', 'target_dosage', 'medication_unit')
        else:
            required = ('target_volume', 'preferred_location', 'needle_gauge')

        missing = {name: ['필수 항목입니다.'] for name in required if data.get(name) is None}
        if missing:
            raise ValidationError(missing)


class ScheduleUpdateSchema(Schema):
    """PATCH 요청용 부분 수정 스키마. treatment_type은 변경할 수 없습니다."""
    frequency = fields.Str(validate=validate.OneOf(FREQUENCIES))
    reminder_times = fields.List(fields.Time())
    is_active = fields.Bool()
    medication_name = fields.Str(validate=validate.Length(min=1, max=100))
    target_dosage = fields.Float(validate=validate.Range(min=0, min_inclusive=False))
    medication_unit = fields.Str(validate=validate.Length(min=1, max=30))
    medication_strength_amount = fields.Str(allow_none=True)
    medication_strength_unit = fields.Str(allow_none=True)
    target_volume = fields.Float(validate=validate.Range(min=0, min_inclusive=False))
    preferred_location = fields.Str(validate=validate.Length(min=1, max=50))
    needle_gauge = fields.Str(validate=validate.Length(min=1, max=20))


class ScheduleSchema(Schema):
    """스케줄 응답 스키마 (Schedule 객체 직렬화)."""
    schedule_id = fields.Str()
    pet_id = fields.Str()
    treatment_type = fields.Function(lambda s: s.treatment_type.value)
    frequency = fields.Function(lambda s: s.frequency.value)
    reminder_times = fields.List(fields.Time())
    is_active = fields.Bool()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    medication_name = fields.Str(allow_none=True)
    target_dosage = fields.Float(allow_none=True)
    medication_unit = fields.Str(allow_none=True)
    medication_strength_amount = fields.Str(allow_none=True)
    medication_strength_unit = fields.Str(allow_none=True)
    target_volume = fields.Float(allow_none=True)
    preferred_location = fields.Str(allow_none=True)
    needle_gauge = fields.Str(allow_none=True)


class ScheduleHistoryEntrySchema(Schema):
    """스케줄 버전 이력 응답 스키마."""
    schedule_id = fields.Str()
    effective_from = fields.DateTime()
    effective_to = fields.DateTime(allow_none=True)
    treatment_type = fields.Function(lambda e: e.treatment_type.value)
    frequency = fields.Function(lambda e: e.frequency.value)
    reminder_times = fields.List(fields.Time())
    is_active = fields.Bool()
    medication_name = fields.Str(allow_none=True)
    target_dosage = fields.Float(allow_none=True)
    medication_unit = fields.Str(allow_none=True)
    medication_strength_amount = fields.Str(allow_none=True)
    medication_strength_unit = fields.Str(allow_none=True)
    target_volume = fields.Float(allow_none=True)
    preferred_location = fields.Str(allow_none=True)
    needle_gauge = fields.Str(allow_none=True)


class ScheduleListQuerySchema(Schema):
    """GET /api/pets/<pet_id>/schedules 쿼리 파라미터 검증 스키마."""
    treatment_type = fields.Str(validate=validate.OneOf(TREATMENT_TYPES))
    active_only = fields.Bool(load_default=True)

    @pre_load
    def preprocess_data(self, data, **kwargs):
        # ImmutableMultiDict를 수정 가능한 딕셔너리로 변환
        processed_data = dict(data)
        if 'active_only' in processed_data and isinstance(processed_data['active_only'], str):
            processed_data['active_only'] = processed_data['active_only'].lower() in ('true', '1', 'yes')
        return processed_data
