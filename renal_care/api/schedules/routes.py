# renal_care/api/schedules/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from renal_care.core.exceptions import ScheduleNotFoundError, ScheduleConflictError
from renal_care.models.schedule import TreatmentType
from renal_care.api.schedules.schemas import (
    ScheduleCreateSchema,
    ScheduleUpdateSchema,
    ScheduleSchema,
    ScheduleHistoryEntrySchema,
    ScheduleListQuerySchema
)

schedules_bp = Blueprint('schedules_bp', __name__)


def _forbidden(e):
    return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403


def _not_found(e):
    return jsonify({"error_code": "SCHEDULE_NOT_FOUND", "message": str(e)}), 404


@schedules_bp.route('/<string:pet_id>/schedules', methods=['POST'])
@jwt_required()
def create_schedule(pet_id: str):
    """치료 스케줄 생성 API 엔드포인트."""
    service = current_app.services['schedules']
    try:
        service.ensure_pet_owner(pet_id, get_jwt_identity())
        validated_data = ScheduleCreateSchema().load(request.get_json())
        schedule = service.create_schedule(pet_id, validated_data)
        return jsonify(ScheduleSchema().dump(schedule)), 201

    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return _forbidden(e)
    except ScheduleConflictError as e:
        return jsonify({"error_code": "SCHEDULE_CONFLICT", "message": str(e)}), 409
    except Exception as e:
        logging.error(f"스케줄 생성 API 오류 (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SCHEDULE_CREATION_FAILED", "message": "스케줄 생성 중 오류 발생"}), 500


@schedules_bp.route('/<string:pet_id>/schedules', methods=['GET'])
@jwt_required()
def list_schedules(pet_id: str):
    """
    반려동물의 스케줄 목록 조회 API.

    쿼리 파라미터:
    - treatment_type: medication 또는 fluid
    - active_only: 활성 스케줄만 조회 (기본값: true)
    """
    service = current_app.services['schedules']
    try:
        service.ensure_pet_owner(pet_id, get_jwt_identity())
        params = ScheduleListQuerySchema().load(request.args)
        treatment_type = TreatmentType(params['treatment_type']) if params.get('treatment_type') else None

        schedules = service.get_schedules(pet_id, treatment_type, params['active_only'])
        return jsonify({"schedules": ScheduleSchema(many=True).dump(schedules)}), 200

    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return _forbidden(e)
    except Exception as e:
        logging.error(f"Schedule list API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "스케줄 조회 중 오류가 발생했습니다."}), 500


@schedules_bp.route('/<string:pet_id>/schedules/<string:schedule_id>', methods=['GET'])
@jwt_required()
def get_schedule(pet_id: str, schedule_id: str):
    service = current_app.services['schedules']
    try:
        service.ensure_pet_owner(pet_id, get_jwt_identity())
        schedule = service.get_schedule(pet_id, schedule_id)
        return jsonify(ScheduleSchema().dump(schedule)), 200

    except PermissionError as e:
        return _forbidden(e)
    except ScheduleNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"Schedule fetch API error (schedule_id: {schedule_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "스케줄 조회 중 오류가 발생했습니다."}), 500


@schedules_bp.route('/<string:pet_id>/schedules/<string:schedule_id>', methods=['PATCH'])
@jwt_required()
def update_schedule(pet_id: str, schedule_id: str):
    """스케줄을 부분 수정합니다. 이전 버전은 이력으로 보존됩니다."""
    service = current_app.services['schedules']
    try:
        service.ensure_pet_owner(pet_id, get_jwt_identity())
        update_data = ScheduleUpdateSchema().load(request.get_json())
        if not update_data:
            return jsonify({"error_code": "NO_DATA", "message": "수정할 데이터가 없습니다."}), 400

        schedule = service.update_schedule(pet_id, schedule_id, update_data)
        return jsonify(ScheduleSchema().dump(schedule)), 200

    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return _forbidden(e)
    except ScheduleNotFoundError as e:
        return _not_found(e)
    except ScheduleConflictError as e:
        return jsonify({"error_code": "SCHEDULE_CONFLICT", "message": str(e)}), 409
    except ValueError as e:
        return jsonify({"error_code": "INVALID_UPDATE", "message": str(e)}), 400
    except Exception as e:
        logging.error(f"스케줄 수정 API 오류 (schedule_id: {schedule_id}): {e}", exc_info=True)
        return jsonify({"error_code": "UPDATE_FAILED", "message": "스케줄 수정 중 오류 발생"}), 500


@schedules_bp.route('/<string:pet_id>/schedules/<string:schedule_id>', methods=['DELETE'])
@jwt_required()
def deactivate_schedule(pet_id: str, schedule_id: str):
    """스케줄 비활성화 (소프트 삭제)."""
    service = current_app.services['schedules']
    try:
        service.ensure_pet_owner(pet_id, get_jwt_identity())
        schedule = service.deactivate_schedule(pet_id, schedule_id)
        return jsonify(ScheduleSchema().dump(schedule)), 200

    except PermissionError as e:
        return _forbidden(e)
    except ScheduleNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"스케줄 비활성화 API 오류 (schedule_id: {schedule_id}): {e}", exc_info=True)
        return jsonify({"error_code": "DEACTIVATION_FAILED", "message": "스케줄 비활성화 중 오류 발생"}), 500


@schedules_bp.route('/<string:pet_id>/schedules/<string:schedule_id>/history', methods=['GET'])
@jwt_required()
def get_schedule_history(pet_id: str, schedule_id: str):
    """스케줄의 버전 이력을 최신순으로 조회합니다."""
    service = current_app.services['schedules']
    history_service = current_app.services['schedule_history']
    try:
        service.ensure_pet_owner(pet_id, get_jwt_identity())
        service.get_schedule(pet_id, schedule_id)
        entries = history_service.get_history(schedule_id)
        return jsonify({"history": ScheduleHistoryEntrySchema(many=True).dump(entries)}), 200

    except PermissionError as e:
        return _forbidden(e)
    except ScheduleNotFoundError as e:
        return _not_found(e)
    except Exception as e:
        logging.error(f"Schedule history API error (schedule_id: {schedule_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "이력 조회 중 오류가 발생했습니다."}), 500
