# renal_care/api/progress/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError

from renal_care.core.exceptions import UnsupportedFrequencyError
from renal_care.api.progress.schemas import WeekStatusQuerySchema, WeekStatusResponseSchema
from renal_care.utils.datetime_utils import DateTimeUtils

progress_bp = Blueprint('progress_bp', __name__)


@progress_bp.route('/<string:pet_id>/progress/week', methods=['GET'])
@jwt_required()
def get_week_progress(pet_id: str):
    """
    주간 진행 캘린더의 날짜별 상태(none/today/complete/missed)를 조회합니다.

    쿼리 파라미터:
    - week_start: 조회할 주에 속한 날짜 (YYYY-MM-DD, 기본값: 오늘)

    예시:
    - GET /progress/week?week_start=2025-10-13
    """
    service = current_app.services['weekly_progress']
    try:
        params = WeekStatusQuerySchema().load(request.args)
        service.ensure_pet_owner(pet_id, get_jwt_identity())

        week_start = params.get('week_start') or DateTimeUtils.today()
        result = service.get_week_statuses(pet_id, week_start)
        return jsonify(WeekStatusResponseSchema().dump(result)), 200

    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except UnsupportedFrequencyError as e:
        # 저장된 스케줄 데이터와 반복 규칙 테이블이 어긋난 상태
        logging.error(f"Unsupported schedule frequency in stored data (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "SCHEDULE_DATA_MISMATCH", "message": str(e)}), 500
    except Exception as e:
        logging.error(f"Week progress API error (pet_id: {pet_id}): {e}", exc_info=True)
        return jsonify({"error_code": "FETCH_FAILED", "message": "주간 진행 상태 조회 중 오류가 발생했습니다."}), 500
