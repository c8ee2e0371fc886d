# renal_care/__init__.py

# =====================================================================================
# 1. .env 로드 (설정 클래스가 os.getenv를 읽기 전에 실행되어야 함)
# =====================================================================================
from dotenv import load_dotenv
load_dotenv()

# =====================================================================================
# 2. 임포트
# =====================================================================================
import os
import logging
from flask import Flask, jsonify
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
import firebase_admin
from firebase_admin import credentials

# - 환경별 설정
from renal_care.core.config import config_by_name

# - 블루프린트 (모두 /api/pets 하위)
from renal_care.api.schedules.routes import schedules_bp
from renal_care.api.progress.routes import progress_bp

# - 저장소 서비스 / 도메인 서비스
from renal_care.services.schedule_history_service import ScheduleHistoryService
from renal_care.services.summary_service import SummaryService
from renal_care.api.schedules.services import ScheduleService
from renal_care.api.progress.services import WeeklyProgressService

def create_app():
    """
    치료 스케줄 / 주간 진행 API 앱을 생성합니다.
    FLASK_ENV(development, testing, production)로 설정 클래스를 선택합니다.
    """
    # =====================================================================================
    # 3. 앱 생성 및 설정 적용
    # =====================================================================================
    config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])
    app.json.ensure_ascii = False

    # =====================================================================================
    # 4. JWT / Firebase 초기화
    # =====================================================================================
    JWTManager(app)

    # 같은 프로세스에서 앱을 여러 번 만들 때 Firebase 앱은 한 번만 초기화
    if not firebase_admin._apps:
        cred_path = app.config['FIREBASE_CREDENTIALS_PATH']
        if not cred_path or not os.path.exists(cred_path):
            raise FileNotFoundError(f"Firebase 서비스 계정 파일이 없습니다: {cred_path}")
        firebase_admin.initialize_app(credentials.Certificate(cred_path))

    # =====================================================================================
    # 5. 서비스 조립 (app.services에 보관, 라우트는 current_app.services로 조회)
    # =====================================================================================
    app.services = {}

    # 5-1. Firestore 컬렉션을 직접 다루는 저장소 서비스
    app.services['schedule_history'] = ScheduleHistoryService()
    app.services['summaries'] = SummaryService()

    # 5-2. 저장소 서비스를 주입받는 도메인 서비스
    app.services['schedules'] = ScheduleService(history_service=app.services['schedule_history'])
    app.services['weekly_progress'] = WeeklyProgressService(
        schedule_service=app.services['schedules'],
        history_service=app.services['schedule_history'],
        summary_service=app.services['summaries']
    )
    logging.info(f"Renal care services ready: {sorted(app.services)}")

    # =====================================================================================
    # 6. 블루프린트 등록
    # =====================================================================================
    app.register_blueprint(schedules_bp, url_prefix='/api/pets')
    app.register_blueprint(progress_bp, url_prefix='/api/pets')

    # =====================================================================================
    # 7. 전역 에러 핸들러 (라우트에서 처리하지 못한 예외의 마지막 방어선)
    # =====================================================================================
    @app.errorhandler(ValidationError)
    def handle_marshmallow_validation(err):
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400

    @app.errorhandler(Exception)
    def handle_generic_exception(err):
        # 404/405 등 HTTP 예외는 원래 상태 코드 유지
        if isinstance(err, HTTPException):
            return err
        logging.error(f"Unhandled exception: {err}", exc_info=True)
        response = {"error_code": "INTERNAL_SERVER_ERROR", "message": "서버 내부에서 예상치 못한 오류가 발생했습니다."}
        return jsonify(response), 500

    # =====================================================================================
    # 8. 로깅 설정
    # =====================================================================================
    if not app.debug:
        logging.basicConfig(level=app.config['LOG_LEVEL'], format='%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]')

    logging.info(f"Renal care app created (env: {config_name})")

    return app
