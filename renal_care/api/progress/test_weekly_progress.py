# renal_care/api/progress/test_weekly_progress.py
"""
주간 진행 상태 서비스 및 API 테스트

사용법: python -m pytest renal_care/api/progress/test_weekly_progress.py -v
"""

from datetime import date, datetime, timezone
from unittest import mock

import pytest
from flask import Flask
from flask_jwt_extended import JWTManager, create_access_token

from renal_care.api.progress.routes import progress_bp
from renal_care.api.progress.services import WeeklyProgressService
from renal_care.core.exceptions import UnsupportedFrequencyError
from renal_care.models.schedule import TreatmentType, TreatmentFrequency
from renal_care.models.schedule_history_entry import ScheduleHistoryEntry

UTC = timezone.utc


class TestWeeklyProgressService:

    @pytest.fixture
    def deps(self, fake_db):
        schedule_service = mock.MagicMock(name='schedule_service')
        history_service = mock.MagicMock(name='history_service')
        history_service.get_history.return_value = []
        summary_service = mock.MagicMock(name='summary_service')
        summary_service.fetch_daily_summaries.return_value = {}
        service = WeeklyProgressService(schedule_service, history_service, summary_service)
        return service, schedule_service, history_service, summary_service

    def test_normalizes_to_monday_and_fetches_week_range(self, deps):
        service, schedule_service, _, summary_service = deps
        schedule_service.get_schedules.return_value = []

        result = service.get_week_statuses('pet-1', date(2025, 10, 15), now=datetime(2025, 10, 15, 9, tzinfo=UTC))

        assert result['week_start'] == date(2025, 10, 13)
        assert [d['date'] for d in result['days']] == [date(2025, 10, 13 + i) for i in range(7)]
        assert [d['status'] for d in result['days']] == ['none', 'none', 'today', 'none', 'none', 'none', 'none']
        schedule_service.get_schedules.assert_called_once_with('pet-1', active_only=False)
        summary_service.fetch_daily_summaries.assert_called_once_with('pet-1', date(2025, 10, 13), date(2025, 10, 19))

    def test_statuses_use_summaries_and_history(self, deps, make_schedule, make_summary):
        service, schedule_service, history_service, summary_service = deps
        edited_at = datetime(2025, 10, 9, 12, tzinfo=UTC)
        live = make_schedule(frequency=TreatmentFrequency.EVERY_OTHER_DAY, updated_at=edited_at)
        fluid = make_schedule(schedule_id='fluid1', treatment_type=TreatmentType.FLUID)
        schedule_service.get_schedules.return_value = [fluid, live]

        before_edit = ScheduleHistoryEntry.from_schedule(make_schedule(), live.created_at, edited_at)
        history_service.get_history.side_effect = lambda schedule_id: [before_edit] if schedule_id == 'med1' else []
        summary_service.fetch_daily_summaries.return_value = {
            date(2025, 10, 7): make_summary(date(2025, 10, 7), medication_total_doses=0, fluid_session_count=1),
            date(2025, 10, 8): make_summary(date(2025, 10, 8), medication_total_doses=1, fluid_session_count=1),
        }

        result = service.get_week_statuses('pet-1', date(2025, 10, 6), now=datetime(2025, 10, 13, 8, tzinfo=UTC))
        statuses = {d['date']: d['status'] for d in result['days']}

        assert statuses[date(2025, 10, 6)] == 'missed'
        # 수정 전(매일) 버전이 적용되어 복약 기록이 없는 화요일은 missed
        assert statuses[date(2025, 10, 7)] == 'missed'
        assert statuses[date(2025, 10, 8)] == 'complete'
        assert history_service.get_history.call_count == 2

    def test_prefers_active_fluid_schedule(self, make_schedule):
        old = make_schedule(schedule_id='fluid-old', treatment_type=TreatmentType.FLUID, is_active=False,
                            created_at=datetime(2025, 10, 8, tzinfo=UTC))
        current = make_schedule(schedule_id='fluid-new', treatment_type=TreatmentType.FLUID)

        assert WeeklyProgressService._pick_fluid_schedule([old, current]) is current
        assert WeeklyProgressService._pick_fluid_schedule([old]) is old
        assert WeeklyProgressService._pick_fluid_schedule([make_schedule()]) is None

    def test_storage_error_propagates(self, deps):
        service, schedule_service, _, summary_service = deps
        schedule_service.get_schedules.return_value = []
        summary_service.fetch_daily_summaries.side_effect = RuntimeError("unavailable")

        with pytest.raises(RuntimeError):
            service.get_week_statuses('pet-1', date(2025, 10, 13))


class TestWeekProgressRoute:

    @pytest.fixture
    def progress_service(self):
        service = mock.MagicMock(name='weekly_progress')
        service.get_week_statuses.return_value = {
            'week_start': date(2025, 10, 13),
            'days': [{'date': date(2025, 10, 13 + i), 'status': 'none'} for i in range(7)],
        }
        return service

    @pytest.fixture
    def client(self, progress_service):
        app = Flask(__name__)
        app.config['JWT_SECRET_KEY'] = 'test-secret-key-for-weekly-progress'
        app.config['TESTING'] = True
        JWTManager(app)
        app.services = {'weekly_progress': progress_service}
        app.register_blueprint(progress_bp, url_prefix='/api/pets')

        with app.app_context():
            token = create_access_token(identity='user-1')
        client = app.test_client()
        client.environ_base['HTTP_AUTHORIZATION'] = f'Bearer {token}'
        return client

    def test_returns_week_statuses(self, client, progress_service):
        response = client.get('/api/pets/pet-1/progress/week?week_start=2025-10-15')

        assert response.status_code == 200
        body = response.get_json()
        assert body['week_start'] == '2025-10-13'
        assert len(body['days']) == 7
        assert body['days'][0] == {'date': '2025-10-13', 'status': 'none'}
        progress_service.ensure_pet_owner.assert_called_once_with('pet-1', 'user-1')
        progress_service.get_week_statuses.assert_called_once_with('pet-1', date(2025, 10, 15))

    def test_defaults_to_today(self, client, progress_service):
        with mock.patch('renal_care.utils.datetime_utils.DateTimeUtils.today', return_value=date(2025, 10, 16)):
            response = client.get('/api/pets/pet-1/progress/week')

        assert response.status_code == 200
        progress_service.get_week_statuses.assert_called_once_with('pet-1', date(2025, 10, 16))

    def test_invalid_week_start(self, client, progress_service):
        response = client.get('/api/pets/pet-1/progress/week?week_start=13-10-2025')

        assert response.status_code == 400
        assert response.get_json()['error_code'] == 'VALIDATION_ERROR'
        progress_service.get_week_statuses.assert_not_called()

    def test_forbidden_for_other_owner(self, client, progress_service):
        progress_service.ensure_pet_owner.side_effect = PermissionError("펫 pet-1에 대한 접근 권한이 없습니다.")

        response = client.get('/api/pets/pet-1/progress/week')

        assert response.status_code == 403
        assert response.get_json()['error_code'] == 'FORBIDDEN'

    def test_storage_failure(self, client, progress_service):
        progress_service.get_week_statuses.side_effect = RuntimeError("unavailable")

        response = client.get('/api/pets/pet-1/progress/week')

        assert response.status_code == 500
        assert response.get_json()['error_code'] == 'FETCH_FAILED'

    def test_requires_token(self, progress_service, client):
        client.environ_base.pop('HTTP_AUTHORIZATION')
        response = client.get('/api/pets/pet-1/progress/week')
        assert response.status_code == 401
        progress_service.get_week_statuses.assert_not_called()

    def test_unknown_stored_frequency(self, client, progress_service):
        progress_service.get_week_statuses.side_effect = UnsupportedFrequencyError("지원하지 않는 반복 규칙입니다: 'weekly'")

        response = client.get('/api/pets/pet-1/progress/week')

        assert response.status_code == 500
        assert response.get_json()['error_code'] == 'SCHEDULE_DATA_MISMATCH'
