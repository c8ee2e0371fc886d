# renal_care/services/summary_service.py
import logging
from datetime import date
from typing import Dict
from firebase_admin import firestore

from renal_care.models.daily_summary import DailySummary
from renal_care.utils.datetime_utils import DateTimeUtils


class SummaryService:
    """
    기록 서비스가 집계한 일일 요약을 읽기 전용으로 조회하는 서비스 클래스.
    요약 문서의 생성/갱신은 이 서비스의 책임이 아닙니다.
    """
    def __init__(self):
        self.db = firestore.client()
        self.summaries_ref = self.db.collection('daily_summaries')
        logging.info("SummaryService initialized.")

    def fetch_daily_summaries(self, pet_id: str, start_date: date, end_date: date) -> Dict[date, DailySummary]:
        """
        기간 [start_date, end_date] 동안 기록이 있는 날짜의 요약만 반환합니다.
        항목이 없는 날짜는 기록 0건으로 간주됩니다.
        """
        #  (pet_id, searchDate) 복합 색인이 필요합니다.
        query = self.summaries_ref \
            .where('pet_id', '==', pet_id) \
            .where('searchDate', '>=', DateTimeUtils.to_date_string(start_date)) \
            .where('searchDate', '<=', DateTimeUtils.to_date_string(end_date))

        try:
            summaries: Dict[date, DailySummary] = {}
            for doc in query.stream():
                summary = DailySummary.from_dict(doc.to_dict())
                summaries[summary.date] = summary

            logging.info(f"Fetched {len(summaries)} daily summaries for pet {pet_id} ({start_date}~{end_date})")
            return summaries

        except Exception as e:
            logging.error(f"Daily summary query failed for pet {pet_id} ({start_date}-{end_date}): {e}", exc_info=True)
            raise
