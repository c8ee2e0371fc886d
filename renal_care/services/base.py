# renal_care/services/base.py
"""
반려동물 단위 케어 서비스의 기반 클래스
Firestore 클라이언트와 펫 소유권 확인을 공통으로 제공합니다.
"""

import logging
from typing import Any
from firebase_admin import firestore

from renal_care.utils.datetime_utils import DateTimeUtils

logger = logging.getLogger(__name__)


class BaseCareService:
    """pets 컬렉션을 기준으로 요청자의 접근 권한을 확인하는 서비스 기반 클래스"""

    def __init__(self):
        self.db = firestore.client()
        self.pets_collection = self.db.collection('pets')

    def _convert_date_for_firestore(self, obj: Any) -> Any:
        """저장 직전 문서의 date/datetime 값을 UTC datetime으로 정규화"""
        return DateTimeUtils.for_firestore(obj)

    def _verify_pet_ownership(self, pet_id: str, user_id: str) -> bool:
        """
        pets/{pet_id} 문서의 user_id가 요청자와 같은지 확인합니다.
        문서가 없으면 False. 저장소 오류는 접근 거부로 숨기지 않고 그대로 전달합니다.
        """
        pet_doc = self.pets_collection.document(pet_id).get()
        if not pet_doc.exists:
            return False
        return pet_doc.to_dict().get('user_id') == user_id

    def ensure_pet_owner(self, pet_id: str, user_id: str) -> None:
        """소유자가 아니면 PermissionError (라우트에서 403으로 변환)"""
        if not self._verify_pet_ownership(pet_id, user_id):
            logger.warning(f"Pet access denied (pet: {pet_id}, user: {user_id})")
            raise PermissionError(f"펫 {pet_id}에 대한 접근 권한이 없습니다.")
