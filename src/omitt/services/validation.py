"""要件の検証を行い、結果を会話ログに追加するサービス。"""

import logging

from pydantic import BaseModel

from omitt.models.errors import OracleError
from omitt.models.session import ChatMessage
from omitt.models.validation import ValidationResult
from omitt.oracle.validation import ValidationOracle
from omitt.renderers.messages import (
    NOTHING_TO_VALIDATE_MESSAGE,
    VALIDATION_ERROR_MESSAGE,
    render_validation_message,
)
from omitt.services.inflight import InFlightGuard
from omitt.state.reducers import append_message
from omitt.storage.service import StorageService

logger = logging.getLogger(__name__)


class ValidationOutcome(BaseModel):
    """要件検証の結果。validation は検証できた場合のみ設定される。"""

    success: bool
    message: ChatMessage
    validation: ValidationResult | None = None


class ValidationService:
    def __init__(self, storage: StorageService, oracle: ValidationOracle, guard: InFlightGuard) -> None:
        self._storage = storage
        self._oracle = oracle
        self._guard = guard

    async def validate_requirements(self, session_id: str) -> ValidationOutcome:
        """現在の要件を検証し、結果のメッセージを会話ログに追加する。

        要件が空の場合は言語モデルを呼ばずに案内を返す。
        検証に失敗した場合はお詫びのメッセージを追加する。自動リトライはしない。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
            RequestInProgressError: 同一セッションで分析・検証が実行中の場合。
        """
        session = await self._storage.load_session(session_id)
        if session.requirements.is_empty():
            session = append_message(session, NOTHING_TO_VALIDATE_MESSAGE, "assistant")
            await self._storage.save_session(session)
            return ValidationOutcome(success=False, message=session.chat_messages[-1])

        async with self._guard.hold(session_id):
            validation: ValidationResult | None = None
            try:
                validation = await self._oracle.validate(session.requirements)
                content = render_validation_message(validation)
            except OracleError as e:
                logger.error("Failed to validate requirements for session %s: %s", session_id, e)
                content = VALIDATION_ERROR_MESSAGE

            session = await self._storage.load_session(session_id)
            session = append_message(session, content, "assistant")
            await self._storage.save_session(session)

        return ValidationOutcome(
            success=validation is not None,
            message=session.chat_messages[-1],
            validation=validation,
        )
