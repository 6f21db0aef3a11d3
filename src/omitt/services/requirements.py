"""チャットによる要件の蓄積と削除を行うサービス。"""

import logging
import uuid

from pydantic import BaseModel

from omitt.config import MergePolicy
from omitt.models.errors import ConfirmationRequiredError, EmptyMessageError, OracleError
from omitt.models.requirements import RequirementCategory, StructuredRequirements
from omitt.models.session import ChatMessage, Session
from omitt.oracle.extraction import ExtractionOracle
from omitt.renderers.messages import EXTRACTION_ERROR_MESSAGE, compose_extraction_reply
from omitt.services.architecture import ArchitectureService
from omitt.services.inflight import InFlightGuard
from omitt.state.invalidation import action_after_merge, action_after_removal
from omitt.state.reducers import (
    DATA_LOSS_WARNING,
    append_message,
    clear_requirements,
    discard_architecture,
    issue_architecture_token,
    merge_requirements,
    remove_requirement,
)
from omitt.storage.service import StorageService

logger = logging.getLogger(__name__)


class SendMessageResult(BaseModel):
    """メッセージ送信の結果。"""

    success: bool
    replies: list[ChatMessage]
    requirements: StructuredRequirements
    added_count: int = 0
    architecture_refresh_scheduled: bool = False


class RequirementsService:
    """会話から要件を抽出・統合し、要件の変更に応じてシステム構成の更新を指示する。"""

    def __init__(
        self,
        storage: StorageService,
        extraction_oracle: ExtractionOracle,
        architecture_service: ArchitectureService,
        guard: InFlightGuard,
        merge_policy: MergePolicy = "additive",
    ) -> None:
        self._storage = storage
        self._oracle = extraction_oracle
        self._architecture = architecture_service
        self._guard = guard
        self._merge_policy = merge_policy

    async def create_session(self) -> Session:
        """新しいセッションを作成する。

        Returns:
            作成されたセッション。会話ログには挨拶メッセージが入っている。
        """
        session = Session(id=str(uuid.uuid4()))
        await self._storage.save_session(session)
        return session

    async def get_session(self, session_id: str) -> Session:
        return await self._storage.load_session(session_id)

    async def send_message(self, session_id: str, message: str) -> SendMessageResult:
        """利用者のメッセージから要件を抽出し、既存の要件に統合する。

        要件が1件以上残る場合は、システム構成の再生成をバックグラウンドで開始する。
        言語モデルの呼び出しに失敗した場合は、会話ログにお詫びを追加し、要件は変更しない。

        Args:
            session_id: セッションID。
            message: 利用者の入力。

        Returns:
            送信結果とアシスタントの返答。

        Raises:
            EmptyMessageError: メッセージが空の場合。
            SessionNotFoundError: セッションが存在しない場合。
            RequestInProgressError: 同一セッションで分析・検証が実行中の場合。
        """
        if not message.strip():
            raise EmptyMessageError()

        async with self._guard.hold(session_id):
            session = await self._storage.load_session(session_id)
            session = append_message(session, message, "user")
            await self._storage.save_session(session)

            try:
                extraction = await self._oracle.extract(message, session.requirements)
            except OracleError as e:
                logger.error("Failed to analyze requirements for session %s: %s", session_id, e)
                session = await self._storage.load_session(session_id)
                session = append_message(session, EXTRACTION_ERROR_MESSAGE, "assistant")
                await self._storage.save_session(session)
                return SendMessageResult(
                    success=False,
                    replies=session.chat_messages[-1:],
                    requirements=session.requirements,
                )

            # 応答待ちの間に削除等が行われていても、最新の状態に統合する
            session = await self._storage.load_session(session_id)
            reply_start = len(session.chat_messages)
            outcome = merge_requirements(session, extraction.requirements, self._merge_policy)
            # 置き換え方針では応答全体が新しい要件一覧になる
            if self._merge_policy == "replace":
                extracted_count = outcome.session.requirements.total()
            else:
                extracted_count = outcome.added_count
            reply = compose_extraction_reply(extracted_count)
            session = append_message(outcome.session, reply, "assistant")
            if outcome.data_loss_warning:
                logger.warning("Requirement count dropped sharply for session %s", session_id)
                session = append_message(session, DATA_LOSS_WARNING, "assistant")

            refresh = action_after_merge(session.requirements) == "regenerate"
            if refresh:
                session = issue_architecture_token(session)
            await self._storage.save_session(session)

        if refresh:
            self._architecture.schedule_refresh(session)

        return SendMessageResult(
            success=True,
            replies=session.chat_messages[reply_start:],
            requirements=session.requirements,
            added_count=outcome.added_count,
            architecture_refresh_scheduled=refresh,
        )

    async def remove_requirement(
        self,
        session_id: str,
        category: RequirementCategory,
        requirement_id: str,
    ) -> Session:
        """要件を1件削除する。

        削除後に要件が2件以上残る場合はシステム構成を再生成し、
        1件以下になった場合は言語モデルを呼ばずに構成を破棄する。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
            RequirementNotFoundError: 要件が見つからない場合。
        """
        session = await self._storage.load_session(session_id)
        session = remove_requirement(session, category, requirement_id)

        refresh = action_after_removal(session.requirements) == "regenerate"
        if refresh:
            session = issue_architecture_token(session)
        else:
            session = discard_architecture(session)
        await self._storage.save_session(session)

        if refresh:
            self._architecture.schedule_refresh(session)
        return session

    async def clear_requirements(self, session_id: str, confirm: bool = False) -> Session:
        """すべての要件とシステム構成を削除する。取り消しはできない。

        Raises:
            ConfirmationRequiredError: confirm が指定されていない場合。
            SessionNotFoundError: セッションが存在しない場合。
        """
        if not confirm:
            raise ConfirmationRequiredError("clear_requirements")

        session = await self._storage.load_session(session_id)
        session = clear_requirements(session)
        await self._storage.save_session(session)
        return session
