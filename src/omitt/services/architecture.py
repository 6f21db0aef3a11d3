"""システム構成の生成・再生成・無効化を管理するサービス。"""

import asyncio
import logging

from omitt.models.architecture import ArchitectureType, ArchitectureTypeInfo
from omitt.models.errors import ArchitectureGenerationError, OmittError, OracleError
from omitt.models.requirements import StructuredRequirements
from omitt.models.session import Session
from omitt.oracle.architecture import ArchitectureOracle
from omitt.state.invalidation import is_latest_token
from omitt.state.reducers import (
    apply_architecture,
    issue_architecture_token,
    select_architecture_type,
    settle_architecture,
)
from omitt.storage.service import StorageService

logger = logging.getLogger(__name__)


class ArchitectureService:
    """要件に基づくシステム構成の生成を管理する。

    生成のたびにセッションの構成生成トークンを進め、応答が返った時点で
    トークンが最新でなければその応答は破棄する。
    """

    def __init__(
        self,
        storage: StorageService,
        oracle: ArchitectureOracle,
        architecture_types: list[ArchitectureTypeInfo] | None = None,
    ) -> None:
        self._storage = storage
        self._oracle = oracle
        self._architecture_types = architecture_types or []
        self._tasks: set[asyncio.Task[None]] = set()

    async def list_architecture_types(self) -> list[ArchitectureTypeInfo]:
        """選択可能なアーキテクチャタイプの一覧を返す。"""
        return self._architecture_types

    async def get_session(self, session_id: str) -> Session:
        return await self._storage.load_session(session_id)

    async def set_architecture_type(self, session_id: str, architecture_type: ArchitectureType) -> Session:
        """次回以降の構成生成で優先するアーキテクチャタイプを設定する。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
        """
        session = await self._storage.load_session(session_id)
        session = select_architecture_type(session, architecture_type)
        await self._storage.save_session(session)
        return session

    async def regenerate(self, session_id: str, architecture_type: ArchitectureType | None = None) -> Session:
        """現在の要件からシステム構成を生成し直す。

        要件が空の場合は何もしない（アーキテクチャタイプの指定だけは保存する）。

        Args:
            session_id: セッションID。
            architecture_type: 優先するアーキテクチャタイプ。Noneの場合はセッションの設定値を使う。

        Returns:
            生成後のセッション。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
            ArchitectureGenerationError: 言語モデルによる生成に失敗した場合。
        """
        session = await self._storage.load_session(session_id)
        if architecture_type is not None:
            session = select_architecture_type(session, architecture_type)
        if session.requirements.is_empty():
            await self._storage.save_session(session)
            return session

        session = issue_architecture_token(session)
        await self._storage.save_session(session)
        try:
            await self._generate(
                session_id,
                session.architecture_generation,
                session.requirements,
                session.architecture_type,
            )
        except OracleError as e:
            raise ArchitectureGenerationError(session_id, str(e)) from e
        return await self._storage.load_session(session_id)

    def schedule_refresh(self, session: Session) -> asyncio.Task[None]:
        """保存済みセッションの最新トークンで、構成の再生成をバックグラウンドで開始する。

        失敗してもログに残すだけで、会話ログには何も追加しない。
        """
        task = asyncio.create_task(
            self._refresh_in_background(
                session.id,
                session.architecture_generation,
                session.requirements.model_copy(deep=True),
                session.architecture_type,
            )
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> None:
        """実行中のバックグラウンド再生成がすべて終わるまで待つ。"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _refresh_in_background(
        self,
        session_id: str,
        token: int,
        requirements: StructuredRequirements,
        architecture_type: ArchitectureType,
    ) -> None:
        try:
            await self._generate(session_id, token, requirements, architecture_type)
        except OmittError as e:
            logger.error("Failed to generate architecture for session %s: %s", session_id, e)

    async def _generate(
        self,
        session_id: str,
        token: int,
        requirements: StructuredRequirements,
        architecture_type: ArchitectureType,
    ) -> bool:
        """言語モデルで構成を生成し、トークンが最新なら反映する。

        Returns:
            反映した場合True、より新しい生成要求があり破棄した場合False。

        Raises:
            OracleError: 言語モデルの呼び出しに失敗した場合。既存の構成は変更しない。
        """
        try:
            architecture = await self._oracle.generate(requirements, architecture_type)
        except OracleError:
            session = await self._storage.load_session(session_id)
            if is_latest_token(session, token):
                await self._storage.save_session(settle_architecture(session, token))
            raise

        session = await self._storage.load_session(session_id)
        if not is_latest_token(session, token):
            logger.info(
                "Discarding stale architecture for session %s (token %s, latest %s)",
                session_id,
                token,
                session.architecture_generation,
            )
            return False

        await self._storage.save_session(apply_architecture(session, architecture, requirements, token))
        logger.info("Applied architecture for session %s (token %s)", session_id, token)
        return True
