"""見積もり依頼書の出力と、要件のJSONエクスポート・インポートを行うサービス。"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from omitt.models.architecture import SystemArchitecture
from omitt.models.errors import InvalidSnapshotError
from omitt.models.requirements import REQUIREMENT_CATEGORIES, StructuredRequirements
from omitt.models.session import Session
from omitt.models.snapshot import ExportInfo, SnapshotDocument
from omitt.renderers.messages import IMPORT_FAILED_MESSAGE, compose_export_notice, compose_import_notice
from omitt.renderers.quote import render_quote_document
from omitt.state.reducers import append_message, restore_snapshot
from omitt.storage.service import StorageService

logger = logging.getLogger(__name__)


def parse_snapshot(document: str | dict[str, Any]) -> tuple[StructuredRequirements, SystemArchitecture | None]:
    """JSONスナップショットを検証して要件とシステム構成を取り出す。

    requirements に5つのカテゴリがすべてリストとして存在しない場合や、
    同じカテゴリに同じIDの要件が複数ある場合は受け付けない。

    Raises:
        InvalidSnapshotError: JSONとして不正、または構造が期待と異なる場合。
    """
    if isinstance(document, str):
        try:
            data = json.loads(document)
        except json.JSONDecodeError as e:
            raise InvalidSnapshotError(f"Snapshot is not valid JSON: {e}") from e
    else:
        data = document

    if not isinstance(data, dict):
        raise InvalidSnapshotError("Snapshot must be a JSON object")

    raw_requirements = data.get("requirements")
    if not isinstance(raw_requirements, dict):
        raise InvalidSnapshotError("Snapshot has no requirements object")

    missing = [c for c in REQUIREMENT_CATEGORIES if not isinstance(raw_requirements.get(c), list)]
    if missing:
        raise InvalidSnapshotError(f"Snapshot requirements lack list fields: {', '.join(missing)}")

    try:
        requirements = StructuredRequirements.model_validate(raw_requirements)
        raw_architecture = data.get("systemArchitecture")
        architecture = SystemArchitecture.model_validate(raw_architecture) if raw_architecture else None
    except ValidationError as e:
        raise InvalidSnapshotError(f"Snapshot does not match the expected schema: {e}") from e

    # IDはカテゴリ内で一意
    for category in REQUIREMENT_CATEGORIES:
        ids = [item.id for item in requirements.category_items(category)]
        duplicated = sorted({i for i in ids if ids.count(i) > 1})
        if duplicated:
            raise InvalidSnapshotError(f"Snapshot {category} has duplicate ids: {', '.join(duplicated)}")
    return requirements, architecture


class ExportService:
    """セッション内容の書き出しと読み込みを行う。"""

    def __init__(self, storage: StorageService) -> None:
        self._storage = storage

    async def export_quote(self, session_id: str) -> str:
        """見積もり依頼書をテキストで出力する。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
        """
        session = await self._storage.load_session(session_id)
        return render_quote_document(session.requirements, session.architecture)

    async def export_snapshot(self, session_id: str) -> dict[str, Any]:
        """要件とシステム構成をJSONドキュメントとして書き出す。

        Returns:
            filename（保存時のファイル名候補）と document（JSONドキュメント）を含む辞書。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
        """
        session = await self._storage.load_session(session_id)
        now = datetime.now(UTC)
        snapshot = SnapshotDocument(
            export_info=ExportInfo(timestamp=now, total_requirements=session.requirements.total()),
            requirements=session.requirements,
            system_architecture=session.architecture,
        )
        filename = f"requirements-{now.strftime('%Y-%m-%dT%H-%M-%S')}.json"

        session = append_message(session, compose_export_notice(filename), "assistant")
        await self._storage.save_session(session)
        return {
            "filename": filename,
            "document": snapshot.model_dump(mode="json", by_alias=True),
        }

    async def import_snapshot(self, session_id: str, document: str | dict[str, Any]) -> Session:
        """JSONドキュメントから要件とシステム構成を復元する。

        構造が不正な場合は会話ログに失敗を記録し、要件とシステム構成は変更しない。

        Raises:
            SessionNotFoundError: セッションが存在しない場合。
            InvalidSnapshotError: ドキュメントが不正な場合。
        """
        session = await self._storage.load_session(session_id)
        try:
            requirements, architecture = parse_snapshot(document)
        except InvalidSnapshotError as e:
            logger.error("Rejected snapshot import for session %s: %s", session_id, e)
            session = append_message(session, IMPORT_FAILED_MESSAGE, "assistant")
            await self._storage.save_session(session)
            raise

        session = restore_snapshot(session, requirements, architecture)
        notice = compose_import_notice(requirements.total(), architecture is not None)
        session = append_message(session, notice, "assistant")
        await self._storage.save_session(session)
        return session
