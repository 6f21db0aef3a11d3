"""会話系のMCPツール定義。"""

from typing import Any

from fastmcp import FastMCP

from omitt.models.errors import OmittError
from omitt.services.requirements import RequirementsService
from omitt.services.validation import ValidationService


def register_chat_tools(
    mcp: FastMCP,
    requirements_service: RequirementsService,
    validation_service: ValidationService,
) -> None:
    """会話・要件検証関連のMCPツールを登録する。"""

    @mcp.tool()
    async def create_session() -> dict[str, Any]:
        """新しい要件整理セッションを作成する。

        見積もり依頼書の作成を始めるために、まずこのツールでセッションを作成してください。
        返却されるsession_idを以降のツール呼び出しで使用します。
        """
        try:
            session = await requirements_service.create_session()
            return {
                "session_id": session.id,
                "welcome_message": session.chat_messages[0].content,
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def send_message(session_id: str, message: str) -> dict[str, Any]:
        """発注者のメッセージを送信し、要件を抽出して蓄積する。

        抽出した要件は既存の要件に統合されます。要件が1件以上ある場合、
        システム構成の再生成がバックグラウンドで開始されます。

        Args:
            session_id: セッションID。
            message: 発注者の入力（自然言語）。
        """
        try:
            result = await requirements_service.send_message(session_id, message)
            return {
                "success": result.success,
                "replies": [m.content for m in result.replies],
                "added_count": result.added_count,
                "requirement_counts": result.requirements.counts(),
                "architecture_refresh_scheduled": result.architecture_refresh_scheduled,
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def get_chat_log(session_id: str) -> dict[str, Any]:
        """会話ログを取得する。

        Args:
            session_id: セッションID。
        """
        try:
            session = await requirements_service.get_session(session_id)
            return {
                "session_id": session.id,
                "messages": [m.model_dump(mode="json") for m in session.chat_messages],
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def validate_requirements(session_id: str) -> dict[str, Any]:
        """蓄積した要件の網羅性・矛盾・不明確な点を検証する。

        検証結果は会話ログにも追加されます。

        Args:
            session_id: セッションID。
        """
        try:
            outcome = await validation_service.validate_requirements(session_id)
            result: dict[str, Any] = {
                "success": outcome.success,
                "message": outcome.message.content,
            }
            if outcome.validation is not None:
                result["validation"] = outcome.validation.model_dump()
                result["passed"] = outcome.validation.passed
            return result
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}
