"""要件ストア系のMCPツール定義。"""

from typing import Any

from fastmcp import FastMCP

from omitt.models.errors import OmittError
from omitt.models.requirements import RequirementCategory
from omitt.services.requirements import RequirementsService


def register_requirements_tools(mcp: FastMCP, requirements_service: RequirementsService) -> None:
    """要件の参照・削除関連のMCPツールを登録する。"""

    @mcp.tool()
    async def get_requirements(session_id: str) -> dict[str, Any]:
        """蓄積された構造化要件を取得する。

        Args:
            session_id: セッションID。
        """
        try:
            session = await requirements_service.get_session(session_id)
            return {
                "session_id": session.id,
                "requirements": session.requirements.model_dump(),
                "counts": session.requirements.counts(),
                "total": session.requirements.total(),
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def remove_requirement(
        session_id: str,
        category: RequirementCategory,
        requirement_id: str,
    ) -> dict[str, Any]:
        """要件を1件削除する。

        削除後に要件が2件以上残る場合はシステム構成が再生成され、
        1件以下になった場合はシステム構成が破棄されます。

        Args:
            session_id: セッションID。
            category: 要件カテゴリ（functional_requirements など）。
            requirement_id: 削除する要件のID。
        """
        try:
            session = await requirements_service.remove_requirement(session_id, category, requirement_id)
            return {
                "removed": requirement_id,
                "category": category,
                "counts": session.requirements.counts(),
                "has_architecture": session.architecture is not None,
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def clear_requirements(session_id: str, confirm: bool = False) -> dict[str, Any]:
        """すべての要件とシステム構成を削除する。

        取り消しはできません。利用者の確認を得たうえで confirm=true を指定してください。

        Args:
            session_id: セッションID。
            confirm: 削除を確認済みの場合にtrue。
        """
        try:
            session = await requirements_service.clear_requirements(session_id, confirm=confirm)
            return {"cleared": True, "total": session.requirements.total()}
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}
