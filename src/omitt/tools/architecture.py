"""システム構成系のMCPツール定義。"""

from typing import Any

from fastmcp import FastMCP

from omitt.models.architecture import ArchitectureType
from omitt.models.errors import OmittError
from omitt.services.architecture import ArchitectureService
from omitt.state.invalidation import architecture_status


def register_architecture_tools(mcp: FastMCP, architecture_service: ArchitectureService) -> None:
    """システム構成関連のMCPツールを登録する。"""

    @mcp.tool()
    async def list_architecture_types() -> dict[str, Any]:
        """選択可能なアーキテクチャタイプの一覧を取得する。"""
        types = await architecture_service.list_architecture_types()
        return {"architecture_types": [t.model_dump() for t in types]}

    @mcp.tool()
    async def set_architecture_type(session_id: str, architecture_type: ArchitectureType) -> dict[str, Any]:
        """以降の構成生成で優先するアーキテクチャタイプを設定する。

        設定だけでは再生成されません。すぐに反映する場合は generate_architecture を呼び出してください。

        Args:
            session_id: セッションID。
            architecture_type: アーキテクチャタイプ（web, mobile_app など）。
        """
        try:
            session = await architecture_service.set_architecture_type(session_id, architecture_type)
            return {"session_id": session.id, "architecture_type": session.architecture_type}
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def generate_architecture(
        session_id: str,
        architecture_type: ArchitectureType | None = None,
    ) -> dict[str, Any]:
        """現在の要件からシステム構成を生成し直す。

        要件が空の場合は何もしません。生成に失敗した場合、既存のシステム構成は変更されません。

        Args:
            session_id: セッションID。
            architecture_type: 優先するアーキテクチャタイプ。省略時はセッションの設定を使用。
        """
        try:
            session = await architecture_service.regenerate(session_id, architecture_type)
            return {
                "status": architecture_status(session),
                "architecture": session.architecture.model_dump() if session.architecture else None,
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def get_architecture(session_id: str) -> dict[str, Any]:
        """現在のシステム構成と、その状態（none / generating / valid / stale）を取得する。

        Args:
            session_id: セッションID。
        """
        try:
            session = await architecture_service.get_session(session_id)
            return {
                "status": architecture_status(session),
                "architecture_type": session.architecture_type,
                "architecture": session.architecture.model_dump() if session.architecture else None,
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}
