"""エクスポート系のMCPツール定義。"""

from typing import Any

from fastmcp import FastMCP

from omitt.models.errors import OmittError
from omitt.services.export import ExportService


def register_export_tools(mcp: FastMCP, export_service: ExportService) -> None:
    """エクスポート・インポート関連のMCPツールを登録する。"""

    @mcp.tool()
    async def export_quote(session_id: str) -> dict[str, Any]:
        """見積もり依頼書をテキスト形式で出力する。

        システム構成がまだない場合は、要件の入力を促す案内文が返ります。

        Args:
            session_id: セッションID。
        """
        try:
            document = await export_service.export_quote(session_id)
            return {"document": document}
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def export_snapshot(session_id: str) -> dict[str, Any]:
        """要件とシステム構成をJSONドキュメントとして出力する。

        出力したドキュメントは import_snapshot で読み込めます。

        Args:
            session_id: セッションID。
        """
        try:
            return await export_service.export_snapshot(session_id)
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}

    @mcp.tool()
    async def import_snapshot(session_id: str, document: dict[str, Any]) -> dict[str, Any]:
        """export_snapshot で出力したJSONドキュメントから要件とシステム構成を復元する。

        現在の要件とシステム構成は置き換えられます。

        Args:
            session_id: セッションID。
            document: JSONドキュメント。
        """
        try:
            session = await export_service.import_snapshot(session_id, document)
            return {
                "imported": True,
                "counts": session.requirements.counts(),
                "has_architecture": session.architecture is not None,
                "message": session.chat_messages[-1].content,
            }
        except OmittError as e:
            return {"error": type(e).__name__, "message": str(e)}
