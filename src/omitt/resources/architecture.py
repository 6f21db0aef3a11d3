"""システム構成・見積もり依頼書関連のMCPリソース定義。"""

import yaml
from fastmcp import FastMCP

from omitt.services.architecture import ArchitectureService
from omitt.services.export import ExportService


def register_architecture_resources(
    mcp: FastMCP,
    architecture_service: ArchitectureService,
    export_service: ExportService,
) -> None:
    """システム構成関連のMCPリソースを登録する。"""

    @mcp.resource("omitt://architecture/types")
    async def architecture_types() -> str:
        """選択可能なアーキテクチャタイプの一覧を取得する。

        タイプID、表示名、説明を含む定義を返します。
        """
        types = await architecture_service.list_architecture_types()
        data = {"architecture_types": [t.model_dump() for t in types]}
        return yaml.dump(data, allow_unicode=True, default_flow_style=False, sort_keys=False)

    @mcp.resource("omitt://sessions/{session_id}/quote")
    async def quote_document(session_id: str) -> str:
        """セッションの見積もり依頼書をテキストで取得する。"""
        return await export_service.export_quote(session_id)
