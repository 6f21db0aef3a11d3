"""FastMCPベースのMCPサーバーエントリポイント。"""

from dataclasses import dataclass

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from omitt.api.routes import register_api_routes
from omitt.catalog import load_architecture_types, type_descriptions
from omitt.config import ServerConfig
from omitt.oracle.architecture import ArchitectureOracle
from omitt.oracle.client import LLMClient
from omitt.oracle.extraction import ExtractionOracle
from omitt.oracle.validation import ValidationOracle
from omitt.prompts.workflow import register_workflow_prompts
from omitt.resources.architecture import register_architecture_resources
from omitt.services.architecture import ArchitectureService
from omitt.services.export import ExportService
from omitt.services.inflight import InFlightGuard
from omitt.services.requirements import RequirementsService
from omitt.services.validation import ValidationService
from omitt.storage.service import StorageService
from omitt.tools.architecture import register_architecture_tools
from omitt.tools.chat import register_chat_tools
from omitt.tools.export import register_export_tools
from omitt.tools.requirements import register_requirements_tools


@dataclass
class Services:
    """サーバーが使用する言語モデル呼び出しとサービス層一式。"""

    storage: StorageService
    extraction_oracle: ExtractionOracle
    architecture_oracle: ArchitectureOracle
    validation_oracle: ValidationOracle
    requirements: RequirementsService
    architecture: ArchitectureService
    validation: ValidationService
    export: ExportService


def build_services(
    config: ServerConfig,
    *,
    extraction_oracle: ExtractionOracle | None = None,
    architecture_oracle: ArchitectureOracle | None = None,
    validation_oracle: ValidationOracle | None = None,
) -> Services:
    """設定からサービス層を組み立てる。

    言語モデル呼び出しを指定しない場合は、設定に従って OpenAI 互換APIのクライアントを作成する。
    """
    architecture_types = load_architecture_types(config.config_dir)
    llm = LLMClient(config)
    if extraction_oracle is None:
        extraction_oracle = ExtractionOracle(llm, merge_policy=config.merge_policy)
    if architecture_oracle is None:
        architecture_oracle = ArchitectureOracle(llm, type_descriptions(architecture_types))
    if validation_oracle is None:
        validation_oracle = ValidationOracle(llm)

    # データアクセス層
    storage = StorageService(data_dir=config.data_dir)

    # サービス層
    guard = InFlightGuard()
    architecture_service = ArchitectureService(storage, architecture_oracle, architecture_types)
    requirements_service = RequirementsService(
        storage,
        extraction_oracle,
        architecture_service,
        guard,
        merge_policy=config.merge_policy,
    )
    return Services(
        storage=storage,
        extraction_oracle=extraction_oracle,
        architecture_oracle=architecture_oracle,
        validation_oracle=validation_oracle,
        requirements=requirements_service,
        architecture=architecture_service,
        validation=ValidationService(storage, validation_oracle, guard),
        export=ExportService(storage),
    )


def create_server(config: ServerConfig | None = None, services: Services | None = None) -> FastMCP:
    """omitt MCPサーバーを作成し、ツール・リソース・プロンプト・HTTPエンドポイントを登録する。

    Args:
        config: サーバー設定。Noneの場合はデフォルト設定を使用。
        services: サービス層。Noneの場合は設定から組み立てる。

    Returns:
        設定済みのFastMCPインスタンス。
    """
    if config is None:
        config = ServerConfig()
    if services is None:
        services = build_services(config)

    mcp = FastMCP("omitt")

    # MCPインターフェース登録: 会話・要件
    register_chat_tools(mcp, services.requirements, services.validation)
    register_requirements_tools(mcp, services.requirements)

    # MCPインターフェース登録: システム構成
    register_architecture_tools(mcp, services.architecture)
    register_architecture_resources(mcp, services.architecture, services.export)

    # MCPインターフェース登録: エクスポート
    register_export_tools(mcp, services.export)

    # MCPインターフェース登録: プロンプト
    register_workflow_prompts(mcp)

    # チャット画面向けHTTPエンドポイント
    register_api_routes(
        mcp,
        services.extraction_oracle,
        services.architecture_oracle,
        services.validation_oracle,
    )

    # ヘルスチェックエンドポイント
    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return mcp
