"""会話から見積もり依頼書出力までのMCPプロトコル経由統合テスト。"""

import json

import pytest
from fastmcp import Client, FastMCP

from omitt.models.errors import OracleUnavailableError
from omitt.models.requirements import RequirementItem, StructuredRequirements
from omitt.models.validation import ValidationResult
from omitt.server import Services, create_server


@pytest.fixture
def mcp_server(server_config, services: Services) -> FastMCP:
    """言語モデル呼び出しを差し替えたテスト用MCPサーバー。"""
    return create_server(server_config, services)


def parse_tool_result(result: object) -> dict:
    """CallToolResultからJSONデータを抽出する。"""
    content = result.content  # type: ignore[union-attr]
    assert len(content) > 0
    return json.loads(content[0].text)  # type: ignore[union-attr]


def _functional(*titles: str) -> StructuredRequirements:
    return StructuredRequirements(
        functional_requirements=[
            RequirementItem(id=f"f{i}", title=title, description=f"{title}ができる", priority="high")
            for i, title in enumerate(titles, start=1)
        ]
    )


class TestChatFlowViaMCP:
    async def test_create_session_via_mcp(self, mcp_server: FastMCP) -> None:
        async with Client(mcp_server) as client:
            result = await client.call_tool("create_session", {})
            data = parse_tool_result(result)
            assert "session_id" in data
            assert data["welcome_message"].startswith("こんにちは")

    async def test_full_flow_via_mcp(
        self,
        mcp_server: FastMCP,
        services: Services,
        extraction_oracle,
        architecture_oracle,
    ) -> None:
        extraction_oracle.results = [_functional("ユーザー登録"), _functional("ユーザー登録", "予約")]
        async with Client(mcp_server) as client:
            # 1. セッション作成
            data = parse_tool_result(await client.call_tool("create_session", {}))
            session_id = data["session_id"]

            # 2. 要件の抽出
            data = parse_tool_result(
                await client.call_tool("send_message", {"session_id": session_id, "message": "ユーザー登録機能が欲しい"})
            )
            assert data["success"] is True
            assert data["requirement_counts"]["functional_requirements"] == 1
            assert data["replies"][0].startswith("1個の要件を抽出しました。")
            await services.architecture.drain()
            assert len(architecture_oracle.calls) == 1

            # 3. 追加の要件
            data = parse_tool_result(
                await client.call_tool("send_message", {"session_id": session_id, "message": "予約もしたい"})
            )
            assert data["added_count"] == 1
            await services.architecture.drain()

            # 4. 要件とシステム構成の確認
            data = parse_tool_result(await client.call_tool("get_requirements", {"session_id": session_id}))
            assert data["total"] == 2
            data = parse_tool_result(await client.call_tool("get_architecture", {"session_id": session_id}))
            assert data["status"] == "valid"
            assert data["architecture"]["components"][0]["type"] == "frontend"

            # 5. 見積もり依頼書
            data = parse_tool_result(await client.call_tool("export_quote", {"session_id": session_id}))
            assert "■ 機能要件 (2件)" in data["document"]

            # 6. 会話ログ
            data = parse_tool_result(await client.call_tool("get_chat_log", {"session_id": session_id}))
            assert [m["sender"] for m in data["messages"]] == ["assistant", "user", "assistant", "user", "assistant"]

    async def test_validate_via_mcp(
        self,
        mcp_server: FastMCP,
        services: Services,
        extraction_oracle,
        validation_oracle,
    ) -> None:
        extraction_oracle.results = [_functional("ユーザー登録")]
        validation_oracle.result = ValidationResult(overall_status="warning", completeness_score=45)
        async with Client(mcp_server) as client:
            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            await client.call_tool("send_message", {"session_id": session_id, "message": "ユーザー登録機能が欲しい"})
            await services.architecture.drain()

            data = parse_tool_result(await client.call_tool("validate_requirements", {"session_id": session_id}))

            assert data["success"] is True
            assert data["passed"] is False
            assert "要検討" in data["message"]
            assert data["validation"]["completeness_score"] == 45

    async def test_remove_and_clear_via_mcp(self, mcp_server: FastMCP, services: Services, extraction_oracle) -> None:
        extraction_oracle.results = [_functional("登録", "検索")]
        async with Client(mcp_server) as client:
            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            await client.call_tool("send_message", {"session_id": session_id, "message": "登録と検索"})
            await services.architecture.drain()

            data = parse_tool_result(
                await client.call_tool(
                    "remove_requirement",
                    {"session_id": session_id, "category": "functional_requirements", "requirement_id": "f1"},
                )
            )
            assert data["counts"]["functional_requirements"] == 1
            assert data["has_architecture"] is False

            data = parse_tool_result(await client.call_tool("clear_requirements", {"session_id": session_id}))
            assert data["error"] == "ConfirmationRequiredError"

            data = parse_tool_result(
                await client.call_tool("clear_requirements", {"session_id": session_id, "confirm": True})
            )
            assert data["cleared"] is True
            assert data["total"] == 0

    async def test_errors_are_returned_as_dict(self, mcp_server: FastMCP, extraction_oracle) -> None:
        async with Client(mcp_server) as client:
            data = parse_tool_result(await client.call_tool("get_requirements", {"session_id": "missing"}))
            assert data["error"] == "SessionNotFoundError"

            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            data = parse_tool_result(await client.call_tool("send_message", {"session_id": session_id, "message": " "}))
            assert data["error"] == "EmptyMessageError"

            extraction_oracle.error = OracleUnavailableError("down")
            data = parse_tool_result(
                await client.call_tool("send_message", {"session_id": session_id, "message": "ログイン"})
            )
            assert data["success"] is False
            assert data["replies"][0].startswith("申し訳ありません。要件の分析中に")


class TestArchitectureToolsViaMCP:
    async def test_list_and_set_architecture_type(self, mcp_server: FastMCP) -> None:
        async with Client(mcp_server) as client:
            data = parse_tool_result(await client.call_tool("list_architecture_types", {}))
            assert [t["id"] for t in data["architecture_types"]][:3] == ["web", "mobile_app", "game"]

            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            data = parse_tool_result(
                await client.call_tool("set_architecture_type", {"session_id": session_id, "architecture_type": "game"})
            )
            assert data["architecture_type"] == "game"

    async def test_generate_architecture_with_empty_store(self, mcp_server: FastMCP, architecture_oracle) -> None:
        async with Client(mcp_server) as client:
            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            data = parse_tool_result(await client.call_tool("generate_architecture", {"session_id": session_id}))
            assert data["status"] == "none"
            assert data["architecture"] is None
            assert architecture_oracle.calls == []

    async def test_generate_architecture_failure(
        self,
        mcp_server: FastMCP,
        services: Services,
        extraction_oracle,
        architecture_oracle,
    ) -> None:
        extraction_oracle.results = [_functional("登録")]
        async with Client(mcp_server) as client:
            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            await client.call_tool("send_message", {"session_id": session_id, "message": "登録"})
            await services.architecture.drain()

            architecture_oracle.error = OracleUnavailableError("down")
            data = parse_tool_result(
                await client.call_tool(
                    "generate_architecture", {"session_id": session_id, "architecture_type": "mobile_app"}
                )
            )
            assert data["error"] == "ArchitectureGenerationError"

            data = parse_tool_result(await client.call_tool("get_architecture", {"session_id": session_id}))
            assert data["architecture"]["architecture_type"] == "web"


class TestResourcesAndPromptsViaMCP:
    async def test_architecture_types_resource(self, mcp_server: FastMCP) -> None:
        async with Client(mcp_server) as client:
            contents = await client.read_resource("omitt://architecture/types")
            assert "mobile_app" in contents[0].text  # type: ignore[union-attr]

    async def test_quote_resource(self, mcp_server: FastMCP) -> None:
        async with Client(mcp_server) as client:
            session_id = parse_tool_result(await client.call_tool("create_session", {}))["session_id"]
            contents = await client.read_resource(f"omitt://sessions/{session_id}/quote")
            assert contents[0].text.startswith("見積もり依頼書")  # type: ignore[union-attr]

    async def test_workflow_prompt(self, mcp_server: FastMCP) -> None:
        async with Client(mcp_server) as client:
            result = await client.get_prompt("start_requirements_chat")
            text = result.messages[0].content.text  # type: ignore[union-attr]
            assert "send_message" in text
            assert "export_quote" in text
