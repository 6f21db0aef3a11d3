"""ワークフロー統合MCPプロンプト定義。"""

from fastmcp import FastMCP


def register_workflow_prompts(mcp: FastMCP) -> None:
    """ワークフロー系のMCPプロンプトを登録する。"""

    @mcp.prompt()
    async def start_requirements_chat() -> str:
        """チャットで要件を整理し、見積もり依頼書を作成するワークフロー。

        セッション作成→要件の聞き取り→検証→見積もり依頼書出力までをガイドします。
        """
        return (
            "# 見積もり依頼書作成ワークフロー\n\n"
            "発注者との対話から要件を整理し、見積もり依頼書を作成します。\n\n"
            "## Step 1: セッション作成\n\n"
            "1. `create_session` ツールでセッションを作成してください。\n"
            "2. **作成されたセッションID（`session_id`）を利用者に必ず提示してください。**\n"
            "3. 返却された `welcome_message` を利用者に伝えてください。\n\n"
            "## Step 2: 要件の聞き取り\n\n"
            "1. 利用者の発言をそのまま `send_message` ツールに渡してください。\n"
            "2. 返却された `replies` を利用者に伝えてください。\n"
            "3. `get_requirements` ツールで蓄積された要件を確認できます。\n"
            "4. 不要な要件は `remove_requirement` で削除してください。"
            "全件削除する場合は利用者に確認したうえで `clear_requirements` を confirm=true で呼び出してください。\n\n"
            "## Step 3: システム構成\n\n"
            "1. `list_architecture_types` で選択肢を確認し、利用者の希望があれば `set_architecture_type` で設定してください。\n"
            "2. `get_architecture` で構成と状態を確認してください。状態が `stale` の場合は "
            "`generate_architecture` で生成し直してください。\n\n"
            "## Step 4: 検証と出力\n\n"
            "1. `validate_requirements` で要件の網羅性を確認し、結果のメッセージを利用者に伝えてください。\n"
            "2. `export_quote` で見積もり依頼書を出力してください。\n"
            "3. 保存が必要な場合は `export_snapshot` で出力し、後で `import_snapshot` で読み込めます。\n\n"
            "## 注意事項\n\n"
            "- 利用者はIT技術者ではありません。専門用語を避けて説明してください。\n"
            "- 同一セッションでメッセージ送信と検証を同時に実行することはできません。\n"
            "- 要件の一部が失われた可能性があるという警告が出た場合は、利用者に内容の確認を促してください。\n"
        )
