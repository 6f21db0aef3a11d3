"""見積もり依頼書のテキスト生成。"""

from omitt.models.architecture import SystemArchitecture
from omitt.models.requirements import CATEGORY_LABELS, REQUIREMENT_CATEGORIES, StructuredRequirements

# アーキテクチャタイプ → 見積もり依頼書での呼び方
ARCHITECTURE_TYPE_LABELS: dict[str, str] = {
    "web": "Webアプリケーション",
    "cloud": "クラウドネイティブシステム",
    "hybrid": "ハイブリッドシステム",
    "on_premise": "オンプレミスシステム",
    "embedded": "組み込みシステム",
    "mobile_app": "スマートフォンアプリケーション",
    "game": "ゲームアプリケーション",
    "other": "その他のシステム",
}
DEFAULT_ARCHITECTURE_LABEL = "その他のシステム"

PLACEHOLDER_QUOTE = """見積もり依頼書

【プロジェクト概要】
まず、要件を入力してシステム構成を生成してください。

【システム要件】
要件の分析が完了していません。

【技術仕様】
システム構成の生成をお待ちください。

【その他】
ご質問やご相談がございましたら、お気軽にお声がけください。"""


def architecture_type_label(architecture_type: str) -> str:
    return ARCHITECTURE_TYPE_LABELS.get(architecture_type, DEFAULT_ARCHITECTURE_LABEL)


def _bullets(values: list[str]) -> str:
    return "\n".join(f"・{value}" for value in values)


def render_quote_document(
    requirements: StructuredRequirements,
    architecture: SystemArchitecture | None,
) -> str:
    """要件とシステム構成から見積もり依頼書を生成する。

    同じ入力に対しては常に同じ文字列を返す。構成が未生成または要件が空の場合は
    定型の案内文を返す。項目が空のセクションも見出しは省略しない。

    Args:
        requirements: 構造化要件。
        architecture: システム構成。未生成の場合はNone。

    Returns:
        見積もり依頼書のテキスト。
    """
    if architecture is None or requirements.is_empty():
        return PLACEHOLDER_QUOTE

    lines: list[str] = []
    lines.append("見積もり依頼書")
    lines.append("")
    lines.append("【プロジェクト概要】")
    lines.append(f"{architecture_type_label(architecture.architecture_type)}の開発をご依頼いたします。")
    lines.append("")

    lines.append("【システム要件】")
    for category in REQUIREMENT_CATEGORIES:
        items = requirements.category_items(category)
        lines.append(f"■ {CATEGORY_LABELS[category]} ({len(items)}件)")
        lines.append(_bullets([f"{item.title}: {item.description}" for item in items]))
        lines.append("")

    lines.append("【技術仕様】")
    lines.append(f"■ アーキテクチャタイプ: {architecture.architecture_type}")
    lines.append(f"■ デプロイ環境: {architecture.deployment_environment}")
    lines.append("")
    lines.append(f"■ システムコンポーネント ({len(architecture.components)}件)")
    lines.append(
        "\n\n".join(
            f"・{comp.name} ({comp.type})\n  技術: {', '.join(comp.technologies)}\n  概要: {comp.description}"
            for comp in architecture.components
        )
    )
    lines.append("")
    lines.append("■ ネットワーク要件")
    lines.append(_bullets(architecture.network_requirements))
    lines.append("")
    lines.append("■ セキュリティ対策")
    lines.append(_bullets(architecture.security_measures))
    lines.append("")
    lines.append("■ スケーラビリティ考慮事項")
    lines.append(_bullets(architecture.scalability_considerations))
    lines.append("")

    lines.append("【その他】")
    lines.append("ご質問やご相談がございましたら、お気軽にお声がけください。")
    lines.append("")
    return "\n".join(lines)
