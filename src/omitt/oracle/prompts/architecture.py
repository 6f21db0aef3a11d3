from omitt.models.architecture import ArchitectureType
from omitt.models.requirements import CATEGORY_LABELS, REQUIREMENT_CATEGORIES, StructuredRequirements

ARCHITECTURE_SYSTEM_PROMPT = """
あなたはシステムアーキテクトです。提供された要件から最適なシステム構成を設計し、JSONで返してください。
{preferred_section}
以下の構造で返してください：
{{
  "architecture_type": "{type_choices}",
  "deployment_environment": "cloud|on_premise|hybrid",
  "components": [
    {{
      "id": "unique_id",
      "name": "コンポーネント名",
      "type": "frontend|backend|database|infrastructure|security|integration",
      "description": "詳細説明",
      "technologies": ["技術名1", "技術名2"],
      "justification": "選択理由"
    }}
  ],
  "network_requirements": ["ネットワーク要件1", "ネットワーク要件2"],
  "security_measures": ["セキュリティ対策1", "セキュリティ対策2"],
  "scalability_considerations": ["スケーラビリティ考慮事項1", "スケーラビリティ考慮事項2"]
}}

要件分析のポイント：
1. 機能要件からフロントエンド・バックエンド・データベースの必要性を判断
2. 非機能要件から性能・セキュリティ・可用性要件を分析
3. 制約条件から技術選択肢やデプロイメント環境を制限
4. 希望・要望から優先技術や方向性を判断
5. 設計指針からアーキテクチャパターンを決定

重要：architecture_typeフィールドには{type_instruction}してください。

現代的な技術スタックを推奨し、運用保守性・拡張性を考慮してください。
"""

PREFERRED_TYPE_SECTION = """
優先アーキテクチャタイプ: {preferred}
{descriptions}

このタイプを最優先に考慮して設計し、このタイプに適したコンポーネント構成を選択してください。
"""


def build_architecture_system_prompt(
    preferred_type: ArchitectureType | None,
    type_descriptions: dict[str, str],
) -> str:
    """優先アーキテクチャタイプを反映したシステムプロンプトを組み立てる。"""
    type_choices = "|".join(type_descriptions) if type_descriptions else "web|cloud|hybrid|on_premise"
    if preferred_type is None:
        return ARCHITECTURE_SYSTEM_PROMPT.format(
            preferred_section="",
            type_choices=type_choices,
            type_instruction=f"{type_choices.replace('|', '、')}のいずれかを適切に選択",
        )

    descriptions = "\n".join(f"- {type_id}: {text}" for type_id, text in type_descriptions.items())
    return ARCHITECTURE_SYSTEM_PROMPT.format(
        preferred_section=PREFERRED_TYPE_SECTION.format(preferred=preferred_type, descriptions=descriptions),
        type_choices=type_choices,
        type_instruction=f"「{preferred_type}」を設定",
    )


def build_architecture_user_prompt(requirements: StructuredRequirements) -> str:
    sections: list[str] = []
    for category in REQUIREMENT_CATEGORIES:
        lines = [f"- {item.title}: {item.description}" for item in requirements.category_items(category)]
        sections.append(f"{CATEGORY_LABELS[category]}：\n" + "\n".join(lines))
    return "以下の要件からシステム構成を設計してください：\n\n" + "\n\n".join(sections)
