import json

from omitt.config import MergePolicy
from omitt.models.requirements import StructuredRequirements

EXTRACTION_BASE_PROMPT = """
あなたは要件分析の専門家です。発注者（非IT技術者）からの自然言語の入力を分析し、要件を以下の5つのカテゴリに分類してJSONで返してください。

分類カテゴリ：
1. 機能要件 (functional_requirements)
2. 非機能要件 (non_functional_requirements)
3. 制約条件 (constraints)
4. 希望・要望 (wishes)
5. 設計指針 (design_guidelines)

各項目は以下の形式で返してください：
{
  "functional_requirements": [
    {"id": "unique_id", "title": "機能名", "description": "詳細説明", "priority": "high|medium|low", "category": "認証|データ管理|UI/UX|API|その他"}
  ],
  "non_functional_requirements": [
    {"id": "unique_id", "title": "非機能要件名", "description": "詳細説明", "priority": "high|medium|low", "category": "性能|セキュリティ|可用性|保守性|その他"}
  ],
  "constraints": [
    {"id": "unique_id", "title": "制約名", "description": "詳細説明", "type": "技術的制約|予算制約|期間制約|その他"}
  ],
  "wishes": [
    {"id": "unique_id", "title": "希望事項", "description": "詳細説明"}
  ],
  "design_guidelines": [
    {"id": "unique_id", "title": "設計指針", "description": "詳細説明"}
  ]
}

該当する要件がないカテゴリは空の配列にしてください。priority を付ける場合は high / medium / low のいずれかのみを使用してください。
"""

ADDITIVE_INSTRUCTIONS = """
既存の要件コンテキスト：
{context}

重要: 既存の要件はシステム側ですべて保持されます。返すJSONには、今回の入力から新たに分かった要件だけを含めてください。
1. 既存の要件と同じ内容は返さないでください。
2. 新しい要件には既存の要件と重複しないIDを付けてください。
3. 新しい要件がない場合は、すべてのカテゴリを空の配列にしてください。

処理例：
- 「個人情報を扱いません」→ 非機能要件または制約条件に「個人情報非使用」を返す
- 「ユーザー認証が必要」→ 機能要件に認証機能を返す
- 「高速な応答が必要」→ 非機能要件に性能要件を返す
"""

REPLACE_INSTRUCTIONS = """
既存の要件コンテキスト：
{context}

重要: 既存の要件をすべて保持しつつ、新しい入力内容を反映した完全な要件一覧を返してください。
1. 既存の要件と重複や関連がある場合は、既存の要件を更新・統合する
2. 全く新しい要件の場合は、既存の要件に追加する
3. 既存の要件を削除・置換することは避け、必ず保持する
4. 既存の要件が空の場合のみ、新しい要件のみを返す

返すJSONには既存の要件もすべて含めてください。
"""


def build_extraction_system_prompt(context: StructuredRequirements, policy: MergePolicy) -> str:
    """既存要件をコンテキストとして埋め込んだシステムプロンプトを組み立てる。"""
    context_json = json.dumps(context.model_dump(exclude_none=True), ensure_ascii=False, indent=2)
    instructions = REPLACE_INSTRUCTIONS if policy == "replace" else ADDITIVE_INSTRUCTIONS
    return EXTRACTION_BASE_PROMPT + instructions.format(context=context_json)


def build_extraction_user_prompt(message: str) -> str:
    return f"発注者の入力: {message}"
