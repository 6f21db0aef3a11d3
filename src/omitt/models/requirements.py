"""構造化要件のデータモデル。"""

from typing import Any, Literal, get_args

from pydantic import BaseModel, Field, field_validator

RequirementCategory = Literal[
    "functional_requirements",
    "non_functional_requirements",
    "constraints",
    "wishes",
    "design_guidelines",
]

REQUIREMENT_CATEGORIES: tuple[RequirementCategory, ...] = get_args(RequirementCategory)

# カテゴリ → 表示名
CATEGORY_LABELS: dict[RequirementCategory, str] = {
    "functional_requirements": "機能要件",
    "non_functional_requirements": "非機能要件",
    "constraints": "制約条件",
    "wishes": "希望・要望",
    "design_guidelines": "設計指針",
}


class RequirementItem(BaseModel):
    """言語モデルが抽出した個別の要件。"""

    id: str
    title: str
    description: str
    priority: Literal["high", "medium", "low"] | None = None
    category: str | None = None
    type: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # 言語モデルは数値IDを返すことがある
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class StructuredRequirements(BaseModel):
    """5つのカテゴリに分類された要件の集合。"""

    functional_requirements: list[RequirementItem] = Field(default_factory=list)
    non_functional_requirements: list[RequirementItem] = Field(default_factory=list)
    constraints: list[RequirementItem] = Field(default_factory=list)
    wishes: list[RequirementItem] = Field(default_factory=list)
    design_guidelines: list[RequirementItem] = Field(default_factory=list)

    def category_items(self, category: RequirementCategory) -> list[RequirementItem]:
        """指定カテゴリの要件リストを返す。"""
        items: list[RequirementItem] = getattr(self, category)
        return items

    def total(self) -> int:
        """全カテゴリの要件数の合計を返す。"""
        return sum(len(self.category_items(c)) for c in REQUIREMENT_CATEGORIES)

    def is_empty(self) -> bool:
        return self.total() == 0

    def counts(self) -> dict[RequirementCategory, int]:
        """カテゴリごとの要件数を返す。"""
        return {c: len(self.category_items(c)) for c in REQUIREMENT_CATEGORIES}
