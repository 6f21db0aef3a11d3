"""要件検証関連のデータモデル。"""

from typing import Literal

from pydantic import BaseModel, Field

ValidationStatus = Literal["good", "warning", "critical"]

# この点数以上で見積もり依頼に進めると判定する
PASSING_SCORE = 50


class CriticalQuestions(BaseModel):
    """見積もりの前に必ず確認したい事項が欠けているかどうか。"""

    system_type_missing: bool = False
    personal_data_missing: bool = False
    user_scope_missing: bool = False


class ValidationResult(BaseModel):
    """言語モデルによる要件検証の結果。チャットに表示した後は保持しない。"""

    overall_status: ValidationStatus
    missing_requirements: list[str] = Field(default_factory=list)
    contradictions: list[str] = Field(default_factory=list)
    unclear_requirements: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    completeness_score: int = Field(ge=0, le=100)
    critical_questions: CriticalQuestions = Field(default_factory=CriticalQuestions)

    @property
    def passed(self) -> bool:
        return self.completeness_score >= PASSING_SCORE
