"""構造化要件の検証を行う言語モデル呼び出し。"""

from omitt.models.requirements import StructuredRequirements
from omitt.models.validation import ValidationResult
from omitt.oracle.client import LLMClient
from omitt.oracle.prompts.validation import VALIDATION_SYSTEM_PROMPT, build_validation_user_prompt


class ValidationOracle:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def validate(self, requirements: StructuredRequirements) -> ValidationResult:
        """要件の不足・矛盾・曖昧さと完成度を評価する。

        Raises:
            OracleError: 言語モデルの呼び出しまたは応答の解釈に失敗した場合。
        """
        return await self._llm.complete_json(
            system_prompt=VALIDATION_SYSTEM_PROMPT,
            user_prompt=build_validation_user_prompt(requirements),
            response_schema=ValidationResult,
        )
