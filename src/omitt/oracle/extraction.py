"""自然言語の入力から構造化要件を抽出する言語モデル呼び出し。"""

from pydantic import BaseModel

from omitt.config import MergePolicy
from omitt.models.requirements import StructuredRequirements
from omitt.oracle.client import LLMClient
from omitt.oracle.prompts.extraction import build_extraction_system_prompt, build_extraction_user_prompt
from omitt.renderers.messages import compose_extraction_reply


class ExtractionResult(BaseModel):
    """要件抽出の結果。"""

    requirements: StructuredRequirements
    assistant_response: str


class ExtractionOracle:
    """発注者の入力と既存要件を言語モデルに渡し、要件を抽出する。"""

    def __init__(self, llm: LLMClient, merge_policy: MergePolicy = "additive") -> None:
        self._llm = llm
        self._merge_policy = merge_policy

    async def extract(self, message: str, context: StructuredRequirements) -> ExtractionResult:
        """要件を抽出する。

        Raises:
            OracleError: 言語モデルの呼び出しまたは応答の解釈に失敗した場合。
        """
        requirements = await self._llm.complete_json(
            system_prompt=build_extraction_system_prompt(context, self._merge_policy),
            user_prompt=build_extraction_user_prompt(message),
            response_schema=StructuredRequirements,
        )
        return ExtractionResult(
            requirements=requirements,
            assistant_response=compose_extraction_reply(requirements.total()),
        )
