"""要件からシステム構成を導出する言語モデル呼び出し。"""

from omitt.models.architecture import ArchitectureType, SystemArchitecture
from omitt.models.requirements import StructuredRequirements
from omitt.oracle.client import LLMClient
from omitt.oracle.prompts.architecture import build_architecture_system_prompt, build_architecture_user_prompt


class ArchitectureOracle:
    """構造化要件とアーキテクチャタイプの希望から、システム構成を生成する。"""

    def __init__(self, llm: LLMClient, type_descriptions: dict[str, str] | None = None) -> None:
        self._llm = llm
        self._type_descriptions = type_descriptions or {}

    async def generate(
        self,
        requirements: StructuredRequirements,
        preferred_type: ArchitectureType | None = None,
    ) -> SystemArchitecture:
        """システム構成を生成する。

        Raises:
            OracleError: 言語モデルの呼び出しまたは応答の解釈に失敗した場合。
        """
        return await self._llm.complete_json(
            system_prompt=build_architecture_system_prompt(preferred_type, self._type_descriptions),
            user_prompt=build_architecture_user_prompt(requirements),
            response_schema=SystemArchitecture,
        )
