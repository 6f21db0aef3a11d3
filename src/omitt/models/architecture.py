"""システム構成関連のデータモデル。"""

from typing import Any, Literal, get_args

from pydantic import BaseModel, Field, field_validator

ArchitectureType = Literal["web", "cloud", "hybrid", "on_premise", "embedded", "mobile_app", "game", "other"]
DeploymentEnvironment = Literal["cloud", "on_premise", "hybrid"]
ComponentType = Literal["frontend", "backend", "database", "infrastructure", "security", "integration"]

ARCHITECTURE_TYPES: tuple[ArchitectureType, ...] = get_args(ArchitectureType)


class SystemComponent(BaseModel):
    """システムを構成するコンポーネント。"""

    id: str
    name: str
    type: ComponentType
    description: str
    technologies: list[str] = Field(default_factory=list)
    justification: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class SystemArchitecture(BaseModel):
    """要件から導出されたシステム構成。常に丸ごと置き換えられる。"""

    architecture_type: ArchitectureType
    deployment_environment: DeploymentEnvironment
    components: list[SystemComponent] = Field(default_factory=list)
    network_requirements: list[str] = Field(default_factory=list)
    security_measures: list[str] = Field(default_factory=list)
    scalability_considerations: list[str] = Field(default_factory=list)


class ArchitectureTypeInfo(BaseModel):
    """アーキテクチャタイプの選択肢（YAMLから読み込み）。"""

    id: ArchitectureType
    display_name: str
    description: str
