"""HTTPエンドポイントのリクエスト・レスポンスモデル。"""

from pydantic import BaseModel, ConfigDict, Field

from omitt.models.architecture import ArchitectureType, SystemArchitecture
from omitt.models.requirements import StructuredRequirements
from omitt.models.validation import ValidationResult


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeRequest(_CamelModel):
    message: str
    context: StructuredRequirements = Field(default_factory=StructuredRequirements)


class AnalyzeResponse(_CamelModel):
    success: bool
    requirements: StructuredRequirements | None = None
    assistant_response: str | None = Field(default=None, alias="assistantResponse")
    error: str | None = None


class GenerateArchitectureRequest(_CamelModel):
    requirements: StructuredRequirements
    preferred_architecture_type: ArchitectureType | None = Field(default=None, alias="preferredArchitectureType")


class GenerateArchitectureResponse(_CamelModel):
    success: bool
    architecture: SystemArchitecture | None = None
    error: str | None = None


class ValidateRequest(_CamelModel):
    requirements: StructuredRequirements


class ValidateResponse(_CamelModel):
    success: bool
    validation: ValidationResult | None = None
    chat_message: str | None = Field(default=None, alias="chatMessage")
    error: str | None = None
