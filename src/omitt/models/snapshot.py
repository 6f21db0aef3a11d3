"""JSONエクスポート・インポート用のデータモデル。"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from omitt.models.architecture import SystemArchitecture
from omitt.models.requirements import StructuredRequirements

SNAPSHOT_VERSION = "1.0"
SNAPSHOT_TOOL = "omitt-chan"


class ExportInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str = SNAPSHOT_VERSION
    tool: str = SNAPSHOT_TOOL
    total_requirements: int = Field(alias="totalRequirements")


class SnapshotDocument(BaseModel):
    """書き出し・読み込みされるJSONドキュメント。"""

    model_config = ConfigDict(populate_by_name=True)

    export_info: ExportInfo = Field(alias="exportInfo")
    requirements: StructuredRequirements
    system_architecture: SystemArchitecture | None = Field(default=None, alias="systemArchitecture")
