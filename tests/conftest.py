"""テスト共通フィクスチャ。"""

import asyncio
from pathlib import Path

import pytest

from omitt.catalog import load_architecture_types
from omitt.config import ServerConfig
from omitt.models.architecture import SystemArchitecture, SystemComponent
from omitt.models.errors import OracleError
from omitt.models.requirements import StructuredRequirements
from omitt.models.validation import ValidationResult
from omitt.oracle.extraction import ExtractionResult
from omitt.renderers.messages import compose_extraction_reply
from omitt.server import Services, build_services
from omitt.services.architecture import ArchitectureService
from omitt.services.export import ExportService
from omitt.services.inflight import InFlightGuard
from omitt.services.requirements import RequirementsService
from omitt.services.validation import ValidationService
from omitt.storage.service import StorageService


def make_architecture(name: str = "Webフロントエンド") -> SystemArchitecture:
    return SystemArchitecture(
        architecture_type="web",
        deployment_environment="cloud",
        components=[
            SystemComponent(
                id="c1",
                name=name,
                type="frontend",
                description="利用者向け画面",
                technologies=["React", "TypeScript"],
                justification="一般的な構成のため",
            )
        ],
        network_requirements=["HTTPS通信"],
        security_measures=["パスワードのハッシュ化"],
        scalability_considerations=["オートスケール"],
    )


class FakeExtractionOracle:
    """呼び出し回数を記録し、用意した抽出結果を順に返す。"""

    def __init__(self) -> None:
        self.results: list[StructuredRequirements] = []
        self.error: OracleError | None = None
        self.calls: list[tuple[str, StructuredRequirements]] = []
        self.release: asyncio.Event | None = None

    async def extract(self, message: str, context: StructuredRequirements) -> ExtractionResult:
        self.calls.append((message, context))
        if self.release is not None:
            await self.release.wait()
        if self.error is not None:
            raise self.error
        requirements = self.results.pop(0) if self.results else StructuredRequirements()
        return ExtractionResult(
            requirements=requirements,
            assistant_response=compose_extraction_reply(requirements.total()),
        )


class FakeArchitectureOracle:
    """呼び出し回数を記録する。blocking の場合は呼び出しごとの Event が set されるまで応答しない。"""

    def __init__(self) -> None:
        self.results: list[SystemArchitecture] = []
        self.error: OracleError | None = None
        self.calls: list[StructuredRequirements] = []
        self.preferred_types: list[str | None] = []
        self.blocking = False
        self.gates: list[asyncio.Event] = []

    async def generate(self, requirements: StructuredRequirements, preferred_type: str | None = None) -> SystemArchitecture:
        self.calls.append(requirements)
        self.preferred_types.append(preferred_type)
        index = len(self.calls) - 1
        if self.blocking:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()
        if self.error is not None:
            raise self.error
        if index < len(self.results):
            return self.results[index]
        return make_architecture()


class FakeValidationOracle:
    """呼び出し回数を記録し、用意した検証結果を返す。"""

    def __init__(self) -> None:
        self.result = ValidationResult(overall_status="good", completeness_score=80)
        self.error: OracleError | None = None
        self.calls: list[StructuredRequirements] = []

    async def validate(self, requirements: StructuredRequirements) -> ValidationResult:
        self.calls.append(requirements)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """テスト用の一時データディレクトリ。"""
    return tmp_path / "omitt-test"


@pytest.fixture
def config_dir() -> Path:
    """設定ファイルディレクトリ。"""
    return Path(__file__).parent.parent / "config"


@pytest.fixture
def storage(tmp_data_dir: Path) -> StorageService:
    """テスト用StorageService。"""
    return StorageService(data_dir=tmp_data_dir)


@pytest.fixture
def extraction_oracle() -> FakeExtractionOracle:
    return FakeExtractionOracle()


@pytest.fixture
def architecture_oracle() -> FakeArchitectureOracle:
    return FakeArchitectureOracle()


@pytest.fixture
def validation_oracle() -> FakeValidationOracle:
    return FakeValidationOracle()


@pytest.fixture
def guard() -> InFlightGuard:
    return InFlightGuard()


@pytest.fixture
def architecture_service(
    storage: StorageService,
    architecture_oracle: FakeArchitectureOracle,
    config_dir: Path,
) -> ArchitectureService:
    """テスト用ArchitectureService。"""
    return ArchitectureService(storage, architecture_oracle, load_architecture_types(config_dir))  # type: ignore[arg-type]


@pytest.fixture
def requirements_service(
    storage: StorageService,
    extraction_oracle: FakeExtractionOracle,
    architecture_service: ArchitectureService,
    guard: InFlightGuard,
) -> RequirementsService:
    """テスト用RequirementsService。"""
    return RequirementsService(storage, extraction_oracle, architecture_service, guard)  # type: ignore[arg-type]


@pytest.fixture
def validation_service(
    storage: StorageService,
    validation_oracle: FakeValidationOracle,
    guard: InFlightGuard,
) -> ValidationService:
    """テスト用ValidationService。"""
    return ValidationService(storage, validation_oracle, guard)  # type: ignore[arg-type]


@pytest.fixture
def export_service(storage: StorageService) -> ExportService:
    """テスト用ExportService。"""
    return ExportService(storage)


@pytest.fixture
def server_config(tmp_data_dir: Path, config_dir: Path) -> ServerConfig:
    """テスト用ServerConfig。"""
    return ServerConfig(data_dir=tmp_data_dir, config_dir=config_dir, openai_api_key="test-key")


@pytest.fixture
def services(
    server_config: ServerConfig,
    extraction_oracle: FakeExtractionOracle,
    architecture_oracle: FakeArchitectureOracle,
    validation_oracle: FakeValidationOracle,
) -> Services:
    """言語モデル呼び出しを差し替えたサービス層一式。"""
    return build_services(
        server_config,
        extraction_oracle=extraction_oracle,  # type: ignore[arg-type]
        architecture_oracle=architecture_oracle,  # type: ignore[arg-type]
        validation_oracle=validation_oracle,  # type: ignore[arg-type]
    )
