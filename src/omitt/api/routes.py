"""ステートレスなJSON HTTPエンドポイント定義。

チャット画面から直接呼ばれる要件分析・構成生成・要件検証の3つのエンドポイントを提供する。
いずれもセッションを持たず、リクエストに含まれる要件だけを入力とする。
"""

import logging
from typing import TypeVar

from fastmcp import FastMCP
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse

from omitt.models.api import (
    AnalyzeRequest,
    AnalyzeResponse,
    GenerateArchitectureRequest,
    GenerateArchitectureResponse,
    ValidateRequest,
    ValidateResponse,
)
from omitt.models.errors import OracleError
from omitt.oracle.architecture import ArchitectureOracle
from omitt.oracle.extraction import ExtractionOracle
from omitt.oracle.validation import ValidationOracle
from omitt.renderers.messages import EXTRACTION_ERROR_MESSAGE, VALIDATION_ERROR_MESSAGE, render_validation_message

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

ANALYZE_ERROR = "要件の分析中にエラーが発生しました。"
ARCHITECTURE_ERROR = "システム構成の生成中にエラーが発生しました。"
VALIDATE_ERROR = "要件検証中にエラーが発生しました。"
INVALID_REQUEST_ERROR = "リクエストの形式が正しくありません。"


def _envelope(response: BaseModel, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        response.model_dump(mode="json", by_alias=True, exclude_none=True),
        status_code=status_code,
    )


async def _read_body(request: Request, model: type[T]) -> T | None:
    try:
        return model.model_validate(await request.json())
    except ValueError as e:
        logger.warning("Rejected malformed request to %s: %s", request.url.path, e)
        return None


def register_api_routes(
    mcp: FastMCP,
    extraction_oracle: ExtractionOracle,
    architecture_oracle: ArchitectureOracle,
    validation_oracle: ValidationOracle,
) -> None:
    """HTTPエンドポイントを登録する。"""

    @mcp.custom_route("/api/analyze-requirements", methods=["POST"])
    async def analyze_requirements(request: Request) -> JSONResponse:
        body = await _read_body(request, AnalyzeRequest)
        if body is None or not body.message.strip():
            return _envelope(AnalyzeResponse(success=False, error=INVALID_REQUEST_ERROR), 400)
        try:
            result = await extraction_oracle.extract(body.message, body.context)
        except OracleError as e:
            logger.error("Error analyzing requirements: %s", e)
            return _envelope(
                AnalyzeResponse(success=False, error=ANALYZE_ERROR, assistant_response=EXTRACTION_ERROR_MESSAGE),
                500,
            )
        return _envelope(
            AnalyzeResponse(
                success=True,
                requirements=result.requirements,
                assistant_response=result.assistant_response,
            )
        )

    @mcp.custom_route("/api/generate-architecture", methods=["POST"])
    async def generate_architecture(request: Request) -> JSONResponse:
        body = await _read_body(request, GenerateArchitectureRequest)
        if body is None:
            return _envelope(GenerateArchitectureResponse(success=False, error=INVALID_REQUEST_ERROR), 400)
        try:
            architecture = await architecture_oracle.generate(body.requirements, body.preferred_architecture_type)
        except OracleError as e:
            logger.error("Error generating system architecture: %s", e)
            return _envelope(GenerateArchitectureResponse(success=False, error=ARCHITECTURE_ERROR), 500)
        return _envelope(GenerateArchitectureResponse(success=True, architecture=architecture))

    @mcp.custom_route("/api/validate-requirements", methods=["POST"])
    async def validate_requirements(request: Request) -> JSONResponse:
        body = await _read_body(request, ValidateRequest)
        if body is None:
            return _envelope(ValidateResponse(success=False, error=INVALID_REQUEST_ERROR), 400)
        try:
            validation = await validation_oracle.validate(body.requirements)
        except OracleError as e:
            logger.error("Error validating requirements: %s", e)
            return _envelope(
                ValidateResponse(success=False, error=VALIDATE_ERROR, chat_message=VALIDATION_ERROR_MESSAGE),
                500,
            )
        return _envelope(
            ValidateResponse(
                success=True,
                validation=validation,
                chat_message=render_validation_message(validation),
            )
        )
