"""OpenAI互換APIを利用した言語モデルクライアント。"""

import json
import logging
import re
from typing import TypeVar

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from omitt.config import ServerConfig
from omitt.models.errors import OracleResponseError, OracleUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _extract_fenced_block(text: str) -> str | None:
    blocks = re.findall(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL | re.IGNORECASE)
    return blocks[0].strip() if blocks else None


def _extract_balanced_object(text: str) -> str | None:
    """最初に現れる対応の取れたJSONオブジェクトを切り出す。"""
    start_idx = text.find("{")
    if start_idx == -1:
        return None

    depth = 0
    in_string = False
    escape = False
    for i in range(start_idx, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start_idx : i + 1]
    return None


def _json_candidates(raw_text: str) -> list[str]:
    text = (raw_text or "").strip()
    if not text:
        return []

    candidates: list[str] = []
    fenced = _extract_fenced_block(text)
    if fenced:
        candidates.append(fenced)
    candidates.append(text)
    balanced = _extract_balanced_object(text)
    if balanced:
        candidates.append(balanced)

    # 順序を保ったまま重複を除く
    seen = set()
    unique: list[str] = []
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        unique.append(candidate)
    return unique


def parse_structured(text: str, response_schema: type[T]) -> T:
    """言語モデルの出力をスキーマに沿ってパースする。

    Raises:
        OracleResponseError: どの候補もスキーマに合うJSONとして解釈できない場合。
    """
    candidates = _json_candidates(text)
    if not candidates:
        raise OracleResponseError("Model returned empty content")

    errors: list[str] = []
    for candidate in candidates:
        try:
            data = json.loads(candidate, strict=False)
            return response_schema.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            errors.append(str(e))
    raise OracleResponseError("Unable to parse structured response: " + " | ".join(errors[:3]))


class LLMClient:
    """スキーマ検証済みのJSONを返すチャット補完クライアント。

    自動リトライは行わず、失敗はすべてOracleErrorとして呼び出し元に送出する。
    """

    def __init__(self, config: ServerConfig, client: AsyncOpenAI | None = None) -> None:
        self.model_name = config.model
        self.temperature = config.temperature
        self._config = config
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        # APIキー未設定でもサーバーを起動できるよう、初回呼び出しまで生成を遅らせる
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.openai_api_key or None,
                base_url=self._config.openai_base_url,
                timeout=self._config.request_timeout,
                max_retries=0,
            )
        return self._client

    async def complete_json(self, system_prompt: str, user_prompt: str, response_schema: type[T]) -> T:
        """JSONモードでチャット補完を1回呼び出し、応答をスキーマ検証する。

        Raises:
            OracleUnavailableError: 通信失敗またはAPIがエラーを返した場合。
            OracleResponseError: 応答が空・JSONでない・スキーマに合わない場合。
        """
        logger.info("Issuing structured request to model %s (%s)", self.model_name, response_schema.__name__)
        try:
            response = await self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            logger.error("Error calling model %s: %s", self.model_name, e)
            raise OracleUnavailableError(f"Model request failed: {e}") from e

        if not getattr(response, "choices", None):
            logger.error("Received no choices from %s: %s", self.model_name, response)
            raise OracleResponseError(f"Provider {self.model_name} returned no output")

        text = response.choices[0].message.content or ""
        try:
            result = parse_structured(text, response_schema)
        except OracleResponseError as e:
            logger.error("Error parsing structured response from %s: %s", self.model_name, e)
            raise
        logger.info("Received structured response from %s", self.model_name)
        return result
