"""omittサーバーの設定管理。"""

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

_PACKAGE_ROOT = Path(__file__).parent
_REPO_ROOT = _PACKAGE_ROOT.parent.parent

MergePolicy = Literal["additive", "replace"]


class ServerConfig(BaseSettings):
    """サーバー設定。環境変数から読み込み可能。"""

    model_config = {"env_prefix": "OMITT_", "populate_by_name": True}

    data_dir: Path = _REPO_ROOT / ".omitt"
    config_dir: Path = _REPO_ROOT / "config"
    host: str = "0.0.0.0"
    port: int = 8000
    url_token: str = ""
    log_level: str = "INFO"

    # 言語モデル (OpenAI互換API)
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("OMITT_OPENAI_API_KEY", "OPENAI_API_KEY"),
    )
    openai_base_url: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = 0.3
    request_timeout: float = 60.0

    # 要件マージ方針
    merge_policy: MergePolicy = "additive"
