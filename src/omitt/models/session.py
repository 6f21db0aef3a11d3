"""要件整理セッション関連のデータモデル。"""

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from omitt.models.architecture import ArchitectureType, SystemArchitecture
from omitt.models.requirements import StructuredRequirements

Sender = Literal["user", "assistant"]
ArchitectureStatus = Literal["none", "generating", "valid", "stale"]

WELCOME_MESSAGE = "こんにちは！見積もり依頼書の作成をお手伝いします。どのようなシステムや機能をご希望ですか？"


class ChatMessage(BaseModel):
    """会話ログの1件。追記のみで変更・削除はしない。"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    content: str
    sender: Sender
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


def _initial_messages() -> list[ChatMessage]:
    return [ChatMessage(content=WELCOME_MESSAGE, sender="assistant")]


class Session(BaseModel):
    """1利用者分の要件・システム構成・会話ログ。

    architecture_generation は最後に発行した構成生成トークン、
    architecture_settled_generation は応答（成功・失敗とも）を処理済みの最新トークン。
    architecture_fingerprint は構成を生成した時点の要件スナップショットのハッシュ。
    """

    id: str
    requirements: StructuredRequirements = Field(default_factory=StructuredRequirements)
    architecture: SystemArchitecture | None = None
    architecture_type: ArchitectureType = "web"
    architecture_fingerprint: str | None = None
    architecture_generation: int = 0
    architecture_settled_generation: int = 0
    chat_messages: list[ChatMessage] = Field(default_factory=_initial_messages)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
