"""要件の変更に伴うシステム構成の無効化・再生成の判定。"""

import hashlib
from typing import Literal

from omitt.models.requirements import StructuredRequirements
from omitt.models.session import ArchitectureStatus, Session

ArchitectureAction = Literal["regenerate", "clear", "keep"]

# 削除後にこの件数以下なら構成を再生成せず破棄する
MIN_REQUIREMENTS_FOR_REGENERATION = 1


def requirements_fingerprint(requirements: StructuredRequirements) -> str:
    """要件スナップショットを識別するハッシュ値を返す。"""
    return hashlib.sha256(requirements.model_dump_json().encode("utf-8")).hexdigest()


def action_after_merge(requirements: StructuredRequirements) -> ArchitectureAction:
    """要件マージ後に取るべき構成の扱いを返す。"""
    return "keep" if requirements.is_empty() else "regenerate"


def action_after_removal(requirements: StructuredRequirements) -> ArchitectureAction:
    """要件削除後に取るべき構成の扱いを返す。

    残りが1件以下の要件では意味のある構成を作れないため、言語モデルを呼ばずに破棄する。
    """
    if requirements.total() > MIN_REQUIREMENTS_FOR_REGENERATION:
        return "regenerate"
    return "clear"


def is_latest_token(session: Session, token: int) -> bool:
    return session.architecture_generation == token


def architecture_status(session: Session) -> ArchitectureStatus:
    """セッションのシステム構成の状態を返す。"""
    if session.architecture_generation > session.architecture_settled_generation:
        return "generating"
    if session.architecture is None:
        return "none"
    if session.architecture_fingerprint == requirements_fingerprint(session.requirements):
        return "valid"
    return "stale"
