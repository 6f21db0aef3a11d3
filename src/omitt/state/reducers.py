"""セッション状態を更新する純粋関数群。

どの関数も引数のセッションを変更せず、更新後の新しいセッションを返す。
サービス層は読み込んだセッションにこれらを適用し、結果を1回で保存する。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

from omitt.config import MergePolicy
from omitt.models.architecture import ArchitectureType, SystemArchitecture
from omitt.models.errors import RequirementNotFoundError
from omitt.models.requirements import (
    REQUIREMENT_CATEGORIES,
    RequirementCategory,
    RequirementItem,
    StructuredRequirements,
)
from omitt.models.session import ChatMessage, Sender, Session
from omitt.state.invalidation import requirements_fingerprint

# 要件数がこの割合未満に減ったら警告する
DATA_LOSS_RATIO = 0.5

DATA_LOSS_WARNING = "⚠️ 注意: 既存の要件の一部が失われた可能性があります。必要に応じて確認してください。"


class MergeOutcome(BaseModel):
    """要件マージの結果。"""

    session: Session
    added_count: int
    data_loss_warning: bool


def _updated(session: Session, **changes: Any) -> Session:
    changes["updated_at"] = datetime.now(UTC)
    return session.model_copy(update=changes, deep=True)


def _fresh_id(item_id: str, taken: set[str]) -> str:
    suffix = 2
    while f"{item_id}-{suffix}" in taken:
        suffix += 1
    return f"{item_id}-{suffix}"


def _append_new(existing: list[RequirementItem], incoming: list[RequirementItem]) -> list[RequirementItem]:
    """既存要件をそのまま残し、未登録の要件だけを末尾に追加する。

    タイトルと説明が既存と同一のもの（言語モデルが既存要件を繰り返し返したもの）は追加しない。
    内容が新しいのにIDが既存と衝突する場合は、カテゴリ内で一意なIDを振り直して追加する。
    """
    merged = list(existing)
    seen_ids = {item.id for item in existing}
    seen_content = {(item.title, item.description) for item in existing}
    for item in incoming:
        if (item.title, item.description) in seen_content:
            continue
        if item.id in seen_ids:
            item = item.model_copy(update={"id": _fresh_id(item.id, seen_ids)})
        merged.append(item)
        seen_ids.add(item.id)
        seen_content.add((item.title, item.description))
    return merged


def is_data_loss_suspected(before_total: int, after_total: int) -> bool:
    """要件数が大幅に減少したかどうかを判定する。"""
    return before_total > 0 and after_total < before_total * DATA_LOSS_RATIO


def merge_requirements(
    session: Session,
    extracted: StructuredRequirements,
    policy: MergePolicy = "additive",
) -> MergeOutcome:
    """言語モデルが抽出した要件をセッションの要件に統合する。

    Args:
        session: 現在のセッション。
        extracted: 言語モデルが返した5カテゴリの要件。
        policy: "additive" は既存要件を必ず残して追記する。
            "replace" は抽出結果で丸ごと置き換える。

    Returns:
        更新後のセッション、追加件数、要件減少の警告有無。
    """
    before = session.requirements
    merged: dict[RequirementCategory, list[RequirementItem]] = {}
    for category in REQUIREMENT_CATEGORIES:
        incoming = extracted.category_items(category)
        if policy == "replace":
            merged[category] = _append_new([], incoming)
        else:
            merged[category] = _append_new(before.category_items(category), incoming)

    after = StructuredRequirements.model_validate(
        {category: [item.model_dump() for item in items] for category, items in merged.items()}
    )
    added = 0
    for category in REQUIREMENT_CATEGORIES:
        before_ids = {item.id for item in before.category_items(category)}
        added += sum(1 for item in after.category_items(category) if item.id not in before_ids)
    return MergeOutcome(
        session=_updated(session, requirements=after),
        added_count=added,
        data_loss_warning=is_data_loss_suspected(before.total(), after.total()),
    )


def remove_requirement(session: Session, category: RequirementCategory, requirement_id: str) -> Session:
    """指定カテゴリから指定IDの要件を1件だけ取り除く。

    Raises:
        RequirementNotFoundError: 指定IDの要件がカテゴリに存在しない場合。
    """
    items = session.requirements.category_items(category)
    remaining = [item for item in items if item.id != requirement_id]
    if len(remaining) == len(items):
        raise RequirementNotFoundError(category, requirement_id)

    requirements = session.requirements.model_copy(update={category: remaining}, deep=True)
    return _updated(session, requirements=requirements)


def clear_requirements(session: Session) -> Session:
    """全要件を削除し、システム構成も破棄する。"""
    cleared = _updated(session, requirements=StructuredRequirements())
    return discard_architecture(cleared)


def append_message(session: Session, content: str, sender: Sender) -> Session:
    message = ChatMessage(content=content, sender=sender)
    return _updated(session, chat_messages=[*session.chat_messages, message])


def select_architecture_type(session: Session, architecture_type: ArchitectureType) -> Session:
    return _updated(session, architecture_type=architecture_type)


def issue_architecture_token(session: Session) -> Session:
    """構成生成トークンを1つ進める。それ以前に発行した生成の応答は破棄対象になる。"""
    return _updated(session, architecture_generation=session.architecture_generation + 1)


def apply_architecture(
    session: Session,
    architecture: SystemArchitecture,
    requirements: StructuredRequirements,
    token: int,
) -> Session:
    """生成されたシステム構成を反映する。

    requirements は生成に使った要件スナップショット。
    """
    return _updated(
        session,
        architecture=architecture,
        architecture_fingerprint=requirements_fingerprint(requirements),
        architecture_settled_generation=max(session.architecture_settled_generation, token),
    )


def settle_architecture(session: Session, token: int) -> Session:
    """構成生成が失敗したことを記録する。構成そのものは変更しない。"""
    return _updated(session, architecture_settled_generation=max(session.architecture_settled_generation, token))


def discard_architecture(session: Session) -> Session:
    """システム構成を破棄し、生成中の応答も無効にする。"""
    token = session.architecture_generation + 1
    return _updated(
        session,
        architecture=None,
        architecture_fingerprint=None,
        architecture_generation=token,
        architecture_settled_generation=token,
    )


def restore_snapshot(
    session: Session,
    requirements: StructuredRequirements,
    architecture: SystemArchitecture | None,
) -> Session:
    """読み込んだスナップショットで要件とシステム構成を置き換える。"""
    restored = discard_architecture(_updated(session, requirements=requirements))
    if architecture is None:
        return restored
    return apply_architecture(restored, architecture, requirements, restored.architecture_generation)
