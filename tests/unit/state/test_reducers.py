"""セッション更新関数のユニットテスト。"""

import pytest

from omitt.models.architecture import SystemArchitecture
from omitt.models.errors import RequirementNotFoundError
from omitt.models.requirements import REQUIREMENT_CATEGORIES, RequirementItem, StructuredRequirements
from omitt.models.session import Session
from omitt.state.invalidation import requirements_fingerprint
from omitt.state.reducers import (
    append_message,
    apply_architecture,
    clear_requirements,
    discard_architecture,
    is_data_loss_suspected,
    issue_architecture_token,
    merge_requirements,
    remove_requirement,
    restore_snapshot,
)


def _item(item_id: str, title: str, description: str = "説明") -> RequirementItem:
    return RequirementItem(id=item_id, title=title, description=description)


def _architecture() -> SystemArchitecture:
    return SystemArchitecture(architecture_type="web", deployment_environment="cloud")


def _session_with(**categories: list[RequirementItem]) -> Session:
    return Session(id="s1", requirements=StructuredRequirements(**categories))


class TestMergeRequirements:
    def test_additive_merge_keeps_existing_items_verbatim(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "ログイン", "メール認証")])
        extracted = StructuredRequirements(
            functional_requirements=[_item("f1", "ログイン（改）", "SNS認証"), _item("f2", "検索")],
        )

        outcome = merge_requirements(session, extracted)

        items = outcome.session.requirements.functional_requirements
        assert [i.id for i in items] == ["f1", "f1-2", "f2"]
        assert items[0].title == "ログイン"
        assert items[0].description == "メール認証"
        assert items[1].title == "ログイン（改）"
        assert outcome.added_count == 2

    def test_additive_merge_never_drops_identifiers(self) -> None:
        session = _session_with(
            functional_requirements=[_item("f1", "a"), _item("f2", "b")],
            constraints=[_item("c1", "予算")],
        )
        before_ids = {
            (c, i.id) for c in REQUIREMENT_CATEGORIES for i in session.requirements.category_items(c)
        }

        outcome = merge_requirements(session, StructuredRequirements(wishes=[_item("w1", "デザイン")]))

        after_ids = {
            (c, i.id) for c in REQUIREMENT_CATEGORIES for i in outcome.session.requirements.category_items(c)
        }
        assert before_ids <= after_ids
        assert not outcome.data_loss_warning

    def test_additive_merge_skips_repeated_content_with_new_id(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "ログイン", "メール認証")])
        extracted = StructuredRequirements(functional_requirements=[_item("f9", "ログイン", "メール認証")])

        outcome = merge_requirements(session, extracted)

        assert outcome.session.requirements.total() == 1
        assert outcome.added_count == 0

    def test_duplicate_ids_in_one_response_are_renumbered(self) -> None:
        session = _session_with()
        extracted = StructuredRequirements(functional_requirements=[_item("f1", "最初"), _item("f1", "二番目")])

        outcome = merge_requirements(session, extracted)

        items = outcome.session.requirements.functional_requirements
        assert [(i.id, i.title) for i in items] == [("f1", "最初"), ("f1-2", "二番目")]
        assert outcome.added_count == 2

    def test_new_item_with_colliding_id_is_kept_under_fresh_id(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "ユーザー登録"), _item("f1-2", "ログイン")])
        extracted = StructuredRequirements(functional_requirements=[_item("f1", "決済")])

        outcome = merge_requirements(session, extracted)

        items = outcome.session.requirements.functional_requirements
        assert [(i.id, i.title) for i in items] == [("f1", "ユーザー登録"), ("f1-2", "ログイン"), ("f1-3", "決済")]
        assert outcome.added_count == 1

    def test_same_title_and_description_is_not_added_again(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "ユーザー登録")])
        extracted = StructuredRequirements(functional_requirements=[_item("f9", "ユーザー登録")])

        outcome = merge_requirements(session, extracted)

        assert [i.id for i in outcome.session.requirements.functional_requirements] == ["f1"]
        assert outcome.added_count == 0

    def test_replace_policy_overwrites_store(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "a"), _item("f2", "b")])
        extracted = StructuredRequirements(functional_requirements=[_item("f3", "c")])

        outcome = merge_requirements(session, extracted, policy="replace")

        assert [i.id for i in outcome.session.requirements.functional_requirements] == ["f3"]
        assert outcome.data_loss_warning

    def test_replace_policy_without_large_drop_has_no_warning(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "a"), _item("f2", "b")])
        extracted = StructuredRequirements(functional_requirements=[_item("f1", "a"), _item("f2", "b2")])

        outcome = merge_requirements(session, extracted, policy="replace")

        assert not outcome.data_loss_warning

    def test_input_session_is_not_mutated(self) -> None:
        session = _session_with()
        merge_requirements(session, StructuredRequirements(wishes=[_item("w1", "a")]))
        assert session.requirements.is_empty()


class TestDataLoss:
    @pytest.mark.parametrize(
        ("before", "after", "expected"),
        [(0, 0, False), (4, 2, False), (4, 1, True), (10, 4, True), (1, 0, True)],
    )
    def test_threshold(self, before: int, after: int, expected: bool) -> None:
        assert is_data_loss_suspected(before, after) is expected


class TestRemoveRequirement:
    def test_removes_exactly_one_item(self) -> None:
        session = _session_with(
            functional_requirements=[_item("f1", "a"), _item("f2", "b")],
            wishes=[_item("f1", "別カテゴリの同じID")],
        )

        updated = remove_requirement(session, "functional_requirements", "f1")

        assert [i.id for i in updated.requirements.functional_requirements] == ["f2"]
        assert [i.id for i in updated.requirements.wishes] == ["f1"]

    def test_unknown_id_raises(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "a")])
        with pytest.raises(RequirementNotFoundError):
            remove_requirement(session, "functional_requirements", "f9")


class TestClearAndArchitecture:
    def test_clear_empties_store_and_architecture(self) -> None:
        session = _session_with(functional_requirements=[_item("f1", "a")])
        session = apply_architecture(session, _architecture(), session.requirements, 0)

        cleared = clear_requirements(session)

        assert cleared.requirements.is_empty()
        assert cleared.architecture is None
        assert cleared.architecture_fingerprint is None

    def test_discard_invalidates_outstanding_token(self) -> None:
        session = issue_architecture_token(_session_with())
        outstanding = session.architecture_generation

        discarded = discard_architecture(session)

        assert discarded.architecture_generation > outstanding
        assert discarded.architecture_settled_generation == discarded.architecture_generation

    def test_apply_records_fingerprint_of_snapshot(self) -> None:
        session = issue_architecture_token(_session_with(wishes=[_item("w1", "a")]))
        applied = apply_architecture(session, _architecture(), session.requirements, session.architecture_generation)

        assert applied.architecture_fingerprint == requirements_fingerprint(session.requirements)
        assert applied.architecture_settled_generation == session.architecture_generation

    def test_restore_without_architecture_clears_it(self) -> None:
        session = apply_architecture(_session_with(), _architecture(), StructuredRequirements(), 0)
        requirements = StructuredRequirements(constraints=[_item("c1", "予算")])

        restored = restore_snapshot(session, requirements, None)

        assert restored.requirements == requirements
        assert restored.architecture is None

    def test_restore_with_architecture_is_current(self) -> None:
        requirements = StructuredRequirements(constraints=[_item("c1", "予算")])

        restored = restore_snapshot(_session_with(), requirements, _architecture())

        assert restored.architecture == _architecture()
        assert restored.architecture_fingerprint == requirements_fingerprint(requirements)


class TestAppendMessage:
    def test_appends_to_end(self) -> None:
        session = append_message(_session_with(), "こんにちは", "user")
        assert len(session.chat_messages) == 2
        assert session.chat_messages[-1].content == "こんにちは"
        assert session.chat_messages[-1].sender == "user"
