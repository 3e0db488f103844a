# 参考文档: DESIGN.md 草稿编排部分
# 草稿编排存储测试

import pytest

from composer.exceptions import CompositionError
from composer.models import DraftOutcome, MenuOption, ProteinOption, SubmissionReport


class TestCurrentDraft:
    """当前草稿编辑测试"""

    def test_open_applies_fixed_selections(self, store):
        assert store.current.salad.id == 5
        assert store.current.rice.id == 8

    def test_select_protein(self, store):
        protein = store.select_protein(11)
        assert protein.name == "Res"
        assert store.lunch_total() == 11000

    def test_deselect_protein(self, store):
        store.select_protein(10)
        store.select_protein(None)
        assert store.current.protein is None
        assert store.lunch_total() == 0

    def test_unavailable_protein_rejected(self, store):
        with pytest.raises(CompositionError):
            store.select_protein(12)

    def test_unknown_protein_rejected(self, store):
        with pytest.raises(CompositionError):
            store.select_protein(999)

    def test_select_unknown_option_rejected(self, store):
        with pytest.raises(CompositionError):
            store.select_component("soup", 3)

    def test_select_unknown_component_rejected(self, store):
        with pytest.raises(CompositionError):
            store.select_component("dessert", 1)

    def test_add_loose_item_increments(self, store):
        store.add_loose_item(20)
        store.add_loose_item(20)
        assert len(store.current.loose_items) == 1
        assert store.current.loose_items[0].quantity == 2
        assert store.current_total() == 6000

    def test_unavailable_loose_item_rejected(self, store):
        with pytest.raises(CompositionError):
            store.add_loose_item(22)

    def test_quantity_zero_removes_item(self, store):
        store.add_loose_item(20)
        store.add_loose_item(21)
        store.update_loose_item_quantity(20, 3)
        assert store.current.loose_items[0].quantity == 3

        store.update_loose_item_quantity(20, 0)
        assert [i.id for i in store.current.loose_items] == [21]

    def test_update_quantity_of_missing_item(self, store):
        with pytest.raises(CompositionError):
            store.update_loose_item_quantity(20, 2)

    def test_clear_current_restores_fixed_selections(self, store, lunch_filler):
        lunch_filler(store)
        store.add_loose_item(20)
        store.set_notes("Sin cebolla")

        store.clear_current()

        assert store.current.protein is None
        assert store.current.loose_items == []
        assert store.current.notes == ""
        assert store.current.salad.id == 5


class TestNotes:
    """备注拼接测试"""

    def test_lunch_notes(self, store, lunch_filler):
        lunch_filler(store)
        store.set_notes("  Sin cebolla ")
        assert store.build_notes() == (
            "Lunch: Pollo + Arroz blanco, Sopa de pasta, Frijoles, Ensalada de la casa, Limonada"
            " | Note: Sin cebolla"
        )

    def test_lunch_notes_with_replacements(self, store, lunch_filler):
        lunch_filler(store)
        store.add_replacement("soup", 21)
        assert store.build_notes().endswith(" | Swap: Sopa de pasta→Papas fritas")

    def test_notes_without_protein(self, store):
        store.add_loose_item(20)
        store.set_notes("Para llevar")
        assert store.build_notes() == "Para llevar"


class TestDraftList:
    """草稿列表操作测试"""

    def test_add_draft(self, store, lunch_filler):
        lunch_filler(store)
        store.add_loose_item(20)

        draft, errors = store.add_or_update_draft()

        assert errors == []
        assert draft.total == 13000
        assert draft.lunch.protein.id == 10
        assert draft.lunch.rice.id == 8
        assert store.drafts == [draft]
        assert store.session_total() == 13000
        # 加入列表后当前草稿被清空
        assert store.current.protein is None
        assert store.current.salad.id == 5

    def test_invalid_draft_leaves_list_unchanged(self, store):
        store.select_protein(10)
        draft, errors = store.add_or_update_draft()

        assert draft is None
        assert [e.field for e in errors] == ["soup", "principle", "drink"]
        assert store.drafts == []
        assert store.current.protein.id == 10

    def test_dine_in_without_table_can_add_draft(self, dine_in_store, lunch_filler):
        lunch_filler(dine_in_store)
        draft, errors = dine_in_store.add_or_update_draft()

        assert errors == []
        assert draft is not None
        assert [e.field for e in dine_in_store.validate_confirmation()] == ["table"]

        dine_in_store.set_table(4)
        assert dine_in_store.validate_confirmation() == []

    def test_empty_list_blocks_confirmation(self, store):
        assert [e.field for e in store.validate_confirmation()] == ["drafts"]

    def test_edit_round_trip_is_exact(self, store, lunch_filler):
        lunch_filler(store)
        store.add_loose_item(21)
        store.add_replacement("drink", 20)
        store.set_notes("Sin sal")
        draft, _ = store.add_or_update_draft()
        before = draft.model_dump()

        store.edit_draft(0)
        assert store.session.current_edit_index == 0
        assert store.current.notes == "Sin sal"

        updated, errors = store.add_or_update_draft()

        assert errors == []
        assert len(store.drafts) == 1
        assert updated.model_dump() == before
        assert store.session.current_edit_index is None

    def test_edit_replaces_in_place(self, store, lunch_filler):
        lunch_filler(store)
        first, _ = store.add_or_update_draft()
        store.add_loose_item(20)
        second, _ = store.add_or_update_draft()

        store.edit_draft(0)
        store.select_protein(11)
        updated, _ = store.add_or_update_draft()

        assert [d.id for d in store.drafts] == [first.id, second.id]
        assert store.drafts[0].total == 11000
        assert updated.created_at == first.created_at

    def test_duplicate_draft(self, store, lunch_filler):
        lunch_filler(store)
        original, _ = store.add_or_update_draft()

        duplicated = store.duplicate_draft(0)

        assert duplicated.id != original.id
        assert duplicated.total == original.total
        assert duplicated.lunch == original.lunch
        assert duplicated.lunch is not original.lunch
        assert store.session_total() == 2 * original.total

    def test_remove_draft_adjusts_edit_index(self, store, lunch_filler):
        for _ in range(3):
            lunch_filler(store)
            store.add_or_update_draft()

        store.edit_draft(2)
        store.remove_draft(0)

        assert len(store.drafts) == 2
        assert store.session.current_edit_index == 1

    def test_remove_draft_being_edited_exits_edit_mode(self, store, lunch_filler):
        lunch_filler(store)
        store.add_or_update_draft()

        store.edit_draft(0)
        store.remove_draft(0)

        assert store.drafts == []
        assert store.session.current_edit_index is None
        assert store.current.protein is None

    @pytest.mark.parametrize("operation", ["edit_draft", "remove_draft", "duplicate_draft"])
    def test_invalid_index(self, store, operation):
        with pytest.raises(CompositionError):
            getattr(store, operation)(0)


class TestApplySubmission:
    """提交结果回写测试"""

    def _add_drafts(self, store, lunch_filler, count):
        for _ in range(count):
            lunch_filler(store)
            store.add_or_update_draft()
        return [d.id for d in store.drafts]

    def test_full_success_resets_session(self, dine_in_store, lunch_filler):
        dine_in_store.set_table(4)
        ids = self._add_drafts(dine_in_store, lunch_filler, 2)
        report = SubmissionReport(
            success=True, submitted_count=2, failed_count=0, submitted_total=20000,
            outcomes=[DraftOutcome(draft_id=i, success=True, total=10000) for i in ids]
        )

        dine_in_store.apply_submission(report)

        assert dine_in_store.drafts == []
        assert dine_in_store.session.table_id is None

    def test_partial_failure_keeps_failed_drafts(self, store, lunch_filler):
        ids = self._add_drafts(store, lunch_filler, 3)
        report = SubmissionReport(
            success=False, submitted_count=2, failed_count=1, submitted_total=20000,
            outcomes=[
                DraftOutcome(draft_id=ids[0], success=True, total=10000),
                DraftOutcome(draft_id=ids[1], success=False, total=10000, error="out of stock"),
                DraftOutcome(draft_id=ids[2], success=True, total=10000),
            ]
        )

        store.apply_submission(report)

        assert [d.id for d in store.drafts] == [ids[1]]
        assert store.drafts[0].last_error == "out of stock"

    def test_drafts_missing_from_report_are_kept(self, store, lunch_filler):
        """提交期间新加入的草稿不在报告中，全部成功后仍保留且不重置会话"""
        ids = self._add_drafts(store, lunch_filler, 2)
        store.add_loose_item(20)
        late, _ = store.add_or_update_draft()
        store.add_loose_item(21)
        report = SubmissionReport(
            success=True, submitted_count=2, failed_count=0, submitted_total=20000,
            outcomes=[DraftOutcome(draft_id=i, success=True, total=10000) for i in ids]
        )

        store.apply_submission(report)

        assert [d.id for d in store.drafts] == [late.id]
        assert store.drafts[0].last_error is None
        # 列表未清空，当前草稿不受影响
        assert [i.id for i in store.current.loose_items] == [21]


class TestReplaceSnapshot:
    """目录刷新后的对齐测试"""

    def test_stale_selections_are_cleared(self, store, lunch_filler):
        lunch_filler(store)
        refreshed = store.snapshot.model_copy(update={
            "protein_options": [
                ProteinOption(id=10, name="Pollo", unit_price=6500),
                ProteinOption(id=11, name="Res", unit_price=7000),
            ],
            "soup_options": [MenuOption(id=2, name="Sancocho"), MenuOption(id=9, name="Crema de ahuyama")],
            "drink_options": [MenuOption(id=7, name="Jugo de mora")],
            "rice_options": [],
        })

        store.replace_snapshot(refreshed)

        current = store.current
        assert current.soup is None
        assert current.principle.id == 3
        assert current.salad.id == 5
        assert current.rice is None
        # 饮料只剩一个选项，旧选择被取消后自动选中新的唯一选项
        assert current.drink.id == 7
        # 蛋白质换成新快照中的价格
        assert current.protein.unit_price == 6500
        assert store.lunch_total() == 10500

    def test_removed_protein_is_deselected(self, store, lunch_filler):
        lunch_filler(store)
        store.add_replacement("soup", 21)
        refreshed = store.snapshot.model_copy(update={
            "protein_options": [ProteinOption(id=10, name="Pollo", unit_price=6000, is_available=False)],
        })

        store.replace_snapshot(refreshed)

        assert store.current.protein is None
        assert store.current.replacements == []
        assert store.current.soup.id == 1
