# 参考文档: DESIGN.md 价格计算部分
# 价格计算测试

import pytest

from composer.models import (
    CatalogSnapshot, CurrentDraft, DraftOrder, DraftOutcome, LooseItem, MenuOption, OrderType,
    ProteinOption, coerce_price
)
from composer.pricing import (
    compute_draft_total, compute_loose_items_total, compute_lunch_total,
    compute_session_total, compute_submitted_total
)
from composer.store import CompositionStore


class TestLunchTotal:
    """套餐价计算测试"""

    def test_lunch_total_is_base_plus_protein(self):
        protein = ProteinOption(id=10, name="Pollo", unit_price=6000)
        assert compute_lunch_total(4000, protein) == 10000

    def test_lunch_total_without_protein_is_zero(self):
        assert compute_lunch_total(4000, None) == 0

    def test_protein_price_string_is_coerced(self):
        protein = ProteinOption(id=10, name="Pollo", unit_price="6500.00")
        assert protein.unit_price == 6500
        assert compute_lunch_total(4000, protein) == 10500


class TestDraftTotal:
    """草稿总价计算测试"""

    def test_scenario_single_soup_option_auto_selected(self):
        """基础价4000、蛋白质6000、汤只有一个选项且无单品时总价为10000"""
        snapshot = CatalogSnapshot(
            base_price=4000,
            is_configured=True,
            protein_options=[ProteinOption(id=10, name="Pollo", unit_price=6000)],
            soup_options=[MenuOption(id=1, name="Sopa de pasta")]
        )
        store = CompositionStore.open("s", OrderType.TAKE_OUT, snapshot)
        store.select_protein(10)

        assert store.current.soup.name == "Sopa de pasta"
        assert store.current_total() == 10000
        assert store.add_or_update_draft()[0].total == 10000

    def test_loose_items_only(self):
        draft = CurrentDraft(loose_items=[
            LooseItem(id=20, name="Gaseosa", unit_price=3000, quantity=2),
            LooseItem(id=21, name="Papas fritas", unit_price=2500, quantity=1),
        ])
        assert compute_loose_items_total(draft.loose_items) == 8500
        assert compute_draft_total(draft, 4000) == 8500

    def test_lunch_plus_loose_items(self):
        draft = CurrentDraft(
            protein=ProteinOption(id=11, name="Res", unit_price=7000),
            loose_items=[LooseItem(id=20, name="Gaseosa", unit_price=3000, quantity=1)]
        )
        assert compute_draft_total(draft, 4000) == 14000

    def test_empty_draft_is_zero(self):
        assert compute_draft_total(CurrentDraft(), 4000) == 0


class TestAggregateTotals:
    """汇总金额测试"""

    def test_session_total_sums_drafts(self):
        drafts = [DraftOrder(id="a", total=10000), DraftOrder(id="b", total=5500)]
        assert compute_session_total(drafts) == 15500

    def test_session_total_empty(self):
        assert compute_session_total([]) == 0

    def test_submitted_total_only_counts_successes(self):
        outcomes = [
            DraftOutcome(draft_id="a", success=True, total=10000),
            DraftOutcome(draft_id="b", success=False, total=11000, error="Agotado"),
            DraftOutcome(draft_id="c", success=True, total=3000),
        ]
        assert compute_submitted_total(outcomes) == 13000

    @pytest.mark.parametrize("value, expected", [("3000.00", 3000), (2500, 2500), (None, 0), ("", 0), (1999.6, 2000)])
    def test_price_coercion(self, value, expected):
        assert coerce_price(value) == expected
