# 参考文档: DESIGN.md 价格计算部分
# 纯函数价格计算，不产生副作用，也没有错误分支

from typing import Iterable, Optional

from .models import CurrentDraft, DraftOrder, DraftOutcome, LooseItem, ProteinOption


def compute_lunch_total(base_price: int, protein: Optional[ProteinOption]) -> int:
    """午餐套餐价 = 基础价 + 蛋白质单价；未选蛋白质时为0"""
    if protein is None:
        return 0
    return base_price + protein.unit_price


def compute_loose_items_total(items: Iterable[LooseItem]) -> int:
    return sum(item.unit_price * item.quantity for item in items)


def compute_draft_total(draft: CurrentDraft, base_price: int) -> int:
    """
    计算正在编辑的草稿总价

    Args:
        draft: 当前草稿
        base_price: 目录快照中的基础价

    Returns:
        套餐价 + 单品合计
    """
    return compute_lunch_total(base_price, draft.protein) + compute_loose_items_total(draft.loose_items)


def compute_session_total(drafts: Iterable[DraftOrder]) -> int:
    return sum(draft.total for draft in drafts)


def compute_submitted_total(outcomes: Iterable[DraftOutcome]) -> int:
    """只累计提交成功的草稿金额"""
    return sum(outcome.total for outcome in outcomes if outcome.success)
