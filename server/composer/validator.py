# 参考文档: DESIGN.md 草稿校验部分
# 草稿校验器：根据目录快照检查当前草稿，返回字段级错误列表

from typing import Dict, List, Optional

from .models import (
    CatalogSnapshot, CurrentDraft, OrderType, REQUIRED_COMPONENTS, ValidationError
)

# 校验提示语面向店员，使用西班牙语
MESSAGES = {
    "protein": "Selecciona una proteína o agrega productos",
    "soup": "Selecciona una sopa",
    "principle": "Selecciona un principio",
    "salad": "Selecciona una ensalada",
    "drink": "Selecciona un jugo",
    "extra": "Selecciona un extra",
    "table": "Selecciona una mesa",
}


def validate_draft(current: CurrentDraft, snapshot: CatalogSnapshot) -> List[ValidationError]:
    """
    草稿级校验（规则1、2）

    1. 既没有蛋白质也没有单品 -> protein 错误
    2. 选了蛋白质时，选项数 >= 2 且未选择的组成部分各报一个错误

    只有一个选项的组成部分由自动选择补齐，不在此校验。
    """
    errors = []

    if current.protein is None and not current.loose_items:
        errors.append(ValidationError(field="protein", message=MESSAGES["protein"]))

    if current.protein is not None:
        for component in REQUIRED_COMPONENTS:
            if len(snapshot.options_for(component)) >= 2 and current.selection_for(component) is None:
                errors.append(ValidationError(field=component, message=MESSAGES[component]))

    return errors


def validate_table(order_type: OrderType, table_id: Optional[int]) -> List[ValidationError]:
    """规则3：堂食必须选择餐桌"""
    if order_type == OrderType.DINE_IN and table_id is None:
        return [ValidationError(field="table", message=MESSAGES["table"])]
    return []


def validate(
    current: CurrentDraft,
    snapshot: CatalogSnapshot,
    order_type: OrderType,
    table_id: Optional[int]
) -> List[ValidationError]:
    """
    完整校验，所有规则独立检查，一次返回全部错误

    Args:
        current: 当前草稿
        snapshot: 目录快照
        order_type: 订单类型
        table_id: 当前餐桌ID

    Returns:
        校验错误列表，为空表示通过
    """
    return validate_draft(current, snapshot) + validate_table(order_type, table_id)


def errors_by_field(errors: List[ValidationError]) -> Dict[str, str]:
    """按字段聚合错误信息，供界面做字段级提示"""
    result = {}
    for error in errors:
        result.setdefault(error.field, error.message)
    return result
