# 参考文档: DESIGN.md 替换记录部分
# 替换记录：只做附加标注，不校验内容，不影响价格

import logging
from typing import List, Optional

from .models import CatalogItem, CurrentDraft, Replacement, generate_local_id

logger = logging.getLogger(__name__)


def add_replacement(
    current: CurrentDraft,
    from_component: str,
    from_option_name: str,
    to_item: CatalogItem
) -> Replacement:
    """
    为当前草稿追加一条替换记录

    同一组成部分可以被替换多次，不做去重。

    Args:
        current: 当前草稿
        from_component: 被替换的组成部分（soup、salad 等）
        from_option_name: 被替换选项的名称
        to_item: 替换成的目录单品

    Returns:
        新建的替换记录
    """
    replacement = Replacement(
        id=generate_local_id(),
        from_component=from_component,
        from_option_name=from_option_name,
        to_item_id=to_item.id,
        to_item_name=to_item.name
    )
    current.replacements.append(replacement)

    logger.info(
        f"添加替换 {replacement.id}: {from_component}({from_option_name}) -> "
        f"{to_item.name}#{to_item.id}"
    )
    return replacement


def remove_replacement(current: CurrentDraft, replacement_id: str) -> Optional[Replacement]:
    """按ID移除替换记录，不存在时返回None"""
    for index, replacement in enumerate(current.replacements):
        if replacement.id == replacement_id:
            del current.replacements[index]
            logger.info(f"移除替换 {replacement_id}")
            return replacement

    logger.debug(f"替换记录 {replacement_id} 不存在，忽略")
    return None


def describe_replacements(replacements: List[Replacement]) -> str:
    """拼接替换说明，如 'Sopa de pasta→Papas, Limonada→Gaseosa'"""
    return ", ".join(f"{r.from_option_name}→{r.to_item_name}" for r in replacements)
