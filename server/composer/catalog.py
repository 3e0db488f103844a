# 参考文档: DESIGN.md 目录快照部分
# 目录快照读取与固定选项自动选择

import asyncio
import logging
from typing import Any, Dict, List, Optional

from .backend_service import BackendService
from .models import (
    CatalogItem, CatalogSnapshot, CurrentDraft, MenuOption, ProteinOption,
    SELECTABLE_COMPONENTS, Table, coerce_price
)

logger = logging.getLogger(__name__)

TABLE_STATUS_AVAILABLE = "AVAILABLE"


def _menu_options(raw_options: Optional[List[Dict[str, Any]]]) -> List[MenuOption]:
    return [MenuOption(id=o["id"], name=o["name"]) for o in raw_options or []]


def parse_catalog_items(items_data: List[Dict[str, Any]]) -> List[CatalogItem]:
    return [
        CatalogItem(
            id=item["id"],
            name=item["name"],
            unit_price=item.get("price"),
            is_available=item.get("isAvailable", True),
            category_id=item.get("categoryId")
        )
        for item in items_data
    ]


def build_snapshot(
    menu_data: Optional[Dict[str, Any]],
    items_data: List[Dict[str, Any]],
    default_base_price: int
) -> CatalogSnapshot:
    """
    把后端每日菜单和商品目录合并为目录快照

    Args:
        menu_data: 每日菜单数据，None 表示当天未配置
        items_data: 通用商品目录
        default_base_price: 未配置或基础价为0时使用的默认基础价

    Returns:
        只读的目录快照
    """
    loose_items = parse_catalog_items(items_data)

    if not menu_data:
        return CatalogSnapshot(base_price=default_base_price, is_configured=False, loose_items=loose_items)

    protein_category = (menu_data.get("proteinCategory") or {}).get("name")
    proteins = [
        ProteinOption(
            id=p["id"],
            name=p["name"],
            unit_price=p.get("price"),
            is_available=p.get("isAvailable", True),
            category_name=protein_category
        )
        for p in menu_data.get("proteinOptions") or []
    ]

    return CatalogSnapshot(
        base_price=coerce_price(menu_data.get("basePrice")) or default_base_price,
        is_configured=True,
        menu_date=menu_data.get("date"),
        protein_category=protein_category,
        protein_options=proteins,
        soup_options=_menu_options(menu_data.get("soupOptions")),
        principle_options=_menu_options(menu_data.get("principleOptions")),
        salad_options=_menu_options(menu_data.get("saladOptions")),
        drink_options=_menu_options(menu_data.get("drinkOptions")),
        extra_options=_menu_options(menu_data.get("extraOptions")),
        dessert_options=_menu_options(menu_data.get("dessertOptions")),
        rice_options=_menu_options(menu_data.get("riceOptions")),
        loose_items=loose_items
    )


def apply_fixed_selections(current: CurrentDraft, snapshot: CatalogSnapshot) -> List[str]:
    """
    自动选中只有一个选项的组成部分

    幂等：只填充尚未选择的部分，不覆盖用户的明确选择。
    每次快照变化或清空当前草稿后调用一次。

    Returns:
        本次被自动填充的组成部分
    """
    filled = []
    for component in SELECTABLE_COMPONENTS:
        options = snapshot.options_for(component)
        if len(options) == 1 and getattr(current, component) is None:
            setattr(current, component, options[0])
            filled.append(component)

    if filled:
        logger.debug(f"自动选择固定选项: {', '.join(filled)}")
    return filled


def search_loose_items(items: List[CatalogItem], term: str = "") -> List[CatalogItem]:
    """按名称筛选可售单品，忽略大小写"""
    term = (term or "").strip().lower()
    return [
        item for item in items
        if item.is_available and (not term or term in item.name.lower())
    ]


class CatalogReader:
    """目录快照读取器，只读，按需刷新"""

    def __init__(self, backend: BackendService, default_base_price: int = 4000):
        self.backend = backend
        self.default_base_price = default_base_price

    async def load_snapshot(self, menu_date: Optional[str] = None) -> CatalogSnapshot:
        """并发读取每日菜单和商品目录并合并为快照"""
        menu_data, items_data = await asyncio.gather(
            self.backend.get_daily_menu(menu_date),
            self.backend.get_catalog_items()
        )

        snapshot = build_snapshot(menu_data, items_data, self.default_base_price)
        logger.info(
            f"目录快照已加载: 日期={menu_date or 'current'}, 已配置={snapshot.is_configured}, "
            f"蛋白质={len(snapshot.protein_options)}, 单品={len(snapshot.loose_items)}"
        )
        return snapshot

    async def load_loose_items(self) -> List[CatalogItem]:
        return parse_catalog_items(await self.backend.get_catalog_items())

    async def load_available_tables(self) -> List[Table]:
        tables = [
            Table(
                id=t["id"],
                number=str(t.get("number", t["id"])),
                status=t.get("status", ""),
                location=t.get("location")
            )
            for t in await self.backend.get_tables()
            if not t.get("deleted", False)
        ]
        return [t for t in tables if t.status == TABLE_STATUS_AVAILABLE]
