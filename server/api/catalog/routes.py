# 参考文档: DESIGN.md 接口层部分
# 目录快照相关API路由（只读）

import logging
from typing import Dict, Any, Optional
from fastapi import APIRouter, HTTPException, Depends, Query

from .models import DailyMenuInfo, MenuOptionInfo, ProteinInfo, CatalogItemInfo, TableInfo
from api.dependencies import get_backend_service, get_catalog_reader
from composer.backend_service import BackendService
from composer.catalog import search_loose_items
from composer.models import CatalogSnapshot, LUNCH_COMPONENTS, SELECTABLE_COMPONENTS
from composer.pricing import compute_lunch_total
from utils.response import create_success_response
from utils.validators import validate_date

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/catalog", tags=["目录"])


def format_daily_menu(snapshot: CatalogSnapshot) -> Dict[str, Any]:
    """把目录快照格式化为界面使用的每日菜单结构"""
    options = {
        f"{component}_options": [
            MenuOptionInfo(id=o.id, name=o.name) for o in snapshot.options_for(component)
        ]
        for component in LUNCH_COMPONENTS
    }

    menu = DailyMenuInfo(
        menu_date=snapshot.menu_date,
        is_configured=snapshot.is_configured,
        base_price=snapshot.base_price,
        protein_category=snapshot.protein_category,
        proteins=[
            ProteinInfo(
                id=p.id,
                name=p.name,
                unit_price=p.unit_price,
                lunch_price=compute_lunch_total(snapshot.base_price, p),
                is_available=p.is_available
            )
            for p in snapshot.protein_options
        ],
        fixed_components=[c for c in SELECTABLE_COMPONENTS if len(snapshot.options_for(c)) == 1],
        **options
    )
    return menu.model_dump()


def check_menu_date(menu_date: Optional[str]):
    if menu_date and not validate_date(menu_date):
        raise HTTPException(status_code=400, detail=f"Fecha inválida: {menu_date}")


@router.get("/daily-menu", response_model=Dict[str, Any])
async def get_daily_menu(
    date: Optional[str] = Query(None, description="菜单日期 (YYYY-MM-DD)，默认当天"),
    backend: BackendService = Depends(get_backend_service)
):
    """
    获取每日菜单

    未配置时返回默认基础价和空的组成部分列表
    """
    check_menu_date(date)

    snapshot = await get_catalog_reader(backend).load_snapshot(date)
    return create_success_response(
        data=format_daily_menu(snapshot),
        message="Menú del día" if snapshot.is_configured else "Menú del día no configurado"
    )


@router.get("/items", response_model=Dict[str, Any])
async def get_loose_items(
    search: str = Query("", max_length=100, description="按名称搜索"),
    backend: BackendService = Depends(get_backend_service)
):
    """获取可售单品列表"""
    loose_items = await get_catalog_reader(backend).load_loose_items()
    items = [
        CatalogItemInfo(id=i.id, name=i.name, unit_price=i.unit_price, category_id=i.category_id).model_dump()
        for i in search_loose_items(loose_items, search)
    ]
    return create_success_response(data={"items": items, "total_count": len(items)})


@router.get("/tables/available", response_model=Dict[str, Any])
async def get_available_tables(backend: BackendService = Depends(get_backend_service)):
    """获取空闲餐桌（堂食选桌用）"""
    tables = await get_catalog_reader(backend).load_available_tables()
    return create_success_response(
        data={"tables": [TableInfo(id=t.id, number=t.number, location=t.location).model_dump() for t in tables]}
    )
