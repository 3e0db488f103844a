# 参考文档: DESIGN.md 接口层部分
# 目录相关的响应模型

from typing import List, Optional
from pydantic import BaseModel


class MenuOptionInfo(BaseModel):
    """菜单选项"""
    id: int
    name: str


class ProteinInfo(BaseModel):
    """蛋白质选项"""
    id: int
    name: str
    unit_price: int
    lunch_price: int
    is_available: bool


class DailyMenuInfo(BaseModel):
    """每日菜单展示模型，fixed_components 为自动选中的组成部分"""
    menu_date: Optional[str] = None
    is_configured: bool
    base_price: int
    protein_category: Optional[str] = None
    proteins: List[ProteinInfo]
    soup_options: List[MenuOptionInfo]
    principle_options: List[MenuOptionInfo]
    salad_options: List[MenuOptionInfo]
    drink_options: List[MenuOptionInfo]
    extra_options: List[MenuOptionInfo]
    dessert_options: List[MenuOptionInfo]
    rice_options: List[MenuOptionInfo]
    fixed_components: List[str]


class CatalogItemInfo(BaseModel):
    """可售单品"""
    id: int
    name: str
    unit_price: int
    category_id: Optional[int] = None


class TableInfo(BaseModel):
    """空闲餐桌"""
    id: int
    number: str
    location: Optional[str] = None
