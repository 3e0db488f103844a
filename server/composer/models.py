# 参考文档: DESIGN.md 数据模型部分
# 点单编排引擎的数据模型

import itertools
import time
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderType(str, Enum):
    """订单类型，只有堂食需要指定餐桌"""
    DINE_IN = "DINE_IN"
    TAKE_OUT = "TAKE_OUT"
    DELIVERY = "DELIVERY"
    WHATSAPP = "WHATSAPP"


# 每日菜单的全部组成部分
LUNCH_COMPONENTS = ("soup", "principle", "salad", "drink", "extra", "dessert", "rice")

# 选了蛋白质后必须明确选择的组成部分（选项数 >= 2 时）
REQUIRED_COMPONENTS = ("soup", "principle", "salad", "drink", "extra")

# 当前草稿中可以选择的组成部分
SELECTABLE_COMPONENTS = REQUIRED_COMPONENTS + ("rice",)

COMPONENT_LABELS = {
    "soup": "Sopa",
    "principle": "Principio",
    "salad": "Ensalada",
    "drink": "Bebida",
    "extra": "Extra",
    "dessert": "Postre",
    "rice": "Arroz",
}

_local_sequence = itertools.count(1)


def generate_local_id() -> str:
    """生成基于时间的本地标识（非后端ID），同一毫秒内靠序号区分"""
    return f"{int(time.time() * 1000)}-{next(_local_sequence)}"


def coerce_price(value) -> int:
    """后端价格可能是 "3500.00" 这样的字符串，统一转为整数"""
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise ValueError("价格不能是布尔值")
    return int(round(float(value)))


class MenuOption(BaseModel):
    """每日菜单中某个组成部分的一个选项"""
    id: int
    name: str


class ProteinOption(BaseModel):
    """午餐蛋白质选项"""
    id: int
    name: str
    unit_price: int
    is_available: bool = True
    category_name: Optional[str] = None

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_unit_price(cls, value):
        return coerce_price(value)


class CatalogItem(BaseModel):
    """通用商品目录中的单品"""
    id: int
    name: str
    unit_price: int
    is_available: bool = True
    category_id: Optional[int] = None

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_unit_price(cls, value):
        return coerce_price(value)


class Table(BaseModel):
    """餐桌"""
    id: int
    number: str
    status: str
    location: Optional[str] = None


class CatalogSnapshot(BaseModel):
    """
    目录快照：每日菜单配置 + 通用商品目录

    会话期间只读。某组成部分只有一个选项时视为固定（自动选中），
    没有选项表示该部分不适用，两个及以上需要用户明确选择。
    """
    model_config = ConfigDict(frozen=True)

    base_price: int
    is_configured: bool = False
    menu_date: Optional[str] = None
    protein_category: Optional[str] = None
    protein_options: List[ProteinOption] = Field(default_factory=list)
    soup_options: List[MenuOption] = Field(default_factory=list)
    principle_options: List[MenuOption] = Field(default_factory=list)
    salad_options: List[MenuOption] = Field(default_factory=list)
    drink_options: List[MenuOption] = Field(default_factory=list)
    extra_options: List[MenuOption] = Field(default_factory=list)
    dessert_options: List[MenuOption] = Field(default_factory=list)
    rice_options: List[MenuOption] = Field(default_factory=list)
    loose_items: List[CatalogItem] = Field(default_factory=list)
    fetched_at: datetime = Field(default_factory=datetime.now)

    def options_for(self, component: str) -> List[MenuOption]:
        if component not in LUNCH_COMPONENTS:
            raise ValueError(f"未知的组成部分: {component}")
        return getattr(self, f"{component}_options")

    def find_option(self, component: str, option_id: int) -> Optional[MenuOption]:
        return next((o for o in self.options_for(component) if o.id == option_id), None)

    def find_protein(self, protein_id: int) -> Optional[ProteinOption]:
        return next((p for p in self.protein_options if p.id == protein_id), None)

    def find_loose_item(self, item_id: int) -> Optional[CatalogItem]:
        return next((i for i in self.loose_items if i.id == item_id), None)


class Replacement(BaseModel):
    """替换记录：顾客不要套餐中的某个部分，换成目录中的一个单品"""
    id: str
    from_component: str
    from_option_name: str
    to_item_id: int
    to_item_name: str


class LooseItem(BaseModel):
    """草稿中的单品，数量归零即移除"""
    id: int
    name: str
    unit_price: int
    quantity: int = Field(1, ge=1)


class LunchSelection(BaseModel):
    """已确认草稿中的午餐套餐"""
    protein: ProteinOption
    soup: Optional[MenuOption] = None
    principle: Optional[MenuOption] = None
    salad: Optional[MenuOption] = None
    drink: Optional[MenuOption] = None
    extra: Optional[MenuOption] = None
    rice: Optional[MenuOption] = None
    replacements: List[Replacement] = Field(default_factory=list)


class CurrentDraft(BaseModel):
    """正在编辑中的草稿"""
    protein: Optional[ProteinOption] = None
    soup: Optional[MenuOption] = None
    principle: Optional[MenuOption] = None
    salad: Optional[MenuOption] = None
    drink: Optional[MenuOption] = None
    extra: Optional[MenuOption] = None
    rice: Optional[MenuOption] = None
    replacements: List[Replacement] = Field(default_factory=list)
    loose_items: List[LooseItem] = Field(default_factory=list)
    notes: str = ""

    def selection_for(self, component: str) -> Optional[MenuOption]:
        if component not in SELECTABLE_COMPONENTS:
            raise ValueError(f"组成部分 {component} 不可选择")
        return getattr(self, component)


class DraftOrder(BaseModel):
    """
    餐桌待提交列表中的一个订单单元

    id 是本地生成的标识，仅用于提交前的编辑/复制/删除。
    notes 是拼接后的可读备注，customer_notes 保存用户输入的原始备注，
    重新编辑时恢复的是后者。
    """
    id: str
    protein: Optional[ProteinOption] = None
    lunch: Optional[LunchSelection] = None
    loose_items: List[LooseItem] = Field(default_factory=list)
    total: int = 0
    notes: str = ""
    customer_notes: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
    last_error: Optional[str] = None


class CompositionSession(BaseModel):
    """一张餐桌（或一个非堂食订单）的点单编排会话"""
    session_id: str
    order_type: OrderType
    table_id: Optional[int] = None
    drafts: List[DraftOrder] = Field(default_factory=list)
    current_edit_index: Optional[int] = None
    current: CurrentDraft = Field(default_factory=CurrentDraft)
    created_at: datetime = Field(default_factory=datetime.now)


class ValidationError(BaseModel):
    """字段级校验错误"""
    field: str
    message: str


class LineItem(BaseModel):
    """提交给后端的订单行"""
    menu_item_id: int
    quantity: int
    price_at_order: int
    notes: str = ""

    def to_payload(self) -> dict:
        return {
            "menuItemId": self.menu_item_id,
            "quantity": self.quantity,
            "priceAtOrder": self.price_at_order,
            "notes": self.notes,
        }


class DraftOutcome(BaseModel):
    """单个草稿的提交结果"""
    draft_id: str
    success: bool
    total: int
    order_id: Optional[str] = None
    error: Optional[str] = None


class SubmissionReport(BaseModel):
    """一次批量提交的汇总结果"""
    success: bool
    submitted_count: int
    failed_count: int
    submitted_total: int
    outcomes: List[DraftOutcome] = Field(default_factory=list)
    message: str = ""

    @property
    def failures(self) -> List[DraftOutcome]:
        return [o for o in self.outcomes if not o.success]
