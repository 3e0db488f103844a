# 参考文档: DESIGN.md 接口层部分
# 编排会话相关的数据模型

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field

from composer.models import OrderType


class CreateSessionRequest(BaseModel):
    """创建编排会话请求模型"""
    order_type: OrderType = Field(..., description="订单类型")
    table_id: Optional[int] = Field(None, gt=0, description="堂食餐桌ID")
    menu_date: Optional[str] = Field(None, description="菜单日期 (YYYY-MM-DD)，默认当天")


class SetTableRequest(BaseModel):
    """设置餐桌请求模型"""
    table_id: Optional[int] = Field(None, gt=0, description="餐桌ID，为空表示取消选择")


class SelectProteinRequest(BaseModel):
    """选择蛋白质请求模型"""
    protein_id: Optional[int] = Field(None, description="蛋白质ID，为空表示取消午餐")


class SelectComponentRequest(BaseModel):
    """选择组成部分请求模型"""
    option_id: Optional[int] = Field(None, description="选项ID，为空表示取消选择")


class NotesRequest(BaseModel):
    """备注请求模型"""
    notes: str = Field("", description="自由备注")


class AddLooseItemRequest(BaseModel):
    """添加单品请求模型"""
    item_id: int = Field(..., gt=0, description="商品ID")


class UpdateQuantityRequest(BaseModel):
    """修改单品数量请求模型，0表示移除"""
    quantity: int = Field(..., description="数量")


class AddReplacementRequest(BaseModel):
    """添加替换请求模型"""
    from_component: str = Field(..., description="被替换的组成部分")
    to_item_id: int = Field(..., gt=0, description="替换成的商品ID")
    from_option_name: Optional[str] = Field(None, description="被替换选项名称，默认取当前选择")


class SessionTotals(BaseModel):
    """会话金额信息"""
    lunch_price: int
    current_total: int
    session_total: int


class SessionState(BaseModel):
    """会话状态响应模型"""
    session_id: str
    order_type: OrderType
    table_id: Optional[int] = None
    current_edit_index: Optional[int] = None
    current: Dict[str, Any]
    drafts: List[Dict[str, Any]]
    totals: SessionTotals
    validation_errors: Dict[str, str]
    created_at: str
