# 参考文档: DESIGN.md 接口层部分
# 请求参数验证器

from datetime import datetime
from typing import Any, Optional

from composer.models import SELECTABLE_COMPONENTS


def validate_date(date_str: str, format_str: str = "%Y-%m-%d") -> bool:
    """
    验证日期格式

    Args:
        date_str: 日期字符串
        format_str: 日期格式

    Returns:
        验证结果
    """
    try:
        datetime.strptime(date_str, format_str)
        return True
    except (ValueError, TypeError):
        return False


def validate_component(component: str) -> bool:
    """验证午餐组成部分名称"""
    return component in SELECTABLE_COMPONENTS


def validate_non_negative_integer(value: Any) -> bool:
    """验证非负整数（数量为0表示移除）"""
    try:
        return int(value) >= 0
    except (ValueError, TypeError):
        return False


def validate_string_length(value: str, min_length: int = 0, max_length: Optional[int] = None) -> bool:
    """
    验证字符串长度

    Args:
        value: 字符串值
        min_length: 最小长度
        max_length: 最大长度

    Returns:
        验证结果
    """
    if not isinstance(value, str):
        return False

    if len(value) < min_length:
        return False

    if max_length is not None and len(value) > max_length:
        return False

    return True
