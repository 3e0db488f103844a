# 参考文档: DESIGN.md 错误处理部分
# 点单编排引擎的异常定义

from typing import List, Optional

from .models import ValidationError


class CompositionError(ValueError):
    """本地编排错误：空列表提交、堂食缺少餐桌、无效索引等，不会到达网络层"""

    def __init__(self, message: str, errors: Optional[List[ValidationError]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class SessionNotFoundError(LookupError):
    """会话不存在或已结束"""

    def __init__(self, session_id: str):
        super().__init__(f"Sesión {session_id} no encontrada")
        self.session_id = session_id


class BackendError(Exception):
    """后端服务调用失败，message 优先使用后端返回的可读信息"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
