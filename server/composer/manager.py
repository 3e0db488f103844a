# 参考文档: DESIGN.md 会话管理部分
# 编排会话管理器

import logging
import uuid
from typing import Dict, Optional

from .exceptions import SessionNotFoundError
from .models import CatalogSnapshot, OrderType
from .store import CompositionStore


class SessionManager:
    """
    会话管理器

    负责内存中编排会话的创建、查找和销毁。
    会话在选择订单类型时创建，在全部提交成功或明确取消时销毁。
    """

    def __init__(self):
        self._stores: Dict[str, CompositionStore] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def create_session(
        self,
        order_type: OrderType,
        snapshot: CatalogSnapshot,
        table_id: Optional[int] = None
    ) -> CompositionStore:
        """
        创建新的编排会话

        Args:
            order_type: 订单类型
            snapshot: 本次会话使用的目录快照
            table_id: 堂食餐桌ID

        Returns:
            会话对应的编排存储
        """
        session_id = uuid.uuid4().hex
        store = CompositionStore.open(session_id, order_type, snapshot, table_id)
        self._stores[session_id] = store
        self.logger.debug(f"当前活动会话数: {len(self._stores)}")
        return store

    def get_store(self, session_id: str) -> CompositionStore:
        store = self._stores.get(session_id)
        if store is None:
            raise SessionNotFoundError(session_id)
        return store

    def discard_session(self, session_id: str) -> bool:
        """销毁会话，返回是否确实存在过"""
        store = self._stores.pop(session_id, None)
        if store is None:
            return False
        self.logger.info(f"会话 {session_id} 已结束，剩余草稿 {len(store.drafts)} 个")
        return True

    def session_count(self) -> int:
        return len(self._stores)

    def clear(self) -> int:
        """丢弃全部会话，返回被丢弃的数量"""
        count = len(self._stores)
        self._stores.clear()
        return count
