# 参考文档: DESIGN.md 后端服务部分
# 餐厅后端REST服务客户端

import httpx
import logging
from typing import Any, Dict, List, Optional

from .exceptions import BackendError
from .models import LineItem, OrderType

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "No se pudo comunicar con el servidor"

# 通用目录分页拉取时的每页条数
CATALOG_PAGE_SIZE = 100


def _extract_error_message(response: httpx.Response) -> str:
    """从后端错误响应中提取可读信息，取不到时使用通用提示"""
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE

    if not isinstance(body, dict):
        return GENERIC_ERROR_MESSAGE

    message = body.get("message") or body.get("error")
    if isinstance(message, list):
        message = "; ".join(str(m) for m in message)
    return message or GENERIC_ERROR_MESSAGE


class BackendService:
    """
    后端服务类

    每次调用创建独立的 AsyncClient，多个提交请求并发时互不影响。
    transport 参数用于测试时注入 httpx.MockTransport。
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout_seconds: float = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout_seconds = timeout_seconds
        self.transport = transport

        if not api_token:
            logger.warning("后端令牌未配置，请求将不带认证头")

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "BackendService":
        backend_config = config.get_backend_config()
        return cls(
            base_url=backend_config["base_url"],
            api_token=backend_config.get("api_token"),
            timeout_seconds=backend_config.get("timeout_seconds", 15),
            transport=transport
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        """
        发送请求并解析统一响应信封 {success, message, data}

        Raises:
            BackendError: 网络错误、非2xx状态或 success=false
        """
        url = f"{self.base_url}{path}"

        try:
            async with httpx.AsyncClient(
                headers=self._headers(),
                timeout=self.timeout_seconds,
                transport=self.transport
            ) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"后端请求失败 {method} {path}: {str(e)}")
            raise BackendError(GENERIC_ERROR_MESSAGE) from e

        if response.is_error:
            message = _extract_error_message(response)
            logger.error(f"后端返回错误 {method} {path}: {response.status_code} - {message}")
            raise BackendError(message, status_code=response.status_code)

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"后端返回数据不是JSON {method} {path}")
            raise BackendError("Respuesta inválida del servidor", status_code=response.status_code) from e

        if isinstance(body, dict) and body.get("success") is False:
            message = body.get("message") or body.get("error") or GENERIC_ERROR_MESSAGE
            raise BackendError(message, status_code=response.status_code)

        return body

    async def get_daily_menu(self, menu_date: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        获取每日菜单配置

        Args:
            menu_date: YYYY-MM-DD，为空时取当天菜单

        Returns:
            菜单数据；后端返回404或data为空时表示当天未配置，返回None
        """
        path = f"/daily-menu/{menu_date}" if menu_date else "/daily-menu/current"

        try:
            body = await self._request("GET", path)
        except BackendError as e:
            if e.status_code == 404:
                logger.info(f"每日菜单未配置: {menu_date or 'current'}")
                return None
            raise

        return body.get("data")

    async def get_catalog_items(self) -> List[Dict[str, Any]]:
        """按页拉取通用商品目录直到最后一页"""
        items = []
        page = 1

        while True:
            body = await self._request(
                "GET", "/menu/items", params={"page": page, "limit": CATALOG_PAGE_SIZE}
            )
            items.extend(body.get("data") or [])

            meta = body.get("meta") or {}
            if not meta.get("hasNextPage"):
                break
            page += 1

        logger.debug(f"商品目录共 {len(items)} 项")
        return items

    async def get_tables(self) -> List[Dict[str, Any]]:
        body = await self._request("GET", "/tables", params={"page": 1, "limit": CATALOG_PAGE_SIZE})
        data = body.get("data") or []
        # 餐桌接口可能返回 {"tables": [...]} 或直接返回列表
        if isinstance(data, dict):
            data = data.get("tables", [])
        return data

    async def submit_order(
        self,
        order_type: OrderType,
        table_id: Optional[int],
        line_items: List[LineItem]
    ) -> Dict[str, Any]:
        """
        创建一个订单

        Args:
            order_type: 订单类型
            table_id: 堂食餐桌ID，非堂食为None
            line_items: 订单行

        Returns:
            后端创建的订单数据

        Raises:
            BackendError: 创建失败，message 为后端返回的信息
        """
        payload = {
            "type": order_type.value,
            "items": [item.to_payload() for item in line_items]
        }
        if table_id is not None:
            payload["tableId"] = table_id

        body = await self._request("POST", "/orders", json=payload)
        return body.get("data") or {}
