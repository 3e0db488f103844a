# 参考文档: DESIGN.md 测试部分
# 测试配置和固定装置

import json
import pytest
import os
import sys
import httpx
from pathlib import Path
from fastapi.testclient import TestClient

# 添加项目路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# 设置测试环境
os.environ['CONFIG_ENV'] = 'test'

from api.main import app
from api.dependencies import get_backend_service, session_manager
from composer.backend_service import BackendService
from composer.catalog import build_snapshot
from composer.models import OrderType
from composer.store import CompositionStore

BACKEND_URL = "http://backend.test/api/v1"


def make_menu_data():
    """
    测试用每日菜单

    汤、主菜、饮料各两个选项（必须选择），沙拉和米饭只有一个选项（自动选择），
    没有 extra 选项（不适用）。
    """
    return {
        "id": 1,
        "date": "2026-10-19",
        "basePrice": "4000.00",
        "proteinCategory": {"id": 3, "name": "Proteínas"},
        "proteinOptions": [
            {"id": 10, "name": "Pollo", "price": "6000.00", "isAvailable": True},
            {"id": 11, "name": "Res", "price": 7000, "isAvailable": True},
            {"id": 12, "name": "Cerdo", "price": 6500, "isAvailable": False},
        ],
        "soupOptions": [{"id": 1, "name": "Sopa de pasta"}, {"id": 2, "name": "Sancocho"}],
        "principleOptions": [{"id": 3, "name": "Frijoles"}, {"id": 4, "name": "Lentejas"}],
        "saladOptions": [{"id": 5, "name": "Ensalada de la casa"}],
        "drinkOptions": [{"id": 6, "name": "Limonada"}, {"id": 7, "name": "Jugo de mora"}],
        "extraOptions": [],
        "dessertOptions": [],
        "riceOptions": [{"id": 8, "name": "Arroz blanco"}],
    }


def make_items_data():
    """测试用通用商品目录"""
    return [
        {"id": 20, "name": "Gaseosa", "price": "3000.00", "isAvailable": True, "categoryId": 5},
        {"id": 21, "name": "Papas fritas", "price": 2500, "isAvailable": True, "categoryId": 6},
        {"id": 22, "name": "Agua", "price": 2000, "isAvailable": False, "categoryId": 5},
    ]


def make_tables_data():
    return [
        {"id": 1, "number": "1", "status": "AVAILABLE", "location": "Terraza"},
        {"id": 2, "number": "2", "status": "OCCUPIED"},
        {"id": 3, "number": "3", "status": "AVAILABLE", "deleted": True},
        {"id": 4, "number": "4", "status": "AVAILABLE"},
    ]


class FakeBackend:
    """
    模拟的餐厅后端，挂在 httpx.MockTransport 上

    menu 为 None 时每日菜单返回404；down 为真时模拟连接失败；
    fail_when 返回错误信息时对应订单创建失败。
    """

    def __init__(self):
        self.menu = make_menu_data()
        self.items = make_items_data()
        self.tables = make_tables_data()
        self.orders = []
        self.requests = []
        self.fail_when = None
        self.down = False
        self.next_order_id = 500

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path

        if "/daily-menu/" in path:
            if self.menu is None:
                return httpx.Response(404, json={"success": False, "message": "Menú del día no encontrado"})
            return httpx.Response(200, json={"success": True, "data": self.menu})

        if path.endswith("/menu/items"):
            page = int(request.url.params.get("page", 1))
            limit = int(request.url.params.get("limit", 100))
            chunk = self.items[(page - 1) * limit:page * limit]
            return httpx.Response(200, json={
                "success": True,
                "data": chunk,
                "meta": {"page": page, "hasNextPage": page * limit < len(self.items)}
            })

        if path.endswith("/tables"):
            return httpx.Response(200, json={"success": True, "data": self.tables})

        if path.endswith("/orders") and request.method == "POST":
            payload = json.loads(request.content)
            self.orders.append(payload)

            error = self.fail_when(payload) if self.fail_when else None
            if error:
                return httpx.Response(400, json={"success": False, "message": error})

            self.next_order_id += 1
            return httpx.Response(201, json={"success": True, "data": {"id": self.next_order_id}})

        return httpx.Response(404, json={"success": False, "message": "Not found"})

    def service(self) -> BackendService:
        return BackendService(BACKEND_URL, api_token="test-token", transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_backend():
    """模拟后端"""
    return FakeBackend()


@pytest.fixture
def backend(fake_backend):
    """连接到模拟后端的服务客户端"""
    return fake_backend.service()


@pytest.fixture
def snapshot():
    """已配置的目录快照"""
    return build_snapshot(make_menu_data(), make_items_data(), default_base_price=4000)


@pytest.fixture
def store(snapshot):
    """外带订单的编排存储"""
    return CompositionStore.open("test-session", OrderType.TAKE_OUT, snapshot)


@pytest.fixture
def dine_in_store(snapshot):
    """堂食订单的编排存储，未选餐桌"""
    return CompositionStore.open("dine-in-session", OrderType.DINE_IN, snapshot)


def fill_lunch(store, protein_id=10):
    """选择蛋白质和全部必选组成部分"""
    store.select_protein(protein_id)
    store.select_component("soup", 1)
    store.select_component("principle", 3)
    store.select_component("drink", 6)


@pytest.fixture
def lunch_filler():
    return fill_lunch


@pytest.fixture
def client(fake_backend):
    """FastAPI测试客户端，后端请求走模拟后端"""
    app.dependency_overrides[get_backend_service] = fake_backend.service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    session_manager.clear()
