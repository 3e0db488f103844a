# 参考文档: DESIGN.md 接口层部分
# 路由共享的依赖项

from composer.backend_service import BackendService
from composer.catalog import CatalogReader
from composer.manager import SessionManager
from composer.submission import SubmissionCoordinator
from utils.config import Config

# 全局配置实例
config = Config()

# 会话只保存在内存中，进程内共享一个管理器
session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    """获取会话管理器"""
    return session_manager


def get_backend_service() -> BackendService:
    """获取后端服务客户端"""
    return BackendService.from_config(config)


def get_catalog_reader(backend: BackendService) -> CatalogReader:
    return CatalogReader(backend, default_base_price=config.get("composition.default_base_price", 4000))


def get_submission_coordinator(backend: BackendService) -> SubmissionCoordinator:
    return SubmissionCoordinator(backend)
