# 参考文档: DESIGN.md 主应用部分
# FastAPI主应用

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

# 导入配置和中间件
from utils.logger import setup_logging
from utils.response import create_error_response
from api.dependencies import config, session_manager
from api.middleware import setup_middleware

# 导入所有路由
from api.catalog import catalog_router
from api.sessions import sessions_router

from composer.exceptions import BackendError, CompositionError, SessionNotFoundError
from composer.validator import errors_by_field

# 设置日志
setup_logging(config.config)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    logger.info("点单编排服务启动中...")
    logger.info(f"环境: {config.env}")
    logger.info(f"后端地址: {config.get('backend.base_url')}")

    yield

    logger.info(f"点单编排服务关闭中，丢弃 {session_manager.clear()} 个未提交会话")


# 创建FastAPI应用
app = FastAPI(
    title=config.config['app']['name'],
    version=config.config['app']['version'],
    description=config.config['app']['description'],
    debug=config.config['app']['debug'],
    lifespan=lifespan
)

# 设置中间件
setup_middleware(app, config.config)

# 注册路由
app.include_router(catalog_router)
app.include_router(sessions_router)


# 全局异常处理器
@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """HTTP异常处理"""
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc.detail))


@app.exception_handler(CompositionError)
async def composition_exception_handler(request, exc):
    """本地编排错误，附带字段级错误"""
    data = {"errors": errors_by_field(exc.errors)} if exc.errors else None
    return JSONResponse(status_code=400, content=create_error_response(exc.message, data=data))


@app.exception_handler(SessionNotFoundError)
async def session_not_found_handler(request, exc):
    return JSONResponse(status_code=404, content=create_error_response(str(exc)))


@app.exception_handler(BackendError)
async def backend_exception_handler(request, exc):
    """后端服务不可用或返回错误"""
    logger.warning(f"后端调用失败 {request.method} {request.url.path}: {exc.message} (status={exc.status_code})")
    return JSONResponse(status_code=502, content=create_error_response(exc.message))


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """通用异常处理"""
    logger.error(f"未处理的异常: {str(exc)}", exc_info=True)
    return JSONResponse(status_code=500, content=create_error_response("Error interno del servidor"))


# 根路径
@app.get("/")
async def root():
    """根路径健康检查"""
    return {
        "message": "Servicio de composición de pedidos en ejecución",
        "version": config.config['app']['version'],
        "status": "healthy"
    }


# 健康检查端点
@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {
        "status": "healthy",
        "version": config.config['app']['version'],
        "environment": config.env,
        "active_sessions": session_manager.session_count()
    }


# API信息端点
@app.get("/api/info")
async def api_info():
    """API信息端点"""
    return {
        "name": config.config['app']['name'],
        "version": config.config['app']['version'],
        "description": config.config['app']['description'],
        "environment": config.env,
        "endpoints": {
            "catalog": "/api/catalog",
            "sessions": "/api/sessions"
        }
    }


if __name__ == "__main__":
    import uvicorn

    # 从配置获取服务器设置
    server_config = config.config['server']

    uvicorn.run(
        "api.main:app",
        host=server_config.get('host', '127.0.0.1'),
        port=server_config.get('port', 8001),
        reload=server_config.get('reload', False),
        workers=1 if server_config.get('reload', False) else server_config.get('workers', 1),
        log_level="debug" if config.config['app']['debug'] else "info"
    )
