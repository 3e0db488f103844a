# 参考文档: DESIGN.md 中间件部分
# CORS中间件配置

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any

# 点单前端开发服务器
DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173"
]


def setup_cors_middleware(app: FastAPI, config: Dict[str, Any]):
    """
    设置CORS中间件

    Args:
        app: FastAPI应用实例
        config: 配置字典
    """
    cors_config = config.get('cors', {})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_config.get('allowed_origins', DEFAULT_ORIGINS),
        allow_credentials=cors_config.get('allow_credentials', True),
        allow_methods=cors_config.get('allowed_methods', ["*"]),
        allow_headers=cors_config.get('allowed_headers', ["*"]),
    )
