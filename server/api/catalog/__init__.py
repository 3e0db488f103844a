# 目录模块

from .routes import router as catalog_router

__all__ = [
    "catalog_router"
]
